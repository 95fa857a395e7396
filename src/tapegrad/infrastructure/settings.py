"""
Runtime configuration.

Settings are read from environment variables once and cached. A ``.env``
file in the working directory (or any parent) is loaded first with
python-dotenv; variables already present in the environment win.

Variables
---------
TAPEGRAD_DEFAULT_DTYPE
    Element type of tensors created without an explicit dtype
    (``float32`` or ``float64``). Defaults to ``float32``.
TAPEGRAD_SEED
    Seed of devices created without an explicit seed. Defaults to ``0``.
TAPEGRAD_LOG_LEVEL
    Level applied to the ``tapegrad`` logger (``DEBUG``, ``INFO``, ...).
    Unset leaves the logger untouched.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from ..domain._dtype import DType

ENV_DEFAULT_DTYPE = "TAPEGRAD_DEFAULT_DTYPE"
ENV_SEED = "TAPEGRAD_SEED"
ENV_LOG_LEVEL = "TAPEGRAD_LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    """
    Resolved configuration values.

    Attributes
    ----------
    default_dtype : DType
        Element type used by device factories when none is given.
    seed : int
        Seed used by devices created without one.
    log_level : Optional[str]
        Level name for the ``tapegrad`` logger, or None to leave it alone.
    """

    default_dtype: DType = DType.FLOAT32
    seed: int = 0
    log_level: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from the process environment.

        Raises
        ------
        ValueError
            If a variable holds a value that cannot be parsed.
        """
        dotenv_path = find_dotenv(usecwd=True)
        if dotenv_path:
            load_dotenv(dotenv_path, override=False)

        dtype_name = os.environ.get(ENV_DEFAULT_DTYPE, "float32").strip().lower()
        try:
            dtype = DType.of(dtype_name)
        except TypeError as e:
            raise ValueError(f"{ENV_DEFAULT_DTYPE}={dtype_name!r} is not a dtype") from e
        if not dtype.is_float:
            raise ValueError(f"{ENV_DEFAULT_DTYPE} must name a float dtype, got {dtype_name!r}")

        seed_text = os.environ.get(ENV_SEED, "0").strip()
        try:
            seed = int(seed_text)
        except ValueError as e:
            raise ValueError(f"{ENV_SEED}={seed_text!r} is not an integer") from e

        level = os.environ.get(ENV_LOG_LEVEL)
        if level is not None:
            level = level.strip().upper() or None
            if level is not None and not isinstance(logging.getLevelName(level), int):
                raise ValueError(f"{ENV_LOG_LEVEL}={level!r} is not a logging level")

        return cls(default_dtype=dtype, seed=seed, log_level=level)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process settings, reading the environment on first use."""
    settings = Settings.from_env()
    if settings.log_level is not None:
        logging.getLogger("tapegrad").setLevel(settings.log_level)
    return settings


def reload_settings() -> Settings:
    """Discard cached settings and read the environment again."""
    get_settings.cache_clear()
    return get_settings()
