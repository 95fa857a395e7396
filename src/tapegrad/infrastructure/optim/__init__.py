from ._sgd import Sgd

__all__ = ["Sgd"]
