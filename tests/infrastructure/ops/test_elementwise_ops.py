import math
import unittest

import numpy as np

from tapegrad.domain._dtype import DType
from tapegrad.domain._errors import DTypeMismatchError, ShapeMismatchError
from tapegrad.infrastructure import ops
from tapegrad.infrastructure.devices import Cpu


def as_np(t) -> np.ndarray:
    return np.asarray(t.array(), dtype=np.float64)


class TestElementwiseForward(unittest.TestCase):
    def setUp(self) -> None:
        self.dev = Cpu(seed=0, default_dtype="float64")
        self.xv = np.array([[-1.5, -0.25, 0.5], [1.0, 2.0, 3.0]])
        self.x = self.dev.tensor(self.xv)

    def test_unary_functions_match_numpy(self):
        x, xv = self.x, self.xv
        cases = {
            "negate": (x.negate(), -xv),
            "neg": (-x, -xv),
            "exp": (x.exp(), np.exp(xv)),
            "square": (x.square(), xv**2),
            "abs": (x.abs(), np.abs(xv)),
            "builtin abs": (abs(x), np.abs(xv)),
            "relu": (x.relu(), np.maximum(xv, 0.0)),
            "sigmoid": (x.sigmoid(), 1.0 / (1.0 + np.exp(-xv))),
            "tanh": (x.tanh(), np.tanh(xv)),
            "sin": (x.sin(), np.sin(xv)),
            "cos": (x.cos(), np.cos(xv)),
            "clamp": (x.clamp(-0.5, 1.5), np.clip(xv, -0.5, 1.5)),
        }
        for name, (got, want) in cases.items():
            with self.subTest(op=name):
                np.testing.assert_allclose(as_np(got), want, rtol=1e-12)

    def test_positive_domain_functions(self):
        pv = np.array([0.25, 1.0, 4.0])
        p = self.dev.tensor(pv)
        np.testing.assert_allclose(as_np(p.ln()), np.log(pv))
        np.testing.assert_allclose(as_np(p.sqrt()), np.sqrt(pv))
        np.testing.assert_allclose(as_np(p.powf(1.5)), pv**1.5)
        np.testing.assert_allclose(as_np(p**-2), pv**-2.0)

    def test_gelu_tanh_approximation(self):
        xv = self.xv
        c = math.sqrt(2.0 / math.pi)
        want = 0.5 * xv * (1.0 + np.tanh(c * (xv + 0.044715 * xv**3)))
        np.testing.assert_allclose(as_np(self.x.gelu()), want, rtol=1e-12)

    def test_sigmoid_is_stable_for_large_inputs(self):
        t = self.dev.tensor([-1000.0, 0.0, 1000.0])
        np.testing.assert_allclose(t.sigmoid().as_vec(), [0.0, 0.5, 1.0])

    def test_binary_operators(self):
        yv = np.array([[2.0, 4.0, -1.0], [0.5, -2.0, 1.0]])
        y = self.dev.tensor(yv)
        x, xv = self.x, self.xv
        np.testing.assert_allclose(as_np(x + y), xv + yv)
        np.testing.assert_allclose(as_np(x - y), xv - yv)
        np.testing.assert_allclose(as_np(x * y), xv * yv)
        np.testing.assert_allclose(as_np(x / y), xv / yv)
        np.testing.assert_allclose(as_np(x.maximum(y)), np.maximum(xv, yv))
        np.testing.assert_allclose(as_np(ops.minimum(x, y)), np.minimum(xv, yv))

    def test_scalar_operands_on_either_side(self):
        x, xv = self.x, self.xv
        np.testing.assert_allclose(as_np(x + 2), xv + 2)
        np.testing.assert_allclose(as_np(2 + x), xv + 2)
        np.testing.assert_allclose(as_np(x - 2), xv - 2)
        np.testing.assert_allclose(as_np(2 - x), 2 - xv)
        np.testing.assert_allclose(as_np(x * 3.0), xv * 3)
        np.testing.assert_allclose(as_np(3.0 * x), xv * 3)
        np.testing.assert_allclose(as_np(x / 4.0), xv / 4)
        np.testing.assert_allclose(as_np(1.0 / x), 1.0 / xv)
        np.testing.assert_allclose(as_np(x.maximum(0.0)), np.maximum(xv, 0.0))
        np.testing.assert_allclose(as_np(x.minimum(1.0)), np.minimum(xv, 1.0))

    def test_numpy_scalar_on_the_left_defers_to_tensor(self):
        out = np.float64(2.0) * self.x
        np.testing.assert_allclose(as_np(out), 2.0 * self.xv)

    def test_float32_stays_float32(self):
        dev = Cpu(seed=0, default_dtype="float32")
        t = dev.tensor([1.0, 2.0])
        for out in (t * 0.5, t.exp(), t + t, t.powf(2.0), t.clamp(0.0, 1.5)):
            self.assertIs(out.dtype, DType.FLOAT32)
            self.assertEqual(out.storage.data.dtype, np.float32)

    def test_shape_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            self.x + self.dev.zeros((3,))

    def test_dtype_mismatch(self):
        with self.assertRaises(DTypeMismatchError):
            self.x + self.dev.zeros((2, 3), dtype="float32")

    def test_bool_tensors_are_not_differentiable(self):
        b = self.dev.tensor([True, False])
        with self.assertRaises(DTypeMismatchError):
            b.exp()

    def test_two_scalars_rejected(self):
        with self.assertRaises(TypeError):
            ops.add(1.0, 2.0)

    def test_clamp_bounds(self):
        with self.assertRaises(ValueError):
            self.x.clamp(1.0, -1.0)

    def test_forward_is_idempotent(self):
        x = self.dev.sample_normal((4, 5))
        f = lambda t: ((t.gelu() * t.sigmoid()).sum(1) + t.logsumexp(1)).softmax()
        self.assertEqual(f(x).as_vec(), f(x).as_vec())


class TestComparisons(unittest.TestCase):
    def setUp(self) -> None:
        self.dev = Cpu(seed=0)
        self.a = self.dev.tensor([1.0, 2.0, 3.0])
        self.b = self.dev.tensor([3.0, 2.0, 1.0])

    def test_tensor_comparisons(self):
        self.assertEqual(self.a.eq(self.b).as_vec(), [False, True, False])
        self.assertEqual(self.a.ne(self.b).as_vec(), [True, False, True])
        self.assertEqual((self.a > self.b).as_vec(), [False, False, True])
        self.assertEqual((self.a >= self.b).as_vec(), [False, True, True])
        self.assertEqual((self.a < self.b).as_vec(), [True, False, False])
        self.assertEqual((self.a <= self.b).as_vec(), [True, True, False])

    def test_scalar_comparison(self):
        out = self.a > 1.5
        self.assertIs(out.dtype, DType.BOOL)
        self.assertEqual(out.as_vec(), [False, True, True])
        self.assertEqual(ops.le(self.a, 2).as_vec(), [True, True, False])

    def test_comparisons_are_never_traced(self):
        t = self.a.trace()
        out = t > 0.0
        self.assertFalse(out.tape.owned)
        self.assertEqual(len(t.tape), 0)

    def test_shape_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            self.a.eq(self.dev.zeros((2,)))


if __name__ == "__main__":
    unittest.main()
