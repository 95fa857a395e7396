import unittest

import numpy as np

from tapegrad.domain._errors import DTypeMismatchError, ShapeMismatchError, TapeMergeError
from tapegrad.infrastructure import ops
from tapegrad.infrastructure.devices import Cpu


class TestChoose(unittest.TestCase):
    def setUp(self) -> None:
        self.dev = Cpu(seed=0)
        self.cond = self.dev.tensor([True, False, True])
        self.lhs = self.dev.tensor([1.0, 2.0, 3.0])
        self.rhs = self.dev.tensor([10.0, 20.0, 30.0])

    def test_forward_selects_elementwise(self):
        out = self.cond.choose(self.lhs, self.rhs)
        self.assertEqual(out.as_vec(), [1.0, 20.0, 3.0])
        self.assertEqual(ops.choose(self.cond, self.lhs, self.rhs).as_vec(), [1.0, 20.0, 3.0])

    def test_backward_routes_gradient_by_condition(self):
        lhs = self.lhs.trace()
        out = self.cond.choose(lhs, self.rhs)
        grads = out.backward()
        self.assertEqual(grads.get(self.lhs).as_vec(), [1.0, 0.0, 1.0])
        self.assertEqual(grads.get(self.rhs).as_vec(), [0.0, 1.0, 0.0])
        self.assertNotIn(self.cond, grads)

    def test_same_tensor_on_both_sides_gets_full_gradient(self):
        x = self.lhs.trace()
        grads = self.cond.choose(x, x).sum().backward()
        self.assertEqual(grads.get(x).as_vec(), [1.0, 1.0, 1.0])

    def test_condition_from_comparison(self):
        dev = Cpu(seed=0, default_dtype="float64")
        x = dev.tensor([-1.0, 2.0, -3.0]).trace()
        # leaky relu
        y = (x > 0.0).choose(x, x * 0.1)
        np.testing.assert_allclose(y.as_vec(), [-0.1, 2.0, -0.3])
        grads = y.sum().backward()
        np.testing.assert_allclose(grads.get(x).as_vec(), [0.1, 1.0, 0.1])

    def test_condition_must_be_bool(self):
        with self.assertRaises(DTypeMismatchError):
            ops.choose(self.lhs, self.lhs, self.rhs)

    def test_value_dtypes_must_match(self):
        rhs64 = self.dev.tensor([10.0, 20.0, 30.0], dtype="float64")
        with self.assertRaises(DTypeMismatchError):
            self.cond.choose(self.lhs, rhs64)

    def test_shapes_must_match(self):
        with self.assertRaises(ShapeMismatchError):
            self.cond.choose(self.dev.zeros((2,)), self.dev.zeros((2,)))

    def test_independent_tapes_raise(self):
        with self.assertRaises(TapeMergeError):
            self.cond.choose(self.lhs.trace(), self.rhs.trace())


if __name__ == "__main__":
    unittest.main()
