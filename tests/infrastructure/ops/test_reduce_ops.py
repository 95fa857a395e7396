import unittest

import numpy as np

from tapegrad.domain._errors import DTypeMismatchError, ShapeMismatchError
from tapegrad.infrastructure import ops
from tapegrad.infrastructure.devices import Cpu


class TestReductions(unittest.TestCase):
    def setUp(self) -> None:
        self.dev = Cpu(seed=0, default_dtype="float64")
        self.xv = np.array([[[1.0, -2.0], [3.0, 0.5]], [[-1.0, 4.0], [2.5, 2.0]]])
        self.x = self.dev.tensor(self.xv)

    def test_match_numpy(self):
        x, xv = self.x, self.xv
        np.testing.assert_allclose(x.sum().item(), xv.sum())
        np.testing.assert_allclose(x.sum((0, 2)).array(), xv.sum(axis=(0, 2)))
        np.testing.assert_allclose(x.mean(-1).array(), xv.mean(axis=-1))
        np.testing.assert_allclose(x.max(1).array(), xv.max(axis=1))
        np.testing.assert_allclose(x.min(0).array(), xv.min(axis=0))
        np.testing.assert_allclose(x.var(2).array(), xv.var(axis=2))
        np.testing.assert_allclose(x.var(0, correction=1).array(), xv.var(axis=0, ddof=1))
        lse = np.log(np.exp(xv).sum(axis=1))
        np.testing.assert_allclose(x.logsumexp(1).array(), lse)

    def test_result_shapes(self):
        self.assertEqual(self.x.sum().shape, ())
        self.assertEqual(self.x.sum(1).shape, (2, 2))
        self.assertEqual(self.x.sum(1, keepdims=True).shape, (2, 1, 2))
        self.assertEqual(ops.mean(self.x, (0, 1), keepdims=True).shape, (1, 1, 2))

    def test_logsumexp_is_stable(self):
        t = self.dev.tensor([1000.0, 1000.0])
        np.testing.assert_allclose(t.logsumexp().item(), 1000.0 + np.log(2.0))
        t = self.dev.tensor([-np.inf, -np.inf])
        self.assertEqual(t.logsumexp().item(), -np.inf)

    def test_max_ties_share_gradient(self):
        t = self.dev.tensor([1.0, 3.0, 3.0]).trace()
        grads = t.max().backward()
        self.assertEqual(grads.get(t).as_vec(), [0.0, 1.0, 1.0])

    def test_invalid_axes(self):
        with self.assertRaises(ShapeMismatchError):
            self.x.sum(3)
        with self.assertRaises(ShapeMismatchError):
            self.x.sum((0, 0))

    def test_empty_axis_without_identity_rejected(self):
        empty = self.dev.zeros((0, 3))
        for name in ("max", "min", "logsumexp"):
            with self.subTest(op=name):
                with self.assertRaises(ShapeMismatchError):
                    getattr(empty, name)(0)
        self.assertEqual(empty.sum(0).as_vec(), [0.0, 0.0, 0.0])
        self.assertEqual(empty.max(1).shape, (0,))

    def test_bool_input_rejected(self):
        with self.assertRaises(DTypeMismatchError):
            self.dev.tensor([True, False]).sum()


class TestComposites(unittest.TestCase):
    def setUp(self) -> None:
        self.dev = Cpu(seed=0, default_dtype="float64")

    def test_softmax_rows_sum_to_one(self):
        x = self.dev.sample_normal((3, 5))
        s = np.asarray(x.softmax().array())
        np.testing.assert_allclose(s.sum(axis=-1), np.ones(3))
        xv = np.asarray(x.array())
        e = np.exp(xv - xv.max(axis=-1, keepdims=True))
        np.testing.assert_allclose(s, e / e.sum(axis=-1, keepdims=True))

    def test_log_softmax_matches_log_of_softmax(self):
        x = self.dev.sample_normal((2, 4))
        np.testing.assert_allclose(
            np.asarray(x.log_softmax(0).array()),
            np.log(np.asarray(x.softmax(0).array())),
        )

    def test_normalize(self):
        x = self.dev.sample_normal((4, 6)) * 3.0 + 2.0
        y = np.asarray(x.normalize(1e-5).array())
        np.testing.assert_allclose(y.mean(axis=-1), np.zeros(4), atol=1e-12)
        np.testing.assert_allclose(y.var(axis=-1), np.ones(4), rtol=1e-4)

    def test_normalize_gradient_sums_to_zero(self):
        x = self.dev.sample_normal((5,))
        t = x.trace()
        w = self.dev.sample_normal((5,))
        grads = (t.normalize() * w).sum().backward()
        self.assertAlmostEqual(float(np.sum(grads.get(x).as_vec())), 0.0, places=10)


if __name__ == "__main__":
    unittest.main()
