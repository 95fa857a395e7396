import unittest

import numpy as np

from tapegrad.domain._errors import ShapeMismatchError
from tapegrad.infrastructure import ops
from tapegrad.infrastructure.devices import Cpu


class TestShapeOps(unittest.TestCase):
    def setUp(self) -> None:
        self.dev = Cpu(seed=0)
        self.xv = np.arange(6, dtype=np.float32).reshape(2, 3)
        self.x = self.dev.tensor(self.xv)

    def test_broadcast(self):
        b = self.dev.tensor([1.0, 2.0, 3.0]).broadcast_to((2, 3))
        self.assertEqual(b.array(), [[1.0, 2.0, 3.0], [1.0, 2.0, 3.0]])
        c = self.dev.tensor([[1.0], [2.0]]).broadcast_like(self.x)
        self.assertEqual(c.array(), [[1.0, 1.0, 1.0], [2.0, 2.0, 2.0]])
        with self.assertRaises(ShapeMismatchError):
            self.dev.tensor([1.0, 2.0]).broadcast_to((2, 3))

    def test_broadcast_result_is_writable_copy(self):
        b = self.dev.tensor([1.0, 2.0, 3.0]).broadcast_to((2, 3))
        b.fill_with_zeros()
        self.assertEqual(b.as_vec(), [0.0] * 6)

    def test_reshape_is_row_major(self):
        r = self.x.reshape((3, 2))
        self.assertEqual(r.array(), [[0.0, 1.0], [2.0, 3.0], [4.0, 5.0]])
        self.assertEqual(self.x.reshape(6).shape, (6,))
        with self.assertRaises(ShapeMismatchError):
            self.x.reshape((4, 2))

    def test_permute_and_transpose(self):
        np.testing.assert_array_equal(np.asarray(self.x.permute((1, 0)).array()), self.xv.T)
        np.testing.assert_array_equal(np.asarray(self.x.transpose().array()), self.xv.T)
        np.testing.assert_array_equal(np.asarray(self.x.T.array()), self.xv.T)
        t3 = self.dev.zeros((2, 3, 4))
        self.assertEqual(t3.permute((2, 0, 1)).shape, (4, 2, 3))
        self.assertEqual(t3.transpose().shape, (2, 4, 3))
        with self.assertRaises(ShapeMismatchError):
            t3.permute((0, 0, 1))
        with self.assertRaises(ShapeMismatchError):
            self.dev.zeros((3,)).transpose()

    def test_select_and_gather(self):
        self.assertEqual(self.x.select(1).as_vec(), [3.0, 4.0, 5.0])
        self.assertEqual(self.x.select(-1, axis=1).as_vec(), [2.0, 5.0])
        g = self.x.gather([2, 0], axis=1)
        self.assertEqual(g.array(), [[2.0, 0.0], [5.0, 3.0]])
        with self.assertRaises(ShapeMismatchError):
            self.x.select(2)
        with self.assertRaises(ShapeMismatchError):
            ops.gather(self.x, [0, 3], axis=1)

    def test_gather_backward_accumulates_repeats(self):
        x = self.dev.tensor([1.0, 2.0, 3.0]).trace()
        grads = x.gather([0, 0, 2]).sum().backward()
        self.assertEqual(grads.get(x).as_vec(), [2.0, 0.0, 1.0])

    def test_broadcast_backward_sums(self):
        v = self.dev.tensor([1.0, 2.0]).trace()
        grads = v.broadcast_to((3, 2)).sum().backward()
        self.assertEqual(grads.get(v).as_vec(), [3.0, 3.0])


class TestMatmul(unittest.TestCase):
    def setUp(self) -> None:
        self.dev = Cpu(seed=0, default_dtype="float64")

    def test_shapes_follow_numpy(self):
        cases = [
            ((3,), (3,), ()),
            ((3,), (3, 4), (4,)),
            ((2, 3), (3,), (2,)),
            ((2, 3), (3, 4), (2, 4)),
            ((5, 2, 3), (3, 4), (5, 2, 4)),
            ((5, 2, 3), (1, 3, 4), (5, 2, 4)),
        ]
        for a, b, out in cases:
            with self.subTest(lhs=a, rhs=b):
                av = np.random.default_rng(0).normal(size=a)
                bv = np.random.default_rng(1).normal(size=b)
                got = self.dev.tensor(av) @ self.dev.tensor(bv)
                self.assertEqual(got.shape, out)
                np.testing.assert_allclose(np.asarray(got.array()), av @ bv)

    def test_contracted_extent_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            self.dev.zeros((2, 3)) @ self.dev.zeros((2, 3))

    def test_batch_axes_must_broadcast(self):
        with self.assertRaises(ShapeMismatchError):
            self.dev.zeros((2, 2, 3)) @ self.dev.zeros((3, 3, 4))

    def test_rank0_rejected(self):
        with self.assertRaises(ShapeMismatchError):
            ops.matmul(self.dev.tensor(1.0), self.dev.zeros((1,)))

    def test_broadcast_batch_gradient_is_summed(self):
        a = self.dev.sample_normal((4, 2, 3))
        b = self.dev.sample_normal((1, 3, 2))
        tb = b.trace()
        grads = (a @ tb).sum().backward()
        av = np.asarray(a.array())
        expected = av.sum(axis=(0, 1))[:, None] * np.ones((1, 2))
        np.testing.assert_allclose(np.asarray(grads.get(b).array())[0], expected)


if __name__ == "__main__":
    unittest.main()
