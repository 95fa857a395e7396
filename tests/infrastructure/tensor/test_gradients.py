import unittest

import numpy as np

from tapegrad.domain._errors import MissingGradientError, ShapeMismatchError
from tapegrad.infrastructure.devices import Cpu
from tapegrad.infrastructure.tensor import Gradients, UnusedTensors


class TestGradients(unittest.TestCase):
    def setUp(self) -> None:
        self.dev = Cpu(seed=0, default_dtype="float64")

    def test_absent_is_not_zero(self):
        t = self.dev.zeros((2,))
        grads = Gradients()
        self.assertNotIn(t, grads)
        with self.assertRaises(MissingGradientError):
            grads.get(t)
        with self.assertRaises(KeyError):
            grads.get_ref(t.id)

        grads.try_alloc_for(t)
        self.assertIn(t, grads)
        self.assertTrue(grads.contains(t.id))
        self.assertEqual(grads.get(t).as_vec(), [0.0, 0.0])

    def test_get_returns_untraced_copy_on_write_handle(self):
        x = self.dev.tensor([1.0, 2.0]).trace()
        grads = (x * 3.0).sum().backward()
        g = grads.get(x)
        self.assertFalse(g.tape.owned)
        g.fill_with_zeros()
        self.assertEqual(grads.get(x).as_vec(), [3.0, 3.0])

    def test_accumulate_adds(self):
        t = self.dev.zeros((3,))
        grads = Gradients()
        grads.accumulate(t, self.dev.tensor([1.0, 2.0, 3.0]))
        grads.accumulate(t, self.dev.tensor([1.0, 1.0, 1.0]))
        self.assertEqual(grads.get(t).as_vec(), [2.0, 3.0, 4.0])
        with self.assertRaises(ShapeMismatchError):
            grads.accumulate(t, self.dev.zeros((2,)))

    def test_remove_len_ids(self):
        a = self.dev.zeros((1,))
        b = self.dev.zeros((1,))
        grads = Gradients()
        grads.try_alloc_for(a)
        grads.try_alloc_for(b)
        self.assertEqual(len(grads), 2)
        self.assertEqual(set(grads.ids()), {a.id, b.id})
        self.assertIsNotNone(grads.remove(a))
        self.assertIsNone(grads.remove(a))
        self.assertEqual(list(grads), [b.id])

    def test_diamond_graph_sums_both_paths(self):
        x = self.dev.tensor([0.5, -1.0, 2.0]).trace()
        # y = sin(x) + x^2 uses x twice
        y = (x.sin() + x.square()).sum()
        grads = y.backward()
        xv = np.array([0.5, -1.0, 2.0])
        np.testing.assert_allclose(grads.get(x).as_vec(), np.cos(xv) + 2.0 * xv, rtol=1e-12)

    def test_same_tensor_as_both_operands(self):
        x = self.dev.tensor([1.0, 3.0]).trace()
        grads = (x * x).sum().backward()
        self.assertEqual(grads.get(x).as_vec(), [2.0, 6.0])

    def test_handles_share_identity(self):
        x = self.dev.tensor([1.0, 2.0])
        traced = x.trace()
        grads = traced.exp().sum().backward()
        np.testing.assert_allclose(grads.get(x).as_vec(), np.exp([1.0, 2.0]))
        self.assertIn(x.clone(), grads)
        self.assertIn(x.detached(), grads)


class TestUnusedTensors(unittest.TestCase):
    def test_collects_ids(self):
        dev = Cpu(seed=0)
        a = dev.zeros((1,))
        b = dev.zeros((1,))
        unused = UnusedTensors()
        self.assertTrue(unused.is_empty())
        unused.add(a)
        unused.add(b.id)
        self.assertEqual(len(unused), 2)
        self.assertEqual(unused.ids, [a.id, b.id])
        self.assertIn(a, unused)
        self.assertEqual(list(unused), [a.id, b.id])


if __name__ == "__main__":
    unittest.main()
