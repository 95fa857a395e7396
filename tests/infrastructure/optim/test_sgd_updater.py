import unittest

import numpy as np

from tapegrad.domain._errors import UnusedParamsError
from tapegrad.infrastructure.devices import Cpu
from tapegrad.infrastructure.nn import LayerNorm1D, Linear, Sequential, Tanh
from tapegrad.infrastructure.optim import Sgd
from tapegrad.infrastructure.tensor._gradients import Gradients, UnusedTensors


class TestSgdConstruction(unittest.TestCase):
    def test_defaults(self):
        opt = Sgd()
        self.assertEqual(opt.lr, 1e-2)
        self.assertEqual(opt.weight_decay, 0.0)
        self.assertFalse(opt.allow_unused)

    def test_invalid_hyperparameters(self):
        with self.assertRaises(ValueError):
            Sgd(lr=0.0)
        with self.assertRaises(ValueError):
            Sgd(lr=-1.0)
        with self.assertRaises(ValueError):
            Sgd(lr=0.1, weight_decay=-0.5)

    def test_update_param_outside_update(self):
        dev = Cpu(seed=0)
        with self.assertRaises(RuntimeError):
            Sgd().update_param(dev.zeros((1,)), UnusedTensors())


class TestSgdStep(unittest.TestCase):
    def setUp(self) -> None:
        self.dev = Cpu(seed=0, default_dtype="float64")

    def test_step_values(self):
        m = Linear(self.dev.tensor([[1.0, 2.0]]), self.dev.tensor([0.5]))
        x = self.dev.tensor([3.0, -1.0])
        grads = m(x.trace()).sum().backward()
        unused = Sgd(lr=0.1).update(m, grads)
        self.assertTrue(unused.is_empty())
        np.testing.assert_allclose(m.weight.as_vec(), [1.0 - 0.3, 2.0 + 0.1])
        np.testing.assert_allclose(m.bias.as_vec(), [0.4])

    def test_gradients_consumed(self):
        m = Linear.build(self.dev, 2, 2)
        x = self.dev.tensor([1.0, 1.0]).trace()
        grads = m(x).sum().backward()
        Sgd(lr=0.1).update(m, grads)
        self.assertNotIn(m.weight, grads)
        self.assertNotIn(m.bias, grads)
        self.assertIn(x, grads)

    def test_weight_decay(self):
        m = Linear(self.dev.tensor([[2.0]]), self.dev.tensor([1.0]))
        grads = m(self.dev.tensor([0.0]).trace()).sum().backward()
        Sgd(lr=0.5, weight_decay=0.1).update(m, grads)
        # weight grad is 0, so only decay acts on it
        np.testing.assert_allclose(m.weight.as_vec(), [2.0 - 0.5 * 0.1 * 2.0])
        np.testing.assert_allclose(m.bias.as_vec(), [1.0 - 0.5 * (1.0 + 0.1 * 1.0)])

    def test_shared_parameter_buffer_is_not_mutated(self):
        m = Linear(self.dev.tensor([[1.0]]), self.dev.tensor([0.0]))
        snapshot = m.weight.clone()
        grads = m(self.dev.tensor([1.0]).trace()).sum().backward()
        Sgd(lr=1.0).update(m, grads)
        self.assertEqual(snapshot.as_vec(), [1.0])
        self.assertEqual(m.weight.as_vec(), [0.0])

    def test_missing_gradient_raises(self):
        m = LayerNorm1D.build(self.dev, 3)
        grads = Gradients()
        grads.try_alloc_for(m.gamma)
        with self.assertRaises(UnusedParamsError) as ctx:
            Sgd().update(m, grads)
        self.assertIn(m.beta.id, ctx.exception.unused)

    def test_allow_unused_warns_and_skips(self):
        m = LayerNorm1D.build(self.dev, 3)
        opt = Sgd(lr=0.1, allow_unused=True)
        with self.assertLogs("tapegrad", level="WARNING") as logs:
            unused = opt.update(m, Gradients())
        self.assertEqual(len(unused), 2)
        self.assertIn("2 parameter(s)", logs.output[0])
        self.assertEqual(m.gamma.as_vec(), [1.0, 1.0, 1.0])

    def test_training_reduces_loss(self):
        dev = self.dev
        model = Sequential.build(dev, (Linear, 2, 8), Tanh, (Linear, 8, 1))
        xv = np.array([[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]])
        yv = np.array([[0.0], [1.0], [1.0], [0.0]])
        x, y = dev.tensor(xv), dev.tensor(yv)
        opt = Sgd(lr=0.5)

        def loss_value():
            return ((model(x) - y).square()).mean().item()

        start = loss_value()
        for _ in range(200):
            loss = ((model(x.trace()) - y).square()).mean()
            opt.update(model, loss.backward())
        self.assertLess(loss_value(), start)


if __name__ == "__main__":
    unittest.main()
