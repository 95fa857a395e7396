import unittest

import numpy as np

from tapegrad.infrastructure.devices import Cpu, MemoryLayout
from tapegrad.infrastructure.nn import LayerNorm1D, Linear, ReLU, Sequential, Tanh


class TestSequential(unittest.TestCase):
    def setUp(self) -> None:
        self.dev = Cpu(seed=0, default_dtype="float64")

    def test_build_from_specs(self):
        model = Sequential.build(self.dev, (Linear, 4, 8), ReLU, (LayerNorm1D, 8), (Linear, 8, 2))
        self.assertEqual(len(model), 4)
        self.assertIsInstance(model[0], Linear)
        self.assertIsInstance(model[1], ReLU)
        self.assertIsInstance(model[-1], Linear)
        self.assertEqual(list(model._modules), ["0", "1", "2", "3"])
        names = [n for n, _ in model.named_parameters()]
        self.assertEqual(names, ["0.weight", "0.bias", "2.gamma", "2.beta", "3.weight", "3.bias"])

    def test_forward_applies_layers_in_order(self):
        model = Sequential.build(self.dev, (Linear, 3, 5), Tanh, (Linear, 5, 2))
        x = self.dev.sample_normal((4, 3))
        expected = model[2](model[1](model[0](x)))
        np.testing.assert_allclose(np.asarray(model(x).array()), np.asarray(expected.array()))
        np.testing.assert_allclose(np.asarray(model.forward_mut(x).array()), np.asarray(expected.array()))

    def test_add_validates(self):
        model = Sequential()
        model.add(ReLU(), name="act")
        with self.assertRaises(ValueError):
            model.add(Tanh(), name="act")
        with self.assertRaises(TypeError):
            model.add(lambda t: t)
        model.add(Tanh())
        self.assertEqual(list(model._modules), ["act", "1"])
        self.assertEqual([type(m) for m in model], [ReLU, Tanh])

    def test_empty_is_identity(self):
        x = self.dev.tensor([1.0, 2.0])
        self.assertEqual(Sequential()(x).as_vec(), [1.0, 2.0])

    def test_to_device_keeps_order_and_ids(self):
        model = Sequential.build(self.dev, (Linear, 2, 3), ReLU, (Linear, 3, 1))
        moved = model.to_device(Cpu(seed=0, layout=MemoryLayout.COLUMN_MAJOR))
        self.assertEqual([type(m) for m in moved], [Linear, ReLU, Linear])
        self.assertEqual([p.id for p in moved.parameters()], [p.id for p in model.parameters()])
        x = self.dev.tensor([0.5, -1.0])
        y = moved(moved[0].weight.device.tensor([0.5, -1.0]))
        np.testing.assert_allclose(y.as_vec(), model(x).as_vec())

    def test_backward_reaches_every_parameter(self):
        model = Sequential.build(self.dev, (Linear, 3, 4), Tanh, (Linear, 4, 1))
        grads = model(self.dev.sample_normal((5, 3)).trace()).sum().backward()
        for p in model.parameters():
            self.assertIn(p, grads)

    def test_repr(self):
        model = Sequential(ReLU(), Tanh())
        self.assertEqual(repr(model), "Sequential(ReLU(), Tanh())")


if __name__ == "__main__":
    unittest.main()
