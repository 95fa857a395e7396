import copy
import unittest

from tapegrad.infrastructure.devices import Cpu, MemoryLayout
from tapegrad.infrastructure.nn import Linear, Module, ReLU, ZeroSizedModule
from tapegrad.infrastructure.tensor._gradients import UnusedTensors


class _Pair(Module):
    def __init__(self, dev):
        super().__init__()
        self.scale = dev.ones((3,))
        self.inner = Linear.build(dev, 3, 2)

    def forward(self, x):
        return self.inner(x * self.scale.retaped(x.tape))


class _RecordingUpdater:
    def __init__(self):
        self.seen = []

    def update_param(self, tensor, unused):
        self.seen.append(tensor.id)


class TestModuleRegistration(unittest.TestCase):
    def setUp(self) -> None:
        self.dev = Cpu(seed=0)

    def test_attribute_assignment_registers(self):
        m = _Pair(self.dev)
        self.assertEqual(list(m._parameters), ["scale"])
        self.assertEqual(list(m._modules), ["inner"])
        names = [n for n, _ in m.named_parameters()]
        self.assertEqual(names, ["scale", "inner.weight", "inner.bias"])
        self.assertEqual(len(list(m.parameters())), 3)

    def test_assigning_none_unregisters(self):
        m = _Pair(self.dev)
        m.inner = None
        self.assertEqual([n for n, _ in m.named_parameters()], ["scale"])

    def test_explicit_registration(self):
        m = Module()
        m.register_parameter("p", self.dev.zeros((2,)))
        m.register_parameter("skip", None)
        m.register_module("act", ReLU())
        self.assertIn("p", m._parameters)
        self.assertNotIn("skip", m._parameters)
        self.assertIs(m.act, m._modules["act"])

    def test_update_visits_every_parameter_in_order(self):
        m = _Pair(self.dev)
        updater = _RecordingUpdater()
        m.update(updater, UnusedTensors())
        self.assertEqual(updater.seen, [p.id for p in m.parameters()])

    def test_base_hooks_not_implemented(self):
        with self.assertRaises(NotImplementedError):
            Module.build(self.dev)
        with self.assertRaises(NotImplementedError):
            Module()(self.dev.zeros((1,)))

    def test_reset_recurses_into_children(self):
        m = _Pair(self.dev)
        m.inner.weight.fill_with_zeros()
        m.reset_params()
        self.assertTrue(any(v != 0.0 for v in m.inner.weight.as_vec()))


class TestModuleToDevice(unittest.TestCase):
    def test_keeps_parameter_ids(self):
        src = Cpu(seed=0)
        dst = Cpu(seed=0, layout=MemoryLayout.COLUMN_MAJOR)
        m = _Pair(src)
        moved = m.to_device(dst)
        self.assertIsNot(moved, m)
        self.assertEqual([p.id for p in moved.parameters()], [p.id for p in m.parameters()])
        for p in moved.parameters():
            self.assertEqual(p.device, dst)
        for p in m.parameters():
            self.assertEqual(p.device, src)
        self.assertEqual(moved.inner.weight.as_vec(), m.inner.weight.as_vec())

    def test_original_keeps_its_registrations(self):
        m = _Pair(Cpu(seed=0))
        m.to_device(Cpu(seed=1))
        self.assertIs(m._modules["inner"], m.inner)


class TestZeroSizedModule(unittest.TestCase):
    def test_contract_is_trivial(self):
        relu = ReLU.build(None)
        self.assertIsInstance(relu, ZeroSizedModule)
        self.assertEqual(list(relu.parameters()), [])
        relu.reset_params()
        relu.update(_RecordingUpdater(), UnusedTensors())
        moved = relu.to_device(Cpu())
        self.assertIsInstance(moved, ReLU)
        self.assertIsNot(moved, relu)

    def test_copy_is_independent(self):
        relu = ReLU()
        clone = copy.copy(relu)
        self.assertIsInstance(clone, ReLU)


if __name__ == "__main__":
    unittest.main()
