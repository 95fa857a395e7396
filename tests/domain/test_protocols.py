import unittest

from tapegrad.domain import IModule, IParamUpdater, ITensor
from tapegrad.domain.device import IDeviceStorage, IDistribution, IStorage
from tapegrad.infrastructure.devices import Cpu, Normal, Standard, StandardNormal, Uniform
from tapegrad.infrastructure.nn import Linear, ReLU
from tapegrad.infrastructure.optim import Sgd


class TestProtocolConformance(unittest.TestCase):
    def setUp(self) -> None:
        self.dev = Cpu(seed=0)

    def test_cpu_is_device_storage(self):
        self.assertIsInstance(self.dev, IDeviceStorage)

    def test_tensor_and_storage(self):
        t = self.dev.zeros((2, 2))
        self.assertIsInstance(t, ITensor)
        self.assertIsInstance(t.storage, IStorage)

    def test_distributions(self):
        for distr in (Standard(), StandardNormal(), Uniform(-1.0, 1.0), Normal(0.0, 2.0)):
            with self.subTest(distr=type(distr).__name__):
                self.assertIsInstance(distr, IDistribution)

    def test_modules_and_updaters(self):
        self.assertIsInstance(Linear.build(self.dev, 2, 2), IModule)
        self.assertIsInstance(ReLU(), IModule)
        self.assertIsInstance(Sgd(), IParamUpdater)

    def test_plain_object_is_not_a_device(self):
        self.assertNotIsInstance(object(), IDeviceStorage)


if __name__ == "__main__":
    unittest.main()
