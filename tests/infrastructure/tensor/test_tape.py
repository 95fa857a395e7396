import unittest

from tapegrad.domain._errors import (
    ContractViolationError,
    TapeDrainedError,
    TapeMergeError,
)
from tapegrad.infrastructure.devices import Cpu
from tapegrad.infrastructure.tensor import (
    NONE_TAPE,
    NoneTape,
    OpRecord,
    OwnedTape,
    TapeState,
    merge_tapes,
)
from tapegrad.infrastructure.tensor._backward import BackwardRegistry


class TestNoneTape(unittest.TestCase):
    def test_singleton_and_records_nothing(self):
        self.assertIs(NoneTape(), NONE_TAPE)
        self.assertFalse(NONE_TAPE.owned)
        dev = Cpu(seed=0)
        y = dev.tensor([1.0, 2.0]).exp()
        self.assertIs(y.tape, NONE_TAPE)
        self.assertEqual(len(NONE_TAPE), 0)


class TestOwnedTape(unittest.TestCase):
    def setUp(self) -> None:
        self.dev = Cpu(seed=0)

    def test_records_every_traced_op(self):
        x = self.dev.tensor([1.0, 2.0]).trace()
        tape = x.tape
        self.assertIs(tape.state, TapeState.EMPTY)
        y = x.exp().sum()
        self.assertIs(y.tape, tape)
        self.assertIs(tape.state, TapeState.RECORDING)
        self.assertEqual([r.op for r in tape.records], ["exp", "sum"])
        self.assertIsInstance(tape.records[0], OpRecord)

    def test_records_hold_untraced_handles(self):
        x = self.dev.tensor([1.0, 2.0]).trace()
        y = x.square()
        (record,) = y.tape.records
        self.assertEqual(record.inputs[0].id, x.id)
        self.assertEqual(record.output.id, y.id)
        self.assertIs(record.inputs[0].tape, NONE_TAPE)

    def test_drain_twice_raises(self):
        x = self.dev.tensor([1.0]).trace()
        y = x.exp()
        y.backward()
        self.assertIs(y.tape.state, TapeState.DRAINED)
        with self.assertRaises(TapeDrainedError):
            y.backward()
        with self.assertRaises(TapeDrainedError):
            y.tape.drain()

    def test_recording_onto_drained_tape_raises(self):
        x = self.dev.tensor([1.0]).trace()
        y = x.exp()
        y.backward()
        with self.assertRaises(TapeDrainedError):
            y.exp()

    def test_backward_requires_traced_tensor(self):
        y = self.dev.tensor([1.0]).exp()
        with self.assertRaises(ContractViolationError):
            y.backward()

    def test_unrelated_records_are_skipped(self):
        x = self.dev.tensor([1.0, 2.0]).trace()
        unrelated = x.sin()
        y = x.square().sum()
        grads = y.backward()
        self.assertNotIn(unrelated, grads)
        self.assertEqual(grads.get(x).as_vec(), [2.0, 4.0])


class TestMergeTapes(unittest.TestCase):
    def setUp(self) -> None:
        self.dev = Cpu(seed=0)

    def test_none_tapes_merge_to_none(self):
        self.assertIs(merge_tapes(NONE_TAPE, NONE_TAPE), NONE_TAPE)

    def test_owned_tape_wins_over_none(self):
        t = OwnedTape()
        self.assertIs(merge_tapes(NONE_TAPE, t), t)
        self.assertIs(merge_tapes(t, NONE_TAPE, t), t)

    def test_two_independent_tapes_raise(self):
        with self.assertRaises(TapeMergeError):
            merge_tapes(OwnedTape(), OwnedTape())

    def test_op_on_two_traced_inputs_raises(self):
        a = self.dev.tensor([1.0, 2.0]).trace()
        b = self.dev.tensor([3.0, 4.0]).trace()
        with self.assertRaises(TapeMergeError):
            a + b

    def test_traced_with_untraced_records_on_the_traced_tape(self):
        a = self.dev.tensor([1.0, 2.0]).trace()
        b = self.dev.tensor([3.0, 4.0])
        c = b * a
        self.assertIs(c.tape, a.tape)
        grads = c.sum().backward()
        self.assertEqual(grads.get(a).as_vec(), [3.0, 4.0])
        # untraced operands still receive a gradient entry
        self.assertEqual(grads.get(b).as_vec(), [1.0, 2.0])


class TestBackwardRegistry(unittest.TestCase):
    def test_every_recorded_op_has_a_backward(self):
        for op in ("choose", "add", "mul", "exp", "sum", "logsumexp", "matmul",
                   "broadcast", "reshape", "permute", "select", "gather"):
            with self.subTest(op=op):
                self.assertTrue(callable(BackwardRegistry.get(op)))

    def test_unknown_op(self):
        with self.assertRaises(ContractViolationError):
            BackwardRegistry.get("no_such_op")

    def test_duplicate_registration_rejected(self):
        with self.assertRaises(ValueError):
            BackwardRegistry.register("matmul")(lambda record, grads: None)


if __name__ == "__main__":
    unittest.main()
