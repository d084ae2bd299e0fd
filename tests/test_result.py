import unittest

from ktv_data.result import Failure, Success, failure_from, is_success, map_result


class TestResultEnvelope(unittest.TestCase):
    def test_success_requires_payload(self) -> None:
        with self.assertRaises(ValueError):
            Success(None)

    def test_failure_requires_message(self) -> None:
        with self.assertRaises(ValueError):
            Failure("")

    def test_map_chains_successful_payload(self) -> None:
        result = map_result(Success(2), lambda value: Success(value * 10))
        self.assertEqual(result, Success(20))

    def test_map_short_circuits_on_failure(self) -> None:
        calls = []

        def step(value):
            calls.append(value)
            return Success(value)

        result = map_result(Failure("network down"), step)
        self.assertEqual(result, Failure("network down"))
        self.assertEqual(calls, [])

    def test_map_can_turn_success_into_failure(self) -> None:
        result = map_result(Success("id"), lambda _value: Failure("rejected"))
        self.assertFalse(is_success(result))
        self.assertEqual(result.message, "rejected")

    def test_failure_from_blank_exception_uses_class_name(self) -> None:
        self.assertEqual(failure_from(TimeoutError()).message, "TimeoutError")
        self.assertEqual(failure_from(RuntimeError("boom")).message, "boom")


if __name__ == "__main__":
    unittest.main()
