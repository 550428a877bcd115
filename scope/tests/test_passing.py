import unittest

from scope.tests.tools import SilentTestRunner
from scope.test_resources import passing


class TestPassingResult(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        test_program = unittest.TestProgram(
            module="scope.test_resources.passing",
            testRunner=SilentTestRunner,
            argv=["scope/tests/test_passing.py"],
            exit=False,
            verbosity=2,
        )
        cls.test_results = test_program.result
        cls.stream_output = cls.test_results.test_run_output

    def test_tests_run_count(self):
        self.assertEqual(
            self.test_results.testsRun,
            7,
        )

    def test_failures_count(self):
        self.assertEqual(
            len(self.test_results.failures),
            0,
        )

    def test_errors_count(self):
        self.assertEqual(
            len(self.test_results.errors),
            0,
        )

    def test_stream_output(self):
        self.assertEqual(
            self.stream_output,
            passing.expected_stream_output,
        )

    def test_fixture_order(self):
        self.assertEqual(
            passing.has_run,
            passing.expected_has_run,
        )

    def test_teardown_once_of_deeply_nested_last_test(self):
        self.assertEqual(
            passing.deep_has_run,
            passing.expected_deep_has_run,
        )


if __name__ == '__main__':
    unittest.main()
