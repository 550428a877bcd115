import unittest

from scope.scope import (
    Context,
    RunOnce,
    ROOT_DESCRIPTION,
)


class TestRunOnce(unittest.TestCase):

    def setUp(self):
        self.calls = []

    def test_only_calls_function_once(self):
        hook = RunOnce(lambda: self.calls.append("hook"))
        hook(None)
        hook(None)
        hook(None)
        self.assertEqual(self.calls, ["hook"])
        self.assertTrue(hook.has_run)

    def test_passes_case_when_function_takes_it(self):
        hook = RunOnce(lambda case: self.calls.append(case))
        hook("case")
        self.assertEqual(self.calls, ["case"])

    def test_has_not_run_before_first_call(self):
        hook = RunOnce(lambda: None)
        self.assertFalse(hook.has_run)

    def test_does_not_retry_after_failure(self):

        def fail():
            self.calls.append("fail")
            raise RuntimeError("failing")

        hook = RunOnce(fail)
        with self.assertRaises(RuntimeError):
            hook(None)
        hook(None)
        self.assertEqual(self.calls, ["fail"])


class TestContextStructure(unittest.TestCase):

    def setUp(self):
        self.root = Context("")
        self.outer = self.root._add_child("outer")
        self.inner = self.outer._add_child("inner")

    def test_ancestry(self):
        self.assertEqual(
            self.inner._ancestry,
            [self.inner, self.outer, self.root],
        )

    def test_level(self):
        self.assertEqual(self.root._level, 0)
        self.assertEqual(self.inner._level, 2)

    def test_full_name_excludes_root(self):
        self.assertEqual(self.inner._full_name, "outer inner")
        self.assertEqual(self.root._full_name, "")

    def test_full_ancestry_description(self):
        self.assertEqual(
            self.inner._get_full_ancestry_description(indented=True),
            "  outer\n    inner",
        )

    def test_root_description(self):
        self.assertEqual(
            self.root._get_full_ancestry_description(),
            ROOT_DESCRIPTION,
        )

    def test_test_ids_are_depth_first(self):
        self.root._add_test("b")
        self.inner._add_test("z")
        self.outer._add_test("y")
        self.root._add_test("a")
        self.assertEqual(self.root._test_ids(), ["z", "y", "b", "a"])

    def test_last_test_is_found_in_nested_context(self):
        self.root._add_test("first")
        self.inner._add_test("deep")
        self.outer._add_child("empty")
        self.assertEqual(self.root._last_test, "first")
        self.assertEqual(self.outer._last_test, "deep")
        self.assertEqual(self.inner._last_test, "deep")

    def test_last_test_of_root_is_several_levels_down(self):
        self.inner._add_test("deep")
        self.outer._add_child("empty")
        self.root._add_child("also empty")
        self.assertEqual(self.root._last_test, "deep")

    def test_last_test_of_context_without_tests(self):
        self.assertIsNone(self.outer._last_test)


class TestRunSetupAndTeardown(unittest.TestCase):

    def setUp(self):
        self.calls = []
        self.root = Context("")
        self.outer = self.root._add_child("outer")
        self.inner = self.outer._add_child("inner")
        self.inner._add_test("outer inner should run")
        for context, label in (
            (self.root, "root"),
            (self.outer, "outer"),
            (self.inner, "inner"),
        ):
            context._setup = self._record(label + ":setup")
            context._teardown = self._record(label + ":teardown")

    def _record(self, label, error=None):

        def hook():
            self.calls.append(label)
            if error is not None:
                raise error

        return hook

    def _run(self, runner=None):
        if runner is None:
            runner = self._record("test")
        self.inner._run_setup_and_teardown(
            None,
            "outer inner should run",
            runner,
        )

    def test_setups_run_top_down_and_teardowns_bottom_up(self):
        self._run()
        self.assertEqual(
            self.calls,
            [
                "root:setup", "outer:setup", "inner:setup",
                "test",
                "inner:teardown", "outer:teardown", "root:teardown",
            ],
        )

    def test_once_hooks_run_around_last_test(self):
        self.root._set_setup_once(self._record("root:setup_once"))
        self.outer._set_teardown_once(self._record("outer:teardown_once"))
        self._run()
        self.assertEqual(
            self.calls,
            [
                "root:setup_once", "root:setup", "outer:setup",
                "inner:setup",
                "test",
                "inner:teardown", "outer:teardown", "outer:teardown_once",
                "root:teardown",
            ],
        )

    def test_teardown_once_waits_for_last_test(self):
        self.root._add_test("should run later")
        self.root._set_teardown_once(self._record("root:teardown_once"))
        self._run()
        self.assertNotIn("root:teardown_once", self.calls)

    def test_setup_failure_tears_down_entered_contexts(self):
        self.outer._setup = self._record(
            "outer:setup",
            RuntimeError("failing"),
        )
        with self.assertLogs("scope.scope", level="ERROR"):
            with self.assertRaises(RuntimeError):
                self._run()
        self.assertEqual(
            self.calls,
            ["root:setup", "outer:setup", "root:teardown"],
        )

    def test_test_failure_still_runs_teardowns(self):
        with self.assertRaises(AssertionError):
            self._run(self._record("test", AssertionError("failing")))
        self.assertEqual(
            self.calls[-3:],
            ["inner:teardown", "outer:teardown", "root:teardown"],
        )

    def test_teardown_failure_does_not_stop_outer_teardowns(self):
        self.inner._teardown = self._record(
            "inner:teardown",
            RuntimeError("inner"),
        )
        self.outer._teardown = self._record(
            "outer:teardown",
            RuntimeError("outer"),
        )
        with self.assertLogs("scope.scope", level="ERROR") as logs:
            with self.assertRaises(RuntimeError) as raised:
                self._run()
        self.assertEqual(str(raised.exception), "inner")
        self.assertEqual(len(logs.records), 2)
        self.assertEqual(
            self.calls[-3:],
            ["inner:teardown", "outer:teardown", "root:teardown"],
        )

    def test_test_failure_wins_over_teardown_failure(self):
        self.inner._teardown = self._record(
            "inner:teardown",
            RuntimeError("teardown"),
        )
        with self.assertLogs("scope.scope", level="ERROR"):
            with self.assertRaises(AssertionError):
                self._run(self._record("test", AssertionError("test")))
        self.assertEqual(self.calls[-1], "root:teardown")

    def test_hooks_receive_case(self):
        received = []
        self.root._setup = lambda case: received.append(case)
        self.inner._run_setup_and_teardown(
            "case",
            "outer inner should run",
            lambda: None,
        )
        self.assertEqual(received, ["case"])


if __name__ == '__main__':
    unittest.main()
