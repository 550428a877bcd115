import inspect
import logging
import unittest
from contextlib import contextmanager
from fnmatch import fnmatchcase
from types import FunctionType


LOGGER = logging.getLogger(__name__)

PYTEST_PLUGIN = "scope.pytest_scope"
TEST_CASES_ATTR = "__scope_test_cases__"
ROOT_DESCRIPTION = "(root)"


class DeclarationError(Exception):
    """Raise when a :class:`.TestTree` is declared incorrectly."""


class DuplicateTestError(DeclarationError):
    """Raise when two tests of a :class:`.TestTree` share an identifier."""


def _call_with_case(func, case):
    """Call a hook or test function, passing it the test case if it wants it.

    Functions that take no arguments are called without any, so simple hooks
    don't need to declare a parameter they don't use.
    """
    __tracebackhide__ = True
    if inspect.signature(func).parameters:
        func(case)
    else:
        func()


class RunOnce(object):
    """A hook that only calls its function the first time it is invoked.

    The flag is flipped before the function is called, so a function that
    raises is still considered to have run and won't be attempted again by
    the next test.
    """

    def __init__(self, func):
        self._func = func
        self.has_run = False

    def __call__(self, case):
        __tracebackhide__ = True
        if self.has_run:
            return
        self.has_run = True
        _call_with_case(self._func, case)


class Context(object):
    """A named node of a test tree.

    A context holds the identifiers of the tests declared directly inside of
    it and its child contexts in a single list, in the order they were
    declared. Keeping both in the same list is what lets a context figure out
    which test is the very last one to run inside of it (including inside its
    descendants), which is when its ``teardown_once`` hook has to run.
    """

    def __init__(self, name, parent=None):
        self._name = name
        self._parent = parent
        self._children = []
        self._setup = None
        self._teardown = None
        self._setup_once = None
        self._teardown_once = None

    def __repr__(self):
        return "<Context {!r}>".format(self._full_name or ROOT_DESCRIPTION)

    @property
    def _level(self):
        """The number of connections between the context and the root."""
        level = 0
        parent = self._parent
        while parent is not None:
            level += 1
            parent = parent._parent
        return level

    @property
    def _ancestry(self):
        """The ancestry of a specific :class:`.Context` from child to root.

        If contexts are declared like this::

            with TestTree("Tree") as T:
                with T.context("A"):
                    with T.context("B"):
                        # do something

        Context B's parent is A, and A's parent is the root context of the
        tree, so the ancestry of B would look like this:

        .. code-block:: none

            [B, A, <root>]
        """
        ancestry = []
        context = self
        while context is not None:
            ancestry.append(context)
            context = context._parent
        return ancestry

    @property
    def _full_name(self):
        """The names of the contexts from below the root down to this one."""
        return " ".join(
            context._name for context in reversed(self._ancestry[:-1])
        )

    def _get_full_ancestry_description(self, indented=False):
        """The ancestry of this :class:`.Context` from the root down.

        Each context is put on its own line, indented according to its
        level, so the context of a log message can be read at a glance:

        .. code-block:: none

            A
              B

        The root context has no name of its own, so it is only described
        when it is the context being asked about.
        """
        padding = "  " if indented else ""
        lines = [
            "{padding}{indent}{name}".format(
                padding=padding,
                indent=("  " * (context._level - 1)),
                name=context._name,
            )
            for context in reversed(self._ancestry[:-1])
        ]
        if not lines:
            lines.append(padding + ROOT_DESCRIPTION)
        return "\n".join(lines)

    def _add_child(self, name):
        """Add a child :class:`.Context` that knows this one is its parent."""
        child = Context(name, parent=self)
        self._children.append(child)
        return child

    def _add_test(self, test_id):
        self._children.append(test_id)

    def _set_setup_once(self, func):
        self._setup_once = RunOnce(func)

    def _set_teardown_once(self, func):
        self._teardown_once = RunOnce(func)

    def _test_ids(self):
        """The identifiers of every test in this subtree, in run order."""
        test_ids = []
        for child in self._children:
            if isinstance(child, Context):
                test_ids.extend(child._test_ids())
            else:
                test_ids.append(child)
        return test_ids

    @property
    def _last_test(self):
        """The identifier of the last test to run anywhere in this subtree.

        Child contexts without any tests in them are skipped over, and
        ``None`` is returned if there are no tests in the subtree at all.
        """
        for child in reversed(self._children):
            if not isinstance(child, Context):
                return child
            last_test = child._last_test
            if last_test is not None:
                return last_test
        return None

    def _setup_for_test(self, case):
        """Run the ``setup_once`` and ``setup`` hooks of this context."""
        __tracebackhide__ = True
        try:
            if self._setup_once is not None and not self._setup_once.has_run:
                LOGGER.debug(
                    "Running setup_once for context:\n{}".format(
                        self._get_full_ancestry_description(indented=True),
                    ),
                )
                self._setup_once(case)
            if self._setup is not None:
                LOGGER.debug(
                    "Running setup for context:\n{}".format(
                        self._get_full_ancestry_description(indented=True),
                    ),
                )
                _call_with_case(self._setup, case)
        except Exception:
            LOGGER.error(
                "Couldn't complete setups for the context due to exception:"
                "\n{}".format(
                    self._get_full_ancestry_description(indented=True),
                ),
                exc_info=True,
            )
            raise

    def _teardowns_for_test(self, test_id):
        """The teardown hooks to run once the given test is done."""
        teardowns = []
        if self._teardown is not None:
            teardowns.append(("teardown", self._teardown))
        if self._teardown_once is not None and self._last_test == test_id:
            teardowns.append(("teardown_once", self._teardown_once))
        return teardowns

    def _run_setup_and_teardown(self, case, test_id, runner):
        """Run a test of this context, wrapped in the fixtures of its ancestry.

        The setups of every context from the root down to this one are run,
        then ``runner`` (which should run the test itself), and then the
        teardowns of those same contexts from this one back up to the root.

        The teardowns of a context are only run if its setups got all the way
        through, but once that's the case they will be attempted no matter
        what fails afterwards. If the setups or the test raise, that exception
        is the one that propagates once the teardowns are done. Otherwise, the
        first exception raised by a teardown is. Teardown exceptions that
        don't propagate are still logged.
        """
        __tracebackhide__ = True
        entered = []
        completed = False
        try:
            for context in reversed(self._ancestry):
                context._setup_for_test(case)
                entered.append(context)
            LOGGER.debug(
                "Running test:\n{}\n{}{}".format(
                    self._get_full_ancestry_description(indented=True),
                    ("  " * (self._level + 1)),
                    test_id,
                ),
            )
            runner()
            LOGGER.debug("Test completed successfully.")
            completed = True
        finally:
            error = _teardown_contexts(case, test_id, reversed(entered))
            if completed and error is not None:
                raise error


def _teardown_contexts(case, test_id, contexts):
    """Run the teardowns of each context, returning the first exception."""
    first_error = None
    for context in contexts:
        for label, teardown in context._teardowns_for_test(test_id):
            LOGGER.debug(
                "Running {} for context:\n{}".format(
                    label,
                    context._get_full_ancestry_description(indented=True),
                ),
            )
            try:
                _call_with_case(teardown, case)
            except Exception as e:
                LOGGER.error(
                    "Couldn't complete {} for the context due to exception:"
                    "\n{}".format(
                        label,
                        context._get_full_ancestry_description(indented=True),
                    ),
                    exc_info=True,
                )
                if first_error is None:
                    first_error = e
    LOGGER.debug("Teardowns complete.")
    return first_error


class TestCase(unittest.TestCase):
    """The base test class for the tests of a :class:`.TestTree`.

    :meth:`.TestTree.create_tests` builds a subclass of this for each tree,
    with one test method per test of the tree, named after the test's
    identifier. Each of those methods runs the test wrapped in the fixtures
    of its contexts, so whatever the test or those fixtures raise is recorded
    by the test runner the same way as for any other test method.

    Test runners sort test methods alphabetically, so the tests are exposed
    in the order they were declared through :meth:`.get_test_ids` and
    :meth:`.suite` instead.
    """

    _tree = None

    def __str__(self):
        return self._testMethodName

    @classmethod
    def get_test_ids(cls):
        """The identifiers of the tests of this class, in declaration order."""
        if cls._tree is None:
            return []
        return cls._tree.get_test_ids()

    @classmethod
    def suite(cls):
        """A :class:`unittest.TestSuite` of this class's tests, in order."""
        return unittest.TestSuite(
            cls(test_id) for test_id in cls.get_test_ids()
        )

    def _run_scoped_test(self):
        __tracebackhide__ = True
        test_id = self._testMethodName
        context = self._tree._context_for_test[test_id]
        func = self._tree._tests[test_id]
        context._run_setup_and_teardown(
            self,
            test_id,
            lambda: _call_with_case(func, self),
        )


# Shared by every generated test method. It has no docstring, as the runner
# would otherwise show it as the description of every test.
def _scoped_test(self):
    __tracebackhide__ = True
    self._run_scoped_test()


class TestTree(object):
    """A builder for a tree of contexts, their fixtures, and their tests.

    :param description: The name of the test class the tree will create.
    :type description: str
    :param test_prefix: What to put in front of the name of every test.
    :type test_prefix: str

    The tree always has a root context, so tests and fixtures can be declared
    without opening a context first. Contexts are opened with
    :meth:`.context`, and everything declared while a context is open goes
    into that context.

    Example::

        with TestTree("Main Tests") as T:

            @T.setup
            def setUp():
                T.value = 1

            @T.should("have a value of 1")
            def test(case):
                case.assertEqual(T.value, 1)

            with T.context("when the value is incremented"):

                @T.setup
                def setUp():
                    T.value += 1

                @T.should("have a value of 2")
                def test(case):
                    case.assertEqual(T.value, 2)

        T.create_tests(globals())

    Since the hooks and tests of a tree don't share a single test case
    instance, the tree itself is a convenient place to hold on to any state
    they need to share.
    """

    __test__ = False
    test_prefix = "should "

    def __init__(self, description, test_prefix=None):
        if test_prefix is None:
            test_prefix = self.test_prefix
        self._description = description
        self._test_prefix = test_prefix
        self._root = Context("")
        self._contexts = [self._root]
        self._tests = {}
        self._context_for_test = {}
        self._declared_test_ids = set()
        self._focus_enabled = False
        self._focus_next = False
        self._inside_focused_context = False
        self._test_case = None

    def __enter__(self):
        """Provide the tree when entering the context."""
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback):
        """Handle exiting the context."""
        return False

    @property
    def _current_context(self):
        return self._contexts[-1]

    def _check_declarable(self):
        if self._test_case is not None:
            raise DeclarationError(
                "tests were already created for {!r}".format(
                    self._description,
                ),
            )

    @contextmanager
    def context(self, name):
        """Use a new child context of the current context for this block.

        :param name: The name of the context
        :type name: str

        Example::

            with TestTree("Main Tests") as T:

                with T.context("Child Context"):

                    @T.should("do something")
                    def test(case):
                        pass

        The name of the context becomes part of the identifier of every test
        declared inside of it. The context is closed when the block is left,
        even if the block raises.
        """
        self._check_declarable()
        context_focused = False
        if self._focus_enabled and self._focus_next:
            self._focus_next = False
            self._inside_focused_context = True
            context_focused = True
        self._contexts.append(self._current_context._add_child(name))
        try:
            yield self
        finally:
            self._contexts.pop()
            if context_focused:
                self._inside_focused_context = False

    def should(self, name):
        """Add the decorated function to the current context as a test.

        :param name: The name of the test or the test function itself
        :type name: str or function

        This decorator takes an optional argument for the name of the test.
        If not provided, the docstring of the function will be used as the
        name.

        The identifier of the test is the names of the contexts it's in,
        followed by the tree's ``test_prefix`` and the name of the test, all
        separated by spaces. Declaring two tests with the same identifier
        raises a :class:`.DuplicateTestError`.

        Example::

            with TestTree("Main Tests") as T:

                @T.should("do something")
                def test(case):
                    case.assertTrue(True)

        .. note::
            To avoid any extra functions running by accident, this decorator
            will NOT return any replacement function.
        """

        def decorator(func):
            self._add_test(test_name, func)

        if isinstance(name, FunctionType):
            test_name = (name.__doc__ or "").strip()
            if not test_name:
                raise DeclarationError(
                    "test function {!r} has no name or docstring".format(
                        name.__name__,
                    ),
                )
            decorator(name)
        else:
            test_name = name
            return decorator

    def _get_test_id(self, name):
        context_name = self._current_context._full_name
        test_name = self._test_prefix + name
        if context_name:
            return "{} {}".format(context_name, test_name)
        return test_name

    def _add_test(self, name, func):
        self._check_declarable()
        test_id = self._get_test_id(name)
        if test_id in self._declared_test_ids:
            raise DuplicateTestError(
                "test {!r} is declared more than once in {!r}".format(
                    test_id,
                    self._description,
                ),
            )
        self._declared_test_ids.add(test_id)
        if self._focus_enabled:
            if not (self._focus_next or self._inside_focused_context):
                LOGGER.debug("Discarding unfocused test: {}".format(test_id))
                return
            self._focus_next = False
        self._tests[test_id] = func
        self._context_for_test[test_id] = self._current_context
        self._current_context._add_test(test_id)

    def setup(self, func):
        """Add the decorated function to the current context as its setup.

        The setup runs before every test in the current context, including
        those of its descendants, after the setups of the contexts above it.
        Declaring another setup in the same context replaces this one.
        """
        self._check_declarable()
        self._current_context._setup = func

    def teardown(self, func):
        """Add the decorated function to the current context as its teardown.

        The teardown runs after every test in the current context, including
        those of its descendants, before the teardowns of the contexts above
        it. It runs even if the test fails, as long as the setups of the
        current context completed. Declaring another teardown in the same
        context replaces this one.
        """
        self._check_declarable()
        self._current_context._teardown = func

    def setup_once(self, func):
        """Add the decorated function to the current context as setup_once.

        It runs a single time, right before the setups of the current context
        for the first test in it (or in its descendants) to run. It's meant
        for fixtures that are too costly to build for every test.
        """
        self._check_declarable()
        self._current_context._set_setup_once(func)

    def teardown_once(self, func):
        """Add the decorated function to the current context as teardown_once.

        It runs a single time, right after the teardown of the current
        context for the very last test in it, even if that test belongs to a
        context nested several levels below it.
        """
        self._check_declarable()
        self._current_context._set_teardown_once(func)

    def focus(self):
        """Only keep the next test or context that gets declared.

        Every test declared before this was called is discarded, and so is
        every test declared afterwards, except for the very next test, or
        every test inside the very next context. Calling it again starts
        over, so only the last focus is honored.

        Example::

            with TestTree("Main Tests") as T:

                @T.should("not run")
                def test(case):
                    pass

                T.focus()
                with T.context("Focused Context"):

                    @T.should("run")
                    def test(case):
                        pass

                @T.should("also not run")
                def test(case):
                    pass
        """
        self._check_declarable()
        for test_id, context in self._context_for_test.items():
            LOGGER.debug("Discarding unfocused test: {}".format(test_id))
            context._children.remove(test_id)
        self._context_for_test.clear()
        self._tests.clear()
        self._focus_enabled = True
        self._focus_next = True
        self._inside_focused_context = False

    def get_test_ids(self):
        """The identifiers of the tests of the tree, in declaration order.

        This is a depth-first walk of the tree, so the tests of a context are
        all run before anything declared after that context.
        """
        return self._root._test_ids()

    def create_tests(self, mod):
        """Create the test class that will be discovered by the test runner.

        :param mod: :func:`.globals`

        This builds a :class:`.TestCase` subclass named after the tree's
        description, with a test method for each of the tree's tests, and
        puts it in the module's namespace. A ``load_tests`` function is also
        put there (wrapping any that's already there) so :mod:`unittest`
        runs the tests in the order they were declared, along with the
        ``pytest_plugins`` needed for pytest to do the same.

        Example::

            with TestTree("Main Tests") as T:

                @T.should("do something")
                def test(case):
                    pass

            T.create_tests(globals())
        """
        if len(self._contexts) > 1:
            raise DeclarationError(
                "context {!r} is still open".format(
                    self._current_context._full_name,
                ),
            )
        self._check_declarable()
        attrs = {"_tree": self}
        for test_id in self.get_test_ids():
            if hasattr(TestCase, test_id):
                raise DeclarationError(
                    "test {!r} would hide an attribute of TestCase".format(
                        test_id,
                    ),
                )
            attrs[test_id] = _scoped_test
        test_case = type(str(self._description), (TestCase,), attrs)
        test_case.__module__ = mod["__name__"]
        mod[test_case.__name__] = test_case
        _add_pytest_plugin(mod)
        _add_load_tests(mod, test_case)
        self._test_case = test_case
        LOGGER.debug(
            "Created {} tests for {!r}.".format(
                len(attrs) - 1,
                self._description,
            ),
        )
        return test_case


def _add_pytest_plugin(mod):
    plugins = mod.get("pytest_plugins")
    if plugins is None:
        mod["pytest_plugins"] = [PYTEST_PLUGIN]
    elif isinstance(plugins, str):
        if plugins != PYTEST_PLUGIN:
            mod["pytest_plugins"] = [plugins, PYTEST_PLUGIN]
    elif PYTEST_PLUGIN not in plugins:
        mod["pytest_plugins"] = list(plugins) + [PYTEST_PLUGIN]


def _add_load_tests(mod, test_case):
    """Register a test class with the module's ``load_tests`` function.

    :class:`unittest.TestLoader` only finds the test methods of the generated
    classes whose names happen to start with ``test``, and sorts those by
    name. The ``load_tests`` protocol lets the module drop whatever the loader
    found in those classes and hand over suites with every test in
    declaration order instead.
    """
    test_cases = mod.setdefault(TEST_CASES_ATTR, [])
    test_cases.append(test_case)
    load_tests = mod.get("load_tests")
    if not getattr(load_tests, "_scope_load_tests", False):
        mod["load_tests"] = _build_load_tests(load_tests, test_cases)


def _without_test_cases(tests, test_cases):
    """A copy of a suite without any of the tests of the given classes."""
    suite = unittest.TestSuite()
    for test in tests:
        if isinstance(test, unittest.TestSuite):
            suite.addTest(_without_test_cases(test, test_cases))
        elif type(test) not in test_cases:
            suite.addTest(test)
    return suite


def _matches_name_patterns(loader, test):
    """Whether the test is selected by the loader's ``-k`` patterns."""
    patterns = getattr(loader, "testNamePatterns", None)
    if not patterns:
        return True
    return any(fnmatchcase(test.id(), pattern) for pattern in patterns)


def _build_load_tests(wrapped, test_cases):

    def load_tests(loader, tests, pattern):
        if wrapped is not None:
            tests = wrapped(loader, tests, pattern)
        tests = _without_test_cases(tests, test_cases)
        for test_case in test_cases:
            tests.addTest(
                unittest.TestSuite(
                    test for test in test_case.suite()
                    if _matches_name_patterns(loader, test)
                ),
            )
        return tests

    load_tests._scope_load_tests = True
    return load_tests
