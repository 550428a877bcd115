import inspect

import pytest

from scope.scope import (
    LOGGER,
    TestCase,
)


@pytest.hookimpl(tryfirst=True)
def pytest_pycollect_makeitem(collector, name, obj):
    """Collect the test classes built by a tree in declaration order.

    pytest would otherwise hand these classes to its unittest support, which
    only looks for methods starting with ``test`` and sorts them by name.
    """
    if not inspect.isclass(obj) or not issubclass(obj, TestCase):
        return None
    if obj._tree is None:
        return None
    LOGGER.debug("Collecting tree tests of {!r}.".format(name))
    return ScopeTestClass.from_parent(collector, name=name, obj=obj)


class ScopeTestClass(pytest.Collector):
    """Collects one item per test of a tree's test class."""

    @classmethod
    def from_parent(cls, parent, name, obj):
        collector = super(ScopeTestClass, cls).from_parent(parent, name=name)
        collector.obj = obj
        return collector

    def collect(self):
        for test_id in self.obj.get_test_ids():
            yield ScopeTestItem.from_parent(self, name=test_id)


class ScopeTestItem(pytest.Item):
    """A single test of a tree.

    The test runs through :meth:`unittest.TestCase.debug`, which lets
    exceptions from the test and its context fixtures reach pytest as they
    are, instead of collecting them in a :class:`unittest.TestResult`.
    """

    def runtest(self):
        __tracebackhide__ = True
        self.parent.obj(self.name).debug()

    def reportinfo(self):
        return self.path, None, "{}::{}".format(self.parent.name, self.name)
