from scope.scope import (
    Context,
    DeclarationError,
    DuplicateTestError,
    RunOnce,
    TestCase,
    TestTree,
)

from scope.__version__ import (
    __title__,
    __description__,
    __url__,
    __version__,
    __author__,
    __author_email__,
    __license__,
)


__all__ = [
    "Context",
    "DeclarationError",
    "DuplicateTestError",
    "RunOnce",
    "TestCase",
    "TestTree",
]
