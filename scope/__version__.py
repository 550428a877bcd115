__title__ = "scope"
__description__ = "Nested contexts and fixtures for unittest and pytest tests."
__url__ = "https://github.com/scope-tests/scope"
__version__ = "0.1.0"
__author__ = "Scope Contributors"
__author_email__ = "scope-tests@users.noreply.github.com"
__license__ = "MIT"
