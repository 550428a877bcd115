from os import path

from setuptools import setup


here = path.abspath(path.dirname(__file__))

version_loc = path.join(here, "scope", "__version__.py")
about = {}
with open(version_loc, "r") as f:
    exec(f.read(), about)


setup(
    name=about["__title__"],
    version=about["__version__"],
    description=about["__description__"],
    url=about["__url__"],
    download_url=(
        "https://github.com/scope-tests/scope/archive/{}.tar.gz"
        .format(about["__version__"])
    ),
    author=about["__author__"],
    author_email=about["__author_email__"],

    license=about["__license__"],

    classifiers=[
        "Intended Audience :: Developers",
        "Framework :: Pytest",
        "Topic :: Software Development :: Testing",
        "Topic :: Software Development :: Quality Assurance",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],

    keywords=(
        "testing test-automation unittest pytest contexts fixtures test "
        "tests development organization"
    ),
    packages=["scope", "scope.tests", "scope.test_resources"],
    python_requires=">=3.8",
    install_requires=[
        "pytest>=7",
    ],
    test_suite="scope.tests",
    entry_points={
        "pytest11": [
            "scope.pytest_scope = scope.pytest_scope",
        ],
    },
)
