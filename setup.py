#!/usr/bin/env python
"""
PyNucMap Setup Script
"""
from pathlib import Path
from setuptools import setup, find_packages

#
BASEDIR = Path(__file__).parent.absolute()


def _get_version():
    """Read VERSION from the package without importing it."""
    with open(BASEDIR / "PyNucMap" / "__init__.py") as f:
        for line in f:
            if line.startswith("VERSION"):
                return line.split('=')[1].strip().strip('"\'')
    raise RuntimeError("Unable to find VERSION in PyNucMap/__init__.py")


def _setup():
    setup(
        name="PyNucMap",
        version=_get_version(),
        description="Nucleosome positioning, occupancy and fuzziness "
                    "from nucleosome midpoint signal tracks",
        packages=find_packages(include=["PyNucMap", "PyNucMap.*"]),
        python_requires=">=3.8",
        install_requires=[
            "numpy>=1.17",
            "pyBigWig>=0.3.18",
            "typing_extensions>=4.0; python_version<'3.11'",
        ],
        extras_require={
            "test": [
                "pytest>=6.0",
                "pytest-cov",
            ],
        },
        entry_points={
            "console_scripts": [
                "pynucmap = PyNucMap.pynucmap:main",
                "pynucmap-verify = PyNucMap.verify:main",
            ],
        },
        classifiers=[
            "Programming Language :: Python :: 3",
            "Topic :: Scientific/Engineering :: Bio-Informatics",
        ],
    )


if __name__ == "__main__":
    _setup()
