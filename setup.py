#!/usr/bin/env python

"""
A setuptools based setup module.
See:
https://packaging.python.org/en/latest/distributing.html
https://github.com/pypa/sampleproject
"""

from pathlib import Path

# Always prefer setuptools over distutils
from setuptools import find_namespace_packages, setup

# Get the long description from the README file
long_description = (Path(__file__).parent / "README.md").read_text()

setup(
    name="sfmexport",
    version="0.1.0",
    description="Export structure-from-motion reconstructions to the NVM format",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="",
    author="",
    author_email="",
    license="BSD-3-Clause",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Operating System :: POSIX",
        "Operating System :: MacOS",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: Image Recognition",
    ],
    keywords="computer-vision",
    # Packages carry no __init__.py files.
    packages=find_namespace_packages(include=["sfmexport", "sfmexport.*"]),
    include_package_data=True,
    python_requires=">= 3.8",
    install_requires=["gtsam>=4.2", "numpy"],
    extras_require={"test": ["pytest"]},
)
