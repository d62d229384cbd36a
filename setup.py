#!/usr/bin/env python

# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Setuptools installer for txpull.
"""

import pathlib

import setuptools

setuptools.setup(
    name="txpull",
    version="1.0.0",
    description="Pull items out of push sources, one Deferred at a time.",
    long_description=pathlib.Path("README.rst").read_text(encoding="utf8"),
    long_description_content_type="text/x-rst",
    license="MIT",
    package_dir={"": "src"},
    packages=setuptools.find_packages("src"),
    python_requires=">=3.8",
    install_requires=[
        "Twisted >= 24.7.0",
        "zope.interface >= 5",
        "incremental >= 22.10.0",
        "typing_extensions >= 4.2.0",
    ],
    extras_require={
        "test": ["Twisted >= 24.7.0"],
    },
    classifiers=[
        "Framework :: Twisted",
        "Programming Language :: Python :: 3",
    ],
    zip_safe=False,
)
