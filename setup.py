#!/usr/bin/python3
# SPDX-License-Identifier: LGPL-2.1-or-later

from setuptools import find_packages, setup

setup(
    name="sigen",
    version="1.0",
    description="Create standalone UEFI executables from a kernel, initrds and a command line",
    license="LGPLv2+",
    python_requires=">=3.9",
    packages=find_packages(".", exclude=["tests"]),
    entry_points={"console_scripts": ["sigen = sigen.__main__:main"]},
    extras_require={"test": ["pytest"]},
)
