# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT

from setuptools import find_namespace_packages, setup

setup(
    name="extractguard",
    version="0.1.0",
    description="Safe last-mile write path for archive extractors",
    packages=find_namespace_packages(include=["extractguard", "extractguard.*"]),
    python_requires=">=3.10",
    install_requires=[
        "click>=8.0",  # Command line interface
        "loguru",  # Logging
        "tomlkit",  # Configuration file, preserving comments
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "extractguard=extractguard.__main__:main",
        ],
    },
    classifiers=[
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Archiving",
    ],
)
