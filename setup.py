#!/usr/bin/env python3
"""
TTL-Cache Setup Script
======================
Allows installation of the ttl-cache package.

Usage:
    pip install -e .           # Development install
    pip install -e .[test]     # With test dependencies
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="ttl-cache",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "ttl-cache=ttl_cache.shell:main",
        ],
    },
)
