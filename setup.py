#!/usr/bin/env python3
"""
crc-kv Setup Script
===================
Allows installation of the crc-kv package.

Usage:
    pip install -e .           # Development install
    pip install -e .[test]     # With test dependencies
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="crc-kv",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "crckv-server=crckv.server:main",
            "crckv-client=crckv.client:main",
        ],
    },
)
