#!/usr/bin/env python3

import os
from setuptools import setup, find_namespace_packages

install_requires = [
    "colorama",  # for colored text
    "aiofiles>=23.1",  # for accessing files asynchronously
]

extras_require = {
    "test": [
        "pytest",
        "pytest-asyncio",  # for testing asynchronous code
    ],
}

VERSION_FILE = os.path.join(os.path.dirname(__file__), "VERSION.txt")

with open(VERSION_FILE, "rt") as f:
    version = f.read().strip()

setup(
    name="duobase",
    version=version,
    description="Write once, get a blocking and an asyncio facade of the same functionality",
    packages=find_namespace_packages(include=["duo", "duo.*"]),
    install_requires=install_requires,
    extras_require=extras_require,
    python_requires=">=3.11",  # for asyncio.Barrier
    license="MIT",
)
