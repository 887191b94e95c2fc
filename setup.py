#!/usr/bin/env python3
"""Setup script for the tradesim order execution engine."""

from setuptools import find_packages, setup

setup(
    name="tradesim",
    version="0.1.0",
    description="Order lifecycle and execution engine for a retail trading simulator",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "polars>=1.0.0",  # Fill history frames; GroupBy.len() in order statistics
        "pytz>=2023.3.0",  # For timezone support
    ],
    extras_require={
        "dev": [
            "pytest>=8.0.0",
            "pytest-cov>=5.0.0",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Financial and Insurance Industry",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
    ],
)
