# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Setup configuration for logcontrol package."""

from pathlib import Path

from setuptools import find_packages, setup

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

setup(
    name="logcontrol",
    version="0.1.0",
    author="Copilot-for-Consensus Contributors",
    description="Live log level control for distributed components through a watchable KV store",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        # No required dependencies for the in-memory store
    ],
    extras_require={
        "redis": [
            "redis>=5.0.0",  # Redis store with keyspace notification watches
        ],
        "prometheus": [
            "prometheus-client>=0.19.0",  # Prometheus metrics client
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "pylint>=3.0.0",
            "mypy>=1.0.0",
            "redis>=5.0.0",
            "prometheus-client>=0.19.0",
        ],
    },
)
