#!/usr/bin/env python3
"""
Setup script for phylosensi package.
"""

import re
from setuptools import setup, find_packages
from pathlib import Path

# Read the README file for long description
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding='utf-8')

# Read requirements from requirements.txt
requirements = []
requirements_path = this_directory / "requirements.txt"
if requirements_path.exists():
    requirements = requirements_path.read_text().strip().split('\n')
    requirements = [req.strip() for req in requirements if req.strip() and not req.startswith('#')]

# Read version from constants without importing the package
constants = (this_directory / "phylosensi" / "core" / "constants.py").read_text(encoding='utf-8')
version = re.search(r'^VERSION = "([^"]+)"', constants, re.MULTILINE).group(1)

setup(
    name="phylosensi",
    version=version,
    description="Sensitivity analysis for phylogenetic regression: influential species and tree uncertainty",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    keywords="phylogenetics comparative-methods sensitivity-analysis pgls influential-species phylogenetic-uncertainty",
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "visualization": ["matplotlib>=3.5.0"],
        "dev": ["pytest>=6.0", "pytest-cov", "black", "flake8"],
    },
    entry_points={
        "console_scripts": [
            "phylosensi=phylosensi.cli:main",
        ],
    },
    zip_safe=False,
)
