#!/usr/bin/env python3
"""
body-timeline Setup Script
"""

from pathlib import Path
from setuptools import find_packages, setup

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
if requirements_file.exists():
    requirements = [
        line.strip()
        for line in requirements_file.read_text().splitlines()
        if line.strip() and not line.startswith("#")
    ]

setup(
    name="body-timeline",
    version="0.1.0",
    description="Body file collector and MACB timeline generator for forensic triage",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="body-timeline Contributors",
    license="MIT",

    # Packages
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,

    # Requirements
    python_requires=">=3.10",
    install_requires=requirements,

    # Optional dependencies
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
        ],
    },

    # Entry points
    entry_points={
        "console_scripts": [
            "body-timeline=bodytimeline.cli:main",
        ],
    },

    # Classifiers
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Information Technology",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS",
        "Operating System :: Microsoft :: Windows",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Security",
        "Topic :: System :: Filesystems",
    ],

    # Keywords
    keywords="forensics bodyfile mactime timeline dfir",
)
