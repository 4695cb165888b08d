#!/usr/bin/env python3
"""Setup script for file-organizer."""

from setuptools import setup

with open("README.md", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="file-organizer",
    version="1.0.0",
    description="Sort files into category folders by extension using concurrent workers",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    packages=["file_organizer"],
    python_requires=">=3.9",
    install_requires=[
        "PyYAML>=5.4",
        "tqdm>=4.60",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "organize=file_organizer.organize:main",
        ],
    },
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: System :: Filesystems",
    ],
    keywords="file organization sort extension categories",
)
