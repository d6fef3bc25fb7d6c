#!/usr/bin/env python3
"""
Setup script for Screen Dimmer
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_path = Path(__file__).parent / "README.md"
long_description = readme_path.read_text() if readme_path.exists() else ""

setup(
    name="screen-dimmer",
    version="1.0.0",
    author="Screen Dimmer",
    description="redshift control panel for Linux: colour temperature, brightness and gamma sliders",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    include_package_data=True,
    package_data={
        "": ["*.yaml", "*.yaml.example"],
        "assets": ["*.png", "*.ico"],
    },
    python_requires=">=3.8",
    install_requires=[
        "customtkinter>=5.0.0",
        "PyYAML>=6.0",
        "Pillow>=9.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "screen-dimmer=main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: X11 Applications",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Topic :: Desktop Environment",
        "Topic :: Multimedia :: Graphics",
    ],
)
