#!/usr/bin/env python3
"""
Packaging for the EEPROM data logger.

Install with pip install -e . (add [test] for the test suite).
"""

from setuptools import setup, find_packages

setup(
    name="eeprom-datalogger",
    version="1.0.0",
    description="Circular EEPROM data logger for the Kitronik Air Quality board, with host tools",
    license="MIT",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
        "rich>=13.7.0",
        "pyserial>=3.5",
        "smbus2>=0.4.3",
    ],
    extras_require={
        "test": ["pytest>=7.4.0"],
    },
    entry_points={
        "console_scripts": [
            "eeprom-logger=eeprom_datalogger.main:main",
        ],
    },
)
