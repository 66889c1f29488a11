#!/usr/bin/env python3
import os

from setuptools import find_packages, setup


def read_version():
    version = {}
    here = os.path.dirname(os.path.realpath(__file__))
    with open(os.path.join(here, "src", "pyrawcomp", "_version.py")) as f:
        exec(f.read(), version)
    return version["version"]


setup(
    name="pyrawcomp",
    version=read_version(),
    author="LEGEND",
    description="Lossless compression of digitizer ADC waveforms",
    long_description="",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=[
        "colorlog",
        "numba",
        "numpy",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    zip_safe=False,
)
