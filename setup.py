# -*- coding: utf-8 -*-
"""
Setup Module
"""
from setuptools import find_packages, setup

with open("README.md", "r") as fh:
    long_description = fh.read()

setup(
    name="pycr2res",
    version="0.1.0",
    description="Detector level reduction tools for cross-dispersed echelle spectrographs",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["pycr2res", "pycr2res.*"]),
    package_data={"pycr2res": ["settings/*.json"]},
    include_package_data=True,
    python_requires=">=3.9",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
    ],
    install_requires=[
        "numpy",
        "scipy",
        "astropy",
        "matplotlib",
        "jsonschema>=3.0.1",
        "tqdm",
        "colorlog",
    ],
    extras_require={"test": ["pytest"]},
)
