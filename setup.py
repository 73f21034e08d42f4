#!/usr/bin/env python

"""
A setuptools based setup module.
See:
https://packaging.python.org/en/latest/distributing.html
https://github.com/pypa/sampleproject
"""

from pathlib import Path

from setuptools import find_packages, setup

# Get the long description from the README file
long_description = (Path(__file__).parent / "README.md").read_text(encoding="utf-8")

setup(
    name="scene-clustering",
    version="0.1.0",
    description="Hierarchical, overlapping partitioning of image match graphs for divide-and-conquer SfM",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="",
    author="",
    author_email="",
    license="BSD-3-Clause",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Operating System :: POSIX",
        "Operating System :: MacOS",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: Image Recognition",
    ],
    keywords="computer-vision structure-from-motion graph-partitioning",
    packages=find_packages(include=["scene_clustering", "scene_clustering.*"]),
    package_data={"scene_clustering.configs": ["*.yaml", "partitioner/*.yaml"]},
    include_package_data=True,
    python_requires=">= 3.10",
    install_requires=[
        "dask[distributed]",
        "hydra-core>=1.2",
        "networkx",
        "numpy",
        "omegaconf",
    ],
    extras_require={"test": ["pytest"]},
)
