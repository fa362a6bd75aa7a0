import os
from setuptools import setup

def get_version():
    v = "0.0.0"
    with open('paleotime/__init__.py') as ifile:
        for line in ifile:
            if line[:7]=='version':
                v = line.split('=')[-1].strip()[1:-1]
                break
    return v

with open("README.md", "r") as fh:
    long_description = fh.read()

setup(
        name = "phylo-paleotime",
        version = get_version(),
        description = ("Edge-matrix tree checks and MrBayes tip-dating calibrations for paleobiology"),
        long_description = long_description,
        long_description_content_type="text/markdown",
        license = "MIT",
        keywords = "Tip-dating, fossil occurrences, phylogenetics, MrBayes",
        packages=['paleotime'],
        install_requires = [
            'biopython>=1.66',
            'numpy>=1.17',
            'pandas>=0.25',
            'scipy>=1.4',
            'matplotlib>=2.0'
        ],
        extras_require = {
            'test': ['pytest'],
        },
        classifiers=[
            "Development Status :: 3 - Alpha",
            "Topic :: Scientific/Engineering :: Bio-Informatics",
            "License :: OSI Approved :: MIT License",
            "Programming Language :: Python :: 3",
            ],
        scripts=['bin/paleotime']
    )
