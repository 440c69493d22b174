#!/usr/bin/env python

from setuptools import setup, find_packages
from pathlib import Path


def open_reqs_file(file, reqs_path=Path(".")):
    with (reqs_path / file).open() as f:
        reqs = list(f.read().strip().split("\n"))

    i = 0
    while i < len(reqs):
        if reqs[i].startswith("-r"):
            reqs[i : i + 1] = open_reqs_file(reqs[i][2:].strip(), reqs_path=reqs_path)
        else:
            i += 1

    return reqs


def read_version():
    namespace = {}
    exec((Path("sparsemat") / "_version.py").read_text(), namespace)
    return namespace["__version__"]


extras_require = {}
reqs = []


def parse_requires():
    reqs_path = Path("./requirements")
    reqs.extend(open_reqs_file("requirements.txt", reqs_path=reqs_path))
    for f in reqs_path.iterdir():
        if f.name == "requirements.txt":
            continue
        extras_require[f.stem] = open_reqs_file(f.parts[-1], reqs_path=reqs_path)


parse_requires()

with open("README.rst") as f:
    long_desc = f.read()

setup(
    name="sparsemat",
    version=read_version(),
    description="Hash-backed sparse integer matrices with a plain text format",
    license="BSD 3-Clause License (Revised)",
    keywords="sparse,matrix,numpy,scipy",
    packages=find_packages(include=["sparsemat", "sparsemat.*"]),
    long_description=long_desc,
    long_description_content_type="text/x-rst",
    install_requires=reqs,
    extras_require=extras_require,
    zip_safe=False,
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Operating System :: OS Independent",
        "License :: OSI Approved :: BSD License",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
    ],
    python_requires=">=3.9, <4",
)
