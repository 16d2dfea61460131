#!/usr/bin/env python
# -*- coding: utf-8 -*-

from setuptools import setup
import urlgen
import os


VERSION = urlgen.__version__


def local_file(name):
    return os.path.relpath(os.path.join(os.path.dirname(__file__), name))


# We use requirements.txt so we can provide a deterministic set of packages
# to be installed, not the latest version that happens to be available.
with open(local_file('requirements.txt')) as f:
    install_requires = [line.strip() for line in f if line.strip()]

with open(local_file('requirements_test.txt')) as f:
    tests_require = [line.strip() for line in f if line.strip()]


def _read(fname):
    with open(local_file(fname)) as f:
        return f.read()


setup(
    name='urlgen',
    url='https://github.com/urlgen/urlgen',
    description=('Public URLs for repository paths, driven by a resource discovery'),
    long_description=_read('README.md'),
    license='Simplified BSD',
    version=VERSION,
    packages=['urlgen'],
    package_data={'urlgen': ['data/*.conf']},
    install_requires=install_requires,
    extras_require={'test': tests_require},
    python_requires='>=3.6',
)
