#!/usr/bin/env python3
"""
Setup script for SpellSwitch
"""

from setuptools import setup, find_packages
import os
import sys

# Import the version without importing the package (and its dependencies)
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'spellswitch'))
from __version__ import __version__

# Read README for long_description
def read_file(filename):
    with open(os.path.join(os.path.dirname(__file__), filename), encoding='utf-8') as f:
        return f.read()

setup(
    name='spellswitch',
    version=__version__,
    description='Adaptive spell checking that follows the language being typed',
    long_description=read_file('README.md'),
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['tests', 'tests.*', 'docs']),
    python_requires='>=3.10',
    install_requires=[
        'httpx',           # Dictionary downloads
        'pyspellchecker',  # Spell check engine (word-frequency dictionaries)
        'langdetect',      # Language classification of text samples
    ],
    extras_require={
        'dev': [
            'pytest>=7.0',
            'pytest-asyncio',
            'pytest-cov',
            'pytest-timeout',
        ],
    },
    entry_points={
        'console_scripts': [
            'spellswitch=spellswitch.cli:main',
        ],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Topic :: Text Processing :: Linguistic',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Programming Language :: Python :: 3.13',
    ],
)
