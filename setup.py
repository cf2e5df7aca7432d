#!/usr/bin/env python
"""
Copyright 2024 Hathor Labs

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

   http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

from setuptools import find_packages, setup

from lovelyswap import __version__

install_requires = [
    'colorama>=0.4',
    'configargparse>=1.5',
    'cryptography>=42.0',
    'pycryptodome>=3.19',
    'pydantic>=2.0,<3.0',
    'pyyaml>=6.0',
    'structlog>=22.3',
    'twisted>=23.8',
    'typing_extensions>=4.7',
    'zope.interface>=6.0',
]

setup(
    name='lovelyswap',
    version=__version__,
    description='Lovely Swap: constant-product AMM contracts with token listing and trading competitions',
    author='Hathor Team',
    author_email='contact@hathor.network',
    url='https://hathor.network/',
    license='Apache License 2.0',
    entry_points={
        'console_scripts': ['lovelyswap-cli=lovelyswap.cli.main:main'],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.11',
        'Operating System :: OS Independent',
        'License :: OSI Approved :: Apache Software License',
    ],
    python_requires='>=3.11',
    packages=find_packages(exclude=('tests', 'tests.*')),
    package_data={'lovelyswap.conf': ['*.yml']},
    install_requires=install_requires,
    extras_require={
        'test': ['pytest>=7.4'],
    },
)
