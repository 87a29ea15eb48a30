# -*- coding: utf-8 -*-

from setuptools import setup, find_packages


setup(
    name="tabsak",
    version="0.1.0",
    description="Beat-track driven measure timelines and grid quantization for rhythm game charts",
    author="David Youd",
    author_email="cryptoboy@gmail.com",
    packages=find_packages(exclude=["tests"]),
    python_requires=">=3.8",
    install_requires=[
        "mido",
        "more-itertools",
    ],
    extras_require={
        "test": [
            "parameterized",
            "pytest",
        ],
    },
    entry_points={"console_scripts": []},
    classifiers=[
        "Environment :: Console",
        "Intended Audience :: Developers",
        'License :: OSI Approved :: MIT License',
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: Implementation :: CPython",
    ],
)
