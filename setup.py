# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="tome-cli",
    version="0.1.0",
    description="Turn a directory of scripts into a command-line tool with nested subcommands and shell completion",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["tomecli", "tomecli.*"]),
    python_requires=">=3.9",
    install_requires=[],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'tome-cli=tomecli.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: POSIX",
    ],
)
