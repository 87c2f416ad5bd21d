#!/usr/bin/env python3
"""wp-dind - Setup"""

from setuptools import setup, find_packages

with open("requirements.txt") as f:
    requirements = [line for line in f.read().splitlines() if line and not line.startswith("#")]

setup(
    name="wp-dind",
    version="1.0.0",
    description="Isolated WordPress instances on a Docker-in-Docker host",
    author="wp-dind Team",
    packages=find_packages(include=["wpdind", "wpdind.*"]),
    package_data={
        "wpdind": [
            "templates/php/*.ini",
            "templates/mysql/*.cnf",
            "templates/nginx/*.j2",
            "templates/apache/*.j2",
        ],
    },
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "wp-dind=wpdind.main:main",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
