# setup.py
from setuptools import setup, find_packages

setup(
    name="carbon_atlas",
    version="0.1.0",
    description="Zoomable multi-resolution atlas of business travel emissions",
    packages=find_packages(
        exclude=(
            "tests",
            "tests.*",
            "docs",
            "build",
            "dist",
        )
    ),
    install_requires=[
        "numpy",
        "pandas",
        "networkx",
        "matplotlib>=3.6",
        "fastapi",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "carbon-atlas=carbon_atlas.cli:main",
        ],
    },
    python_requires=">=3.10",
)
