"""Build the vmfkit package."""
from setuptools import setup


# All metadata is in pyproject.toml.
setup()
