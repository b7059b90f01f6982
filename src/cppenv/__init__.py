"""Reproducible C++ build environments."""

__version__ = "0.1.0"
