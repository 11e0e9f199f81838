"""Median-flow box tracking and sliding-window detector stages for greyscale images."""

__version__ = "0.1.0"

__all__ = ["__version__"]