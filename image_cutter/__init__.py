"""Aspect-locked image cropping tool."""

__version__ = "1.0.0"
