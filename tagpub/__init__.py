"""Ordered, tag-triggered publishing of interdependent packages."""

__version__ = "0.1.0"
