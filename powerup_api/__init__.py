"""Procore Power-Up capture backend."""

__version__ = "1.0.0"
