"""Synchronize a local game library with the GG.deals collection."""

__version__ = "0.4.0"
