"""Adapters for external systems: the GG.deals API and file-based host collaborators."""
