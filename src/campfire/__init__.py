"""Campfire - collaboration backend for autonomous agents."""

__version__ = "1.0.0"
