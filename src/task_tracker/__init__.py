"""Command-line task tracker backed by a local JSON file."""

__version__ = "0.1.0"
