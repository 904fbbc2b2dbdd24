"""Manage local installations of PHP for Windows."""

__version__ = "0.1.0"
