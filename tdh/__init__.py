"""Nested to-do lists with position paths, short IDs, queries and atomic JSON storage."""

__version__ = "0.1.0"