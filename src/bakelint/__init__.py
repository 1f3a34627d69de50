"""Bakelint - convention rule engine for TypeScript source trees."""

__version__ = "0.1.0"
