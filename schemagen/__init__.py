"""Schemagen: generate source code from database schemas."""

__version__ = "0.1.0"
