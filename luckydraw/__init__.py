"""Cafe24-backed lucky-draw entry service."""

__version__ = "0.1.0"
