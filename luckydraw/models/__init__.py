"""Persistence models."""

from .credentials import StoredCredentials

__all__ = ["StoredCredentials"]
