"""Persistence layer."""

from .database import Repository, open_repository

__all__ = ["Repository", "open_repository"]
