"""File-backed repositories for first-class domain objects."""

from __future__ import annotations

from .events import EventFileRepository

__all__ = ["EventFileRepository"]
