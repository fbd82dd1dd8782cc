"""
Database module for subgate.

Contains the SQLAlchemy models for the host tables subgate queries and the
key-value tables it owns.
"""

from __future__ import annotations

__all__: list[str] = []
