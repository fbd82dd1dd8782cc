"""
Configuration management module for subgate.

Handles process settings, environment variables, database configuration
and logging setup.
"""

from __future__ import annotations

__all__: list[str] = []
