"""
Host integration for subgate.

Exposes the hook targets, setting definitions and per-video form fields
subgate registers with its host, and the ``register`` entry point wiring
them to the services.
"""

from __future__ import annotations

__all__: list[str] = []
