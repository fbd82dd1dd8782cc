"""
Service interfaces (ABCs) for the subgate application.

These abstract base classes define the contracts subgate consumes from its
host, enabling dependency injection, testing with fakes, and swappable
implementations.
"""

from .settings_manager_interface import SettingsChangeCallback, SettingsManagerInterface

__all__ = [
    "SettingsChangeCallback",
    "SettingsManagerInterface",
]
