"""
Custom exceptions for the subgate application.

This module defines domain-specific exceptions raised by the storage and
lookup layers. The access engine, list filter, redactor and writeback catch
these and resolve them to a definite decision; only the HTTP surface and the
CLI let them reach a user.
"""

from __future__ import annotations

from typing import Optional


class SubgateError(Exception):
    """Base exception for all subgate errors."""

    def __init__(self, message: str) -> None:
        """
        Initialize SubgateError.

        Parameters
        ----------
        message : str
            Human-readable error message.
        """
        self.message = message
        super().__init__(message)


class LookupFailedError(SubgateError):
    """
    Exception raised when a relational or storage lookup fails.

    Carries the identifiers needed to correlate the failure in logs.

    Attributes
    ----------
    message : str
        Human-readable error message.
    user_id : int | None
        Requesting user identifier, if the lookup was identity-scoped.
    video_id : int | str | None
        Video identifier (numeric id or uuid) the lookup concerned.
    original_error : Exception | None
        The underlying driver or ORM exception.
    """

    def __init__(
        self,
        message: str = "Lookup failed",
        user_id: Optional[int] = None,
        video_id: Optional[int | str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        self.user_id = user_id
        self.video_id = video_id
        self.original_error = original_error
        super().__init__(message)


class MembershipLookupError(LookupFailedError):
    """
    Exception raised when an administrator, ownership or follow query fails.

    Examples
    --------
    >>> try:
    ...     owned = await repo.owned_channel_ids(session, user_id=7)
    ... except MembershipLookupError as e:
    ...     logger.error("lookup failed for user %s", e.user_id)
    """


class FlagStoreError(LookupFailedError):
    """Exception raised when per-video flags cannot be read or written."""


class SettingsError(SubgateError):
    """Exception raised for invalid plugin settings operations."""


class UnknownSettingError(SettingsError):
    """
    Exception raised when a setting name is not one of the registered settings.

    Attributes
    ----------
    name : str
        The rejected setting name.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown setting: {name}")


class HookRegistrationError(SubgateError):
    """Exception raised when a handler is registered for an unknown hook target."""

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(f"Unknown hook target: {target}")


class NotFoundError(SubgateError):
    """
    Exception raised when a requested resource does not exist (HTTP 404).

    Attributes
    ----------
    resource_type : str
        Type of resource that was not found (e.g., "Video").
    identifier : str
        The identifier used in the lookup.
    """

    def __init__(self, resource_type: str, identifier: str) -> None:
        self.resource_type = resource_type
        self.identifier = identifier
        super().__init__(f"{resource_type} '{identifier}' not found")


class BadRequestError(SubgateError):
    """Exception raised for a malformed client request (HTTP 400)."""

    pass
