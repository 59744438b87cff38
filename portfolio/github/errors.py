"""Failure taxonomy for profile-data service requests."""

from __future__ import annotations

from typing import Literal, Optional

Resource = Literal["profile", "repositories"]

GENERIC_FAILURE_MESSAGE = "Failed to load portfolio data"

_RESOURCE_MESSAGES: dict[str, str] = {
    "profile": "Failed to load profile",
    "repositories": "Failed to load repos",
}


def failure_message(resource: Optional[str]) -> str:
    """Human-readable message for a failed resource, generic when unknown."""
    return _RESOURCE_MESSAGES.get(resource or "", GENERIC_FAILURE_MESSAGE)


class ProfileServiceError(Exception):
    """Base error for a request against the profile-data service."""

    def __init__(self, detail: str, *, resource: Optional[Resource] = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.resource = resource

    @property
    def user_message(self) -> str:
        return failure_message(self.resource)


class NetworkFailure(ProfileServiceError):
    """The request could not complete (connection, DNS, protocol error)."""


class ResponseFailure(ProfileServiceError):
    """The service answered with a non-success status code."""

    def __init__(self, detail: str, *, status_code: int, resource: Optional[Resource] = None) -> None:
        super().__init__(detail, resource=resource)
        self.status_code = status_code


class ParseFailure(ProfileServiceError):
    """The response body did not match the expected shape."""
