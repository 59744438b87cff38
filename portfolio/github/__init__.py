"""Profile-data service client primitives."""

from portfolio.github.client import ProfileServiceClient
from portfolio.github.contracts import FetchState, FetchStatus, Profile, Repository
from portfolio.github.errors import (
    NetworkFailure,
    ParseFailure,
    ProfileServiceError,
    ResponseFailure,
)

__all__ = [
    "ProfileServiceClient",
    "FetchState",
    "FetchStatus",
    "Profile",
    "Repository",
    "ProfileServiceError",
    "NetworkFailure",
    "ResponseFailure",
    "ParseFailure",
]
