"""Typed contracts for profile-data service payloads and fetch state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence

from portfolio.github.errors import ParseFailure
from portfolio.utils.helpers import clean_text, coerce_count


class FetchStatus(str, Enum):
    """Lifecycle status of one activation."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Profile:
    """Profile wire shape; every field except the handle may be absent."""

    handle: str
    display_name: Optional[str] = None
    biography: Optional[str] = None
    avatar_url: Optional[str] = None
    homepage_url: Optional[str] = None
    location: Optional[str] = None
    follower_count: Optional[int] = None
    following_count: Optional[int] = None
    public_repo_count: Optional[int] = None
    profile_url: Optional[str] = None

    @classmethod
    def from_payload(cls, handle: str, payload: Any) -> "Profile":
        if not isinstance(payload, dict):
            raise ParseFailure(
                f"profile body must be a JSON object, got {type(payload).__name__}",
                resource="profile",
            )

        return cls(
            handle=handle,
            display_name=clean_text(payload.get("name")),
            biography=clean_text(payload.get("bio")),
            avatar_url=clean_text(payload.get("avatar_url")),
            homepage_url=clean_text(payload.get("blog")),
            location=clean_text(payload.get("location")),
            follower_count=coerce_count(payload.get("followers")),
            following_count=coerce_count(payload.get("following")),
            public_repo_count=coerce_count(payload.get("public_repos")),
            profile_url=clean_text(payload.get("html_url")),
        )


@dataclass(frozen=True, slots=True)
class Repository:
    """Repository wire shape as listed on the projects grid."""

    full_name: str
    name: str
    url: Optional[str] = None
    description: Optional[str] = None
    star_count: int = 0
    primary_language: Optional[str] = None
    homepage: Optional[str] = None
    topics: tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, payload: Any) -> "Repository":
        if not isinstance(payload, dict):
            raise ParseFailure(
                f"repository entry must be a JSON object, got {type(payload).__name__}",
                resource="repositories",
            )

        name = clean_text(payload.get("name"))
        full_name = clean_text(payload.get("full_name")) or name
        if full_name is None:
            raise ParseFailure("repository entry has neither full_name nor name", resource="repositories")

        raw_topics = payload.get("topics")
        topics = raw_topics if isinstance(raw_topics, list) else []

        return cls(
            full_name=full_name,
            name=name or full_name.split("/")[-1],
            url=clean_text(payload.get("html_url")),
            description=clean_text(payload.get("description")),
            star_count=coerce_count(payload.get("stargazers_count")) or 0,
            primary_language=clean_text(payload.get("language")),
            homepage=clean_text(payload.get("homepage")),
            topics=tuple(topic for topic in (clean_text(t) for t in topics) if topic),
        )

    @classmethod
    def list_from_payload(cls, payload: Any) -> tuple["Repository", ...]:
        if not isinstance(payload, list):
            raise ParseFailure(
                f"repositories body must be a JSON array, got {type(payload).__name__}",
                resource="repositories",
            )
        return tuple(cls.from_payload(item) for item in payload)


@dataclass(frozen=True, slots=True)
class FetchState:
    """One immutable snapshot of an activation.

    Exactly one status holds; success carries a profile, error carries a
    message, and no other status carries data.
    """

    status: FetchStatus = FetchStatus.IDLE
    subject: Optional[str] = None
    profile: Optional[Profile] = None
    repositories: tuple[Repository, ...] = field(default_factory=tuple)
    error_message: Optional[str] = None

    def __post_init__(self) -> None:
        if self.status == FetchStatus.SUCCESS:
            if self.profile is None:
                raise ValueError("success state requires a profile")
            if self.error_message is not None:
                raise ValueError("success state cannot carry an error message")
        elif self.status == FetchStatus.ERROR:
            if not self.error_message:
                raise ValueError("error state requires an error message")
            if self.profile is not None or self.repositories:
                raise ValueError("error state cannot carry partial data")
        elif self.profile is not None or self.repositories or self.error_message is not None:
            raise ValueError(f"{self.status.value} state cannot carry data")

        if self.status != FetchStatus.IDLE and not self.subject:
            raise ValueError(f"{self.status.value} state requires a subject")

    @classmethod
    def idle(cls) -> "FetchState":
        return cls()

    @classmethod
    def loading(cls, subject: str) -> "FetchState":
        return cls(status=FetchStatus.LOADING, subject=subject)

    @classmethod
    def succeeded(
        cls,
        subject: str,
        profile: Profile,
        repositories: Sequence[Repository],
    ) -> "FetchState":
        return cls(
            status=FetchStatus.SUCCESS,
            subject=subject,
            profile=profile,
            repositories=tuple(repositories),
        )

    @classmethod
    def failed(cls, subject: str, message: str) -> "FetchState":
        return cls(status=FetchStatus.ERROR, subject=subject, error_message=message)

    @property
    def is_loading(self) -> bool:
        return self.status == FetchStatus.LOADING

    @property
    def is_success(self) -> bool:
        return self.status == FetchStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status == FetchStatus.ERROR

    @property
    def is_terminal(self) -> bool:
        return self.status in (FetchStatus.SUCCESS, FetchStatus.ERROR)
