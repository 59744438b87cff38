"""Projection from fetch state into the page display model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from portfolio.github.contracts import FetchState, Profile, Repository

PLACEHOLDER = "—"
DEFAULT_TITLE = "Portfolio"
DEFAULT_HEADLINE = "Developer Portfolio"
DEFAULT_TAGLINE = "Building playful, modern experiences with code."
MAX_TOPICS = 3
GITHUB_WEB_URL = "https://github.com"


@dataclass(frozen=True, slots=True)
class LinkView:
    """Outbound link shown in nav, hero and footer."""

    label: str
    url: str


@dataclass(frozen=True, slots=True)
class RepositoryCard:
    """One card in the highlighted projects grid."""

    key: str
    name: str
    description: str
    url: str
    stars: str
    language: str
    has_live_demo: bool
    homepage: Optional[str]
    topics: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class DisplayModel:
    """Render-ready values; no field is ever absent where text is shown."""

    title: str
    headline: str
    tagline: str
    avatar_url: Optional[str]
    location: str
    has_location: bool
    followers: str
    following: str
    public_repos: str
    links: tuple[LinkView, ...]
    repositories: tuple[RepositoryCard, ...]
    show_projects: bool
    view_all_url: Optional[str]
    is_loading: bool
    error_message: Optional[str]


def _counter(value: Optional[int]) -> str:
    return PLACEHOLDER if value is None else str(value)


def _profile_links(profile: Optional[Profile], subject: Optional[str]) -> tuple[LinkView, ...]:
    github_url = profile.profile_url if profile is not None else None
    if github_url is None and subject:
        github_url = f"{GITHUB_WEB_URL}/{subject}"

    links: list[LinkView] = []
    if github_url:
        links.append(LinkView(label="GitHub", url=github_url))
    if profile is not None and profile.homepage_url:
        links.append(LinkView(label="Website", url=profile.homepage_url))
    return tuple(links)


def project_repository(repository: Repository) -> RepositoryCard:
    """Map a repository to its card; topics are cut to the first three."""
    return RepositoryCard(
        key=repository.full_name,
        name=repository.name,
        description=repository.description or "",
        url=repository.url or f"{GITHUB_WEB_URL}/{repository.full_name}",
        stars=str(repository.star_count),
        language=repository.primary_language or "",
        has_live_demo=repository.homepage is not None,
        homepage=repository.homepage,
        topics=tuple(repository.topics[:MAX_TOPICS]),
    )


def project(state: FetchState) -> DisplayModel:
    """Project any snapshot, including loading and error, to a display model."""
    profile = state.profile
    subject = state.subject
    cards = tuple(project_repository(repository) for repository in state.repositories)

    name = profile.display_name if profile is not None else None
    location = profile.location if profile is not None else None

    return DisplayModel(
        title=name or DEFAULT_TITLE,
        headline=name or DEFAULT_HEADLINE,
        tagline=(profile.biography if profile is not None else None) or DEFAULT_TAGLINE,
        avatar_url=profile.avatar_url if profile is not None else None,
        location=location or PLACEHOLDER,
        has_location=location is not None,
        followers=_counter(profile.follower_count if profile is not None else None),
        following=_counter(profile.following_count if profile is not None else None),
        public_repos=_counter(profile.public_repo_count if profile is not None else None),
        links=_profile_links(profile, subject),
        repositories=cards,
        show_projects=bool(cards),
        view_all_url=f"{GITHUB_WEB_URL}/{subject}?tab=repositories" if subject else None,
        is_loading=state.is_loading,
        error_message=state.error_message,
    )


def render_inputs(state: FetchState) -> tuple[DisplayModel, bool, Optional[str]]:
    """The three values handed to the rendering layer each cycle."""
    model = project(state)
    return model, model.is_loading, model.error_message
