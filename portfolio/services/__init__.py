"""Pure services over fetched portfolio data."""

from portfolio.services.presentation import (
    PLACEHOLDER,
    DisplayModel,
    LinkView,
    RepositoryCard,
    project,
    project_repository,
    render_inputs,
)

__all__ = [
    "PLACEHOLDER",
    "DisplayModel",
    "LinkView",
    "RepositoryCard",
    "project",
    "project_repository",
    "render_inputs",
]
