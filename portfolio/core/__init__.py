"""Cooperative concurrency primitives shared by the fetch pipeline."""

from portfolio.core.cancellation import CancellationToken
from portfolio.core.join import join_all_or_nothing

__all__ = ["CancellationToken", "join_all_or_nothing"]
