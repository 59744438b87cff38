"""All-or-nothing join over independent awaitables."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable


async def join_all_or_nothing(*awaitables: Awaitable[Any]) -> tuple[Any, ...]:
    """Run ``awaitables`` concurrently and wait until every one settles.

    Returns their results in argument order when all succeed. Otherwise
    raises the first failure in argument order, after the others have
    settled too; partial results are never returned.
    """
    if not awaitables:
        return ()

    results = await asyncio.gather(*awaitables, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return tuple(results)
