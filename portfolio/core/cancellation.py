"""Cooperative cancellation token."""

from __future__ import annotations

from typing import Optional


class CancellationToken:
    """Advisory flag captured at activation start.

    Cancelling never aborts in-flight I/O; holders check ``cancelled``
    before mutating state and drop their result when it is set.
    """

    __slots__ = ("_cancelled", "_reason")

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: Optional[str] = None) -> bool:
        """Mark the token cancelled. Returns False if it already was."""
        if self._cancelled:
            return False
        self._cancelled = True
        self._reason = reason
        return True

    def __repr__(self) -> str:
        state = f"cancelled reason={self._reason!r}" if self._cancelled else "active"
        return f"<CancellationToken {state}>"
