"""Monotonic request tokens for discarding superseded async results.

Updates:
  v0.1.0 - 2026-10-10 - Introduce RequestSequencer shared by the store and asset slots.
"""

from __future__ import annotations

__all__ = ["RequestSequencer"]


class RequestSequencer:
    """Issue increasing tokens and decide which completions may be applied.

    Two acceptance rules are offered:

    * :meth:`claim` accepts a completion when its token is newer than the last
      applied one, so the freshest response that has arrived wins even if an
      older request finishes later.
    * :meth:`is_current` accepts only the most recently issued token, which is
      what a display slot needs once it has been re-pointed.
    """

    def __init__(self) -> None:
        """Start with no issued and no applied tokens."""
        self._issued = 0
        self._applied = 0

    @property
    def latest(self) -> int:
        """Return the most recently issued token."""
        return self._issued

    @property
    def applied(self) -> int:
        """Return the token of the last accepted completion."""
        return self._applied

    def issue(self) -> int:
        """Return a new token greater than every token issued before."""
        self._issued += 1
        return self._issued

    def is_current(self, token: int) -> bool:
        """Return ``True`` when *token* is the most recently issued one."""
        return token == self._issued

    def claim(self, token: int) -> bool:
        """Mark *token* as applied when it is newer than the last applied token."""
        if token <= self._applied:
            return False
        self._applied = token
        return True

    def invalidate(self) -> None:
        """Supersede every outstanding token."""
        self._issued += 1
