"""
Confirmation barrier between hands.

After a hand ends, the next one is held back until every player who still
has chips has acknowledged the result. There is no timeout: an unresponsive
player holds the table until they confirm or leave.
"""

from __future__ import annotations
from typing import Iterable, List, Set


class ConfirmationBarrier:
    """Tracks which players still owe a confirmation."""

    def __init__(self, required: Iterable[str]):
        self.required: Set[str] = set(required)
        self.confirmed: Set[str] = set()

    def confirm(self, player_id: str) -> bool:
        """Record a confirmation. Returns False if it was already recorded."""
        if player_id in self.confirmed:
            return False
        self.confirmed.add(player_id)
        return True

    def release(self, player_id: str) -> None:
        """Stop waiting on a player who left the table."""
        self.required.discard(player_id)

    @property
    def pending(self) -> List[str]:
        return sorted(self.required - self.confirmed)

    @property
    def is_satisfied(self) -> bool:
        return self.required <= self.confirmed

    def __repr__(self) -> str:
        return f"ConfirmationBarrier(confirmed={len(self.confirmed & self.required)}/{len(self.required)})"
