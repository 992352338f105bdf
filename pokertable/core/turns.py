"""
Turn scheduling for a betting round.

Decides who acts next, when a betting round is over, and owns the
single-shot action timer that folds a player who takes too long.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Sequence, Tuple
import asyncio
import logging

from pokertable.core.player import Player
from pokertable.core.rules import Stage

if TYPE_CHECKING:
    from pokertable.core.game import HandState


logger = logging.getLogger(__name__)


def next_eligible(players: Sequence[Player], start: int) -> Optional[int]:
    """
    First seat clockwise after ``start`` that can act, wrapping around to
    ``start`` itself last. Folded and all-in players are skipped.
    """
    n = len(players)
    for step in range(1, n + 1):
        idx = (start + step) % n
        if players[idx].can_act:
            return idx
    return None


def advance(state: HandState) -> None:
    """Move the turn to the next player able to act, if any."""
    if state.current_player_index is None:
        return
    nxt = next_eligible(state.players, state.current_player_index)
    if nxt is not None:
        state.current_player_index = nxt


def max_bet(state: HandState) -> int:
    """Highest current-round bet among all players."""
    return max((p.current_bet for p in state.players), default=0)


def is_round_complete(state: HandState) -> bool:
    """
    Check if the current betting round is complete.

    A round is over when at most one player is still in the hand, when
    nobody still holding chips owes anything, or when every player with
    chips has matched the highest bet and acted on it. Preflop, the blinds
    are not a voluntary action, so an explicit action this round is needed.
    """
    contenders = [p for p in state.players if not p.folded]
    if len(contenders) <= 1:
        return True

    highest = max_bet(state)
    with_chips = [p for p in contenders if p.stack > 0]
    if not with_chips:
        return True
    if len(with_chips) == 1 and with_chips[0].current_bet >= highest:
        return True

    for player in with_chips:
        if player.current_bet != highest or not player.has_acted:
            return False
        if state.stage == Stage.PREFLOP and not player.acted_this_round:
            return False

    return True


class ActionTimer:
    """
    Single-shot timer for the player due to act.

    ``arm`` replaces any pending timer. When the timer expires the callback
    receives the ``(player_id, action_seq)`` it was armed with; the receiver
    must re-check that pair against the live hand before folding anyone,
    because an action can land between expiry and the callback running.
    """

    def __init__(
        self,
        timeout: float,
        on_expire: Callable[[str, int], Awaitable[None]],
    ):
        self.timeout = timeout
        self._on_expire = on_expire
        self._task: Optional[asyncio.Task] = None
        self._token: Optional[Tuple[str, int]] = None

    @property
    def token(self) -> Optional[Tuple[str, int]]:
        """The (player_id, action_seq) currently armed."""
        return self._token

    @property
    def armed(self) -> bool:
        return self._task is not None and not self._task.done()

    def arm(self, player_id: str, action_seq: int) -> None:
        """Start the countdown for ``player_id``. Must run inside an event loop."""
        self.cancel()
        self._token = (player_id, action_seq)
        self._task = asyncio.get_running_loop().create_task(
            self._run(player_id, action_seq)
        )

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._token = None

    async def _run(self, player_id: str, action_seq: int) -> None:
        await asyncio.sleep(self.timeout)
        if self._token != (player_id, action_seq):
            return
        # Detach first so the callback may re-arm without cancelling itself
        self._task = None
        self._token = None
        logger.info(f"Action timer expired for {player_id} (seq {action_seq})")
        await self._on_expire(player_id, action_seq)
