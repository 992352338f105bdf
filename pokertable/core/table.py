"""
A poker table: seats, dealer rotation and the hand-to-hand lifecycle.

The table owns at most one HandState at a time. After a hand ends it waits
for every player with chips to confirm the result, then drops busted and
departed players, moves the dealer button one seat and deals again.
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional
import logging

from pokertable.core.card import Deck
from pokertable.core.errors import (
    ActionRejected, EmptyDeckError, HandAbortedError, NotEnoughPlayersError,
    RejectReason, SeatingError,
)
from pokertable.core.game import ActionResult, HandState, start_hand
from pokertable.core.player import Player
from pokertable.core.rules import (
    ActionType, DEFAULT_BIG_BLIND, DEFAULT_BUY_IN, DEFAULT_SMALL_BLIND,
    MAX_PLAYERS, MIN_PLAYERS,
)


logger = logging.getLogger(__name__)


@dataclass
class ConfirmResult:
    """Result of confirming a hand result."""
    success: bool
    new_hand_started: bool = False
    message: str = ""
    error: Optional[RejectReason] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "new_hand_started": self.new_hand_started,
            "message": self.message,
            "error": self.error.value if self.error else None,
        }


class PokerTable:
    """
    Texas Hold'em table running consecutive hands.

    Usage:
        table = PokerTable(small_blind=10, big_blind=20, buy_in=1000)
        table.seat_player("p1", "Alice")
        table.seat_player("p2", "Bob")
        table.start_hand()
        table.apply_action("p1", ActionType.CALL)
        ...
        table.confirm_result("p1")
    """

    def __init__(
        self,
        small_blind: int = DEFAULT_SMALL_BLIND,
        big_blind: int = DEFAULT_BIG_BLIND,
        buy_in: int = DEFAULT_BUY_IN,
        max_players: int = MAX_PLAYERS,
        deck_factory: Optional[Callable[[], Deck]] = None,
    ):
        """
        Args:
            small_blind: Small blind amount
            big_blind: Big blind amount
            buy_in: Starting stack for each seated player
            max_players: Seat limit (2-10)
            deck_factory: Builds the deck for each hand, shuffled by default
        """
        if max_players < MIN_PLAYERS or max_players > MAX_PLAYERS:
            raise ValueError("Number of players must be 2-10")
        if small_blind <= 0 or big_blind < small_blind:
            raise ValueError("Blinds must be positive with big blind >= small blind")

        self.small_blind = small_blind
        self.big_blind = big_blind
        self.buy_in = buy_in
        self.max_players = max_players
        self._deck_factory = deck_factory or Deck

        self.players: List[Player] = []
        self.hand: Optional[HandState] = None
        self.hand_number = 0
        self._next_seat = 0
        self._dealer_seat: Optional[int] = None
        self._action_seq = 0

    # ------------------------------------------------------------------
    # Seating

    def seat_player(self, player_id: str, name: str = "", stack: Optional[int] = None) -> Player:
        """
        Seat a new player. Players seated mid-hand are dealt in next hand.

        Raises:
            SeatingError: Table full or player id already seated
        """
        if self.get_player(player_id) is not None:
            raise SeatingError(f"Player {player_id} is already seated")
        if len(self.players) >= self.max_players:
            raise SeatingError("Table is full")

        player = Player(
            player_id=player_id,
            name=name or player_id,
            stack=self.buy_in if stack is None else stack,
            seat=self._next_seat,
        )
        self._next_seat += 1
        self.players.append(player)
        logger.info(f"Seated {player.name} ({player_id}) at seat {player.seat}")
        return player

    def get_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    @property
    def is_hand_running(self) -> bool:
        return self.hand is not None and self.hand.is_running

    @property
    def awaiting_confirmation(self) -> bool:
        return self.hand is not None and self.hand.awaiting_confirmation

    # ------------------------------------------------------------------
    # Hand lifecycle

    def start_hand(self) -> HandState:
        """
        Deal a new hand to every seated player with chips.

        Raises:
            NotEnoughPlayersError: Fewer than two players have chips
            RuntimeError: A hand is already in progress
        """
        if self.hand is not None:
            raise RuntimeError("A hand is already in progress")

        lineup = [p for p in self.players if p.stack > 0]
        if len(lineup) < MIN_PLAYERS:
            raise NotEnoughPlayersError("Need at least 2 players with chips to start a hand")

        dealer_index = self._rotate_dealer(lineup)
        self.hand_number += 1

        with self._abort_on_empty_deck():
            self.hand = start_hand(
                lineup,
                dealer_index=dealer_index,
                small_blind=self.small_blind,
                big_blind=self.big_blind,
                deck=self._deck_factory(),
                hand_number=self.hand_number,
                action_seq=self._action_seq,
            )
        return self.hand

    def _rotate_dealer(self, lineup: List[Player]) -> int:
        """Move the button to the next seat clockwise that is dealt in."""
        if self._dealer_seat is None:
            index = 0
        else:
            later = [i for i, p in enumerate(lineup) if p.seat > self._dealer_seat]
            index = later[0] if later else 0
        self._dealer_seat = lineup[index].seat
        return index

    def apply_action(
        self,
        player_id: str,
        action_type: ActionType,
        amount: Any = 0,
        action_seq: Optional[int] = None,
    ) -> ActionResult:
        """Forward a player action to the running hand."""
        if not self.is_hand_running:
            if self.get_player(player_id) is None:
                exc = ActionRejected(RejectReason.UNKNOWN_PLAYER, f"Unknown player {player_id}")
            else:
                exc = ActionRejected(RejectReason.NOT_YOUR_TURN, "No hand in progress")
            return ActionResult.rejected(exc)

        with self._abort_on_empty_deck():
            return self.hand.apply_action(player_id, action_type, amount, action_seq)

    def handle_timeout(self, player_id: str, action_seq: int) -> bool:
        """Fold a player whose action timer expired, unless the timer is stale."""
        if not self.is_hand_running:
            return False
        with self._abort_on_empty_deck():
            return self.hand.handle_timeout(player_id, action_seq)

    def confirm_result(self, player_id: str) -> ConfirmResult:
        """
        Acknowledge the last hand's result.

        Once every player with chips has confirmed, the next hand starts if
        at least two solvent players remain; otherwise the table goes idle.
        """
        if self.get_player(player_id) is None and (
            self.hand is None or self.hand.get_player(player_id) is None
        ):
            return ConfirmResult(
                False, message=f"Unknown player {player_id}", error=RejectReason.UNKNOWN_PLAYER
            )
        if not self.awaiting_confirmation:
            return ConfirmResult(
                False,
                message="Not waiting for confirmation",
                error=RejectReason.NOT_AWAITING_CONFIRMATION,
            )

        if self.hand.get_player(player_id) is not None:
            self.hand.confirm(player_id)
        return ConfirmResult(True, new_hand_started=self._maybe_start_next_hand())

    def on_disconnect(self, player_id: str) -> bool:
        """
        Remove a player who left.

        Returns:
            True if the running hand or the table changed
        """
        player = self.get_player(player_id)
        if player is None:
            return False

        self.players.remove(player)
        logger.info(f"{player.name} ({player_id}) left the table")

        if self.hand is None:
            return True

        with self._abort_on_empty_deck():
            self.hand.on_disconnect(player_id)
        self._maybe_start_next_hand()
        return True

    def _maybe_start_next_hand(self) -> bool:
        if not self.awaiting_confirmation or not self.hand.confirmations.is_satisfied:
            return False

        self._action_seq = self.hand.action_seq
        self.hand = None

        busted = [p for p in self.players if p.stack == 0]
        for player in busted:
            logger.info(f"{player.name} ({player.player_id}) is out of chips")
        self.players = [p for p in self.players if p.stack > 0]

        if len(self.players) < MIN_PLAYERS:
            logger.info("Not enough players with chips, table is idle")
            return False

        self.start_hand()
        return True

    @contextmanager
    def _abort_on_empty_deck(self) -> Iterator[None]:
        """Abandon the hand and refund every contribution if the deck runs dry."""
        try:
            yield
        except EmptyDeckError as exc:
            hand = self.hand
            if hand is not None:
                for player in hand.players:
                    player.stack += player.total_bet
                    player.reset_for_new_hand()
                self._action_seq = hand.action_seq + 1
            self.hand = None
            logger.error(f"Hand #{self.hand_number} aborted: {exc}")
            raise HandAbortedError(f"Hand #{self.hand_number} aborted: {exc}") from exc

    # ------------------------------------------------------------------
    # Projection

    def view_for(self, viewer_id: Optional[str] = None) -> Dict[str, Any]:
        """Table summary plus the running hand as seen by ``viewer_id``."""
        in_hand = {p.player_id for p in self.hand.players} if self.hand else set()
        return {
            "hand_number": self.hand_number,
            "small_blind": self.small_blind,
            "big_blind": self.big_blind,
            "seated": [
                {"id": p.player_id, "name": p.name, "seat": p.seat, "stack": p.stack,
                 "in_hand": p.player_id in in_hand}
                for p in self.players
            ],
            "hand": self.hand.view_for(viewer_id) if self.hand else None,
        }
