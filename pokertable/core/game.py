"""
Texas Hold'em Hand Engine - State Machine Implementation.

This module implements the lifecycle of a single hand:
- Stage progression (preflop, flop, turn, river, showdown)
- Blind posting and dealing
- Player actions via the betting engine, turn order via the scheduler
- Showdown evaluation and side pot distribution
- The confirmation barrier that holds the table after the hand ends

HandState is only mutated through its public entrypoints: ``apply_action``,
``handle_timeout``, ``on_disconnect`` and ``confirm``.
"""

from __future__ import annotations
from typing import List, Dict, Optional, Any, Sequence, Set
from dataclasses import dataclass, field
import logging

from pokertable.core import betting, turns
from pokertable.core.card import Card, Deck
from pokertable.core.confirmation import ConfirmationBarrier
from pokertable.core.errors import ActionRejected, NotEnoughPlayersError, RejectReason
from pokertable.core.hand import HandRank, evaluate
from pokertable.core.player import Player
from pokertable.core.pots import PotAward, SidePot, build_pots, distribute, payout_order
from pokertable.core.rules import (
    ActionType, Stage, STAGE_CARDS, get_blind_positions,
    DEFAULT_BIG_BLIND, DEFAULT_SMALL_BLIND, HOLE_CARDS, MIN_PLAYERS,
    TOTAL_COMMUNITY_CARDS,
)


logger = logging.getLogger(__name__)


@dataclass
class ActionResult:
    """Result of a player action."""
    success: bool
    message: str
    action_type: Optional[ActionType] = None
    amount: int = 0
    error: Optional[RejectReason] = None

    @classmethod
    def rejected(cls, exc: ActionRejected) -> ActionResult:
        return cls(False, exc.message, error=exc.reason)

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {
                "success": False,
                "error": self.error.value if self.error else None,
                "message": self.message,
            }
        return {
            "success": True,
            "message": self.message,
            "action": self.action_type.value if self.action_type else None,
            "amount": self.amount,
        }


@dataclass
class HandResult:
    """Outcome of a finished hand."""
    awards: Dict[str, int]
    pots: List[PotAward]
    hand_ranks: Dict[str, HandRank] = field(default_factory=dict)
    by_fold: bool = False

    @property
    def winners(self) -> List[str]:
        return [pid for pid, amount in self.awards.items() if amount > 0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "by_fold": self.by_fold,
            "winners": [
                {
                    "id": pid,
                    "won": amount,
                    "hand": self.hand_ranks[pid].to_dict() if pid in self.hand_ranks else None,
                }
                for pid, amount in self.awards.items()
                if amount > 0
            ],
            "pots": [pot.to_dict() for pot in self.pots],
        }


class HandState:
    """
    One hand of Texas Hold'em.

    Usage:
        hand = start_hand(players, dealer_index=0)

        while hand.is_running:
            actor = hand.current_player
            result = hand.apply_action(actor.player_id, ActionType.CALL)

        hand.result.awards       # chips won per player
        hand.confirm(player_id)  # until hand.confirmations.is_satisfied
    """

    def __init__(
        self,
        players: Sequence[Player],
        dealer_index: int = 0,
        small_blind: int = DEFAULT_SMALL_BLIND,
        big_blind: int = DEFAULT_BIG_BLIND,
        deck: Optional[Deck] = None,
        hand_number: int = 1,
        action_seq: int = 0,
    ):
        """
        Initialize a hand. Call ``start`` to post blinds and deal.

        Args:
            players: Players in seating order; those without chips sit out
            dealer_index: Index of the dealer within the players dealt in
            small_blind: Small blind amount
            big_blind: Big blind amount
            deck: Deck to deal from, a freshly shuffled one by default
            hand_number: Running hand count at the table
            action_seq: Starting action sequence number
        """
        self.players: List[Player] = [p for p in players if p.stack > 0]
        if len(self.players) < MIN_PLAYERS:
            raise NotEnoughPlayersError("Need at least 2 players with chips to start a hand")

        self.deck = deck if deck is not None else Deck()
        self.small_blind = small_blind
        self.big_blind = big_blind
        self.hand_number = hand_number
        self.dealer_index = dealer_index % len(self.players)
        self.small_blind_index = 0
        self.big_blind_index = 0

        self.community_cards: List[Card] = []
        self.stage = Stage.PREFLOP
        self.pot = 0
        self.side_pots: List[SidePot] = []
        self.current_player_index: Optional[int] = None
        self.min_raise = big_blind
        self.action_seq = action_seq

        self.result: Optional[HandResult] = None
        self.revealed: Set[str] = set()
        self.departed: Set[str] = set()
        self.awaiting_confirmation = False
        self.confirmations: Optional[ConfirmationBarrier] = None

    # ------------------------------------------------------------------
    # Queries

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def contenders(self) -> List[Player]:
        """Players who have not folded."""
        return [p for p in self.players if not p.folded]

    @property
    def current_player(self) -> Optional[Player]:
        """The player whose turn it is to act."""
        if not self.is_running or self.current_player_index is None:
            return None
        return self.players[self.current_player_index]

    @property
    def is_running(self) -> bool:
        """Check if the hand is still being played."""
        return not self.awaiting_confirmation

    @property
    def max_bet(self) -> int:
        return turns.max_bet(self)

    def get_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    # ------------------------------------------------------------------
    # Setup

    def start(self) -> None:
        """Post blinds, deal hole cards and hand the turn to the first actor."""
        for player in self.players:
            player.reset_for_new_hand()

        self.small_blind_index, self.big_blind_index = get_blind_positions(
            self.num_players, self.dealer_index
        )

        logger.info(
            f"Starting hand #{self.hand_number}: {self.num_players} players, "
            f"dealer={self.players[self.dealer_index].player_id}"
        )

        self._deal_hole_cards()
        self._post_blinds()

        self.current_player_index = turns.next_eligible(self.players, self.big_blind_index)
        self._refresh_pots()

        if turns.is_round_complete(self):
            self._end_betting_round()

    def _deal_hole_cards(self) -> None:
        """Deal 2 hole cards to each player in seating order."""
        for player in self.players:
            player.deal_cards(self.deck.deal(HOLE_CARDS))

    def _post_blinds(self) -> None:
        """Post small and big blinds. A short stack posts all-in."""
        sb_player = self.players[self.small_blind_index]
        bb_player = self.players[self.big_blind_index]

        sb_amount = sb_player.bet(self.small_blind)
        sb_player.last_action = f"SB ${sb_amount}"

        bb_amount = bb_player.bet(self.big_blind)
        bb_player.last_action = f"BB ${bb_amount}"

        self.pot += sb_amount + bb_amount
        logger.debug(f"Blinds posted: SB={sb_amount} BB={bb_amount}")

    # ------------------------------------------------------------------
    # Mutation entrypoints

    def apply_action(
        self,
        player_id: str,
        action_type: ActionType,
        amount: Any = 0,
        action_seq: Optional[int] = None,
    ) -> ActionResult:
        """
        Process a player action.

        Args:
            player_id: The acting player
            action_type: FOLD, CHECK, CALL, RAISE or ALL_IN
            amount: Raise increment above the call (RAISE only)
            action_seq: Sequence number the client acted on, if known

        Returns:
            ActionResult; on rejection the hand is unchanged
        """
        try:
            player = betting.validate_actor(self, player_id, action_seq)
            message, actual = betting.apply_action(self, player, action_type, amount)
        except ActionRejected as exc:
            logger.info(f"Rejected {action_type.value} from {player_id}: {exc.message}")
            return ActionResult.rejected(exc)

        logger.debug(f"{player_id}: {message}")
        self._after_action()
        return ActionResult(True, message, action_type, actual)

    def handle_timeout(self, player_id: str, action_seq: int) -> bool:
        """
        Fold ``player_id`` if they are still due to act at ``action_seq``.

        Returns:
            True if the player was folded, False if the timer was stale
        """
        current = self.current_player
        if current is None or current.player_id != player_id or action_seq != self.action_seq:
            logger.debug(f"Ignoring stale timeout for {player_id} (seq {action_seq})")
            return False

        logger.info(f"{player_id} timed out, folding")
        return self.apply_action(player_id, ActionType.FOLD, action_seq=action_seq).success

    def on_disconnect(self, player_id: str) -> bool:
        """
        Handle a player leaving mid-hand.

        A player holding live cards is folded immediately; after the hand
        they no longer hold up the confirmation barrier.

        Returns:
            True if the hand changed
        """
        player = self.get_player(player_id)
        if player is None:
            return False
        self.departed.add(player_id)

        if self.awaiting_confirmation:
            self.confirmations.release(player_id)
            return True

        if player.folded:
            return False

        current = self.current_player
        if current is not None and current.player_id == player_id:
            return self.apply_action(player_id, ActionType.FOLD).success

        logger.info(f"{player_id} disconnected out of turn, folding")
        player.fold()
        self.action_seq += 1
        self._refresh_pots()
        if len(self.contenders) <= 1:
            self._award_to_survivor()
        elif turns.is_round_complete(self):
            self._end_betting_round()
        return True

    def confirm(self, player_id: str) -> bool:
        """
        Acknowledge the hand result.

        Returns:
            False if this player had already confirmed

        Raises:
            ActionRejected: Unknown player or the hand is still running
        """
        if self.get_player(player_id) is None:
            raise ActionRejected(RejectReason.UNKNOWN_PLAYER, f"Unknown player {player_id}")
        if not self.awaiting_confirmation:
            raise ActionRejected(
                RejectReason.NOT_AWAITING_CONFIRMATION, "The hand is still in progress"
            )
        return self.confirmations.confirm(player_id)

    # ------------------------------------------------------------------
    # Progression

    def _after_action(self) -> None:
        self.action_seq += 1
        self._refresh_pots()

        if len(self.contenders) <= 1:
            self._award_to_survivor()
            return

        turns.advance(self)
        if turns.is_round_complete(self):
            self._end_betting_round()

    def _end_betting_round(self) -> None:
        """Close the betting round and move to the next stage."""
        if self.stage == Stage.RIVER:
            self._showdown()
            return

        # No further betting possible: run out the board
        if sum(1 for p in self.contenders if p.stack > 0) <= 1:
            logger.info("No more betting possible, dealing remaining cards")
            self._deal_remaining_cards()
            self._showdown()
            return

        next_stage = self.stage.next_stage()
        self._deal_stage(next_stage)
        self.stage = next_stage

        for player in self.players:
            player.reset_for_new_round()
        self.min_raise = self.big_blind
        self.current_player_index = turns.next_eligible(self.players, self.dealer_index)
        logger.debug(
            f"Stage {self.stage.value}: board "
            f"{' '.join(str(c) for c in self.community_cards)}"
        )

    def _deal_stage(self, stage: Stage) -> None:
        self.deck.burn()
        self.community_cards.extend(self.deck.deal(STAGE_CARDS[stage]))

    def _deal_remaining_cards(self) -> None:
        """Deal remaining community cards (when going directly to showdown)."""
        stage = self.stage
        while len(self.community_cards) < TOTAL_COMMUNITY_CARDS:
            stage = stage.next_stage()
            self._deal_stage(stage)
            self.stage = stage

    def _showdown(self) -> None:
        """Evaluate every live hand and pay out each pot tier."""
        self.stage = Stage.SHOWDOWN
        contenders = self.contenders

        hand_ranks = {
            p.player_id: evaluate(p.hole_cards, self.community_cards)
            for p in contenders
        }
        for pid, rank in hand_ranks.items():
            logger.info(f"Showdown: {pid} shows {rank.description}")

        self.revealed = set(hand_ranks)
        self._distribute(hand_ranks, by_fold=False)

    def _award_to_survivor(self) -> None:
        """Everyone else folded: the last player takes the whole pot."""
        survivor = self.contenders[0]
        logger.info(f"{survivor.player_id} wins {self.pot} uncontested")
        self._distribute({}, by_fold=True)

    def _distribute(self, hand_ranks: Dict[str, HandRank], by_fold: bool) -> None:
        self.side_pots = build_pots(self.players)
        awards, breakdown = distribute(
            self.side_pots, hand_ranks, payout_order(self.players, self.dealer_index)
        )
        for pid, amount in awards.items():
            self.get_player(pid).stack += amount

        self.result = HandResult(
            awards=awards, pots=breakdown, hand_ranks=hand_ranks, by_fold=by_fold
        )
        self._finish()

    def _finish(self) -> None:
        self.current_player_index = None
        self.awaiting_confirmation = True
        self.confirmations = ConfirmationBarrier(
            p.player_id for p in self.players
            if p.stack > 0 and p.player_id not in self.departed
        )
        logger.info(f"Hand #{self.hand_number} finished: {self.result.awards}")

    def _refresh_pots(self) -> None:
        self.side_pots = build_pots(self.players)

    # ------------------------------------------------------------------
    # Projection

    def view_for(self, viewer_id: Optional[str] = None) -> Dict[str, Any]:
        """
        The hand as seen by one player.

        The viewer's own hole cards are real; everyone else's are hidden
        unless revealed at showdown.
        """
        current = self.current_player
        players = [
            p.to_dict(show_cards=(p.player_id == viewer_id or p.player_id in self.revealed))
            for p in self.players
        ]

        view: Dict[str, Any] = {
            "hand_number": self.hand_number,
            "stage": self.stage.value,
            "pot": self.pot,
            "pots": [pot.to_dict() for pot in self.side_pots],
            "community_cards": [c.to_dict() for c in self.community_cards],
            "dealer_index": self.dealer_index,
            "small_blind": self.small_blind,
            "big_blind": self.big_blind,
            "current_player": current.player_id if current else None,
            "current_bet": self.max_bet,
            "min_raise": self.min_raise,
            "action_seq": self.action_seq,
            "players": players,
            "awaiting_confirmation": self.awaiting_confirmation,
            "confirmed": sorted(self.confirmations.confirmed) if self.confirmations else [],
            "result": self.result.to_dict() if self.result else None,
        }

        viewer = self.get_player(viewer_id) if viewer_id else None
        if viewer is not None:
            view["legal_actions"] = betting.legal_actions(self, viewer)
            view["chips_to_call"] = max(0, self.max_bet - viewer.current_bet)

        return view

    def __repr__(self) -> str:
        return (
            f"HandState(#{self.hand_number}, stage={self.stage.value}, pot={self.pot}, "
            f"players={len(self.players)})"
        )


def start_hand(players: Sequence[Player], **kwargs: Any) -> HandState:
    """
    Create a hand and deal it.

    Requires at least two players with chips; see HandState for options.
    """
    state = HandState(players, **kwargs)
    state.start()
    return state
