"""
Texas Hold'em Rules and Constants.

This module defines the table rules the hand engine follows:

1. Heads-up (2 players): Dealer posts small blind, non-dealer posts big blind.
   Preflop: Dealer acts first. Postflop: Non-dealer acts first.

2. Raise sizes are expressed as the increment above the current call.
   The minimum increment starts at the big blind every betting round and
   grows to the size of the last full raise.

3. All-in less than minimum raise: an all-in whose raise increment is
   smaller than the current minimum does NOT reopen the betting for
   players who have already acted.

4. Side pots: When multiple players are all-in for different amounts,
   separate pots are created for each contribution level.
"""

from enum import Enum
from typing import Optional, Tuple


class Stage(Enum):
    """Stages of a Texas Hold'em hand, in the only order they may occur."""
    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"
    SHOWDOWN = "showdown"

    @property
    def order(self) -> int:
        return STAGE_ORDER.index(self)

    def next_stage(self) -> Optional["Stage"]:
        """The stage that follows this one, or None after showdown."""
        idx = self.order + 1
        return STAGE_ORDER[idx] if idx < len(STAGE_ORDER) else None


STAGE_ORDER = [Stage.PREFLOP, Stage.FLOP, Stage.TURN, Stage.RIVER, Stage.SHOWDOWN]


class ActionType(Enum):
    """Possible player actions."""
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    RAISE = "raise"
    ALL_IN = "all_in"


# Default game settings
DEFAULT_SMALL_BLIND = 10
DEFAULT_BIG_BLIND = 20
DEFAULT_BUY_IN = 1000
DEFAULT_ACTION_TIMEOUT = 30.0  # seconds
MIN_PLAYERS = 2
MAX_PLAYERS = 10

# Largest raise increment accepted from a client
MAX_RAISE_AMOUNT = 1_000_000_000

# Cards per stage
HOLE_CARDS = 2
FLOP_CARDS = 3
TURN_CARDS = 1
RIVER_CARDS = 1
TOTAL_COMMUNITY_CARDS = 5

STAGE_CARDS = {
    Stage.FLOP: FLOP_CARDS,
    Stage.TURN: TURN_CARDS,
    Stage.RIVER: RIVER_CARDS,
}

# Hand evaluation
HAND_SIZE = 5  # Best 5-card hand

MAIN_POT_LABEL = "main pot"


def side_pot_label(index: int) -> str:
    """Label for the pot tier at ``index`` (0 is the main pot)."""
    return MAIN_POT_LABEL if index == 0 else f"side pot {index}"


def get_blind_positions(num_players: int, dealer_position: int) -> Tuple[int, int]:
    """
    Calculate small blind and big blind positions.

    In heads-up play, the dealer posts the small blind.

    Args:
        num_players: Number of players dealt into the hand
        dealer_position: Position of the dealer (0-indexed)

    Returns:
        Tuple of (small_blind_position, big_blind_position)
    """
    if num_players < MIN_PLAYERS:
        raise ValueError("Need at least 2 players")

    if num_players == 2:
        # Heads-up: Dealer is small blind
        sb_pos = dealer_position
        bb_pos = (dealer_position + 1) % num_players
    else:
        # Standard: SB is left of dealer, BB is left of SB
        sb_pos = (dealer_position + 1) % num_players
        bb_pos = (dealer_position + 2) % num_players

    return sb_pos, bb_pos
