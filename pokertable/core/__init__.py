"""
PokerTable Core - Pure Python Texas Hold'em Hand Engine

This module contains all game logic without any network dependencies.
"""

from pokertable.core.card import Card, Deck, Rank, Suit
from pokertable.core.player import Player
from pokertable.core.hand import HandCategory, HandRank, compare, evaluate
from pokertable.core.pots import SidePot, build_pots, distribute
from pokertable.core.rules import ActionType, Stage
from pokertable.core.errors import ActionRejected, PokerError, RejectReason
from pokertable.core.game import ActionResult, HandState, start_hand
from pokertable.core.table import ConfirmResult, PokerTable

__all__ = [
    "Card",
    "Deck",
    "Rank",
    "Suit",
    "Player",
    "HandCategory",
    "HandRank",
    "compare",
    "evaluate",
    "SidePot",
    "build_pots",
    "distribute",
    "ActionType",
    "Stage",
    "ActionRejected",
    "PokerError",
    "RejectReason",
    "ActionResult",
    "HandState",
    "start_hand",
    "ConfirmResult",
    "PokerTable",
]
