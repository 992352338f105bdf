"""
PokerTable - Multi-room Texas Hold'em Server

A Texas Hold'em poker server with:
- Pure Python hand engine (betting, side pots, hand evaluation)
- FastAPI + WebSocket server, one independent table per room

Usage:
    from pokertable.core import PokerTable, ActionType
"""

__version__ = "0.1.0"

from pokertable.core.card import Card, Deck
from pokertable.core.player import Player
from pokertable.core.game import HandState, start_hand
from pokertable.core.table import PokerTable
from pokertable.core.hand import HandRank, evaluate

__all__ = [
    "Card",
    "Deck",
    "Player",
    "HandState",
    "start_hand",
    "PokerTable",
    "HandRank",
    "evaluate",
    "__version__",
]
