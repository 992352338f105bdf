"""
Pytest configuration and shared fixtures for PokerTable tests.
"""

import pytest
from pokertable.core.card import Card, Deck, Rank, Suit
from pokertable.core.game import start_hand

from tests.helpers import make_players


@pytest.fixture
def deck():
    """Create a fresh shuffled deck."""
    return Deck()


@pytest.fixture
def heads_up():
    """A started 2-player hand, 1000 chips each, dealer p0 (small blind)."""
    return start_hand(make_players(1000, 1000), dealer_index=0)


@pytest.fixture
def three_handed():
    """A started 3-player hand, dealer p0, SB p1, BB p2, p0 first to act."""
    return start_hand(make_players(1000, 1000, 1000), dealer_index=0)


@pytest.fixture
def royal_flush():
    """Create a royal flush hand."""
    return [
        Card(Rank.ACE, Suit.SPADES),
        Card(Rank.KING, Suit.SPADES),
        Card(Rank.QUEEN, Suit.SPADES),
        Card(Rank.JACK, Suit.SPADES),
        Card(Rank.TEN, Suit.SPADES),
    ]


@pytest.fixture
def wheel_straight():
    """Create a wheel straight (A-2-3-4-5)."""
    return [
        Card(Rank.ACE, Suit.SPADES),
        Card(Rank.TWO, Suit.HEARTS),
        Card(Rank.THREE, Suit.DIAMONDS),
        Card(Rank.FOUR, Suit.CLUBS),
        Card(Rank.FIVE, Suit.SPADES),
    ]
