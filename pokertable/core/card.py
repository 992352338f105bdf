"""
Card and Deck classes for Texas Hold'em.

Ranks carry their face value (2-14, Ace high) so that hand evaluation can
compare tie-break sequences directly. Cards are immutable and hashable.
"""

from __future__ import annotations
import random
from typing import Iterable, List, Optional
from enum import IntEnum

from pokertable.core.errors import EmptyDeckError


class Suit(IntEnum):
    """Card suits."""
    CLUBS = 0     # ♣
    DIAMONDS = 1  # ♦
    HEARTS = 2    # ♥
    SPADES = 3    # ♠


class Rank(IntEnum):
    """Card ranks by face value, 2 (lowest) to Ace (14)."""
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14


# String mappings
SUIT_SYMBOLS = {
    Suit.CLUBS: "♣",
    Suit.DIAMONDS: "♦",
    Suit.HEARTS: "♥",
    Suit.SPADES: "♠",
}

SUIT_CHARS = {
    Suit.CLUBS: "c",
    Suit.DIAMONDS: "d",
    Suit.HEARTS: "h",
    Suit.SPADES: "s",
}

RANK_LABELS = {
    Rank.TWO: "2",
    Rank.THREE: "3",
    Rank.FOUR: "4",
    Rank.FIVE: "5",
    Rank.SIX: "6",
    Rank.SEVEN: "7",
    Rank.EIGHT: "8",
    Rank.NINE: "9",
    Rank.TEN: "10",
    Rank.JACK: "J",
    Rank.QUEEN: "Q",
    Rank.KING: "K",
    Rank.ACE: "A",
}

# Reverse mappings
LABEL_TO_RANK = {v: k for k, v in RANK_LABELS.items()}
LABEL_TO_RANK["T"] = Rank.TEN  # Also accept "T"
CHAR_TO_SUIT = {v: k for k, v in SUIT_CHARS.items()}
SYMBOL_TO_SUIT = {v: k for k, v in SUIT_SYMBOLS.items()}


class Card:
    """
    A playing card represented as (rank, suit).

    Cards can be created from:
    - Rank and Suit enums: Card(Rank.ACE, Suit.SPADES)
    - String notation: Card.from_string("As"), "A♠", "10h" or "Td"
    """

    __slots__ = ("rank", "suit")

    def __init__(self, rank: Rank, suit: Suit):
        object.__setattr__(self, "rank", Rank(rank))
        object.__setattr__(self, "suit", Suit(suit))

    def __setattr__(self, name, value):
        raise AttributeError("Card is immutable")

    @classmethod
    def from_string(cls, s: str) -> Card:
        """
        Create a card from string notation.

        Accepts a rank label ("2".."10", "T", "J", "Q", "K", "A") followed by
        a suit char ("cdhs") or symbol ("♣♦♥♠").
        """
        s = s.strip()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_label = s[:-1].upper()
        suit_part = s[-1]

        if rank_label not in LABEL_TO_RANK:
            raise ValueError(f"Invalid rank: {rank_label}")

        if suit_part.lower() in CHAR_TO_SUIT:
            suit = CHAR_TO_SUIT[suit_part.lower()]
        elif suit_part in SYMBOL_TO_SUIT:
            suit = SYMBOL_TO_SUIT[suit_part]
        else:
            raise ValueError(f"Invalid suit: {suit_part}")

        return cls(LABEL_TO_RANK[rank_label], suit)

    def to_int(self) -> int:
        """Return a compact integer (0-51), unique per card."""
        return (int(self.rank) - 2) * 4 + int(self.suit)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Card):
            return self.rank == other.rank and self.suit == other.suit
        return False

    def __hash__(self) -> int:
        return self.to_int()

    def __lt__(self, other: Card) -> bool:
        """Compare by rank only (for sorting)."""
        return self.rank < other.rank

    def __repr__(self) -> str:
        return f"Card({RANK_LABELS[self.rank]}{SUIT_CHARS[self.suit]})"

    def __str__(self) -> str:
        return f"{RANK_LABELS[self.rank]}{SUIT_SYMBOLS[self.suit]}"

    @property
    def color(self) -> str:
        """Return 'red' for hearts/diamonds, 'black' for clubs/spades."""
        return "red" if self.suit in (Suit.HEARTS, Suit.DIAMONDS) else "black"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "rank": RANK_LABELS[self.rank],
            "suit": SUIT_SYMBOLS[self.suit],
            "text": str(self),
            "color": self.color,
        }


HIDDEN_CARD = {"hidden": True}


def full_deck() -> List[Card]:
    """All 52 cards, suit by suit, in rank order."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


class Deck:
    """
    A 52-card deck dealt from the end of its card list.

    Usage:
        deck = Deck()            # freshly shuffled
        hole = deck.deal(2)
        deck.burn()
        flop = deck.deal(3)
    """

    def __init__(
        self,
        cards: Optional[Iterable[Card]] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize a deck.

        Args:
            cards: Explicit card order (drawn from the end). When omitted a
                full deck is built and shuffled.
            rng: Random source for shuffling, defaults to the module RNG.
        """
        self._rng = rng or random.Random()
        self._dealt: List[Card] = []
        if cards is None:
            self._cards = full_deck()
            self.shuffle()
        else:
            self._cards = list(cards)

    def shuffle(self) -> None:
        """Fisher-Yates shuffle of the remaining cards."""
        cards = self._cards
        for i in range(len(cards) - 1, 0, -1):
            j = self._rng.randint(0, i)
            cards[i], cards[j] = cards[j], cards[i]

    def draw(self) -> Card:
        """
        Remove and return the card at the end of the deck.

        Raises:
            EmptyDeckError: If no cards remain.
        """
        if not self._cards:
            raise EmptyDeckError("Cannot draw from an empty deck")
        card = self._cards.pop()
        self._dealt.append(card)
        return card

    def deal(self, n: int = 1) -> List[Card]:
        """Draw n cards in sequence."""
        return [self.draw() for _ in range(n)]

    def burn(self) -> Card:
        """Burn (discard) the next card."""
        return self.draw()

    @property
    def remaining(self) -> int:
        """Number of cards remaining in the deck."""
        return len(self._cards)

    @property
    def dealt_cards(self) -> List[Card]:
        """List of cards that have been drawn."""
        return self._dealt.copy()

    def __len__(self) -> int:
        return len(self._cards)

    def __repr__(self) -> str:
        return f"Deck({self.remaining} cards remaining)"


def new_shuffled_deck(rng: Optional[random.Random] = None) -> Deck:
    """Build a full deck and shuffle it."""
    return Deck(rng=rng)


def parse_cards(cards_str: str) -> List[Card]:
    """
    Parse space-separated cards, e.g. "As Kh 10d" or "A♠ K♥ T♦".
    """
    return [Card.from_string(s) for s in cards_str.split()]
