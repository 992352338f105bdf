"""
Hand Evaluation for Texas Hold'em.

This module evaluates 5-7 cards and returns the best 5-card hand rank.
A HandRank is a (category, tiebreak) pair: categories are compared first,
then the tie-break rank values lexicographically, highest first. Equal on
both means an exact tie.

Hand Rankings (best to worst):
9. Royal Flush: A♠ K♠ Q♠ J♠ 10♠
8. Straight Flush: 5 consecutive cards of same suit
7. Four of a Kind: 4 cards of same rank
6. Full House: 3 of a kind + pair
5. Flush: 5 cards of same suit
4. Straight: 5 consecutive cards
3. Three of a Kind: 3 cards of same rank
2. Two Pair: 2 different pairs
1. One Pair: 2 cards of same rank
0. High Card: No made hand

Note: Ace can be low in A-2-3-4-5 straight (wheel), which ranks as 5-high.
"""

from __future__ import annotations
from typing import List, Optional, Sequence, Tuple
from itertools import combinations
from enum import IntEnum
from collections import Counter
from dataclasses import dataclass, field

from pokertable.core.card import Card, Rank
from pokertable.core.rules import HAND_SIZE


class HandCategory(IntEnum):
    """Hand categories in ascending strength."""
    HIGH_CARD = 0
    ONE_PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8
    ROYAL_FLUSH = 9


# Hand category names for display
HAND_CATEGORY_NAMES = {
    HandCategory.ROYAL_FLUSH: "Royal Flush",
    HandCategory.STRAIGHT_FLUSH: "Straight Flush",
    HandCategory.FOUR_OF_A_KIND: "Four of a Kind",
    HandCategory.FULL_HOUSE: "Full House",
    HandCategory.FLUSH: "Flush",
    HandCategory.STRAIGHT: "Straight",
    HandCategory.THREE_OF_A_KIND: "Three of a Kind",
    HandCategory.TWO_PAIR: "Two Pair",
    HandCategory.ONE_PAIR: "One Pair",
    HandCategory.HIGH_CARD: "High Card",
}

WHEEL = [Rank.ACE, Rank.FIVE, Rank.FOUR, Rank.THREE, Rank.TWO]


@dataclass(frozen=True, order=True)
class HandRank:
    """
    Score of a 5-card hand.

    Instances order by strength, so ``max()`` picks the best hand and
    ``==`` detects exact ties. The cards making the hand are carried for
    display only and never take part in comparisons.
    """
    category: HandCategory
    tiebreak: Tuple[int, ...]
    cards: Tuple[Card, ...] = field(default=(), compare=False)

    @property
    def name(self) -> str:
        return HAND_CATEGORY_NAMES[self.category]

    @property
    def description(self) -> str:
        return describe(self)

    def to_dict(self) -> dict:
        return {
            "category": int(self.category),
            "name": self.name,
            "description": self.description,
            "tiebreak": list(self.tiebreak),
            "cards": [c.to_dict() for c in self.cards],
        }


def evaluate(hole_cards: Sequence[Card], community: Sequence[Card]) -> HandRank:
    """
    Best 5-card hand from a player's hole cards and the community cards.

    Raises:
        ValueError: If fewer than 5 or more than 7 cards are available
    """
    return evaluate_cards(list(hole_cards) + list(community))


def evaluate_cards(cards: Sequence[Card]) -> HandRank:
    """
    Evaluate a poker hand (5-7 cards).

    Every 5-card subset is scored and the strongest one is returned.

    Raises:
        ValueError: If not 5-7 cards provided
    """
    if len(cards) < HAND_SIZE or len(cards) > 7:
        raise ValueError(f"Need 5-7 cards, got {len(cards)}")

    return max(score_five(combo) for combo in combinations(cards, HAND_SIZE))


def score_five(cards: Sequence[Card]) -> HandRank:
    """Score exactly 5 cards."""
    assert len(cards) == HAND_SIZE

    # Sort by rank descending
    sorted_cards = sorted(cards, key=lambda c: c.rank, reverse=True)
    ranks = [c.rank for c in sorted_cards]

    is_flush = len({c.suit for c in cards}) == 1
    straight_high = _straight_high(ranks)

    # Group ranks by count, largest group first, then by rank
    rank_counts = Counter(ranks)
    groups = sorted(rank_counts.items(), key=lambda rc: (rc[1], rc[0]), reverse=True)
    counts = [count for _, count in groups]
    grouped = tuple(int(rank) for rank, _ in groups)

    if straight_high is not None and is_flush:
        if straight_high == Rank.ACE:
            category = HandCategory.ROYAL_FLUSH
        else:
            category = HandCategory.STRAIGHT_FLUSH
        return HandRank(category, (int(straight_high),), _straight_order(sorted_cards))

    if counts == [4, 1]:
        return HandRank(HandCategory.FOUR_OF_A_KIND, grouped, _sort_by_count(sorted_cards, rank_counts))

    if counts == [3, 2]:
        return HandRank(HandCategory.FULL_HOUSE, grouped, _sort_by_count(sorted_cards, rank_counts))

    if is_flush:
        return HandRank(HandCategory.FLUSH, tuple(int(r) for r in ranks), tuple(sorted_cards))

    if straight_high is not None:
        return HandRank(HandCategory.STRAIGHT, (int(straight_high),), _straight_order(sorted_cards))

    if counts == [3, 1, 1]:
        return HandRank(HandCategory.THREE_OF_A_KIND, grouped, _sort_by_count(sorted_cards, rank_counts))

    if counts == [2, 2, 1]:
        return HandRank(HandCategory.TWO_PAIR, grouped, _sort_by_count(sorted_cards, rank_counts))

    if counts == [2, 1, 1, 1]:
        return HandRank(HandCategory.ONE_PAIR, grouped, _sort_by_count(sorted_cards, rank_counts))

    return HandRank(HandCategory.HIGH_CARD, tuple(int(r) for r in ranks), tuple(sorted_cards))


def compare(a: HandRank, b: HandRank) -> int:
    """
    Compare two hand ranks.

    Returns:
        1 if a is stronger, -1 if b is stronger, 0 on an exact tie
    """
    if a > b:
        return 1
    if a < b:
        return -1
    return 0


def _straight_high(ranks: List[Rank]) -> Optional[Rank]:
    """High card of the straight formed by 5 descending ranks, if any."""
    if len(set(ranks)) != HAND_SIZE:
        return None

    if ranks[0] - ranks[4] == 4:
        return ranks[0]

    if ranks == WHEEL:
        return Rank.FIVE  # 5-high straight

    return None


def _sort_by_count(cards: List[Card], rank_counts: Counter) -> Tuple[Card, ...]:
    """Sort cards by count (descending), then by rank (descending)."""
    return tuple(sorted(cards, key=lambda c: (rank_counts[c.rank], c.rank), reverse=True))


def _straight_order(cards: List[Card]) -> Tuple[Card, ...]:
    """Order straight cards from the top; the wheel puts the Ace last."""
    if [c.rank for c in cards] == WHEEL:
        return tuple(cards[1:] + cards[:1])
    return tuple(cards)


def describe(rank: HandRank) -> str:
    """Get a human-readable description of a scored hand."""
    category = rank.category
    tb = rank.tiebreak

    if category == HandCategory.ROYAL_FLUSH:
        return "Royal Flush"
    elif category == HandCategory.STRAIGHT_FLUSH:
        return f"Straight Flush, {_rank_name(tb[0])} high"
    elif category == HandCategory.FOUR_OF_A_KIND:
        return f"Four of a Kind, {_plural(tb[0])}"
    elif category == HandCategory.FULL_HOUSE:
        return f"Full House, {_plural(tb[0])} full of {_plural(tb[1])}"
    elif category == HandCategory.FLUSH:
        return f"Flush, {_rank_name(tb[0])} high"
    elif category == HandCategory.STRAIGHT:
        if tb[0] == Rank.FIVE:
            return "Straight, Five high (Wheel)"
        return f"Straight, {_rank_name(tb[0])} high"
    elif category == HandCategory.THREE_OF_A_KIND:
        return f"Three of a Kind, {_plural(tb[0])}"
    elif category == HandCategory.TWO_PAIR:
        return f"Two Pair, {_plural(tb[0])} and {_plural(tb[1])}"
    elif category == HandCategory.ONE_PAIR:
        return f"Pair of {_plural(tb[0])}"
    else:
        return f"High Card, {_rank_name(tb[0])}"


RANK_NAMES = {
    Rank.TWO: "Two", Rank.THREE: "Three", Rank.FOUR: "Four",
    Rank.FIVE: "Five", Rank.SIX: "Six", Rank.SEVEN: "Seven",
    Rank.EIGHT: "Eight", Rank.NINE: "Nine", Rank.TEN: "Ten",
    Rank.JACK: "Jack", Rank.QUEEN: "Queen", Rank.KING: "King",
    Rank.ACE: "Ace",
}


def _rank_name(value: int) -> str:
    return RANK_NAMES[Rank(value)]


def _plural(value: int) -> str:
    name = _rank_name(value)
    return f"{name}es" if name == "Six" else f"{name}s"
