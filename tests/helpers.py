"""Shared builders for hand engine tests."""

from typing import List, Sequence

from pokertable.core.card import Card, Deck, full_deck, parse_cards
from pokertable.core.player import Player


def rig_deck(holes: Sequence[str], board: str = "") -> Deck:
    """
    Build a deck that deals the given hole cards (one string per player, in
    seating order) followed by the given board. Burn cards and anything
    dealt later come from the unused cards.
    """
    hole_cards = [parse_cards(h) for h in holes]
    board_cards = parse_cards(board)
    used = {c for cards in hole_cards for c in cards} | set(board_cards)
    spare = [c for c in full_deck() if c not in used]

    order: List[Card] = [c for cards in hole_cards for c in cards]
    streets = [board_cards[:3], board_cards[3:4], board_cards[4:5]]
    for street in streets:
        if not street:
            break
        order.append(spare.pop())  # burn
        order.extend(street)

    return Deck(cards=spare + list(reversed(order)))


def make_players(*stacks: int) -> List[Player]:
    """Players p0, p1, ... with the given stacks, seated in order."""
    return [
        Player(player_id=f"p{i}", name=f"Player {i}", stack=stack, seat=i)
        for i, stack in enumerate(stacks)
    ]


def total_chips(players: Sequence[Player]) -> int:
    return sum(p.stack for p in players)
