"""
Player class for Texas Hold'em.

Manages per-hand player state including:
- Stack (chip count)
- Hole cards
- Current bet in the round and total contribution for the hand
- Folded flag and the acted flags used by round completion
"""

from __future__ import annotations
from typing import List, Optional, Dict, Any
from dataclasses import dataclass, field

from pokertable.core.card import Card, HIDDEN_CARD


@dataclass
class Player:
    """
    A player seated at a table.

    Attributes:
        player_id: Unique identifier for the player
        name: Display name
        stack: Current chip count
        seat: Table seat number, assigned when seated
        hole_cards: The player's private cards (kept after folding until the
            hand ends, but never shown to others once folded)
        current_bet: Amount bet in the current betting round
        total_bet: Total amount bet in the current hand (for pot calculations)
        folded: Whether the player has folded this hand
        has_acted: Acted since the last action-reopening raise
        acted_this_round: Took a voluntary action in this betting round;
            blinds do not count
    """
    player_id: str
    name: str = ""
    stack: int = 0
    seat: int = 0
    hole_cards: List[Card] = field(default_factory=list)
    current_bet: int = 0
    total_bet: int = 0
    folded: bool = False
    has_acted: bool = False
    acted_this_round: bool = False
    # Track last action for display
    last_action: Optional[str] = None

    def reset_for_new_hand(self) -> None:
        """Reset player state for a new hand."""
        self.hole_cards = []
        self.current_bet = 0
        self.total_bet = 0
        self.folded = False
        self.has_acted = False
        self.acted_this_round = False
        self.last_action = None

    def reset_for_new_round(self) -> None:
        """Reset player state for a new betting round (flop, turn, river)."""
        self.current_bet = 0
        self.has_acted = False
        self.acted_this_round = False

    def deal_cards(self, cards: List[Card]) -> None:
        """Deal hole cards to the player."""
        self.hole_cards = cards

    def bet(self, amount: int) -> int:
        """
        Move chips from the stack into the pot.

        Returns:
            Actual amount bet (less than requested if the stack runs out)
        """
        if amount <= 0:
            return 0

        actual_amount = min(amount, self.stack)

        self.stack -= actual_amount
        self.current_bet += actual_amount
        self.total_bet += actual_amount

        return actual_amount

    def mark_acted(self, label: str) -> None:
        """Record a voluntary action."""
        self.has_acted = True
        self.acted_this_round = True
        self.last_action = label

    def fold(self) -> None:
        """Fold the hand."""
        self.folded = True
        self.mark_acted("FOLD")

    @property
    def is_all_in(self) -> bool:
        """Contesting the pot with no chips left to bet."""
        return not self.folded and self.stack == 0 and self.total_bet > 0

    @property
    def can_act(self) -> bool:
        """Check if player can take an action."""
        return not self.folded and self.stack > 0

    @property
    def state(self) -> str:
        if self.folded:
            return "FOLDED"
        if self.stack == 0:
            return "ALL_IN"
        return "ACTIVE"

    def to_dict(self, show_cards: bool = False) -> Dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Args:
            show_cards: Include real hole cards; otherwise live hands are
                replaced by hidden placeholders and folded hands are empty
        """
        if self.folded and not show_cards:
            cards: List[Dict[str, Any]] = []
        elif show_cards:
            cards = [card.to_dict() for card in self.hole_cards]
        else:
            cards = [dict(HIDDEN_CARD) for _ in self.hole_cards]

        return {
            "id": self.player_id,
            "name": self.name,
            "seat": self.seat,
            "stack": self.stack,
            "bet": self.current_bet,
            "total_bet": self.total_bet,
            "folded": self.folded,
            "all_in": self.is_all_in,
            "state": self.state,
            "last_action": self.last_action,
            "cards": cards,
        }

    def __repr__(self) -> str:
        return (
            f"Player({self.player_id}, stack={self.stack}, "
            f"bet={self.current_bet}, state={self.state})"
        )

    def __str__(self) -> str:
        cards_str = " ".join(str(c) for c in self.hole_cards) if self.hole_cards else "??"
        return f"Player {self.name or self.player_id} [{cards_str}] ${self.stack}"
