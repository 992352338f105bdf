"""
Pot allocation for Texas Hold'em.

At the end of a hand the pot is split into tiers by contribution level.
Each tier can only be won by the non-folded players who paid into it up to
that level; folded players' chips stay in the tiers they paid into.

Example: A, B and C put in 100, 200 and 300.
- main pot:   100 x 3 = 300, A B C eligible
- side pot 1: 100 x 2 = 200, B C eligible
- side pot 2: 100 x 1 = 100, C eligible
"""

from __future__ import annotations
from typing import Dict, List, Mapping, Sequence, Tuple
from dataclasses import dataclass, field
import logging

from pokertable.core.hand import HandRank
from pokertable.core.player import Player
from pokertable.core.rules import side_pot_label


logger = logging.getLogger(__name__)


@dataclass
class SidePot:
    """One pot tier (main pot or side pot)."""
    amount: int = 0
    eligible_players: List[str] = field(default_factory=list)
    label: str = "main pot"

    def to_dict(self) -> Dict[str, object]:
        return {
            "label": self.label,
            "amount": self.amount,
            "eligible": list(self.eligible_players),
        }


@dataclass
class PotAward:
    """How a single pot tier was paid out."""
    label: str
    amount: int
    winners: List[str]
    shares: Dict[str, int]

    def to_dict(self) -> Dict[str, object]:
        return {
            "label": self.label,
            "amount": self.amount,
            "winners": list(self.winners),
            "shares": dict(self.shares),
        }


def build_pots(players: Sequence[Player]) -> List[SidePot]:
    """
    Partition the chips committed this hand into ordered pot tiers.

    Args:
        players: Every player dealt into the hand, folded or not

    Returns:
        Tiers with positive amounts, main pot first. Their amounts add up to
        the sum of all players' ``total_bet``.
    """
    contenders = [p for p in players if not p.folded]
    total = sum(p.total_bet for p in players)

    if not contenders or total == 0:
        return []

    if len(contenders) == 1:
        return [SidePot(amount=total, eligible_players=[contenders[0].player_id])]

    levels = sorted({p.total_bet for p in contenders})
    pots: List[SidePot] = []
    prev_level = 0

    for level in levels:
        # Chips every player paid between the previous level and this one
        amount = sum(
            min(p.total_bet, level) - min(p.total_bet, prev_level)
            for p in players
        )
        eligible = [p.player_id for p in contenders if p.total_bet >= level]
        if amount > 0:
            pots.append(SidePot(amount=amount, eligible_players=eligible))
        prev_level = level

    # Folded chips above the top contender level
    overflow = total - sum(pot.amount for pot in pots)
    if overflow:
        if pots:
            pots[-1].amount += overflow
        else:
            pots.append(SidePot(
                amount=overflow,
                eligible_players=[p.player_id for p in contenders],
            ))

    for i, pot in enumerate(pots):
        pot.label = side_pot_label(i)

    return pots


def payout_order(players: Sequence[Player], dealer_index: int) -> List[str]:
    """Player ids clockwise starting immediately left of the dealer."""
    n = len(players)
    return [players[(dealer_index + 1 + i) % n].player_id for i in range(n)]


def distribute(
    pots: Sequence[SidePot],
    hand_ranks: Mapping[str, HandRank],
    order: Sequence[str],
) -> Tuple[Dict[str, int], List[PotAward]]:
    """
    Pay out each pot tier to its best eligible hand(s).

    Ties split the tier evenly; leftover chips go one at a time to the tied
    winners in ``order`` (clockwise from the dealer).

    Args:
        pots: Tiers from ``build_pots``
        hand_ranks: Showdown rank per contending player
        order: Seat order used for odd chips, see ``payout_order``

    Returns:
        Tuple of (total award per player id, per-tier breakdown)
    """
    awards: Dict[str, int] = {}
    breakdown: List[PotAward] = []
    position = {pid: i for i, pid in enumerate(order)}

    for pot in pots:
        if len(pot.eligible_players) == 1:
            winners = list(pot.eligible_players)
        else:
            ranked = {pid: hand_ranks[pid] for pid in pot.eligible_players}
            best = max(ranked.values())
            winners = [pid for pid, rank in ranked.items() if rank == best]
        winners.sort(key=lambda pid: position.get(pid, len(position)))

        share, remainder = divmod(pot.amount, len(winners))
        shares: Dict[str, int] = {}
        for i, pid in enumerate(winners):
            shares[pid] = share + (1 if i < remainder else 0)
            awards[pid] = awards.get(pid, 0) + shares[pid]

        logger.debug(f"{pot.label} {pot.amount} -> {shares}")
        breakdown.append(PotAward(
            label=pot.label,
            amount=pot.amount,
            winners=winners,
            shares=shares,
        ))

    return awards, breakdown
