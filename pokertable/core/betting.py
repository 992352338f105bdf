"""
Betting engine: validates a single player action and applies it.

Raise amounts are the increment above the current call. A raise that puts
a player all-in for less than the current minimum increment is allowed but
does not reopen the betting for players who have already acted; a full
raise, all-in or not, makes everyone else with chips act again.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple
import logging

from pokertable.core.errors import ActionRejected, RejectReason
from pokertable.core.player import Player
from pokertable.core.rules import ActionType, MAX_RAISE_AMOUNT
from pokertable.core.turns import max_bet

if TYPE_CHECKING:
    from pokertable.core.game import HandState


logger = logging.getLogger(__name__)


def validate_actor(
    state: HandState,
    player_id: str,
    action_seq: Optional[int] = None,
) -> Player:
    """
    Check that ``player_id`` may act now.

    Checks, in order: the player exists, it is their turn, they have not
    folded, they still have chips, and the submitted sequence number (when
    given) matches the hand's.

    Raises:
        ActionRejected: The first failed precondition
    """
    player = state.get_player(player_id)
    if player is None:
        raise ActionRejected(RejectReason.UNKNOWN_PLAYER, f"Unknown player {player_id}")

    current = state.current_player
    if current is None or current.player_id != player_id:
        raise ActionRejected(RejectReason.NOT_YOUR_TURN, "Not your turn")

    if player.folded:
        raise ActionRejected(RejectReason.ALREADY_FOLDED, "You have already folded")

    if player.stack == 0:
        raise ActionRejected(RejectReason.ALREADY_ALL_IN, "You are already all-in")

    if action_seq is not None and action_seq != state.action_seq:
        raise ActionRejected(
            RejectReason.STALE_ACTION,
            f"Stale action (expected seq {state.action_seq}, got {action_seq})",
        )

    return player


def apply_action(
    state: HandState,
    player: Player,
    action_type: ActionType,
    amount: Any = 0,
) -> Tuple[str, int]:
    """
    Execute the specified action for the player.

    Returns:
        Tuple of (description, chips moved into the pot)

    Raises:
        ActionRejected: If the action is illegal; nothing was changed
    """
    highest = max_bet(state)
    chips_to_call = highest - player.current_bet

    if action_type == ActionType.FOLD:
        player.fold()
        return "Folded", 0

    elif action_type == ActionType.CHECK:
        if chips_to_call > 0:
            raise ActionRejected(
                RejectReason.ILLEGAL_CHECK, f"Cannot check, must call ${chips_to_call}"
            )
        player.mark_acted("CHECK")
        return "Checked", 0

    elif action_type == ActionType.CALL:
        if chips_to_call <= 0:
            raise ActionRejected(RejectReason.NOTHING_TO_CALL, "Nothing to call, use CHECK")
        actual = _commit(state, player, chips_to_call)
        if player.stack == 0:
            player.mark_acted(f"ALL-IN ${player.total_bet}")
        else:
            player.mark_acted(f"CALL ${actual}")
        return f"Called ${actual}", actual

    elif action_type == ActionType.RAISE:
        _validate_raise_amount(amount)
        if player.stack <= chips_to_call:
            raise ActionRejected(
                RejectReason.INSUFFICIENT_CHIPS_TO_RAISE,
                f"Not enough chips to raise (to call: ${chips_to_call}, stack: ${player.stack}); "
                "call or go all-in instead",
            )
        if player.stack < chips_to_call + amount:
            return _all_in_raise(state, player, chips_to_call)
        if amount < state.min_raise:
            raise ActionRejected(
                RejectReason.RAISE_TOO_SMALL,
                f"Minimum raise is ${state.min_raise} above the call",
            )
        actual = _commit(state, player, chips_to_call + amount)
        state.min_raise = amount
        _reopen_action(state, player)
        if player.stack == 0:
            player.mark_acted(f"ALL-IN ${player.total_bet}")
        else:
            player.mark_acted(f"RAISE ${player.current_bet}")
        return f"Raised to ${player.current_bet}", actual

    elif action_type == ActionType.ALL_IN:
        if player.stack <= chips_to_call:
            actual = _commit(state, player, player.stack)
            player.mark_acted(f"ALL-IN ${player.total_bet}")
            return f"All-in for ${player.current_bet}", actual
        return _all_in_raise(state, player, chips_to_call)

    raise ActionRejected(RejectReason.UNKNOWN_ACTION, f"Unknown action: {action_type}")


def _validate_raise_amount(amount: Any) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ActionRejected(
            RejectReason.INVALID_RAISE_AMOUNT, f"Raise amount must be an integer, got {amount!r}"
        )
    if amount <= 0 or amount > MAX_RAISE_AMOUNT:
        raise ActionRejected(
            RejectReason.INVALID_RAISE_AMOUNT,
            f"Raise amount must be between 1 and {MAX_RAISE_AMOUNT}, got {amount}",
        )


def _all_in_raise(state: HandState, player: Player, chips_to_call: int) -> Tuple[str, int]:
    """Commit the player's whole stack as a raise."""
    raise_increment = player.stack - chips_to_call
    actual = _commit(state, player, player.stack)

    if raise_increment >= state.min_raise:
        state.min_raise = raise_increment
        _reopen_action(state, player)
    else:
        logger.debug(
            f"Short all-in by {player.player_id}: +{raise_increment} "
            f"< min raise {state.min_raise}, action not reopened"
        )

    player.mark_acted(f"ALL-IN ${player.total_bet}")
    return f"All-in for ${player.current_bet}", actual


def _commit(state: HandState, player: Player, amount: int) -> int:
    actual = player.bet(amount)
    state.pot += actual
    return actual


def _reopen_action(state: HandState, raiser: Player) -> None:
    """Everyone else still able to bet must act again after a full raise."""
    for other in state.players:
        if other is not raiser and other.can_act:
            other.has_acted = False


def legal_actions(state: HandState, player: Player) -> List[Dict[str, Any]]:
    """
    Get legal actions for a player whose turn it is.

    Returns:
        List of action dicts with type and constraints; raise bounds are
        increments above the call
    """
    current = state.current_player
    if current is None or current is not player or not player.can_act:
        return []

    chips_to_call = max(0, max_bet(state) - player.current_bet)
    actions: List[Dict[str, Any]] = [{"type": ActionType.FOLD.value}]

    if chips_to_call == 0:
        actions.append({"type": ActionType.CHECK.value})
    else:
        actions.append({
            "type": ActionType.CALL.value,
            "amount": min(chips_to_call, player.stack),
        })

    # A shove below the minimum increment is only offered as all_in
    max_increment = player.stack - chips_to_call
    if max_increment >= state.min_raise:
        actions.append({
            "type": ActionType.RAISE.value,
            "min": state.min_raise,
            "max": max_increment,
        })

    actions.append({
        "type": ActionType.ALL_IN.value,
        "amount": player.stack,
    })

    return actions
