"""
Error taxonomy for the hand engine.

Validation failures are recoverable: they reject a single request, leave the
hand untouched and are reported only to the requesting player. Running out of
cards is the one fatal condition.
"""

from enum import Enum


class RejectReason(Enum):
    """Why an action or confirmation was rejected."""
    NOT_YOUR_TURN = "NotYourTurn"
    UNKNOWN_PLAYER = "UnknownPlayer"
    ALREADY_FOLDED = "AlreadyFolded"
    ALREADY_ALL_IN = "AlreadyAllIn"
    ILLEGAL_CHECK = "IllegalCheck"
    NOTHING_TO_CALL = "NothingToCall"
    INVALID_RAISE_AMOUNT = "InvalidRaiseAmount"
    RAISE_TOO_SMALL = "RaiseTooSmall"
    INSUFFICIENT_CHIPS_TO_RAISE = "InsufficientChipsToRaise"
    NOT_AWAITING_CONFIRMATION = "NotAwaitingConfirmation"
    STALE_ACTION = "StaleAction"
    UNKNOWN_ACTION = "UnknownAction"


class PokerError(Exception):
    """Base class for all hand engine errors."""


class ActionRejected(PokerError):
    """A player request failed validation. State was not modified."""

    def __init__(self, reason: RejectReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message

    def __repr__(self) -> str:
        return f"ActionRejected({self.reason.value}: {self.message})"


class EmptyDeckError(PokerError):
    """A card was drawn from an exhausted deck."""


class HandAbortedError(PokerError):
    """The current hand was abandoned and all contributions refunded."""


class NotEnoughPlayersError(PokerError, ValueError):
    """Fewer than two players with chips are available to start a hand."""


class SeatingError(PokerError, ValueError):
    """A player could not be seated (table full or duplicate id)."""
