"""
Tests for action validation and the betting rules.

Raise amounts are increments above the call; an all-in for less than the
minimum increment does not reopen the betting.
"""

import pytest
from pokertable.core import betting
from pokertable.core.errors import ActionRejected, RejectReason
from pokertable.core.game import start_hand
from pokertable.core.rules import ActionType, Stage

from tests.helpers import make_players


class TestRejections:
    """Every rejection leaves the hand untouched and reports a reason."""

    def assert_rejected(self, hand, player_id, action, reason, amount=0, action_seq=None):
        before = (hand.pot, hand.action_seq, hand.current_player_index,
                  [(p.stack, p.current_bet, p.folded) for p in hand.players])
        result = hand.apply_action(player_id, action, amount, action_seq)
        assert not result.success
        assert result.error == reason
        after = (hand.pot, hand.action_seq, hand.current_player_index,
                 [(p.stack, p.current_bet, p.folded) for p in hand.players])
        assert before == after

    def test_not_your_turn(self, three_handed):
        self.assert_rejected(three_handed, "p1", ActionType.CALL, RejectReason.NOT_YOUR_TURN)

    def test_unknown_player(self, three_handed):
        self.assert_rejected(three_handed, "nobody", ActionType.FOLD, RejectReason.UNKNOWN_PLAYER)

    def test_illegal_check(self, three_handed):
        self.assert_rejected(three_handed, "p0", ActionType.CHECK, RejectReason.ILLEGAL_CHECK)

    def test_nothing_to_call(self, three_handed):
        """The big blind, when limped to, must check rather than call."""
        three_handed.apply_action("p0", ActionType.CALL)
        three_handed.apply_action("p1", ActionType.CALL)
        self.assert_rejected(three_handed, "p2", ActionType.CALL, RejectReason.NOTHING_TO_CALL)

    def test_raise_too_small(self, three_handed):
        self.assert_rejected(
            three_handed, "p0", ActionType.RAISE, RejectReason.RAISE_TOO_SMALL, amount=10
        )

    def test_raise_too_small_with_exact_stack(self):
        """Call plus raise equals the stack, but the raise is under the minimum."""
        hand = start_hand(make_players(30, 1000, 1000), dealer_index=0)
        self.assert_rejected(hand, "p0", ActionType.RAISE, RejectReason.RAISE_TOO_SMALL, amount=10)

        # The same chips can still go in as an all-in
        result = hand.apply_action("p0", ActionType.ALL_IN)
        assert result.success
        assert hand.min_raise == 20

    @pytest.mark.parametrize("amount", [0, -20, "abc", 20.5, True, None, 10 ** 12])
    def test_invalid_raise_amount(self, three_handed, amount):
        self.assert_rejected(
            three_handed, "p0", ActionType.RAISE, RejectReason.INVALID_RAISE_AMOUNT, amount=amount
        )

    def test_insufficient_chips_to_raise(self):
        hand = start_hand(make_players(1000, 1000, 30), dealer_index=0)
        hand.apply_action("p0", ActionType.RAISE, 100)
        hand.apply_action("p1", ActionType.CALL)
        # p2 has 10 behind and owes 100
        self.assert_rejected(
            hand, "p2", ActionType.RAISE, RejectReason.INSUFFICIENT_CHIPS_TO_RAISE, amount=50
        )

    def test_stale_action(self, three_handed):
        self.assert_rejected(
            three_handed, "p0", ActionType.CALL, RejectReason.STALE_ACTION, action_seq=99
        )

    def test_current_seq_is_accepted(self, three_handed):
        result = three_handed.apply_action(
            "p0", ActionType.CALL, action_seq=three_handed.action_seq
        )
        assert result.success

    def test_already_folded(self, three_handed):
        three_handed.current_player.folded = True
        with pytest.raises(ActionRejected) as exc_info:
            betting.validate_actor(three_handed, "p0")
        assert exc_info.value.reason == RejectReason.ALREADY_FOLDED

    def test_already_all_in(self, three_handed):
        three_handed.current_player.stack = 0
        with pytest.raises(ActionRejected) as exc_info:
            betting.validate_actor(three_handed, "p0")
        assert exc_info.value.reason == RejectReason.ALREADY_ALL_IN

    def test_rejection_to_dict(self, three_handed):
        result = three_handed.apply_action("p1", ActionType.FOLD)
        assert result.to_dict() == {
            "success": False,
            "error": "NotYourTurn",
            "message": "Not your turn",
        }


class TestBettingActions:
    """Tests for the effect of legal actions."""

    def test_call_matches_big_blind(self, three_handed):
        result = three_handed.apply_action("p0", ActionType.CALL)
        assert result.success
        assert result.amount == 20
        assert three_handed.get_player("p0").current_bet == 20
        assert three_handed.pot == 50

    def test_raise_is_increment_above_call(self, three_handed):
        result = three_handed.apply_action("p0", ActionType.RAISE, 60)
        assert result.success
        p0 = three_handed.get_player("p0")
        assert p0.current_bet == 80
        assert result.amount == 80
        assert three_handed.min_raise == 60

    def test_raise_beyond_stack_goes_all_in(self, three_handed):
        result = three_handed.apply_action("p0", ActionType.RAISE, 5000)
        assert result.success
        p0 = three_handed.get_player("p0")
        assert p0.stack == 0
        assert p0.current_bet == 1000
        assert p0.is_all_in

    def test_call_short_stack_goes_all_in(self):
        hand = start_hand(make_players(1000, 1000, 50), dealer_index=0)
        hand.apply_action("p0", ActionType.RAISE, 200)
        hand.apply_action("p1", ActionType.FOLD)
        result = hand.apply_action("p2", ActionType.CALL)
        assert result.success
        assert result.amount == 30
        assert hand.get_player("p2").last_action == "ALL-IN $50"

    def test_all_in_covering_call_only(self):
        hand = start_hand(make_players(1000, 1000, 50), dealer_index=0)
        hand.apply_action("p0", ActionType.RAISE, 200)
        hand.apply_action("p1", ActionType.FOLD)
        result = hand.apply_action("p2", ActionType.ALL_IN)
        assert result.success
        assert result.amount == 30
        assert hand.min_raise == 200
        # Nobody left to bet against: the board runs out
        assert hand.awaiting_confirmation
        assert len(hand.community_cards) == 5

    def test_big_blind_option(self, three_handed):
        """Preflop the big blind still acts after everyone limps."""
        three_handed.apply_action("p0", ActionType.CALL)
        three_handed.apply_action("p1", ActionType.CALL)
        assert three_handed.stage == Stage.PREFLOP
        assert three_handed.current_player.player_id == "p2"

        three_handed.apply_action("p2", ActionType.CHECK)
        assert three_handed.stage == Stage.FLOP
        assert len(three_handed.community_cards) == 3
        # Postflop action starts left of the dealer
        assert three_handed.current_player.player_id == "p1"

    def test_min_raise_resets_each_street(self, three_handed):
        three_handed.apply_action("p0", ActionType.RAISE, 100)
        three_handed.apply_action("p1", ActionType.CALL)
        three_handed.apply_action("p2", ActionType.CALL)
        assert three_handed.stage == Stage.FLOP
        assert three_handed.min_raise == 20


class TestReopening:
    """Tests for which raises reopen the action."""

    def test_full_raise_reopens(self, three_handed):
        three_handed.apply_action("p0", ActionType.RAISE, 100)
        three_handed.apply_action("p1", ActionType.CALL)
        three_handed.apply_action("p2", ActionType.RAISE, 200)

        assert three_handed.min_raise == 200
        assert not three_handed.get_player("p0").has_acted
        assert not three_handed.get_player("p1").has_acted
        assert three_handed.current_player.player_id == "p0"

    def test_full_all_in_reopens(self, three_handed):
        three_handed.apply_action("p0", ActionType.RAISE, 100)
        three_handed.apply_action("p1", ActionType.CALL)
        three_handed.apply_action("p2", ActionType.ALL_IN)

        assert three_handed.min_raise == 880
        assert not three_handed.get_player("p0").has_acted
        assert not three_handed.get_player("p1").has_acted

    def test_short_all_in_does_not_reopen(self):
        """BB shoves 170 more into a 100 raise: +70 is below the 100 minimum."""
        hand = start_hand(make_players(1000, 1000, 190), dealer_index=0)
        hand.apply_action("p0", ActionType.RAISE, 100)
        hand.apply_action("p1", ActionType.CALL)
        result = hand.apply_action("p2", ActionType.ALL_IN)

        assert result.success
        assert hand.get_player("p2").current_bet == 190
        assert hand.min_raise == 100
        assert hand.get_player("p0").has_acted
        assert hand.get_player("p1").has_acted

        # Callers still owe the difference; calling closes the round
        assert hand.current_player.player_id == "p0"
        hand.apply_action("p0", ActionType.CALL)
        hand.apply_action("p1", ActionType.CALL)
        assert hand.stage == Stage.FLOP
        assert hand.pot == 570

    def test_short_raise_request_becomes_all_in(self):
        """RAISE for more than the stack commits the stack, short or not."""
        hand = start_hand(make_players(1000, 1000, 190), dealer_index=0)
        hand.apply_action("p0", ActionType.RAISE, 100)
        hand.apply_action("p1", ActionType.CALL)
        result = hand.apply_action("p2", ActionType.RAISE, 500)
        assert result.success
        assert hand.get_player("p2").stack == 0
        assert hand.min_raise == 100


class TestLegalActions:
    """Tests for the legal action hints sent to clients."""

    def test_facing_big_blind(self, three_handed):
        actions = betting.legal_actions(three_handed, three_handed.get_player("p0"))
        assert actions == [
            {"type": "fold"},
            {"type": "call", "amount": 20},
            {"type": "raise", "min": 20, "max": 980},
            {"type": "all_in", "amount": 1000},
        ]

    def test_can_check(self, three_handed):
        three_handed.apply_action("p0", ActionType.CALL)
        three_handed.apply_action("p1", ActionType.CALL)
        types = [a["type"] for a in betting.legal_actions(three_handed, three_handed.get_player("p2"))]
        assert "check" in types
        assert "call" not in types

    def test_not_your_turn_has_no_actions(self, three_handed):
        assert betting.legal_actions(three_handed, three_handed.get_player("p1")) == []

    def test_no_raise_when_stack_only_covers_call(self):
        hand = start_hand(make_players(1000, 1000, 30), dealer_index=0)
        hand.apply_action("p0", ActionType.RAISE, 100)
        hand.apply_action("p1", ActionType.CALL)
        types = [a["type"] for a in betting.legal_actions(hand, hand.get_player("p2"))]
        assert types == ["fold", "call", "all_in"]

    def test_short_stack_offered_all_in_not_raise(self):
        # 30 behind facing 20: a 10 raise is under the minimum
        hand = start_hand(make_players(30, 1000, 1000), dealer_index=0)
        actions = betting.legal_actions(hand, hand.get_player("p0"))
        assert actions == [
            {"type": "fold"},
            {"type": "call", "amount": 20},
            {"type": "all_in", "amount": 30},
        ]

    def test_raise_for_whole_stack(self):
        hand = start_hand(make_players(40, 1000, 1000), dealer_index=0)
        actions = betting.legal_actions(hand, hand.get_player("p0"))
        assert {"type": "raise", "min": 20, "max": 20} in actions

        result = hand.apply_action("p0", ActionType.RAISE, 20)
        assert result.success
        assert hand.get_player("p0").last_action == "ALL-IN $40"
        assert hand.min_raise == 20
