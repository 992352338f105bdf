"""
Tests for the table: seating, the hand-to-hand lifecycle and dealer rotation.
"""

import random

import pytest
from pokertable.core import betting
from pokertable.core.card import Deck, parse_cards
from pokertable.core.errors import HandAbortedError, NotEnoughPlayersError, RejectReason, SeatingError
from pokertable.core.rules import ActionType
from pokertable.core.table import PokerTable

from tests.helpers import rig_deck


def seated_table(count=2, **kwargs):
    table = PokerTable(**kwargs)
    for i in range(count):
        table.seat_player(f"p{i}", f"Player {i}")
    return table


def fold_around(table):
    """Everyone folds to the big blind."""
    while table.is_hand_running:
        actor = table.hand.current_player
        assert table.apply_action(actor.player_id, ActionType.FOLD).success


def confirm_all(table):
    """Every player in the finished hand confirms. Returns the last result."""
    result = None
    for player in list(table.hand.players):
        result = table.confirm_result(player.player_id)
    return result


class TestSeating:
    """Tests for seating players."""

    def test_seat_assigns_buy_in_and_seat(self):
        table = PokerTable(buy_in=500)
        player = table.seat_player("a", "Alice")
        assert player.stack == 500
        assert player.seat == 0
        assert table.seat_player("b", "Bob").seat == 1

    def test_duplicate_player(self):
        table = seated_table(1)
        with pytest.raises(SeatingError):
            table.seat_player("p0", "Again")

    def test_table_full(self):
        table = seated_table(2, max_players=2)
        with pytest.raises(SeatingError):
            table.seat_player("p2", "Late")

    @pytest.mark.parametrize("kwargs", [
        {"max_players": 1},
        {"max_players": 11},
        {"small_blind": 0},
        {"small_blind": 20, "big_blind": 10},
    ])
    def test_invalid_table_settings(self, kwargs):
        with pytest.raises(ValueError):
            PokerTable(**kwargs)


class TestHandLifecycle:
    """Tests for starting hands and confirming results."""

    def test_needs_two_players(self):
        table = seated_table(1)
        with pytest.raises(NotEnoughPlayersError):
            table.start_hand()

    def test_cannot_start_twice(self):
        table = seated_table(2)
        table.start_hand()
        with pytest.raises(RuntimeError):
            table.start_hand()

    def test_action_without_hand(self):
        table = seated_table(2)
        result = table.apply_action("p0", ActionType.CHECK)
        assert result.error == RejectReason.NOT_YOUR_TURN
        result = table.apply_action("ghost", ActionType.CHECK)
        assert result.error == RejectReason.UNKNOWN_PLAYER

    def test_confirm_while_running(self):
        table = seated_table(2)
        table.start_hand()
        result = table.confirm_result("p0")
        assert not result.success
        assert result.error == RejectReason.NOT_AWAITING_CONFIRMATION

    def test_confirm_unknown_player(self):
        table = seated_table(2)
        table.start_hand()
        fold_around(table)
        result = table.confirm_result("ghost")
        assert result.error == RejectReason.UNKNOWN_PLAYER

    def test_next_hand_waits_for_everyone(self):
        table = seated_table(2)
        table.start_hand()
        fold_around(table)
        assert table.awaiting_confirmation

        first = table.confirm_result("p0")
        assert first.success and not first.new_hand_started
        # Confirming twice changes nothing
        again = table.confirm_result("p0")
        assert again.success and not again.new_hand_started
        assert table.hand_number == 1

        last = table.confirm_result("p1")
        assert last.new_hand_started
        assert table.hand_number == 2
        assert table.is_hand_running

    def test_confirm_result_to_dict(self):
        table = seated_table(2)
        table.start_hand()
        fold_around(table)
        assert table.confirm_result("p0").to_dict() == {
            "success": True,
            "new_hand_started": False,
            "message": "",
            "error": None,
        }

    def test_dealer_rotates_each_hand(self):
        table = seated_table(3)
        dealers = []
        for _ in range(4):
            hand = table.hand or table.start_hand()
            dealers.append(hand.players[hand.dealer_index].player_id)
            fold_around(table)
            confirm_all(table)
        assert dealers == ["p0", "p1", "p2", "p0"]

    def test_action_seq_continues_across_hands(self):
        table = seated_table(2)
        table.start_hand()
        fold_around(table)
        seq = table.hand.action_seq
        confirm_all(table)
        assert table.hand.action_seq == seq

    def test_joiner_dealt_next_hand(self):
        table = seated_table(2)
        table.start_hand()
        table.seat_player("late", "Late")
        assert table.hand.get_player("late") is None
        seated = {s["id"]: s for s in table.view_for("late")["seated"]}
        assert seated["late"]["in_hand"] is False

        fold_around(table)
        assert confirm_all(table).new_hand_started
        assert table.hand.get_player("late") is not None


class TestBustAndLeave:
    """Tests for busted and departed players."""

    def test_busted_player_dropped(self):
        factory = lambda: rig_deck(["As Ad", "Kc Kd", "4c 6d"], "2h 7s 9c Jd 3h")
        table = PokerTable(deck_factory=factory)
        table.seat_player("p0", "A")
        table.seat_player("p1", "B")
        table.seat_player("p2", "C", stack=50)

        table.start_hand()
        table.apply_action("p0", ActionType.RAISE, 100)
        table.apply_action("p1", ActionType.FOLD)
        table.apply_action("p2", ActionType.CALL)
        assert table.get_player("p2").stack == 0

        # The busted player owes no confirmation
        table.confirm_result("p0")
        assert table.confirm_result("p1").new_hand_started
        assert [p.player_id for p in table.players] == ["p0", "p1"]
        assert [p.player_id for p in table.hand.players] == ["p0", "p1"]
        # Button moves from seat 0 to seat 1
        assert table.hand.dealer_index == 1

    def test_table_goes_idle(self):
        factory = lambda: rig_deck(["As Ad", "Kc Kd"], "2h 7s 9c Jd 3h")
        table = PokerTable(deck_factory=factory)
        table.seat_player("p0", "A")
        table.seat_player("p1", "B", stack=500)

        table.start_hand()
        table.apply_action("p0", ActionType.ALL_IN)
        table.apply_action("p1", ActionType.CALL)

        result = table.confirm_result("p0")
        assert result.success
        assert not result.new_hand_started
        assert table.hand is None
        assert [p.player_id for p in table.players] == ["p0"]
        assert table.get_player("p0").stack == 1500

    def test_disconnect_mid_hand(self):
        table = seated_table(3)
        table.start_hand()
        assert table.on_disconnect("p1")
        assert table.get_player("p1") is None
        assert table.hand.get_player("p1").folded

    def test_departed_player_not_dealt_again(self):
        table = seated_table(3)
        table.start_hand()
        table.on_disconnect("p1")
        fold_around(table)
        assert confirm_all(table).new_hand_started
        assert [p.player_id for p in table.hand.players] == ["p0", "p2"]

    def test_last_opponent_leaves(self):
        table = seated_table(2)
        table.start_hand()
        table.on_disconnect("p1")
        assert table.awaiting_confirmation
        assert table.hand.result.awards == {"p0": 30}
        result = table.confirm_result("p0")
        assert result.success and not result.new_hand_started
        assert table.hand is None

    def test_unknown_disconnect(self):
        assert not seated_table(2).on_disconnect("ghost")


class TestEmptyDeck:
    """Tests for abandoning a hand when the deck runs out."""

    def test_abort_refunds_contributions(self):
        # Enough for hole cards, one burn and the flop only
        cards = parse_cards("2c 3c 4c 5c 6c 7c 8c 9c")
        table = seated_table(2, deck_factory=lambda: Deck(cards=cards))
        table.start_hand()
        table.apply_action("p0", ActionType.CALL)
        table.apply_action("p1", ActionType.CHECK)
        table.apply_action("p1", ActionType.CHECK)

        with pytest.raises(HandAbortedError):
            table.apply_action("p0", ActionType.CHECK)

        assert table.hand is None
        assert [p.stack for p in table.players] == [1000, 1000]
        assert all(p.total_bet == 0 for p in table.players)

    def test_abort_while_dealing(self):
        table = seated_table(2, deck_factory=lambda: Deck(cards=parse_cards("2c 3c 4c")))
        with pytest.raises(HandAbortedError):
            table.start_hand()
        assert table.hand is None
        assert [p.stack for p in table.players] == [1000, 1000]


class TestManyHands:
    @pytest.mark.parametrize("seed", range(5))
    def test_chips_conserved_across_hands(self, seed):
        rng = random.Random(seed)
        table = PokerTable(deck_factory=lambda: Deck(rng=rng))
        for i in range(4):
            table.seat_player(f"p{i}", f"Player {i}", stack=rng.randint(40, 400))
        total = sum(p.stack for p in table.players)

        table.start_hand()
        for _ in range(20):
            if table.hand is None:
                break
            while table.is_hand_running:
                actor = table.hand.current_player
                choice = rng.choice(betting.legal_actions(table.hand, actor))
                action = ActionType(choice["type"])
                amount = rng.randint(choice["min"], choice["max"]) if action == ActionType.RAISE else 0
                assert table.apply_action(actor.player_id, action, amount).success
            confirm_all(table)

        assert sum(p.stack for p in table.players) == total
