"""
Tests for pure game lifecycle transitions.
"""

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from deepuno.core.card import Card, Color
from deepuno.core.errors import CouldNotDetermineCurrentPlayerError
from deepuno.core.lifecycle import (
    create_initial_game, add_player, mark_player_as_ready, start_game,
    get_current_player, advance_turn, remove_player_from_game,
    determine_post_abandonment_action, abandon_game, create_end_game_payload,
    apply_patch, end_game, has_player_won, top_card, discard_card,
    current_color, advance_after_play,
)
from deepuno.core.rules import GameStatus, TurnDirection, PostAbandonmentAction


def ids(game):
    return [p.player_id for p in game.players]


def positions(game):
    return [p.position for p in game.players]


class TestCreateGame:
    """Tests for game creation."""

    def test_creator_is_seated_and_ready(self, create_request):
        game = create_initial_game(create_request, "alice", game_id="g1")

        assert game.id == "g1"
        assert game.title == "Friday night UNO"
        assert game.status == GameStatus.WAITING
        assert game.creator_id == "alice"
        assert ids(game) == ["alice"]
        assert game.players[0].ready
        assert game.players[0].position == 1
        assert game.discard_pile == []

    def test_generates_id(self, create_request):
        first = create_initial_game(create_request, "alice")
        second = create_initial_game(create_request, "alice")

        assert first.id != second.id

    def test_initial_card(self, create_request):
        game = create_initial_game(create_request, "alice", initial_card=Card("red", "5"))

        assert game.initial_card == Card("red", "5")


class TestLobby:
    """Tests for joining, readying and starting."""

    def test_add_player_does_not_mutate(self, waiting_game):
        game = add_player(waiting_game, "bob")

        assert ids(game) == ["alice", "bob"]
        assert ids(waiting_game) == ["alice"]
        assert not game.get_player("bob").ready

    def test_mark_ready(self, waiting_game):
        game = mark_player_as_ready(add_player(waiting_game, "bob"), "bob")

        assert game.ready_count == 2

    def test_mark_unknown_player(self, waiting_game):
        assert mark_player_as_ready(waiting_game, "zed") == waiting_game

    def test_start_game(self, make_game):
        """Starting activates the game and renumbers seats 1..N."""
        game = make_game(["alice", "bob", "carol"])
        game = replace(game, players=[p.at_position(9) for p in game.players])

        started = start_game(game)

        assert started.status == GameStatus.ACTIVE
        assert started.current_player_index == 0
        assert started.turn_direction == TurnDirection.FORWARD.value
        assert positions(started) == [1, 2, 3]


class TestTurns:
    """Tests for turn order."""

    def test_current_player(self, active_game):
        assert get_current_player(active_game).value.player_id == "alice"

    def test_current_player_empty_roster(self, active_game):
        """An empty roster has no current player."""
        empty = replace(active_game, players=[])

        assert get_current_player(empty).error == CouldNotDetermineCurrentPlayerError()

    def test_advance_cycles_forward(self, active_game):
        game = active_game
        seen = []
        for _ in range(4):
            game = advance_turn(game)
            seen.append(game.current_player_index)

        assert seen == [1, 2, 0, 1]

    def test_advance_cycles_reversed(self, active_game):
        """Reversed play wraps from seat 0 to the last seat."""
        game = replace(active_game, turn_direction=TurnDirection.REVERSED.value)
        seen = []
        for _ in range(4):
            game = advance_turn(game)
            seen.append(game.current_player_index)

        assert seen == [2, 1, 0, 2]

    def test_advance_without_players(self, active_game):
        with pytest.raises(ValueError):
            advance_turn(replace(active_game, players=[]))

    def test_advance_does_not_mutate(self, active_game):
        advance_turn(active_game)

        assert active_game.current_player_index == 0


class TestRemovePlayer:
    """Tests for removal and turn re-anchoring."""

    def test_positions_renumbered(self, make_game):
        game = make_game(["a", "b", "c", "d"], status=GameStatus.ACTIVE)

        game = remove_player_from_game(game, "b")

        assert ids(game) == ["a", "c", "d"]
        assert positions(game) == [1, 2, 3]

    def test_turn_stays_with_current_player(self, make_game):
        """Removing a seat before the current player keeps the same player's turn."""
        game = make_game(["a", "b", "c", "d"], status=GameStatus.ACTIVE, current_player_index=2)

        game = remove_player_from_game(game, "a")

        assert get_current_player(game).value.player_id == "c"

    def test_turn_passes_when_current_player_leaves(self, make_game):
        game = make_game(["a", "b", "c"], status=GameStatus.ACTIVE, current_player_index=1)

        game = remove_player_from_game(game, "b")

        assert get_current_player(game).value.player_id == "c"

    def test_turn_wraps_when_last_seat_leaves(self, make_game):
        game = make_game(["a", "b", "c"], status=GameStatus.ACTIVE, current_player_index=2)

        game = remove_player_from_game(game, "c")

        assert game.current_player_index == 0
        assert get_current_player(game).value.player_id == "a"

    def test_turn_passes_backwards_when_reversed(self, make_game):
        game = make_game(["a", "b", "c", "d"], status=GameStatus.ACTIVE, current_player_index=1)
        game = replace(game, turn_direction=TurnDirection.REVERSED.value)

        game = remove_player_from_game(game, "b")

        assert get_current_player(game).value.player_id == "a"

    def test_unknown_player(self, active_game):
        assert remove_player_from_game(active_game, "zed") is active_game

    def test_last_player_removed(self, make_game):
        game = make_game(["a"], status=GameStatus.ACTIVE)

        game = remove_player_from_game(game, "a")

        assert game.players == []
        assert game.current_player_index == 0


class TestAbandonment:
    """Tests for post-abandonment classification."""

    def test_many_remaining(self, active_game):
        game, decision = abandon_game(active_game, "bob")

        assert decision.action == PostAbandonmentAction.SAVE_GAME
        assert decision.winner_id is None
        assert ids(game) == ["alice", "carol"]
        assert game.status == GameStatus.ACTIVE

    def test_one_remaining_wins(self, make_game):
        game = make_game(["a", "b"], status=GameStatus.ACTIVE)

        _, decision = abandon_game(game, "a")

        assert decision.action == PostAbandonmentAction.END_GAME_WITH_WINNER
        assert decision.winner_id == "b"

    def test_none_remaining(self, make_game):
        game = make_game(["a"], status=GameStatus.ACTIVE)

        game, decision = abandon_game(game, "a")

        assert decision.action == PostAbandonmentAction.END_GAME_NO_WINNER
        assert determine_post_abandonment_action(game) == decision


class TestEndGame:

    def test_end_game_payload(self):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)

        assert create_end_game_payload("bob", now) == {
            "status": GameStatus.ENDED,
            "ended_at": now,
            "winner_id": "bob",
        }

    def test_end_game(self, active_game):
        game = end_game(active_game, winner_id="carol")

        assert game.status == GameStatus.ENDED
        assert game.winner_id == "carol"
        assert game.ended_at is not None

    def test_end_game_without_winner(self, active_game):
        assert end_game(active_game).winner_id is None

    def test_apply_patch_rejects_unknown_fields(self, active_game):
        with pytest.raises(ValueError):
            apply_patch(active_game, {"score": 10})

    def test_has_player_won(self):
        assert has_player_won(0)
        assert not has_player_won(1)


class TestDiscardPile:
    """Tests for discarding and the top card."""

    def test_top_card_defaults_to_initial(self, active_game):
        assert top_card(active_game) == active_game.initial_card

    def test_discard_orders_cards(self, active_game):
        game = discard_card(active_game, Card("blue", "3"), played_by="alice")
        game = discard_card(game, Card("blue", "skip"), played_by="bob")

        assert [c.order for c in game.discard_pile] == [1, 2]
        assert top_card(game) == Card("blue", "skip")
        assert game.top_card.played_by == "bob"
        assert active_game.discard_pile == []

    def test_discard_sets_color_in_play(self, active_game):
        game = discard_card(active_game, Card("green", "4"), played_by="alice")

        assert game.current_color == Color.GREEN
        assert current_color(game) == Color.GREEN

    def test_wild_discard_uses_chosen_color(self, active_game):
        """A wild card puts the chosen color in play."""
        game = discard_card(active_game, Card("wild", "wild"), played_by="alice", chosen_color=Color.YELLOW)

        assert top_card(game) == Card("wild", "wild")
        assert current_color(game) == Color.YELLOW

    def test_wild_discard_requires_plain_color(self, active_game):
        with pytest.raises(ValueError):
            discard_card(active_game, Card("wild", "wild_draw4"))
        with pytest.raises(ValueError):
            discard_card(active_game, Card("wild", "wild"), chosen_color=Color.WILD)

    def test_color_in_play_defaults_to_initial_card(self, active_game):
        assert current_color(active_game) == Color.BLUE


class TestAdvanceAfterPlay:

    def test_number_card_advances_once(self, active_game):
        assert advance_after_play(active_game, Card("blue", "4")).current_player_index == 1

    def test_skip_advances_twice(self, active_game):
        assert advance_after_play(active_game, Card("blue", "skip")).current_player_index == 2

    def test_skip_heads_up_returns_turn(self, make_game):
        """With two players a skip gives the turn back to the player who played it."""
        game = make_game(["a", "b"], status=GameStatus.ACTIVE)

        assert advance_after_play(game, Card("red", "skip")).current_player_index == 0
