"""
Precondition checks for game use-cases.

Each validator takes a Game and returns Outcome.success(game) when the
precondition holds, or a failure carrying the matching GameError. Checks
that depend on a player are factories returning such a validator, so all
of them compose with Outcome.chain.
"""

from typing import Any, Callable

from deepuno.core.card import Card, Color, INVALID_WILD_COLOR_MESSAGE, parse_color
from deepuno.core.errors import (
    GameNotAcceptingPlayersError, GameFullError, UserAlreadyInGameError,
    NotGameCreatorError, GameAlreadyStartedError, MinimumPlayersRequiredError,
    NotAllPlayersReadyError, UserNotInGameError, GameNotActiveError,
    GameHasNotStartedError, CannotPerformActionError, InvalidGameIdError,
)
from deepuno.core.game import Game
from deepuno.core.lifecycle import get_current_player
from deepuno.core.outcome import Outcome
from deepuno.core.rules import GameStatus


Validator = Callable[[Game], Outcome]


def validate_game_id(raw: Any) -> Outcome:
    """Accept a non-blank string id, returning it stripped."""
    if not isinstance(raw, str) or not raw.strip():
        return Outcome.failure(InvalidGameIdError())
    return Outcome.success(raw.strip())


def validate_game_is_waiting(game: Game) -> Outcome:
    if game.status == GameStatus.WAITING:
        return Outcome.success(game)
    return Outcome.failure(GameNotAcceptingPlayersError())


def validate_game_not_full(game: Game) -> Outcome:
    if not game.is_full:
        return Outcome.success(game)
    return Outcome.failure(GameFullError())


def validate_player_not_in_game(player_id: str) -> Validator:
    def validate(game: Game) -> Outcome:
        if not game.has_player(player_id):
            return Outcome.success(game)
        return Outcome.failure(UserAlreadyInGameError())
    return validate


def validate_is_creator(player_id: str) -> Validator:
    def validate(game: Game) -> Outcome:
        if game.creator_id == player_id:
            return Outcome.success(game)
        return Outcome.failure(NotGameCreatorError())
    return validate


def validate_game_not_started(game: Game) -> Outcome:
    # An ended game counts as started: status never moves backward
    if game.status == GameStatus.WAITING:
        return Outcome.success(game)
    return Outcome.failure(GameAlreadyStartedError())


def validate_minimum_players(game: Game) -> Outcome:
    if game.num_players >= game.min_players:
        return Outcome.success(game)
    return Outcome.failure(MinimumPlayersRequiredError(game.min_players))


def validate_all_players_ready(game: Game) -> Outcome:
    if all(p.ready for p in game.players):
        return Outcome.success(game)
    return Outcome.failure(NotAllPlayersReadyError())


def validate_player_in_game(player_id: str) -> Validator:
    def validate(game: Game) -> Outcome:
        if game.has_player(player_id):
            return Outcome.success(game)
        return Outcome.failure(UserNotInGameError())
    return validate


def validate_game_is_active(game: Game) -> Outcome:
    if game.status == GameStatus.ACTIVE:
        return Outcome.success(game)
    return Outcome.failure(GameNotActiveError())


def validate_game_has_started(game: Game) -> Outcome:
    if game.status != GameStatus.WAITING:
        return Outcome.success(game)
    return Outcome.failure(GameHasNotStartedError())


def validate_game_has_players(game: Game) -> Outcome:
    if game.players:
        return Outcome.success(game)
    return Outcome.failure(CannotPerformActionError("No players in game"))


def validate_is_current_player(player_id: str) -> Validator:
    def validate(game: Game) -> Outcome:
        return get_current_player(game).chain(
            lambda current: Outcome.success(game)
            if current.player_id == player_id
            else Outcome.failure(CannotPerformActionError("It is not your turn."))
        )
    return validate


def parse_chosen_color(card: Card, chosen_color: Any) -> Outcome:
    """
    The color a wild card puts in play, or None for any other card.

    Wild cards need one of red, blue, green or yellow; anything else fails
    with CannotPerformActionError.
    """
    if not card.is_wild:
        return Outcome.success(None)
    return (
        Outcome.from_callable(parse_color, chosen_color)
        .chain(lambda color: Outcome.failure(color) if color == Color.WILD else Outcome.success(color))
        .map_error(lambda _: CannotPerformActionError(INVALID_WILD_COLOR_MESSAGE))
    )
