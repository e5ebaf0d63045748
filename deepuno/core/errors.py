"""
Game errors.

A closed set of domain errors, each carrying the HTTP status the server
layer reports for it. Services return these inside failed Outcomes rather
than raising them; the server folds them into JSON responses.
"""

from typing import Optional


class GameError(Exception):
    """Base class for all game-related errors."""

    status_code: int = 500
    default_message: str = "Game error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.message == other.message

    def __hash__(self) -> int:
        return hash((type(self), self.message))


class GameNotFoundError(GameError):
    status_code = 404
    default_message = "Game not found"


class InvalidGameIdError(GameError):
    status_code = 400
    default_message = "Invalid game ID"


class GameNotActiveError(GameError):
    status_code = 400
    default_message = "Game is not active"


class GameHasNotStartedError(GameError):
    status_code = 412
    default_message = "Game has not started yet"


class GameAlreadyStartedError(GameError):
    status_code = 409
    default_message = "Game has already started"


class NotGameCreatorError(GameError):
    status_code = 403
    default_message = "Only the game creator can perform this action"


class MinimumPlayersRequiredError(GameError):
    status_code = 400

    def __init__(self, min_players: int):
        self.min_players = min_players
        super().__init__(f"Minimum {min_players} players required to start")


class NotAllPlayersReadyError(GameError):
    status_code = 400
    default_message = "Not all players are ready"


class GameFullError(GameError):
    status_code = 400
    default_message = "Game is full"


class UserAlreadyInGameError(GameError):
    status_code = 409
    default_message = "User is already in this game"


class UserNotInGameError(GameError):
    status_code = 404
    default_message = "You are not in this game"


class CannotPerformActionError(GameError):
    status_code = 400
    default_message = "Cannot perform this action now"


class CouldNotDetermineCurrentPlayerError(GameError):
    # Invalid current_player_index: an internal invariant was broken
    status_code = 500
    default_message = "Could not determine current player"


class GameNotAcceptingPlayersError(GameError):
    status_code = 400
    default_message = "Game is not accepting new players (Already Active or Ended)"
