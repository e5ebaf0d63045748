"""
Game lifecycle transitions.

Pure functions over the Game aggregate: no I/O, no shared state, and the
input game is never mutated. Preconditions (seat limits, creator rights,
readiness, status) are checked by the validators before a transition runs,
so each transition is safe to apply once its preconditions hold.
"""

from __future__ import annotations
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from deepuno.core.card import Card, CardValue, Color, PlayedCard
from deepuno.core.errors import CouldNotDetermineCurrentPlayerError
from deepuno.core.game import Game, GAME_FIELDS, utcnow
from deepuno.core.outcome import Outcome
from deepuno.core.player import PlayerEntry, renumber_positions
from deepuno.core.rules import (
    GameStatus, TurnDirection, PostAbandonment, PostAbandonmentAction,
    DEFAULT_INITIAL_CARD,
)


def create_initial_game(
    request: Any,
    creator_id: str,
    game_id: Optional[str] = None,
    initial_card: Card = DEFAULT_INITIAL_CARD,
    now: Optional[datetime] = None,
) -> Game:
    """
    Build a WAITING game with its creator seated, ready, at position 1.

    Args:
        request: Creation data with name, rules, min_players and max_players
        creator_id: Player creating the game
        game_id: Optional id; a random one is generated when omitted
    """
    now = now or utcnow()
    return Game(
        id=game_id or uuid.uuid4().hex,
        title=request.name,
        rules=request.rules,
        min_players=request.min_players,
        max_players=request.max_players,
        creator_id=creator_id,
        status=GameStatus.WAITING,
        players=[PlayerEntry(player_id=creator_id, ready=True, position=1)],
        initial_card=initial_card,
        created_at=now,
        updated_at=now,
    )


def add_player(game: Game, player_id: str) -> Game:
    """Seat a new, not-ready player at the end of the roster."""
    return replace(game, players=game.players + [PlayerEntry(player_id=player_id)])


def mark_player_as_ready(game: Game, player_id: str) -> Game:
    """Mark the player ready. Unknown players leave the game unchanged."""
    players = [
        p.mark_ready() if p.player_id == player_id else p
        for p in game.players
    ]
    return replace(game, players=players)


def start_game(game: Game) -> Game:
    """Activate the game: first seat to act, forward direction, seats renumbered."""
    return replace(
        game,
        status=GameStatus.ACTIVE,
        current_player_index=0,
        turn_direction=TurnDirection.FORWARD.value,
        players=renumber_positions(game.players),
    )


def get_current_player(game: Game) -> Outcome[PlayerEntry, CouldNotDetermineCurrentPlayerError]:
    """The player whose turn it is, or a failure if the index is out of range."""
    index = game.current_player_index
    if 0 <= index < game.num_players:
        return Outcome.success(game.players[index])
    return Outcome.failure(CouldNotDetermineCurrentPlayerError())


def next_player_index(game: Game) -> int:
    """Index of the seat after the current one in the turn direction."""
    num_players = game.num_players
    if num_players == 0:
        raise ValueError("Cannot advance the turn of a game without players")
    # Adding num_players keeps the index non-negative when reversed
    return (game.current_player_index + game.turn_direction + num_players) % num_players


def advance_turn(game: Game) -> Game:
    """Pass the turn to the next seat. The roster must not be empty."""
    return replace(game, current_player_index=next_player_index(game))


def remove_player_from_game(game: Game, player_id: str) -> Game:
    """
    Remove a player, renumber the remaining seats and keep the turn anchored.

    The current turn follows player identity, not seat index: if someone
    else was removed, the same player keeps the turn; if the current player
    was removed, the turn goes to whoever was next in the turn direction.
    """
    removed_index = game.index_of(player_id)
    if removed_index is None:
        return game

    remaining = renumber_positions(
        [p for p in game.players if p.player_id != player_id]
    )
    if not remaining:
        return replace(game, players=remaining, current_player_index=0)

    anchor_id = None
    current = get_current_player(game)
    if current.is_success:
        if current.value.player_id != player_id:
            anchor_id = current.value.player_id
        else:
            anchor_id = game.players[next_player_index(game)].player_id

    index = 0
    for i, player in enumerate(remaining):
        if player.player_id == anchor_id:
            index = i
            break

    return replace(game, players=remaining, current_player_index=index)


def determine_post_abandonment_action(game: Game) -> PostAbandonment:
    """Decide what follows an abandonment from the remaining roster size."""
    remaining = game.num_players
    if remaining == 1:
        return PostAbandonment(
            PostAbandonmentAction.END_GAME_WITH_WINNER,
            game.players[0].player_id,
        )
    if remaining == 0:
        return PostAbandonment(PostAbandonmentAction.END_GAME_NO_WINNER, None)
    return PostAbandonment(PostAbandonmentAction.SAVE_GAME)


def abandon_game(game: Game, player_id: str) -> Tuple[Game, PostAbandonment]:
    """Remove the player and classify the resulting state. Does not end the game."""
    game = remove_player_from_game(game, player_id)
    return game, determine_post_abandonment_action(game)


def create_end_game_payload(winner_id: Optional[str] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
    return {
        "status": GameStatus.ENDED,
        "ended_at": now or utcnow(),
        "winner_id": winner_id,
    }


def apply_patch(game: Game, patch: Dict[str, Any]) -> Game:
    """Return a copy of game with the patch fields applied."""
    unknown = set(patch) - GAME_FIELDS
    if unknown:
        raise ValueError(f"Unknown game fields: {sorted(unknown)}")
    return replace(game, **patch)


def end_game(game: Game, winner_id: Optional[str] = None, now: Optional[datetime] = None) -> Game:
    return apply_patch(game, create_end_game_payload(winner_id, now))


def has_player_won(hand_size: int) -> bool:
    """A player wins by emptying their hand."""
    return hand_size == 0


def top_card(game: Game) -> Card:
    """The card the next play is checked against: pile top, else the initial card."""
    played = game.top_card
    return played.card if played is not None else game.initial_card


def current_color(game: Game) -> Color:
    """The color in play: the one set by the last discard, else the top card's."""
    return game.current_color or top_card(game).color


def discard_card(
    game: Game,
    card: Card,
    played_by: Optional[str] = None,
    chosen_color: Optional[Color] = None,
    card_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Game:
    """
    Append a card to the discard pile with the next order number.

    A wild card sets the color in play to chosen_color, which must be a
    plain color; any other card sets it to its own color.
    """
    if card.is_wild and chosen_color in (None, Color.WILD):
        raise ValueError(f"A plain color must be chosen for {card}")
    order = game.discard_pile[-1].order + 1 if game.discard_pile else 1
    played = PlayedCard(
        card=card,
        order=order,
        card_id=card_id or uuid.uuid4().hex,
        played_by=played_by,
        played_at=now or utcnow(),
    )
    return replace(
        game,
        discard_pile=game.discard_pile + [played],
        current_color=chosen_color if card.is_wild else card.color,
    )


def advance_after_play(game: Game, card: Card) -> Game:
    """Pass the turn after a play; a skip passes over the next seat as well."""
    game = advance_turn(game)
    if card.value == CardValue.SKIP:
        game = advance_turn(game)
    return game
