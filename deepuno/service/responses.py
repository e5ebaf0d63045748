"""
Response builders for game use-cases.

Field names here are part of the public API and are kept exactly as
clients expect them (mixed camelCase and snake_case included).
"""

from typing import Any, Dict, List, Optional

from deepuno.core.card import Card, PlayedCard, card_label
from deepuno.core.game import Game
from deepuno.core.lifecycle import current_color
from deepuno.core.rules import (
    SYSTEM_PLAYER, EMPTY_DISCARD_PILE_MESSAGE, RECENT_DISCARDS_LIMIT,
)


def build_join_game_response(game: Game) -> Dict[str, Any]:
    return {
        "message": "User joined the game successfully",
        "gameId": game.id,
        "currentPlayerCount": game.num_players,
    }


def build_set_player_ready_response(game: Game) -> Dict[str, Any]:
    return {
        "success": True,
        "message": "Player set to ready",
        "playersReadyCount": game.ready_count,
        "totalPlayers": game.num_players,
    }


def build_advance_turn_response(game: Game) -> str:
    """Id of the player whose turn it now is."""
    return game.players[game.current_player_index].player_id


def build_abandon_game_response() -> Dict[str, Any]:
    return {"success": True, "message": "You left the game"}


def build_play_card_response(game: Game, won: bool) -> Dict[str, Any]:
    if won:
        return {
            "success": True,
            "message": "You played your last card and won!",
            "winnerId": game.winner_id,
        }
    return {
        "success": True,
        "message": "Card played successfully.",
        "nextPlayerId": build_advance_turn_response(game),
    }


def _played_by(card: PlayedCard) -> str:
    return card.played_by or SYSTEM_PLAYER


def build_recent_card(card: PlayedCard) -> Dict[str, Any]:
    return {
        "color": card.color.value,
        "value": card.value.value,
        "type": card.type.value,
        "played_by": _played_by(card),
        "order": card.order,
    }


def recent_cards(game: Game, limit: int = RECENT_DISCARDS_LIMIT) -> List[Dict[str, Any]]:
    """The last `limit` discards, newest first."""
    if limit <= 0:
        return []
    return [build_recent_card(c) for c in reversed(game.discard_pile[-limit:])]


def build_discard_top_response(game: Game) -> Dict[str, Any]:
    """
    Top of the discard pile with a window of recent cards.

    When nothing has been played yet, the response echoes the game's
    initial card instead.
    """
    top = game.top_card
    if top is None:
        return {
            "game_id": game.id,
            "top_card": None,
            "message": EMPTY_DISCARD_PILE_MESSAGE,
            "discard_pile_size": 0,
            "initial_card": game.initial_card.to_dict(),
        }

    return {
        "game_id": game.id,
        "current_top_card": {
            "card_id": top.card_id,
            "color": top.color.value,
            "value": top.value.value,
            "type": top.type.value,
            "played_by": _played_by(top),
            "played_at": top.played_at,
            "order": top.order,
        },
        "current_color": current_color(game).value,
        "recent_cards": recent_cards(game),
        "discard_pile_size": len(game.discard_pile),
    }


def build_discard_top_simple_response(discard_top: Dict[str, Any]) -> Dict[str, Any]:
    """Legacy shape derived from the rich discard-top response."""
    if discard_top.get("top_card", "") is None:
        return {"game_ids": [discard_top["game_id"]], "top_cards": []}

    top = discard_top["current_top_card"]
    card = Card(top["color"], top["value"], top["type"])
    return {
        "game_ids": [discard_top["game_id"]],
        "top_cards": [card_label(card)],
    }


def build_recent_discards_response(game: Game, limit: int) -> Dict[str, Any]:
    return {
        "game_id": game.id,
        "recent_cards": recent_cards(game, limit),
        "discard_pile_size": len(game.discard_pile),
    }


def build_player_details(game: Game, player_id: str, username: Optional[str]) -> Dict[str, Any]:
    entry = game.get_player(player_id)
    return {
        "id": player_id,
        "username": username or "Unknown",
        "ready": entry.ready if entry else False,
        "position": entry.position if entry else 0,
    }


def build_game_players_response(game: Game, players: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "gameId": game.id,
        "gameTitle": game.title,
        "gameStatus": game.status.value,
        "totalPlayers": len(players),
        "maxPlayers": game.max_players,
        "players": players,
    }
