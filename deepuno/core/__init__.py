"""
DeepUno Core - Pure Python UNO Session Logic

This module contains the game rules and lifecycle transitions without any
storage or network dependencies.
"""

from deepuno.core.outcome import Outcome, AsyncOutcome
from deepuno.core.card import (
    Card, PlayedCard, Color, CardValue, CardType,
    can_play_card, format_card_name, card_label,
)
from deepuno.core.player import PlayerEntry, renumber_positions
from deepuno.core.game import Game
from deepuno.core.rules import GameStatus, PostAbandonment, PostAbandonmentAction
from deepuno.core.errors import GameError

__all__ = [
    "Outcome",
    "AsyncOutcome",
    "Card",
    "PlayedCard",
    "Color",
    "CardValue",
    "CardType",
    "can_play_card",
    "format_card_name",
    "card_label",
    "PlayerEntry",
    "renumber_positions",
    "Game",
    "GameStatus",
    "PostAbandonment",
    "PostAbandonmentAction",
    "GameError",
]
