"""
DeepUno - UNO Game Session Service

An UNO game session backend with:
- Pure Python game core (immutable game records, Outcome pipelines)
- Async service layer with per-game locking and versioned saves
- FastAPI HTTP server

Usage:
    from deepuno.core import Card, Game, can_play_card
    from deepuno.service import GameService, InMemoryGameRepository
"""

__version__ = "0.1.0"

from deepuno.core.card import Card, Color, CardValue, CardType, can_play_card
from deepuno.core.game import Game
from deepuno.core.outcome import Outcome, AsyncOutcome

__all__ = [
    "Card",
    "Color",
    "CardValue",
    "CardType",
    "can_play_card",
    "Game",
    "Outcome",
    "AsyncOutcome",
    "__version__",
]
