"""
DeepUno Service - Game use-case orchestration over abstract collaborators.
"""

from deepuno.service.game_service import GameService
from deepuno.service.repository import (
    GameRepository,
    PlayerRepository,
    HandTracker,
    InMemoryGameRepository,
    InMemoryPlayerRepository,
    InMemoryHandTracker,
    StaleGameError,
)

__all__ = [
    "GameService",
    "GameRepository",
    "PlayerRepository",
    "HandTracker",
    "InMemoryGameRepository",
    "InMemoryPlayerRepository",
    "InMemoryHandTracker",
    "StaleGameError",
]
