"""
Pytest configuration and shared fixtures for DeepUno tests.
"""

import asyncio
from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from deepuno.config import Settings
from deepuno.core.card import Card
from deepuno.core.game import Game
from deepuno.core.lifecycle import create_initial_game, add_player, mark_player_as_ready, start_game
from deepuno.core.rules import GameStatus
from deepuno.server.app import create_app
from deepuno.server.schemas import CreateGameRequest
from deepuno.service import (
    GameService, InMemoryGameRepository, InMemoryPlayerRepository, InMemoryHandTracker,
)


def build_game(players, status=GameStatus.WAITING, current_player_index=0, game_id="game-1", **kwargs) -> Game:
    """Build a game with the given players seated and ready; the first one is the creator."""
    request = CreateGameRequest(name="Test game", **kwargs)
    game = create_initial_game(request, players[0], game_id=game_id)
    for player_id in players[1:]:
        game = mark_player_as_ready(add_player(game, player_id), player_id)
    if status != GameStatus.WAITING:
        game = start_game(game)
    return replace(game, status=status, current_player_index=current_player_index)


@pytest.fixture
def run():
    """Run a coroutine or other awaitable to completion on a fresh event loop."""
    def _run(awaitable):
        async def _await():
            return await awaitable
        return asyncio.run(_await())
    return _run


@pytest.fixture
def make_game():
    """Factory for games with a given roster, status and turn."""
    return build_game


@pytest.fixture
def create_request():
    """A creation request for a 2-4 player game."""
    return CreateGameRequest(name="Friday night UNO", min_players=2, max_players=4)


@pytest.fixture
def waiting_game():
    """A WAITING game with alice (creator) seated."""
    return build_game(["alice"])


@pytest.fixture
def active_game():
    """An ACTIVE game with three players; alice holds the turn."""
    return build_game(["alice", "bob", "carol"], status=GameStatus.ACTIVE)


@pytest.fixture
def repository():
    return InMemoryGameRepository()


@pytest.fixture
def hand_tracker():
    return InMemoryHandTracker(starting_hand_size=7)


@pytest.fixture
def player_repository():
    return InMemoryPlayerRepository({"alice": "Alice", "bob": "Bob"})


@pytest.fixture
def service(repository, player_repository, hand_tracker):
    """A GameService over fresh in-memory collaborators."""
    return GameService(
        repository,
        player_repository=player_repository,
        hand_tracker=hand_tracker,
        initial_card=Card("blue", "0"),
    )


@pytest.fixture
def client(service):
    """HTTP client for an app wired to the service fixture."""
    app = create_app(Settings(), service=service)
    return TestClient(app)
