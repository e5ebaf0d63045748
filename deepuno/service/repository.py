"""
Storage and lookup collaborators used by the game service.

The service depends only on the abstract interfaces below. The in-memory
implementations back the HTTP server in single-process mode and the tests;
a database-backed repository implements the same methods.
"""

from __future__ import annotations
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import fields
from typing import Any, Dict, List, Optional, Tuple

from deepuno.core.card import Card
from deepuno.core.game import Game, utcnow
from deepuno.core.lifecycle import apply_patch
from deepuno.core.rules import STARTING_HAND_SIZE


logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Base class for storage failures (not part of the game error taxonomy)."""


class StaleGameError(RepositoryError):
    """Raised when a save is based on an outdated version of the game."""

    def __init__(self, game_id: str, expected: int, actual: int):
        self.game_id = game_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Game {game_id} was modified concurrently "
            f"(expected version {expected}, found {actual})"
        )


class DuplicateGameError(RepositoryError):
    def __init__(self, game_id: str):
        self.game_id = game_id
        super().__init__(f"Game {game_id} already exists")


def build_patch(before: Game, after: Game) -> Dict[str, Any]:
    """Fields whose values differ between two versions of a game."""
    return {
        f.name: getattr(after, f.name)
        for f in fields(Game)
        if f.name not in ("version", "updated_at")
        and getattr(before, f.name) != getattr(after, f.name)
    }


class GameRepository(ABC):
    """Persistence of game aggregates."""

    @abstractmethod
    async def find_by_id(self, game_id: str) -> Optional[Game]:
        ...

    @abstractmethod
    async def create(self, game: Game) -> Game:
        ...

    @abstractmethod
    async def save(
        self,
        game_id: str,
        patch: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Game:
        """
        Apply a patch and return the stored game.

        Args:
            game_id: Game to update
            patch: Field name to new value
            expected_version: When given, the save fails with StaleGameError
                unless the stored version still matches
        """
        ...


class PlayerRepository(ABC):
    """Read access to player accounts, used only to enrich responses."""

    @abstractmethod
    async def find_username(self, player_id: str) -> Optional[str]:
        ...


class HandTracker(ABC):
    """Tracks the cards each player holds."""

    @abstractmethod
    async def hand_size(self, game_id: str, player_id: str) -> int:
        """Number of cards the player currently holds."""
        ...

    @abstractmethod
    async def record_discard(self, game_id: str, player_id: str, card: Card) -> int:
        """Remove a played card from the player's hand and return the remaining hand size."""
        ...


class InMemoryGameRepository(GameRepository):
    """
    Dict-backed repository with atomic compare-and-set saves.

    Games are immutable, so handing out the stored instance is safe.
    """

    def __init__(self, games: Optional[List[Game]] = None):
        self._games: Dict[str, Game] = {}
        self._lock = asyncio.Lock()
        for game in games or []:
            self._games[game.id] = game

    async def find_by_id(self, game_id: str) -> Optional[Game]:
        return self._games.get(game_id)

    async def create(self, game: Game) -> Game:
        async with self._lock:
            if game.id in self._games:
                raise DuplicateGameError(game.id)
            self._games[game.id] = game
            logger.debug(f"Stored new game {game.id}")
            return game

    async def save(
        self,
        game_id: str,
        patch: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Game:
        async with self._lock:
            current = self._games.get(game_id)
            if current is None:
                raise RepositoryError(f"Game {game_id} does not exist")
            if expected_version is not None and current.version != expected_version:
                raise StaleGameError(game_id, expected_version, current.version)

            updated = apply_patch(current, {
                **patch,
                "version": current.version + 1,
                "updated_at": utcnow(),
            })
            self._games[game_id] = updated
            logger.debug(f"Saved game {game_id} at version {updated.version}: {sorted(patch)}")
            return updated

    def __len__(self) -> int:
        return len(self._games)


class InMemoryPlayerRepository(PlayerRepository):

    def __init__(self, usernames: Optional[Dict[str, str]] = None):
        self._usernames: Dict[str, str] = dict(usernames or {})

    async def find_username(self, player_id: str) -> Optional[str]:
        return self._usernames.get(player_id)


class InMemoryHandTracker(HandTracker):
    """
    Counts cards per (game, player).

    Only hand sizes are tracked; which cards a player holds is the concern
    of the dealing component. Players never dealt to are assumed to hold
    a full starting hand.
    """

    def __init__(self, starting_hand_size: int = STARTING_HAND_SIZE):
        self.starting_hand_size = starting_hand_size
        self._sizes: Dict[Tuple[str, str], int] = {}

    def set_hand_size(self, game_id: str, player_id: str, size: int) -> None:
        self._sizes[(game_id, player_id)] = size

    def _size(self, game_id: str, player_id: str) -> int:
        return self._sizes.get((game_id, player_id), self.starting_hand_size)

    async def hand_size(self, game_id: str, player_id: str) -> int:
        return self._size(game_id, player_id)

    async def record_discard(self, game_id: str, player_id: str, card: Card) -> int:
        remaining = max(self._size(game_id, player_id) - 1, 0)
        self._sizes[(game_id, player_id)] = remaining
        return remaining
