"""
UNO game aggregate.

A Game is one consistency boundary: the session record together with its
seated players and discard pile. Instances are immutable; the lifecycle
module produces a new Game for every transition, and the service persists
the difference through the repository.
"""

from __future__ import annotations
from typing import List, Dict, Optional, Any
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone

from deepuno.core.card import Card, Color, PlayedCard
from deepuno.core.player import PlayerEntry
from deepuno.core.rules import GameStatus, DEFAULT_INITIAL_CARD


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Game:
    """
    An UNO game session.

    Invariants:
        - 0 <= current_player_index < len(players) while ACTIVE
        - len(players) <= max_players
        - status moves only WAITING -> ACTIVE -> ENDED
        - winner_id is set only on an ENDED game with a winner
    - current_color is never WILD
    """
    id: str
    title: str
    rules: str
    min_players: int
    max_players: int
    creator_id: str
    status: GameStatus = GameStatus.WAITING
    current_player_index: int = 0
    turn_direction: int = 1
    players: List[PlayerEntry] = field(default_factory=list)
    discard_pile: List[PlayedCard] = field(default_factory=list)
    initial_card: Card = DEFAULT_INITIAL_CARD
    # Color in play; set by every discard, chosen by the player for wild cards
    current_color: Optional[Color] = None
    winner_id: Optional[str] = None
    ended_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    # Optimistic concurrency token, bumped by the repository on every save
    version: int = 0

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def ready_count(self) -> int:
        return sum(1 for p in self.players if p.ready)

    @property
    def is_full(self) -> bool:
        return self.num_players >= self.max_players

    @property
    def top_card(self) -> Optional[PlayedCard]:
        """The most recently played card, or None when nothing was played."""
        return self.discard_pile[-1] if self.discard_pile else None

    def get_player(self, player_id: str) -> Optional[PlayerEntry]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def has_player(self, player_id: str) -> bool:
        return self.get_player(player_id) is not None

    def index_of(self, player_id: str) -> Optional[int]:
        for index, player in enumerate(self.players):
            if player.player_id == player_id:
                return index
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "rules": self.rules,
            "min_players": self.min_players,
            "max_players": self.max_players,
            "creator_id": self.creator_id,
            "status": self.status.value,
            "current_player_index": self.current_player_index,
            "turn_direction": self.turn_direction,
            "players": [p.to_dict() for p in self.players],
            "discard_pile": [c.to_dict() for c in self.discard_pile],
            "initial_card": self.initial_card.to_dict(),
            "current_color": self.current_color.value if self.current_color else None,
            "winner_id": self.winner_id,
            "ended_at": self.ended_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "version": self.version,
        }

    def __repr__(self) -> str:
        return (
            f"Game({self.id}, status={self.status.value}, "
            f"players={self.num_players}/{self.max_players}, turn={self.current_player_index})"
        )


GAME_FIELDS = frozenset(f.name for f in fields(Game))
