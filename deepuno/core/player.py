"""
Seat entry for a player in a game.

The entry references an external player identity; account data such as the
username lives with the player collaborator, not here.
"""

from __future__ import annotations
from typing import Any, Dict, List
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class PlayerEntry:
    """
    A player seated in a game.

    Attributes:
        player_id: Identifier of the external player
        ready: Whether the player has marked ready in the lobby
        position: 1-based seat position, contiguous across the roster
    """
    player_id: str
    ready: bool = False
    position: int = 0

    def mark_ready(self) -> PlayerEntry:
        return replace(self, ready=True)

    def at_position(self, position: int) -> PlayerEntry:
        return replace(self, position=position)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.player_id,
            "ready": self.ready,
            "position": self.position,
        }

    def __repr__(self) -> str:
        return f"PlayerEntry({self.player_id}, ready={self.ready}, position={self.position})"


def renumber_positions(players: List[PlayerEntry]) -> List[PlayerEntry]:
    """Assign positions 1..N following the current list order."""
    return [player.at_position(index + 1) for index, player in enumerate(players)]
