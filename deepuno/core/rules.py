"""
UNO session rules and constants.

Session lifecycle:

1. A game is created WAITING with its creator seated and ready.
2. Players join while the game is WAITING and there is a free seat.
3. Every seated player marks ready; the creator starts the game once the
   minimum player count is met. The game becomes ACTIVE.
4. Turns rotate through the seats in the current turn direction.
5. The game ENDS when a player empties their hand, or when abandonment
   leaves one player (who wins) or none (no winner). ENDED is terminal.
"""

from enum import Enum
from typing import NamedTuple, Optional

from deepuno.core.card import Card, CardValue, Color


class GameStatus(str, Enum):
    """Lifecycle states of a game session. Transitions only move forward."""
    WAITING = "Waiting"
    ACTIVE = "Active"
    ENDED = "Ended"


class TurnDirection(int, Enum):
    FORWARD = 1
    REVERSED = -1


class PostAbandonmentAction(str, Enum):
    """What the service must do after a player has been removed."""
    END_GAME_WITH_WINNER = "END_GAME_WITH_WINNER"
    END_GAME_NO_WINNER = "END_GAME_NO_WINNER"
    SAVE_GAME = "SAVE_GAME"


class PostAbandonment(NamedTuple):
    action: PostAbandonmentAction
    winner_id: Optional[str] = None


# Default game settings
MIN_PLAYERS = 2
MAX_PLAYERS = 10
DEFAULT_MIN_PLAYERS = 2
DEFAULT_MAX_PLAYERS = 4

# Discard pile queries
RECENT_DISCARDS_LIMIT = 5

# Cards dealt to each player when a game starts
STARTING_HAND_SIZE = 7

# Reference card shown before anything has been played
DEFAULT_INITIAL_CARD = Card(Color.BLUE, CardValue.ZERO)

SYSTEM_PLAYER = "system"
EMPTY_DISCARD_PILE_MESSAGE = "Discard pile is empty - no cards have been played yet"
