"""
Runtime configuration for DeepUno, read from environment variables.
"""

import os
from dataclasses import dataclass, field

from deepuno.core.card import Card
from deepuno.core.rules import RECENT_DISCARDS_LIMIT, STARTING_HAND_SIZE


@dataclass
class Settings:
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    # Card echoed by discard queries while the pile is empty
    initial_card: Card = field(default_factory=lambda: Card("blue", "0"))
    recent_discards_limit: int = RECENT_DISCARDS_LIMIT
    starting_hand_size: int = STARTING_HAND_SIZE

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            host=os.environ.get("DEEPUNO_HOST", "0.0.0.0"),
            port=int(os.environ.get("DEEPUNO_PORT", "8000")),
            log_level=os.environ.get("DEEPUNO_LOG_LEVEL", "INFO").upper(),
            initial_card=Card(
                os.environ.get("DEEPUNO_INITIAL_CARD_COLOR", "blue"),
                os.environ.get("DEEPUNO_INITIAL_CARD_VALUE", "0"),
            ),
            recent_discards_limit=int(
                os.environ.get("DEEPUNO_RECENT_DISCARDS_LIMIT", str(RECENT_DISCARDS_LIMIT))
            ),
            starting_hand_size=int(
                os.environ.get("DEEPUNO_STARTING_HAND_SIZE", str(STARTING_HAND_SIZE))
            ),
        )
