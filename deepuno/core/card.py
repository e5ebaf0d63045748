"""
Card model and legality rules for UNO.

Cards are stored with one canonical (lowercase) casing for colors and
values, so comparisons between stored cards and incoming cards are always
made on the same representation.

Rules implemented here:
- A wild card can always be played.
- Otherwise the card must match the top card's color or value.
"""

from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from deepuno.core.outcome import Outcome


class Color(str, Enum):
    """Card colors. Wild cards carry the WILD color."""
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    WILD = "wild"


class CardValue(str, Enum):
    """Card faces: numbers 0-9, the three action cards and the two wilds."""
    ZERO = "0"
    ONE = "1"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    SKIP = "skip"
    REVERSE = "reverse"
    DRAW_TWO = "draw2"
    WILD = "wild"
    WILD_DRAW_FOUR = "wild_draw4"


class CardType(str, Enum):
    NUMBER = "number"
    ACTION = "action"
    WILD = "wild"


NUMBER_VALUES = frozenset(CardValue(str(n)) for n in range(10))
ACTION_VALUES = frozenset({CardValue.SKIP, CardValue.REVERSE, CardValue.DRAW_TWO})
WILD_VALUES = frozenset({CardValue.WILD, CardValue.WILD_DRAW_FOUR})

# Accepted spellings on input, mapped to the canonical color
COLOR_ALIASES = {
    "black": Color.WILD,
}

# Display names for human-readable labels
COLOR_NAMES = {
    Color.RED: "Red",
    Color.BLUE: "Blue",
    Color.GREEN: "Green",
    Color.YELLOW: "Yellow",
    Color.WILD: "Wild",
}

VALUE_NAMES = {
    CardValue.ZERO: "Zero",
    CardValue.ONE: "One",
    CardValue.TWO: "Two",
    CardValue.THREE: "Three",
    CardValue.FOUR: "Four",
    CardValue.FIVE: "Five",
    CardValue.SIX: "Six",
    CardValue.SEVEN: "Seven",
    CardValue.EIGHT: "Eight",
    CardValue.NINE: "Nine",
    CardValue.SKIP: "Skip",
    CardValue.REVERSE: "Reverse",
    CardValue.DRAW_TWO: "Draw Two",
    CardValue.WILD: "Wild",
    CardValue.WILD_DRAW_FOUR: "Wild Draw Four",
}

INVALID_WILD_COLOR_MESSAGE = "Invalid action for this card (e.g., missing color for Wild)."
CARD_MISMATCH_MESSAGE = "The card does not match the color or value of the top card."
MISSING_CARD_MESSAGE = "A card and a top card are required."
UNKNOWN_CARD_NAME = "Unknown Card"


def type_for_value(value: CardValue) -> CardType:
    """Return the card type implied by a face value."""
    if value in WILD_VALUES:
        return CardType.WILD
    if value in ACTION_VALUES:
        return CardType.ACTION
    return CardType.NUMBER


def parse_color(raw: Any) -> Color:
    """Parse a color in any casing, accepting the 'black' alias for wild."""
    if isinstance(raw, Color):
        return raw
    text = str(raw).strip().lower()
    if text in COLOR_ALIASES:
        return COLOR_ALIASES[text]
    try:
        return Color(text)
    except ValueError:
        raise ValueError(f"Invalid card color: {raw}")


def parse_value(raw: Any) -> CardValue:
    """Parse a card value in any casing."""
    if isinstance(raw, CardValue):
        return raw
    try:
        return CardValue(str(raw).strip().lower())
    except ValueError:
        raise ValueError(f"Invalid card value: {raw}")


def parse_type(raw: Any) -> CardType:
    if isinstance(raw, CardType):
        return raw
    try:
        return CardType(str(raw).strip().lower())
    except ValueError:
        raise ValueError(f"Invalid card type: {raw}")


@dataclass(frozen=True)
class Card:
    """
    A single UNO card.

    The type defaults to the one implied by the value. Construction fails
    with ValueError when color, value and type disagree:
    the color is wild exactly when the value is wild or wild_draw4.
    """
    color: Color
    value: CardValue
    type: Optional[CardType] = None

    def __post_init__(self):
        object.__setattr__(self, "color", parse_color(self.color))
        object.__setattr__(self, "value", parse_value(self.value))

        expected_type = type_for_value(self.value)
        if self.type is None:
            object.__setattr__(self, "type", expected_type)
        else:
            object.__setattr__(self, "type", parse_type(self.type))
            if self.type != expected_type:
                raise ValueError(
                    f"Card type {self.type.value} does not fit value {self.value.value}"
                )

        is_wild_value = self.value in WILD_VALUES
        if (self.color == Color.WILD) != is_wild_value:
            raise ValueError(
                f"Invalid card: color {self.color.value} with value {self.value.value}"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Card:
        return cls(
            color=data["color"],
            value=data["value"],
            type=data.get("type"),
        )

    @property
    def is_wild(self) -> bool:
        return self.type == CardType.WILD

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {
            "color": self.color.value,
            "value": self.value.value,
            "type": self.type.value,
        }

    def __str__(self) -> str:
        return format_card_name(self)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PlayedCard:
    """
    A card on the discard pile.

    played_by is None for system-dealt cards. order is 1-based and strictly
    increasing along the pile.
    """
    card: Card
    order: int
    card_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    played_by: Optional[str] = None
    played_at: datetime = field(default_factory=_utcnow)

    @property
    def color(self) -> Color:
        return self.card.color

    @property
    def value(self) -> CardValue:
        return self.card.value

    @property
    def type(self) -> CardType:
        return self.card.type

    def to_dict(self) -> Dict[str, Any]:
        return {
            "card_id": self.card_id,
            **self.card.to_dict(),
            "played_by": self.played_by,
            "played_at": self.played_at,
            "order": self.order,
        }


def can_play_card(
    candidate: Optional[Card],
    top_card: Optional[Card],
    current_color: Optional[Color] = None,
) -> Outcome[bool, str]:
    """
    Check whether candidate may be played on top_card.

    current_color is the color in play when it differs from the top card's,
    i.e. the color chosen with a wild card; colors are matched against it.

    Returns:
        Success(True) for a wild card, a color match or a value match;
        Failure(message) otherwise. Never raises.
    """
    if candidate is None or top_card is None:
        return Outcome.failure(MISSING_CARD_MESSAGE)

    if candidate.is_wild:
        return Outcome.success(True)
    if candidate.color == (current_color or top_card.color):
        return Outcome.success(True)
    if candidate.value == top_card.value:
        return Outcome.success(True)

    return Outcome.failure(CARD_MISMATCH_MESSAGE)


def format_card_name(card: Optional[Card]) -> str:
    """Format a card as 'RED skip', or 'Unknown Card' when absent."""
    return (
        Outcome.from_optional(card)
        .map(lambda c: f"{c.color.value.upper()} {c.value.value}")
        .fold(lambda _: UNKNOWN_CARD_NAME, lambda name: name)
    )


def card_label(card: Card) -> str:
    """Human-readable label such as 'Red Draw Two' or 'Blue Zero'."""
    color = COLOR_NAMES.get(card.color, card.color.value)
    value = VALUE_NAMES.get(card.value, card.value.value)
    return f"{color} {value}"
