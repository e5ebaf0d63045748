"""
Pydantic schemas for API request/response validation.
"""

from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field, model_validator

from deepuno.core.card import Card, Color, CardValue, CardType
from deepuno.core.rules import MIN_PLAYERS, MAX_PLAYERS, DEFAULT_MIN_PLAYERS, DEFAULT_MAX_PLAYERS


# ============= Request Schemas =============

class CreateGameRequest(BaseModel):
    """Request to create a new game."""
    name: str = Field(..., min_length=1, max_length=100)
    rules: str = Field(default="Standard UNO rules", max_length=2000)
    min_players: int = Field(ge=MIN_PLAYERS, le=MAX_PLAYERS, default=DEFAULT_MIN_PLAYERS)
    max_players: int = Field(ge=MIN_PLAYERS, le=MAX_PLAYERS, default=DEFAULT_MAX_PLAYERS)

    @model_validator(mode="after")
    def check_player_bounds(self) -> "CreateGameRequest":
        if self.min_players > self.max_players:
            raise ValueError("min_players cannot be greater than max_players")
        return self


class CardSchema(BaseModel):
    """Card representation. Colors and values are accepted in any casing."""
    color: str = Field(..., description="red, blue, green, yellow or wild")
    value: str = Field(..., description="0-9, skip, reverse, draw2, wild or wild_draw4")
    type: Optional[str] = Field(default=None, description="number, action or wild")

    @model_validator(mode="after")
    def check_card(self) -> "CardSchema":
        card = self.to_card()
        self.color = card.color.value
        self.value = card.value.value
        self.type = card.type.value
        return self

    def to_card(self) -> Card:
        return Card(self.color, self.value, self.type)


class PlayCardRequest(BaseModel):
    """Request to play a card from the player's hand."""
    card: CardSchema
    chosen_color: Optional[str] = Field(
        default=None, description="Color put in play by a wild card: red, blue, green or yellow"
    )


class ValidateCardRequest(BaseModel):
    """Request to check a card against the top of the discard pile."""
    card: CardSchema
    top_card: CardSchema


# ============= Response Schemas =============

class PlayerSchema(BaseModel):
    id: str
    ready: bool
    position: int


class PlayedCardSchema(BaseModel):
    card_id: str
    color: Color
    value: CardValue
    type: CardType
    played_by: Optional[str] = None
    played_at: datetime
    order: int


class GameSchema(BaseModel):
    """Complete game record."""
    id: str
    title: str
    rules: str
    min_players: int
    max_players: int
    creator_id: str
    status: str
    current_player_index: int
    turn_direction: int
    players: List[PlayerSchema]
    discard_pile: List[PlayedCardSchema]
    initial_card: CardSchema
    current_color: Optional[Color] = None
    winner_id: Optional[str] = None
    ended_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    version: int


class JoinGameResponse(BaseModel):
    message: str
    gameId: str
    currentPlayerCount: int


class SetReadyResponse(BaseModel):
    success: bool
    message: str
    playersReadyCount: int
    totalPlayers: int


class MessageResponse(BaseModel):
    success: bool
    message: str


class ErrorSchema(BaseModel):
    """Error response."""
    success: bool = False
    message: str


class CardErrorSchema(BaseModel):
    """Error response on discard and card endpoints."""
    error: str
