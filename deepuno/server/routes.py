"""
HTTP API Routes for DeepUno.

Routes translate requests into GameService calls and fold the returned
Outcome into a JSON response. The acting player is identified by the
X-Player-Id header, set by the authentication layer in front of this API.
"""

import logging
from typing import Dict, Any, Callable

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from deepuno.core.card import can_play_card
from deepuno.core.errors import GameError
from deepuno.core.outcome import Outcome
from deepuno.service.game_service import GameService
from deepuno.server.schemas import (
    CreateGameRequest, PlayCardRequest, ValidateCardRequest,
    GameSchema, JoinGameResponse, SetReadyResponse, MessageResponse,
    ErrorSchema, CardErrorSchema,
)


logger = logging.getLogger(__name__)

router = APIRouter()

INTERNAL_ERROR_MESSAGE = "Internal server error"

GAME_ERRORS: Dict[int, Dict[str, Any]] = {
    400: {"model": ErrorSchema},
    403: {"model": ErrorSchema},
    404: {"model": ErrorSchema},
    409: {"model": ErrorSchema},
    500: {"model": ErrorSchema},
}
CARD_ERRORS: Dict[int, Dict[str, Any]] = {
    400: {"model": CardErrorSchema},
    404: {"model": CardErrorSchema},
    412: {"model": CardErrorSchema},
    500: {"model": CardErrorSchema},
}


def get_service(request: Request) -> GameService:
    """The GameService created by the app factory."""
    return request.app.state.game_service


def get_player_id(x_player_id: str = Header(..., alias="X-Player-Id")) -> str:
    player_id = x_player_id.strip()
    if not player_id:
        raise HTTPException(status_code=401, detail="Missing player identity")
    return player_id


def _error_status(error: Any) -> int:
    if isinstance(error, GameError):
        return error.status_code
    return 500


def _error_message(error: Any) -> str:
    """Domain errors carry a user-facing message; anything else is hidden."""
    if isinstance(error, GameError):
        return error.message
    logger.error(f"Unhandled error: {error!r}", exc_info=error if isinstance(error, BaseException) else None)
    return INTERNAL_ERROR_MESSAGE


def game_error_response(error: Any) -> JSONResponse:
    return JSONResponse(
        status_code=_error_status(error),
        content={"success": False, "message": _error_message(error)},
    )


def card_error_response(error: Any) -> JSONResponse:
    return JSONResponse(
        status_code=_error_status(error),
        content={"error": _error_message(error)},
    )


def respond(
    outcome: Outcome,
    status_code: int = 200,
    on_error: Callable[[Any], JSONResponse] = game_error_response,
    shape: Callable[[Any], Any] = lambda value: value,
) -> JSONResponse:
    """Fold a service Outcome into a JSON response."""
    return outcome.fold(
        on_error,
        lambda value: JSONResponse(status_code=status_code, content=jsonable_encoder(shape(value))),
    )


@router.get("/health")
async def health() -> Dict[str, Any]:
    return {"status": "ok"}


# ============= Games =============

@router.post("/games", status_code=201, response_model=GameSchema, responses=GAME_ERRORS)
async def create_game(
    req: CreateGameRequest,
    player_id: str = Depends(get_player_id),
    service: GameService = Depends(get_service),
):
    """Create a new game; the caller becomes its creator."""
    return respond(await service.create_game(req, player_id), status_code=201)


@router.get("/games/{game_id}", response_model=GameSchema, responses=GAME_ERRORS)
async def get_game(game_id: str, service: GameService = Depends(get_service)):
    return respond(await service.get_game(game_id))


@router.get("/games/{game_id}/status", responses=GAME_ERRORS)
async def get_game_status(game_id: str, service: GameService = Depends(get_service)):
    return respond(
        await service.get_game_status(game_id),
        shape=lambda status: {"game_id": game_id.strip(), "status": status},
    )


@router.get("/games/{game_id}/players", responses=GAME_ERRORS)
async def get_game_players(game_id: str, service: GameService = Depends(get_service)):
    return respond(await service.get_game_players(game_id))


@router.post("/games/{game_id}/join", response_model=JoinGameResponse, responses=GAME_ERRORS)
async def join_game(
    game_id: str,
    player_id: str = Depends(get_player_id),
    service: GameService = Depends(get_service),
):
    return respond(await service.join_game(player_id, game_id))


@router.post("/games/{game_id}/ready", response_model=SetReadyResponse, responses=GAME_ERRORS)
async def set_ready(
    game_id: str,
    player_id: str = Depends(get_player_id),
    service: GameService = Depends(get_service),
):
    return respond(await service.set_player_ready(player_id, game_id))


@router.post("/games/{game_id}/start", response_model=GameSchema, responses=GAME_ERRORS)
async def start_game(
    game_id: str,
    player_id: str = Depends(get_player_id),
    service: GameService = Depends(get_service),
):
    """Start the game. Only the creator can start it."""
    return respond(await service.start_game(player_id, game_id))


@router.post("/games/{game_id}/abandon", response_model=MessageResponse, responses=GAME_ERRORS)
async def abandon_game(
    game_id: str,
    player_id: str = Depends(get_player_id),
    service: GameService = Depends(get_service),
):
    return respond(await service.abandon_game(player_id, game_id))


# ============= Turns =============

@router.get("/games/{game_id}/current-player", responses=GAME_ERRORS)
async def get_current_player(game_id: str, service: GameService = Depends(get_service)):
    return respond(
        await service.get_current_player(game_id),
        shape=lambda current_id: {"success": True, "currentPlayerId": current_id},
    )


@router.post("/games/{game_id}/advance-turn", responses=GAME_ERRORS)
async def advance_turn(game_id: str, service: GameService = Depends(get_service)):
    return respond(
        await service.advance_turn(game_id),
        shape=lambda next_id: {"success": True, "currentPlayerId": next_id},
    )


@router.post("/games/{game_id}/play", responses=CARD_ERRORS)
async def play_card(
    game_id: str,
    req: PlayCardRequest,
    player_id: str = Depends(get_player_id),
    service: GameService = Depends(get_service),
):
    """Play a card on the discard pile; wild cards need a chosen_color."""
    return respond(
        await service.play_card(game_id, player_id, req.card.to_card(), req.chosen_color),
        on_error=card_error_response,
    )


# ============= Discard pile =============

@router.get("/games/{game_id}/discard-top", responses=CARD_ERRORS)
async def get_discard_top(game_id: str, service: GameService = Depends(get_service)):
    return respond(await service.get_discard_top(game_id), on_error=card_error_response)


@router.get("/games/{game_id}/discard-top/simple", responses=CARD_ERRORS)
async def get_discard_top_simple(game_id: str, service: GameService = Depends(get_service)):
    """Legacy format: top card as a 'Color Value' label."""
    return respond(await service.get_discard_top_simple(game_id), on_error=card_error_response)


@router.get("/games/{game_id}/discards", responses=CARD_ERRORS)
async def get_recent_discards(
    game_id: str,
    limit: int = Query(default=5, ge=1, le=100),
    service: GameService = Depends(get_service),
):
    return respond(await service.get_recent_discards(game_id, limit), on_error=card_error_response)


# ============= Cards =============

@router.post("/cards/validate", responses=CARD_ERRORS)
async def validate_card(req: ValidateCardRequest):
    """Check whether a card may be played on the given top card."""
    result = can_play_card(req.card.to_card(), req.top_card.to_card())
    return result.fold(
        lambda message: JSONResponse(status_code=400, content={"error": message}),
        lambda valid: {"valid": valid},
    )
