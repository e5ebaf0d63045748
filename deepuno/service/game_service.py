"""
Game service - orchestration of the UNO session use-cases.

Every use-case is one AsyncOutcome pipeline:

    fetch game -> check preconditions -> pure lifecycle transition
        -> persist the patch -> shape the response

Methods return an Outcome; domain errors travel as failures carrying a
GameError, anything unexpected (storage failures, broken invariants) as a
failure carrying the raised exception. Nothing is raised to the caller.

Concurrency: mutating use-cases hold a per-game asyncio.Lock across the
whole fetch -> persist window, and every save carries the version the
transition was computed from, so a write based on stale state is rejected
by the repository instead of silently overwriting a concurrent update.
"""

from __future__ import annotations
import asyncio
import logging
import weakref
from typing import Any, Callable, Dict, List, Optional

from deepuno.core.card import Card, Color, can_play_card
from deepuno.core.errors import (
    GameError, GameNotFoundError, CannotPerformActionError,
    CouldNotDetermineCurrentPlayerError,
)
from deepuno.core.game import Game
from deepuno.core import lifecycle
from deepuno.core.outcome import Outcome, AsyncOutcome
from deepuno.core.rules import (
    PostAbandonmentAction, DEFAULT_INITIAL_CARD, RECENT_DISCARDS_LIMIT,
)
from deepuno.core.validators import (
    validate_game_id, validate_game_is_waiting, validate_game_not_full,
    validate_player_not_in_game, validate_is_creator, validate_game_not_started,
    validate_minimum_players, validate_all_players_ready, validate_player_in_game,
    validate_game_is_active, validate_game_has_started, validate_game_has_players,
    validate_is_current_player, parse_chosen_color,
)
from deepuno.service import responses
from deepuno.service.repository import (
    GameRepository, PlayerRepository, HandTracker, InMemoryHandTracker, build_patch,
)


logger = logging.getLogger(__name__)


class GameService:
    """
    Use-cases of an UNO game session.

    Usage:
        service = GameService(InMemoryGameRepository())
        created = await service.create_game(request, creator_id="alice")
        game_id = created.value["id"]
        outcome = await service.join_game("bob", game_id)
        response = outcome.fold(on_error, on_success)
    """

    def __init__(
        self,
        game_repository: GameRepository,
        player_repository: Optional[PlayerRepository] = None,
        hand_tracker: Optional[HandTracker] = None,
        initial_card: Card = DEFAULT_INITIAL_CARD,
        recent_discards_limit: int = RECENT_DISCARDS_LIMIT,
    ):
        self.game_repository = game_repository
        self.player_repository = player_repository
        self.hand_tracker = hand_tracker or InMemoryHandTracker()
        self.initial_card = initial_card
        self.recent_discards_limit = recent_discards_limit
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    # ============= Plumbing =============

    def _lock_for(self, game_id: str) -> asyncio.Lock:
        lock = self._locks.get(game_id)
        if lock is None:
            lock = self._locks[game_id] = asyncio.Lock()
        return lock

    async def _exclusive(self, game_id: Any, pipeline: Callable[[], AsyncOutcome]) -> Outcome:
        """
        Run a mutating pipeline while holding the game's lock.

        Locks exist only for stored games and only while someone holds or
        awaits them; a pipeline on an unknown game runs unlocked and fails
        at its own fetch.
        """
        existing = await self._fetch_game(game_id)
        if existing.is_failure:
            return await pipeline()
        lock = self._lock_for(existing.value.id)
        async with lock:
            return await pipeline()

    def _fetch_game(self, game_id: Any) -> AsyncOutcome:
        return (
            validate_game_id(game_id)
            .to_async()
            .chain(lambda gid: AsyncOutcome.from_callable(self.game_repository.find_by_id, gid))
            .chain(lambda game: Outcome.from_optional(game, GameNotFoundError()))
        )

    def _persist(self, before: Game, after: Game) -> AsyncOutcome:
        """Save the fields changed by a transition, guarded by the version read."""
        return AsyncOutcome.from_callable(
            self.game_repository.save,
            before.id,
            build_patch(before, after),
            expected_version=before.version,
        )

    @staticmethod
    def _log_failure(action: str, context: str) -> Callable[[Any], None]:
        def log(error: Any) -> None:
            if isinstance(error, GameError) and not isinstance(error, CouldNotDetermineCurrentPlayerError):
                logger.warning(f"{action} failed for {context}: {error.message}")
            elif isinstance(error, BaseException):
                logger.error(f"{action} failed for {context}: {error}", exc_info=error)
            else:
                logger.error(f"{action} failed for {context}: {error}")
        return log

    # ============= Game records =============

    async def create_game(self, request: Any, creator_id: str) -> Outcome:
        """Create a WAITING game with the creator seated and ready."""
        logger.info(f"Attempting to create a new game by user {creator_id}")
        return await (
            AsyncOutcome.from_callable(
                lifecycle.create_initial_game, request, creator_id,
                initial_card=self.initial_card,
            )
            .chain(lambda game: AsyncOutcome.from_callable(self.game_repository.create, game))
            .tap(lambda game: logger.info(f"Game {game.id} created successfully by user {creator_id}."))
            .map(lambda game: game.to_dict())
            .tap_error(self._log_failure("Create game", f"user {creator_id}"))
        )

    async def get_game(self, game_id: str) -> Outcome:
        return await (
            self._fetch_game(game_id)
            .map(lambda game: game.to_dict())
            .tap_error(self._log_failure("Get game", f"game {game_id}"))
        )

    async def get_game_status(self, game_id: str) -> Outcome:
        """Status string of the game: Waiting, Active or Ended."""
        return await (
            self._fetch_game(game_id)
            .tap(lambda game: logger.info(f"Retrieved status for game {game.id}: {game.status.value}"))
            .map(lambda game: game.status.value)
            .tap_error(self._log_failure("Get game status", f"game {game_id!r}"))
        )

    async def get_game_players(self, game_id: str) -> Outcome:
        """Seated players enriched with their usernames."""
        return await (
            self._fetch_game(game_id)
            .chain(self._enrich_players)
            .tap_error(self._log_failure("Get game players", f"game {game_id!r}"))
        )

    async def _enrich_players(self, game: Game) -> Outcome:
        details: List[Dict[str, Any]] = []
        for player in game.players:
            username = None
            if self.player_repository is not None:
                try:
                    username = await self.player_repository.find_username(player.player_id)
                except Exception as exc:
                    logger.warning(f"Failed to fetch details for player {player.player_id}: {exc}")
            details.append(responses.build_player_details(game, player.player_id, username))

        logger.info(f"Retrieved {len(details)} players for game {game.id}.")
        return Outcome.success(responses.build_game_players_response(game, details))

    # ============= Lobby =============

    async def join_game(self, player_id: str, game_id: str) -> Outcome:
        """Seat a player in a WAITING game that has a free seat."""
        def pipeline() -> AsyncOutcome:
            return (
                self._fetch_game(game_id)
                .chain(validate_game_is_waiting)
                .chain(validate_game_not_full)
                .chain(validate_player_not_in_game(player_id))
                .chain(lambda game: self._persist(game, lifecycle.add_player(game, player_id)))
                .map(responses.build_join_game_response)
                .tap(lambda _: logger.info(f"User {player_id} successfully joined game {game_id}."))
                .tap_error(self._log_failure("Join game", f"user {player_id} in game {game_id}"))
            )
        return await self._exclusive(game_id, pipeline)

    async def set_player_ready(self, player_id: str, game_id: str) -> Outcome:
        def pipeline() -> AsyncOutcome:
            return (
                self._fetch_game(game_id)
                .chain(validate_game_is_waiting)
                .chain(validate_player_in_game(player_id))
                .chain(lambda game: self._persist(game, lifecycle.mark_player_as_ready(game, player_id)))
                .map(responses.build_set_player_ready_response)
                .tap(lambda r: logger.info(
                    f"User {player_id} is ready in game {game_id} "
                    f"({r['playersReadyCount']}/{r['totalPlayers']})."
                ))
                .tap_error(self._log_failure("Set player ready", f"user {player_id} in game {game_id}"))
            )
        return await self._exclusive(game_id, pipeline)

    async def start_game(self, player_id: str, game_id: str) -> Outcome:
        """Start the game. Only the creator may do so, once everyone is ready."""
        def pipeline() -> AsyncOutcome:
            return (
                self._fetch_game(game_id)
                .chain(validate_is_creator(player_id))
                .chain(validate_game_not_started)
                .chain(validate_minimum_players)
                .chain(validate_all_players_ready)
                .chain(lambda game: self._persist(game, lifecycle.start_game(game)))
                .tap(lambda _: logger.info(f"Game {game_id} successfully started by user {player_id}."))
                .map(lambda game: game.to_dict())
                .tap_error(self._log_failure("Start game", f"user {player_id} in game {game_id}"))
            )
        return await self._exclusive(game_id, pipeline)

    # ============= Turns =============

    async def get_current_player(self, game_id: str) -> Outcome:
        """Id of the player whose turn it is."""
        return await (
            self._fetch_game(game_id)
            .chain(validate_game_is_active)
            .chain(validate_game_has_players)
            .chain(lifecycle.get_current_player)
            .tap(lambda player: logger.info(f"Current player for game {game_id} is {player.player_id}."))
            .map(lambda player: player.player_id)
            .tap_error(self._log_failure("Current player retrieval", f"game {game_id}"))
        )

    async def advance_turn(self, game_id: str) -> Outcome:
        """Pass the turn on; returns the id of the new current player."""
        def pipeline() -> AsyncOutcome:
            return (
                self._fetch_game(game_id)
                .chain(validate_game_is_active)
                .chain(validate_game_has_players)
                .chain(lambda game: self._persist(game, lifecycle.advance_turn(game)))
                .map(responses.build_advance_turn_response)
                .tap(lambda next_id: logger.info(f"Turn advanced for game {game_id}. Next player: {next_id}."))
                .tap_error(self._log_failure("Advance turn", f"game {game_id}"))
            )
        return await self._exclusive(game_id, pipeline)

    async def play_card(
        self,
        game_id: str,
        player_id: str,
        card: Card,
        chosen_color: Optional[Any] = None,
    ) -> Outcome:
        """
        Play a card from the current player's hand onto the discard pile.

        The card must match the color in play or the top card's value (the
        initial card stands in on an empty pile). A wild card needs a chosen
        color, which becomes the color in play. A player who empties their
        hand wins and the game ends; otherwise the turn passes on, skipping
        a seat for a skip card.
        """
        color = parse_chosen_color(card, chosen_color)

        def pipeline() -> AsyncOutcome:
            return (
                self._fetch_game(game_id)
                .chain(validate_game_is_active)
                .chain(validate_is_current_player(player_id))
                .chain(lambda game: color.map(lambda _: game))
                .chain(lambda game: self._check_card(game, card))
                .chain(lambda game: self._complete_play(game, player_id, card, color.value))
                .tap_error(self._log_failure("Play card", f"user {player_id} in game {game_id}"))
            )
        logger.info(f"Player {player_id} attempting to play {card} in game {game_id}.")
        return await self._exclusive(game_id, pipeline)

    @staticmethod
    def _check_card(game: Game, card: Card) -> Outcome:
        return (
            can_play_card(card, lifecycle.top_card(game), lifecycle.current_color(game))
            .map_error(CannotPerformActionError)
            .map(lambda _: game)
        )

    async def _complete_play(self, game: Game, player_id: str, card: Card, chosen_color: Optional[Color]) -> Outcome:
        played = lifecycle.discard_card(game, card, played_by=player_id, chosen_color=chosen_color)
        hand_size = await self.hand_tracker.hand_size(game.id, player_id)
        won = lifecycle.has_player_won(max(hand_size - 1, 0))

        if won:
            logger.info(f"Player {player_id} has won game {game.id}!")
            after = lifecycle.end_game(played, winner_id=player_id)
        else:
            after = lifecycle.advance_after_play(played, card)

        # The card leaves the hand only once the discard is stored
        return await (
            self._persist(game, after)
            .chain(lambda saved: AsyncOutcome.from_callable(
                self.hand_tracker.record_discard, game.id, player_id, card,
            ).map(lambda _: saved))
            .map(lambda saved: responses.build_play_card_response(saved, won))
        )

    # ============= Leaving =============

    async def abandon_game(self, player_id: str, game_id: str) -> Outcome:
        """
        Remove a player from an ACTIVE game.

        One remaining player wins; with nobody left the game ends without
        a winner. Either way the roster and the end state are saved together.
        """
        def pipeline() -> AsyncOutcome:
            return (
                self._fetch_game(game_id)
                .chain(validate_player_in_game(player_id))
                .chain(validate_game_is_active)
                .chain(lambda game: self._resolve_abandonment(game, player_id))
                .map(lambda _: responses.build_abandon_game_response())
                .tap(lambda _: logger.info(f"User {player_id} successfully abandoned game {game_id}."))
                .tap_error(self._log_failure("Abandon game", f"user {player_id} in game {game_id}"))
            )
        return await self._exclusive(game_id, pipeline)

    def _resolve_abandonment(self, game: Game, player_id: str) -> AsyncOutcome:
        remaining, decision = lifecycle.abandon_game(game, player_id)

        if decision.action == PostAbandonmentAction.END_GAME_WITH_WINNER:
            logger.info(
                f"Game {game.id} ended due to last player ({decision.winner_id}) "
                f"remaining after abandonment."
            )
            after = lifecycle.end_game(remaining, winner_id=decision.winner_id)
        elif decision.action == PostAbandonmentAction.END_GAME_NO_WINNER:
            logger.info(f"Game {game.id} ended as all players abandoned.")
            after = lifecycle.end_game(remaining)
        else:
            after = remaining

        return self._persist(game, after)

    # ============= Discard pile =============

    def _discard_top(self, game_id: str) -> AsyncOutcome:
        return (
            self._fetch_game(game_id)
            .chain(validate_game_has_started)
            .map(responses.build_discard_top_response)
        )

    async def get_discard_top(self, game_id: str) -> Outcome:
        """Top card plus the most recent discards, newest first."""
        return await (
            self._discard_top(game_id)
            .tap(lambda r: logger.info(
                f"Retrieved top discard card for game {r['game_id']} "
                f"(pile size {r['discard_pile_size']})."
            ))
            .tap_error(self._log_failure("Get discard top", f"game {game_id!r}"))
        )

    async def get_discard_top_simple(self, game_id: str) -> Outcome:
        """Legacy variant: the top card as a 'Color Value' label."""
        return await (
            self._discard_top(game_id)
            .map(responses.build_discard_top_simple_response)
            .tap_error(self._log_failure("Get simple discard top", f"game {game_id!r}"))
        )

    async def get_recent_discards(self, game_id: str, limit: Optional[int] = None) -> Outcome:
        limit = self.recent_discards_limit if limit is None else limit
        return await (
            self._fetch_game(game_id)
            .map(lambda game: responses.build_recent_discards_response(game, limit))
            .tap(lambda _: logger.info(f"Retrieved recent discards for game {game_id} with limit {limit}."))
            .tap_error(self._log_failure("Get recent discards", f"game {game_id!r}"))
        )
