"""
Outcome containers for declarative error propagation.

An Outcome is either a success carrying a value or a failure carrying an
error. Expected failures (validation, preconditions, card legality) travel
as failures instead of exceptions, so a use-case reads as a flat pipeline:

    outcome = (
        Outcome.success(game)
        .chain(validate_game_is_waiting)
        .map(lambda g: add_player(g, player_id))
        .tap_error(log_failure)
    )

AsyncOutcome offers the same operators for pipelines where some steps
await I/O (repository calls). Steps run strictly in order; once a failure
occurs every later map/chain is skipped and only tap_error and the failure
branch of fold still run.
"""

from __future__ import annotations
import inspect
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar


T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")
R = TypeVar("R")


class Outcome(Generic[T, E]):
    """
    A success(value) or failure(error).

    Exceptions raised inside map/chain steps are captured as failures,
    which callers treat as unclassified errors.
    """

    __slots__ = ("_value", "_error", "_ok")

    def __init__(self, ok: bool, value: Any = None, error: Any = None):
        self._ok = ok
        self._value = value
        self._error = error

    @classmethod
    def success(cls, value: T) -> Outcome[T, Any]:
        return cls(True, value=value)

    @classmethod
    def failure(cls, error: E) -> Outcome[Any, E]:
        return cls(False, error=error)

    @classmethod
    def from_optional(cls, value: Optional[T], error: Any = None) -> Outcome[T, Any]:
        """Success when value is present, failure(error) when it is None."""
        if value is None:
            return cls.failure(error)
        return cls.success(value)

    @classmethod
    def from_callable(cls, fn: Callable[..., T], *args: Any, **kwargs: Any) -> Outcome[T, Exception]:
        """Run fn, turning a raised exception into a failure."""
        try:
            return cls.success(fn(*args, **kwargs))
        except Exception as exc:
            return cls.failure(exc)

    @property
    def is_success(self) -> bool:
        return self._ok

    @property
    def is_failure(self) -> bool:
        return not self._ok

    @property
    def value(self) -> T:
        return self._value

    @property
    def error(self) -> E:
        return self._error

    def map(self, fn: Callable[[T], U]) -> Outcome[U, E]:
        """Transform the success value; failures pass through unchanged."""
        if not self._ok:
            return self
        try:
            return Outcome.success(fn(self._value))
        except Exception as exc:
            return Outcome.failure(exc)

    def chain(self, fn: Callable[[T], Outcome[U, E]]) -> Outcome[U, E]:
        """Run a dependent step that itself returns an Outcome."""
        if not self._ok:
            return self
        try:
            return fn(self._value)
        except Exception as exc:
            return Outcome.failure(exc)

    def map_error(self, fn: Callable[[E], F]) -> Outcome[T, F]:
        if self._ok:
            return self
        return Outcome.failure(fn(self._error))

    def tap(self, fn: Callable[[T], Any]) -> Outcome[T, E]:
        """Side effect on success; the carried value is never altered."""
        if self._ok:
            fn(self._value)
        return self

    def tap_error(self, fn: Callable[[E], Any]) -> Outcome[T, E]:
        """Side effect on failure; the carried error is never altered."""
        if not self._ok:
            fn(self._error)
        return self

    def fold(self, on_failure: Callable[[E], R], on_success: Callable[[T], R]) -> R:
        """Consume the outcome at a system boundary."""
        if self._ok:
            return on_success(self._value)
        return on_failure(self._error)

    def to_async(self) -> AsyncOutcome[T, E]:
        return AsyncOutcome.from_outcome(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Outcome):
            return NotImplemented
        return (self._ok, self._value, self._error) == (other._ok, other._value, other._error)

    def __repr__(self) -> str:
        if self._ok:
            return f"Success({self._value!r})"
        return f"Failure({self._error!r})"


async def _resolve(result: Any) -> Any:
    """Await result if it is awaitable, otherwise return it as is."""
    if inspect.isawaitable(result):
        return await result
    return result


class AsyncOutcome(Generic[T, E]):
    """
    An awaitable Outcome supporting the same operators.

    Steps may be plain functions or coroutine functions. Awaiting the
    AsyncOutcome runs the pipeline and yields the final Outcome. Like a
    coroutine, an AsyncOutcome can be awaited only once.
    """

    __slots__ = ("_awaitable",)

    def __init__(self, awaitable: Awaitable[Outcome[T, E]]):
        self._awaitable = awaitable

    @classmethod
    def from_outcome(cls, outcome: Outcome[T, E]) -> AsyncOutcome[T, E]:
        async def done() -> Outcome[T, E]:
            return outcome
        return cls(done())

    @classmethod
    def success(cls, value: T) -> AsyncOutcome[T, Any]:
        return cls.from_outcome(Outcome.success(value))

    @classmethod
    def failure(cls, error: E) -> AsyncOutcome[Any, E]:
        return cls.from_outcome(Outcome.failure(error))

    @classmethod
    def from_callable(cls, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> AsyncOutcome[Any, Exception]:
        """Run a (possibly async) callable, capturing raised exceptions as failures."""
        async def run() -> Outcome[Any, Exception]:
            try:
                return Outcome.success(await _resolve(fn(*args, **kwargs)))
            except Exception as exc:
                return Outcome.failure(exc)
        return cls(run())

    def _then(self, step: Callable[[Outcome[T, E]], Awaitable[Outcome[Any, Any]]]) -> AsyncOutcome[Any, Any]:
        source = self._awaitable

        async def run() -> Outcome[Any, Any]:
            return await step(await source)
        return AsyncOutcome(run())

    def map(self, fn: Callable[[T], Any]) -> AsyncOutcome[Any, E]:
        async def step(outcome: Outcome[T, E]) -> Outcome[Any, E]:
            if outcome.is_failure:
                return outcome
            try:
                return Outcome.success(await _resolve(fn(outcome.value)))
            except Exception as exc:
                return Outcome.failure(exc)
        return self._then(step)

    def chain(self, fn: Callable[[T], Any]) -> AsyncOutcome[Any, E]:
        """
        Run a dependent step returning an Outcome, an AsyncOutcome, or an
        awaitable of either. The next step starts only after it settles.
        """
        async def step(outcome: Outcome[T, E]) -> Outcome[Any, E]:
            if outcome.is_failure:
                return outcome
            try:
                result = await _resolve(fn(outcome.value))
                if isinstance(result, AsyncOutcome):
                    result = await result
                return result
            except Exception as exc:
                return Outcome.failure(exc)
        return self._then(step)

    def map_error(self, fn: Callable[[E], Any]) -> AsyncOutcome[T, Any]:
        async def step(outcome: Outcome[T, E]) -> Outcome[T, Any]:
            if outcome.is_success:
                return outcome
            return Outcome.failure(await _resolve(fn(outcome.error)))
        return self._then(step)

    def tap(self, fn: Callable[[T], Any]) -> AsyncOutcome[T, E]:
        async def step(outcome: Outcome[T, E]) -> Outcome[T, E]:
            if outcome.is_success:
                await _resolve(fn(outcome.value))
            return outcome
        return self._then(step)

    def tap_error(self, fn: Callable[[E], Any]) -> AsyncOutcome[T, E]:
        async def step(outcome: Outcome[T, E]) -> Outcome[T, E]:
            if outcome.is_failure:
                await _resolve(fn(outcome.error))
            return outcome
        return self._then(step)

    async def fold(self, on_failure: Callable[[E], Any], on_success: Callable[[T], Any]) -> Any:
        outcome = await self._awaitable
        if outcome.is_success:
            return await _resolve(on_success(outcome.value))
        return await _resolve(on_failure(outcome.error))

    def __await__(self):
        return self._awaitable.__await__()
