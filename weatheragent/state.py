"""Observable state containers for asynchronous loading flows.

A screen holds one container per network operation. The container keeps
a single current value and publishes every change to its subscribers
synchronously, in subscription order. Rendering code subscribes (or just
reads ``current()`` on each Streamlit rerun); stores are the only writers.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")
S = TypeVar("S")


@dataclass(frozen=True)
class Loading:
    """An operation is in flight."""


@dataclass(frozen=True)
class Success(Generic[T]):
    """An operation completed and produced ``value``."""

    value: T


@dataclass(frozen=True)
class Failure:
    """An operation failed; ``message`` is safe to show to the user."""

    message: str


AsyncState = Union[Loading, Success[T], Failure]


class ObservableValue(Generic[S]):
    """A single current value that notifies observers when it changes."""

    def __init__(self, initial: S) -> None:
        self._value = initial
        self._observers: list[Callable[[S], None]] = []

    @property
    def value(self) -> S:
        return self._value

    def set(self, value: S) -> None:
        """Replace the value and notify every observer in order."""
        self._value = value
        for observer in list(self._observers):
            observer(value)

    def subscribe(self, observer: Callable[[S], None]) -> Callable[[], None]:
        """Register ``observer`` and return a callable that removes it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe


class AsyncStateContainer(Generic[T]):
    """Lifecycle state of one asynchronous operation.

    Every ``set_loading()`` call that starts a new operation hands out a
    monotonic request id. Completions must present that id; a completion
    from a superseded request, or one arriving after ``close()``, is
    discarded. Since the only way to obtain an id is through ``Loading``,
    ``Success`` and ``Failure`` never replace each other directly.
    """

    def __init__(self, name: str = "operation", initial: AsyncState | None = None) -> None:
        self.name = name
        self._state: ObservableValue[AsyncState] = ObservableValue(
            initial if initial is not None else Loading()
        )
        self._ids = itertools.count(1)
        self._active_id: int | None = None
        self._closed = False

    def current(self) -> AsyncState:
        """Return the active state variant."""
        return self._state.value

    @property
    def is_loading(self) -> bool:
        return isinstance(self._state.value, Loading)

    @property
    def is_in_flight(self) -> bool:
        """True while a request id has been issued and not yet completed."""
        return self._active_id is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, observer: Callable[[AsyncState], None]) -> Callable[[], None]:
        return self._state.subscribe(observer)

    def set_loading(self) -> int | None:
        """Enter ``Loading`` and return the id of the new request.

        Returns None without touching the state when a request is already
        in flight or the container has been closed.
        """
        if self._closed or self._active_id is not None:
            return None
        self._active_id = next(self._ids)
        logger.debug("%s: request %d started", self.name, self._active_id)
        self._state.set(Loading())
        return self._active_id

    def set_success(self, value: T, request_id: int) -> bool:
        """Publish ``Success(value)`` for ``request_id``.

        Returns False if the completion was discarded.
        """
        return self._complete(Success(value), request_id)

    def set_failure(self, message: str, request_id: int) -> bool:
        """Publish ``Failure(message)`` for ``request_id``.

        Returns False if the completion was discarded.
        """
        return self._complete(Failure(message), request_id)

    def close(self) -> None:
        """Tear the container down; later completions are ignored."""
        self._closed = True
        self._active_id = None

    def _complete(self, state: AsyncState, request_id: int) -> bool:
        if self._closed or request_id != self._active_id:
            logger.debug(
                "%s: dropping completion for stale request %s", self.name, request_id
            )
            return False
        self._active_id = None
        self._state.set(state)
        return True
