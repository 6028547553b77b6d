"""Chat screen state: the message log and the send/receive cycle."""

from __future__ import annotations

import dataclasses
import itertools
import logging
import time
from dataclasses import dataclass
from typing import Callable

from weatheragent.agent_client import AgentClient
from weatheragent.errors import WeatherAgentError
from weatheragent.state import ObservableValue

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = (
    "Sorry, I'm having trouble connecting right now. Please try again later."
)


def _now_millis() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ChatMessage:
    """A single entry in the chat log.

    Attributes:
        content: Message text.
        is_from_user: True for the user's messages, False for the agent.
        timestamp: Creation time in epoch milliseconds.
    """

    content: str
    is_from_user: bool
    timestamp: int = dataclasses.field(default_factory=_now_millis)


@dataclass(frozen=True)
class ChatSessionState:
    """Everything the chat screen renders."""

    messages: tuple[ChatMessage, ...] = ()
    draft_text: str = ""
    is_loading: bool = False
    last_error: str | None = None


class ChatStore:
    """Owns the message log and runs at most one send at a time.

    The log is append-only: a failed send keeps the user's message and
    adds the fallback reply after it. Only ``clear()`` empties it.
    """

    def __init__(self, client: AgentClient) -> None:
        self._client = client
        self._state: ObservableValue[ChatSessionState] = ObservableValue(ChatSessionState())
        self._ids = itertools.count(1)
        self._active_id: int | None = None
        self._closed = False

    @property
    def state(self) -> ChatSessionState:
        return self._state.value

    def subscribe(self, observer: Callable[[ChatSessionState], None]) -> Callable[[], None]:
        return self._state.subscribe(observer)

    def _update(self, **changes) -> None:
        self._state.set(dataclasses.replace(self._state.value, **changes))

    def update_draft(self, text: str) -> None:
        self._update(draft_text=text)

    async def send_message(self) -> None:
        """Send the current draft and append the reply (or the fallback)."""
        text = self.state.draft_text.strip()
        if not text or self.state.is_loading or self._closed:
            return

        request_id = next(self._ids)
        self._active_id = request_id
        self._update(
            messages=self.state.messages + (ChatMessage(content=text, is_from_user=True),),
            draft_text="",
            is_loading=True,
            last_error=None,
        )

        try:
            reply = await self._client.ask(text)
        except WeatherAgentError as exc:
            logger.warning("Agent request failed: %s", exc)
            self._fail(request_id, exc)
            return
        except Exception as exc:
            logger.exception("Unexpected error during agent request")
            self._fail(request_id, exc)
            return

        if self._is_current(request_id):
            self._finish(ChatMessage(content=reply, is_from_user=False))

    def clear_error(self) -> None:
        self._update(last_error=None)

    def clear(self) -> None:
        """Reset to an empty conversation; a reply still in flight is dropped."""
        self._active_id = None
        self._state.set(ChatSessionState())

    def close(self) -> None:
        """Screen teardown; a reply still in flight will be ignored."""
        self._closed = True
        self._active_id = None

    def _is_current(self, request_id: int) -> bool:
        if self._closed or request_id != self._active_id:
            logger.debug("Dropping agent reply for superseded request %d", request_id)
            return False
        return True

    def _finish(self, message: ChatMessage, **changes) -> None:
        self._active_id = None
        self._update(
            messages=self.state.messages + (message,),
            is_loading=False,
            **changes,
        )

    def _fail(self, request_id: int, exc: Exception) -> None:
        if self._is_current(request_id):
            self._finish(
                ChatMessage(content=FALLBACK_MESSAGE, is_from_user=False),
                last_error=f"Failed to get weather response: {exc}",
            )
