"""Client for the conversational weather agent webhook.

The agent lives behind a single webhook: the user's question goes out as
the ``future`` query parameter and the reply comes back as the
``myField`` string of a JSON object.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import httpx

from weatheragent import config
from weatheragent.errors import MissingFieldError
from weatheragent.http_client import get_json

logger = logging.getLogger(__name__)

QUERY_PARAM = "future"
REPLY_FIELD = "myField"


def clean_reply(text: str) -> str:
    """Strip literal backslash-n sequences and surrounding whitespace."""
    return text.replace("\\n", "").strip()


@dataclass(frozen=True)
class WeatherCondition:
    """A condition mentioned in a reply, with how to badge it."""

    label: str
    icon: str
    color: str


# Checked in order; the first keyword found wins. "partly cloudy" must come
# before "cloudy" to ever match.
_CONDITION_KEYWORDS: list[tuple[tuple[str, ...], WeatherCondition]] = [
    (("partly cloudy", "partially cloudy", "mixed"),
     WeatherCondition("Partly Cloudy", "⛅", "#F59E0B")),
    (("sunny", "clear", "bright", "sunshine"),
     WeatherCondition("Sunny", "☀️", "#FFD700")),
    (("cloudy", "overcast", "clouds"),
     WeatherCondition("Cloudy", "☁️", "#9CA3AF")),
    (("rain", "drizzle", "shower", "wet"),
     WeatherCondition("Rainy", "\U0001f327️", "#60A5FA")),
    (("snow", "blizzard", "flurries"),
     WeatherCondition("Snowy", "\U0001f328️", "#E5E7EB")),
    (("windy", "breezy", "gusty"),
     WeatherCondition("Windy", "\U0001f32c️", "#10B981")),
    (("storm", "thunder", "lightning"),
     WeatherCondition("Stormy", "⛈️", "#7C3AED")),
    (("fog", "mist", "hazy"),
     WeatherCondition("Foggy", "\U0001f32b️", "#6B7280")),
    (("hot", "scorching", "blazing"),
     WeatherCondition("Hot", "\U0001f525", "#EF4444")),
    (("cold", "freezing", "chilly", "frost"),
     WeatherCondition("Cold", "\U0001f321️", "#3B82F6")),
]

_TEMPERATURE_RE = re.compile(r"\d+(?:\.\d+)?\s*°[CF]?")


def detect_weather_condition(message: str) -> WeatherCondition | None:
    """Return the first weather condition a message mentions, if any."""
    lower = message.lower()
    for keywords, condition in _CONDITION_KEYWORDS:
        if any(word in lower for word in keywords):
            return condition
    return None


def has_temperature(message: str) -> bool:
    """True if a message talks about temperature."""
    return "°" in message or "degrees" in message or "temperature" in message


def extract_temperatures(message: str) -> list[str]:
    """All temperature readings in a message, e.g. ``["21°C", "18 °"]``."""
    return _TEMPERATURE_RE.findall(message)


class AgentClient:
    """Sends one question to the webhook and returns the cleaned reply."""

    def __init__(self, http: httpx.AsyncClient, webhook_url: str | None = None) -> None:
        self._http = http
        self.webhook_url = webhook_url or config.get_webhook_url()

    async def ask(self, question: str) -> str:
        """Ask the agent a question.

        Args:
            question: The user's message; url-encoded into the query string.

        Returns:
            The agent's reply text.

        Raises:
            NetworkError: On timeouts and transport failures.
            HttpStatusError: On any non-2xx response.
            DecodeError: If the body is not JSON.
            MissingFieldError: If the JSON has no ``myField`` string.
        """
        data = await get_json(self._http, self.webhook_url, {QUERY_PARAM: question})

        reply = data.get(REPLY_FIELD) if isinstance(data, dict) else None
        if not isinstance(reply, str):
            raise MissingFieldError(f"Agent response has no '{REPLY_FIELD}' field.")

        logger.debug("Agent replied with %d characters", len(reply))
        return clean_reply(reply)
