"""Open-Meteo API client for fetching the temperature forecast.

Makes a single request to /v1/forecast asking for the current
temperature and an hourly temperature series covering the past two days
and the next fourteen. No API key is required.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx

from weatheragent import config
from weatheragent.errors import DecodeError
from weatheragent.http_client import get_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForecastPayload:
    """Raw forecast data as returned by Open-Meteo.

    Attributes:
        current_temperature: Current temperature in degrees Celsius.
        times: ISO 8601 local date-times (no offset) of the hourly series.
        temperatures: Hourly temperatures, parallel to ``times``.
    """

    current_temperature: float
    times: list[str] = field(default_factory=list)
    temperatures: list[float] = field(default_factory=list)


def _parse_payload(data: dict) -> ForecastPayload:
    """Validate the response shape and extract the fields we use."""
    try:
        current = float(data["current"]["temperature_2m"])
        hourly = data["hourly"]
        times = hourly["time"]
        temperatures = hourly["temperature_2m"]
    except (KeyError, TypeError, ValueError) as exc:
        raise DecodeError("Unexpected forecast response format from Open-Meteo.") from exc

    if not isinstance(times, list) or not isinstance(temperatures, list):
        raise DecodeError("Hourly forecast series are not lists.")

    try:
        temperatures = [float(t) for t in temperatures]
    except (TypeError, ValueError) as exc:
        raise DecodeError("Hourly temperatures must be numbers.") from exc

    return ForecastPayload(
        current_temperature=current,
        times=[str(t) for t in times],
        temperatures=temperatures,
    )


class WeatherClient:
    """Fetches the forecast for one fixed location."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
        past_days: int | None = None,
        forecast_days: int | None = None,
    ) -> None:
        self._http = http
        self.base_url = (base_url or config.OPEN_METEO_BASE_URL).rstrip("/")
        self.latitude = config.WEATHER_LATITUDE if latitude is None else latitude
        self.longitude = config.WEATHER_LONGITUDE if longitude is None else longitude
        self.past_days = config.WEATHER_PAST_DAYS if past_days is None else past_days
        self.forecast_days = (
            config.WEATHER_FORECAST_DAYS if forecast_days is None else forecast_days
        )

    @property
    def params(self) -> dict[str, object]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "hourly": "temperature_2m",
            "current": "temperature_2m",
            "past_days": self.past_days,
            "forecast_days": self.forecast_days,
        }

    async def get_forecast(self) -> ForecastPayload:
        """Fetch the raw forecast payload.

        Raises:
            NetworkError: On timeouts and transport failures.
            HttpStatusError: If Open-Meteo answers with a non-2xx status.
            DecodeError: If the body is not JSON or has the wrong shape.
        """
        data = await get_json(self._http, f"{self.base_url}/v1/forecast", self.params)
        if not isinstance(data, dict):
            raise DecodeError("Unexpected forecast response format from Open-Meteo.")
        payload = _parse_payload(data)
        logger.debug(
            "Forecast received: current=%s, %d hourly times, %d temperatures",
            payload.current_temperature,
            len(payload.times),
            len(payload.temperatures),
        )
        return payload
