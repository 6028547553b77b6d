"""Weather screen state: snapshot model, payload mapping and the fetch flow."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from weatheragent.errors import DecodeError, WeatherAgentError
from weatheragent.state import AsyncState, AsyncStateContainer
from weatheragent.weather_client import ForecastPayload, WeatherClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HourlyPoint:
    """One hour of the forecast series.

    Attributes:
        time: Naive local date-time, as Open-Meteo reports it.
        temperature: Degrees Celsius.
    """

    time: datetime
    temperature: float


@dataclass(frozen=True)
class WeatherSnapshot:
    """Point-in-time weather data: the current reading and the hourly series."""

    current_temperature: float
    hourly: tuple[HourlyPoint, ...] = ()


@dataclass(frozen=True)
class TemperatureStats:
    high: float
    low: float
    average: float


def map_forecast(payload: ForecastPayload) -> WeatherSnapshot:
    """Zip the parallel hourly sequences into a snapshot.

    The series is truncated to the shorter of the two sequences; a length
    mismatch is not an error.

    Raises:
        DecodeError: If a timestamp is not an ISO 8601 local date-time
            (an offset is rejected too).
    """
    points = []
    for raw_time, temperature in zip(payload.times, payload.temperatures):
        try:
            time = datetime.fromisoformat(raw_time)
        except ValueError as exc:
            raise DecodeError(f"Invalid hourly timestamp: {raw_time!r}") from exc
        if time.tzinfo is not None:
            raise DecodeError(f"Hourly timestamp carries an offset: {raw_time!r}")
        points.append(HourlyPoint(time=time, temperature=temperature))

    if len(payload.times) != len(payload.temperatures):
        logger.warning(
            "Hourly series length mismatch (%d times, %d temperatures); truncating to %d",
            len(payload.times),
            len(payload.temperatures),
            len(points),
        )

    return WeatherSnapshot(
        current_temperature=payload.current_temperature,
        hourly=tuple(points),
    )


def describe_temperature(temperature: float) -> str:
    """Map a temperature (C) to a one-word condition label."""
    if temperature >= 30:
        return "Hot"
    if temperature >= 25:
        return "Warm"
    if temperature >= 20:
        return "Pleasant"
    if temperature >= 15:
        return "Cool"
    if temperature >= 10:
        return "Cold"
    return "Very Cold"


def temperature_stats(hourly: tuple[HourlyPoint, ...] | list[HourlyPoint]) -> TemperatureStats | None:
    """High, low and average temperature of a series, or None if it is empty."""
    temps = [p.temperature for p in hourly]
    if not temps:
        return None
    return TemperatureStats(
        high=max(temps),
        low=min(temps),
        average=sum(temps) / len(temps),
    )


def next_hours(
    snapshot: WeatherSnapshot,
    now: datetime | None = None,
    count: int = 24,
) -> list[HourlyPoint]:
    """Return the ``count``-hour window shown in the hourly strip.

    The window starts at the hour containing ``now``. If ``now`` falls
    outside the series the first ``count`` points are returned instead.
    """
    hourly = snapshot.hourly
    if now is None:
        now = datetime.now()
    current_hour = now.replace(minute=0, second=0, microsecond=0)

    for index, point in enumerate(hourly):
        if point.time >= current_hour:
            return list(hourly[index:index + count])
    return list(hourly[:count])


class WeatherDataStore:
    """Drives weather fetches and exposes the result as an AsyncState."""

    def __init__(self, client: WeatherClient) -> None:
        self._client = client
        self._container: AsyncStateContainer[WeatherSnapshot] = AsyncStateContainer("weather")

    @property
    def state(self) -> AsyncState:
        return self._container.current()

    def subscribe(self, observer):
        return self._container.subscribe(observer)

    async def fetch(self) -> None:
        """Fetch the forecast once.

        A call made while another fetch is outstanding is dropped. Errors
        never propagate; they become a ``Failure`` state.
        """
        request_id = self._container.set_loading()
        if request_id is None:
            logger.debug("Weather fetch already in flight; ignoring refresh")
            return

        try:
            payload = await self._client.get_forecast()
            snapshot = map_forecast(payload)
        except WeatherAgentError as exc:
            logger.warning("Weather fetch failed: %s", exc)
            self._container.set_failure(f"Failed to load weather data: {exc}", request_id)
            return
        except Exception as exc:
            logger.exception("Unexpected error during weather fetch")
            self._container.set_failure(f"Failed to load weather data: {exc}", request_id)
            return

        if self._container.set_success(snapshot, request_id):
            logger.info(
                "Weather loaded: %.1f C now, %d hourly points",
                snapshot.current_temperature,
                len(snapshot.hourly),
            )

    def close(self) -> None:
        """Screen teardown; a response still in flight will be ignored."""
        self._container.close()
