"""Tests for the weather store, payload mapping and display helpers."""

import asyncio
from datetime import datetime, timedelta

import httpx
import pytest
import respx

from weatheragent.errors import DecodeError, NetworkError
from weatheragent.state import Failure, Loading, Success
from weatheragent.weather_client import ForecastPayload
from weatheragent.weather_store import (
    HourlyPoint,
    WeatherDataStore,
    WeatherSnapshot,
    describe_temperature,
    map_forecast,
    next_hours,
    temperature_stats,
)


FORECAST_URL = "https://api.open-meteo.test/v1/forecast"


class BlockingWeatherClient:
    """Fake client whose responses are released by the test."""

    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.calls = 0
        self.release = asyncio.Event()

    async def get_forecast(self):
        self.calls += 1
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.payload


def _snapshot(start: datetime, temps: list[float]) -> WeatherSnapshot:
    return WeatherSnapshot(
        current_temperature=temps[0],
        hourly=tuple(
            HourlyPoint(time=start + timedelta(hours=i), temperature=t)
            for i, t in enumerate(temps)
        ),
    )


class TestMapForecast:
    """Test zipping the parallel hourly sequences."""

    def test_equal_lengths_keep_order(self):
        payload = ForecastPayload(
            current_temperature=21.7,
            times=["2024-01-01T00:00:00", "2024-01-01T01:00:00", "2024-01-01T02:00"],
            temperatures=[20.1, 19.8, 19.5],
        )

        snapshot = map_forecast(payload)

        assert snapshot.current_temperature == 21.7
        assert [p.temperature for p in snapshot.hourly] == [20.1, 19.8, 19.5]
        assert snapshot.hourly[2].time == datetime(2024, 1, 1, 2, 0)

    def test_timestamps_are_naive(self):
        payload = ForecastPayload(21.7, ["2024-01-01T00:00"], [20.1])

        snapshot = map_forecast(payload)

        assert snapshot.hourly[0].time.tzinfo is None

    def test_timestamp_with_offset_raises_decode_error(self):
        payload = ForecastPayload(21.7, ["2024-01-01T00:00+03:00"], [20.1])

        with pytest.raises(DecodeError, match="offset"):
            map_forecast(payload)

    def test_more_times_than_temperatures_truncates(self):
        payload = ForecastPayload(
            21.7,
            ["2024-01-01T00:00", "2024-01-01T01:00", "2024-01-01T02:00"],
            [20.1],
        )

        assert len(map_forecast(payload).hourly) == 1

    def test_more_temperatures_than_times_truncates(self):
        payload = ForecastPayload(21.7, ["2024-01-01T00:00"], [20.1, 19.8, 19.5])

        assert len(map_forecast(payload).hourly) == 1

    def test_empty_series(self):
        snapshot = map_forecast(ForecastPayload(21.7))

        assert snapshot.hourly == ()

    def test_invalid_timestamp_raises_decode_error(self):
        payload = ForecastPayload(21.7, ["yesterday"], [20.1])

        with pytest.raises(DecodeError, match="Invalid hourly timestamp"):
            map_forecast(payload)


class TestWeatherDataStoreFetch:
    """Test the fetch flow against a mocked Open-Meteo endpoint."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_success_publishes_snapshot(self, weather_client, forecast_response):
        respx.get(FORECAST_URL).mock(
            return_value=httpx.Response(200, json=forecast_response)
        )
        store = WeatherDataStore(weather_client)

        await store.fetch()

        state = store.state
        assert isinstance(state, Success)
        assert state.value.current_temperature == 21.7
        assert state.value.hourly == (
            HourlyPoint(datetime(2024, 1, 1, 0, 0), 20.1),
            HourlyPoint(datetime(2024, 1, 1, 1, 0), 19.8),
        )

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout_becomes_failure_and_retry_is_accepted(
        self, weather_client, forecast_response
    ):
        route = respx.get(FORECAST_URL)
        route.side_effect = [
            httpx.ReadTimeout("timed out"),
            httpx.Response(200, json=forecast_response),
        ]
        store = WeatherDataStore(weather_client)

        await store.fetch()

        assert isinstance(store.state, Failure)
        assert store.state.message.startswith("Failed to load weather data:")

        await store.fetch()

        assert isinstance(store.state, Success)
        assert route.call_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_becomes_failure(self, weather_client):
        respx.get(FORECAST_URL).mock(return_value=httpx.Response(500, json={}))
        store = WeatherDataStore(weather_client)

        await store.fetch()

        assert isinstance(store.state, Failure)
        assert "500" in store.state.message

    @pytest.mark.asyncio
    @respx.mock
    async def test_observer_sees_loading_then_success(self, weather_client, forecast_response):
        respx.get(FORECAST_URL).mock(
            return_value=httpx.Response(200, json=forecast_response)
        )
        store = WeatherDataStore(weather_client)
        seen = []
        store.subscribe(lambda state: seen.append(type(state)))

        await store.fetch()

        assert seen == [Loading, Success]


class TestWeatherDataStoreConcurrency:
    """Test the in-flight guard and teardown."""

    @pytest.mark.asyncio
    async def test_fetch_while_loading_is_noop(self):
        client = BlockingWeatherClient(payload=ForecastPayload(21.7))
        store = WeatherDataStore(client)

        first = asyncio.create_task(store.fetch())
        await asyncio.sleep(0)
        await store.fetch()

        assert client.calls == 1
        assert isinstance(store.state, Loading)

        client.release.set()
        await first
        assert isinstance(store.state, Success)

    @pytest.mark.asyncio
    async def test_failure_releases_guard(self):
        client = BlockingWeatherClient(error=NetworkError("offline"))
        client.release.set()
        store = WeatherDataStore(client)

        await store.fetch()
        await store.fetch()

        assert client.calls == 2
        assert isinstance(store.state, Failure)

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_failure_and_releases_guard(self):
        client = BlockingWeatherClient(error=RuntimeError("client bug"))
        client.release.set()
        store = WeatherDataStore(client)

        await store.fetch()

        assert isinstance(store.state, Failure)
        assert "client bug" in store.state.message

        await store.fetch()

        assert client.calls == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_offset_timestamps_become_failure(self, weather_client):
        respx.get(FORECAST_URL).mock(
            return_value=httpx.Response(
                200,
                json={
                    "current": {"temperature_2m": 21.7},
                    "hourly": {"time": ["2024-01-01T00:00+03:00"], "temperature_2m": [20.1]},
                },
            )
        )
        store = WeatherDataStore(weather_client)

        await store.fetch()

        assert isinstance(store.state, Failure)

    @pytest.mark.asyncio
    async def test_response_after_close_is_ignored(self):
        client = BlockingWeatherClient(payload=ForecastPayload(21.7))
        store = WeatherDataStore(client)

        task = asyncio.create_task(store.fetch())
        await asyncio.sleep(0)
        store.close()
        client.release.set()
        await task

        assert isinstance(store.state, Loading)


class TestDescribeTemperature:
    """Test the condition label thresholds."""

    @pytest.mark.parametrize(
        ("temperature", "label"),
        [
            (35.0, "Hot"),
            (30.0, "Hot"),
            (27.5, "Warm"),
            (20.0, "Pleasant"),
            (15.0, "Cool"),
            (10.0, "Cold"),
            (9.9, "Very Cold"),
            (-5.0, "Very Cold"),
        ],
    )
    def test_thresholds(self, temperature, label):
        assert describe_temperature(temperature) == label


class TestTemperatureStats:
    """Test high/low/average computation."""

    def test_computes_range(self):
        snapshot = _snapshot(datetime(2024, 1, 1), [18.0, 24.0, 21.0])

        stats = temperature_stats(snapshot.hourly)

        assert stats.high == 24.0
        assert stats.low == 18.0
        assert stats.average == pytest.approx(21.0)

    def test_empty_series(self):
        assert temperature_stats(()) is None


class TestNextHours:
    """Test the hourly strip window."""

    def test_starts_at_current_hour(self):
        snapshot = _snapshot(datetime(2024, 1, 1), [float(i) for i in range(48)])

        window = next_hours(snapshot, now=datetime(2024, 1, 1, 5, 42))

        assert len(window) == 24
        assert window[0].time == datetime(2024, 1, 1, 5)

    def test_window_shorter_near_end_of_series(self):
        snapshot = _snapshot(datetime(2024, 1, 1), [float(i) for i in range(10)])

        window = next_hours(snapshot, now=datetime(2024, 1, 1, 7, 0), count=24)

        assert [p.temperature for p in window] == [7.0, 8.0, 9.0]

    def test_now_after_series_falls_back_to_start(self):
        snapshot = _snapshot(datetime(2024, 1, 1), [float(i) for i in range(30)])

        window = next_hours(snapshot, now=datetime(2025, 1, 1))

        assert window[0].time == datetime(2024, 1, 1)
        assert len(window) == 24

    def test_empty_snapshot(self):
        assert next_hours(WeatherSnapshot(current_temperature=20.0)) == []
