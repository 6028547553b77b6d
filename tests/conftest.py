"""Shared test fixtures for Open-Meteo and agent webhook responses."""

import httpx
import pytest
import pytest_asyncio

from weatheragent.agent_client import AgentClient
from weatheragent.weather_client import WeatherClient

OPEN_METEO_BASE = "https://api.open-meteo.test"
FORECAST_URL = f"{OPEN_METEO_BASE}/v1/forecast"
WEBHOOK_URL = "https://agent.test/webhook/weather"


@pytest.fixture()
def forecast_response():
    """Sample Open-Meteo forecast response with two hourly points."""
    return {
        "latitude": -1.25,
        "longitude": 36.875,
        "current": {
            "time": "2024-01-01T01:00",
            "temperature_2m": 21.7,
        },
        "hourly": {
            "time": ["2024-01-01T00:00:00", "2024-01-01T01:00:00"],
            "temperature_2m": [20.1, 19.8],
        },
    }


@pytest.fixture()
def agent_response():
    """Sample webhook reply with a literal backslash-n escape."""
    return {"myField": "Yes, expect rain.\\n"}


@pytest_asyncio.fixture()
async def http_client():
    async with httpx.AsyncClient(timeout=httpx.Timeout(30)) as client:
        yield client


@pytest.fixture()
def weather_client(http_client):
    return WeatherClient(http_client, base_url=OPEN_METEO_BASE)


@pytest.fixture()
def agent_client(http_client):
    return AgentClient(http_client, webhook_url=WEBHOOK_URL)
