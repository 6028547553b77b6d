"""Centralized configuration loaded from environment variables.

All settings are read from environment variables with sensible defaults.
The webhook URL also checks Streamlit secrets (st.secrets) so a deployed
app can point the chat panel at its own agent without code changes.
"""

import os


def get_webhook_url() -> str:
    """Get the agent webhook URL lazily so st.secrets is ready.

    Must be called at runtime (not import time) because Streamlit
    only makes st.secrets available after the app starts.
    """
    try:
        import streamlit as st
        if hasattr(st, "secrets") and "AGENT_WEBHOOK_URL" in st.secrets:
            return str(st.secrets["AGENT_WEBHOOK_URL"])
    except Exception:
        pass
    return os.environ.get("AGENT_WEBHOOK_URL", AGENT_WEBHOOK_URL)


def _get_int(key: str, default: int) -> int:
    """Read an integer environment variable with a default."""
    return int(os.environ.get(key, str(default)))


def _get_float(key: str, default: float) -> float:
    """Read a float environment variable with a default."""
    return float(os.environ.get(key, str(default)))


# Open-Meteo forecast API
OPEN_METEO_BASE_URL: str = os.environ.get(
    "OPEN_METEO_BASE_URL", "https://api.open-meteo.com"
)
WEATHER_LATITUDE: float = _get_float("WEATHER_LATITUDE", -1.2833)
WEATHER_LONGITUDE: float = _get_float("WEATHER_LONGITUDE", 36.8167)
WEATHER_LOCATION_NAME: str = os.environ.get("WEATHER_LOCATION_NAME", "Nairobi")
WEATHER_PAST_DAYS: int = _get_int("WEATHER_PAST_DAYS", 2)
WEATHER_FORECAST_DAYS: int = _get_int("WEATHER_FORECAST_DAYS", 14)

# Shared HTTP client, one bound for connect/read/write/pool
HTTP_TIMEOUT: int = _get_int("HTTP_TIMEOUT", 30)

# Weather agent webhook
AGENT_WEBHOOK_URL: str = os.environ.get(
    "AGENT_WEBHOOK_URL",
    "https://aricha.app.n8n.cloud/webhook/92efd652-d13c-4b2e-b5a1-890fd8c4e476",
)

LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")
