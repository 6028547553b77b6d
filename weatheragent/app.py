"""Streamlit weather viewer with a chat panel for the weather agent.

Run with: streamlit run weatheragent/app.py

The weather tab shows the current temperature, a 24-hour strip and the
temperature range; the chat tab forwards questions to the agent webhook.
Both tabs only render store state and forward user actions back to the
stores, which live in st.session_state for the lifetime of the session.
"""

from __future__ import annotations

import asyncio
import atexit
import html
from datetime import datetime

import httpx
import streamlit as st

from weatheragent import config
from weatheragent.agent_client import (
    AgentClient,
    detect_weather_condition,
    extract_temperatures,
    has_temperature,
)
from weatheragent.chat_store import ChatMessage, ChatStore
from weatheragent.http_client import create_http_client
from weatheragent.logging_config import configure_logging
from weatheragent.state import Failure, Loading, Success
from weatheragent.weather_client import WeatherClient
from weatheragent.weather_store import (
    WeatherDataStore,
    WeatherSnapshot,
    describe_temperature,
    next_hours,
    temperature_stats,
)


# ---------------------------------------------------------------------------
# Temperature -> emoji / gradient
# ---------------------------------------------------------------------------

def _get_weather_icon(temperature: float) -> str:
    """Pick an icon for a temperature (C)."""
    if temperature >= 30:
        return "☀️"
    if temperature >= 20:
        return "\U0001f324️"
    if temperature >= 10:
        return "☁️"
    return "❄️"


_GRADIENTS: dict[str, str] = {
    "Hot": "linear-gradient(180deg, #e65100 0%, #ff8f00 50%, #ffb300 100%)",
    "Warm": "linear-gradient(180deg, #ef6c00 0%, #ffa726 50%, #ffcc80 100%)",
    "Pleasant": "linear-gradient(180deg, #1e88e5 0%, #42a5f5 40%, #64b5f6 100%)",
    "Cool": "linear-gradient(180deg, #00838f 0%, #26a69a 50%, #80cbc4 100%)",
    "Cold": "linear-gradient(180deg, #37474f 0%, #546e7a 50%, #78909c 100%)",
    "Very Cold": "linear-gradient(180deg, #1a237e 0%, #3949ab 50%, #7986cb 100%)",
    "default": "linear-gradient(180deg, #1a1a2e 0%, #16213e 50%, #0f3460 100%)",
}


# ---------------------------------------------------------------------------
# CSS injection
# ---------------------------------------------------------------------------

def _inject_css(gradient: str) -> None:
    """Inject glass-card styling on top of a temperature-driven gradient."""
    st.markdown(f"""
    <style>
    .stApp {{
        background: {gradient} !important;
    }}
    #MainMenu {{visibility: hidden;}}
    footer {{visibility: hidden;}}
    .block-container {{
        padding-top: 1rem !important;
        max-width: 600px !important;
    }}
    .glass-card {{
        background: rgba(255, 255, 255, 0.08);
        backdrop-filter: blur(20px);
        border-radius: 16px;
        border: 1px solid rgba(255, 255, 255, 0.12);
        padding: 16px;
        margin-bottom: 14px;
    }}
    .section-label {{
        font-size: 0.75rem;
        text-transform: uppercase;
        letter-spacing: 0.5px;
        color: rgba(255, 255, 255, 0.55);
        margin-bottom: 10px;
        font-weight: 600;
    }}
    .wx-header {{ text-align: center; padding: 10px 0 16px 0; }}
    .wx-location {{ font-size: 1.4rem; color: rgba(255,255,255,0.95); font-weight: 500; }}
    .wx-temp {{ font-size: 5rem; font-weight: 200; color: #ffffff; line-height: 1.05; }}
    .wx-condition {{ font-size: 1.1rem; color: rgba(255,255,255,0.8); }}
    .hourly-row {{ display: flex; overflow-x: auto; scrollbar-width: none; }}
    .hourly-item {{ flex: 0 0 62px; text-align: center; padding: 6px 2px; color: #ffffff; }}
    .hourly-item .h-time {{ font-size: 0.78rem; font-weight: 600; margin-bottom: 6px; }}
    .hourly-item .h-icon {{ font-size: 1.3rem; margin-bottom: 6px; }}
    .stat-value {{ font-size: 1.8rem; color: #ffffff; text-align: center; }}
    .stat-label {{ font-size: 0.75rem; color: rgba(255,255,255,0.55); text-align: center; }}
    .chat-user {{
        background: rgba(33, 150, 243, 0.25);
        border-radius: 16px 16px 4px 16px;
        padding: 10px 14px;
        margin: 6px 0 6px 20%;
        color: #ffffff;
    }}
    .chat-assistant {{
        background: rgba(255, 255, 255, 0.1);
        border-radius: 16px 16px 16px 4px;
        padding: 10px 14px;
        margin: 6px 20% 6px 0;
        color: rgba(255,255,255,0.9);
    }}
    .chat-time {{ font-size: 0.65rem; color: rgba(255,255,255,0.5); }}
    .chat-condition {{ font-size: 0.75rem; font-weight: 600; margin-bottom: 4px; }}
    .chat-temp {{ font-weight: 700; color: #ffca28; }}
    .chat-typing {{ font-style: italic; color: rgba(255,255,255,0.6); }}
    .stMarkdown, .stMarkdown p {{ color: #ffffff !important; }}
    </style>
    """, unsafe_allow_html=True)


# ---------------------------------------------------------------------------
# Session wiring
# ---------------------------------------------------------------------------

def _close_session(
    loop: asyncio.AbstractEventLoop,
    http: httpx.AsyncClient,
    stores: tuple[WeatherDataStore, ChatStore],
) -> None:
    """Release a session's stores, HTTP client and event loop."""
    for store in stores:
        store.close()
    if not loop.is_closed():
        loop.run_until_complete(http.aclose())
        loop.close()


def _init_session() -> None:
    """Create the stores once per browser session (screen mount).

    Streamlit offers no session-end hook, so each session's resources are
    released at interpreter exit.
    """
    if "weather_store" in st.session_state:
        return

    http = create_http_client()
    loop = asyncio.new_event_loop()
    weather_store = WeatherDataStore(WeatherClient(http))
    chat_store = ChatStore(AgentClient(http))
    atexit.register(_close_session, loop, http, (weather_store, chat_store))

    st.session_state.event_loop = loop
    st.session_state.weather_store = weather_store
    st.session_state.chat_store = chat_store
    st.session_state.weather_requested = False


def _run(coro) -> None:
    """Drive a store coroutine to completion on the session's event loop."""
    st.session_state.event_loop.run_until_complete(coro)


# ---------------------------------------------------------------------------
# Render: weather tab
# ---------------------------------------------------------------------------

def _render_header(snapshot: WeatherSnapshot | None) -> None:
    condition = describe_temperature(snapshot.current_temperature) if snapshot else ""
    col1, col2 = st.columns([5, 1])
    col1.markdown(
        f'<div class="wx-location">{html.escape(config.WEATHER_LOCATION_NAME)}</div>'
        f'<div class="wx-condition">{condition}</div>',
        unsafe_allow_html=True,
    )
    if col2.button("↻", key="refresh_btn", help="Refresh"):
        _run(st.session_state.weather_store.fetch())
        st.rerun()


def _render_hourly(snapshot: WeatherSnapshot) -> None:
    """Render the horizontally scrollable 24-hour strip."""
    hours = next_hours(snapshot, datetime.now())
    if not hours:
        return

    items = ""
    for point in hours:
        items += (
            f'<div class="hourly-item">'
            f'<div class="h-time">{point.time.strftime("%H:%M")}</div>'
            f'<div class="h-icon">{_get_weather_icon(point.temperature)}</div>'
            f'<div class="h-temp">{int(point.temperature)}°</div>'
            f'</div>'
        )

    st.markdown(
        f'<div class="glass-card">'
        f'<div class="section-label">\U0001f552 24-Hour Forecast</div>'
        f'<div class="hourly-row">{items}</div>'
        f'</div>',
        unsafe_allow_html=True,
    )


def _render_stats(snapshot: WeatherSnapshot) -> None:
    stats = temperature_stats(snapshot.hourly)
    if stats is None:
        return

    st.markdown('<div class="section-label">Temperature Range</div>', unsafe_allow_html=True)
    for col, label, value in zip(
        st.columns(3),
        ("High", "Low", "Average"),
        (stats.high, stats.low, stats.average),
    ):
        col.markdown(
            f'<div class="glass-card">'
            f'<div class="stat-value">{int(value)}°</div>'
            f'<div class="stat-label">{label}</div>'
            f'</div>',
            unsafe_allow_html=True,
        )


def _render_weather_tab() -> None:
    store: WeatherDataStore = st.session_state.weather_store
    if not st.session_state.weather_requested:
        st.session_state.weather_requested = True
        with st.spinner("Loading forecast data..."):
            _run(store.fetch())

    state = store.state
    if isinstance(state, Success):
        snapshot = state.value
        _inject_css(_GRADIENTS[describe_temperature(snapshot.current_temperature)])
        _render_header(snapshot)
        st.markdown(
            f'<div class="wx-header">'
            f'<div class="wx-temp">{int(snapshot.current_temperature)}°</div>'
            f'<div class="wx-condition">Current Temperature</div>'
            f'</div>',
            unsafe_allow_html=True,
        )
        _render_hourly(snapshot)
        _render_stats(snapshot)
    elif isinstance(state, Failure):
        _render_header(None)
        st.error("Unable to load weather")
        st.caption("Check your connection and try again")
        with st.expander("Details"):
            st.write(state.message)
        if st.button("Try Again", key="retry_btn", type="primary", use_container_width=True):
            _run(store.fetch())
            st.rerun()
    elif isinstance(state, Loading):
        _render_header(None)
        st.info("Loading forecast data...")


# ---------------------------------------------------------------------------
# Render: chat tab
# ---------------------------------------------------------------------------

def _on_send() -> None:
    """Forward the input box into the store and send it."""
    store: ChatStore = st.session_state.chat_store
    store.update_draft(st.session_state.get("chat_input", ""))
    with st.spinner("Weather agent is typing..."):
        _run(store.send_message())
    st.session_state.chat_input = store.state.draft_text


def _highlight_temperatures(content: str) -> str:
    """Escape a reply and wrap every temperature reading in a highlight span."""
    escaped = html.escape(content)
    for reading in dict.fromkeys(extract_temperatures(content)):
        escaped = escaped.replace(reading, f'<span class="chat-temp">{reading}</span>')
    return escaped


def _render_message(message: ChatMessage) -> None:
    sent_at = datetime.fromtimestamp(message.timestamp / 1000).strftime("%H:%M")
    if message.is_from_user:
        st.markdown(
            f'<div class="chat-user">{html.escape(message.content)}'
            f'<div class="chat-time">{sent_at}</div></div>',
            unsafe_allow_html=True,
        )
        return

    condition = detect_weather_condition(message.content)
    badge = (
        f'<div class="chat-condition" style="color:{condition.color};">'
        f'{condition.icon} {condition.label}</div>'
        if condition else ""
    )
    body = (
        _highlight_temperatures(message.content)
        if has_temperature(message.content)
        else html.escape(message.content)
    )
    st.markdown(
        f'<div class="chat-assistant">{badge}{body}'
        f'<div class="chat-time">{sent_at}</div></div>',
        unsafe_allow_html=True,
    )


def _render_chat_tab() -> None:
    store: ChatStore = st.session_state.chat_store
    state = store.state

    if not state.messages:
        st.markdown(
            '<div style="text-align:center;color:rgba(255,255,255,0.6);padding:20px 0;">'
            'Ask me anything about the weather.'
            '</div>',
            unsafe_allow_html=True,
        )
    for message in state.messages:
        _render_message(message)
    if state.is_loading:
        st.markdown(
            '<div class="chat-assistant chat-typing">Weather agent is typing...</div>',
            unsafe_allow_html=True,
        )

    if state.last_error:
        col1, col2 = st.columns([5, 1])
        col1.warning(state.last_error)
        if col2.button("✕", key="dismiss_error_btn"):
            store.clear_error()
            st.rerun()

    st.text_input(
        "Ask a question",
        key="chat_input",
        placeholder="Will it rain today?",
        disabled=state.is_loading,
    )
    col1, col2 = st.columns(2)
    col1.button(
        "Send →",
        key="send_btn",
        type="primary",
        use_container_width=True,
        on_click=_on_send,
        disabled=state.is_loading,
    )
    if col2.button("Clear chat", key="clear_btn", use_container_width=True):
        store.clear()
        st.rerun()


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main():
    """Main Streamlit application entry point."""
    st.set_page_config(
        page_title="Weather Agent",
        page_icon="\U0001f326️",
        layout="centered",
    )
    configure_logging()
    _inject_css(_GRADIENTS["default"])
    _init_session()

    weather_tab, chat_tab = st.tabs(["\U0001f321️ Weather", "\U0001f4ac Chat with AI"])
    with weather_tab:
        _render_weather_tab()
    with chat_tab:
        _render_chat_tab()


if __name__ == "__main__":
    main()
