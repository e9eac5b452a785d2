"""Beauty Assistant - Streamlit Chat Interface.

Thin client for the chat relay. All model access goes through the relay,
which holds the API credential. This file handles:
  - One ChatSession per browser session (st.session_state)
  - The visible chat, including the greeting and name acknowledgements
  - Disabling input while a request is in flight
"""

import time

import requests
import streamlit as st

from frontend.conversation import GREETING, ChatSession, ClientSettings, submit

SETTINGS = ClientSettings()
HEALTH_ENDPOINT = SETTINGS.relay_url.rstrip("/") + "/health"

# Page setup
st.set_page_config(
    page_title="Beauty Assistant",
    layout="centered",
)

# Custom styles
st.markdown("""
<style>
    .stApp {
        max-width: 900px;
        margin: 0 auto;
    }
    .stChatMessage {
        padding: 0.75rem 1rem;
    }
    .status-badge {
        display: inline-block;
        padding: 2px 8px;
        border-radius: 12px;
        font-size: 0.75rem;
        font-weight: 600;
    }
    .status-ok { background: #d4edda; color: #155724; }
    .status-err { background: #f8d7da; color: #721c24; }
</style>
""", unsafe_allow_html=True)


def init_session():
    """Initialize session state on first load."""
    if "chat" not in st.session_state:
        st.session_state.chat = ChatSession()
    if "messages" not in st.session_state:
        st.session_state.messages = [{"role": "assistant", "content": GREETING}]
    if "pending" not in st.session_state:
        st.session_state.pending = None


def render_message(msg: dict):
    """Render a single chat message."""
    with st.chat_message(msg["role"]):
        st.markdown(msg["content"])


def queue_message(user_input: str):
    """Record the user turn and hold it until the next run, with input disabled."""
    st.session_state.messages.append({"role": "user", "content": user_input})
    st.session_state.pending = user_input


def process_pending():
    """Run the held submission and store every reply."""
    user_input = st.session_state.pending

    start_time = time.monotonic()
    with st.chat_message("assistant"):
        with st.spinner("Thinking..."):
            replies = submit(st.session_state.chat, user_input, SETTINGS)
    latency_ms = int((time.monotonic() - start_time) * 1000)

    for reply in replies:
        st.session_state.messages.append({"role": "assistant", "content": reply})
    st.session_state.last_latency_ms = latency_ms
    st.session_state.pending = None


def relay_status() -> str:
    """Ask the relay whether its credential is configured."""
    try:
        resp = requests.get(f"{HEALTH_ENDPOINT}?t={time.time()}", timeout=3)
        return resp.json().get("status", "unknown")
    except (requests.RequestException, ValueError):
        return "offline"


def main():
    """Run the Streamlit chat application."""
    init_session()
    api_status = relay_status()

    st.title("Beauty Assistant")
    st.caption("Ask about L'Oréal products, routines and recommendations")

    with st.sidebar:
        st.markdown("### Relay")
        st.code(SETTINGS.relay_url, language=None)
        if api_status == "healthy":
            st.markdown('<span class="status-badge status-ok">* Relay Healthy</span>',
                        unsafe_allow_html=True)
        elif api_status == "degraded":
            st.markdown('<span class="status-badge status-err">* Relay Missing Credential</span>',
                        unsafe_allow_html=True)
        else:
            st.markdown('<span class="status-badge status-err">* Relay Offline</span>',
                        unsafe_allow_html=True)

        if st.button("Check Connection", use_container_width=True):
            st.rerun()

        st.divider()
        if st.button("[DEL] New Session", use_container_width=True):
            st.session_state.chat = ChatSession()
            st.session_state.messages = [{"role": "assistant", "content": GREETING}]
            st.session_state.pending = None
            st.rerun()

    for msg in st.session_state.messages:
        render_message(msg)

    if st.session_state.get("last_latency_ms") is not None:
        st.caption(f"[TIME] {st.session_state.last_latency_ms}ms")

    # A submission spans two runs: queue and rerun with input disabled, then send.
    busy = st.session_state.pending is not None or st.session_state.chat.state == "sending"
    user_input = st.chat_input("Ask me about L'Oréal products...", disabled=busy, key="prompt")
    if st.session_state.pending is not None:
        process_pending()
        st.rerun()
    elif user_input:
        queue_message(user_input)
        st.rerun()


if __name__ == "__main__":
    main()
