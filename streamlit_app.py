# streamlit_app.py — Reading table UI for tarot-gate
# Run:  streamlit run streamlit_app.py

from __future__ import annotations

import os
import secrets
import sys
from typing import Any, Dict, List

import streamlit as st

# Ensure repo root is importable (so `tarot_gate` can be imported in all environments)
REPO_ROOT = os.path.dirname(os.path.abspath(__file__))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from tarot_gate import tarot_core  # noqa: E402
from tarot_gate.access import attempt_unlock  # noqa: E402
from tarot_gate.admin import AdminGate  # noqa: E402
from tarot_gate.config import Settings, configure_logging  # noqa: E402
from tarot_gate.db import Database  # noqa: E402
from tarot_gate.errors import AuthError, TarotGateError, ValidationError  # noqa: E402
from tarot_gate.llm import GeminiClient  # noqa: E402
from tarot_gate.reading import FALLBACK_READING_MY, ReadingService  # noqa: E402
from tarot_gate.tokens import TokenService  # noqa: E402

# -----------------------------
# Page setup
# -----------------------------
st.set_page_config(
    page_title="Tarot Gate",
    page_icon="🔮",
    layout="wide",
)


@st.cache_resource
def get_services() -> Dict[str, Any]:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    database = Database(settings.database_url)
    database.create_all()
    client = GeminiClient(
        api_key=settings.google_api_key,
        model=settings.gemini_model,
        timeout=settings.gemini_timeout,
    )
    return {
        "settings": settings,
        "tokens": TokenService(database, settings),
        "admin_gate": AdminGate(settings),
        "readings": ReadingService(client),
    }


services = get_services()
settings: Settings = services["settings"]
tokens: TokenService = services["tokens"]
admin_gate: AdminGate = services["admin_gate"]
readings: ReadingService = services["readings"]

# The admin gate gets its own mapping so logout never wipes the reading state
admin_session: Dict[str, Any] = st.session_state.setdefault("admin_session", {})

st.title("🔮 Tarot Gate")

# -----------------------------
# Sidebar: admin console
# -----------------------------
st.sidebar.header("Admin")

if not admin_gate.is_admin(admin_session):
    keyword = st.sidebar.text_input("Keyword", type="password")
    if st.sidebar.button("Log in", use_container_width=True):
        try:
            admin_gate.login(admin_session, keyword)
            st.rerun()
        except AuthError as e:
            st.sidebar.error(str(e))
else:
    # Clamped here only; the service itself rejects out-of-range counts
    count = st.sidebar.number_input(
        "Tokens to generate", min_value=1, max_value=settings.max_token_batch, value=1, step=1
    )
    if st.sidebar.button("Generate", use_container_width=True):
        try:
            minted = tokens.create_tokens(admin_gate.require(admin_session), int(count))
            st.session_state["minted_tokens"] = minted
        except TarotGateError as e:
            st.sidebar.error(str(e))

    for t in st.session_state.get("minted_tokens", []):
        st.sidebar.code(t)

    with st.sidebar.expander("Unused tokens"):
        try:
            rows = tokens.list_unused_tokens(admin_gate.require(admin_session))
            st.dataframe(
                [{"token": r.token, "createdAt": r.created_at} for r in rows],
                use_container_width=True,
            )
        except TarotGateError as e:
            st.error(str(e))

    if st.sidebar.button("Log out", use_container_width=True):
        admin_gate.logout(admin_session)
        st.session_state.pop("minted_tokens", None)
        st.rerun()

# -----------------------------
# Gate
# -----------------------------
if not st.session_state.get("unlocked"):
    st.caption("Enter your access token to open the reading table.")
    with st.form("unlock"):
        token = st.text_input("Access token", type="password")
        submitted = st.form_submit_button("Enter")
    if submitted:
        try:
            attempt_unlock(tokens, token)
            st.session_state["unlocked"] = True
            st.rerun()
        except (ValidationError, AuthError) as e:
            st.error(str(e))
        except TarotGateError:
            st.error("Could not check the token right now. Please try again.")
    st.stop()

# -----------------------------
# Card table
# -----------------------------
if "table_seed" not in st.session_state:
    st.session_state["table_seed"] = secrets.token_hex(8)

deck: List[str] = tarot_core.shuffle_deck(tarot_core.card_names(), seed=st.session_state["table_seed"])

picked: List[str] = st.multiselect(
    "Choose three cards (past, present, future)",
    options=deck,
    max_selections=3,
    key="picked_cards",
)

if picked:
    cols = st.columns(3)
    for col, position, name in zip(cols, tarot_core.THREE_CARD_POSITIONS, picked):
        card = tarot_core.CARD_BY_NAME.get(name)
        col.metric(position.capitalize(), name)
        if card:
            col.caption(f"suit: `{card.suit}` · rank: `{card.rank}`")

col_btn1, col_btn2 = st.columns([1, 1])
with col_btn1:
    reveal = st.button("✨ Reveal reading", use_container_width=True, disabled=len(picked) != 3)
with col_btn2:
    again = st.button("🔀 New reading", use_container_width=True)

if again:
    for key in ("picked_cards", "reading", "table_seed"):
        st.session_state.pop(key, None)
    st.rerun()

if reveal:
    with st.spinner("Reading the cards..."):
        try:
            st.session_state["reading"] = readings.generate_reading(picked, fallback=FALLBACK_READING_MY)
        except TarotGateError:
            st.session_state["reading"] = FALLBACK_READING_MY

reading = st.session_state.get("reading")
if reading is not None:
    st.markdown("---")
    st.subheader("Reading")
    if reading.strip():
        st.markdown(reading)
    else:
        st.info(FALLBACK_READING_MY)
