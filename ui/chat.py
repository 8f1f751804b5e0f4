import sys
from pathlib import Path

import requests
import streamlit as st

# Ensure project root is on sys.path so `src` package imports work when run via streamlit
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.client.session import AskSession
from src.utils.formatting import format_record_count


st.set_page_config(page_title="Ask Docs Demo", page_icon="📚", layout="centered")
st.title("Ask Docs Demo")

if "ask_session" not in st.session_state:
    st.session_state.ask_session = AskSession()
session: AskSession = st.session_state.ask_session


@st.cache_data(ttl=3600)
def load_databases():
    return [db.model_dump() for db in session.list_databases()]


try:
    databases = load_databases()
except requests.RequestException as e:
    st.error(f"Could not load databases: {e}")
    st.stop()

if not databases:
    st.warning("No databases are configured.")
    st.stop()

if "selected" not in st.session_state:
    st.session_state.selected = databases[0]["id"]

# Database cards
columns = st.columns(min(len(databases), 3))
for i, db in enumerate(databases):
    with columns[i % len(columns)]:
        is_selected = st.session_state.selected == db["id"]
        label = f"{db['name']}\n\n{format_record_count(db['record_count'])}"
        if st.button(
            label,
            key=f"database-{db['id']}",
            type="primary" if is_selected else "secondary",
            use_container_width=True,
        ):
            st.session_state.selected = db["id"]
            st.rerun()

with st.form("ask", clear_on_submit=False):
    question = st.text_input(
        "Question",
        placeholder="Write a question to ask the chatbot",
        label_visibility="collapsed",
    )
    submitted = st.form_submit_button("Ask")

answer_box = st.empty()


def render(state) -> None:
    if state.answer:
        answer_box.markdown(state.answer)
    elif state.is_loading:
        answer_box.caption("Thinking...")
    else:
        answer_box.empty()


if submitted:
    unsubscribe = session.subscribe(render)
    try:
        session.ask(st.session_state.selected, question)
    finally:
        unsubscribe()

state = session.state
render(state)
if state.error:
    st.error(state.error)

related = session.related_docs
if related:
    st.markdown("I have used the following doc pages as context:")
    st.markdown("\n".join(f"- [{doc.title}]({doc.url})" for doc in related))
