from __future__ import annotations

import os
from typing import Callable

import streamlit as st

from lingoticket.ui.api import APIError, TicketAPIClient
from lingoticket.ui.utils import HISTORY_FILTERS, LANGUAGES, format_flow, history_rows, sort_history

DEFAULT_BASE_URL = os.getenv("LINGOTICKET_API_BASE_URL", "http://localhost:8000")


def _get_base_url() -> str:
    base_url = st.session_state.get("base_url")
    if not base_url:
        base_url = DEFAULT_BASE_URL
        st.session_state["base_url"] = base_url
    return str(base_url)


def _build_client() -> TicketAPIClient:
    return TicketAPIClient(base_url=_get_base_url())


def _handle_api_call(
    callback: Callable[[], object], success_message: str | None = None
) -> tuple[bool, object | None]:
    try:
        result = callback()
    except APIError as exc:
        st.error(str(exc))
        return False, None
    else:
        if success_message:
            st.success(success_message)
        return True, result


def _refresh_history(client: TicketAPIClient) -> None:
    selected_filter = st.session_state.get("history_filter", "ALL")
    status = None if selected_filter == "ALL" else selected_filter
    success, records = _handle_api_call(lambda: client.list_tickets(status))
    if success and isinstance(records, list):
        st.session_state["history"] = sort_history(records)


def _render_sidebar() -> None:
    st.sidebar.header("Connection")
    _get_base_url()
    # the widget owns the "base_url" key once rendered
    st.sidebar.text_input("API Base URL", key="base_url")


def _render_translate(client: TicketAPIClient) -> None:
    st.subheader("Translate")
    with st.form("translate_form"):
        col_source, col_target = st.columns(2)
        source_lang = col_source.selectbox("From", options=LANGUAGES, index=0)
        target_lang = col_target.selectbox("To", options=LANGUAGES, index=LANGUAGES.index("pt"))
        text = st.text_area("Text", height=160)
        submitted = st.form_submit_button("Translate")

    if not submitted:
        return
    if not text.strip():
        st.warning("Type something first.")
        return

    success, created = _handle_api_call(
        lambda: client.create_ticket(original_text=text, source_lang=source_lang, target_lang=target_lang)
    )
    if not success or not isinstance(created, dict):
        return
    success, translated = _handle_api_call(lambda: client.translate_ticket(created["id"]), "Translated")
    _refresh_history(client)
    if success and isinstance(translated, dict):
        st.session_state["selected_id"] = translated["id"]
        st.markdown("#### Result")
        st.write(translated.get("translatedText"))


def _render_history(client: TicketAPIClient) -> None:
    st.subheader("History")
    col_filter, col_refresh = st.columns([3, 1])
    col_filter.selectbox("Status", options=HISTORY_FILTERS, key="history_filter")
    if col_refresh.button("Refresh") or "history" not in st.session_state:
        _refresh_history(client)

    records = st.session_state.get("history") or []
    if not records:
        st.caption("No tickets yet")
        return
    st.table(history_rows(records))

    ids = [record["id"] for record in records]
    current = st.session_state.get("selected_id")
    index = ids.index(current) if current in ids else 0
    selected_id = st.selectbox(
        "Selected ticket",
        options=ids,
        index=index,
        format_func=lambda value: next(
            f"{format_flow(record)} · {record.get('status')} · {value[:8]}" for record in records if record["id"] == value
        ),
    )
    st.session_state["selected_id"] = selected_id

    if st.button("Deliver selected"):
        success, receipt = _handle_api_call(lambda: client.deliver_ticket(selected_id), "Delivered")
        if success and isinstance(receipt, dict):
            st.json(receipt)


def main() -> None:
    st.set_page_config(page_title="Translate text", layout="wide")
    _render_sidebar()
    client = _build_client()

    st.title("Translate text")
    st.caption("Translate, browse history, and deliver results to a partner.")
    col_translate, col_history = st.columns(2)
    with col_translate:
        _render_translate(client)
    with col_history:
        _render_history(client)


if __name__ == "__main__":
    main()
