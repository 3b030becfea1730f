"""
Streamlit-based web UI for Deep Analyst.

Run with:
    streamlit run ui_app.py
"""

import logging
from datetime import datetime
from typing import Optional

import requests
import streamlit as st

from deep_analyst.config import configure_logging, settings
from deep_analyst.export import export_report
from deep_analyst.markdown import format_markdown
from deep_analyst.models import AppState, ResearchReport

API_BASE = settings.api_base_url

LOGGER = logging.getLogger(__name__)

SUGGESTIONS = [
    ("Technology", "New features of the latest Gemini Flash models compared with other models"),
    ("Market", "The state of Japan's space startup market and its outlook to 2030"),
    ("Science", "Recent technical breakthroughs toward commercial fusion power"),
    ("Global", "Global water scarcity risk and leading countermeasure technologies"),
]


def get_state() -> AppState:
    resp = requests.get(f"{API_BASE}/state", timeout=30)
    resp.raise_for_status()
    return AppState.model_validate(resp.json())


def run_research(query: str) -> Optional[str]:
    """Run a query; return a notice for the user when it was not started."""
    # No timeout: report generation can take several minutes.
    resp = requests.post(f"{API_BASE}/research", json={"query": query}, timeout=None)
    if resp.status_code == 409:
        # Another tab or client has a query in flight.
        return resp.json().get("detail") or "A research query is already running."
    if resp.status_code >= 400:
        # The backend keeps the error in its state; it is shown as a banner.
        LOGGER.warning("Research failed (%s): %s", resp.status_code, resp.text)
    return None


def select_report(report_id: str) -> None:
    requests.post(f"{API_BASE}/reports/{report_id}/select", timeout=30).raise_for_status()


def delete_report(report_id: str) -> None:
    requests.delete(
        f"{API_BASE}/reports/{report_id}", params={"confirm": "true"}, timeout=30
    ).raise_for_status()


def save_report(report_id: str, content: str) -> None:
    requests.put(
        f"{API_BASE}/reports/{report_id}", json={"content": content}, timeout=30
    ).raise_for_status()


def dismiss_error() -> None:
    requests.delete(f"{API_BASE}/error", timeout=30).raise_for_status()


def _init_session_state() -> None:
    if "editing_id" not in st.session_state:
        st.session_state.editing_id = None
    if "pending_delete" not in st.session_state:
        st.session_state.pending_delete = None
    if "notice" not in st.session_state:
        st.session_state.notice = None


def _render_header() -> None:
    st.title("🔬 Deep Analyst")
    st.caption(f"⚡ {settings.gemini_model}  ·  🔎 Search Grounding")


def _render_sidebar(state: AppState) -> None:
    with st.sidebar:
        st.header("Research history")
        if not state.reports:
            st.caption("No history yet.")
            return

        current_id = state.current_report.id if state.current_report else None
        for report in state.reports:
            col1, col2 = st.columns([5, 1])
            with col1:
                label = ("▶ " if report.id == current_id else "") + report.query
                if st.button(label, key=f"select_{report.id}", width="stretch"):
                    select_report(report.id)
                    st.rerun()
            with col2:
                if st.button("🗑", key=f"delete_{report.id}", help="Delete"):
                    st.session_state.pending_delete = report.id
                    st.rerun()

            if st.session_state.pending_delete == report.id:
                st.warning("Delete this report?")
                yes, no = st.columns(2)
                if yes.button("Delete", key=f"confirm_{report.id}", type="primary"):
                    delete_report(report.id)
                    st.session_state.pending_delete = None
                    st.rerun()
                if no.button("Cancel", key=f"cancel_{report.id}"):
                    st.session_state.pending_delete = None
                    st.rerun()


def _render_search(state: AppState) -> Optional[str]:
    with st.form("search_form", clear_on_submit=True):
        query = st.text_input(
            "Research topic",
            placeholder="Enter a topic that needs deep research or analysis...",
            disabled=state.loading,
        )
        submitted = st.form_submit_button(
            "Analysing..." if state.loading else "Start research", disabled=state.loading
        )
    if submitted and query.strip():
        return query.strip()
    return None


def _render_empty_state() -> Optional[str]:
    st.subheader("What should we analyse?")
    st.write("Enter a topic that needs up-to-date information or careful analysis.")
    chosen = None
    cols = st.columns(2)
    for idx, (label, query) in enumerate(SUGGESTIONS):
        with cols[idx % 2]:
            st.caption(label.upper())
            if st.button(query, key=f"suggest_{idx}", width="stretch"):
                chosen = query
    return chosen


def _render_report(report: ResearchReport) -> None:
    editing = st.session_state.editing_id == report.id

    st.caption("RESEARCH RESULT" + ("  ·  EDITING" if editing else ""))
    st.header(report.query)
    created = datetime.fromtimestamp(report.timestamp / 1000).strftime("%Y-%m-%d %H:%M:%S")
    st.caption(f"🕒 Created: {created}")

    if editing:
        buffer = st.text_area(
            "Markdown editor", value=report.content, height=600, key=f"edit_{report.id}"
        )
        save_col, cancel_col, _ = st.columns([1, 1, 4])
        if save_col.button("Save changes", type="primary"):
            save_report(report.id, buffer)
            st.session_state.editing_id = None
            st.rerun()
        if cancel_col.button("Cancel"):
            st.session_state.editing_id = None
            st.rerun()
        return

    md_col, txt_col, edit_col, _ = st.columns([1, 1, 1, 3])
    for col, fmt in ((md_col, "md"), (txt_col, "txt")):
        exported = export_report(report, fmt)
        col.download_button(
            f".{fmt.upper()}",
            data=exported.data,
            file_name=exported.filename,
            mime=exported.media_type,
            key=f"download_{fmt}_{report.id}",
        )
    if edit_col.button("Edit", key=f"start_edit_{report.id}"):
        st.session_state.editing_id = report.id
        st.rerun()

    st.markdown(format_markdown(report.content), unsafe_allow_html=True)

    with st.expander("Copy raw Markdown"):
        st.code(report.content, language="markdown")

    if report.sources:
        st.subheader("🔗 Grounding Sources")
        for source in report.sources:
            st.markdown(f"- [{source.title}]({source.uri})  \n  `{source.uri}`")


def main() -> None:
    configure_logging()
    st.set_page_config(page_title="Deep Analyst", layout="wide")
    _init_session_state()
    _render_header()

    try:
        state = get_state()
    except requests.RequestException as exc:
        st.error(f"Cannot reach the Deep Analyst backend at {API_BASE}: {exc}")
        return

    _render_sidebar(state)
    query = _render_search(state)

    if st.session_state.notice:
        st.warning(st.session_state.notice)
        st.session_state.notice = None

    if state.error:
        banner, close = st.columns([10, 1])
        banner.error(f"⚠️ {state.error}")
        if close.button("✕", key="dismiss_error"):
            dismiss_error()
            st.rerun()

    if not state.current_report and not state.reports and not query:
        query = _render_empty_state()

    if query:
        st.session_state.editing_id = None
        with st.spinner("Searching, analysing and writing the report..."):
            st.session_state.notice = run_research(query)
        st.rerun()

    if state.current_report:
        _render_report(state.current_report)
    elif state.reports:
        st.info("⬅ Select a report from the history to view it.")


if __name__ == "__main__":
    main()
