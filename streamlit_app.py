"""Streamlit Web UI for cv-match.

Views follow the session controller's state:
  INPUT / ANALYZING: paste CV + JD, run the analysis
  RESULTS:          score, strengths, requirements matrix, Markdown download
  HISTORY:          saved analyses for the logged-in user
  AUTH:             mock login / signup
"""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime

logger = logging.getLogger(__name__)

import nest_asyncio
import streamlit as st
from dotenv import load_dotenv

load_dotenv()
nest_asyncio.apply()

# Streamlit Cloud: sync st.secrets → os.environ so the Anthropic client can read it
if "ANTHROPIC_API_KEY" not in os.environ:
    try:
        os.environ["ANTHROPIC_API_KEY"] = st.secrets["ANTHROPIC_API_KEY"]
    except (KeyError, FileNotFoundError):
        logger.debug("ANTHROPIC_API_KEY not found in st.secrets")

from cv_match.config import load_config
from cv_match.export.markdown_report import REPORT_FILENAME
from cv_match.session.controller import (
    MISSING_FIELDS_MESSAGE,
    AppState,
    SessionController,
    build_controller,
)

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="CV Match Analyzer",
    page_icon=":mag:",
    layout="wide",
)

if "controller" not in st.session_state:
    st.session_state.controller = build_controller(load_config())

controller: SessionController = st.session_state.controller
ctx = controller.context

if ctx.theme == "dark":
    st.markdown(
        "<style>.stApp { background-color: #111827; color: #f3f4f6; }</style>",
        unsafe_allow_html=True,
    )

# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------

header = st.columns([4, 1, 1, 1, 1])
header[0].title("CV Match Analyzer")
if header[1].button("Home"):
    controller.navigate(AppState.INPUT)
    st.rerun()
if header[2].button("Dark" if ctx.theme == "light" else "Light"):
    controller.toggle_theme()
    st.rerun()
if ctx.user is not None:
    if header[3].button("History"):
        controller.navigate(AppState.HISTORY)
        st.rerun()
    if header[4].button("Logout"):
        controller.logout()
        st.rerun()
    st.caption(f"Signed in as {ctx.user.name} ({ctx.user.email})")
elif header[4].button("Login"):
    controller.navigate(AppState.AUTH)
    st.rerun()


def _score_color(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 60:
        return "orange"
    return "red"


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


def render_auth() -> None:
    mode = st.radio("Account", ["Log in", "Sign up"], horizontal=True)
    is_login = mode == "Log in"
    st.subheader("Welcome Back" if is_login else "Create Account")
    st.caption(
        "Sign in to access your saved CV analyses"
        if is_login
        else "Join to save your reports and track progress"
    )
    with st.form("auth"):
        name = "" if is_login else st.text_input("Full name", placeholder="John Doe")
        email = st.text_input("Email", placeholder="you@example.com")
        password = st.text_input("Password", type="password")  # mock, never checked
        submitted = st.form_submit_button("Sign In" if is_login else "Create Account")

    if ctx.auth_error:
        st.error(ctx.auth_error)
    if not submitted:
        return
    if not password:
        ctx.auth_error = MISSING_FIELDS_MESSAGE
        st.rerun()
    if is_login:
        controller.login(email)
    else:
        controller.signup(email, name)
    st.rerun()


def render_input() -> None:
    col_cv, col_jd = st.columns(2)
    cv_text = col_cv.text_area("Your CV / Résumé", value=ctx.cv_text, height=400)
    jd_text = col_jd.text_area("Job Description", value=ctx.jd_text, height=400)
    controller.set_inputs(cv_text, jd_text)

    if ctx.error:
        st.error(ctx.error)

    if st.button("Analyze Match", type="primary", disabled=not controller.can_submit):
        with st.spinner("Analyzing your CV against the job description..."):
            asyncio.run(controller.submit())
        st.rerun()


def render_results() -> None:
    result = ctx.result
    if ctx.error:
        st.warning(ctx.error)
    col_score, col_strengths = st.columns([1, 2])
    with col_score:
        st.subheader("Overall Match Score")
        color = _score_color(result.overall_score)
        st.markdown(f"## :{color}[{result.overall_score}]")
        st.write(result.summary)
    with col_strengths:
        st.subheader("Key Strengths")
        for strength in result.strengths:
            st.markdown(f"- :white_check_mark: {strength}")

    st.subheader("Requirements Match Matrix")
    st.dataframe(
        [
            {
                "Requirement": r.requirement,
                "Evidence": r.evidence,
                "Rating": f"{r.rating}/5",
                "Gap Notes": r.gap_notes,
                "Action to Improve": r.action_to_improve,
            }
            for r in result.requirements
        ],
        use_container_width=True,
        hide_index=True,
    )

    col_kw, col_steps = st.columns(2)
    with col_kw:
        st.subheader("Missing Keywords")
        st.write(", ".join(result.missing_keywords) or "None")
    with col_steps:
        st.subheader("Prioritized Next Steps")
        for i, step in enumerate(result.next_steps, 1):
            st.markdown(f"{i}. {step}")

    col_dl, col_reset = st.columns(2)
    col_dl.download_button(
        "Download Report (.md)",
        data=controller.export_markdown(),
        file_name=REPORT_FILENAME,
        mime="text/markdown",
    )
    if col_reset.button("Analyze Another"):
        controller.reset()
        st.rerun()


def render_history() -> None:
    st.subheader("Your Analysis History")
    items = controller.history_items()
    if not items:
        st.info("No saved analyses yet.")
        if st.button("Start New Analysis"):
            controller.navigate(AppState.INPUT)
            st.rerun()
        return

    for item in items:
        date = datetime.fromtimestamp(item.timestamp / 1000).strftime("%b %d, %Y")
        score = item.result.overall_score
        with st.container(border=True):
            cols = st.columns([1, 4, 1, 1])
            cols[0].markdown(f"### :{_score_color(score)}[{score}]")
            cols[1].caption(date)
            cols[1].write(" ".join(item.jd_text.split())[:160])
            if cols[2].button("View", key=f"view-{item.id}"):
                controller.select_history(item.id)
                st.rerun()
            confirm = cols[3].checkbox("Confirm", key=f"confirm-{item.id}")
            if cols[3].button("Delete", key=f"delete-{item.id}", disabled=not confirm):
                controller.delete_history(item.id, confirm=lambda: confirm)
                st.rerun()


VIEWS = {
    AppState.AUTH: render_auth,
    AppState.HISTORY: render_history,
    AppState.RESULTS: render_results,
}

if ctx.state is AppState.RESULTS and ctx.result is None:
    controller.reset()
VIEWS.get(ctx.state, render_input)()

st.caption("CV Match Analyzer. Powered by Claude.")
