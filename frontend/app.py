import sys
from pathlib import Path

APP_DIR = Path(__file__).resolve().parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

import streamlit as st
from pydantic import ValidationError

from utils.session import login
from utils.theme import (
    apply_theme,
    get_colors,
    get_history,
    init_session,
    kpi_tile,
    page_footer,
    render_sidebar_profile,
)

st.set_page_config(
    page_title="PsychLab Pro",
    page_icon="🧠",
    layout="wide",
    initial_sidebar_state="expanded",
)
apply_theme()
init_session()
COLORS = get_colors()


def _start_session(email: str) -> None:
    try:
        session = login(st.session_state.session_store, email)
    except ValidationError:
        st.error("Please enter a valid email address.")
        return
    st.session_state.user = session.to_storage()
    st.rerun()


# ── Logged-in view ────────────────────────────────────────────────────────
if st.session_state.user:
    render_sidebar_profile()

    email = st.session_state.user.get("email", "")
    st.markdown(
        f"""
        <div style="margin-bottom:8px;">
            <span style="font-size:1.8rem;font-weight:800;color:{COLORS['text']};">
                Welcome back, {email.split("@")[0]}
            </span>
        </div>
        <p style="color:{COLORS['text_muted']};margin-top:0;">
            Generate clinical assessment reports from patient details and test scores.
        </p>
        """,
        unsafe_allow_html=True,
    )

    history = get_history()
    latest = history.latest
    cols = st.columns(3)
    tiles = [
        ("Reports This Session", len(history), COLORS["primary"]),
        ("Tools Used", len({r["tool"] for r in history.items}), COLORS["success"]),
        ("Latest Patient", latest["patient"]["name"] if latest else "—", COLORS["text"]),
    ]
    for col, (label, value, color) in zip(cols, tiles):
        col.markdown(kpi_tile(label, value, color), unsafe_allow_html=True)

    st.markdown("<div style='height:24px'></div>", unsafe_allow_html=True)

    nav_items = [
        ("🩺", "New Assessment", "Fill in patient details and generate a lab report.", "pages/1_dashboard.py"),
        ("🗂️", "Report History", "Browse, reopen and export this session's reports.", "pages/2_history.py"),
    ]
    nav_cols = st.columns(len(nav_items))
    for col, (icon, title, desc, page) in zip(nav_cols, nav_items):
        col.markdown(
            f"""
            <div class="nav-card">
                <div class="nav-icon">{icon}</div>
                <div class="nav-title">{title}</div>
                <div class="nav-desc">{desc}</div>
            </div>
            """,
            unsafe_allow_html=True,
        )
        col.page_link(page, label=f"Open {title}", use_container_width=True)

# ── Auth view ─────────────────────────────────────────────────────────────
else:
    _spacer_l, center, _spacer_r = st.columns([1, 2, 1])
    with center:
        st.markdown(
            f"""
            <div style="text-align:center;margin-top:40px;margin-bottom:8px;">
                <span style="font-size:3rem;">🧠</span>
            </div>
            <h1 style="text-align:center;color:{COLORS['text']};margin-bottom:4px;">
                PsychLab
            </h1>
            <p style="text-align:center;color:{COLORS['text_muted']};margin-bottom:32px;">
                Professional psychological assessment reports.
            </p>
            """,
            unsafe_allow_html=True,
        )

        tab_login, tab_signup = st.tabs(["Login", "Sign up"])

        with tab_login:
            with st.form("login_form"):
                email = st.text_input("Email Address", placeholder="doctor@clinic.com")
                pwd = st.text_input("Password", type="password", placeholder="••••••••")
                submitted = st.form_submit_button("Sign in", use_container_width=True, type="primary")
            if submitted:
                if not email or not pwd:
                    st.error("Please enter both email and password.")
                else:
                    _start_session(email)

        with tab_signup:
            with st.form("signup_form"):
                st.text_input("Full Name", placeholder="Dr. John Doe", key="signup_name")
                email_s = st.text_input("Email Address", placeholder="doctor@clinic.com", key="signup_email")
                pwd_s = st.text_input("Password", type="password", placeholder="••••••••", key="signup_pw")
                submitted_s = st.form_submit_button("Create Account", use_container_width=True, type="primary")
            if submitted_s:
                if not email_s or not pwd_s:
                    st.error("Email and password are required.")
                else:
                    _start_session(email_s)

page_footer()
