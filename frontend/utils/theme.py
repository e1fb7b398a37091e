"""
Shared theme, CSS injection, color palette, session wiring and UI helper
functions for the PsychLab Streamlit frontend.
"""

from __future__ import annotations

import os
from datetime import date

import streamlit as st

from .history import ReportHistory
from .session import JsonFileSessionStore, SessionStore, logout

SESSION_FILE = os.getenv("PSYCHLAB_SESSION_FILE", ".psychlab_session.json")

# ---------------------------------------------------------------------------
# Color palettes (light + dark)
# ---------------------------------------------------------------------------
COLORS_LIGHT: dict[str, str] = {
    "primary": "#2563EB",       # blue-600
    "primary_light": "#DBEAFE", # blue-100
    "primary_dark": "#1E3A8A",  # blue-900
    "danger": "#DC2626",        # red-600
    "success": "#15803D",       # green-700
    "success_light": "#DCFCE7", # green-100
    "text": "#1F2937",          # gray-800
    "text_muted": "#6B7280",    # gray-500
    "bg_card": "#FFFFFF",
    "bg_page": "#F9FAFB",       # gray-50
    "bg_soft": "#F3F4F6",       # gray-100
    "border": "#E5E7EB",        # gray-200
}

COLORS_DARK: dict[str, str] = {
    "primary": "#60A5FA",       # blue-400
    "primary_light": "#172554", # blue-950
    "primary_dark": "#BFDBFE",  # blue-200
    "danger": "#F87171",        # red-400
    "success": "#4ADE80",       # green-400
    "success_light": "#052E16", # green-950
    "text": "#F3F4F6",          # gray-100
    "text_muted": "#9CA3AF",    # gray-400
    "bg_card": "#1F2937",       # gray-800
    "bg_page": "#111827",       # gray-900
    "bg_soft": "#374151",       # gray-700
    "border": "#374151",        # gray-700
}


def get_colors() -> dict[str, str]:
    """Return the active palette based on ``st.session_state.dark_mode``."""
    if st.session_state.get("dark_mode", False):
        return COLORS_DARK
    return COLORS_LIGHT


PLOTLY_COLORS = [
    "#2563EB", "#F97316", "#10B981", "#8B5CF6", "#EC4899",
    "#14B8A6", "#F59E0B", "#EF4444", "#6366F1", "#84CC16",
]


def plotly_layout_defaults(title: str = "", height: int = 400) -> dict:
    """Return a dict of common Plotly layout kwargs for consistent styling."""
    c = get_colors()
    dark = st.session_state.get("dark_mode", False)
    return dict(
        title=dict(text=title, font=dict(size=16, color=c["text"])),
        template="plotly_dark" if dark else "plotly_white",
        height=height,
        margin=dict(l=40, r=20, t=50, b=40),
        font=dict(family="Inter, system-ui, sans-serif", size=13, color=c["text"]),
        plot_bgcolor=c["bg_card"] if dark else "rgba(0,0,0,0)",
        paper_bgcolor="rgba(0,0,0,0)",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )


# ---------------------------------------------------------------------------
# CSS injection (built dynamically for active palette)
# ---------------------------------------------------------------------------
_CSS_TEMPLATE = """
<style>
[data-testid="stAppViewContainer"] {
    background-color: %(bg_page)s;
}
[data-testid="stMain"] p,
[data-testid="stMain"] li {
    color: %(text)s;
}

/* ---------- Card container ---------- */
.card {
    background: %(bg_card)s;
    border: 1px solid %(border)s;
    border-radius: 12px;
    padding: 24px;
    margin-bottom: 16px;
    box-shadow: 0 1px 3px rgba(0,0,0,0.06);
}

/* ---------- KPI tile ---------- */
.kpi-tile {
    background: %(bg_card)s;
    border: 1px solid %(border)s;
    border-radius: 12px;
    padding: 20px;
    text-align: center;
}
.kpi-value { font-size: 2rem; font-weight: 800; line-height: 1.1; }
.kpi-label {
    font-size: 0.82rem;
    color: %(text_muted)s;
    text-transform: uppercase;
    letter-spacing: 0.04em;
    margin-top: 6px;
}

/* ---------- Nav card ---------- */
.nav-card {
    background: %(bg_card)s;
    border: 1px solid %(border)s;
    border-radius: 12px;
    padding: 24px;
    text-align: center;
}
.nav-icon { font-size: 2rem; margin-bottom: 8px; }
.nav-title { font-weight: 700; font-size: 1rem; color: %(text)s; }
.nav-desc { color: %(text_muted)s; font-size: 0.82rem; margin-top: 4px; }

/* ---------- Report document ---------- */
.report-doc {
    background: %(bg_card)s;
    border: 1px solid %(border)s;
    border-radius: 16px;
    padding: 48px 56px;
    color: %(text)s;
}
.letterhead { text-align: center; padding-bottom: 24px; border-bottom: 2px solid %(primary_light)s; }
.letterhead h1 { font-family: Georgia, serif; font-size: 1.8rem; text-transform: uppercase; margin: 0; color: %(text)s; }
.letterhead p { font-style: italic; color: %(text_muted)s; margin-top: 4px; font-size: 0.9rem; }
.profile-grid {
    display: grid;
    grid-template-columns: repeat(2, 1fr);
    gap: 16px;
    background: %(bg_soft)s;
    border-radius: 12px;
    padding: 20px 24px;
    margin: 24px 0;
}
.info-label { color: %(text_muted)s; font-size: 0.72rem; font-weight: 700; text-transform: uppercase; letter-spacing: 0.04em; }
.info-value { color: %(text)s; font-size: 1.05rem; font-weight: 600; }
.exec-summary {
    background: %(primary_light)s;
    border-left: 4px solid %(primary)s;
    border-radius: 0 8px 8px 0;
    padding: 14px 18px;
    font-style: italic;
    color: %(primary_dark)s;
}
.report-body h1 { font-size: 1.5rem; font-weight: 700; border-bottom: 2px solid %(border)s; padding-bottom: 6px; margin-top: 28px; }
.report-body h2 { font-size: 1.2rem; font-weight: 700; color: %(primary_dark)s; margin-top: 22px; }
.report-body h3 { font-size: 1rem; font-weight: 600; text-transform: uppercase; letter-spacing: 0.04em; color: %(text_muted)s; }
.report-body p { line-height: 1.65; margin-bottom: 12px; }
.signature {
    display: flex;
    justify-content: space-between;
    border-top: 1px solid %(border)s;
    margin-top: 48px;
    padding-top: 32px;
    font-size: 0.85rem;
}
.sig-line { width: 190px; height: 2px; background: %(text_muted)s; margin-bottom: 8px; }
.doc-meta { text-align: right; color: %(text_muted)s; font-size: 0.75rem; align-self: flex-end; }
.badge-ready {
    display: inline-block;
    background: %(success_light)s;
    color: %(success)s;
    padding: 3px 12px;
    border-radius: 9999px;
    font-size: 0.72rem;
    font-weight: 700;
    text-transform: uppercase;
    letter-spacing: 0.05em;
}

/* ---------- Pill tags ---------- */
.pill {
    display: inline-block;
    padding: 3px 12px;
    border-radius: 9999px;
    font-size: 0.78rem;
    font-weight: 500;
    margin: 2px 4px 2px 0;
    border: 1px solid %(border)s;
    background: %(bg_card)s;
    color: %(text_muted)s;
}

/* ---------- Section title ---------- */
.section-title {
    font-size: 1.15rem;
    font-weight: 700;
    color: %(text)s;
    margin: 24px 0 12px 0;
    padding-bottom: 8px;
    border-bottom: 2px solid %(primary)s;
    display: inline-block;
}

/* ---------- Print: only the report document ---------- */
@media print {
    [data-testid="stSidebar"], [data-testid="stHeader"], .no-print, .stButton, .stDownloadButton { display: none !important; }
    .report-doc { border: none; box-shadow: none; padding: 0; }
}
</style>
"""


def apply_theme() -> None:
    """Inject global CSS into the page. Call once at the top of every page."""
    if "dark_mode" not in st.session_state:
        st.session_state.dark_mode = False
    st.markdown(_CSS_TEMPLATE % get_colors(), unsafe_allow_html=True)


# ---------------------------------------------------------------------------
# Session wiring
# ---------------------------------------------------------------------------
def init_session(store: SessionStore | None = None) -> None:
    """Attach the session store and read the persisted login once per browser session."""
    if "session_store" not in st.session_state:
        st.session_state.session_store = store or JsonFileSessionStore(SESSION_FILE)
    if "user" not in st.session_state:
        session = st.session_state.session_store.load()
        st.session_state.user = session.to_storage() if session else None


def get_history() -> ReportHistory:
    """Per-browser-session report history, created on first use."""
    if "history" not in st.session_state:
        st.session_state.history = ReportHistory()
    return st.session_state.history


def auth_guard() -> None:
    """Stop page execution with a friendly message if not logged in."""
    if not st.session_state.get("user"):
        st.warning("Please log in from the **Home** page to continue.")
        st.stop()


def render_sidebar_profile() -> None:
    """Render user avatar, email, logout button, and dark-mode toggle."""
    user = st.session_state.get("user")
    if not user:
        return
    email = user.get("email", "")
    initials = email[:2].upper() if email else "?"
    c = get_colors()

    with st.sidebar:
        st.markdown(
            f"""
            <div style="text-align:center; padding: 16px 0 8px 0;">
                <div style="width:56px;height:56px;border-radius:50%;background:{c['primary']};
                    color:white;font-size:1.3rem;font-weight:700;display:inline-flex;
                    align-items:center;justify-content:center;margin-bottom:6px;">
                    {initials}
                </div>
                <div style="color:{c['text_muted']};font-size:0.85rem;">{email}</div>
            </div>
            """,
            unsafe_allow_html=True,
        )
        st.divider()

        dark = st.toggle("🌙 Dark mode", value=st.session_state.get("dark_mode", False), key="dark_mode_toggle")
        if dark != st.session_state.get("dark_mode", False):
            st.session_state.dark_mode = dark
            st.rerun()

        if st.button("Logout", use_container_width=True, type="secondary"):
            logout(st.session_state.session_store)
            st.session_state.user = None
            st.rerun()
        st.divider()


# ---------------------------------------------------------------------------
# Reusable HTML helpers
# ---------------------------------------------------------------------------
def kpi_tile(label: str, value: str | int | float, color: str) -> str:
    """Return HTML for a single KPI tile."""
    return (
        f'<div class="kpi-tile">'
        f'  <div class="kpi-value" style="color:{color};">{value}</div>'
        f'  <div class="kpi-label">{label}</div>'
        f'</div>'
    )


def section_title(text: str) -> None:
    """Render a styled section heading."""
    st.markdown(f'<div class="section-title">{text}</div>', unsafe_allow_html=True)


def pill_tag(text: str) -> str:
    return f'<span class="pill">{text}</span>'


def page_footer() -> None:
    c = get_colors()
    st.markdown(
        f"""
        <div class="no-print" style="text-align:center;color:{c['text_muted']};font-size:0.82rem;
            border-top:1px solid {c['border']};margin-top:40px;padding-top:16px;">
            &copy; {date.today().year} PsychLab Clinical Systems. Confidential Medical Information.
        </div>
        """,
        unsafe_allow_html=True,
    )
