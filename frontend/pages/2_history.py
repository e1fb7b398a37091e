import sys
from pathlib import Path

APP_DIR = Path(__file__).resolve().parent.parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

import io
from collections import Counter

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from utils.export import report_date
from utils.theme import (
    PLOTLY_COLORS,
    apply_theme,
    auth_guard,
    get_colors,
    get_history,
    init_session,
    kpi_tile,
    page_footer,
    pill_tag,
    plotly_layout_defaults,
    render_sidebar_profile,
    section_title,
)

st.set_page_config(page_title="Report History", page_icon="🗂️", layout="wide")
apply_theme()
init_session()
auth_guard()
render_sidebar_profile()
COLORS = get_colors()

history = get_history()

# ── Header ────────────────────────────────────────────────────────────────
st.markdown(
    f"""
    <div style="margin-bottom:4px;">
        <span style="font-size:1.6rem;font-weight:800;color:{COLORS['text']};">🗂️ Report History</span>
    </div>
    <p style="color:{COLORS['text_muted']};margin-top:0;">
        Reports generated in this browser session, newest first. They are not kept after you close the app.
    </p>
    """,
    unsafe_allow_html=True,
)

reports = history.items
if not reports:
    st.info("No reports generated yet. Create one from the **New Assessment** page.")
    st.stop()

tool_counts = Counter(r["tool"] for r in reports)

c1, c2, c3 = st.columns(3)
c1.markdown(kpi_tile("Reports", len(reports), COLORS["primary"]), unsafe_allow_html=True)
c2.markdown(kpi_tile("Patients", len({r["patient"]["name"] for r in reports}), COLORS["success"]), unsafe_allow_html=True)
c3.markdown(kpi_tile("Most Used Tool", tool_counts.most_common(1)[0][0], COLORS["text"]), unsafe_allow_html=True)

# ── Table + CSV export ────────────────────────────────────────────────────
section_title("Generated Reports")
df = pd.DataFrame(
    [
        {
            "Date": report_date(r),
            "Patient": r["patient"]["name"],
            "Age": r["patient"]["age"],
            "Gender": r["patient"]["gender"],
            "Assessment Tool": r["tool"],
            "Summary": r["summary"],
            "Document ID": r["id"],
        }
        for r in reports
    ]
)
st.dataframe(df, use_container_width=True, hide_index=True)

csv_buf = io.StringIO()
df.to_csv(csv_buf, index=False)
st.download_button(
    "⬇️ Download History CSV",
    data=csv_buf.getvalue(),
    file_name="psychlab_report_history.csv",
    mime="text/csv",
)

# ── Tool breakdown ────────────────────────────────────────────────────────
left, right = st.columns([3, 2])
with left:
    fig = go.Figure(
        go.Pie(
            labels=list(tool_counts.keys()),
            values=list(tool_counts.values()),
            hole=0.55,
            marker=dict(colors=PLOTLY_COLORS),
            textinfo="label+value",
            textfont=dict(size=13),
        )
    )
    fig.update_layout(**plotly_layout_defaults("Reports by Assessment Tool", height=320), showlegend=False)
    st.plotly_chart(fig, use_container_width=True)

with right:
    section_title("Tools Used")
    st.markdown(" ".join(pill_tag(f"{tool} × {count}") for tool, count in tool_counts.most_common()), unsafe_allow_html=True)

# ── Reopen ────────────────────────────────────────────────────────────────
section_title("Open a Report")
options = {f"{report_date(r)} — {r['patient']['name']} — {r['tool']} ({r['id'][:8]})": r["id"] for r in reports}
choice = st.selectbox("Select report", options=list(options.keys()))
open_col, clear_col = st.columns([2, 1])
if open_col.button("Open in Assessment View", type="primary", use_container_width=True):
    st.session_state.current_report = history.select(options[choice])
    st.switch_page("pages/1_dashboard.py")
if clear_col.button("Clear History", use_container_width=True):
    history.clear()
    st.session_state.current_report = None
    st.rerun()

page_footer()
