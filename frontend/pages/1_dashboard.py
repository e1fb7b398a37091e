import sys
from pathlib import Path

APP_DIR = Path(__file__).resolve().parent.parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

import html

import streamlit as st
import streamlit.components.v1 as components

from utils.api_client import ApiClient, cached_tools
from utils.export import (
    APP_VERSION,
    LAB_DEPARTMENT,
    LAB_TITLE,
    WORD_MIME_TYPE,
    build_word_document,
    export_file_name,
    report_date,
)
from utils.generation import empty_patient, request_report
from utils.report_markup import render_report_html
from utils.theme import (
    apply_theme,
    auth_guard,
    get_colors,
    get_history,
    init_session,
    page_footer,
    render_sidebar_profile,
    section_title,
)

st.set_page_config(page_title="New Assessment", page_icon="🩺", layout="wide")
apply_theme()
init_session()
auth_guard()
render_sidebar_profile()
COLORS = get_colors()

client = ApiClient()
history = get_history()

FORM_KEYS = {
    "name": "patient_name",
    "age": "patient_age",
    "gender": "patient_gender",
    "test_scores": "patient_test_scores",
    "referral_reason": "patient_referral_reason",
    "clinical_observations": "patient_clinical_observations",
}

st.session_state.setdefault("is_generating", False)
st.session_state.setdefault("current_report", None)
for field, key in FORM_KEYS.items():
    st.session_state.setdefault(key, empty_patient()[field])


def _patient_from_form() -> dict:
    return {field: st.session_state[key] for field, key in FORM_KEYS.items()}


def _reset_form() -> None:
    for field, key in FORM_KEYS.items():
        st.session_state[key] = empty_patient()[field]
    st.session_state.current_report = None


def _start_generation() -> None:
    st.session_state.is_generating = True


def _render_report(report: dict) -> None:
    patient = report["patient"]
    controls_l, controls_r = st.columns([3, 2])
    controls_l.markdown('<span class="badge-ready">Draft Ready</span>', unsafe_allow_html=True)
    with controls_r:
        print_col, word_col = st.columns(2)
        if print_col.button("🖨️ Print / Save PDF", use_container_width=True):
            components.html("<script>window.parent.print();</script>", height=0)
        word_col.download_button(
            "📄 Export Word",
            data=build_word_document(report),
            file_name=export_file_name(report),
            mime=WORD_MIME_TYPE,
            use_container_width=True,
        )

    profile = [
        ("Patient Name", patient["name"]),
        ("Date of Report", report_date(report)),
        ("Age / Gender", f"{patient['age']} / {patient['gender']}"),
        ("Assessment Tool", report["tool"]),
    ]
    profile_html = "".join(
        f'<div><div class="info-label">{label}</div><div class="info-value">{html.escape(value)}</div></div>'
        for label, value in profile
    )
    st.markdown(
        f"""
        <div class="report-doc">
            <div class="letterhead">
                <h1>{LAB_TITLE}</h1>
                <p>{LAB_DEPARTMENT}</p>
            </div>
            <div class="profile-grid">{profile_html}</div>
            <div class="no-print">
                <div class="info-label" style="color:{COLORS['primary']};margin-bottom:6px;">Executive Summary</div>
                <div class="exec-summary">{html.escape(report["summary"])}</div>
            </div>
            <div class="report-body">{render_report_html(report["full_report"])}</div>
            <div class="signature">
                <div>
                    <div class="sig-line"></div>
                    <div style="font-weight:700;">Authorized Signatory</div>
                    <div style="color:{COLORS['text_muted']};font-size:0.75rem;">Clinical Neuropsychologist</div>
                </div>
                <div class="doc-meta">
                    Electronic Document ID: {html.escape(report["id"])}<br>{APP_VERSION}
                </div>
            </div>
        </div>
        """,
        unsafe_allow_html=True,
    )


# ── Header ────────────────────────────────────────────────────────────────
st.markdown(
    f"""
    <div class="no-print" style="margin-bottom:4px;">
        <span style="font-size:1.6rem;font-weight:800;color:{COLORS['text']};">🩺 New Lab Assessment</span>
    </div>
    <p class="no-print" style="color:{COLORS['text_muted']};margin-top:0;">
        Enter patient details and raw scores, then generate a draft clinical report.
    </p>
    """,
    unsafe_allow_html=True,
)

ok, options = cached_tools(client.base_url)
if not ok:
    st.error("Could not reach the report service. Check that the API is running.")
    st.stop()

form_col, report_col = st.columns([4, 8], gap="large")

# ── Input form ────────────────────────────────────────────────────────────
with form_col:
    busy = st.session_state.is_generating
    st.text_input("Patient Name", placeholder="Full Name", key=FORM_KEYS["name"], disabled=busy)
    age_col, gender_col = st.columns(2)
    age_col.text_input("Age", placeholder="e.g. 12 years", key=FORM_KEYS["age"], disabled=busy)
    gender_col.selectbox("Gender", options=options["genders"], key=FORM_KEYS["gender"], disabled=busy)
    st.selectbox("Assessment Tool", options=options["tools"], key="selected_tool", disabled=busy)
    st.text_area(
        "Raw Scores / Further details",
        placeholder="IQ scores, scale points, percentile, etc.",
        key=FORM_KEYS["test_scores"],
        height=110,
        disabled=busy,
    )
    st.text_area(
        "Referral Reason",
        placeholder="Why was the patient referred?",
        key=FORM_KEYS["referral_reason"],
        height=90,
        disabled=busy,
    )
    st.text_area(
        "Clinical Observations",
        placeholder="Behavioral observations...",
        key=FORM_KEYS["clinical_observations"],
        height=110,
        disabled=busy,
    )

    clear_col, generate_col = st.columns([1, 2])
    clear_col.button("Clear", on_click=_reset_form, use_container_width=True, disabled=busy)
    generate_col.button(
        "⏳ Analyzing..." if busy else "Generate Report",
        on_click=_start_generation,
        type="primary",
        use_container_width=True,
        disabled=busy,
    )

    # ── Recent reports ────────────────────────────────────────────────────
    section_title("Recent Reports")
    if not len(history):
        st.caption("No reports generated yet.")
    for entry in history.items[:8]:
        label = f"{entry['patient']['name']} · {entry['tool']} · {report_date(entry)}"
        if st.button(label, key=f"recent_{entry['id']}", use_container_width=True, disabled=busy):
            st.session_state.current_report = history.select(entry["id"])
            st.rerun()

# ── Report preview ────────────────────────────────────────────────────────
with report_col:
    if st.session_state.is_generating:
        patient = _patient_from_form()
        with st.spinner(f"Analyzing the observations and test scores for {patient['name'] or 'the patient'}..."):
            try:
                outcome = request_report(client, patient, st.session_state.selected_tool)
            finally:
                st.session_state.is_generating = False
        if outcome.ok:
            st.session_state.current_report = history.add(outcome.report)
            st.rerun()
        st.session_state.generation_error = outcome.error
        st.rerun()

    error = st.session_state.pop("generation_error", None)
    if error:
        st.error(error)

    report = st.session_state.current_report
    if report:
        _render_report(report)
    else:
        st.markdown(
            f"""
            <div class="card" style="min-height:520px;display:flex;flex-direction:column;align-items:center;
                justify-content:center;text-align:center;border-style:dashed;">
                <div style="font-size:3.5rem;opacity:0.25;">📄</div>
                <div style="font-size:1.1rem;font-weight:600;color:{COLORS['text']};">No active report</div>
                <p style="color:{COLORS['text_muted']};max-width:320px;">
                    Fill in the patient details and click generate to see the clinical findings here.
                </p>
            </div>
            """,
            unsafe_allow_html=True,
        )

page_footer()
