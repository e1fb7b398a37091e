import html
import re
from datetime import datetime

from .report_markup import render_report_html

LAB_TITLE = "PSYCHOLOGICAL ASSESSMENT LABORATORY"
LAB_DEPARTMENT = "Department of Clinical Psychology & Neurodevelopment"
APP_VERSION = "PsychLab Version 2.4.0-Beta"

WORD_MIME_TYPE = "application/msword"

_WORD_TEMPLATE = """<html xmlns:o="urn:schemas-microsoft-com:office:office" xmlns:w="urn:schemas-microsoft-com:office:word">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ font-family: Georgia, 'Times New Roman', serif; color: #1f2937; line-height: 1.5; }}
.letterhead {{ text-align: center; border-bottom: 2px solid #dbeafe; padding-bottom: 12pt; margin-bottom: 18pt; }}
.letterhead h1 {{ font-size: 20pt; text-transform: uppercase; margin: 0; }}
.letterhead p {{ font-size: 10pt; color: #6b7280; font-style: italic; margin: 4pt 0 0 0; }}
table.profile {{ width: 100%; border-collapse: collapse; background: #f9fafb; margin-bottom: 18pt; }}
table.profile td {{ padding: 6pt 10pt; vertical-align: top; }}
.label {{ display: block; font-size: 8pt; color: #9ca3af; text-transform: uppercase; font-weight: bold; }}
.value {{ font-size: 12pt; font-weight: bold; }}
.summary {{ border-left: 4px solid #3b82f6; background: #eff6ff; padding: 8pt 12pt; font-style: italic; color: #1e3a8a; }}
h1.report-h1 {{ font-size: 16pt; border-bottom: 1px solid #e5e7eb; padding-bottom: 4pt; }}
h2.report-h2 {{ font-size: 13pt; color: #1e3a8a; }}
h3.report-h3 {{ font-size: 11pt; color: #374151; text-transform: uppercase; }}
.signature {{ margin-top: 48pt; border-top: 1px solid #e5e7eb; padding-top: 24pt; }}
.meta {{ font-size: 8pt; color: #9ca3af; text-align: right; }}
</style>
</head>
<body>
<div class="letterhead">
<h1>{lab_title}</h1>
<p>{lab_department}</p>
</div>
<table class="profile">
<tr>
<td><span class="label">Patient Name</span><span class="value">{name}</span></td>
<td><span class="label">Date of Report</span><span class="value">{date}</span></td>
</tr>
<tr>
<td><span class="label">Age / Gender</span><span class="value">{age} / {gender}</span></td>
<td><span class="label">Assessment Tool</span><span class="value">{tool}</span></td>
</tr>
</table>
<h3>Executive Summary</h3>
<div class="summary">{summary}</div>
{body}
<div class="signature">
<p><b>Authorized Signatory</b><br>Clinical Neuropsychologist</p>
<p class="meta">Electronic Document ID: {report_id}<br>{version}</p>
</div>
</body>
</html>
"""


def report_date(report: dict) -> str:
    raw = report.get("generated_at") or ""
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).strftime("%d %b %Y")
    except ValueError:
        return raw[:10]


def _sanitize(value: str, fallback: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9]+", "_", value or "").strip("_")
    return cleaned or fallback


def export_file_name(report: dict) -> str:
    name = _sanitize(report.get("patient", {}).get("name", ""), "Patient")
    tool = _sanitize(report.get("tool", ""), "Assessment")
    return f"{name}_{tool}_Report.doc"


def build_word_document(report: dict) -> str:
    """Wrap a generated report in a standalone HTML document Word opens as a .doc."""
    patient = report.get("patient", {})
    name = html.escape(patient.get("name", ""))
    tool = html.escape(report.get("tool", ""))
    return _WORD_TEMPLATE.format(
        title=f"{name} - {tool} Assessment Report",
        lab_title=LAB_TITLE,
        lab_department=html.escape(LAB_DEPARTMENT),
        name=name,
        date=html.escape(report_date(report)),
        age=html.escape(patient.get("age", "")),
        gender=html.escape(patient.get("gender", "")),
        tool=tool,
        summary=html.escape(report.get("summary", "")),
        body=render_report_html(
            report.get("full_report", ""),
            classes={"h1": "report-h1", "h2": "report-h2", "h3": "report-h3"},
        ),
        report_id=html.escape(report.get("id", "")),
        version=APP_VERSION,
    )
