import logging
from dataclasses import dataclass

import requests

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to generate report. Please try again."
MISSING_FIELDS_MESSAGE = "Please fill in at least the name and age."

REQUIRED_FIELDS = ("name", "age")


def empty_patient() -> dict:
    return {
        "name": "",
        "age": "",
        "gender": "Male",
        "referral_reason": "",
        "clinical_observations": "",
        "test_scores": "",
    }


def missing_required_fields(patient: dict) -> list[str]:
    return [field for field in REQUIRED_FIELDS if not patient.get(field)]


@dataclass(frozen=True)
class GenerationOutcome:
    report: dict | None = None
    error: str | None = None
    # False when the submission was rejected before any request went out.
    requested: bool = True

    @property
    def ok(self) -> bool:
        return self.report is not None


def request_report(client, patient: dict, tool: str) -> GenerationOutcome:
    """Send one generation request; never raises on backend or network failure."""
    if missing_required_fields(patient):
        return GenerationOutcome(error=MISSING_FIELDS_MESSAGE, requested=False)

    try:
        res = client.generate_report(dict(patient), tool)
    except requests.RequestException:
        logger.exception("Report request to backend failed")
        return GenerationOutcome(error=GENERIC_FAILURE_MESSAGE)

    if not res.ok:
        logger.warning("Backend refused report generation: %s %s", res.status_code, res.text)
        return GenerationOutcome(error=GENERIC_FAILURE_MESSAGE)

    try:
        report = res.json()["data"]
    except (ValueError, KeyError, TypeError):
        logger.exception("Backend returned an unreadable report payload")
        return GenerationOutcome(error=GENERIC_FAILURE_MESSAGE)
    if not isinstance(report, dict) or "full_report" not in report:
        logger.error("Backend returned an unexpected report payload: %r", report)
        return GenerationOutcome(error=GENERIC_FAILURE_MESSAGE)
    return GenerationOutcome(report=report)
