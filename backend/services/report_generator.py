import logging
from collections.abc import Callable

from pydantic import ValidationError

from backend.config import settings
from backend.schemas.lab_report import AssessmentTool, PatientProfile, ReportResult

logger = logging.getLogger(__name__)

NO_SCORES_FALLBACK = "Observation only"
NO_REFERRAL_FALLBACK = "General assessment"
NO_OBSERVATIONS_FALLBACK = "No specific observations provided"

# Heading order is parsed positionally by the report renderer; keep both in sync.
REPORT_SECTIONS = (
    "Test Results & Quantitative Findings",
    "Referral Context & Background",
    "Behavioral & Clinical Observations",
    "Clinical Interpretation",
    "Recommendations",
)

REPORT_RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {
        "summary": {"type": "string"},
        "fullReport": {"type": "string"},
    },
    "required": ["summary", "fullReport"],
    "additionalProperties": False,
}

REPORT_PROMPT_TEMPLATE = """
You are a senior clinical psychologist acting as the evaluating clinician for a psychological assessment laboratory.
Generate a professional laboratory/assessment report for the following case.

PATIENT DETAILS:
Name: {name}
Age: {age}
Gender: {gender}

DATA POINTS (USE THIS ORDER FOR THE REPORT BODY):
1. Test Scores/Raw Data: {test_scores}
2. Referral Reason: {referral_reason}
3. Clinical Observations: {clinical_observations}

ASSESSMENT TOOL:
{tool}

Instructions:
- If raw test scores are provided, interpret them against the standard normative benchmarks for {tool}.
- Do not invent scores that were not provided.

Return a JSON object with exactly two keys:
- "summary": a SHORT SUMMARY of 2-3 sentences for a quick overview.
- "fullReport": a DETAILED FULL REPORT formatted in Markdown.
  You MUST order the sections exactly as follows:
{sections}
"""


class ReportGenerationError(Exception):
    """Base class for every failure of the report pipeline."""


class TransportFailure(ReportGenerationError):
    pass


class EmptyResponse(ReportGenerationError):
    pass


class MalformedResponse(ReportGenerationError):
    pass


def _or_fallback(value: str, fallback: str) -> str:
    return value if value and value.strip() else fallback


def build_prompt(patient: PatientProfile, tool: AssessmentTool) -> str:
    headings = [f"# {tool.value} Assessment Report"] + [f"## {section}" for section in REPORT_SECTIONS]
    return REPORT_PROMPT_TEMPLATE.format(
        name=patient.name,
        age=patient.age,
        gender=patient.gender.value,
        test_scores=_or_fallback(patient.test_scores, NO_SCORES_FALLBACK),
        referral_reason=_or_fallback(patient.referral_reason, NO_REFERRAL_FALLBACK),
        clinical_observations=_or_fallback(patient.clinical_observations, NO_OBSERVATIONS_FALLBACK),
        tool=tool.value,
        sections="\n".join(f"   - {heading}" for heading in headings),
    )


def decode_report_result(text: str | bytes | None) -> ReportResult:
    """
    Parse the raw service reply into a ReportResult.

    Raises EmptyResponse when there is no body and MalformedResponse when the
    body is not valid UTF-8 or not a JSON object carrying string ``summary``
    and non-empty string ``fullReport`` keys. Extra keys are ignored.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedResponse("Model service returned a body that is not valid UTF-8") from exc
    if text is None or not text.strip():
        raise EmptyResponse("Model service returned an empty body")
    try:
        return ReportResult.model_validate_json(text)
    except ValidationError as exc:
        raise MalformedResponse(f"Model service returned a non-conforming body: {exc}") from exc


def _request_completion(prompt: str) -> str | None:
    try:
        from llama_index.llms.openai import OpenAI
    except ImportError as exc:
        raise RuntimeError("llama_index is not installed") from exc

    if not settings.openai_api_key:
        raise RuntimeError("OPENAI_API_KEY is missing")

    additional_kwargs: dict = {
        "response_format": {
            "type": "json_schema",
            "json_schema": {"name": "assessment_report", "strict": True, "schema": REPORT_RESPONSE_SCHEMA},
        }
    }
    if settings.report_reasoning_effort:
        additional_kwargs["reasoning_effort"] = settings.report_reasoning_effort

    llm = OpenAI(
        model=settings.report_model,
        api_key=settings.openai_api_key,
        temperature=settings.report_temperature,
        max_retries=0,
        additional_kwargs=additional_kwargs,
    )
    response = llm.complete(prompt)
    return getattr(response, "text", None)


def generate_report(
    patient: PatientProfile,
    tool: AssessmentTool,
    complete: Callable[[str], str | None] | None = None,
) -> ReportResult:
    """Run one prompt through the model service and decode the reply. No retries."""
    complete = complete or _request_completion
    prompt = build_prompt(patient, tool)

    try:
        raw_text = complete(prompt)
    except Exception as exc:
        logger.exception("Model service call failed for tool %s", tool.value)
        raise TransportFailure("Model service call failed") from exc

    try:
        return decode_report_result(raw_text)
    except ReportGenerationError as exc:
        logger.error("Rejected model reply for tool %s: %s", tool.value, exc)
        raise
