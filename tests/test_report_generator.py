from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from backend.config import settings
from backend.schemas.lab_report import AssessmentTool, Gender, LabReport, PatientProfile
from backend.services.report_generator import (
    NO_OBSERVATIONS_FALLBACK,
    NO_REFERRAL_FALLBACK,
    NO_SCORES_FALLBACK,
    REPORT_RESPONSE_SCHEMA,
    REPORT_SECTIONS,
    EmptyResponse,
    MalformedResponse,
    TransportFailure,
    _request_completion,
    build_prompt,
    decode_report_result,
    generate_report,
)


def test_prompt_embeds_patient_and_fallbacks(jane_doe, isaa):
    prompt = build_prompt(jane_doe, isaa)

    for expected in ("Jane Doe", "Age: 10", "Gender: Female", "ISAA"):
        assert expected in prompt
    assert f"Test Scores/Raw Data: {NO_SCORES_FALLBACK}" in prompt
    assert f"Referral Reason: {NO_REFERRAL_FALLBACK}" in prompt
    assert f"Clinical Observations: {NO_OBSERVATIONS_FALLBACK}" in prompt
    assert "senior clinical psychologist" in prompt
    assert '"summary"' in prompt and '"fullReport"' in prompt


def test_prompt_never_embeds_blank_optional_fields(isaa):
    patient = PatientProfile(name="A", age="7", referral_reason="   ", clinical_observations="", test_scores="")
    prompt = build_prompt(patient, isaa)

    assert "Referral Reason: \n" not in prompt
    assert f"Referral Reason: {NO_REFERRAL_FALLBACK}" in prompt


def test_prompt_keeps_provided_values_verbatim():
    patient = PatientProfile(
        name="Ravi K",
        age="8 years 4 months",
        gender=Gender.MALE,
        referral_reason="Poor attention in class",
        clinical_observations="Fidgety, left seat twice",
        test_scores="  Inattention 24/27, Hyperactivity 19/27",
    )
    prompt = build_prompt(patient, AssessmentTool.VANDERBILT)

    assert "Test Scores/Raw Data:   Inattention 24/27, Hyperactivity 19/27" in prompt
    assert "Referral Reason: Poor attention in class" in prompt
    assert NO_SCORES_FALLBACK not in prompt
    assert "standard normative benchmarks for VANDERBILT" in prompt


def test_prompt_is_deterministic_and_orders_sections(jane_doe, isaa):
    prompt = build_prompt(jane_doe, isaa)
    assert prompt == build_prompt(jane_doe, isaa)

    positions = [prompt.index("# ISAA Assessment Report")]
    positions += [prompt.index(f"## {section}") for section in REPORT_SECTIONS]
    assert positions == sorted(positions)


def test_decode_accepts_two_string_fields(isaa_reply):
    result = decode_report_result(isaa_reply)
    assert result.summary == "Mild autistic traits noted."
    assert result.full_report.startswith("# ISAA Assessment Report")


def test_decode_accepts_utf8_bytes():
    result = decode_report_result('{"summary": "Présente", "fullReport": "# Report"}'.encode("utf-8"))
    assert result.summary == "Présente"


def test_decode_rejects_invalid_utf8_bytes():
    with pytest.raises(MalformedResponse):
        decode_report_result(b'{"summary": "\xff\xfe", "fullReport": "# R"}')


@pytest.mark.parametrize("body", [None, "", "   \n"])
def test_decode_empty_body(body):
    with pytest.raises(EmptyResponse):
        decode_report_result(body)


@pytest.mark.parametrize(
    "body",
    [
        "not json at all",
        '{"summary": "ok", "fullReport": "# R"',
        '["summary", "fullReport"]',
        '{"summary": "only a summary"}',
        '{"fullReport": "# R"}',
        '{"summary": 3, "fullReport": "# R"}',
        '{"summary": "ok", "fullReport": ""}',
        '{"summary": "ok", "fullReport": null}',
        '{"summary": "ok", "full_report": "# R"}',
    ],
)
def test_decode_malformed_body(body):
    with pytest.raises(MalformedResponse):
        decode_report_result(body)


def test_generate_makes_exactly_one_call(jane_doe, isaa, isaa_reply):
    prompts = []

    def fake_complete(prompt: str) -> str:
        prompts.append(prompt)
        return isaa_reply

    result = generate_report(jane_doe, isaa, complete=fake_complete)

    assert len(prompts) == 1
    assert prompts[0] == build_prompt(jane_doe, isaa)
    assert result.full_report.startswith("# ISAA Assessment Report")


def test_generate_wraps_transport_errors(jane_doe, isaa):
    calls = []

    def failing_complete(prompt: str) -> str:
        calls.append(prompt)
        raise ConnectionError("429 rate limited")

    with pytest.raises(TransportFailure) as exc_info:
        generate_report(jane_doe, isaa, complete=failing_complete)

    assert isinstance(exc_info.value.__cause__, ConnectionError)
    assert len(calls) == 1


def test_generate_reports_empty_and_malformed_replies(jane_doe, isaa):
    with pytest.raises(EmptyResponse):
        generate_report(jane_doe, isaa, complete=lambda prompt: None)
    with pytest.raises(MalformedResponse):
        generate_report(jane_doe, isaa, complete=lambda prompt: '{"summary": "x"}')


def test_generate_without_api_key_is_transport_failure(jane_doe, isaa, monkeypatch):
    monkeypatch.setattr(settings, "openai_api_key", None)
    with pytest.raises(TransportFailure):
        generate_report(jane_doe, isaa)


class RecordingOpenAI:
    instances = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.prompts = []
        RecordingOpenAI.instances.append(self)

    def complete(self, prompt):
        self.prompts.append(prompt)
        return SimpleNamespace(text='{"summary": "ok", "fullReport": "# R"}')


@pytest.fixture
def recording_llm(monkeypatch):
    RecordingOpenAI.instances = []
    monkeypatch.setattr("llama_index.llms.openai.OpenAI", RecordingOpenAI)
    monkeypatch.setattr(settings, "openai_api_key", "sk-test")
    monkeypatch.setattr(settings, "report_reasoning_effort", None)
    return RecordingOpenAI


def test_completion_request_declares_strict_schema(recording_llm):
    text = _request_completion("the prompt")

    assert text == '{"summary": "ok", "fullReport": "# R"}'
    assert len(recording_llm.instances) == 1
    llm = recording_llm.instances[0]
    assert llm.prompts == ["the prompt"]
    assert llm.kwargs["api_key"] == "sk-test"
    assert llm.kwargs["model"] == settings.report_model
    assert llm.kwargs["max_retries"] == 0

    extra = llm.kwargs["additional_kwargs"]
    assert "reasoning_effort" not in extra
    response_format = extra["response_format"]
    assert response_format["type"] == "json_schema"
    assert response_format["json_schema"]["strict"] is True
    assert response_format["json_schema"]["schema"] == REPORT_RESPONSE_SCHEMA
    assert REPORT_RESPONSE_SCHEMA["required"] == ["summary", "fullReport"]


def test_completion_forwards_reasoning_effort_when_configured(recording_llm, monkeypatch):
    monkeypatch.setattr(settings, "report_reasoning_effort", "high")

    _request_completion("the prompt")

    assert recording_llm.instances[0].kwargs["additional_kwargs"]["reasoning_effort"] == "high"


def test_generate_uses_configured_client_once(jane_doe, isaa, recording_llm):
    result = generate_report(jane_doe, isaa)

    assert result.full_report == "# R"
    assert len(recording_llm.instances) == 1
    assert recording_llm.instances[0].prompts == [build_prompt(jane_doe, isaa)]


def test_lab_report_snapshots_input(jane_doe, isaa, isaa_reply):
    result = decode_report_result(isaa_reply)
    report = LabReport.from_result(jane_doe, isaa, result)

    assert report.patient == jane_doe
    assert report.patient.name == "Jane Doe"
    assert report.tool is AssessmentTool.ISAA
    assert report.full_report == result.full_report
    assert report.id
    with pytest.raises(ValidationError):
        report.summary = "edited"


def test_patient_requires_name_and_age():
    with pytest.raises(ValidationError):
        PatientProfile(name="", age="10")
    with pytest.raises(ValidationError):
        PatientProfile(name="Jane", age="")
