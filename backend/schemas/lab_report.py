from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class AssessmentTool(str, Enum):
    MISIC = "MISIC"
    CAT = "CAT"
    VSMS = "VSMS"
    SPM = "SPM"
    CPM = "CPM"
    NIMHANS_LD = "NIMHANS INDEX FOR LEARNING DISABILITY"
    ISAA = "ISAA"
    CONNER = "CONNER"
    VANDERBILT = "VANDERBILT"
    ADHD_RS = "ADHD-RS"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class PatientProfile(BaseModel):
    """Patient demographics and clinical notes, passed through to the prompt as opaque text."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Patient full name")
    age: str = Field(min_length=1, description="Free-text age, e.g. '12 years'")
    gender: Gender = Gender.MALE
    referral_reason: str = Field(default="", description="Why the patient was referred")
    clinical_observations: str = Field(default="", description="Behavioral observations")
    test_scores: str = Field(default="", description="Raw scores, scale points, percentiles")


class ReportResult(BaseModel):
    """Structured reply of the model service: a short summary and a Markdown report."""
    model_config = ConfigDict(frozen=True)

    summary: StrictStr
    full_report: StrictStr = Field(alias="fullReport", min_length=1)


class LabReport(BaseModel):
    """One successful generation. Immutable once built."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    patient: PatientProfile
    tool: AssessmentTool
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    summary: str
    full_report: str

    @classmethod
    def from_result(cls, patient: PatientProfile, tool: AssessmentTool, result: ReportResult) -> "LabReport":
        return cls(
            patient=patient,
            tool=tool,
            summary=result.summary,
            full_report=result.full_report,
        )


class GenerateReportRequest(BaseModel):
    patient: PatientProfile
    tool: AssessmentTool = AssessmentTool.MISIC
