from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from backend.main import app
from backend.schemas.lab_report import AssessmentTool, Gender, PatientProfile


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def jane_doe() -> PatientProfile:
    return PatientProfile(name="Jane Doe", age="10", gender=Gender.FEMALE)


@pytest.fixture()
def isaa() -> AssessmentTool:
    return AssessmentTool.ISAA


@pytest.fixture()
def isaa_reply() -> str:
    return '{"summary": "Mild autistic traits noted.", "fullReport": "# ISAA Assessment Report\\n## Test Results & Quantitative Findings\\nTotal score 72.\\n"}'
