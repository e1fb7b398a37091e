import logging

from fastapi import APIRouter, HTTPException

from backend.schemas.lab_report import AssessmentTool, Gender, GenerateReportRequest, LabReport
from backend.services.report_generator import ReportGenerationError, generate_report

router = APIRouter(prefix="/api/reports", tags=["reports"])
logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to generate report. Please try again."


@router.get("/tools")
def list_tools():
    return {
        "statusCode": 200,
        "message": "Success",
        "data": {
            "tools": [tool.value for tool in AssessmentTool],
            "genders": [gender.value for gender in Gender],
        },
    }


@router.post("/generate")
def generate(payload: GenerateReportRequest):
    try:
        result = generate_report(payload.patient, payload.tool)
    except ReportGenerationError as exc:
        logger.warning("Report generation failed (%s) for tool %s", type(exc).__name__, payload.tool.value)
        raise HTTPException(status_code=502, detail=GENERIC_FAILURE_MESSAGE) from exc

    report = LabReport.from_result(payload.patient, payload.tool, result)
    logger.info("Generated report %s for tool %s", report.id, report.tool.value)
    return {
        "statusCode": 200,
        "message": "Report generated successfully",
        "data": report.model_dump(mode="json"),
    }
