"""
Medical report compilation endpoint.
"""

from fastapi import APIRouter, Request
from pydantic import ValidationError as PydanticValidationError

from ...application.dto.consultation_dto import GenerateReportRequest, ReportMessage
from ...application.use_cases.generate_medical_report import GenerateMedicalReportUseCase
from ..deps import (
    CompletionServiceDep,
    CurrentUserDep,
    RateLimited,
    SessionRepositoryDep,
    SettingsDep,
)
from ..errors import BadRequestError
from ..schemas.common import ApiResponse, ErrorResponse
from ..schemas.consultation import MedicalReportRequest
from ..utils.responses import ok

router = APIRouter(prefix="/api/medical-report", tags=["medical-report"], dependencies=[RateLimited])


@router.post(
    "",
    response_model=ApiResponse[dict],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input or invalid report structure"},
        404: {"model": ErrorResponse, "description": "Session not found"},
        409: {"model": ErrorResponse, "description": "Session already closed"},
        502: {"model": ErrorResponse, "description": "Report generation failed"},
    },
)
async def generate_medical_report(
    request: Request,
    owner_id: CurrentUserDep,
    settings: SettingsDep,
    session_repo: SessionRepositoryDep,
    completion_service: CompletionServiceDep,
):
    """
    Compile the structured report of a finished consultation.

    The report is stored on the session and the session is closed.
    """
    try:
        payload = MedicalReportRequest.model_validate(await request.json())
    except (ValueError, PydanticValidationError):
        raise BadRequestError("Invalid input")

    if not payload.session_id or not payload.messages:
        raise BadRequestError("Invalid input", {"fields": ["sessionId", "messages"]})

    params = payload.session_params
    doctor = params.selected_doctor if params else None
    messages = []
    for m in payload.messages:
        enrichment = m.enrichment_data or m.natlas_data
        messages.append(
            ReportMessage(
                role=m.role.lower(),
                content=m.content,
                severity=enrichment.severity if enrichment else None,
                keywords=list(enrichment.keywords) if enrichment else [],
            )
        )

    use_case = GenerateMedicalReportUseCase(
        session_repo,
        completion_service,
        history_limit=settings.consultation.report_history_limit,
    )
    report = await use_case.execute(
        GenerateReportRequest(
            owner_id=owner_id,
            session_id=payload.session_id,
            messages=messages,
            doctor_name=(params.name if params else None) or (doctor.name if doctor else None),
            doctor_specialty=(params.specialty if params else None) or (doctor.specialty if doctor else None),
            user_display_name=params.user_name if params else None,
        )
    )
    return ok(request, data=report.to_dict(), message="Report generated")
