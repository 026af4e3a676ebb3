"""
Doctor persona suggestions from patient notes.
"""

from fastapi import APIRouter, Request
from pydantic import ValidationError as PydanticValidationError

from ...application.dto.consultation_dto import DoctorSuggestionRequest
from ...application.use_cases.suggest_doctors import SuggestDoctorsUseCase
from ..deps import CompletionServiceDep, CurrentUserDep, EnrichmentServiceDep, RateLimited
from ..errors import BadRequestError
from ..schemas.common import ApiResponse, ErrorResponse
from ..schemas.consultation import DoctorOut, DoctorSuggestionOut, SuggestDoctorsRequest
from ..utils.responses import ok

router = APIRouter(prefix="/api/suggested-doctors", tags=["doctors"], dependencies=[RateLimited])


@router.post(
    "",
    response_model=ApiResponse[DoctorSuggestionOut],
    responses={400: {"model": ErrorResponse, "description": "Invalid notes"}},
)
async def suggest_doctors(
    request: Request,
    owner_id: CurrentUserDep,
    completion_service: CompletionServiceDep,
    enrichment_service: EnrichmentServiceDep,
):
    """Recommend doctor personas for the patient's described symptoms."""
    try:
        payload = SuggestDoctorsRequest.model_validate(await request.json())
    except (ValueError, PydanticValidationError):
        raise BadRequestError("Invalid notes")

    if not (payload.notes or "").strip():
        raise BadRequestError("Invalid notes", {"field": "notes"})

    result = await SuggestDoctorsUseCase(completion_service, enrichment_service).execute(
        DoctorSuggestionRequest(notes=payload.notes, language=payload.language)
    )
    return ok(
        request,
        data=DoctorSuggestionOut(
            doctors=[DoctorOut(**doctor) for doctor in result.doctors],
            natlas_enhancement=result.natlas_enhancement,
            fallback_used=result.fallback_used,
        ),
    )
