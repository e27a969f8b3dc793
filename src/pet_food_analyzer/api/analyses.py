"""Analysis endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from pet_food_analyzer.domain.analyses import (
    AnalysisCreated,
    AnalysisDetail,
    IngredientConcern,
)
from pet_food_analyzer.domain.outcomes import (
    ACQUISITION_FAILURES,
    Failure,
    FailureKind,
)
from pet_food_analyzer.domain.requests import CreateAnalysisRequest  # noqa: TC001

if TYPE_CHECKING:
    from pet_food_analyzer.containers import AppContainer

router = APIRouter(prefix="/analyses", tags=["analyses"])

_logger = logging.getLogger(__name__)

SERVICE_UNAVAILABLE_MESSAGE = (
    "An external service is unavailable. Please try again later."
)
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."


async def require_user_id(x_user_id: str | None = Header(default=None)) -> UUID:
    """Return the user id forwarded by the authentication layer."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    try:
        return UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED) from None


@router.post("")
async def create_analysis(
    payload: CreateAnalysisRequest,
    request: Request,
    user_id: UUID = Depends(require_user_id),
) -> JSONResponse:
    """Run the analysis pipeline for a submitted product."""
    container: AppContainer = request.app.state.container
    try:
        outcome = await container.analysis_service.create_analysis(user_id, payload)
    except Exception:
        correlation_id = uuid4().hex
        _logger.exception(
            "Unexpected error creating analysis",
            extra={"correlation_id": correlation_id, "user_id": str(user_id)},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "message": UNEXPECTED_ERROR_MESSAGE,
                "correlationId": correlation_id,
            },
        )
    if isinstance(outcome, Failure):
        return _failure_response(outcome)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=_created_payload(outcome),
        headers={"Location": f"/analyses/{outcome.analysis_id}"},
    )


@router.get("/{analysis_id}")
async def get_analysis(
    analysis_id: UUID,
    request: Request,
    user_id: UUID = Depends(require_user_id),
) -> dict[str, object]:
    """Return one of the caller's analyses."""
    container: AppContainer = request.app.state.container
    detail = container.analysis_service.get_analysis(user_id, analysis_id)
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return _detail_payload(detail)


def _failure_response(failure: Failure) -> JSONResponse:
    """Build the error response for a pipeline failure."""
    if failure.kind is FailureKind.INVALID_REQUEST:
        return JSONResponse(
            status_code=failure.status_code,
            content={"message": failure.message, "errors": failure.errors},
        )
    correlation_id = uuid4().hex
    _logger.warning(
        "Analysis request failed: %s",
        failure.kind.value,
        extra={"correlation_id": correlation_id},
    )
    if failure.kind is FailureKind.PERSISTENCE_FAILED:
        return JSONResponse(
            status_code=failure.status_code,
            content={
                "message": UNEXPECTED_ERROR_MESSAGE,
                "correlationId": correlation_id,
            },
        )
    content: dict[str, object] = {
        "message": SERVICE_UNAVAILABLE_MESSAGE,
        "reason": failure.kind.value,
        "correlationId": correlation_id,
    }
    if failure.kind in ACQUISITION_FAILURES:
        content["manualFallback"] = True
    return JSONResponse(status_code=failure.status_code, content=content)


def _concerns_payload(concerns: list[IngredientConcern]) -> list[dict[str, str]]:
    return [concern.to_dict() for concern in concerns]


def _created_payload(created: AnalysisCreated) -> dict[str, object]:
    return {
        "analysisId": str(created.analysis_id),
        "productId": str(created.product_id),
        "recommendation": created.recommendation.value,
        "justification": created.justification,
        "concerns": _concerns_payload(created.concerns),
        "createdAt": created.created_at.isoformat(),
    }


def _detail_payload(detail: AnalysisDetail) -> dict[str, object]:
    return {
        "analysisId": str(detail.analysis_id),
        "productId": str(detail.product_id),
        "productName": detail.product_name,
        "productUrl": detail.product_url,
        "isManualEntry": detail.is_manual_entry,
        "recommendation": detail.recommendation.value,
        "justification": detail.justification,
        "concerns": _concerns_payload(detail.concerns),
        "ingredientsText": detail.ingredients_text,
        "species": detail.pet.species.value,
        "breed": detail.pet.breed,
        "age": detail.pet.age,
        "additionalInfo": detail.pet.additional_info,
        "createdAt": detail.created_at.isoformat(),
    }
