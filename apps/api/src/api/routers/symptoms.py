from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends

from devkit.config import FinderSettings
from facility_sources.clients.symptom_classifier import SymptomClassifierClient

from api.dependencies import get_settings, get_symptom_classifier
from api.errors import ApiError
from api.response import success_response
from api.schemas.symptom import SymptomAssessmentResult, SymptomClassifyRequest

router = APIRouter(prefix="/v1/symptoms", tags=["symptoms"])


@router.post("/classify")
async def classify_symptoms(
    payload: SymptomClassifyRequest,
    classifier: SymptomClassifierClient = Depends(get_symptom_classifier),
    settings: FinderSettings = Depends(get_settings),
) -> dict:
    try:
        assessment = await asyncio.wait_for(
            classifier.classify(payload.symptoms),
            timeout=settings.AGGREGATION_TIMEOUT_SECONDS,
        )
    except TimeoutError as exc:
        raise ApiError("UPSTREAM_TIMEOUT", "Symptom classification timed out", 504) from exc
    result = SymptomAssessmentResult(
        department=assessment.department,
        reason=assessment.reason,
        urgency=assessment.urgency,
        additional_advice=assessment.additional_advice,
    )
    return success_response(result.model_dump(), meta={})
