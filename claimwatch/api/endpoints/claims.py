"""Claim submission and lookup endpoints."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import Field

from ...domain.models.base import DocumentModel
from ...domain.models.claim import Claim, ClaimStatus, GeoHint, MediaAnalysis, SourceType
from ...domain.services.claim_service import ClaimService
from ...infrastructure.dependencies import get_actor_id, get_claim_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/claims", tags=["claims"])

# Embeddings are large and only meaningful server-side
CLAIM_API_EXCLUDE = {"embedding"}


def claim_to_api(claim: Claim) -> Dict[str, Any]:
    return claim.to_api(exclude=CLAIM_API_EXCLUDE)


class ClaimCreateRequest(DocumentModel):
    """Request model for claim submission."""

    text: str = Field(..., min_length=1, description="Claim text")
    source_type: SourceType = Field(default=SourceType.MANUAL, description="Where the claim was seen")
    source_link: Optional[str] = Field(None, description="Link to the original post")
    language: str = Field(default="en", description="Language code")
    geo: Optional[GeoHint] = Field(None, description="Approximate origin")
    media_analysis: Optional[MediaAnalysis] = Field(None, description="Vision/OCR payload for image claims")


@router.post("", status_code=202)
async def create_claim(
    request: ClaimCreateRequest,
    service: ClaimService = Depends(get_claim_service),
    actor_id: Optional[str] = Depends(get_actor_id),
) -> Dict[str, Any]:
    """Accept a claim; analysis continues in the background."""
    claim = await service.create_claim(
        text=request.text,
        source_type=request.source_type,
        source_link=request.source_link,
        language=request.language,
        geo=request.geo,
        media_analysis=request.media_analysis,
        actor_id=actor_id,
    )
    return {
        "_id": claim.id,
        "text": claim.text,
        "status": claim.status.value,
        "message": "Claim created. Analysis in progress.",
    }


@router.get("")
async def list_claims(
    q: str = Query("", description="Case-insensitive text search"),
    source_type: Optional[SourceType] = Query(None, alias="sourceType"),
    language: Optional[str] = Query(None),
    status: Optional[ClaimStatus] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    skip: int = Query(0, ge=0),
    service: ClaimService = Depends(get_claim_service),
) -> Dict[str, Any]:
    """Search claims, newest first."""
    claims, total = await service.search_claims(
        query=q, source_type=source_type, language=language, status=status, limit=limit, skip=skip
    )
    return {
        "claims": [claim_to_api(claim) for claim in claims],
        "total": total,
        "limit": limit,
        "skip": skip,
    }


@router.get("/{claim_id}")
async def get_claim(claim_id: str, service: ClaimService = Depends(get_claim_service)) -> Dict[str, Any]:
    """A claim together with its analysis, if one exists yet."""
    claim, analysis = await service.get_claim_with_analysis(claim_id)
    return {
        "claim": claim_to_api(claim),
        "analysis": analysis.to_api() if analysis else None,
    }
