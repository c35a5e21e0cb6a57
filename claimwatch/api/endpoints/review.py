"""Reviewer workflow endpoints."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import Field

from ...domain.models.analysis import Verdict
from ...domain.models.base import DocumentModel
from ...domain.services.review_service import ReviewService
from ...infrastructure.dependencies import get_actor_id, get_review_service

router = APIRouter(prefix="/review", tags=["review"])


class EscalateRequest(DocumentModel):
    """Escalate one claim, or every claim of a cluster."""

    claim_id: Optional[str] = Field(None, description="Claim to escalate")
    cluster_id: Optional[str] = Field(None, description="Cluster whose claims are escalated")
    reason: Optional[str] = Field(None, description="Why review is needed")


class ResolveRequest(DocumentModel):
    """Record a reviewer's verdict."""

    claim_id: str = Field(..., min_length=1, description="Escalated claim")
    verdict: Verdict = Field(..., description="Reviewer verdict")
    notes: Optional[str] = Field(None, description="Reviewer notes")


@router.post("/escalate")
async def escalate(
    request: EscalateRequest,
    service: ReviewService = Depends(get_review_service),
    actor_id: Optional[str] = Depends(get_actor_id),
) -> Dict[str, Any]:
    return await service.escalate(
        claim_id=request.claim_id,
        cluster_id=request.cluster_id,
        reason=request.reason,
        actor_id=actor_id,
    )


@router.post("/resolve")
async def resolve(
    request: ResolveRequest,
    service: ReviewService = Depends(get_review_service),
    actor_id: Optional[str] = Depends(get_actor_id),
) -> Dict[str, Any]:
    return await service.resolve(
        claim_id=request.claim_id,
        verdict=request.verdict,
        notes=request.notes,
        actor_id=actor_id,
    )
