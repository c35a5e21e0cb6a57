"""Corrective output endpoints."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import Field

from ...domain.models.base import DocumentModel
from ...domain.ports.ai_provider import OutputType
from ...domain.services.corrective_output_service import ALL_OUTPUT_TYPES, CorrectiveOutputService
from ...infrastructure.dependencies import get_actor_id, get_corrective_output_service

router = APIRouter(prefix="/outputs", tags=["outputs"])


class GenerateOutputsRequest(DocumentModel):
    claim_id: Optional[str] = Field(None, description="Analyzed claim")
    cluster_id: Optional[str] = Field(None, description="Cluster; its first claim is used")
    output_types: List[OutputType] = Field(default_factory=lambda: list(ALL_OUTPUT_TYPES))


@router.post("/generate")
async def generate_outputs(
    request: GenerateOutputsRequest,
    service: CorrectiveOutputService = Depends(get_corrective_output_service),
    actor_id: Optional[str] = Depends(get_actor_id),
) -> Dict[str, Any]:
    """Generate corrective messages; each format succeeds or fails on its own."""
    return await service.generate(
        claim_id=request.claim_id,
        cluster_id=request.cluster_id,
        output_types=request.output_types,
        actor_id=actor_id,
    )
