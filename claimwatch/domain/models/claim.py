"""Domain model for submitted claims."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Set

from pydantic import Field

from ..exceptions import InvalidStatusTransitionError
from .base import DocumentModel, new_id, utcnow


class SourceType(str, Enum):
    """Where a claim was collected from."""

    RSS = "rss"
    TWITTER = "twitter"
    TELEGRAM = "telegram"
    YOUTUBE = "youtube"
    IMAGE = "image"
    VIDEO = "video"
    WEB = "web"
    MANUAL = "manual"


class ClaimStatus(str, Enum):
    """Lifecycle of a claim through the analysis pipeline."""

    NEW = "new"
    ANALYZING = "analyzing"
    ANALYZED = "analyzed"
    ESCALATED = "escalated"


# Re-running analysis moves analyzed/escalated claims back through ANALYZING.
ALLOWED_TRANSITIONS: Dict[ClaimStatus, Set[ClaimStatus]] = {
    ClaimStatus.NEW: {ClaimStatus.ANALYZING, ClaimStatus.ESCALATED},
    ClaimStatus.ANALYZING: {ClaimStatus.ANALYZED, ClaimStatus.ESCALATED},
    ClaimStatus.ANALYZED: {ClaimStatus.ANALYZING, ClaimStatus.ESCALATED},
    ClaimStatus.ESCALATED: {ClaimStatus.ANALYZED, ClaimStatus.ANALYZING},
}


class GeoHint(DocumentModel):
    """Approximate origin of a claim."""

    country: Optional[str] = None
    region: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None


class IdentifiedPerson(DocumentModel):
    """Person recognized in an attached image."""

    name: str
    role: Optional[str] = None
    confidence: Optional[str] = None
    description: Optional[str] = None


class SceneInfo(DocumentModel):
    """Scene detected in an attached image."""

    location: Optional[str] = None
    event: Optional[str] = None
    timeframe: Optional[str] = None


class Forensics(DocumentModel):
    """Image forensic flags."""

    deepfake_detected: Optional[bool] = None
    manipulation_score: Optional[float] = Field(None, ge=0, le=1)
    artifacts: List[str] = Field(default_factory=list)


class MediaAnalysis(DocumentModel):
    """Vision/OCR payload attached to image-based claims."""

    has_image: bool = False
    image_path: str = ""
    ocr_text: str = ""
    extracted_text: str = ""
    image_description: str = ""
    main_claim: str = ""
    context: str = ""
    concerns: List[str] = Field(default_factory=list)
    people: List[IdentifiedPerson] = Field(default_factory=list)
    objects: List[str] = Field(default_factory=list)
    scene: SceneInfo = Field(default_factory=SceneInfo)
    fact_check_context: str = ""
    known_facts: List[str] = Field(default_factory=list)
    verification_suggestions: List[str] = Field(default_factory=list)
    forensics: Forensics = Field(default_factory=Forensics)

    @property
    def identified_people(self) -> List[str]:
        """Names of recognized people, skipping placeholders."""
        return [p.name for p in self.people if p.name and p.name != "Unknown person"]


class Claim(DocumentModel):
    """A unit of user-submitted or ingested content."""

    id: str = Field(default_factory=new_id, alias="_id")
    text: str = Field(..., min_length=1, description="Raw claim text")
    canonical_claim: Optional[str] = Field(None, description="Normalized claim text")
    source_type: SourceType = SourceType.MANUAL
    source_link: Optional[str] = None
    language: str = "en"
    embedding: List[float] = Field(default_factory=list, description="Empty when generation failed")
    geo: Optional[GeoHint] = None
    created_at: datetime = Field(default_factory=utcnow)
    cluster_id: Optional[str] = None
    status: ClaimStatus = ClaimStatus.NEW
    spread_count: int = 1
    mentions: int = 1
    media_analysis: Optional[MediaAnalysis] = None

    @property
    def has_embedding(self) -> bool:
        return len(self.embedding) > 0

    def transition_to(self, status: ClaimStatus) -> None:
        """Move the claim to a new status, enforcing the lifecycle."""
        if status == self.status:
            return
        if status not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidStatusTransitionError(self.status.value, status.value)
        self.status = status

    def restore_status(self, status: ClaimStatus) -> None:
        """Put back a status captured before a failed pipeline run."""
        self.status = status
