"""Domain model for clusters of related claims."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, computed_field

from .base import DocumentModel, new_id, utcnow

LOW_RISK_CEILING = 0.33
MEDIUM_RISK_CEILING = 0.66


class RiskTier(str, Enum):
    """Bucketed risk level."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_score(cls, score: float) -> "RiskTier":
        """Bucket a risk score; boundary values belong to the lower tier."""
        if score <= LOW_RISK_CEILING:
            return cls.LOW
        if score <= MEDIUM_RISK_CEILING:
            return cls.MEDIUM
        return cls.HIGH


class Trend(str, Enum):
    """Direction of a narrative's spread."""

    ACCELERATING = "accelerating"
    STABLE = "stable"
    DECLINING = "declining"


class GeoSpread(DocumentModel):
    region: Optional[str] = None
    country: Optional[str] = None
    count: int = 0
    lat: Optional[float] = None
    lng: Optional[float] = None


class ChannelSpread(DocumentModel):
    platform: str
    count: int = 0


class Cluster(DocumentModel):
    """A group of claims believed to concern the same narrative."""

    id: str = Field(default_factory=new_id, alias="_id")
    title: str
    summary: str = ""
    claim_ids: List[str] = Field(default_factory=list)
    risk_score: float = Field(0.0, ge=0, le=1)
    trend: Trend = Trend.STABLE
    geo_spread: List[GeoSpread] = Field(default_factory=list)
    channel_spread: List[ChannelSpread] = Field(default_factory=list)
    total_mentions: int = 0
    tags: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @computed_field
    @property
    def risk_tier(self) -> RiskTier:
        """Always derived from the current risk score, never stored on its own."""
        return RiskTier.from_score(self.risk_score)

    def shares_members_with(self, claim_ids: List[str]) -> bool:
        return bool(set(self.claim_ids) & set(claim_ids))
