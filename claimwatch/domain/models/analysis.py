"""Domain models for claim analysis results."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from .base import DocumentModel, new_id, utcnow


class Verdict(str, Enum):
    """Categorical fact-check outcome."""

    TRUE = "true"
    FALSE = "false"
    MIXED = "mixed"
    UNVERIFIED = "unverified"
    MISLEADING = "misleading"
    OUT_OF_CONTEXT = "out-of-context"
    SATIRE = "satire"


class Sentiment(str, Enum):
    """Dominant emotional register of a claim."""

    FEAR = "fear"
    ANGER = "anger"
    NEUTRAL = "neutral"
    HOPE = "hope"
    SADNESS = "sadness"
    CONFUSION = "confusion"
    SURPRISE = "surprise"
    DISGUST = "disgust"
    TRUST = "trust"


class Reliability(str, Enum):
    """Reliability tier of an evidence source."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


SOURCE_TYPES = {
    "fact-check", "news", "research", "official", "social", "academic", "government", "expert",
}


class EvidenceSource(DocumentModel):
    """An externally attributed reference supporting a verdict."""

    type: str = "news"
    title: str
    url: str = ""
    reliability: Reliability = Reliability.MEDIUM
    snippet: Optional[str] = None
    date: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def _known_type(cls, value):
        value = str(value or "news").lower()
        return value if value in SOURCE_TYPES else "news"

    @field_validator("reliability", mode="before")
    @classmethod
    def _known_reliability(cls, value):
        value = str(getattr(value, "value", value) or "medium").lower()
        return value if value in {r.value for r in Reliability} else Reliability.MEDIUM.value


class Features(DocumentModel):
    """Per-claim feature scores."""

    sentiment: Sentiment = Sentiment.NEUTRAL
    manipulation_likelihood: float = Field(0.0, ge=0, le=1)
    source_reliability: float = Field(0.5, ge=0, le=1)
    spread_velocity: float = Field(0.0, ge=0, le=1)
    toxicity: float = Field(0.0, ge=0, le=1)


class PersonInfo(DocumentModel):
    """Verified facts about a person connected to a claim."""

    name: str
    title: Optional[str] = None
    verified_facts: List[str] = Field(default_factory=list)
    relevant_news: Optional[str] = None


class ImageOrigin(DocumentModel):
    """Provenance findings for an attached image."""

    found: bool = False
    original_source: Optional[str] = None
    date_first_seen: Optional[str] = None
    previous_usage: List[str] = Field(default_factory=list)
    is_manipulated: bool = False
    manipulation_details: Optional[str] = None


class FactCheckHit(DocumentModel):
    """A prior fact-check of the same or a similar claim."""

    organization: str
    verdict: str = ""
    url: Optional[str] = None
    summary: Optional[str] = None


class WebSearchSummary(DocumentModel):
    """Web-research byproducts kept with the analysis for reference."""

    people_info: List[PersonInfo] = Field(default_factory=list)
    image_origin: Optional[ImageOrigin] = None
    fact_check_results: List[FactCheckHit] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class MentionPoint(DocumentModel):
    """One point of the mentions-over-time series."""

    t: datetime
    count: int = Field(0, ge=0)
    sources: int = Field(0, ge=0)
    engagement: float = Field(0.0, ge=0, le=1)
    trend: str = "stable"


class Charts(DocumentModel):
    """Chart series shown on the analysis dashboard."""

    risk_trend: List[float] = Field(default_factory=list)
    mentions_over_time: List[MentionPoint] = Field(default_factory=list)


class Analysis(DocumentModel):
    """Enrichment result for exactly one claim."""

    id: str = Field(default_factory=new_id, alias="_id")
    claim_id: str
    verdict: Verdict = Verdict.UNVERIFIED
    verdict_percentage: int = Field(50, ge=0, le=100)
    confidence: float = Field(0.0, ge=0, le=1)
    risk_score: float = Field(0.0, ge=0, le=1)
    rationale: str = ""
    key_findings: List[str] = Field(default_factory=list)
    features: Features = Field(default_factory=Features)
    sources: List[EvidenceSource] = Field(default_factory=list)
    web_search_results: Optional[WebSearchSummary] = None
    charts: Charts = Field(default_factory=Charts)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
