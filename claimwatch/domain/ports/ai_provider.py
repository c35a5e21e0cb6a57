"""Protocol and response types for AI providers.

Every AI call kind has its own tagged result type. Adapters must validate the
provider's JSON into these types at the boundary and raise ``AIResponseError``
when validation fails, so unvalidated payloads never reach the domain.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Protocol

from pydantic import Field, field_validator

from ..models.analysis import (
    EvidenceSource,
    FactCheckHit,
    ImageOrigin,
    PersonInfo,
    Sentiment,
    Verdict,
)
from ..models.base import DocumentModel
from ..models.claim import MediaAnalysis


class OutputType(str, Enum):
    """Formats of corrective messages."""

    WHATSAPP = "whatsapp"
    SMS = "sms"
    SOCIAL = "social"
    EXPLAINER = "explainer"


class VerdictResult(DocumentModel):
    """Structured verdict from any synthesis stage."""

    verdict: Verdict
    confidence: float = Field(..., ge=0, le=1)
    rationale: str = ""
    key_findings: List[str] = Field(default_factory=list)


class SentimentResult(DocumentModel):
    sentiment: Sentiment
    confidence: float = Field(0.5, ge=0, le=1)
    explanation: str = ""

    @field_validator("sentiment", mode="before")
    @classmethod
    def _unknown_is_neutral(cls, value):
        value = str(getattr(value, "value", value) or "").strip().lower()
        return value if value in {s.value for s in Sentiment} else Sentiment.NEUTRAL.value


class ToxicityResult(DocumentModel):
    toxicity_score: float = Field(..., ge=0, le=1)
    risk: str = "low"
    explanation: str = ""


class SpreadVelocityResult(DocumentModel):
    spread_velocity: float = Field(..., ge=0, le=1)
    viral_potential: str = "low"
    explanation: str = ""


class ManipulationResult(DocumentModel):
    manipulation_score: float = Field(..., ge=0, le=1)
    manipulation_type: str = "none"
    explanation: str = ""


class ClaimAssessment(DocumentModel):
    """Verdict produced during web-context research."""

    verdict: Verdict
    confidence: float = Field(..., ge=0, le=1)
    reasoning: str = ""
    key_evidence: List[str] = Field(default_factory=list)


class SearchHit(DocumentModel):
    """A search result gathered during web-context research."""

    title: str
    url: str = ""
    type: str = "news"
    reliability: str = "medium"
    snippet: Optional[str] = None
    date: Optional[str] = None
    verdict: Optional[str] = None


class WebContextResult(DocumentModel):
    """Outcome of researching a claim (and its image, if any)."""

    search_results: List[SearchHit] = Field(default_factory=list)
    people_info: List[PersonInfo] = Field(default_factory=list)
    image_origin: Optional[ImageOrigin] = None
    fact_check_results: List[FactCheckHit] = Field(default_factory=list)
    claim_analysis: Optional[ClaimAssessment] = None
    warnings: List[str] = Field(default_factory=list)


class MentionTrendPoint(DocumentModel):
    timestamp: datetime
    mentions: int = Field(..., ge=0)
    sources: int = Field(0, ge=0)
    engagement: float = Field(0.0, ge=0, le=1)
    trend: str = "stable"


class MetricRecommendation(DocumentModel):
    metrics: List[str] = Field(default_factory=list)
    reasoning: str = ""


class AIProvider(Protocol):
    """Protocol defining the interface for AI providers."""

    async def initialize(self) -> None:
        """Initialize the AI provider."""
        ...

    async def shutdown(self) -> None:
        """Clean up resources."""
        ...

    async def embed(self, text: str, language: str = "en") -> List[float]:
        """Convert text to a fixed-length vector."""
        ...

    async def research_claim(
        self, text: str, media: Optional[MediaAnalysis] = None
    ) -> WebContextResult:
        """Research a claim as if searching the web."""
        ...

    async def generate_verdict(self, text: str, evidence: List[EvidenceSource]) -> VerdictResult:
        """Judge a claim against candidate evidence."""
        ...

    async def analyze_sentiment(self, text: str) -> SentimentResult:
        ...

    async def analyze_toxicity(self, text: str) -> ToxicityResult:
        ...

    async def analyze_spread_velocity(self, text: str) -> SpreadVelocityResult:
        ...

    async def analyze_manipulation(self, text: str) -> ManipulationResult:
        ...

    async def generate_evidence_sources(self, text: str, verdict: Verdict) -> List[EvidenceSource]:
        """Produce plausible evidence sources supporting a verdict."""
        ...

    async def generate_mention_trends(self, text: str, verdict: Verdict) -> List[MentionTrendPoint]:
        """Estimate how mentions of the claim evolved over the past 72 hours."""
        ...

    async def generate_corrective_output(
        self, text: str, verdict: VerdictResult, output_type: OutputType
    ) -> str:
        """Write a corrective message in the requested format."""
        ...

    async def recommend_metrics(
        self, text: str, verdict: str, available_metrics: List[str], data_points: int
    ) -> MetricRecommendation:
        """Choose the chart metrics that best explain a claim."""
        ...

    @property
    def provider_name(self) -> str:
        ...

    @property
    def is_available(self) -> bool:
        ...

    @property
    def capabilities(self) -> Dict[str, bool]:
        ...
