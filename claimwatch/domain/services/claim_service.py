"""Claim ingestion, lookup and analysis scheduling."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import InvalidRequestError, NotFoundError, PipelineError
from ..models.analysis import Analysis
from ..models.audit_log import AuditAction, AuditLog, TargetType
from ..models.claim import Claim, ClaimStatus, GeoHint, MediaAnalysis, SourceType
from ..ports.event_publisher import EventPublisher, analysis_topic
from ..ports.repositories import AnalysisRepository, AuditLogRepository, ClaimRepository
from .analysis_pipeline import AnalysisPipeline
from .embedding_service import EmbeddingService
from .similarity import SimilarityIndex
from .task_runner import BackgroundTaskRunner

logger = logging.getLogger(__name__)


class ClaimService:
    """Creates claims and hands them to the analysis pipeline."""

    def __init__(
        self,
        claims: ClaimRepository,
        analyses: AnalysisRepository,
        audit_log: AuditLogRepository,
        embeddings: EmbeddingService,
        similarity: SimilarityIndex,
        pipeline: AnalysisPipeline,
        tasks: BackgroundTaskRunner,
        events: Optional[EventPublisher] = None,
        similarity_threshold: float = 0.8,
        auto_analyze: bool = True,
    ):
        self._claims = claims
        self._analyses = analyses
        self._audit = audit_log
        self._embeddings = embeddings
        self._similarity = similarity
        self._pipeline = pipeline
        self._tasks = tasks
        self._events = events
        self._similarity_threshold = similarity_threshold
        self._auto_analyze = auto_analyze

    async def create_claim(
        self,
        text: str,
        source_type: SourceType = SourceType.MANUAL,
        source_link: Optional[str] = None,
        language: str = "en",
        geo: Optional[GeoHint] = None,
        media_analysis: Optional[MediaAnalysis] = None,
        actor_id: Optional[str] = None,
    ) -> Claim:
        """Persist a new claim and schedule its analysis.

        Embedding generation never fails this call; a placeholder vector is
        stored when the provider is unavailable.

        Args:
            text: Claim text; surrounding whitespace is stripped
            source_type: Where the claim was collected
            source_link: Original URL, if any
            language: ISO language code
            geo: Approximate origin
            media_analysis: Image analysis attached by the client
            actor_id: Submitting user, recorded in the audit log

        Returns:
            The stored claim

        Raises:
            InvalidRequestError: If the text is blank
        """
        if not text or not text.strip():
            raise InvalidRequestError("Claim text is required", field="text")

        claim = Claim(
            text=text.strip(),
            source_type=source_type,
            source_link=source_link,
            language=language,
            geo=geo,
            media_analysis=media_analysis,
        )
        claim.embedding = await self._embeddings.embed(claim.text, claim.language)

        try:
            claim.cluster_id = await self._similarity.cluster_hint(claim, self._similarity_threshold)
        except Exception as e:
            logger.warning(f"⚠️ Similarity stage failed for new claim: {e}")

        claim = await self._claims.add(claim)
        await self._audit.append(
            AuditLog(
                actor_id=actor_id,
                action=AuditAction.CREATE,
                target_type=TargetType.CLAIM,
                target_id=claim.id,
                metadata={"sourceType": claim.source_type.value},
            )
        )
        logger.info(f"✅ Claim created: {claim.id}")

        if self._auto_analyze:
            self.schedule_analysis(claim.id)
        return claim

    def schedule_analysis(self, claim_id: str) -> None:
        """Run the pipeline in the background and announce the outcome."""
        self._tasks.submit(f"analysis:{claim_id}", self._analyze_and_publish(claim_id))

    async def _analyze_and_publish(self, claim_id: str) -> None:
        topic = analysis_topic(claim_id)
        try:
            analysis = await self._pipeline.analyze(claim_id)
        except (PipelineError, NotFoundError) as e:
            logger.error(f"❌ Background analysis failed for claim {claim_id}: {e}")
            await self._publish(topic, {"event": "analysisFailed", "claimId": claim_id, "error": str(e)})
            return
        await self._publish(
            topic,
            {
                "event": "analysisReady",
                "claimId": claim_id,
                "analysisId": analysis.id,
                "verdict": analysis.verdict.value,
                "riskScore": analysis.risk_score,
            },
        )

    async def _publish(self, topic: str, payload: Dict[str, Any]) -> None:
        if self._events is not None:
            await self._events.publish(topic, payload)

    async def get_claim(self, claim_id: str) -> Claim:
        claim = await self._claims.get(claim_id)
        if claim is None:
            raise NotFoundError("Claim", claim_id)
        return claim

    async def get_claim_with_analysis(self, claim_id: str) -> Tuple[Claim, Optional[Analysis]]:
        claim = await self.get_claim(claim_id)
        return claim, await self._analyses.get_for_claim(claim_id)

    async def get_analysis(self, claim_id: str) -> Analysis:
        """Stored analysis for a claim; raises ``NotFoundError`` when there is none."""
        analysis = await self._analyses.get_for_claim(claim_id)
        if analysis is None:
            raise NotFoundError("Analysis", claim_id)
        return analysis

    async def search_claims(
        self,
        query: str = "",
        source_type: Optional[SourceType] = None,
        language: Optional[str] = None,
        status: Optional[ClaimStatus] = None,
        limit: int = 20,
        skip: int = 0,
    ) -> Tuple[List[Claim], int]:
        """Search claims, newest first.

        Args:
            query: Case-insensitive substring matched against the claim text
            source_type: Only claims from this source
            language: Only claims in this language
            status: Only claims in this status
            limit: Page size
            skip: Number of matches to skip

        Returns:
            The page of claims and the total number of matches
        """
        if limit < 1 or skip < 0:
            raise InvalidRequestError("limit must be positive and skip non-negative", field="limit")
        return await self._claims.search(
            query=query, source_type=source_type, language=language, status=status, limit=limit, skip=skip
        )

    async def run_analysis(self, claim_id: str, actor_id: Optional[str] = None) -> Analysis:
        """Re-run the pipeline synchronously; replaces any prior analysis."""
        return await self._pipeline.analyze(claim_id, actor_id=actor_id)
