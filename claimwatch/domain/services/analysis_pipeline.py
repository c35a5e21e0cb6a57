"""Per-claim enrichment pipeline."""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import List, Optional

import numpy as np

from ..exceptions import AIProviderError, NotFoundError, PipelineError
from ..models.analysis import (
    Analysis,
    Charts,
    MentionPoint,
    Verdict,
    WebSearchSummary,
)
from ..models.audit_log import AuditAction, AuditLog, TargetType
from ..models.base import utcnow
from ..models.claim import Claim, ClaimStatus
from ..models.cluster import ChannelSpread, Cluster, GeoSpread
from ..ports.ai_provider import AIProvider, WebContextResult
from ..ports.event_publisher import REVIEW_TOPIC, EventPublisher
from ..ports.repositories import (
    AnalysisRepository,
    AuditLogRepository,
    ClaimRepository,
    ClusterRepository,
)
from .embedding_service import EmbeddingService
from .escalation_policy import should_escalate
from .feature_extractor import FeatureExtractor
from .risk_scorer import risk_score, verdict_percentage
from .similarity import SimilarityIndex
from .verdict_synthesizer import VerdictSynthesizer, source_reliability

logger = logging.getLogger(__name__)

TREND_POINTS = 12
TREND_INTERVAL = timedelta(hours=6)
RISK_TREND_HISTORY = [0.2, 0.35]


def default_mention_trends(
    rng: Optional[np.random.Generator] = None, now: Optional[datetime] = None
) -> List[MentionPoint]:
    """Synthetic 72-hour mention series at 6-hour intervals, oldest first."""
    rng = rng or np.random.default_rng()
    now = now or utcnow()
    points = []
    for i in range(TREND_POINTS - 1, -1, -1):
        base = int(rng.integers(30, 130))
        # the most recent points carry the spike
        factor = (4 - i) * 0.3 if i < 4 else 1.0
        mentions = int(base * factor + rng.random() * 50)
        points.append(
            MentionPoint(
                t=now - i * TREND_INTERVAL,
                count=max(10, mentions),
                sources=int(rng.integers(5, 25)),
                engagement=float(rng.random() * 0.5 + 0.3),
                trend=("rising" if rng.random() > 0.5 else "stable") if i < 8 else "stable",
            )
        )
    return points


def merge_web_context(rationale: str, web_context: Optional[WebContextResult]) -> str:
    """Append people, image-origin and warning sections to a rationale."""
    if web_context is None:
        return rationale

    if web_context.people_info:
        rationale += "\n\n**People Identified:**\n"
        for person in web_context.people_info:
            details = ". ".join(person.verified_facts) or person.relevant_news or ""
            rationale += f"• {person.name} ({person.title or 'Unknown role'}): {details}\n"

    origin = web_context.image_origin
    if origin is not None and origin.found:
        rationale += "\n\n**Image Analysis:**\n"
        rationale += f"Original source: {origin.original_source or 'Unknown'}\n"
        if origin.is_manipulated:
            rationale += f"⚠️ Manipulation detected: {origin.manipulation_details}\n"
        if origin.previous_usage:
            rationale += f"Previous usage: {', '.join(origin.previous_usage)}\n"

    if web_context.warnings:
        rationale += "\n\n**⚠️ Warnings:**\n"
        for warning in web_context.warnings:
            rationale += f"• {warning}\n"

    return rationale


class AnalysisPipeline:
    """Runs embedding, verdict, features, risk and escalation for one claim.

    Verdict, feature and persistence failures abort the run and restore the
    claim's previous status. Similarity hints, mention trends and cluster
    creation are best effort and only logged when they fail.
    """

    def __init__(
        self,
        claims: ClaimRepository,
        analyses: AnalysisRepository,
        clusters: ClusterRepository,
        audit_log: AuditLogRepository,
        embeddings: EmbeddingService,
        similarity: SimilarityIndex,
        verdicts: VerdictSynthesizer,
        features: FeatureExtractor,
        events: Optional[EventPublisher] = None,
        ai_provider: Optional[AIProvider] = None,
        similarity_threshold: float = 0.8,
        rng: Optional[np.random.Generator] = None,
    ):
        self._claims = claims
        self._analyses = analyses
        self._clusters = clusters
        self._audit = audit_log
        self._embeddings = embeddings
        self._similarity = similarity
        self._verdicts = verdicts
        self._features = features
        self._events = events
        self._ai = ai_provider
        self._similarity_threshold = similarity_threshold
        self._rng = rng or np.random.default_rng()

    async def analyze(self, claim_id: str, actor_id: Optional[str] = None) -> Analysis:
        """Run the full enrichment pipeline for one claim.

        Claim writes are field-level updates, so a reviewer escalating the
        claim while analysis runs keeps it ``escalated``.

        Args:
            claim_id: Claim to analyze
            actor_id: User who requested the run, recorded in the audit log

        Returns:
            The stored analysis

        Raises:
            NotFoundError: If the claim does not exist
            PipelineError: If verdict, features or persistence fail
        """
        claim = await self._claims.get(claim_id)
        if claim is None:
            raise NotFoundError("Claim", claim_id)

        logger.info(f"🔍 Analyzing claim {claim.id}: {claim.text[:60]}")
        previous_status = claim.status
        claim = await self._claims.update_status(claim.id, ClaimStatus.ANALYZING)

        if not claim.has_embedding:
            embedding = await self._embeddings.embed(claim.text, claim.language)
            claim = await self._claims.update(claim.id, {"embedding": embedding})

        hint = await self._cluster_hint(claim)

        try:
            analysis = await self._build_analysis(claim)
            analysis = await self._analyses.replace_for_claim(analysis)
        except Exception as e:
            logger.error(f"❌ Analysis pipeline failed for claim {claim.id}: {e}", exc_info=True)
            await self._claims.update_status(claim.id, previous_status, keep=(ClaimStatus.ESCALATED,), restore=True)
            raise PipelineError(claim.id, str(e)) from e

        cluster = await self._create_cluster(claim, analysis)
        cluster_id = hint or (cluster.id if cluster else claim.cluster_id)
        if cluster_id != claim.cluster_id:
            await self._claims.update(claim.id, {"cluster_id": cluster_id})
        claim = await self._claims.update_status(claim.id, ClaimStatus.ANALYZED, keep=(ClaimStatus.ESCALATED,))
        if claim.status == ClaimStatus.ESCALATED:
            logger.info(f"🚨 Claim {claim.id} was escalated during analysis; keeping it escalated")

        await self._audit.append(
            AuditLog(
                actor_id=actor_id,
                action=AuditAction.ANALYZE,
                target_type=TargetType.CLAIM,
                target_id=claim.id,
                metadata={"verdict": analysis.verdict.value, "riskScore": analysis.risk_score},
            )
        )
        logger.info(
            f"✅ Analysis completed for claim {claim.id}: verdict={analysis.verdict.value}, "
            f"confidence={analysis.confidence:.2f}, risk={analysis.risk_score:.2f}, sources={len(analysis.sources)}"
        )

        already_escalated = claim.status == ClaimStatus.ESCALATED
        if not already_escalated and should_escalate(
            analysis.risk_score, analysis.confidence, analysis.features.spread_velocity
        ):
            await self._auto_escalate(claim, analysis)

        return analysis

    async def _cluster_hint(self, claim: Claim) -> Optional[str]:
        try:
            return await self._similarity.cluster_hint(claim, self._similarity_threshold)
        except Exception as e:
            logger.warning(f"⚠️ Similarity stage failed for claim {claim.id}: {e}")
            return None

    async def _build_analysis(self, claim: Claim) -> Analysis:
        web_context = await self._verdicts.research(claim.text, claim.media_analysis)

        synthesized, features = await asyncio.gather(
            self._verdicts.synthesize(claim.text, web_context),
            self._features.extract(claim.text),
        )
        verdict = synthesized.result

        sources = await self._verdicts.collect_evidence(claim.text, verdict.verdict, web_context)
        features.source_reliability = source_reliability(sources)

        risk = risk_score(verdict.confidence, features.toxicity, features.spread_velocity)
        mentions = await self._mention_trends(claim.text, verdict.verdict)

        return Analysis(
            claim_id=claim.id,
            verdict=verdict.verdict,
            verdict_percentage=verdict_percentage(verdict.verdict),
            confidence=verdict.confidence,
            risk_score=risk,
            rationale=merge_web_context(verdict.rationale, web_context),
            key_findings=list(verdict.key_findings),
            features=features,
            sources=sources,
            web_search_results=self._web_summary(web_context),
            charts=Charts(risk_trend=RISK_TREND_HISTORY + [risk], mentions_over_time=mentions),
        )

    async def _mention_trends(self, text: str, verdict: Verdict) -> List[MentionPoint]:
        if self._ai is not None:
            try:
                points = await self._ai.generate_mention_trends(text, verdict)
                if points:
                    return [
                        MentionPoint(
                            t=point.timestamp,
                            count=point.mentions,
                            sources=point.sources,
                            engagement=point.engagement,
                            trend=point.trend,
                        )
                        for point in points
                    ]
            except AIProviderError as e:
                logger.warning(f"⚠️ Mention trend stage failed, using defaults: {e}")
        return default_mention_trends(self._rng)

    @staticmethod
    def _web_summary(web_context: Optional[WebContextResult]) -> Optional[WebSearchSummary]:
        if web_context is None:
            return None
        return WebSearchSummary(
            people_info=web_context.people_info,
            image_origin=web_context.image_origin,
            fact_check_results=web_context.fact_check_results,
            warnings=web_context.warnings,
        )

    async def _create_cluster(self, claim: Claim, analysis: Analysis) -> Optional[Cluster]:
        try:
            title = claim.text[:50] + ("..." if len(claim.text) > 50 else "")
            geo_spread = []
            if claim.geo is not None:
                geo_spread.append(
                    GeoSpread(
                        region=claim.geo.region,
                        country=claim.geo.country,
                        count=1,
                        lat=claim.geo.lat,
                        lng=claim.geo.lng,
                    )
                )
            cluster = Cluster(
                title=title,
                summary=analysis.rationale[:200],
                claim_ids=[claim.id],
                risk_score=analysis.risk_score,
                channel_spread=[ChannelSpread(platform=claim.source_type.value, count=1)],
                geo_spread=geo_spread,
                total_mentions=claim.mentions,
                tags=[analysis.verdict.value],
            )
            cluster = await self._clusters.add(cluster)
            logger.info(f"✅ Cluster {cluster.id} created for claim {claim.id}")
            return cluster
        except Exception as e:
            logger.warning(f"⚠️ Cluster creation failed for claim {claim.id}: {e}")
            return None

    async def _auto_escalate(self, claim: Claim, analysis: Analysis) -> None:
        await self._claims.update_status(claim.id, ClaimStatus.ESCALATED)
        await self._audit.append(
            AuditLog(
                actor_id=None,
                action=AuditAction.ESCALATE,
                target_type=TargetType.CLAIM,
                target_id=claim.id,
                metadata={"reason": "automatic", "riskScore": analysis.risk_score},
            )
        )
        logger.info(f"🚨 Claim {claim.id} escalated automatically (risk {analysis.risk_score:.2f})")
        if self._events is not None:
            await self._events.publish(
                REVIEW_TOPIC,
                {"event": "reviewRequested", "type": "claim", "id": claim.id, "reason": "automatic"},
            )
