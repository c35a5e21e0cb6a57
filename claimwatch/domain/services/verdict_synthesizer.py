"""Verdict synthesis and evidence collection.

Verdicts come from a strictly ordered chain of strategies:

1. the claim assessment produced by web-context research, used verbatim;
2. an LLM verdict over locally retrieved candidate evidence;
3. a rule-based matcher that needs no external service.

The chain always yields a verdict and never raises to the caller.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Sequence, Tuple

from ..exceptions import AIProviderError
from ..models.analysis import EvidenceSource, Reliability, Verdict
from ..models.claim import MediaAnalysis
from ..ports.ai_provider import AIProvider, VerdictResult, WebContextResult

logger = logging.getLogger(__name__)

WEB_CONTEXT_STAGE = "web_context"
LLM_STAGE = "llm"
RULE_STAGE = "rules"

MANIPULATION_TEXT_LIMIT = 150

FACT_CHECK_CORPUS: List[EvidenceSource] = [
    EvidenceSource(
        type="fact-check",
        title="Verified: Common vaccine claims",
        url="https://example-factcheck.org/vaccines",
        reliability=Reliability.HIGH,
        snippet="Vaccines have been extensively studied and shown to be safe and effective.",
    ),
    EvidenceSource(
        type="fact-check",
        title="Debunking election fraud myths",
        url="https://example-factcheck.org/elections",
        reliability=Reliability.HIGH,
        snippet="Election fraud is rare and investigated by election officials.",
    ),
    EvidenceSource(
        type="news",
        title="Health official responds to misinformation",
        url="https://example-news.org/health",
        reliability=Reliability.MEDIUM,
        snippet="Health authorities address misconceptions about disease transmission.",
    ),
    EvidenceSource(
        type="research",
        title="Scientific study on claim verification",
        url="https://example-research.org/study",
        reliability=Reliability.HIGH,
        snippet="Peer-reviewed research confirms safety protocols.",
    ),
]


@dataclass(frozen=True)
class KnownFalseClaim:
    """A debunked narrative recognized by all of its keywords."""

    keywords: Tuple[str, ...]
    confidence: float
    reason: str


KNOWN_FALSE_CLAIMS: List[KnownFalseClaim] = [
    KnownFalseClaim(
        ("earth", "flat"), 0.95,
        "The Earth is an oblate spheroid, confirmed by centuries of scientific evidence and satellite imagery.",
    ),
    KnownFalseClaim(
        ("vaccine", "autism"), 0.95,
        "The original study claiming this link was fraudulent and retracted. "
        "Millions of vaccinations show no connection to autism.",
    ),
    KnownFalseClaim(
        ("moon", "fake", "landing"), 0.9,
        "Moon landings are well-documented historical events confirmed by multiple independent "
        "sources and lunar exploration.",
    ),
    KnownFalseClaim(
        ("5g", "covid"), 0.95,
        "COVID-19 is caused by a virus (SARS-CoV-2), not by 5G networks. 5G cannot transmit viruses.",
    ),
    KnownFalseClaim(
        ("lizard", "government"), 0.85,
        "There is no scientific evidence for reptilians or shapeshifters in government.",
    ),
    KnownFalseClaim(
        ("reptilian", "government"), 0.85,
        "There is no scientific evidence for reptilians or shapeshifters in government.",
    ),
    KnownFalseClaim(
        ("chemtrails",), 0.8,
        "Contrails are normal water vapor condensation from aircraft engines, not chemical spraying.",
    ),
]

FALSE_PATTERNS: List[Tuple[Pattern, float]] = [
    (re.compile(r"earth\s+is\s+flat"), 0.95),
    (re.compile(r"vaccines?\s+(cause|kill)"), 0.9),
    (re.compile(r"earth\s+.{0,20}?(bigger|larger|greater)\s+.{0,20}?sun"), 0.95),
    (re.compile(r"sun\s+.{0,20}?(smaller|less)\s+.{0,20}?earth"), 0.95),
]

MANIPULATION_PATTERNS: List[Pattern] = [
    re.compile(r"they don'?t want you to know"),
    re.compile(r"do your own research"),
    re.compile(r"wake up,?\s+people"),
    re.compile(r"the truth is hidden"),
    re.compile(r"the government is hiding"),
]

TRUE_PATTERNS: List[Tuple[Pattern, float]] = [
    (re.compile(r"water\s+is\s+h2o"), 0.95),
    (re.compile(r"earth\s+orbits?\s+(the\s+)?sun"), 0.95),
    (re.compile(r"gravity\s+.{0,20}?exists?"), 0.9),
]

UNIT_CONVERSION = re.compile(
    r"(\d+)\s+(second|minute|hour|day|week|month)s?\s+in\s+(?:a|an|one)\s+(minute|hour|day|week|month|year)"
)

# Valid counts of the smaller unit per larger unit
UNIT_COUNTS: Dict[Tuple[str, str], Tuple[int, ...]] = {
    ("second", "minute"): (60,),
    ("minute", "hour"): (60,),
    ("hour", "day"): (24,),
    ("day", "week"): (7,),
    ("day", "month"): (28, 29, 30, 31),
    ("day", "year"): (365, 366),
    ("week", "year"): (52,),
    ("month", "year"): (12,),
}

DEFAULT_SOURCES: Dict[Verdict, List[EvidenceSource]] = {
    Verdict.TRUE: [
        EvidenceSource(
            type="research", title="Scientific consensus confirms this claim",
            url="https://example-research.org/findings", reliability=Reliability.HIGH,
            snippet="Multiple peer-reviewed studies support this statement. Evidence is consistent across independent researchers.",
        ),
        EvidenceSource(
            type="fact-check", title="Verified by independent fact-checkers",
            url="https://example-factcheck.org/verified", reliability=Reliability.HIGH,
            snippet="This claim has been verified by multiple independent fact-checking organizations.",
        ),
        EvidenceSource(
            type="news", title="Credible news sources report",
            url="https://example-news.org/story", reliability=Reliability.MEDIUM,
            snippet="Established news organizations have reported and confirmed the facts in this claim.",
        ),
    ],
    Verdict.FALSE: [
        EvidenceSource(
            type="fact-check", title="Debunked by fact-checkers",
            url="https://example-factcheck.org/debunked", reliability=Reliability.HIGH,
            snippet="Multiple fact-checking organizations have determined this claim to be false with evidence.",
        ),
        EvidenceSource(
            type="research", title="Scientific evidence contradicts this",
            url="https://example-research.org/contradicts", reliability=Reliability.HIGH,
            snippet="Peer-reviewed scientific research shows this claim is not supported by evidence.",
        ),
        EvidenceSource(
            type="academic", title="Academic sources dispute this claim",
            url="https://example-academic.org/paper", reliability=Reliability.HIGH,
            snippet="Academic institutions and researchers have published findings that contradict this statement.",
        ),
    ],
    Verdict.MIXED: [
        EvidenceSource(
            type="research", title="Partially supported by research",
            url="https://example-research.org/mixed", reliability=Reliability.HIGH,
            snippet="Some aspects of this claim are supported by evidence while others are disputed.",
        ),
        EvidenceSource(
            type="fact-check", title="Mixed verdict from fact-checkers",
            url="https://example-factcheck.org/mixed", reliability=Reliability.HIGH,
            snippet="Fact-checkers have found parts of this claim to be true and parts to be false.",
        ),
        EvidenceSource(
            type="news", title="News coverage shows complexity",
            url="https://example-news.org/complex", reliability=Reliability.MEDIUM,
            snippet="News reports indicate this topic is more nuanced than the original claim suggests.",
        ),
    ],
    Verdict.UNVERIFIED: [
        EvidenceSource(
            type="research", title="Insufficient evidence to verify",
            url="https://example-research.org/unverified", reliability=Reliability.MEDIUM,
            snippet="Research on this topic is limited and does not provide conclusive evidence either way.",
        ),
        EvidenceSource(
            type="academic", title="Further research needed",
            url="https://example-academic.org/investigation", reliability=Reliability.MEDIUM,
            snippet="Academics note that this claim requires further investigation and more data to verify.",
        ),
        EvidenceSource(
            type="fact-check", title="Remains unverified by fact-checkers",
            url="https://example-factcheck.org/unverified", reliability=Reliability.MEDIUM,
            snippet="Fact-checking organizations have determined there is insufficient evidence to verify or debunk this claim.",
        ),
    ],
}


def retrieve_candidate_evidence(text: str, limit: int = 3) -> List[EvidenceSource]:
    """Keyword-match the claim against the built-in fact-check corpus."""
    keywords = [word for word in text.lower().split() if word]
    matches = []
    for source in FACT_CHECK_CORPUS:
        haystack = f"{source.title} {source.snippet or ''}".lower()
        if any(keyword in haystack for keyword in keywords):
            matches.append(source.model_copy())
    return matches[:limit]


def default_sources(verdict: Verdict) -> List[EvidenceSource]:
    """Built-in evidence set for a verdict class."""
    sources = DEFAULT_SOURCES.get(verdict, DEFAULT_SOURCES[Verdict.UNVERIFIED])
    return [source.model_copy() for source in sources]


def _check_unit_conversion(text: str) -> Optional[VerdictResult]:
    match = UNIT_CONVERSION.search(text)
    if not match:
        return None

    count, small, large = int(match.group(1)), match.group(2), match.group(3)
    valid = UNIT_COUNTS.get((small, large))
    if valid is None:
        return None

    if count in valid:
        return VerdictResult(
            verdict=Verdict.TRUE,
            confidence=0.9,
            rationale=f"There are {'/'.join(str(v) for v in valid)} {small}s in a {large}.",
            key_findings=["Consistent with standard unit definitions"],
        )
    return VerdictResult(
        verdict=Verdict.FALSE,
        confidence=0.9,
        rationale=(
            f"This statement contradicts established facts: a {large} has "
            f"{'/'.join(str(v) for v in valid)} {small}s, not {count}."
        ),
        key_findings=["Factually incorrect statement", "Contradicted by standard unit definitions"],
    )


def rule_based_verdict(text: str) -> VerdictResult:
    """Deterministic verdict from curated keyword sets and patterns."""
    lowered = text.lower()

    for rule in KNOWN_FALSE_CLAIMS:
        if all(keyword in lowered for keyword in rule.keywords):
            return VerdictResult(
                verdict=Verdict.FALSE,
                confidence=rule.confidence,
                rationale=rule.reason,
                key_findings=["Matches known debunked claim", "Scientific consensus contradicts this"],
            )

    unit_verdict = _check_unit_conversion(lowered)
    if unit_verdict is not None:
        return unit_verdict

    for pattern, confidence in FALSE_PATTERNS:
        if pattern.search(lowered):
            return VerdictResult(
                verdict=Verdict.FALSE,
                confidence=confidence,
                rationale="This statement contradicts established scientific facts and evidence.",
                key_findings=["Factually incorrect statement", "Contradicted by reliable sources"],
            )

    # Short texts leaning on conspiracy framing are treated as likely false
    if len(lowered) < MANIPULATION_TEXT_LIMIT and any(p.search(lowered) for p in MANIPULATION_PATTERNS):
        return VerdictResult(
            verdict=Verdict.FALSE,
            confidence=0.6,
            rationale="This claim uses common conspiracy theory language without credible evidence.",
            key_findings=["Employs manipulation tactics", "Lacks supporting evidence"],
        )

    for pattern, confidence in TRUE_PATTERNS:
        if pattern.search(lowered):
            return VerdictResult(
                verdict=Verdict.TRUE,
                confidence=confidence,
                rationale="This statement is supported by established scientific evidence.",
                key_findings=["Consistent with scientific consensus", "Backed by credible sources"],
            )

    return VerdictResult(
        verdict=Verdict.UNVERIFIED,
        confidence=0.5,
        rationale=f'Analysis of "{text[:50]}..." requires additional sources and expert review.',
        key_findings=["Unable to verify with available sources", "Recommend manual review"],
    )


@dataclass
class SynthesizedVerdict:
    """Verdict plus the stage that produced it."""

    result: VerdictResult
    stage: str


class VerdictSynthesizer:
    """Runs the verdict fallback chain and merges evidence sources."""

    def __init__(self, ai_provider: Optional[AIProvider] = None):
        self._ai = ai_provider

    async def research(self, text: str, media: Optional[MediaAnalysis] = None) -> Optional[WebContextResult]:
        """Best-effort web-context research; ``None`` when unavailable."""
        if self._ai is None:
            return None
        try:
            context = await self._ai.research_claim(text, media)
            logger.info(
                f"🌐 Web context gathered: {len(context.search_results)} results, "
                f"{len(context.people_info)} people, verdict={context.claim_analysis.verdict.value if context.claim_analysis else None}"
            )
            return context
        except AIProviderError as e:
            logger.warning(f"⚠️ Web-context stage failed: {e}")
            return None

    async def synthesize(self, text: str, web_context: Optional[WebContextResult] = None) -> SynthesizedVerdict:
        """Produce a verdict; never raises.

        Stages run in order until one yields a verdict: the web-context
        assessment, the chat model, then the local rules.

        Args:
            text: Claim text
            web_context: Research result, if any

        Returns:
            The verdict and the stage that produced it
        """
        if web_context is not None and web_context.claim_analysis is not None:
            assessment = web_context.claim_analysis
            logger.info(f"🌐 Using web-context verdict: {assessment.verdict.value} ({assessment.confidence:.2f})")
            return SynthesizedVerdict(
                result=VerdictResult(
                    verdict=assessment.verdict,
                    confidence=assessment.confidence,
                    rationale=assessment.reasoning,
                    key_findings=list(assessment.key_evidence),
                ),
                stage=WEB_CONTEXT_STAGE,
            )

        if self._ai is not None:
            try:
                result = await self._ai.generate_verdict(text, retrieve_candidate_evidence(text))
                logger.info(f"🤖 LLM verdict generated: {result.verdict.value}")
                return SynthesizedVerdict(result=result, stage=LLM_STAGE)
            except AIProviderError as e:
                logger.warning(f"⚠️ LLM verdict stage failed, falling back to rules: {e}")
        else:
            logger.info("🧮 No AI provider configured, using rule-based verdict")

        return SynthesizedVerdict(result=rule_based_verdict(text), stage=RULE_STAGE)

    async def collect_evidence(
        self,
        text: str,
        verdict: Verdict,
        web_context: Optional[WebContextResult] = None,
    ) -> List[EvidenceSource]:
        """Web results, then fact-check hits, then AI sources, then defaults."""
        sources: List[EvidenceSource] = []

        if web_context is not None:
            for hit in web_context.search_results:
                sources.append(
                    EvidenceSource(
                        type=hit.type,
                        title=hit.title,
                        url=hit.url,
                        reliability=hit.reliability,
                        snippet=hit.snippet or hit.verdict,
                        date=hit.date,
                    )
                )
            for fact_check in web_context.fact_check_results:
                sources.append(
                    EvidenceSource(
                        type="fact-check",
                        title=f"{fact_check.organization}: {fact_check.verdict}",
                        url=fact_check.url or "https://factcheck.org",
                        reliability=Reliability.HIGH,
                        snippet=fact_check.summary,
                    )
                )

        if not sources and self._ai is not None:
            try:
                sources = list(await self._ai.generate_evidence_sources(text, verdict))
            except AIProviderError as e:
                logger.warning(f"⚠️ Evidence generation stage failed, using defaults: {e}")

        if not sources:
            sources = default_sources(verdict)
        return sources


def source_reliability(sources: Sequence[EvidenceSource]) -> float:
    """Aggregate reliability feature for a set of evidence sources."""
    return 0.85 if any(s.reliability == Reliability.HIGH for s in sources) else 0.6
