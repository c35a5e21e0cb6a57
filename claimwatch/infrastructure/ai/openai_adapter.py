"""OpenAI implementation of the AI provider interface."""

import asyncio
import json
import logging
import re
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type, TypeVar

import httpx
from cachetools import TTLCache
from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    RateLimitError,
)
from pydantic import BaseModel, Field, ValidationError

from ...domain.exceptions import AIProviderError, AIResponseError
from ...domain.models.analysis import EvidenceSource, Verdict
from ...domain.models.claim import MediaAnalysis
from ...domain.ports.ai_provider import (
    AIProvider,
    ManipulationResult,
    MentionTrendPoint,
    MetricRecommendation,
    OutputType,
    SentimentResult,
    SpreadVelocityResult,
    ToxicityResult,
    VerdictResult,
    WebContextResult,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")


class OpenAIConfig(BaseModel):
    """Configuration for OpenAI adapter."""

    api_key: str = Field(..., description="OpenAI API key")
    base_url: str = Field(default="https://api.openai.com/v1", description="API base URL")
    chat_model: str = Field(default="gpt-3.5-turbo", description="Model for verdicts, features and outputs")
    research_model: str = Field(default="gpt-4o", description="Model for web-context research")
    embedding_model: str = Field(default="text-embedding-3-small", description="Embedding model")
    embedding_dimension: int = Field(default=1536, description="Expected embedding length")
    timeout: float = Field(default=30.0, description="Default API timeout in seconds")
    embedding_timeout: float = Field(default=15.0, description="Embedding request timeout in seconds")
    feature_timeout: float = Field(default=15.0, description="Feature scoring timeout in seconds")
    research_timeout: float = Field(default=90.0, description="Web-context research timeout in seconds")
    max_concurrent_calls: int = Field(default=3, description="Maximum requests in flight")
    retries: int = Field(default=3, description="Embedding attempts before giving up")
    retry_base_delay: float = Field(default=0.5, description="Backoff base delay in seconds")
    rate_limit_base_delay: float = Field(default=3.0, description="Backoff base delay after HTTP 429")
    cache_ttl: int = Field(default=3600, description="Web-context cache TTL in seconds")
    cache_maxsize: int = Field(default=256, description="Maximum cached web-context results")
    verify_on_initialize: bool = Field(default=False, description="Send a test request on initialize")


def extract_json(content: Optional[str], array: bool = False) -> Any:
    """Parse the first JSON object (or array) embedded in a model reply."""
    if not content:
        raise AIResponseError("Empty response from model")
    match = (_ARRAY_PATTERN if array else _OBJECT_PATTERN).search(content)
    if not match:
        raise AIResponseError(f"No JSON {'array' if array else 'object'} found in response")
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise AIResponseError(f"Malformed JSON in response: {e}") from e


def parse_as(model: Type[T], data: Any) -> T:
    """Validate provider JSON into a tagged result type."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise AIResponseError(f"{model.__name__} validation failed: {e.error_count()} errors") from e


def _is_retryable(error: Exception) -> bool:
    if isinstance(error, (APITimeoutError, APIConnectionError, RateLimitError)):
        return True
    return isinstance(error, APIStatusError) and error.status_code >= 500


RESEARCH_SYSTEM_PROMPT = """You are a fact-checking research assistant with access to comprehensive knowledge. When given a claim or image description, provide thorough research as if you searched the internet.

Your task:
1. IDENTIFY the subject (people, events, organizations mentioned)
2. PROVIDE verified facts about these subjects from reliable sources
3. CHECK if this claim/image matches known events or is potentially fake/manipulated
4. FIND any previous fact-checks of similar claims
5. LOOK for the original source of the image/claim if possible

Respond in JSON format:
{
  "searchResults": [{"title": "...", "url": "...", "type": "news|fact-check|official|academic|social", "reliability": "high|medium|low", "snippet": "...", "date": "...", "verdict": "..."}],
  "peopleInfo": [{"name": "...", "title": "...", "verifiedFacts": ["..."], "relevantNews": "..."}],
  "imageOrigin": {"found": true, "originalSource": "...", "dateFirstSeen": "...", "previousUsage": ["..."], "isManipulated": false, "manipulationDetails": "..."},
  "factCheckResults": [{"organization": "...", "verdict": "...", "url": "...", "summary": "..."}],
  "claimAnalysis": {"verdict": "true|false|misleading|unverified|satire|out-of-context", "confidence": 0.0, "reasoning": "...", "keyEvidence": ["..."]},
  "warnings": ["..."]
}"""

VERDICT_PROMPT = """You are a fact-checking assistant. Analyze the following claim against the provided evidence sources and provide a structured verdict.

Claim: "{claim}"

Evidence Sources:
{sources}

Provide a JSON response with:
{{
  "verdict": "true" | "false" | "mixed" | "unverified",
  "confidence": 0.0-1.0,
  "rationale": "Brief explanation (2-3 sentences)",
  "keyFindings": ["bullet point 1", "bullet point 2"]
}}"""

SENTIMENT_PROMPT = (
    "Analyze the sentiment of the given claim. Return a JSON with sentiment (one of: fear, anger, neutral, "
    "hope, sadness, confusion, surprise, disgust, trust), confidence (0-1), and brief explanation. "
    "You MUST respond with valid JSON."
)
TOXICITY_PROMPT = (
    "Analyze the toxicity level of the given text. Return a JSON with toxicityScore (0-1), risk (low/medium/high), "
    "and brief explanation. Consider harmful language, hate speech, violence, and offensive content."
)
SPREAD_PROMPT = (
    "Analyze the viral spread potential of the given claim. Return a JSON with spreadVelocity (0-1), "
    "viralPotential (low/medium/high), and explanation. Consider sensational language, urgency, emotional "
    "triggers, and shareability."
)
MANIPULATION_PROMPT = (
    "Analyze the manipulation and propaganda tactics in the given claim. Return a JSON with manipulationScore (0-1), "
    "manipulationType (none/fear-mongering/conspiracy/misleading/other), and explanation. Identify propaganda "
    "patterns and misleading framing."
)

EVIDENCE_PROMPT = """You are a fact-checking research assistant. Generate 3-4 realistic evidence sources that support a fact-check verdict.

Return a JSON array with this exact format:
[
  {
    "type": "fact-check" | "news" | "research" | "academic",
    "title": "Source title",
    "url": "https://example.com/path",
    "reliability": "high" | "medium" | "low",
    "snippet": "2-3 sentence excerpt that relates to the claim"
  }
]

Make the sources credible and relevant to the claim. Use realistic URLs but they don't need to actually exist."""

TRENDS_PROMPT = """You are analyzing misinformation spread patterns. Generate realistic mention count trends for a claim over the past 72 hours.

Return a JSON array with 12 data points spaced over the past 72 hours.
Format: [
  {
    "timestamp": "ISO 8601 timestamp",
    "mentions": number,
    "sources": number,
    "engagement": number (0-1),
    "trend": "rising" | "stable" | "falling"
  }
]

Consider:
- For FALSE claims: Show a spike when first posted, then decline as fact-checkers respond
- For TRUE claims: Steady mentions or gradual rise as awareness spreads
- For MIXED claims: Volatile pattern with conflicting coverage
- For UNVERIFIED: Uncertain early spike, then plateau"""

OUTPUT_GUIDELINES: Dict[OutputType, str] = {
    OutputType.WHATSAPP: (
        "Create a WhatsApp-friendly fact-check message for sharing.\n"
        "Guidelines:\n- Maximum 1024 characters\n- Use emojis appropriately (✓✗⚠️📍)\n"
        "- Make it shareable and easy to understand\n- Include a clear correction and why it matters\n"
        "- Start with a hook that catches attention\n- Be conversational and friendly"
    ),
    OutputType.SMS: (
        "Create a concise SMS fact-check message.\n"
        "Guidelines:\n- Maximum 160 characters (SMS limit)\n- Clear and direct\n- No emojis (SMS compatibility)\n"
        "- Include verdict clearly\n- End with a fact-check resource link reference"
    ),
    OutputType.SOCIAL: (
        "Create a compelling Twitter/X-style post.\n"
        "Guidelines:\n- Maximum 280 characters (X/Twitter limit)\n- Engaging and shareable\n"
        "- Include relevant emojis\n- Use hashtags if appropriate (#FactCheck)\n- Clear correction of misinformation"
    ),
    OutputType.EXPLAINER: (
        "Write a comprehensive blog-style explainer about this fact-check.\n"
        "- Start with \"The Claim\" section summarizing the information\n"
        "- Provide \"The Facts\" section with evidence\n- Explain \"Why This Matters\" for the audience\n"
        "- Use clear, accessible language\n- Be 200-300 words in length\n- End with actionable takeaways"
    ),
}

OUTPUT_MAX_TOKENS: Dict[OutputType, int] = {
    OutputType.WHATSAPP: 800,
    OutputType.SMS: 300,
    OutputType.SOCIAL: 500,
    OutputType.EXPLAINER: 1000,
}


class OpenAIAdapter(AIProvider):
    """OpenAI implementation of the AI provider interface.

    Every request passes through one shared semaphore, so at most
    ``max_concurrent_calls`` requests are in flight and the rest wait in FIFO
    order. SDK-level retries are disabled; embeddings retry here with
    exponential backoff and chat calls fail fast so callers can fall back.
    """

    def __init__(
        self,
        config: Optional[OpenAIConfig] = None,
        client: Optional[AsyncOpenAI] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._config = config or OpenAIConfig(api_key="")
        self._client = client
        self._http_client: Optional[httpx.AsyncClient] = None
        self._owns_client = client is None
        self._sleep = sleep
        self._semaphore = asyncio.Semaphore(self._config.max_concurrent_calls)
        self._cache = TTLCache(maxsize=self._config.cache_maxsize, ttl=self._config.cache_ttl)
        self._initialized = client is not None

    async def initialize(self) -> None:
        """Create the API client and optionally verify access."""
        try:
            if self._client is None:
                self._http_client = httpx.AsyncClient(timeout=self._config.timeout)
                self._client = AsyncOpenAI(
                    api_key=self._config.api_key,
                    base_url=self._config.base_url,
                    http_client=self._http_client,
                    max_retries=0,
                )

            if self._config.verify_on_initialize:
                await self._client.chat.completions.create(
                    model=self._config.chat_model,
                    messages=[{"role": "system", "content": "Test connection"}],
                    max_tokens=5,
                )
            self._initialized = True
            logger.info(f"✅ OpenAI provider ready (chat={self._config.chat_model}, embeddings={self._config.embedding_model})")
        except Exception as e:
            self._initialized = False
            await self.shutdown()
            raise ConnectionError(f"Failed to initialize OpenAI provider: {e}")

    async def shutdown(self) -> None:
        """Clean up resources and shut down the provider."""
        if self._owns_client:
            if self._client is not None:
                await self._client.close()
                self._client = None
            if self._http_client is not None:
                await self._http_client.aclose()
                self._http_client = None
        self._initialized = False

    async def _request(self, operation: str, call: Callable[[], Awaitable[Any]], attempts: int = 1) -> Any:
        """Run ``call`` under the concurrency gate with bounded retries."""
        if self._client is None:
            raise AIProviderError("Provider not initialized")

        for attempt in range(attempts):
            try:
                async with self._semaphore:
                    return await call()
            except Exception as e:
                if isinstance(e, AIProviderError):
                    raise
                if not _is_retryable(e):
                    if isinstance(e, APIStatusError):
                        raise AIProviderError(f"{operation} rejected with HTTP {e.status_code}: {e}") from e
                    raise AIProviderError(f"{operation} failed: {e}") from e

                rate_limited = isinstance(e, RateLimitError)
                if attempt == attempts - 1:
                    raise AIProviderError(f"{operation} failed after {attempts} attempts: {e}") from e

                base = self._config.rate_limit_base_delay if rate_limited else self._config.retry_base_delay
                delay = (2 ** attempt) * base
                logger.warning(
                    f"⚠️ {operation} attempt {attempt + 1} failed ({type(e).__name__}), retrying in {delay:.1f}s"
                )
                await self._sleep(delay)

    async def _chat(
        self,
        operation: str,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 500,
        timeout: Optional[float] = None,
    ) -> str:
        async def call():
            return await self._client.chat.completions.create(
                model=model or self._config.chat_model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                timeout=timeout or self._config.timeout,
            )

        response = await self._request(operation, call)
        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise AIResponseError(f"{operation} returned no choices") from e
        return (content or "").strip()

    async def embed(self, text: str, language: str = "en") -> List[float]:
        """Embed text; the model handles all languages natively."""
        async def call():
            return await self._client.embeddings.create(
                model=self._config.embedding_model,
                input=text,
                timeout=self._config.embedding_timeout,
            )

        response = await self._request("Embedding", call, attempts=self._config.retries)
        vector = list(response.data[0].embedding) if response.data else []
        if not vector:
            raise AIResponseError("Embedding response was empty")
        logger.info(f"✅ Embedding generated ({len(vector)} dimensions)")
        return vector

    async def research_claim(self, text: str, media: Optional[MediaAnalysis] = None) -> WebContextResult:
        """Research a claim on the web with the research model.

        Results are cached per claim text and image for ``cache_ttl`` seconds.

        Args:
            text: Claim text
            media: Image analysis attached to the claim

        Returns:
            Structured web context

        Raises:
            AIProviderError: If the request fails
            AIResponseError: If the response is not valid web context JSON
        """
        cache_key = f"research:{text}:{media.image_path if media else ''}"
        if cache_key in self._cache:
            logger.info("📦 Web context served from cache")
            return self._cache[cache_key]

        search_context = text
        people = media.identified_people if media else []
        if people:
            search_context = f"{', '.join(people)}: {text}"
        if media and media.scene.event:
            search_context += f" Event: {media.scene.event}"

        lines = [
            "Research this claim/image thoroughly as if searching the internet:",
            "",
            f"CLAIM/DESCRIPTION: {search_context}",
        ]
        if people:
            lines.append(f"IDENTIFIED PEOPLE: {', '.join(people)}")
        if media:
            if media.image_description:
                lines.append(f"IMAGE SHOWS: {media.image_description}")
            if media.extracted_text:
                lines.append(f"TEXT IN IMAGE: {media.extracted_text}")
            if media.scene.location:
                lines.append(f"LOCATION: {media.scene.location}")
        lines.append(
            "\nSearch for: who the people are, whether this is from a real event, prior fact-checks, "
            "whether the image is original or manipulated, and what reliable sources say."
        )

        logger.info(f"🔍 Researching web context: {search_context[:100]}")
        content = await self._chat(
            "Web-context research",
            [
                {"role": "system", "content": RESEARCH_SYSTEM_PROMPT},
                {"role": "user", "content": "\n".join(lines)},
            ],
            model=self._config.research_model,
            temperature=0.2,
            max_tokens=2000,
            timeout=self._config.research_timeout,
        )
        result = parse_as(WebContextResult, extract_json(content))
        self._cache[cache_key] = result
        return result

    async def generate_verdict(self, text: str, evidence: List[EvidenceSource]) -> VerdictResult:
        """Ask the chat model for a verdict on ``text`` given candidate evidence.

        Args:
            text: Claim text
            evidence: Candidate sources listed in the prompt

        Returns:
            Validated verdict
        """
        sources = "\n".join(
            f"- {s.title} ({s.reliability.value}): {s.snippet or s.url}" for s in evidence
        ) or "- none"
        content = await self._chat(
            "Verdict generation",
            [{"role": "user", "content": VERDICT_PROMPT.format(claim=text, sources=sources)}],
            temperature=0.5,
            max_tokens=500,
        )
        return parse_as(VerdictResult, extract_json(content))

    async def _score(self, operation: str, system_prompt: str, user_prompt: str, model: Type[T]) -> T:
        content = await self._chat(
            operation,
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=0.3,
            max_tokens=100,
            timeout=self._config.feature_timeout,
        )
        return parse_as(model, extract_json(content))

    async def analyze_sentiment(self, text: str) -> SentimentResult:
        return await self._score("Sentiment analysis", SENTIMENT_PROMPT, f'Analyze sentiment: "{text}"', SentimentResult)

    async def analyze_toxicity(self, text: str) -> ToxicityResult:
        return await self._score("Toxicity analysis", TOXICITY_PROMPT, f'Analyze toxicity: "{text}"', ToxicityResult)

    async def analyze_spread_velocity(self, text: str) -> SpreadVelocityResult:
        return await self._score(
            "Spread velocity analysis", SPREAD_PROMPT, f'Analyze spread velocity: "{text}"', SpreadVelocityResult
        )

    async def analyze_manipulation(self, text: str) -> ManipulationResult:
        return await self._score(
            "Manipulation analysis", MANIPULATION_PROMPT, f'Analyze manipulation tactics: "{text}"', ManipulationResult
        )

    async def generate_evidence_sources(self, text: str, verdict: Verdict) -> List[EvidenceSource]:
        content = await self._chat(
            "Evidence generation",
            [
                {"role": "system", "content": EVIDENCE_PROMPT},
                {
                    "role": "user",
                    "content": (
                        f'Generate evidence sources for this claim and verdict:\n\nClaim: "{text}"\n'
                        f"Verdict: {verdict.value}\n\nGenerate sources that SUPPORT this verdict."
                    ),
                },
            ],
            temperature=0.7,
            max_tokens=800,
            timeout=20.0,
        )
        items = extract_json(content, array=True)
        if not isinstance(items, list):
            raise AIResponseError("Evidence sources must be a JSON array")
        return [parse_as(EvidenceSource, item) for item in items]

    async def generate_mention_trends(self, text: str, verdict: Verdict) -> List[MentionTrendPoint]:
        content = await self._chat(
            "Mention trend generation",
            [
                {"role": "system", "content": TRENDS_PROMPT},
                {
                    "role": "user",
                    "content": (
                        f'Generate mention trends for this claim:\n\nClaim: "{text}"\nVerdict: {verdict.value}\n\n'
                        "Generate 12 data points over the past 72 hours. Base the pattern on the verdict type."
                    ),
                },
            ],
            temperature=0.6,
            max_tokens=1000,
            timeout=20.0,
        )
        items = extract_json(content, array=True)
        if not isinstance(items, list):
            raise AIResponseError("Mention trends must be a JSON array")
        points = [parse_as(MentionTrendPoint, item) for item in items]
        logger.info(f"✅ Mention trends generated ({len(points)} points)")
        return points

    async def generate_corrective_output(self, text: str, verdict: VerdictResult, output_type: OutputType) -> str:
        """Write a corrective message in the requested format."""
        findings = ", ".join(verdict.key_findings) or "See rationale above"
        prompt = (
            "You are a fact-checker creating corrective messages. "
            f"{OUTPUT_GUIDELINES[output_type]}\n\n"
            f'CLAIM: "{text}"\n'
            f"VERDICT: {verdict.verdict.value.upper()}\n"
            f"RATIONALE: {verdict.rationale}\n"
            f"KEY FINDINGS: {findings}\n"
            f"CONFIDENCE: {round(verdict.confidence * 100)}%\n\n"
            "Create the message now:"
        )
        content = await self._chat(
            f"{output_type.value} output",
            [{"role": "user", "content": prompt}],
            temperature=0.7,
            max_tokens=OUTPUT_MAX_TOKENS[output_type],
        )
        if not content:
            raise AIResponseError(f"Empty {output_type.value} output")
        return content

    async def recommend_metrics(
        self, text: str, verdict: str, available_metrics: List[str], data_points: int
    ) -> MetricRecommendation:
        prompt = (
            "You are analyzing a fact-check claim to determine which visualization metrics would be most useful.\n\n"
            f'Claim: "{text}"\nCurrent Verdict: {verdict}\nData Points Available: {data_points}\n'
            f"Available Metrics: {', '.join(available_metrics)}\n\n"
            'Return a JSON object with {"metrics": [...], "reasoning": "..."}. Always include "mentions". '
            'Include "engagement" if the verdict is "false" or "misleading". Include "sources" if available.'
        )
        content = await self._chat(
            "Metric recommendation",
            [
                {
                    "role": "system",
                    "content": "You are a data visualization expert helping to choose the most relevant metrics "
                    "for fact-check analysis. Always respond with valid JSON.",
                },
                {"role": "user", "content": prompt},
            ],
            temperature=0.3,
            max_tokens=300,
        )
        return parse_as(MetricRecommendation, extract_json(content))

    @property
    def provider_name(self) -> str:
        """Get the name of the AI provider."""
        return "OpenAI"

    @property
    def is_available(self) -> bool:
        """Check if the provider is available and ready."""
        return self._initialized and self._client is not None

    @property
    def capabilities(self) -> Dict[str, bool]:
        """Get the provider's capabilities."""
        return {
            "embeddings": True,
            "web_context_research": True,
            "verdict_generation": True,
            "feature_scoring": True,
            "evidence_generation": True,
            "mention_trends": True,
            "corrective_outputs": True,
            "metric_recommendation": True,
        }
