"""Feature scoring for claims: sentiment, toxicity, spread velocity, manipulation."""

import asyncio
import logging
import re
from typing import Awaitable, Callable, Dict, List, Optional

from ..models.analysis import Features, Sentiment
from ..ports.ai_provider import AIProvider

logger = logging.getLogger(__name__)

SENTIMENT_WORDS: Dict[Sentiment, List[str]] = {
    Sentiment.FEAR: ["afraid", "terrified", "danger", "threat", "risk"],
    Sentiment.ANGER: ["angry", "furious", "outraged", "disgusted"],
    Sentiment.HOPE: ["hopeful", "wonderful", "great", "amazing"],
    Sentiment.SADNESS: ["sad", "tragic", "heartbroken", "grief"],
}

TOXIC_PATTERNS = [
    re.compile(r"\b(kill|murder|destroy|hate|death)\b"),
    re.compile(r"\b(stupid|idiot|moron|crazy)\b"),
    re.compile(r"!{2,}"),
]
TOXICITY_CAP = 0.8

VIRAL_PHRASES = ["must share", "everyone should know", "breaking", "exclusive", "shocking"]

MANIPULATION_PHRASES = [
    "they don't want you to know",
    "do your own research",
    "the truth is",
    "wake up people",
]


def heuristic_sentiment(text: str) -> Sentiment:
    """Bucket with the most keyword hits wins; neutral when nothing matches."""
    lowered = text.lower()
    best, best_hits = Sentiment.NEUTRAL, 0
    for sentiment, words in SENTIMENT_WORDS.items():
        hits = sum(1 for word in words if word in lowered)
        if hits > best_hits:
            best, best_hits = sentiment, hits
    return best


def heuristic_toxicity(text: str) -> float:
    """0.1 per violent word, insult or run of exclamation marks, capped at 0.8."""
    lowered = text.lower()
    score = 0.0
    for pattern in TOXIC_PATTERNS:
        score += 0.1 * len(pattern.findall(lowered))
    return min(TOXICITY_CAP, score)


def heuristic_spread_velocity(text: str) -> float:
    """0.7 when the text uses viral phrasing, else 0.3."""
    lowered = text.lower()
    return 0.7 if any(phrase in lowered for phrase in VIRAL_PHRASES) else 0.3


def heuristic_manipulation(text: str) -> float:
    lowered = text.lower()
    score = sum(0.2 for phrase in MANIPULATION_PHRASES if phrase in lowered)
    return min(1.0, score)


class FeatureExtractor:
    """Scores a claim with the AI provider, falling back per feature to heuristics."""

    def __init__(self, ai_provider: Optional[AIProvider] = None, timeout: float = 15.0):
        self._ai = ai_provider
        self._timeout = timeout

    async def extract(self, text: str, source_reliability: float = 0.5) -> Features:
        """Run all four scorers concurrently; never raises."""
        fallbacks: Dict[str, Callable[[], object]] = {
            "sentiment": lambda: heuristic_sentiment(text),
            "toxicity": lambda: heuristic_toxicity(text),
            "spread_velocity": lambda: heuristic_spread_velocity(text),
            "manipulation_likelihood": lambda: heuristic_manipulation(text),
        }

        if self._ai is None:
            values = {name: fallback() for name, fallback in fallbacks.items()}
        else:
            values = await self._score_with_ai(text, fallbacks)

        return Features(
            sentiment=values["sentiment"],
            toxicity=values["toxicity"],
            spread_velocity=values["spread_velocity"],
            manipulation_likelihood=values["manipulation_likelihood"],
            source_reliability=source_reliability,
        )

    async def _score_with_ai(self, text: str, fallbacks: Dict[str, Callable[[], object]]) -> Dict[str, object]:
        scorers: Dict[str, Awaitable] = {
            "sentiment": self._sentiment(text),
            "toxicity": self._toxicity(text),
            "spread_velocity": self._spread_velocity(text),
            "manipulation_likelihood": self._manipulation(text),
        }
        tasks = {name: asyncio.ensure_future(coro) for name, coro in scorers.items()}

        _, pending = await asyncio.wait(tasks.values(), timeout=self._timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        values = {}
        for name, task in tasks.items():
            if task in pending:
                logger.warning(f"⚠️ Feature stage '{name}' timed out after {self._timeout}s, using heuristic")
                values[name] = fallbacks[name]()
            elif task.exception() is not None:
                logger.warning(f"⚠️ Feature stage '{name}' failed, using heuristic: {task.exception()}")
                values[name] = fallbacks[name]()
            else:
                values[name] = task.result()
        return values

    async def _sentiment(self, text: str) -> Sentiment:
        return (await self._ai.analyze_sentiment(text)).sentiment

    async def _toxicity(self, text: str) -> float:
        return (await self._ai.analyze_toxicity(text)).toxicity_score

    async def _spread_velocity(self, text: str) -> float:
        return (await self._ai.analyze_spread_velocity(text)).spread_velocity

    async def _manipulation(self, text: str) -> float:
        return (await self._ai.analyze_manipulation(text)).manipulation_score
