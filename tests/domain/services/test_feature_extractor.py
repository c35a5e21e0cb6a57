"""Tests for feature scoring."""

import asyncio

import pytest

from claimwatch.domain.models.analysis import Sentiment
from claimwatch.domain.services.feature_extractor import (
    TOXICITY_CAP,
    FeatureExtractor,
    heuristic_manipulation,
    heuristic_sentiment,
    heuristic_spread_velocity,
    heuristic_toxicity,
)


def test_heuristic_sentiment_picks_bucket_with_most_hits():
    assert heuristic_sentiment("A terrified crowd fled the danger") == Sentiment.FEAR
    assert heuristic_sentiment("What a wonderful, amazing day") == Sentiment.HOPE
    assert heuristic_sentiment("The meeting is on Tuesday") == Sentiment.NEUTRAL


def test_heuristic_toxicity_is_capped():
    assert heuristic_toxicity("A calm statement") == 0.0
    assert heuristic_toxicity("kill kill kill destroy hate death stupid idiot moron!!") == TOXICITY_CAP


def test_heuristic_spread_velocity():
    assert heuristic_spread_velocity("BREAKING: everyone should know") == 0.7
    assert heuristic_spread_velocity("Minutes of the meeting") == 0.3


def test_heuristic_manipulation():
    assert heuristic_manipulation("Do your own research, the truth is out there") == pytest.approx(0.4)
    assert heuristic_manipulation("Plain text") == 0.0


@pytest.mark.asyncio
async def test_extract_without_provider_uses_heuristics():
    features = await FeatureExtractor().extract("BREAKING: terrified people!!", source_reliability=0.85)

    assert features.sentiment == Sentiment.FEAR
    assert features.spread_velocity == 0.7
    assert features.toxicity == pytest.approx(0.1)
    assert features.source_reliability == 0.85


@pytest.mark.asyncio
async def test_extract_with_provider(fake_ai):
    fake_ai.sentiment = Sentiment.ANGER
    fake_ai.toxicity = 0.4
    features = await FeatureExtractor(fake_ai).extract("text")

    assert features.sentiment == Sentiment.ANGER
    assert features.toxicity == 0.4
    assert features.spread_velocity == fake_ai.spread_velocity
    assert features.manipulation_likelihood == fake_ai.manipulation


@pytest.mark.asyncio
async def test_failed_scorer_falls_back_individually(fake_ai):
    fake_ai.failing.add("analyze_spread_velocity")
    fake_ai.toxicity = 0.4
    features = await FeatureExtractor(fake_ai).extract("BREAKING news")

    assert features.spread_velocity == 0.7
    assert features.toxicity == 0.4


@pytest.mark.asyncio
async def test_slow_scorer_times_out_to_heuristic(fake_ai):
    async def slow_sentiment(text):
        await asyncio.sleep(10)

    fake_ai.analyze_sentiment = slow_sentiment
    features = await FeatureExtractor(fake_ai, timeout=0.05).extract("a sad and tragic day")

    assert features.sentiment == Sentiment.SADNESS
    assert features.toxicity == fake_ai.toxicity


@pytest.mark.asyncio
async def test_timed_out_scorer_is_cancelled_before_returning(fake_ai):
    cancelled = []

    async def slow_toxicity(text):
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(text)
            raise

    fake_ai.analyze_toxicity = slow_toxicity
    features = await FeatureExtractor(fake_ai, timeout=0.05).extract("idiot!!")

    assert cancelled == ["idiot!!"]
    assert features.toxicity == pytest.approx(0.2)
