"""Tests for the in-process event bus."""

import pytest


@pytest.mark.asyncio
async def test_publish_fans_out_to_topic_subscribers(event_bus):
    first = event_bus.subscribe("analysis:c1")
    second = event_bus.subscribe("analysis:c1")
    other = event_bus.subscribe("analysis:c2")

    await event_bus.publish("analysis:c1", {"event": "analysisReady", "claimId": "c1"})

    for queue in (first, second):
        envelope = queue.get_nowait()
        assert envelope["topic"] == "analysis:c1"
        assert envelope["payload"] == {"event": "analysisReady", "claimId": "c1"}
        assert envelope["publishedAt"] > 0
    assert other.empty()


@pytest.mark.asyncio
async def test_unsubscribe(event_bus):
    queue = event_bus.subscribe("review")
    assert event_bus.subscriber_count("review") == 1

    event_bus.unsubscribe("review", queue)
    await event_bus.publish("review", {"event": "reviewRequested"})

    assert event_bus.subscriber_count("review") == 0
    assert queue.empty()


@pytest.mark.asyncio
async def test_publish_without_subscribers_is_harmless(event_bus):
    await event_bus.publish("clustering", {"event": "clusteringUpdated"})
