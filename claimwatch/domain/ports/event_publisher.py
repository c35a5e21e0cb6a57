"""Port for publishing pipeline notifications."""

from typing import Any, Dict, Protocol


def analysis_topic(claim_id: str) -> str:
    """Topic on which completion of a claim's analysis is announced."""
    return f"analysis:{claim_id}"


REVIEW_TOPIC = "review"
CLUSTERING_TOPIC = "clustering"


class EventPublisher(Protocol):
    """Publishes events to topic subscribers."""

    async def publish(self, topic: str, payload: Dict[str, Any]) -> None:
        ...
