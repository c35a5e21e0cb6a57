"""Domain exceptions."""

from typing import Optional


class ClaimWatchError(Exception):
    """Base class for all ClaimWatch errors."""


class NotFoundError(ClaimWatchError):
    """A claim, cluster or analysis does not exist."""

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found" + (f": {resource_id}" if resource_id else ""))


class InvalidRequestError(ClaimWatchError):
    """Caller supplied input that cannot be processed."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class InvalidStatusTransitionError(ClaimWatchError):
    """A claim status change is not permitted by the claim lifecycle."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move claim from '{current}' to '{requested}'")


class AIProviderError(ClaimWatchError):
    """The AI provider could not be reached or refused the request."""


class AIResponseError(AIProviderError):
    """The AI provider replied with content that failed validation."""


class PipelineError(ClaimWatchError):
    """Unrecoverable failure while analyzing a claim."""

    def __init__(self, claim_id: str, message: str):
        self.claim_id = claim_id
        super().__init__(f"Analysis of claim {claim_id} failed: {message}")
