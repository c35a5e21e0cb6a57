"""Domain model for the append-only audit trail."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from .base import DocumentModel, new_id, utcnow


class AuditAction(str, Enum):
    """State-changing actions recorded for compliance review."""

    CREATE = "create"
    ANALYZE = "analyze"
    UPDATE = "update"
    ESCALATE = "escalate"
    RESOLVE = "resolve"
    PUBLISH = "publish"
    DELETE = "delete"


class TargetType(str, Enum):
    """Kind of document an audit entry refers to."""

    CLAIM = "claim"
    CLUSTER = "cluster"
    ANALYSIS = "analysis"


class AuditLog(DocumentModel):
    """Immutable actor/action/target record."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(default_factory=new_id, alias="_id")
    actor_id: Optional[str] = Field(None, description="Acting user; None for system actions")
    action: AuditAction
    target_type: TargetType
    target_id: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
