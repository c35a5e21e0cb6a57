"""Shared base for domain documents."""

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Generate a new document identifier."""
    return uuid4().hex


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class DocumentModel(BaseModel):
    """Base model serialized with camelCase keys for the JSON API.

    Attributes stay snake_case in Python; either spelling is accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )

    def to_api(self, **kwargs) -> dict:
        """Dump the document the way the API returns it."""
        return self.model_dump(mode="json", by_alias=True, **kwargs)
