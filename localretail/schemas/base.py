from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DomainRecord(BaseModel):
    """
    Base for every stored entity.

    Field names are snake_case in Python; the native (serialized) shape uses
    camelCase aliases, which is what the local store keeps on disk and what
    the API returns. Either spelling is accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_native(self) -> dict:
        """Serialize to the camelCase JSON shape."""
        return self.model_dump(mode="json", by_alias=True)


class ApiModel(BaseModel):
    """Base for request and response bodies; accepts camelCase or snake_case keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
