"""
Base model for persisted records

Persisted blobs use camelCase keys ("categoryId", "isBroken") while the
Python side uses snake_case. Optional fields that are unset are omitted from
the blob rather than written as null.
"""

from datetime import datetime, timedelta, timezone
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

# Numeric dates in older blobs count seconds from 2001-01-01 UTC
REFERENCE_EPOCH = datetime(2001, 1, 1, tzinfo=timezone.utc)


def _from_reference_seconds(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return REFERENCE_EPOCH + timedelta(seconds=value)
    return value


def _assume_local(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.astimezone()
    return value


StoredDatetime = Annotated[
    datetime,
    BeforeValidator(_from_reference_seconds),
    AfterValidator(_assume_local),
]


class Record(BaseModel):
    """Base class for every entity stored in the shared snapshot"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    def to_stored(self) -> dict[str, Any]:
        """JSON-ready dict in the persisted (camelCase) shape"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
