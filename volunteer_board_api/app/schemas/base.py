"""
Shared base model for stored records.

Records are stored with camelCase keys (``reporterId``, ``isRead``)
while Python code uses snake_case attributes.  ``RecordModel`` wires
the alias generator so both spellings are accepted on input and
``to_record`` produces the on‑disk shape.

The store turns every timestamp-like string into a ``datetime``, so
``RecordModel`` hands text fields their original string back before
validation.
"""

import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, get_args

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from volunteer_board_api.app.core.store import timestamp_text


def _holds_text(annotation: Any) -> bool:
    if annotation is str:
        return True
    return any(_holds_text(arg) for arg in get_args(annotation))


def _as_text(value: Any) -> Any:
    if isinstance(value, datetime):
        return timestamp_text(value)
    if isinstance(value, list) and any(isinstance(item, datetime) for item in value):
        return [timestamp_text(item) if isinstance(item, datetime) else item for item in value]
    return value


class RecordModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def restore_text_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        restored = dict(data)
        for name, field in cls.model_fields.items():
            if not _holds_text(field.annotation):
                continue
            for key in {name, field.alias or to_camel(name)}:
                if key in restored:
                    restored[key] = _as_text(restored[key])
        return restored

    def to_record(self) -> Dict[str, Any]:
        """Return the record as stored in its collection file."""
        return self.model_dump(by_alias=True)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    """Current UTC time truncated to milliseconds, the precision of stored timestamps."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


_ID_ALPHABET = string.digits + string.ascii_lowercase


def new_record_id(prefix: str) -> str:
    """Return ``<prefix>-<epoch milliseconds>-<7 random base36 chars>``."""
    millis = int(time.time() * 1000)
    suffix = "".join(random.choices(_ID_ALPHABET, k=7))
    return f"{prefix}-{millis}-{suffix}"
