"""
Module: status_recorder.db.types
Responsibility: Annotated column type aliases and the UTC timestamp type, so
    every model uses identical column definitions.
Architecture position: DB.  May be imported by models/ and selectors/.  MUST
    NOT import from any of those layers.
"""

from datetime import datetime, timezone
from typing import Annotated

from sqlalchemy import BigInteger, DateTime, String
from sqlalchemy.orm import mapped_column
from sqlalchemy.types import TypeDecorator


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp that always loads as UTC.

    SQLite drops tzinfo on storage; values read back naive are tagged UTC so
    callers compare like with like on every backend.  Naive values are
    rejected on bind.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"Naive datetime {value!r} cannot be stored; use a Clock")
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


# Types must sit in mapped_column(); a bare TypeEngine in Annotated is ignored

# Status name as declared in a vocabulary
StatusName = Annotated[str, mapped_column(String(100))]

# Entity type discriminator (class name or explicit override)
EntityType = Annotated[str, mapped_column(String(100))]

# Stringified identity key of an entity
EntityKey = Annotated[str, mapped_column(String(255))]

# 1-based position within one entity's timeline
Position = Annotated[int, mapped_column(BigInteger())]

# Creation timestamp of an entry
Timestamp = Annotated[datetime, mapped_column(UTCDateTime())]
