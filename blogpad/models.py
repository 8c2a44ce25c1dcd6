from __future__ import annotations
from datetime import datetime, UTC
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field as PydanticField, field_validator
from sqlmodel import Field, SQLModel

from . import config
from .formatting import format_timestamp


class Blob(SQLModel, table=True):
    """One named slot of persisted text (the whole collection lives in one)."""
    key: str = Field(primary_key=True)
    value: str = ""


def parse_tags(tags_text: Optional[str]) -> list[str]:
    """Split comma-separated text into trimmed, non-empty tags.

    Order, duplicates and case are kept as given.
    """
    if not tags_text:
        return []
    return [t.strip() for t in tags_text.split(",") if t.strip()]


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Best-effort timestamp parsing; ``None`` is the invalid state.

    Accepts datetimes, ISO-8601 text and epoch milliseconds. Naive values are
    taken as local time. Results are in UTC; out-of-range values are invalid.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, UTC)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        return None
    try:
        if parsed.tzinfo is None:
            parsed = parsed.astimezone()
        # kept in UTC so comparisons never shift across offsets
        return parsed.astimezone(UTC)
    except (OverflowError, ValueError):
        return None


class Blog(BaseModel):
    id: int
    title: str
    content: str
    tags: list[str] = PydanticField(default_factory=list)
    # older blobs used createdDate/updatedDate
    created_at: Optional[datetime] = PydanticField(
        default=None,
        validation_alias=AliasChoices("createdAt", "created_at", "createdDate"),
        serialization_alias="createdAt",
    )
    updated_at: Optional[datetime] = PydanticField(
        default=None,
        validation_alias=AliasChoices("updatedAt", "updated_at", "updatedDate"),
        serialization_alias="updatedAt",
    )

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tag_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_tags(value)
        return value

    @field_validator("tags")
    @classmethod
    def _trim_tags(cls, value: list[str]) -> list[str]:
        return [t.strip() for t in value if t.strip()]

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _lenient_timestamp(cls, value: Any) -> Optional[datetime]:
        return parse_timestamp(value)

    @classmethod
    def create(
        cls,
        id: int,
        title: str,
        content: str,
        tags_text: str,
        created_at: Any = None,
        updated_at: Any = None,
        *,
        now: Optional[datetime] = None,
    ) -> Blog:
        """Build a blog entry.

        Omitted timestamps both default to the same instant (``now`` or the
        current time). Supplied ones are parsed as given; unparseable values
        leave the timestamp invalid instead of raising.
        """
        stamp = now or datetime.now(UTC)
        return cls(
            id=id,
            title=title,
            content=content,
            tags=parse_tags(tags_text),
            created_at=stamp if created_at is None else created_at,
            updated_at=stamp if updated_at is None else updated_at,
        )

    def update(
        self, title: str, content: str, tags_text: str, now: Optional[datetime] = None
    ) -> None:
        self.title = title
        self.content = content
        self.tags = parse_tags(tags_text)
        stamp = parse_timestamp(now or datetime.now(UTC))
        # the wall clock may step backwards; never move updated_at behind itself
        floor = max((t for t in (self.created_at, self.updated_at) if t), default=None)
        if floor is not None and stamp < floor:
            stamp = floor
        self.updated_at = stamp

    @property
    def tags_text(self) -> str:
        return ", ".join(self.tags)

    def formatted_created_at(self, locale: Optional[str] = None) -> str:
        return format_timestamp(self.created_at, locale or config.locale())

    def formatted_updated_at(self, locale: Optional[str] = None) -> str:
        return format_timestamp(self.updated_at, locale or config.locale())

    def to_record(self) -> dict[str, Any]:
        """JSON-ready dict in the persisted layout (camelCase timestamps)."""
        return self.model_dump(mode="json", by_alias=True)
