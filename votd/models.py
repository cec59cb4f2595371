"""
Verse-of-the-day data models.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class CacheStatus(str, Enum):
    """Outcome of a cache lookup."""
    FRESH = "fresh"
    STALE = "stale"
    ABSENT = "absent"


class VerseOfDay(BaseModel):
    """A verse (or short run of verses) with its citation."""
    reference: str
    text: str


class ApiVerse(BaseModel):
    """One entry of the labs.bible.org JSON payload."""
    book_name: str = Field(alias="bookname")
    chapter: str
    verse: str
    text: str

    class Config:
        populate_by_name = True


class CacheRecord(BaseModel):
    """The single persisted verse-of-the-day slot."""
    verse_text: str
    reference: str
    fetched_at: datetime

    @field_validator("fetched_at")
    @classmethod
    def _require_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("fetched_at must be timezone-aware")
        return value.astimezone(timezone.utc)

    @classmethod
    def from_verse(cls, verse: VerseOfDay, fetched_at: datetime) -> "CacheRecord":
        return cls(verse_text=verse.text, reference=verse.reference, fetched_at=fetched_at)

    def to_verse(self) -> VerseOfDay:
        return VerseOfDay(reference=self.reference, text=self.verse_text)


class CacheLookup(BaseModel):
    """Result of reading the cache: a status plus the record when one loaded."""
    status: CacheStatus
    record: Optional[CacheRecord] = None

    @classmethod
    def fresh(cls, record: CacheRecord) -> "CacheLookup":
        return cls(status=CacheStatus.FRESH, record=record)

    @classmethod
    def stale(cls, record: CacheRecord) -> "CacheLookup":
        return cls(status=CacheStatus.STALE, record=record)

    @classmethod
    def absent(cls) -> "CacheLookup":
        return cls(status=CacheStatus.ABSENT)

    @property
    def is_fresh(self) -> bool:
        return self.status is CacheStatus.FRESH
