"""
labs.bible.org response parser.
Converts the passage API's JSON list into our Pydantic models.
"""

from typing import Any, List, Optional
from pydantic import ValidationError
from .models import ApiVerse, VerseOfDay


class VerseAPIError(Exception):
    """Verse API error."""
    def __init__(self, message: str, status_code: Optional[int]):
        super().__init__(message)
        self.status_code = status_code


class VersePayloadError(VerseAPIError):
    """Response was received but does not describe a verse."""
    pass


def _parse_number(value: str, field: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise VersePayloadError(f"{field} is not a number: {value!r}", None)


def _parse_entries(payload: Any) -> List[ApiVerse]:
    if not isinstance(payload, list):
        raise VersePayloadError(f"Expected a list of verses, got {type(payload).__name__}", None)
    if not payload:
        raise VersePayloadError("No verses returned", None)

    try:
        return [ApiVerse.model_validate(entry) for entry in payload]
    except ValidationError as e:
        raise VersePayloadError(f"Malformed verse entry: {e}", None)


def format_reference(book: str, chapter: int, first: int, last: int) -> str:
    """Format a citation such as "John 3:16" or "John 3:16-17"."""
    if first == last:
        return f"{book} {chapter}:{first}"
    return f"{book} {chapter}:{first}-{last}"


def parse_verse_of_day(payload: Any) -> VerseOfDay:
    """
    Parse the passage API payload.

    The API returns one entry per verse. The citation uses the first
    entry's book and chapter and spans first to last verse number.

    Args:
        payload: Decoded JSON body

    Returns:
        VerseOfDay model

    Raises:
        VersePayloadError: If the payload is empty or malformed
    """
    entries = _parse_entries(payload)
    first, last = entries[0], entries[-1]

    reference = format_reference(
        first.book_name,
        _parse_number(first.chapter, "chapter"),
        _parse_number(first.verse, "verse"),
        _parse_number(last.verse, "verse"),
    )
    text = " ".join(entry.text.strip() for entry in entries)

    return VerseOfDay(reference=reference, text=text)
