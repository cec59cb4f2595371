"""
Single-slot SQLite cache for the verse of the day, with lazy staleness checks.
"""

import logging
import os
import sqlite3
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional
from pydantic import ValidationError
from votd.models import CacheLookup, CacheRecord

logger = logging.getLogger(__name__)

# 1/4 of a day
STALENESS_THRESHOLD = timedelta(hours=6)

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS verse_of_day (
        slot INTEGER PRIMARY KEY CHECK (slot = 0),
        verse_text TEXT NOT NULL,
        reference TEXT NOT NULL,
        fetched_at TEXT NOT NULL
    )
"""


class CacheError(Exception):
    """Verse cache error."""
    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class CacheWriteError(CacheError):
    """Cache location could not be written."""
    pass


class CacheCorruptError(CacheError):
    """Stored data is present but cannot be decoded."""
    pass


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class VerseCache:
    """
    Single-slot verse cache backed by a SQLite file.

    Holds at most one record. Freshness is evaluated on every read against
    a fixed threshold; nothing expires in the background.
    """

    def __init__(
        self,
        path: Path,
        max_age: timedelta = STALENESS_THRESHOLD,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize cache.

        Args:
            path: Location of the SQLite cache file
            max_age: Age up to which (inclusive) a record counts as fresh
            clock: Returns the current timezone-aware time
        """
        self.path = Path(path)
        self.max_age = max_age
        self._clock = clock

    def read(self) -> CacheLookup:
        """
        Look up the cached verse without touching the file.

        Returns:
            FRESH or STALE lookup with the record, or ABSENT when nothing
            usable is stored
        """
        try:
            record = self._load()
        except CacheError as e:
            logger.debug("Ignoring unusable cache at %s: %s", self.path, e)
            return CacheLookup.absent()

        if record is None:
            return CacheLookup.absent()

        age = self._clock() - record.fetched_at
        if age <= self.max_age:
            return CacheLookup.fresh(record)
        return CacheLookup.stale(record)

    def _load(self) -> Optional[CacheRecord]:
        try:
            if not self.path.is_file():
                return None
            # Read-only so that a lookup never creates or alters the file
            uri = f"{self.path.resolve().as_uri()}?mode=ro"
            conn = sqlite3.connect(uri, uri=True)
        except (OSError, sqlite3.Error) as e:
            raise CacheError(f"Cannot open cache: {e}", self.path) from e

        try:
            cursor = conn.execute(
                "SELECT verse_text, reference, fetched_at FROM verse_of_day WHERE slot = 0"
            )
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise CacheCorruptError(f"Cannot query cache: {e}", self.path) from e
        finally:
            conn.close()

        if row is None:
            return None

        verse_text, reference, fetched_at = row
        try:
            return CacheRecord(verse_text=verse_text, reference=reference, fetched_at=fetched_at)
        except ValidationError as e:
            raise CacheCorruptError(f"Malformed cache record: {e}", self.path) from e

    def write(self, record: CacheRecord):
        """
        Replace the cached verse with record.

        The new database is built next to the cache file and moved over it,
        so corrupt content is replaced and readers never see a partial write.

        Args:
            record: Record to persist; fetched_at should be the current time

        Raises:
            CacheWriteError: If the cache location is not writable
        """
        tmp_path = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            os.close(fd)
            tmp_path = Path(tmp_name)

            conn = sqlite3.connect(tmp_path)
            try:
                conn.execute(_SCHEMA)
                conn.execute(
                    "INSERT OR REPLACE INTO verse_of_day (slot, verse_text, reference, fetched_at)"
                    " VALUES (0, ?, ?, ?)",
                    (record.verse_text, record.reference, record.fetched_at.isoformat())
                )
                conn.commit()
            finally:
                conn.close()

            os.replace(tmp_path, self.path)
            tmp_path = None
        except (OSError, sqlite3.Error) as e:
            raise CacheWriteError(f"Cannot write cache {self.path}: {e}", self.path) from e
        finally:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)

        logger.debug("Cached %s at %s", record.reference, self.path)

    def invalidate(self):
        """
        Drop the cached verse, if any.

        Raises:
            CacheWriteError: If the cache file exists but cannot be removed
        """
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise CacheWriteError(f"Cannot remove cache {self.path}: {e}", self.path) from e
