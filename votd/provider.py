"""
Cache-first verse-of-the-day provider.
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Protocol
from votd.models import CacheRecord, CacheStatus, VerseOfDay
from votd.verse_cache import CacheError, VerseCache, utc_now
from votd.verse_parser import VerseAPIError

logger = logging.getLogger(__name__)


class VerseSource(Protocol):
    def fetch_verse_of_day(self) -> VerseOfDay: ...


class ProviderError(Exception):
    """Verse provider error."""
    pass


class FetchFailedError(ProviderError):
    """Remote source failed and no fresh cached verse could be used."""
    pass


class VerseProvider:
    """
    Produces the verse of the day, preferring a fresh cached copy.

    A stale record is never returned: when the fetch fails the error is
    raised and the cache is left as it was.
    """

    def __init__(
        self,
        cache: Optional[VerseCache],
        source: VerseSource,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            cache: Verse cache, or None to always fetch and never store
            source: Remote verse source
            clock: Returns the current timezone-aware time
        """
        self.cache = cache
        self.source = source
        self._clock = clock

    def get_verse(self, bypass_cache: bool = False) -> VerseOfDay:
        """
        Return today's verse.

        Args:
            bypass_cache: Fetch even when a fresh record is cached

        Returns:
            A verse that is either fresh from the cache or fetched by this call

        Raises:
            FetchFailedError: If the cache could not be used and the fetch failed
        """
        if self.cache is None:
            logger.debug("No cache location")
        elif bypass_cache:
            logger.debug("Cache bypassed")
        else:
            lookup = self.cache.read()
            if lookup.status is CacheStatus.FRESH:
                logger.debug("Using cached verse %s", lookup.record.reference)
                return lookup.record.to_verse()
            logger.debug("Cache %s", lookup.status.value)

        logger.info("Fetching verse of the day")
        try:
            verse = self.source.fetch_verse_of_day()
        except VerseAPIError as e:
            raise FetchFailedError(str(e)) from e

        if self.cache is not None:
            record = CacheRecord.from_verse(verse, fetched_at=self._clock())
            try:
                self.cache.write(record)
            except CacheError as e:
                logger.warning("Could not update verse cache: %s", e)

        return verse
