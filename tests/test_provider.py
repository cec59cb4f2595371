import logging

import pytest

from conftest import FakeSource
from votd.models import CacheRecord, CacheStatus
from votd.provider import FetchFailedError, VerseProvider
from votd.verse_cache import VerseCache
from votd.verse_client import ConnectionFailedError
from votd.verse_parser import VerseAPIError


@pytest.fixture
def cache(cache_path, clock):
    return VerseCache(cache_path, clock=clock)


def seed(cache, verse, fetched_at):
    record = CacheRecord.from_verse(verse, fetched_at=fetched_at)
    cache.write(record)
    return record


def test_fresh_record_skips_fetch(cache, clock, sample_verse, other_verse):
    seed(cache, sample_verse, clock.now)
    clock.advance(hours=5)
    source = FakeSource(verse=other_verse)

    verse = VerseProvider(cache, source, clock=clock).get_verse()

    assert verse == sample_verse
    assert source.calls == 0


def test_absent_cache_fetches_and_writes(cache, clock, sample_verse):
    source = FakeSource(verse=sample_verse)

    verse = VerseProvider(cache, source, clock=clock).get_verse()

    assert verse == sample_verse
    assert source.calls == 1
    lookup = cache.read()
    assert lookup.status is CacheStatus.FRESH
    assert lookup.record.fetched_at == clock.now


def test_bypass_fetches_even_when_fresh(cache, clock, sample_verse, other_verse):
    seed(cache, sample_verse, clock.now)
    source = FakeSource(verse=other_verse)

    verse = VerseProvider(cache, source, clock=clock).get_verse(bypass_cache=True)

    assert verse == other_verse
    assert source.calls == 1
    assert cache.read().record.to_verse() == other_verse


def test_stale_record_is_refreshed(cache, clock, sample_verse, other_verse):
    seed(cache, sample_verse, clock.now)
    clock.advance(hours=7)
    source = FakeSource(verse=other_verse)

    verse = VerseProvider(cache, source, clock=clock).get_verse()

    assert verse == other_verse
    lookup = cache.read()
    assert lookup.status is CacheStatus.FRESH
    assert lookup.record.to_verse() == other_verse


def test_fetch_failure_does_not_fall_back_to_stale(cache, cache_path, clock, sample_verse):
    stale = seed(cache, sample_verse, clock.now)
    clock.advance(hours=12)
    before = cache_path.read_bytes()
    error = ConnectionFailedError("Connection failed", None)
    provider = VerseProvider(cache, FakeSource(error=error), clock=clock)

    with pytest.raises(FetchFailedError) as info:
        provider.get_verse()

    assert info.value.__cause__ is error
    assert cache_path.read_bytes() == before
    lookup = cache.read()
    assert lookup.status is CacheStatus.STALE
    assert lookup.record == stale


def test_fetch_failure_with_empty_cache(cache, cache_path, clock):
    provider = VerseProvider(cache, FakeSource(error=VerseAPIError("500: HTTP error", 500)), clock=clock)

    with pytest.raises(FetchFailedError):
        provider.get_verse()

    assert not cache_path.exists()


def test_fetch_failure_on_bypass(cache, clock, sample_verse):
    seed(cache, sample_verse, clock.now)
    provider = VerseProvider(cache, FakeSource(error=VerseAPIError("boom", None)), clock=clock)

    with pytest.raises(FetchFailedError):
        provider.get_verse(bypass_cache=True)

    assert cache.read().record.to_verse() == sample_verse


def test_write_failure_still_returns_verse(tmp_path, clock, sample_verse, caplog):
    cache = VerseCache(tmp_path / "missing" / "cache.db", clock=clock)
    provider = VerseProvider(cache, FakeSource(verse=sample_verse), clock=clock)

    with caplog.at_level(logging.WARNING, logger="votd"):
        verse = provider.get_verse()

    assert verse == sample_verse
    assert "Could not update verse cache" in caplog.text


def test_without_cache_always_fetches(clock, sample_verse):
    source = FakeSource(verse=sample_verse)
    provider = VerseProvider(None, source, clock=clock)

    assert provider.get_verse() == sample_verse
    assert provider.get_verse() == sample_verse
    assert source.calls == 2
