import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from votd.models import VerseOfDay  # noqa: E402


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeSource:
    def __init__(self, verse=None, error=None):
        self.verse = verse
        self.error = error
        self.calls = 0

    def fetch_verse_of_day(self) -> VerseOfDay:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.verse


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc))


@pytest.fixture
def cache_path(tmp_path):
    return tmp_path / "votd-cli-cache.db"


@pytest.fixture
def sample_verse():
    return VerseOfDay(reference="John 3:16", text="For this is the way God loved the world.")


@pytest.fixture
def other_verse():
    return VerseOfDay(reference="Psalms 23:1", text="The Lord is my shepherd.")
