from datetime import UTC, datetime, timedelta

import pytest

from blogpad.db import MemoryBlobStorage
from blogpad.services import BlogStore

START = datetime(2024, 1, 5, 3, 30, tzinfo=UTC)


class TickingClock:
    """Returns START, then advances by ``step`` on every call."""

    def __init__(self, start: datetime = START, step: timedelta = timedelta(seconds=1)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now += self.step
        return current


class FlakyBlobStorage(MemoryBlobStorage):
    """Memory storage whose writes can be switched to fail like a full disk."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail = False

    def write(self, key, value):
        if self.fail:
            raise OSError("quota exceeded")
        super().write(key, value)


@pytest.fixture()
def clock():
    return TickingClock()

@pytest.fixture()
def storage():
    return FlakyBlobStorage()

@pytest.fixture()
def store(storage, clock):
    return BlogStore(storage, key="blogs", clock=clock)
