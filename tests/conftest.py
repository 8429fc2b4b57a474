import pytest

from estimator.models import MixedContent, VideoMetadata

# 2400 words in one run-on sentence: moderate complexity, 720s at 200 wpm
LONG_TEXT = "word " * 2400


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeHandle:
    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """call_later() compatible scheduler driven by a FakeClock."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.handles = []

    def call_later(self, delay, callback):
        h = FakeHandle(self.clock.now + delay, callback)
        self.handles.append(h)
        return h

    @property
    def pending(self):
        return [h for h in self.handles if not (h.cancelled or h.fired)]

    def fire_next(self):
        h = min(self.pending, key=lambda x: x.when)
        h.fired = True
        h.callback()

    def run_until(self, t: float):
        while True:
            due = [h for h in self.pending if h.when <= t]
            if not due:
                break
            h = min(due, key=lambda x: x.when)
            self.clock.now = h.when
            h.fired = True
            h.callback()
        self.clock.now = t


@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def scheduler(clock):
    return FakeScheduler(clock)

@pytest.fixture
def text_lesson():
    return MixedContent(text=LONG_TEXT, title="Reading", content_type="lesson")

@pytest.fixture
def mixed_lesson():
    return MixedContent(
        text=LONG_TEXT,
        videos=[VideoMetadata(url="https://cdn.courses.io/intro.mp4", duration=300)],
        title="Intro",
        content_type="lesson",
    )
