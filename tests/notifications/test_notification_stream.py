from __future__ import annotations

import json

import pytest

from src.hrm_system.hrm_system.core.exceptions import NotFoundError
from src.hrm_system.hrm_system.notifications.service import NotificationService, NotificationStream
from tests.fakes import InMemoryNotifications


class FakeTime:
    def __init__(self):
        self.now = 0.0
        self.on_sleep = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += seconds
        if self.on_sleep:
            self.on_sleep.pop(0)()


def _parse(chunk: str) -> dict:
    out = {}
    for line in chunk.strip().splitlines():
        key, _, value = line.partition(": ")
        out[key] = value
    return out


def test_stream_pushes_new_notifications_and_heartbeats():
    repo = InMemoryNotifications()
    service = NotificationService(repo)
    service.notify(7, "Old", "Already seen")
    fake = FakeTime()
    fake.on_sleep.append(lambda: service.notify(7, "Leave approved", "Enjoy", category="leave"))
    stream = NotificationStream(
        repo,
        poll_seconds=1,
        heartbeat_seconds=2,
        max_seconds=3,
        sleep=fake.sleep,
        monotonic=fake.monotonic,
    )

    chunks = list(stream.events(7))

    connected = _parse(chunks[0])
    assert connected["event"] == "connected"
    assert connected["id"] == "1"
    assert json.loads(connected["data"]) == {"unread": 1}

    pushed = _parse(chunks[1])
    assert pushed["event"] == "notification"
    assert pushed["id"] == "2"
    payload = json.loads(pushed["data"])
    assert (payload["title"], payload["category"]) == ("Leave approved", "leave")

    assert chunks[2] == ": heartbeat\n\n"
    assert len(chunks) == 3


def test_stream_replays_after_last_event_id():
    repo = InMemoryNotifications()
    service = NotificationService(repo)
    for title in ("one", "two", "three"):
        service.notify(7, title, title)
    service.notify(8, "other", "not mine")
    fake = FakeTime()
    stream = NotificationStream(repo, max_seconds=0, sleep=fake.sleep, monotonic=fake.monotonic)

    chunks = list(stream.events(7, last_event_id=1))

    titles = [json.loads(_parse(c)["data"])["title"] for c in chunks[1:]]
    assert titles == ["two", "three"]


def test_mark_read_only_own_notifications():
    repo = InMemoryNotifications()
    service = NotificationService(repo)
    mine = service.notify(7, "Hi", "there")
    theirs = service.notify(8, "Hi", "there")

    service.mark_read(7, mine)
    assert service.unread_count(7) == 0
    with pytest.raises(NotFoundError):
        service.mark_read(7, theirs)


def test_mark_all_read_counts_updates():
    repo = InMemoryNotifications()
    service = NotificationService(repo)
    for _ in range(3):
        service.notify(7, "Hi", "there")

    assert service.mark_all_read(7) == 3
    assert service.list(7, unread_only=True) == []
