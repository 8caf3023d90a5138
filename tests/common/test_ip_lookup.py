from __future__ import annotations

import requests

from src.hrm_system.hrm_system.common.ip_lookup import IpLookupClient


class FakeResponse:
    def __init__(self, payload, status=200):
        self._payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code}")

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[str] = []

    def get(self, url, timeout=None):
        self.calls.append(url)
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


OK = FakeResponse(
    {"status": "success", "city": "Pune", "regionName": "Maharashtra", "country": "India", "lat": 18.5, "lon": 73.8}
)


def test_lookup_maps_payload_and_caches_for_ttl():
    now = [1000.0]
    session = FakeSession(OK, OK)
    client = IpLookupClient(base_url="http://geo.test/json/", ttl_seconds=60, session=session, clock=lambda: now[0])

    first = client.lookup("8.8.8.8")
    second = client.lookup("8.8.8.8")

    assert first.to_dict() == {
        "ip": "8.8.8.8",
        "city": "Pune",
        "region": "Maharashtra",
        "country": "India",
        "latitude": 18.5,
        "longitude": 73.8,
    }
    assert second == first
    assert session.calls == ["http://geo.test/json/8.8.8.8"]

    now[0] += 61
    client.lookup("8.8.8.8")
    assert len(session.calls) == 2


def test_private_and_invalid_addresses_skip_the_network():
    session = FakeSession()
    client = IpLookupClient(session=session)

    assert client.lookup("10.0.0.5") is None
    assert client.lookup("127.0.0.1") is None
    assert client.lookup("not-an-ip") is None
    assert client.lookup(None) is None
    assert session.calls == []


def test_disabled_client_never_calls_out():
    session = FakeSession()
    assert IpLookupClient(enabled=False, session=session).lookup("8.8.8.8") is None
    assert session.calls == []


def test_failures_return_none():
    session = FakeSession(
        requests.ConnectionError("down"),
        FakeResponse({}, status=500),
        FakeResponse({"status": "fail", "message": "reserved range"}),
    )
    client = IpLookupClient(session=session, ttl_seconds=0)

    assert client.lookup("1.1.1.1") is None
    assert client.lookup("1.1.1.1") is None
    assert client.lookup("1.1.1.1") is None
    assert len(session.calls) == 3


def test_cache_drops_expired_entries_and_stays_bounded():
    now = [0.0]
    session = FakeSession(*([OK] * 6))
    client = IpLookupClient(ttl_seconds=60, max_entries=2, session=session, clock=lambda: now[0])

    client.lookup("8.8.8.8")
    client.lookup("1.1.1.1")
    client.lookup("9.9.9.9")
    assert client.cache_size() == 2
    # the oldest entry made room for the newest
    client.lookup("9.9.9.9")
    client.lookup("1.1.1.1")
    assert len(session.calls) == 3

    now[0] += 61
    client.lookup("4.4.4.4")
    assert client.cache_size() == 1
