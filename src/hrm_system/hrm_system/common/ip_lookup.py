"""Best-effort geolocation of a client IP for attendance records.

Lookups go to an ip-api compatible endpoint and are cached in-process for a
fixed TTL. Failures never block a clock-in; they are logged and yield None.
"""

from __future__ import annotations

import ipaddress
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IpLocation:
    ip: str
    city: Optional[str]
    region: Optional[str]
    country: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]

    def to_dict(self) -> dict:
        return {
            "ip": self.ip,
            "city": self.city,
            "region": self.region,
            "country": self.country,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }


class IpLookupClient:
    def __init__(
        self,
        *,
        base_url: str = "http://ip-api.com/json",
        ttl_seconds: int = 3600,
        timeout: float = 2.0,
        enabled: bool = True,
        max_entries: int = 1024,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._base_url = base_url.rstrip("/")
        self._ttl = int(ttl_seconds)
        self._timeout = float(timeout)
        self._enabled = bool(enabled)
        self._max_entries = max(1, int(max_entries))
        self._session = session or requests.Session()
        self._clock = clock
        self._cache: dict[str, tuple[float, Optional[IpLocation]]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def is_public(ip: str) -> bool:
        try:
            addr = ipaddress.ip_address(ip)
        except ValueError:
            return False
        return not (addr.is_private or addr.is_loopback or addr.is_reserved or addr.is_link_local)

    def lookup(self, ip: Optional[str]) -> Optional[IpLocation]:
        if not self._enabled or not ip or not self.is_public(ip):
            return None

        now = self._clock()
        with self._lock:
            hit = self._cache.get(ip)
            if hit and hit[0] > now:
                return hit[1]

        location = self._fetch(ip)
        with self._lock:
            self._store(ip, (now + self._ttl, location), now)
        return location

    def _store(self, ip: str, entry: tuple[float, Optional[IpLocation]], now: float) -> None:
        """Caller holds the lock. Expired entries go first, then the soonest to expire."""

        for key in [k for k, (expires, _) in self._cache.items() if expires <= now]:
            del self._cache[key]
        self._cache.pop(ip, None)
        while len(self._cache) >= self._max_entries:
            del self._cache[min(self._cache, key=lambda k: self._cache[k][0])]
        self._cache[ip] = entry

    def cache_size(self) -> int:
        with self._lock:
            return len(self._cache)

    def _fetch(self, ip: str) -> Optional[IpLocation]:
        try:
            resp = self._session.get(f"{self._base_url}/{ip}", timeout=self._timeout)
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError):
            logger.warning("IP lookup failed for %s", ip, exc_info=True)
            return None

        if payload.get("status") not in (None, "success"):
            logger.info("IP lookup returned %s for %s", payload.get("message"), ip)
            return None

        return IpLocation(
            ip=ip,
            city=payload.get("city"),
            region=payload.get("regionName") or payload.get("region"),
            country=payload.get("country"),
            latitude=payload.get("lat"),
            longitude=payload.get("lon"),
        )

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
