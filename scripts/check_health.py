"""Call ``/api/health`` on a running server; exit non-zero when degraded."""

from __future__ import annotations

import argparse
import os

import requests


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--url", default=os.getenv("HRM_BASE_URL", "http://127.0.0.1:5000"))
    parser.add_argument("--timeout", type=float, default=5.0)
    args = parser.parse_args()

    try:
        resp = requests.get(f"{args.url.rstrip('/')}/api/health", timeout=args.timeout)
    except requests.RequestException as e:
        raise SystemExit(f"DOWN: {e}")

    data = (resp.json() or {}).get("data") or {}
    print(f"{resp.status_code} status={data.get('status')} database={data.get('database')}")
    if resp.status_code != 200:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
