"""Print the claims of a bearer token, verifying it with the configured secret.

Usage: python scripts/decode_token.py <token> [--no-verify]
"""

from __future__ import annotations

import argparse
import importlib
import json
import sys
from pathlib import Path

import jwt

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.hrm_system.hrm_system.auth.tokens import ALGORITHM, decode_unverified


def main() -> None:
    parser = argparse.ArgumentParser(description="Decode an HRM access token")
    parser.add_argument("token")
    parser.add_argument("--no-verify", action="store_true", help="skip signature and expiry checks")
    args = parser.parse_args()

    if args.no_verify:
        claims = decode_unverified(args.token)
    else:
        settings = importlib.import_module(get_settings_module())
        try:
            claims = jwt.decode(args.token, settings.JWT_SECRET, algorithms=[ALGORITHM])
        except jwt.PyJWTError as e:
            raise SystemExit(f"Invalid token: {e}")

    print(json.dumps(claims, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
