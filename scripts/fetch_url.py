#!/usr/bin/env python3
"""Fetch a URL synchronously and print the decoded response."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
SRC_ROOT = os.path.join(PROJECT_ROOT, "src")
if SRC_ROOT not in sys.path:
    sys.path.append(SRC_ROOT)

from core.config import settings
from requestable.decoders import DECODERS
from requestable.engine import fetch
from requestable.transport import close_default_transport


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("url")
    parser.add_argument("--decoder", choices=sorted(DECODERS), default="text")
    return parser.parse_args(argv)


def _render_body(body: object) -> str:
    if body is None:
        return "<empty>"
    if isinstance(body, bytes):
        return f"<{len(body)} bytes>"
    if isinstance(body, str):
        return body
    return json.dumps(body, indent=2, ensure_ascii=False)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=settings.log_level.upper())
    try:
        result = fetch(args.url, decoder=DECODERS[args.decoder])
    finally:
        close_default_transport()
    if not result.ok:
        print(f"error: {getattr(result.error, 'code', result.error)}", file=sys.stderr)
        print(str(result.error), file=sys.stderr)
        return 1
    response = result.value
    print(f"status: {response.status_code}")
    for key, value in response.headers.items():
        print(f"{key}: {value}")
    print()
    print(_render_body(response.body))
    return 0


if __name__ == "__main__":
    sys.exit(main())
