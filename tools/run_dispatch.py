#!/usr/bin/env python3
"""
run_dispatch.py — Trigger the daily weather dispatch via the running API.

Place at: tools/run_dispatch.py
Run from the repo root (folder that contains weather_push/).

What this does:
  - Calls your running FastAPI service's /admin/dispatch endpoint (POST).
  - Prints the API's JSON (pretty-printed) or raw string response.

Prereqs:
  - Your API must be running and expose /admin/dispatch (POST).
  - Default URL is http://127.0.0.1:8000 (override with --base-url).

Common examples:
  python tools/run_dispatch.py
  python tools/run_dispatch.py --base-url http://localhost:9000

Exit codes:
  - 0 => dispatch ran and the gateway accepted the batch (or nobody is subscribed)
  - 1 => dispatch ran but weather or gateway failed
  - 2 => API unreachable / HTTP error

Notes:
  - Every call sends notifications again; there is no deduplication.
"""
from __future__ import annotations

import argparse
import json
import sys
import urllib.error
import urllib.request


def call(url: str, method: str = "GET", timeout: int = 120):
    req = urllib.request.Request(url, method=method)
    with urllib.request.urlopen(req, timeout=timeout) as r:
        data = r.read()
    try:
        return json.loads(data.decode("utf-8"))
    except ValueError:
        return data.decode("utf-8")


def main():
    p = argparse.ArgumentParser(description="Trigger the daily weather dispatch via /admin/dispatch.")
    p.add_argument("--base-url", default="http://127.0.0.1:8000", help="API base URL")
    p.add_argument("--timeout", type=int, default=120, help="Read timeout seconds")
    args = p.parse_args()

    url = f"{args.base_url.rstrip('/')}/admin/dispatch"
    print("POST", url)
    try:
        out = call(url, method="POST", timeout=args.timeout)
    except (urllib.error.URLError, OSError) as e:
        print(json.dumps({"ok": False, "error": str(e)}), file=sys.stderr)
        return 2
    print(out if isinstance(out, str) else json.dumps(out, indent=2))
    if isinstance(out, dict) and not out.get("ok", False):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
