#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
send_test.py — Subscribe, unsubscribe, inspect or test-send for one push token.

Common examples:
  python tools/send_test.py "ExponentPushToken[abcd1234]" --status
  python tools/send_test.py "ExponentPushToken[abcd1234]" --subscribe --test
  python tools/send_test.py "ExponentPushToken[abcd1234]" --unsubscribe --base http://localhost:9000

Prints JSON status to stdout; exits 1 on the first failed step.
"""
import argparse
import json
import sys

from weather_push.client import SubscriptionClient

DEFAULT_BASE = "http://127.0.0.1:8000"


def main():
    ap = argparse.ArgumentParser(description="Subscription controller CLI.")
    ap.add_argument("token", help="Expo push token, e.g. ExponentPushToken[abcd1234]")
    ap.add_argument("--base", default=DEFAULT_BASE, help="API base URL")
    grp = ap.add_mutually_exclusive_group()
    grp.add_argument("--subscribe", action="store_true")
    grp.add_argument("--unsubscribe", action="store_true")
    ap.add_argument("--status", action="store_true", help="Print current active flag")
    ap.add_argument("--test", action="store_true", help="Send a test notification")
    args = ap.parse_args()

    client = SubscriptionClient(args.base)
    steps = []
    if args.subscribe or args.unsubscribe:
        steps.append(("set_active", lambda: client.set_subscription_active(args.token, args.subscribe)))
    if args.status or not (args.subscribe or args.unsubscribe or args.test):
        steps.append(("status", lambda: client.read_subscription_active(args.token)))
    if args.test:
        steps.append(("test", lambda: client.test_subscription(args.token)))

    for name, step in steps:
        res = step()
        print(json.dumps({"step": name, "ok": res.ok, "active": res.active, "error": res.error}, ensure_ascii=False))
        if not res.ok:
            sys.exit(1)


if __name__ == "__main__":
    main()
