# weather_push/identity.py
"""
Push-token identity extraction.

An Expo push token looks like ``ExponentPushToken[abcd1234]``; the part inside
the brackets is unique per device + installation and is used as the
subscription key (``subscriptions/{key}``).
"""
from __future__ import annotations

from .errors import MalformedIdentityError


def get_subscription_key(push_token: str) -> str:
    """
    Return the substring between the first "[" and the next "]".

    Raises:
        MalformedIdentityError: no "[", no closing "]" after it, or an empty segment.
    """
    start = push_token.find("[")
    if start == -1:
        raise MalformedIdentityError(push_token)
    end = push_token.find("]", start + 1)
    if end == -1:
        raise MalformedIdentityError(push_token)
    key = push_token[start + 1:end]
    if not key:
        raise MalformedIdentityError(push_token)
    return key


def subscription_path(push_token: str) -> str:
    return f"subscriptions/{get_subscription_key(push_token)}"
