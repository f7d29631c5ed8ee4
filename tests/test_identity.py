# tests/test_identity.py
import pytest

from weather_push.errors import MalformedIdentityError
from weather_push.identity import get_subscription_key, subscription_path


def test_key_is_bracket_segment():
    assert get_subscription_key("ExponentPushToken[abcd1234]") == "abcd1234"


def test_key_is_deterministic():
    token = "ExponentPushToken[xYz_-09]"
    assert get_subscription_key(token) == get_subscription_key(str(token)) == "xYz_-09"


def test_key_stops_at_first_closing_bracket():
    assert get_subscription_key("Tok[ab]cd]") == "ab"


@pytest.mark.parametrize("token", ["abcd1234", "ExponentPushToken[abcd", "ExponentPushToken[]", ""])
def test_malformed_tokens_raise(token):
    with pytest.raises(MalformedIdentityError):
        get_subscription_key(token)


def test_subscription_path():
    assert subscription_path("ExponentPushToken[k1]") == "subscriptions/k1"
