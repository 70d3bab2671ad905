# auth/tests/test_session_codec.py
"""Tests for signed session cookies."""

import base64
import json
import uuid

import pytest

from auth.session import (
    SESSION_COOKIE_NAME,
    SESSION_DURATION_SECONDS,
    SessionCodec,
    hash_session_token,
)

SECRET = "x" * 32
USER_ID = "3f0b5c8e-8f1e-4a3b-9c1d-2b7e6f5a4d3c"


class FixedClock:
    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FixedClock(1_700_000_000.0)


@pytest.fixture
def codec(clock):
    return SessionCodec(secret=SECRET, clock=clock)


def cookie_value(set_cookie: str) -> str:
    """Pull the raw value out of a Set-Cookie header."""
    first = set_cookie.split(";", 1)[0]
    name, _, value = first.partition("=")
    assert name == SESSION_COOKIE_NAME
    return value


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


class TestSecret:

    def test_short_secret_rejected(self):
        with pytest.raises(ValueError):
            SessionCodec(secret="x" * 31)

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            SessionCodec(secret="")

    def test_minimum_length_accepted(self):
        SessionCodec(secret="x" * 32)


class TestIssue:

    def test_round_trip(self, codec):
        issued = codec.issue(USER_ID)
        payload = codec.decode(cookie_value(issued.cookie))

        assert payload is not None
        assert payload.token == issued.token
        assert str(payload.user_id) == USER_ID

    def test_expiry_is_fourteen_days(self, codec, clock):
        issued = codec.issue(USER_ID)
        assert issued.payload.expires_at == int(clock.now * 1000) + SESSION_DURATION_SECONDS * 1000

    def test_token_is_64_hex_chars(self, codec):
        token = codec.issue(USER_ID).token
        assert len(token) == 64
        int(token, 16)

    def test_tokens_are_unique(self, codec):
        assert codec.issue(USER_ID).token != codec.issue(USER_ID).token

    def test_cookie_attributes(self, codec):
        cookie = codec.issue(USER_ID).cookie

        assert cookie.startswith(f"{SESSION_COOKIE_NAME}=")
        assert "Path=/" in cookie
        assert "HttpOnly" in cookie
        assert "SameSite=Lax" in cookie
        assert "Max-Age=1209600" in cookie
        assert "Secure" not in cookie

    def test_secure_flag_in_production(self, clock):
        cookie = SessionCodec(secret=SECRET, secure=True, clock=clock).issue(USER_ID).cookie
        assert "Secure" in cookie

    def test_payload_uses_camel_case_keys(self, codec):
        value = cookie_value(codec.issue(USER_ID).cookie)
        encoded = value.split(".")[0]
        body = json.loads(base64.urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4)))

        assert set(body) == {"token", "userId", "expiresAt"}
        assert body["userId"] == USER_ID

    def test_value_is_unpadded_base64url(self, codec):
        value = cookie_value(codec.issue(USER_ID).cookie)
        assert "=" not in value
        assert value.count(".") == 1


class TestDestroy:

    def test_destroy_clears_cookie(self, codec):
        cookie = codec.destroy()

        assert cookie.startswith(f"{SESSION_COOKIE_NAME}=")
        assert "Max-Age=0" in cookie
        assert "Path=/" in cookie
        assert "HttpOnly" in cookie
        assert "SameSite=Lax" in cookie
        assert codec.read(cookie.split(";", 1)[0]) is None


class TestDecode:

    def test_tampered_payload_rejected(self, codec):
        value = cookie_value(codec.issue(USER_ID).cookie)
        encoded, signature = value.split(".")
        other = str(uuid.uuid4())
        forged_body = b64url(json.dumps({"token": "t", "userId": other, "expiresAt": 9_999_999_999_999}).encode())

        flipped = ("A" if encoded[0] != "A" else "B") + encoded[1:]

        assert codec.decode(f"{forged_body}.{signature}") is None
        assert codec.decode(f"{flipped}.{signature}") is None

    def test_tampered_signature_rejected(self, codec):
        value = cookie_value(codec.issue(USER_ID).cookie)
        encoded, signature = value.split(".")
        flipped = ("A" if signature[0] != "A" else "B") + signature[1:]

        assert codec.decode(f"{encoded}.{flipped}") is None

    def test_wrong_secret_rejected(self, codec, clock):
        value = cookie_value(codec.issue(USER_ID).cookie)
        other = SessionCodec(secret="y" * 32, clock=clock)

        assert other.decode(value) is None

    @pytest.mark.parametrize(
        "value",
        ["", "no-dot", ".sig", "payload.", "a.b.c", "ü.ü"],
    )
    def test_malformed_values_rejected(self, codec, value):
        assert codec.decode(value) is None

    def test_signed_garbage_payload_rejected(self, codec):
        encoded = b64url(b"not json")
        assert codec.decode(f"{encoded}.{codec._sign(encoded)}") is None

    def test_signed_payload_with_extra_keys_rejected(self, codec):
        body = {"token": "t", "userId": USER_ID, "expiresAt": 9_999_999_999_999, "admin": True}
        encoded = b64url(json.dumps(body).encode())
        assert codec.decode(f"{encoded}.{codec._sign(encoded)}") is None

    def test_signed_payload_with_wrong_types_rejected(self, codec):
        body = {"token": "t", "userId": USER_ID, "expiresAt": "9999999999999"}
        encoded = b64url(json.dumps(body).encode())
        assert codec.decode(f"{encoded}.{codec._sign(encoded)}") is None

    def test_expired_cookie_rejected(self, codec, clock):
        value = cookie_value(codec.issue(USER_ID).cookie)

        clock.now += SESSION_DURATION_SECONDS
        assert codec.decode(value) is not None

        clock.now += 1
        assert codec.decode(value) is None


class TestRead:

    def test_missing_header(self, codec):
        assert codec.read(None) is None
        assert codec.read("") is None

    def test_other_cookies_ignored(self, codec):
        assert codec.read("theme=dark; lang=en") is None

    def test_reads_among_other_cookies(self, codec):
        issued = codec.issue(USER_ID)
        header = f"theme=dark; {SESSION_COOKIE_NAME}={cookie_value(issued.cookie)}; lang=en"

        payload = codec.read(header)
        assert payload is not None
        assert payload.token == issued.token


def test_hash_session_token_is_sha256_hex():
    digest = hash_session_token("abc")
    assert digest == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    assert hash_session_token("abc") == digest
