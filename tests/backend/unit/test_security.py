"""
Unit tests for core.security module.
Tests password hashing and identity token issue/verify.
"""
import datetime as dt

import jwt
import pytest

from image_loader.core.errors import InvalidTokenError
from image_loader.core.security import TokenCodec, hash_password, verify_password

SECRET = "unit-secret"


def _tamper_signature(token: str) -> str:
    header, payload, signature = token.split(".")
    # first char of the signature encodes 6 full bits of the first byte
    first = "A" if signature[0] != "A" else "B"
    return ".".join([header, payload, first + signature[1:]])


class TestPasswordHashing:
    """Tests for password hashing and verification."""

    def test_hash_password_returns_different_hash_each_time(self):
        """Password hashing should produce different hashes (salt included)."""
        assert hash_password("TestPassword123") != hash_password("TestPassword123")

    def test_verify_password(self):
        hashed = hash_password("TestPassword123")
        assert hashed != "TestPassword123"
        assert verify_password("TestPassword123", hashed) is True
        assert verify_password("WrongPassword456", hashed) is False


class TestTokenIssue:
    def test_claims(self):
        codec = TokenCodec(SECRET)
        now = dt.datetime.now(dt.timezone.utc).replace(microsecond=0)
        token = codec.issue(42, now=now)
        payload = jwt.decode(token, SECRET, algorithms=["HS256"])
        assert payload["iss"] == "42"
        assert payload["iat"] == int(now.timestamp())
        assert payload["nbf"] == payload["iat"]
        assert payload["exp"] - payload["iat"] == 24 * 3600

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            TokenCodec("")

    @pytest.mark.parametrize("identity_id", [1, 2, 7, 555, 2**31 - 1, 2**53])
    def test_round_trip(self, identity_id):
        codec = TokenCodec(SECRET)
        assert codec.verify(codec.issue(identity_id)) == identity_id

    def test_different_ids_get_different_tokens(self):
        codec = TokenCodec(SECRET)
        assert codec.issue(1) != codec.issue(2)


class TestTokenVerify:
    def test_expired_token_fails(self):
        codec = TokenCodec(SECRET)
        issued = dt.datetime.now(dt.timezone.utc) - dt.timedelta(hours=25)
        with pytest.raises(InvalidTokenError, match="expired"):
            codec.verify(codec.issue(5, now=issued))

    def test_token_issued_in_future_is_not_yet_valid(self):
        codec = TokenCodec(SECRET)
        issued = dt.datetime.now(dt.timezone.utc) + dt.timedelta(hours=1)
        with pytest.raises(InvalidTokenError):
            codec.verify(codec.issue(5, now=issued))

    def test_custom_ttl(self):
        codec = TokenCodec(SECRET, ttl=dt.timedelta(minutes=1))
        issued = dt.datetime.now(dt.timezone.utc) - dt.timedelta(minutes=2)
        with pytest.raises(InvalidTokenError):
            codec.verify(codec.issue(5, now=issued))

    def test_tampered_signature_fails(self):
        codec = TokenCodec(SECRET)
        token = codec.issue(9)
        with pytest.raises(InvalidTokenError):
            codec.verify(_tamper_signature(token))

    def test_wrong_secret_fails(self):
        token = TokenCodec("other-secret").issue(9)
        with pytest.raises(InvalidTokenError):
            TokenCodec(SECRET).verify(token)

    @pytest.mark.parametrize("token", ["", "invalid.token.here", "abc", "a.b"])
    def test_malformed_token_fails(self, token):
        with pytest.raises(InvalidTokenError):
            TokenCodec(SECRET).verify(token)

    @pytest.mark.parametrize("issuer", ["abc", "0", "-3", "1.5", " 7", ""])
    def test_issuer_must_be_positive_integer(self, issuer):
        now = dt.datetime.now(dt.timezone.utc)
        token = jwt.encode(
            {"iss": issuer, "iat": now, "nbf": now, "exp": now + dt.timedelta(hours=1)},
            SECRET,
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            TokenCodec(SECRET).verify(token)

    def test_missing_issuer_fails(self):
        now = dt.datetime.now(dt.timezone.utc)
        token = jwt.encode({"iat": now, "nbf": now, "exp": now + dt.timedelta(hours=1)}, SECRET, algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            TokenCodec(SECRET).verify(token)

    def test_missing_expiry_fails(self):
        now = dt.datetime.now(dt.timezone.utc)
        token = jwt.encode({"iss": "3", "iat": now, "nbf": now}, SECRET, algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            TokenCodec(SECRET).verify(token)

    def test_error_message_carries_reason(self):
        codec = TokenCodec(SECRET)
        with pytest.raises(InvalidTokenError) as excinfo:
            codec.verify(_tamper_signature(codec.issue(3)))
        assert excinfo.value.message
        assert excinfo.value.status_code == 401
