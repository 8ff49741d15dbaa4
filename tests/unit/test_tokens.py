"""Unit tests for the token service"""
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import jwt
import pytest

from clinic.core.errors import TokenCreationError
from clinic.security.tokens import INVALID_TOKEN, TokenService

SECRET = "unit-secret"


def fixed_clock(moment: datetime):
    return lambda: moment


class TestTokenIssue:
    """Test issuing tokens"""

    def test_issue_then_validate_returns_subject(self):
        service = TokenService(secret=SECRET)

        token = service.issue("jane@example.com")

        assert service.validate(token) == "jane@example.com"

    def test_issued_token_claims(self):
        now = datetime.now(timezone.utc).replace(microsecond=0)
        service = TokenService(secret=SECRET, clock=fixed_clock(now))

        token = service.issue("jane@example.com")
        claims = jwt.decode(token, SECRET, algorithms=["HS256"], options={"verify_exp": False})

        assert claims["iss"] == "auth-api"
        assert claims["sub"] == "jane@example.com"
        assert claims["exp"] == int((now + timedelta(hours=2)).timestamp())

    def test_issue_without_secret_raises(self):
        service = TokenService(secret="")

        with pytest.raises(TokenCreationError):
            service.issue("jane@example.com")

    def test_signing_failure_raises_token_creation_error(self):
        service = TokenService(secret=SECRET)

        with patch("clinic.security.tokens.jwt.encode", side_effect=jwt.PyJWTError("boom")):
            with pytest.raises(TokenCreationError):
                service.issue("jane@example.com")


class TestTokenValidate:
    """Test validating tokens"""

    def test_token_issued_two_hours_ago_is_expired(self):
        issued_at = datetime.now(timezone.utc) - timedelta(hours=2, seconds=5)
        token = TokenService(secret=SECRET, clock=fixed_clock(issued_at)).issue("jane@example.com")

        assert TokenService(secret=SECRET).validate(token) == INVALID_TOKEN

    def test_token_just_inside_lifetime_is_valid(self):
        issued_at = datetime.now(timezone.utc) - timedelta(hours=1, minutes=59)
        token = TokenService(secret=SECRET, clock=fixed_clock(issued_at)).issue("jane@example.com")

        assert TokenService(secret=SECRET).validate(token) == "jane@example.com"

    def test_leeway_accepts_recently_expired_token(self):
        issued_at = datetime.now(timezone.utc) - timedelta(hours=2, seconds=5)
        token = TokenService(secret=SECRET, clock=fixed_clock(issued_at)).issue("jane@example.com")

        assert TokenService(secret=SECRET, leeway_seconds=60).validate(token) == "jane@example.com"

    def test_wrong_secret_is_rejected(self):
        token = TokenService(secret="other-secret").issue("jane@example.com")

        assert TokenService(secret=SECRET).validate(token) == INVALID_TOKEN

    def test_wrong_issuer_is_rejected(self):
        token = TokenService(secret=SECRET, issuer="someone-else").issue("jane@example.com")

        assert TokenService(secret=SECRET).validate(token) == INVALID_TOKEN

    def test_missing_subject_is_rejected(self):
        token = jwt.encode(
            {"iss": "auth-api", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            SECRET,
            algorithm="HS256",
        )

        assert TokenService(secret=SECRET).validate(token) == INVALID_TOKEN

    @pytest.mark.parametrize("token", ["", None, "not-a-jwt", "a.b.c"])
    def test_garbage_is_rejected(self, token):
        assert TokenService(secret=SECRET).validate(token) == INVALID_TOKEN

    def test_instances_sharing_secret_accept_each_others_tokens(self):
        token = TokenService(secret=SECRET).issue("doc@example.com")

        assert TokenService(secret=SECRET).validate(token) == "doc@example.com"
