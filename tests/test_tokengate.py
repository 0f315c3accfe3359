"""
Tests for TokenGate bearer token verification.
"""

import base64
import json

import jwt
import pytest

from cloister.TokenGate import TokenValidator, issue_token
from cloister.shared.errors import Unauthenticated


@pytest.fixture
def validator(secret) -> TokenValidator:
    return TokenValidator(secret)


class TestTokenValidation:
    """Tests for raw token verification."""

    def test_valid_token_returns_claims(self, validator, make_token):
        """A correctly signed token should decode."""
        claims = validator.validate(make_token("alice"))

        assert claims["sub"] == "alice"
        assert "exp" in claims

    def test_token_without_expiry_accepted(self, validator, secret):
        """Expiry is only enforced when present unless required."""
        token = issue_token(secret, "svc", expires_in=None)

        assert validator.validate(token)["sub"] == "svc"

    def test_require_exp_rejects_token_without_expiry(self, secret):
        """A validator that requires exp should reject tokens lacking it."""
        strict = TokenValidator(secret, require_exp=True)
        token = issue_token(secret, "svc", expires_in=None)

        with pytest.raises(Unauthenticated):
            strict.validate(token)

    def test_expired_token_rejected(self, validator, secret):
        """Expired tokens should be rejected."""
        token = issue_token(secret, "alice", expires_in=-60)

        with pytest.raises(Unauthenticated) as exc:
            validator.validate(token)

        assert exc.value.status_code == 401
        assert "expired" in exc.value.message.lower()

    def test_wrong_secret_rejected(self, validator):
        """Tokens signed with another secret should be rejected."""
        token = issue_token("another-secret-0123456789abcdef01234567", "mallory")

        with pytest.raises(Unauthenticated):
            validator.validate(token)

    def test_tampered_payload_rejected(self, validator, make_token):
        """Changing the payload should break the signature."""
        header, payload, signature = make_token("alice").split(".")
        claims = json.loads(base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4)))
        claims["sub"] = "admin"
        forged = base64.urlsafe_b64encode(json.dumps(claims).encode()).rstrip(b"=").decode()

        with pytest.raises(Unauthenticated):
            validator.validate(f"{header}.{forged}.{signature}")

    def test_garbage_rejected(self, validator):
        """Strings that are not JWTs should be rejected."""
        with pytest.raises(Unauthenticated):
            validator.validate("not-a-token")

    def test_empty_token_rejected(self, validator):
        with pytest.raises(Unauthenticated):
            validator.validate("")


class TestAlgorithmPinning:
    """Tests that only the configured algorithm is accepted."""

    def test_unsigned_token_rejected(self, validator):
        """alg=none must never be accepted."""
        token = jwt.encode({"sub": "mallory"}, None, algorithm="none")

        with pytest.raises(Unauthenticated):
            validator.validate(token)

    def test_other_hmac_algorithm_rejected(self, validator, secret):
        """A token signed with the right secret but another algorithm is rejected."""
        token = jwt.encode({"sub": "alice"}, secret, algorithm="HS512")

        with pytest.raises(Unauthenticated):
            validator.validate(token)

    def test_pinned_algorithm_can_be_changed(self, secret):
        """A validator pinned to HS512 accepts HS512 and rejects HS256."""
        validator = TokenValidator(secret, algorithm="HS512")

        assert validator.validate(issue_token(secret, "a", algorithm="HS512"))["sub"] == "a"
        with pytest.raises(Unauthenticated):
            validator.validate(issue_token(secret, "a", algorithm="HS256"))

    def test_none_algorithm_cannot_be_configured(self, secret):
        with pytest.raises(ValueError):
            TokenValidator(secret, algorithm="none")

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            TokenValidator("")


class TestAuthorizationHeader:
    """Tests for Authorization header parsing."""

    def test_bearer_header_accepted(self, validator, make_token):
        claims = validator.validate_header(f"Bearer {make_token('bob')}")

        assert claims["sub"] == "bob"

    def test_scheme_is_case_insensitive(self, validator, make_token):
        assert validator.validate_header(f"bearer {make_token()}")

    @pytest.mark.parametrize("value", [None, "", "Bearer", "Bearer ", "Basic dXNlcjpwYXNz", "Token abc"])
    def test_missing_or_malformed_header_rejected(self, validator, value):
        with pytest.raises(Unauthenticated):
            validator.validate_header(value)

    def test_extra_segments_rejected(self, validator, make_token):
        with pytest.raises(Unauthenticated):
            validator.validate_header(f"Bearer {make_token()} extra")
