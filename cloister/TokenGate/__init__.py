"""
TokenGate - Bearer token verification for Cloister.

Provides:
- Signature and expiry verification of HMAC-signed JWTs
- A pinned signing algorithm, checked before verification
- Authorization header parsing
- Token minting for operators and tests

Usage:
    from cloister.TokenGate import TokenValidator, issue_token

    validator = TokenValidator(secret)
    claims = validator.validate_header(request.headers.get("Authorization"))
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

import jwt

from cloister.shared.errors import Unauthenticated
from cloister.shared.gate import GateLogger

_log = GateLogger.get("TokenGate")

BEARER_SCHEME = "bearer"


class TokenValidator:
    """
    Verifies bearer credentials against the service's shared secret.

    Holds no per-request state, so one instance serves every request.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        leeway: float = 0,
        require_exp: bool = False,
    ):
        if not secret:
            raise ValueError("TokenValidator needs a non-empty secret")
        if algorithm.lower() == "none":
            raise ValueError("Unsigned tokens cannot be accepted")
        self._secret = secret
        self._algorithm = algorithm
        self._leeway = leeway
        self._require_exp = require_exp

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def validate(self, token: str) -> Dict[str, Any]:
        """
        Verify a raw token string.

        Args:
            token: Encoded JWT

        Returns:
            Decoded claims

        Raises:
            Unauthenticated: on any structural, algorithm, signature or
                expiry failure
        """
        if not token:
            raise Unauthenticated("Missing token")

        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError:
            _log.warning("Rejected token: malformed header")
            raise Unauthenticated("Invalid token")

        declared = header.get("alg")
        if declared != self._algorithm:
            _log.warning(f"Rejected token: unexpected signing method {declared!r}")
            raise Unauthenticated("Invalid token")

        options = {"require": ["exp"]} if self._require_exp else {}
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                leeway=self._leeway,
                options=options,
            )
        except jwt.ExpiredSignatureError:
            _log.warning("Rejected token: expired")
            raise Unauthenticated("Token expired")
        except jwt.InvalidTokenError as e:
            _log.warning(f"Rejected token: {type(e).__name__}")
            raise Unauthenticated("Invalid token")

        return claims

    def validate_header(self, authorization: Optional[str]) -> Dict[str, Any]:
        """
        Parse an ``Authorization: Bearer <token>`` value and verify the token.

        Raises:
            Unauthenticated: if the header is absent, uses another scheme,
                or the token fails verification
        """
        if not authorization:
            raise Unauthenticated("Unauthorized")

        parts = authorization.split()
        if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME:
            _log.warning("Rejected request: malformed Authorization header")
            raise Unauthenticated("Unauthorized")

        return self.validate(parts[1])


def issue_token(
    secret: str,
    subject: str,
    expires_in: Optional[int] = 3600,
    algorithm: str = "HS256",
    **claims: Any,
) -> str:
    """
    Mint a signed token.

    Args:
        secret: Shared signing secret
        subject: Value for the ``sub`` claim
        expires_in: Lifetime in seconds, or None for a token without ``exp``
        algorithm: Signing algorithm
        **claims: Extra claims to embed

    Returns:
        Encoded JWT
    """
    now = int(time.time())
    payload: Dict[str, Any] = {"sub": subject, "iat": now, **claims}
    if expires_in is not None:
        payload["exp"] = now + expires_in
    return jwt.encode(payload, secret, algorithm=algorithm)


__all__ = ["TokenValidator", "issue_token"]
