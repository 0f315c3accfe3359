"""
Error taxonomy shared by every Gate.

Each GateError carries the transport status code it maps to, so the
pipeline can turn any failure into an error envelope without a lookup table.
Messages are fixed strings except for Internal, whose text comes from the
operating system rather than the caller.
"""

from __future__ import annotations


class GateError(Exception):
    """Base class for failures that end a request with an error envelope."""

    status_code = 500
    kind = "internal"
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(GateError):
    """Missing, malformed, expired or wrongly signed bearer token."""

    status_code = 401
    kind = "unauthenticated"
    default_message = "Unauthorized"


class BadRequest(GateError):
    """Request could not be decoded into an Operation."""

    status_code = 400
    kind = "bad_request"
    default_message = "Invalid request format"


class MethodNotAllowed(BadRequest):
    status_code = 405
    kind = "method_not_allowed"
    default_message = "Method not allowed"


class Forbidden(GateError):
    """Action, path or file type rejected by the authorization gate."""

    status_code = 403
    kind = "forbidden"
    default_message = "Forbidden"


class PayloadTooLarge(GateError):
    status_code = 413
    kind = "payload_too_large"
    default_message = "Content exceeds maximum file size"


class Unsupported(GateError):
    """An allowlisted action with no handler. Means the gate and the
    dispatcher disagree about which actions exist."""

    status_code = 500
    kind = "unsupported"
    default_message = "Unsupported operation"


class Internal(GateError):
    """Filesystem or I/O failure."""

    status_code = 500
    kind = "internal"


class ConfigError(Exception):
    """Raised at startup when configuration is invalid."""
    pass
