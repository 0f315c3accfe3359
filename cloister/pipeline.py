"""
Request pipeline.

Composes method check, authentication, body decoding, authorization and
dispatch for one incoming call. The pipeline stops at the first failing
stage, so an unauthenticated caller never learns anything about request
validity, action names or paths.

The pipeline knows nothing about the web framework: it takes a method,
headers and a raw body and returns a status code with a response envelope.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from pydantic import ValidationError

from cloister.Config.schema import GateConfig
from cloister.FileSystemGate import OperationDispatcher
from cloister.FileSystemGate.models import Operation, OperationResponse
from cloister.TokenGate import TokenValidator
from cloister.shared.errors import BadRequest, GateError, MethodNotAllowed
from cloister.shared.gate import GateLogger

_log = GateLogger.get("Pipeline")

CLIENT_ID_HEADER = "x-client-id"


@dataclass(frozen=True)
class PipelineResult:
    """Status code and envelope to send back."""
    status_code: int
    response: OperationResponse


def _lower_keys(headers: Mapping[str, str]) -> dict:
    return {key.lower(): value for key, value in headers.items()}


class RequestPipeline:
    """
    Runs one request through every stage in order.

    One instance is shared by all requests; it holds only the read-only
    config and stateless collaborators.
    """

    def __init__(
        self,
        config: GateConfig,
        validator: Optional[TokenValidator] = None,
        dispatcher: Optional[OperationDispatcher] = None,
    ):
        self._config = config
        self._validator = validator or TokenValidator(config.jwt_secret, config.jwt_algorithm)
        self._dispatcher = dispatcher or OperationDispatcher(config)

    @property
    def dispatcher(self) -> OperationDispatcher:
        return self._dispatcher

    def handle(self, method: str, headers: Mapping[str, str], body: bytes) -> PipelineResult:
        """
        Process a request.

        Args:
            method: HTTP method
            headers: Request headers (any key casing)
            body: Raw request body

        Returns:
            PipelineResult for the transport to send
        """
        headers = _lower_keys(headers)
        # Informational only, never part of an authorization decision
        client_id = headers.get(CLIENT_ID_HEADER)

        try:
            data = self._run(method, headers, body, client_id)
        except GateError as e:
            _log.info(
                f"Request failed ({e.kind}, {e.status_code}) client={client_id or '-'}"
            )
            return PipelineResult(e.status_code, OperationResponse.error(e.message))

        return PipelineResult(200, OperationResponse.success(data))

    def _run(self, method: str, headers: dict, body: bytes, client_id: Optional[str]):
        if method.upper() != "POST":
            raise MethodNotAllowed()

        claims = self._validator.validate_header(headers.get("authorization"))

        try:
            operation = Operation.model_validate_json(body)
        except ValidationError:
            raise BadRequest()

        _log.info(
            f"{operation.action} requested by sub={claims.get('sub', '-')} "
            f"client={client_id or '-'}"
        )

        self._dispatcher.authorize(operation, client_id)
        return self._dispatcher.dispatch(operation)


__all__ = ["RequestPipeline", "PipelineResult", "CLIENT_ID_HEADER"]
