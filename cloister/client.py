"""
Reference client for the operation endpoint.

Builds the Operation JSON, sends it with the bearer token and client id,
and renders the envelope the way an interactive terminal would show it.

Usage:
    python -m cloister.client --url https://host/api/operations \\
        --token $TOKEN list_files path=/data/shared filter='*.txt'
"""

from __future__ import annotations

import argparse
import os
import ssl
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from cloister.FileSystemGate.models import OperationResponse, ResponseStatus


class ClientError(Exception):
    """Raised when the server cannot be reached or replies with garbage."""
    pass


class OperationClient:
    """Sends operations to a Cloister server."""

    def __init__(
        self,
        server_url: str,
        token: str,
        client_id: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
        verify: bool | ssl.SSLContext = True,
    ):
        self.server_url = server_url
        self.token = token
        self.client_id = client_id
        self._client = httpx.Client(timeout=timeout, transport=transport, verify=verify)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "OperationClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.token}",
        }
        if self.client_id:
            headers["X-Client-ID"] = self.client_id
        return headers

    def execute(self, action: str, **parameters: str) -> OperationResponse:
        """
        Send one operation.

        Args:
            action: Action name
            **parameters: String parameters for the action

        Returns:
            The server's response envelope, including error envelopes
        """
        payload = {
            "action": action,
            "parameters": parameters,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        try:
            resp = self._client.post(self.server_url, json=payload, headers=self._headers())
        except httpx.HTTPError as e:
            raise ClientError(f"Failed to send request: {e}") from e

        try:
            return OperationResponse.model_validate_json(resp.content)
        except ValidationError as e:
            raise ClientError(
                f"Failed to parse response (HTTP {resp.status_code}): {e}"
            ) from e

    def list_files(self, path: str, filter: Optional[str] = None) -> OperationResponse:
        params = {"path": path}
        if filter:
            params["filter"] = filter
        return self.execute("list_files", **params)

    def read_file(self, path: str) -> OperationResponse:
        return self.execute("read_file", path=path)

    def write_file(self, path: str, content: str) -> OperationResponse:
        return self.execute("write_file", path=path, content=content)

    def create_folder(self, path: str) -> OperationResponse:
        return self.execute("create_folder", path=path)


def render(response: OperationResponse) -> str:
    """Format a response as terminal output."""
    if response.status == ResponseStatus.SUCCESS:
        data: Any = response.data
        if isinstance(data, list):
            data = "\n".join(str(item) for item in data)
        return f"$ Operation successful!\nResult: {data}"
    return f"$ Operation failed: {response.message}"


def _parse_params(pairs: List[str]) -> Dict[str, str]:
    params = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise argparse.ArgumentTypeError(f"Expected key=value, got {pair!r}")
        params[key] = value
    return params


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Send an operation to a Cloister server")
    parser.add_argument("--url", default=os.environ.get("CLOISTER_URL", "https://localhost:8443/api/operations"))
    parser.add_argument("--token", default=os.environ.get("CLOISTER_TOKEN"))
    parser.add_argument("--client-id", default=os.environ.get("CLOISTER_CLIENT_ID"))
    parser.add_argument("--cafile", help="CA bundle for a self-signed server certificate")
    parser.add_argument("action")
    parser.add_argument("params", nargs="*", help="key=value parameters")
    args = parser.parse_args(argv)

    if not args.token:
        parser.error("a token is required (--token or CLOISTER_TOKEN)")

    try:
        params = _parse_params(args.params)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    verify = ssl.create_default_context(cafile=args.cafile) if args.cafile else True
    with OperationClient(args.url, args.token, args.client_id, verify=verify) as client:
        try:
            response = client.execute(args.action, **params)
        except ClientError as e:
            print(f"$ Error: {e}", file=sys.stderr)
            return 2

    print(render(response))
    return 0 if response.ok else 1


if __name__ == "__main__":
    sys.exit(main())
