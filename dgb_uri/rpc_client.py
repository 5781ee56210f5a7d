"""Minimal JSON-RPC client for DigiByte Core nodes.

Only the read paths needed to cross-check payment addresses against a node
are exposed. Connection details come from :func:`load_rpc_config`.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Dict, Optional

import requests
from requests import RequestException, Response

from .config import RPCConfig, load_rpc_config

logger = logging.getLogger(__name__)


class RPCError(RuntimeError):
    """Raised when the DigiByte node responds with an RPC error."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message


class RPCTransportError(RuntimeError):
    """Raised when the RPC endpoint is unreachable or returns malformed data."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DigiByteRPCClient:
    """Thin JSON-RPC client; each helper maps to one node RPC method."""

    def __init__(self, config: RPCConfig, *, timeout: float = 30) -> None:
        self.config = config
        self.timeout = timeout
        self._session = requests.Session()

    @classmethod
    def from_config(cls, **kwargs: Any) -> "DigiByteRPCClient":
        """Instantiate a client from environment variables or a config file."""

        return cls(load_rpc_config(**kwargs))

    def call(self, method: str, params: Optional[list[Any]] = None) -> Any:
        """Perform a JSON-RPC request."""

        payload = {
            "jsonrpc": "1.0",
            "id": str(uuid.uuid4()),
            "method": method,
            "params": params or [],
        }
        logger.debug("RPC call %s params=%s", method, params)
        try:
            response = self._session.post(
                self.config.base_url,
                data=json.dumps(payload),
                headers={"content-type": "application/json"},
                auth=(self.config.user, self.config.password),
                timeout=self.timeout,
            )
        except RequestException as exc:
            logger.error(
                "RPC connection failed: %s",
                exc,
                exc_info=logger.isEnabledFor(logging.DEBUG),
            )
            raise RPCTransportError(
                "RPC connection failed. Ensure your DigiByte node is reachable and "
                "DGB_RPC_* variables (or ~/.dgb-uri.yaml) point to the right host and port."
            ) from exc
        self._raise_for_status(response)
        try:
            result = response.json()
        except ValueError as exc:
            logger.debug("RPC JSON parse error: %s", response.text, exc_info=True)
            raise RPCTransportError("RPC server returned malformed JSON") from exc
        if result.get("error"):
            error = result["error"]
            raise RPCError(error.get("code", -1), error.get("message", "unknown"))
        return result.get("result")

    def _raise_for_status(self, response: Response) -> None:
        if response.ok:
            return
        # DigiByte Core reports JSON-RPC errors as HTTP 500 with a JSON body.
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            error = body["error"]
            raise RPCError(error.get("code", -1), error.get("message", "unknown"))

        logger.error("RPC HTTP error %s from %s", response.status_code, response.url)
        if response.status_code == 401:
            raise RPCTransportError(
                "Unauthorized (401). Ensure DGB_RPC_USER/DGB_RPC_PASSWORD (or ~/.dgb-uri.yaml) "
                "contain valid credentials.",
                status_code=response.status_code,
            )
        raise RPCTransportError(
            f"RPC server returned HTTP {response.status_code}",
            status_code=response.status_code,
        )

    def getblockchaininfo(self) -> Dict[str, Any]:
        return self.call("getblockchaininfo")

    def validateaddress(self, address: str) -> Dict[str, Any]:
        return self.call("validateaddress", [address])
