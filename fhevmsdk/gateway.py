# SPDX-License-Identifier: Apache-2.0
"""HTTP client for the decryption gateway. No retries here; see resilience.retry."""
from __future__ import annotations

import json
import logging

import httpx
from pydantic import ValidationError

from .config import ClientConfig
from .exceptions import GatewayError, ProtocolError, TransportError
from .schemas import DecryptionRequest, DecryptionResult
from .security import format_handle, to_hex

_logger = logging.getLogger("fhevmsdk.gateway")


class GatewayClient:
    """POST /decrypt and public key retrieval against one gateway.

    Pass ``http_client`` to share a connection pool (or a test transport); the
    gateway client then leaves closing it to the owner.
    """

    def __init__(self, config: ClientConfig, http_client: httpx.AsyncClient | None = None):
        self._config = config
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=config.request_timeout)

    async def __aenter__(self) -> GatewayClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._http.request(method, url, timeout=self._config.request_timeout, **kwargs)
        except httpx.TimeoutException as exc:
            _logger.error("Gateway %s %s timed out after %.1fs", method, url, self._config.request_timeout)
            raise TransportError(f"Gateway request timed out: {exc}") from exc
        except httpx.TransportError as exc:
            _logger.error("Gateway %s %s failed: %s", method, url, exc)
            raise TransportError(f"Gateway unreachable: {exc}") from exc
        if not response.is_success:
            _logger.warning("Gateway %s %s returned %d", method, url, response.status_code)
            raise GatewayError(response.reason_phrase or f"HTTP {response.status_code}", response.status_code)
        return response

    async def request_decryption(self, request: DecryptionRequest) -> DecryptionResult:
        _logger.info("Requesting decryption of %s for %s", format_handle(request.handle), request.user_address)
        response = await self._send("POST", self._config.decrypt_url, json=request.to_wire())
        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ProtocolError(f"Gateway returned a non-JSON body: {exc}") from exc
        if not isinstance(body, dict) or "value" not in body:
            raise ProtocolError("Gateway response has no 'value' field")
        try:
            return DecryptionResult(value=body["value"])
        except ValidationError as exc:
            raise ProtocolError(f"Gateway returned an invalid value: {body['value']!r}") from exc

    async def fetch_public_key(self) -> bytes:
        """Network public key from the configured endpoint.

        Accepts a JSON body {"publicKey": "<hex>"} or the raw key bytes.
        """
        response = await self._send("GET", self._config.public_key_url)
        content_type = response.headers.get("content-type", "")
        if "json" not in content_type:
            if not response.content:
                raise ProtocolError("Public key endpoint returned an empty body")
            return response.content
        try:
            body = response.json()
            key = bytes.fromhex(to_hex(body["publicKey"], prefix=False))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            raise ProtocolError(f"Public key endpoint returned an unexpected body: {exc}") from exc
        if not key:
            raise ProtocolError("Public key endpoint returned an empty key")
        return key
