# SPDX-License-Identifier: Apache-2.0
"""FhevmClient: single entry point for encrypting inputs and decrypting handles.

Lifecycle::

    UNINITIALIZED --init()--> INITIALIZING --ok--> READY
                                           --error--> FAILED --init()--> INITIALIZING ...

init() is explicit. encrypt/decrypt outside READY raise ClientNotInitializedError
and never touch the network. Concurrent init() calls share one attempt.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from enum import Enum

import httpx

from .config import ClientConfig
from .engine import EngineAdapter, EngineFactory, TypedValue
from .exceptions import ClientNotInitializedError, InitializationError
from .gateway import GatewayClient
from .resilience import RateLimiter
from .schemas import AuthorizationSignature, DecryptionRequest, EncryptedInput, EncryptionContext
from .security import format_handle, format_public_key, require_handle
from .signer import AuthorizationSigner, TypedDataSigner
from .types import EncryptedType, PlainValue

_logger = logging.getLogger("fhevmsdk.client")


class ClientState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


class FhevmClient:
    def __init__(
        self,
        config: ClientConfig,
        engine_factory: EngineFactory,
        http_client: httpx.AsyncClient | None = None,
        rate_limiter: RateLimiter | None = None,
        cache_authorizations: bool = False,
    ):
        self.config = config
        self._engine_factory = engine_factory
        self._adapter = EngineAdapter()
        self._authorizer = AuthorizationSigner(self._adapter, cache=cache_authorizations)
        self._gateway = GatewayClient(config, http_client)
        self._rate_limiter = rate_limiter
        self._state = ClientState.UNINITIALIZED
        self._failure: BaseException | None = None
        self._public_key: str | None = None
        self._init_task: asyncio.Future | None = None

    async def __aenter__(self) -> FhevmClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._gateway.aclose()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def failure(self) -> BaseException | None:
        """Root cause of the last failed init(), if the client is FAILED."""
        return self._failure

    def is_ready(self) -> bool:
        return self._state is ClientState.READY

    async def init(self) -> None:
        """Fetch key material and build the engine. No-op once READY."""
        if self._state is ClientState.READY:
            return
        if self._init_task is None or self._init_task.done():
            self._state = ClientState.INITIALIZING
            self._failure = None
            _logger.info("Initializing FHEVM client for chain %d", self.config.chain_id)
            self._init_task = asyncio.ensure_future(self._initialize())
        # shield: a cancelled caller must not cancel the attempt other callers share
        await asyncio.shield(self._init_task)

    async def _initialize(self) -> None:
        try:
            key_material = self.config.public_key or await self._gateway.fetch_public_key()
            engine = await self._engine_factory(self.config, key_material)
            self._adapter.attach(engine)
            self._public_key = self._adapter.get_public_key(self.config.acl_address)
        except Exception as exc:
            self._adapter.detach()
            self._state = ClientState.FAILED
            self._failure = exc
            _logger.error("FHEVM client initialization failed: %s", exc)
            raise InitializationError(f"Failed to initialize FHEVM client: {exc}") from exc
        self._state = ClientState.READY
        _logger.info("FHEVM client ready (public key %s)", format_public_key(self._public_key))

    def _require_ready(self) -> None:
        if self._state is not ClientState.READY:
            raise ClientNotInitializedError()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def get_public_key(self) -> str | None:
        """Network public key (hex, no 0x), or None when not READY."""
        if self._state is not ClientState.READY:
            return None
        return self._public_key

    async def encrypt(self, value: PlainValue, etype: EncryptedType | str, context: EncryptionContext) -> EncryptedInput:
        self._require_ready()
        return await self._adapter.encrypt_one(context, value, etype)

    async def encrypt_many(self, items: Sequence[TypedValue], context: EncryptionContext) -> EncryptedInput:
        """Encrypt several values into one input with a single shared proof."""
        self._require_ready()
        return await self._adapter.encrypt_many(context, items)

    async def encrypt_batch(self, items: Sequence[TypedValue], context: EncryptionContext) -> list[EncryptedInput]:
        """Encrypt each value independently (one proof each), in submission order."""
        self._require_ready()
        return await self._adapter.encrypt_batch(context, items)

    async def create_decryption_signature(self, contract_address: str, signer: TypedDataSigner | None) -> AuthorizationSignature:
        self._require_ready()
        return await self._authorizer.sign(contract_address, self.config.chain_id, signer)

    async def decrypt(
        self,
        handle: str,
        context: EncryptionContext,
        signer: TypedDataSigner | None,
        expected_type: EncryptedType | str | None = None,
    ) -> bool | int:
        """Authorize with ``signer`` and ask the gateway for the plaintext of ``handle``.

        ``expected_type`` only shapes the returned Python type (bool for ebool,
        int otherwise); the gateway's answer is not checked against it.
        """
        self._require_ready()
        require_handle(handle)
        if self._rate_limiter is not None:
            self._rate_limiter.require(context.user_address)
        authorization = await self._authorizer.sign(context.contract_address, self.config.chain_id, signer)
        request = DecryptionRequest.build(handle, context, authorization)
        result = await self._gateway.request_decryption(request)
        _logger.debug("Decrypted %s for %s", format_handle(handle), context.user_address)
        if expected_type is None:
            return result.value
        if EncryptedType.parse(expected_type) is EncryptedType.EBOOL:
            return bool(result.value)
        return int(result.value)

    def revoke_authorization(self, contract_address: str) -> None:
        """Drop any cached decryption authorization for a contract."""
        self._authorizer.revoke(contract_address)


def create_client(config: ClientConfig, engine_factory: EngineFactory, **kwargs) -> FhevmClient:
    return FhevmClient(config, engine_factory, **kwargs)


# Framework-agnostic helpers.

async def encrypt(client: FhevmClient, value: PlainValue, etype: EncryptedType | str, context: EncryptionContext) -> EncryptedInput:
    return await client.encrypt(value, etype, context)


async def decrypt(
    client: FhevmClient,
    handle: str,
    context: EncryptionContext,
    signer: TypedDataSigner | None,
    expected_type: EncryptedType | str | None = None,
) -> bool | int:
    return await client.decrypt(handle, context, signer, expected_type)


async def batch_encrypt(client: FhevmClient, items: Sequence[TypedValue], context: EncryptionContext) -> list[EncryptedInput]:
    return await client.encrypt_batch(items, context)
