# SPDX-License-Identifier: Apache-2.0
"""Boundary to the external FHE encryption engine.

The engine (key material, ciphertext math, input proofs) is a separate library.
This module only builds one input buffer per (contract, user) context, feeds it
validated values through the per-type ``add*`` method and turns the finalized
buffer into an ``EncryptedInput``.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, Protocol

from .config import ClientConfig
from .exceptions import EncryptionFailedError, EngineNotReadyError, InvalidValueError
from .schemas import EncryptedInput, EncryptionContext
from .security import format_handle, to_hex
from .types import EncryptedType, PlainValue, encode, primitive_for

_logger = logging.getLogger("fhevmsdk.engine")


class InputBuffer(Protocol):
    """Accumulates values for one context; finalized once with encrypt()."""

    def add_bool(self, value: bool) -> Any: ...
    def add8(self, value: int) -> Any: ...
    def add16(self, value: int) -> Any: ...
    def add32(self, value: int) -> Any: ...
    def add64(self, value: int) -> Any: ...
    def add128(self, value: int) -> Any: ...
    def add_address(self, value: str) -> Any: ...

    async def encrypt(self) -> Mapping[str, Any]:
        """Return {"handles": [...], "inputProof": ...} as bytes or hex strings."""


class EncryptionEngine(Protocol):
    def create_encrypted_input(self, contract_address: str, user_address: str) -> InputBuffer: ...

    def get_public_key(self, address: str) -> bytes | str | None: ...


EngineFactory = Callable[[ClientConfig, bytes], Awaitable[EncryptionEngine]]

TypedValue = tuple[PlainValue, "EncryptedType | str"]


def _field(result: Any, name: str) -> Any:
    if isinstance(result, Mapping):
        return result[name]
    return getattr(result, name)


def _to_encrypted_input(result: Any, expected: int) -> EncryptedInput:
    try:
        handles = [to_hex(h) for h in _field(result, "handles")]
        proof = to_hex(_field(result, "inputProof"))
    except (KeyError, AttributeError, TypeError) as exc:
        raise EncryptionFailedError(f"Engine returned an unexpected result: {exc}") from exc
    if len(handles) != expected:
        raise EncryptionFailedError(f"Engine returned {len(handles)} handles for {expected} values")
    return EncryptedInput(handles=handles, input_proof=proof)


def _encode_all(items: Sequence[TypedValue]) -> list[tuple[EncryptedType, Any]]:
    return [(EncryptedType.parse(etype), encode(value, etype)) for value, etype in items]


class EngineAdapter:
    """Encrypts typed values through an attached engine."""

    def __init__(self, engine: EncryptionEngine | None = None):
        self._engine = engine

    @property
    def ready(self) -> bool:
        return self._engine is not None

    def attach(self, engine: EncryptionEngine) -> None:
        self._engine = engine

    def detach(self) -> None:
        self._engine = None

    def _require_engine(self) -> EncryptionEngine:
        if self._engine is None:
            raise EngineNotReadyError()
        return self._engine

    async def encrypt_one(self, context: EncryptionContext, value: PlainValue, etype: EncryptedType | str) -> EncryptedInput:
        return await self.encrypt_many(context, [(value, etype)])

    async def encrypt_many(self, context: EncryptionContext, items: Sequence[TypedValue]) -> EncryptedInput:
        """Put every value into a single buffer: one proof covers the whole group.

        Handles come back in the order the values were given.
        """
        engine = self._require_engine()
        if not items:
            raise InvalidValueError("At least one value is required for encryption")
        # Validate everything before the engine sees any of it.
        return await self._encrypt_encoded(engine, context, _encode_all(items))

    async def _encrypt_encoded(
        self, engine: EncryptionEngine, context: EncryptionContext, wire: list[tuple[EncryptedType, Any]]
    ) -> EncryptedInput:
        try:
            buffer = engine.create_encrypted_input(context.contract_address, context.user_address)
            for etype, wire_value in wire:
                getattr(buffer, primitive_for(etype))(wire_value)
            result = await buffer.encrypt()
        except Exception as exc:
            _logger.error("Encryption failed for contract %s: %s", context.contract_address, exc)
            raise EncryptionFailedError(f"Encryption failed: {exc}") from exc
        encrypted = _to_encrypted_input(result, expected=len(wire))
        _logger.debug(
            "Encrypted %d value(s) for %s: %s",
            len(wire),
            context.contract_address,
            ", ".join(format_handle(h) for h in encrypted.handles),
        )
        return encrypted

    async def encrypt_batch(self, context: EncryptionContext, items: Sequence[TypedValue]) -> list[EncryptedInput]:
        """One independent buffer (and proof) per value, encrypted concurrently."""
        engine = self._require_engine()
        wire = _encode_all(items)
        return list(await asyncio.gather(*(self._encrypt_encoded(engine, context, [item]) for item in wire)))

    def get_public_key(self, address: str) -> str:
        """Context-scoped public key as hex without the 0x prefix."""
        engine = self._require_engine()
        try:
            key = engine.get_public_key(address)
        except Exception as exc:
            raise EngineNotReadyError(f"Public key unavailable for {address}: {exc}") from exc
        if not key:
            raise EngineNotReadyError(f"Public key unavailable for {address}")
        return to_hex(key, prefix=False)
