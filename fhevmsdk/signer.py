# SPDX-License-Identifier: Apache-2.0
"""Decryption authorization: typed-data signature over the user's public key."""
from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

from eth_account import Account

from .engine import EngineAdapter
from .exceptions import SignerUnavailableError, SigningRejectedError
from .schemas import AuthorizationSignature, authorization_message

_logger = logging.getLogger("fhevmsdk.signer")


@runtime_checkable
class TypedDataSigner(Protocol):
    """Anything that can produce an EIP-712 signature (wallet bridge, local key)."""

    async def sign_typed_data(self, domain: dict[str, Any], types: dict[str, Any], message: dict[str, Any]) -> str: ...


class LocalAccountSigner:
    """Signs with a private key held in-process. For scripts, tests and the CLI."""

    def __init__(self, private_key: str | bytes):
        self._account = Account.from_key(private_key)

    @property
    def address(self) -> str:
        return self._account.address

    async def sign_typed_data(self, domain: dict[str, Any], types: dict[str, Any], message: dict[str, Any]) -> str:
        signed = self._account.sign_typed_data(domain_data=domain, message_types=types, message_data=message)
        return "0x" + bytes(signed.signature).hex()


class AuthorizationSigner:
    """Builds the authorization message and asks a signer to sign it.

    With ``cache=True`` signatures are reused per (contract, chain, public key,
    signer) until ``revoke`` or ``clear`` drops them. Without it every call
    re-signs.
    """

    def __init__(self, adapter: EngineAdapter, cache: bool = False):
        self._adapter = adapter
        self._cache_enabled = cache
        self._cache: dict[tuple[str, int, str, str], AuthorizationSignature] = {}

    async def sign(self, contract_address: str, chain_id: int, signer: TypedDataSigner | None) -> AuthorizationSignature:
        if signer is None or not callable(getattr(signer, "sign_typed_data", None)):
            raise SignerUnavailableError()
        public_key = self._adapter.get_public_key(contract_address)
        typed = authorization_message(chain_id, contract_address, public_key)

        key = (contract_address.lower(), chain_id, public_key, _signer_identity(signer))
        if self._cache_enabled and key in self._cache:
            return self._cache[key]

        try:
            signature = await signer.sign_typed_data(typed["domain"], typed["types"], typed["message"])
        except Exception as exc:
            _logger.warning("Decryption authorization not signed for %s: %s", contract_address, exc)
            raise SigningRejectedError(f"Failed to create decryption signature: {exc}") from exc
        if not signature:
            raise SigningRejectedError("Signer declined to sign the decryption authorization")

        authorization = AuthorizationSignature(signature=signature, public_key=public_key)
        if self._cache_enabled:
            self._cache[key] = authorization
        return authorization

    def revoke(self, contract_address: str) -> None:
        """Forget cached authorizations for a contract (e.g. after access was revoked)."""
        contract = contract_address.lower()
        for key in [k for k in self._cache if k[0] == contract]:
            del self._cache[key]

    def clear(self) -> None:
        self._cache.clear()


def _signer_identity(signer: Any) -> str:
    address = getattr(signer, "address", None)
    if isinstance(address, str):
        return address.lower()
    return f"id:{id(signer)}"
