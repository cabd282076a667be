# SPDX-License-Identifier: Apache-2.0
"""Pydantic models for encryption contexts, encrypted inputs and gateway messages."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field as PydanticField, StrictBool, StrictInt, field_validator

from .exceptions import InvalidValueError
from .security import require_address, require_handle

AUTHORIZATION_DOMAIN_NAME = "Authorization token"
AUTHORIZATION_DOMAIN_VERSION = "1"
AUTHORIZATION_PRIMARY_TYPE = "Reencrypt"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class EncryptionContext(_Frozen):
    """(contract, user) pair an encrypted input is bound to."""

    contract_address: str = PydanticField(..., alias="contractAddress")
    user_address: str = PydanticField(..., alias="userAddress")

    @classmethod
    def of(cls, contract_address: str, user_address: str) -> EncryptionContext:
        require_address(contract_address, "contract address")
        require_address(user_address, "user address")
        return cls(contract_address=contract_address, user_address=user_address)


class EncryptedInput(_Frozen):
    """Handles in submission order plus one proof covering all of them."""

    handles: list[str]
    input_proof: str = PydanticField(..., alias="inputProof")

    def to_contract_args(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class AuthorizationSignature(_Frozen):
    signature: str
    public_key: str = PydanticField(..., alias="publicKey")


class DecryptionRequest(_Frozen):
    handle: str
    contract_address: str = PydanticField(..., alias="contractAddress")
    user_address: str = PydanticField(..., alias="userAddress")
    signature: str
    public_key: str = PydanticField(..., alias="publicKey")

    @classmethod
    def build(cls, handle: str, context: EncryptionContext, authorization: AuthorizationSignature) -> DecryptionRequest:
        require_handle(handle)
        return cls(
            handle=handle,
            contract_address=context.contract_address,
            user_address=context.user_address,
            signature=authorization.signature,
            public_key=authorization.public_key,
        )

    def to_wire(self) -> dict[str, str]:
        """JSON body for POST /decrypt: exactly the five camelCase fields."""
        return self.model_dump(by_alias=True)


class DecryptionResult(_Frozen):
    # StrictBool first so JSON true/false is not coerced to 1/0.
    value: StrictBool | StrictInt

    @field_validator("value")
    @classmethod
    def _non_negative(cls, v):
        if not isinstance(v, bool) and v < 0:
            raise ValueError("decrypted value cannot be negative")
        return v


def authorization_message(chain_id: int, contract_address: str, public_key: str) -> dict[str, Any]:
    """Typed-data payload the gateway verifies before re-encrypting a handle.

    ``public_key`` is hex without the 0x prefix; the signed message carries it
    prefixed. Field order and names must match the gateway exactly.
    """
    if not isinstance(chain_id, int) or isinstance(chain_id, bool) or chain_id <= 0:
        raise InvalidValueError(f"Invalid chain id: {chain_id!r}")
    require_address(contract_address, "contract address")
    return {
        "domain": {
            "name": AUTHORIZATION_DOMAIN_NAME,
            "version": AUTHORIZATION_DOMAIN_VERSION,
            "chainId": chain_id,
            "verifyingContract": contract_address,
        },
        "types": {
            AUTHORIZATION_PRIMARY_TYPE: [
                {"name": "publicKey", "type": "bytes"},
            ],
        },
        "message": {
            "publicKey": f"0x{public_key}",
        },
    }
