# SPDX-License-Identifier: Apache-2.0
"""Client configuration via environment variables (FHEVM_*) or explicit arguments."""
from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .security import ZERO_ADDRESS, is_valid_address, to_hex

SEPOLIA_CHAIN_ID = 11155111
DEFAULT_PUBLIC_KEY_ENDPOINT = "/fhe-public-key"
DEFAULT_GATEWAY_URL = "https://gateway.sepolia.zama.ai"
DEFAULT_ACL_ADDRESS = ZERO_ADDRESS
DEFAULT_REQUEST_TIMEOUT = 30.0

# Known networks and the settings they imply when not given explicitly.
NETWORK_DEFAULTS: dict[int, dict[str, Any]] = {
    SEPOLIA_CHAIN_ID: {"gateway_url": DEFAULT_GATEWAY_URL},
}


class ClientConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FHEVM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    chain_id: int = Field(..., gt=0, description="Network chain id")

    # Key material: fetched from the endpoint during init() unless given up front
    public_key_endpoint: str = Field(default=DEFAULT_PUBLIC_KEY_ENDPOINT, description="Public key endpoint")
    public_key: bytes | None = Field(default=None, description="Pre-fetched network public key")

    # Decryption gateway
    gateway_url: str = Field(default=DEFAULT_GATEWAY_URL, description="Decryption gateway base URL")
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0, description="Gateway request timeout (s)")

    acl_address: str = Field(default=DEFAULT_ACL_ADDRESS, description="ACL contract address")

    @field_validator("public_key", mode="before")
    @classmethod
    def _decode_public_key(cls, v: Any) -> Any:
        # FHEVM_PUBLIC_KEY and plain str arguments carry the key as hex text
        if isinstance(v, str):
            try:
                return bytes.fromhex(to_hex(v.strip(), prefix=False))
            except ValueError:
                raise ValueError("public_key must be hex encoded") from None
        return v

    @field_validator("gateway_url")
    @classmethod
    def _normalize_gateway_url(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("gateway_url must be an http(s) URL")
        return v

    @field_validator("acl_address")
    @classmethod
    def _check_acl_address(cls, v: str) -> str:
        if not is_valid_address(v):
            raise ValueError("acl_address must be a 0x-prefixed 20-byte hex address")
        return v

    @property
    def public_key_url(self) -> str:
        """Absolute URL of the public key endpoint."""
        if self.public_key_endpoint.startswith(("http://", "https://")):
            return self.public_key_endpoint
        return f"{self.gateway_url}/{self.public_key_endpoint.lstrip('/')}"

    @property
    def decrypt_url(self) -> str:
        return f"{self.gateway_url}/decrypt"

    @classmethod
    def for_chain(cls, chain_id: int, **overrides: Any) -> ClientConfig:
        """Config for a known network; explicit overrides win over network defaults."""
        values = {**NETWORK_DEFAULTS.get(chain_id, {}), **overrides}
        return cls(chain_id=chain_id, **values)


def is_supported_chain(chain_id: int) -> bool:
    return chain_id in NETWORK_DEFAULTS
