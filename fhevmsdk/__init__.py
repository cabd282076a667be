# SPDX-License-Identifier: Apache-2.0
"""FHEVM client SDK: encrypt contract inputs, decrypt handles through the gateway."""
from .client import ClientState, FhevmClient, batch_encrypt, create_client, decrypt, encrypt
from .config import ClientConfig
from .exceptions import (
    RETRYABLE_ERRORS,
    ClientNotInitializedError,
    EncryptionFailedError,
    EngineNotReadyError,
    FhevmError,
    GatewayError,
    InitializationError,
    InvalidValueError,
    ProtocolError,
    RateLimitedError,
    SignerUnavailableError,
    SigningRejectedError,
    TransportError,
)
from .resilience import RateLimiter, retry
from .schemas import AuthorizationSignature, DecryptionRequest, DecryptionResult, EncryptedInput, EncryptionContext
from .signer import LocalAccountSigner, TypedDataSigner
from .types import EncryptedType

__version__ = "1.0.0"

__all__ = [
    "AuthorizationSignature",
    "ClientConfig",
    "ClientNotInitializedError",
    "ClientState",
    "DecryptionRequest",
    "DecryptionResult",
    "EncryptedInput",
    "EncryptedType",
    "EncryptionContext",
    "EncryptionFailedError",
    "EngineNotReadyError",
    "FhevmClient",
    "FhevmError",
    "GatewayError",
    "InitializationError",
    "InvalidValueError",
    "LocalAccountSigner",
    "ProtocolError",
    "RETRYABLE_ERRORS",
    "RateLimitedError",
    "RateLimiter",
    "SignerUnavailableError",
    "SigningRejectedError",
    "TransportError",
    "TypedDataSigner",
    "batch_encrypt",
    "create_client",
    "decrypt",
    "encrypt",
    "retry",
]
