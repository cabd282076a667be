# SPDX-License-Identifier: Apache-2.0
"""SDK-specific exceptions.

Wrapping errors are raised with ``raise ... from cause``; the original error
stays reachable through ``.cause``.
"""
from __future__ import annotations


class FhevmError(Exception):
    """Base exception for the SDK."""

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__


class ClientNotInitializedError(FhevmError):
    """Client used before init() completed."""

    def __init__(self, message: str = "FHEVM client not initialized. Call init() first."):
        super().__init__(message)


class InitializationError(FhevmError):
    """init() failed; the client is in the Failed state."""


class InvalidValueError(FhevmError, ValueError):
    """Value does not fit the requested encrypted type, or a malformed address/handle."""


class EngineNotReadyError(FhevmError):
    """Encryption engine has not been attached yet."""

    def __init__(self, message: str = "Encryption engine is not ready"):
        super().__init__(message)


class EncryptionFailedError(FhevmError):
    """Underlying engine rejected the value or failed to produce the proof."""


class SignerUnavailableError(FhevmError):
    """No structured-data signer was supplied."""

    def __init__(self, message: str = "A signer is required to authorize decryption"):
        super().__init__(message)


class SigningRejectedError(FhevmError):
    """Signer errored or the key holder declined to sign."""


class TransportError(FhevmError):
    """Network-level failure talking to the gateway (timeout, DNS, reset)."""


class GatewayError(FhevmError):
    """Gateway answered with a non-success HTTP status."""

    def __init__(self, status_text: str, status_code: int | None = None):
        self.status_text = status_text
        self.status_code = status_code
        if status_code is None:
            super().__init__(f"Gateway request failed: {status_text}")
        else:
            super().__init__(f"Gateway request failed: {status_code} {status_text}")


class ProtocolError(FhevmError):
    """Gateway answered successfully but the body could not be understood."""


class RateLimitedError(FhevmError):
    """Caller exceeded the configured request rate for a key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Rate limit exceeded for {key}")


# Network/service layer errors that a retry wrapper may reasonably re-attempt.
RETRYABLE_ERRORS = (TransportError, GatewayError, ProtocolError)
