# SPDX-License-Identifier: Apache-2.0
"""Address/handle validation and redaction helpers."""
from __future__ import annotations

import re

from .exceptions import InvalidValueError

_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
_HANDLE_RE = re.compile(r"^0x[a-fA-F0-9]+$")

ZERO_ADDRESS = "0x" + "0" * 40


def is_valid_address(address: str) -> bool:
    """True for a 0x-prefixed, 20-byte hex address (checksum not enforced)."""
    return isinstance(address, str) and bool(_ADDRESS_RE.match(address))


def is_valid_handle(handle: str) -> bool:
    return isinstance(handle, str) and bool(_HANDLE_RE.match(handle))


def require_address(address: str, field: str = "address") -> str:
    if not is_valid_address(address):
        raise InvalidValueError(f"Invalid {field} format: {address!r}")
    return address


def require_handle(handle: str) -> str:
    if not is_valid_handle(handle):
        raise InvalidValueError(f"Invalid handle format: {handle!r}")
    return handle


def format_handle(handle: str) -> str:
    """Shorten a handle for display and logs: 0x1234...abcd."""
    if not handle or len(handle) <= 10:
        return handle
    return f"{handle[:6]}...{handle[-4:]}"


def format_public_key(key: str) -> str:
    if not key or len(key) < 10:
        return key
    return f"{key[:6]}...{key[-4:]}"


def validate_encryption_options(contract_address: str | None, user_address: str | None) -> list[str]:
    """Collect problems with an encryption context. Empty list means valid."""
    errors = []
    if not contract_address:
        errors.append("Contract address is required")
    elif not is_valid_address(contract_address):
        errors.append("Invalid contract address format")
    if not user_address:
        errors.append("User address is required")
    elif not is_valid_address(user_address):
        errors.append("Invalid user address format")
    return errors


def to_hex(data: bytes | str, prefix: bool = True) -> str:
    """Normalize engine output (raw bytes or hex text) to lowercase hex."""
    if isinstance(data, (bytes, bytearray)):
        text = bytes(data).hex()
    else:
        text = data[2:] if data[:2] in ("0x", "0X") else data
        text = text.lower()
    return "0x" + text if prefix else text
