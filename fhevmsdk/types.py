# SPDX-License-Identifier: Apache-2.0
"""Encrypted value types: bounds, validation and wire encoding.

Every per-type table in this module is keyed by ``EncryptedType`` and checked
for completeness at import time, so adding a width means adding one row to
each table here (and a matching ``add*`` method on the engine's input buffer).
"""
from __future__ import annotations

from enum import Enum
from typing import Union

from .exceptions import InvalidValueError
from .security import is_valid_address

PlainValue = Union[bool, int, str]
WireValue = Union[bool, int, str]


class EncryptedType(str, Enum):
    EBOOL = "ebool"
    EUINT8 = "euint8"
    EUINT16 = "euint16"
    EUINT32 = "euint32"
    EUINT64 = "euint64"
    EUINT128 = "euint128"
    EADDRESS = "eaddress"

    @classmethod
    def parse(cls, name: str | EncryptedType) -> EncryptedType:
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            allowed = ", ".join(t.value for t in cls)
            raise InvalidValueError(f"Unsupported encrypted type: {name!r}. Allowed: {allowed}") from None

    @property
    def max_value(self) -> int:
        return _MAX_VALUES[self]


_BITS = {
    EncryptedType.EBOOL: 1,
    EncryptedType.EUINT8: 8,
    EncryptedType.EUINT16: 16,
    EncryptedType.EUINT32: 32,
    EncryptedType.EUINT64: 64,
    EncryptedType.EUINT128: 128,
    EncryptedType.EADDRESS: 160,
}

_MAX_VALUES = {t: (1 << bits) - 1 for t, bits in _BITS.items()}

# Input buffer method that receives a value of each type.
_PRIMITIVES = {
    EncryptedType.EBOOL: "add_bool",
    EncryptedType.EUINT8: "add8",
    EncryptedType.EUINT16: "add16",
    EncryptedType.EUINT32: "add32",
    EncryptedType.EUINT64: "add64",
    EncryptedType.EUINT128: "add128",
    EncryptedType.EADDRESS: "add_address",
}

for _table in (_BITS, _PRIMITIVES):
    _missing = set(EncryptedType) - set(_table)
    if _missing:
        raise RuntimeError(f"Encrypted type table incomplete, missing: {sorted(t.value for t in _missing)}")


def is_valid_encrypted_type(name: str) -> bool:
    return name in {t.value for t in EncryptedType}


def max_value(etype: EncryptedType | str) -> int:
    return EncryptedType.parse(etype).max_value


def primitive_for(etype: EncryptedType | str) -> str:
    """Name of the input-buffer method that accepts this type."""
    return _PRIMITIVES[EncryptedType.parse(etype)]


def _as_integer(value, etype: EncryptedType) -> int:
    if isinstance(value, bool):
        raise InvalidValueError(f"Boolean value is not valid for {etype.value}; use ebool")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if etype is EncryptedType.EADDRESS and isinstance(value, str) and is_valid_address(value):
        return int(value, 16)
    raise InvalidValueError(f"Value {value!r} is not an integer valid for {etype.value}")


def encode(value: PlainValue, etype: EncryptedType | str) -> WireValue:
    """Validate ``value`` against ``etype`` and return what the engine expects.

    ebool -> bool, euint* -> int, eaddress -> 0x-prefixed 40-hex string.
    Out-of-range values raise InvalidValueError; nothing is truncated or clamped.
    """
    etype = EncryptedType.parse(etype)
    if etype is EncryptedType.EBOOL:
        if not isinstance(value, bool):
            raise InvalidValueError("Value must be boolean for ebool type")
        return value
    number = _as_integer(value, etype)
    if number < 0:
        raise InvalidValueError("Value cannot be negative")
    if number > etype.max_value:
        raise InvalidValueError(f"Value exceeds maximum for {etype.value}: {etype.max_value}")
    if etype is EncryptedType.EADDRESS:
        return "0x" + format(number, "040x")
    return number


def validate(value: PlainValue, etype: EncryptedType | str) -> None:
    encode(value, etype)


def is_valid_value(value: PlainValue, etype: EncryptedType | str) -> bool:
    try:
        encode(value, etype)
    except InvalidValueError:
        return False
    return True


def parse_numeric_input(text: str, etype: EncryptedType | str) -> WireValue:
    """Parse user-typed text (CLI, forms) into a validated wire value."""
    etype = EncryptedType.parse(etype)
    trimmed = (text or "").strip()
    if not trimmed:
        raise InvalidValueError("Input cannot be empty")
    if etype is EncryptedType.EBOOL:
        lowered = trimmed.lower()
        if lowered not in ("true", "false"):
            raise InvalidValueError("Input must be true or false for ebool")
        return lowered == "true"
    if etype is EncryptedType.EADDRESS and trimmed.lower().startswith("0x"):
        return encode(trimmed, etype)
    try:
        number = int(trimmed, 10)
    except ValueError:
        raise InvalidValueError(f"Input must be a valid integer: {trimmed!r}") from None
    return encode(number, etype)
