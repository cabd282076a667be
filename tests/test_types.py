# SPDX-License-Identifier: Apache-2.0
"""Encrypted type bounds, validation and wire encoding."""
import pytest

from fhevmsdk.exceptions import InvalidValueError
from fhevmsdk.types import (
    EncryptedType,
    encode,
    is_valid_encrypted_type,
    is_valid_value,
    max_value,
    parse_numeric_input,
    primitive_for,
    validate,
)

BOUNDS = [
    (EncryptedType.EUINT8, 255),
    (EncryptedType.EUINT16, 65535),
    (EncryptedType.EUINT32, 2**32 - 1),
    (EncryptedType.EUINT64, 2**64 - 1),
    (EncryptedType.EUINT128, 2**128 - 1),
    (EncryptedType.EADDRESS, 2**160 - 1),
]


@pytest.mark.parametrize("etype,maximum", BOUNDS)
def test_max_value_table(etype, maximum):
    assert max_value(etype) == maximum
    assert etype.max_value == maximum


@pytest.mark.parametrize("etype,maximum", BOUNDS)
def test_boundaries(etype, maximum):
    """max passes, max + 1 fails, 0 passes, -1 fails."""
    assert is_valid_value(0, etype)
    assert is_valid_value(maximum, etype)
    assert not is_valid_value(maximum + 1, etype)
    assert not is_valid_value(-1, etype)


def test_euint8_256_rejected_with_message():
    with pytest.raises(InvalidValueError, match="maximum for euint8"):
        validate(256, "euint8")


def test_negative_rejected():
    with pytest.raises(InvalidValueError, match="negative"):
        encode(-5, EncryptedType.EUINT32)


def test_ebool_requires_bool():
    assert encode(True, "ebool") is True
    assert encode(False, "ebool") is False
    with pytest.raises(InvalidValueError):
        encode(1, "ebool")
    with pytest.raises(InvalidValueError):
        encode("true", "ebool")


def test_integer_types_reject_bool():
    with pytest.raises(InvalidValueError, match="use ebool"):
        encode(True, "euint8")


def test_integral_float_accepted_fraction_rejected():
    assert encode(7.0, "euint16") == 7
    with pytest.raises(InvalidValueError):
        encode(7.5, "euint16")


def test_eaddress_accepts_int_and_hex_string():
    addr = "0x" + "ab" * 20
    assert encode(addr, "eaddress") == addr
    assert encode(1, "eaddress") == "0x" + "0" * 39 + "1"
    with pytest.raises(InvalidValueError):
        encode("0x1234", "eaddress")


def test_parse_type_names():
    assert EncryptedType.parse("EUINT32") is EncryptedType.EUINT32
    assert EncryptedType.parse(EncryptedType.EBOOL) is EncryptedType.EBOOL
    assert is_valid_encrypted_type("eaddress")
    assert not is_valid_encrypted_type("euint256")
    with pytest.raises(InvalidValueError, match="Unsupported encrypted type"):
        EncryptedType.parse("euint256")


def test_every_type_has_a_buffer_method():
    methods = {primitive_for(t) for t in EncryptedType}
    assert len(methods) == len(EncryptedType)
    assert primitive_for("euint64") == "add64"
    assert primitive_for("ebool") == "add_bool"


def test_parse_numeric_input():
    assert parse_numeric_input(" 42 ", "euint8") == 42
    assert parse_numeric_input("TRUE", "ebool") is True
    assert parse_numeric_input("0x" + "01" * 20, "eaddress") == "0x" + "01" * 20
    with pytest.raises(InvalidValueError, match="empty"):
        parse_numeric_input("  ", "euint8")
    with pytest.raises(InvalidValueError, match="valid integer"):
        parse_numeric_input("12abc", "euint8")
    with pytest.raises(InvalidValueError):
        parse_numeric_input("256", "euint8")
    with pytest.raises(InvalidValueError):
        parse_numeric_input("1", "ebool")
