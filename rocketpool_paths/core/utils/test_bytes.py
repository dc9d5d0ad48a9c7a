import pytest

from rocketpool_paths.core.constants.base import MAX_UINT256
from rocketpool_paths.core.errors import InvalidInputError
from rocketpool_paths.core.utils.bytes import (
    hex_to_bytes,
    int_to_bytes32,
    to_address_bytes,
)


def test_int_to_bytes32_pads_left():
    assert int_to_bytes32(0) == bytes(32)
    assert int_to_bytes32(1) == bytes(31) + b"\x01"
    assert int_to_bytes32(MAX_UINT256) == b"\xff" * 32


def test_int_to_bytes32_rejects_overflow_instead_of_truncating():
    with pytest.raises(InvalidInputError):
        int_to_bytes32(MAX_UINT256 + 1)


def test_invalid_input_is_a_value_error():
    with pytest.raises(ValueError):
        int_to_bytes32(-5)


@pytest.mark.parametrize(
    "value",
    [
        "0x" + "ab" * 20,
        "0X" + "AB" * 20,
        "ab" * 20,
        bytes.fromhex("ab" * 20),
        bytearray.fromhex("ab" * 20),
    ],
)
def test_to_address_bytes_accepts_common_forms(value):
    assert to_address_bytes(value) == bytes.fromhex("ab" * 20)


@pytest.mark.parametrize(
    "value", ["0x" + "ab" * 19, "0x" + "zz" * 20, bytes(32), 1234]
)
def test_to_address_bytes_rejects(value):
    with pytest.raises(InvalidInputError):
        to_address_bytes(value)


def test_hex_to_bytes():
    assert hex_to_bytes(None) == b""
    assert hex_to_bytes("0x") == b""
    assert hex_to_bytes("0x6000") == b"\x60\x00"
    assert hex_to_bytes(b"\x01") == b"\x01"
    with pytest.raises(InvalidInputError):
        hex_to_bytes("0xnothex")
