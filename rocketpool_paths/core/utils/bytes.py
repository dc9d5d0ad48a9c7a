from __future__ import annotations

from eth_utils import is_hex, to_bytes

from rocketpool_paths.core.constants.base import ADDRESS_LENGTH, MAX_UINT256, WORD_LENGTH
from rocketpool_paths.core.errors import InvalidInputError

AddressLike = bytes | bytearray | str


def require_length(value: bytes, length: int, name: str) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise InvalidInputError(f"{name} must be bytes, got {type(value).__name__}")
    if len(value) != length:
        raise InvalidInputError(f"{name} must be {length} bytes, got {len(value)}")
    return bytes(value)


def to_address_bytes(value: AddressLike, name: str = "Address") -> bytes:
    """Normalise a 20-byte address given as raw bytes or a hex string."""
    if isinstance(value, str):
        s = value.strip()
        if not is_hex(s) or len(s.removeprefix("0x").removeprefix("0X")) != 2 * ADDRESS_LENGTH:
            raise InvalidInputError(f"{name} must be a 20-byte hex string, got {value!r}")
        return to_bytes(hexstr=s)
    return require_length(value, ADDRESS_LENGTH, name)


def int_to_bytes32(value: int, name: str = "Salt") -> bytes:
    """Serialise as a fixed 32-byte big-endian word, rejecting overflow."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise InvalidInputError(f"{name} must be non-negative, got {value}")
    if value > MAX_UINT256:
        raise InvalidInputError(f"{name} does not fit in {WORD_LENGTH} bytes")
    return value.to_bytes(WORD_LENGTH, "big")


def hex_to_bytes(value: bytes | bytearray | str | None) -> bytes:
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    s = value.strip()
    if not s or s in ("0x", "0X"):
        return b""
    if not is_hex(s):
        raise InvalidInputError(f"Expected hex string, got {value[:16]!r}...")
    return to_bytes(hexstr=s)
