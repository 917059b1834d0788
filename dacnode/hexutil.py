"""Hexadecimal text encodings used by the RPC layer and the wire types."""

from __future__ import annotations

import string

HASH_LENGTH = 32
ADDRESS_LENGTH = 20

_HEX_DIGITS = frozenset(string.hexdigits)
_UINT64_LIMIT = 1 << 64


def _strip_0x(text: str) -> str:
    return text[2:] if text.startswith("0x") else text


def _is_hex(text: str) -> bool:
    return all(char in _HEX_DIGITS for char in text)


def encode_uint64(value: int) -> str:
    """Encode an unsigned 64-bit integer as ``0x``-prefixed hex."""
    if not 0 <= value < _UINT64_LIMIT:
        raise ValueError(f"value out of uint64 range: {value}")
    return f"0x{value:x}"


def decode_uint64(text: str) -> int:
    """Parse hex text, with or without a ``0x`` prefix, into a uint64."""
    digits = _strip_0x(text)
    if not digits or not _is_hex(digits):
        raise ValueError(f"invalid syntax for uint64: {text!r}")
    value = int(digits, 16)
    if value >= _UINT64_LIMIT:
        raise ValueError(f"value out of range for uint64: {text!r}")
    return value


def encode_bytes(data: bytes) -> str:
    """Encode bytes as ``0x``-prefixed lower-case hex."""
    return "0x" + bytes(data).hex()


def decode_bytes(text: str) -> bytes:
    """Decode hex text into bytes; an odd number of digits gets a leading zero."""
    digits = _strip_0x(text)
    if not _is_hex(digits):
        raise ValueError(f"invalid hex string: {text!r}")
    if len(digits) % 2:
        digits = "0" + digits
    return bytes.fromhex(digits)


def hex_is_valid(text: str) -> bool:
    """Tell whether the text, minus an optional ``0x`` prefix, is only hex digits."""
    return _is_hex(_strip_0x(text))


def hex_encode_big(value: int) -> str:
    """Encode an arbitrary integer as ``0x``-prefixed hex."""
    if value == 0:
        return "0x0"
    return format(value, "#x")


def encode_big(value: int) -> str:
    """Encode a big integer for the wire."""
    return "0x" + format(value, "x")


def decode_big(text: str) -> int:
    """Decode hex text into a non-negative big integer."""
    return int.from_bytes(decode_bytes(text), "big")


def _lenient_hex(text: str) -> bytes:
    if len(text) >= 2 and text[0] == "0" and text[1] in "xX":
        text = text[2:]
    if len(text) % 2:
        text = "0" + text
    decoded = bytearray()
    for start in range(0, len(text), 2):
        pair = text[start:start + 2]
        if not _is_hex(pair):
            break
        decoded.append(int(pair, 16))
    return bytes(decoded)


def _fit(data: bytes, size: int) -> bytes:
    return data[-size:].rjust(size, b"\x00")


def hex_to_hash(text: str) -> bytes:
    """Turn hex text into a 32-byte hash, keeping the rightmost bytes."""
    return _fit(_lenient_hex(text), HASH_LENGTH)


def hex_to_address(text: str) -> bytes:
    """Turn hex text into a 20-byte address, keeping the rightmost bytes."""
    return _fit(_lenient_hex(text), ADDRESS_LENGTH)


def parse_hash(text: str) -> bytes:
    """Parse a possibly short hex hash such as ``0x00`` into 32 bytes."""
    if not hex_is_valid(text):
        raise ValueError("invalid hash, it needs to be a hexadecimal value")
    return hex_to_hash(_strip_0x(text))