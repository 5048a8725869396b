"""Wire encodings used by the hashing service.
"""

from __future__ import annotations

import base64
import struct

_UINT32_MASK = 0xFFFFFFFF
_INT32_SIGN = 1 << 31


def double_to_long_bits(value: float) -> int:
    """Raw IEEE-754 bit pattern of a double as a signed 64-bit integer."""
    return struct.unpack("<q", struct.pack("<d", value))[0]


def fold_hash(value: int) -> int:
    """Fold a 64-bit hash into a signed 32-bit one (high word XOR low word)."""
    folded = (value & _UINT32_MASK) ^ ((value >> 32) & _UINT32_MASK)
    return folded - (1 << 32) if folded & _INT32_SIGN else folded


def encode_bytes(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode_bytes(data: str) -> bytes:
    return base64.b64decode(data, validate=True)
