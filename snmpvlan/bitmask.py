"""dot1q PortList bitmask codec and mask algebra.

Port ``p`` (1-based) lives in byte ``(p - 1) // 8`` at bit ``7 - (p - 1) % 8``,
i.e. the most significant bit of the first byte is port 1.

All binary operators require equal-length operands. A length mismatch means
masks from different switches (or widths) were mixed up, which is a bug in
the caller, so it raises ``ValueError`` rather than a domain error.
"""

from __future__ import annotations

import math
from typing import Iterable


def mask_byte_len(port_count: int) -> int:
    """Number of bytes needed to hold ``port_count`` port bits."""
    return math.ceil(port_count / 8)


def empty_mask(byte_len: int) -> bytes:
    return bytes(byte_len)


def encode(ports: Iterable[int], byte_len: int) -> bytes:
    """Set exactly the bits of ``ports`` in a ``byte_len`` wide mask."""
    mask = bytearray(byte_len)
    for port in ports:
        byte_idx, bit = divmod(port - 1, 8)
        if port < 1 or byte_idx >= byte_len:
            raise ValueError(f"port {port} does not fit a {byte_len}-byte mask")
        mask[byte_idx] |= 0x80 >> bit
    return bytes(mask)


def decode(mask: bytes) -> set[int]:
    """Decode a PortList into the set of 1-based member ports."""
    ports: set[int] = set()
    for byte_idx, byte_val in enumerate(mask):
        for bit in range(8):
            if byte_val & (0x80 >> bit):
                ports.add(byte_idx * 8 + bit + 1)
    return ports


def _check_lengths(a: bytes, b: bytes) -> None:
    if len(a) != len(b):
        raise ValueError(f"mask length mismatch: {len(a)} != {len(b)} bytes")


def merge(a: bytes, b: bytes) -> bytes:
    """Bytewise OR, used to add membership."""
    _check_lengths(a, b)
    return bytes(x | y for x, y in zip(a, b))


def complement(a: bytes) -> bytes:
    """Bytewise XOR 0xFF."""
    return bytes(x ^ 0xFF for x in a)


def subtract(a: bytes, b: bytes) -> bytes:
    """``a AND (NOT b)``, used to remove membership."""
    _check_lengths(a, b)
    return bytes(x & y for x, y in zip(a, complement(b)))


def fit(mask: bytes, byte_len: int) -> bytes:
    """Right-pad ``mask`` with zero bytes up to ``byte_len``; longer masks are returned unchanged."""
    if len(mask) >= byte_len:
        return bytes(mask)
    return bytes(mask) + bytes(byte_len - len(mask))


def is_empty(mask: bytes) -> bool:
    return not any(mask)


def to_hex(mask: bytes) -> str:
    """Render ``b'\\xf0\\x00'`` as ``'F0 00'`` for a Hex-STRING SET."""
    return " ".join(f"{b:02X}" for b in mask)
