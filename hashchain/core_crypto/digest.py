"""
Block Digest Module

Computes the content hash that binds a block to its fields:

    SHA-256( index + previous_hash + timestamp + data )

The four fields are concatenated as text in that fixed order, encoded as
UTF-8 and hashed. Numbers are rendered the way JavaScript renders them
(1465154705, not 1465154705.0) so digests stay bit-compatible with chains
built by existing nodes.

Author: hashchain Project
"""

import string
from decimal import Decimal
from typing import Union

from cryptography.hazmat.primitives import hashes


# ============================================================================
# Constants
# ============================================================================

HASH_HEX_LENGTH = 64  # SHA-256 digest rendered as lowercase hex
HEX_DIGITS = frozenset(string.hexdigits.lower())

# JavaScript switches to exponent notation outside this range
FIXED_NOTATION_MIN = 1e-6
FIXED_NOTATION_MAX = 1e21
MAX_SAFE_INTEGER = 2 ** 53

Number = Union[int, float]


# ============================================================================
# Hashing
# ============================================================================

def sha256_hex(payload: bytes) -> str:
    """Return the SHA-256 digest of payload as lowercase hex."""
    digest = hashes.Hash(hashes.SHA256())
    digest.update(payload)
    return digest.finalize().hex()


def is_hex_digest(value) -> bool:
    """True if value looks like a SHA-256 hex digest."""
    return (
        isinstance(value, str) and
        len(value) == HASH_HEX_LENGTH and
        all(char in HEX_DIGITS for char in value)
    )


def format_number(value: Number) -> str:
    """
    Render a number as JavaScript's Number.prototype.toString would.

    Args:
        value: int or float

    Returns:
        Text form used in the hash preimage

    Raises:
        TypeError: If value is not an int or float (bool included)
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Expected a number, got {type(value).__name__}")

    if isinstance(value, int):
        return str(value)

    if value != value:
        return "NaN"
    if value in (float("inf"), float("-inf")):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    magnitude = abs(value)
    if value.is_integer() and magnitude < MAX_SAFE_INTEGER:
        return str(int(value))

    # repr() gives the shortest round-tripping digits, same as JavaScript
    text = repr(value)
    if FIXED_NOTATION_MIN <= magnitude < FIXED_NOTATION_MAX:
        fixed = Decimal(text)
        if value.is_integer():
            # repr keeps a trailing ".0" up to 1e16
            fixed = fixed.to_integral_value()
        return format(fixed, 'f')

    mantissa, _, exponent = text.partition('e')
    return f"{mantissa}e{int(exponent):+d}"


def calculate_block_hash(
    index: int,
    previous_hash: str,
    timestamp: Number,
    data: str
) -> str:
    """
    Calculate a block's hash from its four input fields.

    Args:
        index: Position of the block in the chain
        previous_hash: Hash of the preceding block ("" for genesis)
        timestamp: Creation time in seconds since epoch
        data: Block payload

    Returns:
        64-character lowercase hex digest
    """
    preimage = format_number(index) + previous_hash + format_number(timestamp) + data
    return sha256_hex(preimage.encode('utf-8'))


# ============================================================================
# Self-Test
# ============================================================================

def _run_tests():
    """Quick sanity checks for the digest module."""
    print("Block Digest Module Test")
    print("=" * 60)

    empty = sha256_hex(b"")
    ok_empty = empty == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    print(f"\n[Test 1] SHA-256 of empty input: {'✓ PASS' if ok_empty else '✗ FAIL'}")

    ok_numbers = (
        format_number(1465154705.0) == "1465154705" and
        format_number(0.1) == "0.1" and
        format_number(1.5e-7) == "1.5e-7" and
        format_number(1e21) == "1e+21"
    )
    print(f"[Test 2] JavaScript number rendering: {'✓ PASS' if ok_numbers else '✗ FAIL'}")

    h1 = calculate_block_hash(1, "ab" * 32, 1465154706, "Test")
    h2 = calculate_block_hash(1, "ab" * 32, 1465154706, "Test")
    ok_det = h1 == h2 and is_hex_digest(h1)
    print(f"[Test 3] Deterministic block hash: {'✓ PASS' if ok_det else '✗ FAIL'}")

    return ok_empty and ok_numbers and ok_det


if __name__ == "__main__":
    success = _run_tests()
    exit(0 if success else 1)
