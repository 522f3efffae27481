"""
Bit vectors for the DES engine.

A bit vector is a 1-D numpy ``uint8`` array holding only 0 and 1, most
significant bit first. Every helper returns a fresh array; callers that hand
vectors out (round keys) mark them read-only with :func:`freeze`.
"""
import numpy as np

from des_constants import BLOCK_SIZE, BLOCK_BITS

BytesLike = (bytes, bytearray, memoryview)


class InvalidInputLength(ValueError):
    """A key or data block was not exactly BLOCK_SIZE bytes."""

    def __init__(self, what, length, expected=BLOCK_SIZE):
        super().__init__(f"{what} must be {expected} bytes, got {length}")
        self.what = what
        self.length = length
        self.expected = expected


def bytes_to_bits(data, what="Block"):
    """Unpack 8 bytes into a 64-bit vector, byte i bit j -> position i*8+j."""
    if not isinstance(data, BytesLike):
        raise TypeError(f"Unsupported {what.lower()} type: {type(data)}")
    data = bytes(data)
    if len(data) != BLOCK_SIZE:
        raise InvalidInputLength(what, len(data))
    return np.unpackbits(np.frombuffer(data, dtype=np.uint8))


def bits_to_bytes(bits):
    """Pack a 64-bit vector back into 8 bytes."""
    if len(bits) != BLOCK_BITS:
        raise ValueError(f"Expected {BLOCK_BITS} bits, got {len(bits)}")
    return np.packbits(np.asarray(bits, dtype=np.uint8)).tobytes()


def bits_to_unsigned(bits, length):
    """Read exactly ``length`` bits as a big-endian unsigned integer."""
    assert len(bits) == length, f"expected {length} bits, got {len(bits)}"
    value = 0
    for bit in bits:
        value = (value << 1) | int(bit)
    return value


def unsigned_to_bits(value, length):
    """Write ``value`` as ``length`` bits, most significant first."""
    if not 0 <= value < (1 << length):
        raise ValueError(f"{value} does not fit in {length} bits")
    return np.array([(value >> (length - 1 - i)) & 1 for i in range(length)], dtype=np.uint8)


def permute(bits, table):
    """Select ``bits[table[i] - 1]`` for every entry of a 1-based table."""
    return bits[np.asarray(table) - 1]


def rotate_left(bits, shift):
    """Circular left shift, the leading bits wrap to the end."""
    return np.roll(bits, -shift)


def xor(a, b):
    assert len(a) == len(b), f"xor of {len(a)} and {len(b)} bits"
    return np.bitwise_xor(a, b)


def freeze(bits):
    bits.flags.writeable = False
    return bits


def bits_to_str(bits):
    """Render a vector as a '0'/'1' string for trace output."""
    return "".join("1" if b else "0" for b in bits)


def hamming_distance(a, b):
    """Number of differing bits between two equal-length blocks (bytes or vectors)."""
    if isinstance(a, BytesLike):
        a = bytes_to_bits(a)
    if isinstance(b, BytesLike):
        b = bytes_to_bits(b)
    return int(np.count_nonzero(np.asarray(a) != np.asarray(b)))
