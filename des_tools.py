import numpy as np

from des_constants import PC1, PC2, SHIFTS, KEY_SIZE, KEY_HALF_BITS
from des_bits import BytesLike, bytes_to_bits, permute, rotate_left, freeze
from des_trace import NULL_TRACER


def key_to_bytes(key):
    """Accept an 8 byte key or a 64-bit integer."""
    if isinstance(key, int) and not isinstance(key, bool):
        if not 0 <= key < (1 << 64):
            raise ValueError(f"Integer key out of range: {key:#x}")
        return key.to_bytes(KEY_SIZE, byteorder='big')
    if isinstance(key, BytesLike):
        return bytes(key)
    raise TypeError(f"Unsupported key type: {type(key)}")


def generate_round_keys(key, tracer=NULL_TRACER):
    """Generate the 16 round keys (48-bit vectors) in encryption order"""
    bits = bytes_to_bits(key_to_bytes(key), what="Key")

    permuted_key = permute(bits, PC1)
    c, d = permuted_key[:KEY_HALF_BITS], permuted_key[KEY_HALF_BITS:]
    tracer.key_halves(c, d)

    round_keys = []
    for i, shift in enumerate(SHIFTS):
        c, d = rotate_left(c, shift), rotate_left(d, shift)
        tracer.key_shift(i, c, d)

        round_key = freeze(permute(np.concatenate((c, d)), PC2))
        tracer.round_key(i, round_key)
        round_keys.append(round_key)

    return tuple(round_keys)
