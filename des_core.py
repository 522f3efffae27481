import enum
import logging
import sys

import numpy as np

from des_constants import IP, FP, E, P, SBOXES, ROUNDS, HALF_BITS, ROUND_KEY_BITS
from des_bits import (
    bytes_to_bits, bits_to_bytes, bits_to_unsigned, unsigned_to_bits, permute, xor,
    InvalidInputLength,
)
from des_tools import generate_round_keys
from des_trace import NULL_TRACER, LoggingTracer

log = logging.getLogger(__name__)


class RoundKeyOrder(enum.Enum):
    FORWARD = "forward"
    REVERSE = "reverse"

    @classmethod
    def for_operation(cls, operation):
        """Map 'encrypt' / 'decrypt' (or 'e' / 'd') onto a key order"""
        if operation in ("encrypt", "e"):
            return cls.FORWARD
        if operation in ("decrypt", "d"):
            return cls.REVERSE
        raise ValueError(f"Unknown operation: {operation!r}")


def feistel(half, round_key, tracer=NULL_TRACER, round_index=0):
    """
    The DES round function f(R, K).

    Expands the 32-bit half through E, XORs the round key, substitutes each
    6-bit group through its S-box (row from the outer bits, column from the
    middle four) and permutes the 32-bit result through P.
    """
    assert len(half) == HALF_BITS, f"f() needs {HALF_BITS} bits, got {len(half)}"
    assert len(round_key) == ROUND_KEY_BITS, f"round key needs {ROUND_KEY_BITS} bits, got {len(round_key)}"

    xored = xor(permute(half, E), round_key)
    tracer.expanded_xor(round_index, xored)

    sboxed = np.empty(HALF_BITS, dtype=np.uint8)
    for i, sbox in enumerate(SBOXES):
        chunk = xored[i * 6:(i + 1) * 6]
        row = bits_to_unsigned(chunk[[0, 5]], 2)
        col = bits_to_unsigned(chunk[1:5], 4)
        value = sbox[row * 16 + col]
        sboxed[i * 4:(i + 1) * 4] = unsigned_to_bits(value, 4)
        tracer.sbox_lookup(round_index, i, chunk, row, col, value)
    tracer.sbox_output(round_index, sboxed)

    return permute(sboxed, P)


def crypt_block(block, round_keys, order=RoundKeyOrder.FORWARD, tracer=NULL_TRACER):
    """
    Run one 8 byte block through IP, 16 Feistel rounds and IP^-1.

    Encryption and decryption differ only in ``order``: the schedule is
    walked front to back or back to front, it is never modified.
    """
    if len(round_keys) != ROUNDS:
        raise ValueError(f"Expected {ROUNDS} round keys, got {len(round_keys)}")

    bits = bytes_to_bits(block)
    tracer.message(block, bits)

    permuted = permute(bits, IP)
    left, right = permuted[:HALF_BITS], permuted[HALF_BITS:]
    tracer.initial_permutation(permuted, left, right)

    keys = round_keys if order is RoundKeyOrder.FORWARD else reversed(round_keys)
    for n, round_key in enumerate(keys, 1):
        f_out = feistel(right, round_key, tracer, n)
        left, right = right, xor(left, f_out)
        tracer.round_output(n, f_out, left, right)

    # R16 L16, halves swapped before the final permutation
    final = permute(np.concatenate((right, left)), FP)
    tracer.final_block(final)
    return bits_to_bytes(final)


def encrypt_block(plaintext, key, tracer=NULL_TRACER):
    round_keys = generate_round_keys(key, tracer)
    return crypt_block(plaintext, round_keys, RoundKeyOrder.FORWARD, tracer)


def decrypt_block(ciphertext, key, tracer=NULL_TRACER):
    round_keys = generate_round_keys(key, tracer)
    return crypt_block(ciphertext, round_keys, RoundKeyOrder.REVERSE, tracer)


def crypt_chunk(data, key, operation, tracer=NULL_TRACER):
    """Encrypt or decrypt one block, ``operation`` is 'encrypt' or 'decrypt'"""
    order = RoundKeyOrder.for_operation(operation)
    return crypt_block(data, generate_round_keys(key, tracer), order, tracer)


class BlockDES:
    """
    Single-block DES with a registry of key schedules.

    Keys are registered once under an id; every later encrypt/decrypt reuses
    the cached round keys in the order the operation needs. Cached schedules
    are immutable tuples of read-only vectors, so one instance can be shared
    between threads once its keys are registered.
    """

    def __init__(self, tracer=None):
        self.tracer = tracer or NULL_TRACER
        self.keys = {}  # key_id -> round keys

    def add_key(self, key_id, key):
        """Add a key to the key storage"""
        log.info("Adding key %s", key_id)
        self.keys[key_id] = generate_round_keys(key, self.tracer)

    def remove_key(self, key_id):
        del self.keys[key_id]

    def round_keys(self, key_id):
        try:
            return self.keys[key_id]
        except KeyError:
            raise KeyError(f"Unknown key id: {key_id!r}") from None

    def process(self, block, key_id, operation):
        order = RoundKeyOrder.for_operation(operation)
        return crypt_block(block, self.round_keys(key_id), order, self.tracer)

    def encrypt(self, block, key_id):
        return self.process(block, key_id, 'encrypt')

    def decrypt(self, block, key_id):
        return self.process(block, key_id, 'decrypt')


def _to_block(text):
    return text.encode('utf-8', 'surrogateescape') if isinstance(text, str) else text


def main(argv=None):
    argv = list(sys.argv[1:] if argv is None else argv)
    trace = "--trace" in argv
    args = [a for a in argv if a != "--trace"]

    key = _to_block(args[0]) if len(args) > 0 else b"12345678"
    message = _to_block(args[1]) if len(args) > 1 else b"abcdefgh"

    tracer = NULL_TRACER
    if trace:
        logging.basicConfig(level=logging.DEBUG, format="DEBUG %(message)s")
        tracer = LoggingTracer()

    print(f"64(56) bit key: {key!r}")
    print(f"Plain msg: {message!r}")

    try:
        ciphertext = encrypt_block(message, key, tracer)
    except InvalidInputLength as e:
        print(f"invalid input: {e}")
        return 1
    print(f"Ciphered text: {ciphertext.hex().upper()}")

    decrypted = decrypt_block(ciphertext, key, tracer)
    print(f"Decrypted text: {decrypted!r}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
