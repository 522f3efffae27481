import random

import pytest

from des_bits import (
    InvalidInputLength, bits_to_unsigned, unsigned_to_bits, hamming_distance,
)
from des_tools import generate_round_keys
from des_core import (
    RoundKeyOrder, BlockDES, feistel, crypt_block, crypt_chunk,
    encrypt_block, decrypt_block, main,
)

# (key, plaintext, ciphertext) published DES vectors
KNOWN_VECTORS = [
    ("133457799BBCDFF1", "0123456789ABCDEF", "85E813540F0AB405"),
    ("0000000000000000", "0000000000000000", "8CA64DE9C1B123A7"),
    ("0123456789ABCDEF", "4E6F772069732074", "3FA40E8A984D4815"),
    ("0E329232EA6D0D73", "8787878787878787", "0000000000000000"),
]


def test_feistel_first_round():
    # R0 and f(R0, K1) for the worked example key/message
    round_keys = generate_round_keys(bytes.fromhex("133457799BBCDFF1"))
    r0 = unsigned_to_bits(0xF0AAF0AA, 32)
    out = feistel(r0, round_keys[0])
    assert len(out) == 32
    assert bits_to_unsigned(out, 32) == 0x234AA9BB


def test_feistel_rejects_wrong_sizes():
    round_keys = generate_round_keys(b"12345678")
    with pytest.raises(AssertionError):
        feistel(unsigned_to_bits(0, 28), round_keys[0])
    with pytest.raises(AssertionError):
        feistel(unsigned_to_bits(0, 32), unsigned_to_bits(0, 32))


@pytest.mark.parametrize("key,plain,cipher", KNOWN_VECTORS)
def test_known_vectors(key, plain, cipher):
    key, plain, cipher = bytes.fromhex(key), bytes.fromhex(plain), bytes.fromhex(cipher)
    assert encrypt_block(plain, key) == cipher
    assert decrypt_block(cipher, key) == plain


def test_all_zero_boundary():
    ciphertext = encrypt_block(b"\x00" * 8, b"\x00" * 8)
    assert ciphertext == bytes.fromhex("8CA64DE9C1B123A7")
    assert ciphertext != b"\x00" * 8
    assert encrypt_block(b"\x00" * 8, b"\x00" * 8) == ciphertext


def test_ascii_known_answer():
    ciphertext = encrypt_block(b"abcdefgh", b"12345678")
    assert ciphertext == bytes.fromhex("94D4436BC3B5B693")
    assert decrypt_block(ciphertext, b"12345678") == b"abcdefgh"


def test_round_trip_random():
    rng = random.Random(585)
    for _ in range(20):
        key = bytes(rng.getrandbits(8) for _ in range(8))
        block = bytes(rng.getrandbits(8) for _ in range(8))
        assert decrypt_block(encrypt_block(block, key), key) == block


def test_schedule_shared_between_directions():
    round_keys = generate_round_keys(b"12345678")
    snapshot = [rk.copy() for rk in round_keys]
    ciphertext = crypt_block(b"abcdefgh", round_keys, RoundKeyOrder.FORWARD)
    assert crypt_block(ciphertext, round_keys, RoundKeyOrder.REVERSE) == b"abcdefgh"
    assert all((a == b).all() for a, b in zip(round_keys, snapshot))


def test_crypt_block_rejects_short_schedule():
    round_keys = generate_round_keys(b"12345678")
    with pytest.raises(ValueError):
        crypt_block(b"abcdefgh", round_keys[:15])


def test_avalanche_plaintext():
    key = b"12345678"
    plaintext = b"abcdefgh"
    reference = encrypt_block(plaintext, key)
    distances = []
    for bit in range(64):
        flipped = bytearray(plaintext)
        flipped[bit // 8] ^= 0x80 >> (bit % 8)
        distances.append(hamming_distance(reference, encrypt_block(bytes(flipped), key)))
    average = sum(distances) / len(distances)
    assert 24 <= average <= 40
    assert min(distances) > 8


def test_key_sensitivity():
    plaintext = b"abcdefgh"
    key = b"12345678"
    flipped = bytes([key[0] ^ 0x80]) + key[1:]
    distance = hamming_distance(encrypt_block(plaintext, key), encrypt_block(plaintext, flipped))
    assert distance >= 16


def test_parity_bit_does_not_change_ciphertext():
    key = b"12345678"
    flipped = bytes([key[0] ^ 0x01]) + key[1:]
    assert encrypt_block(b"abcdefgh", key) == encrypt_block(b"abcdefgh", flipped)


@pytest.mark.parametrize("block,key", [
    (b"abcdefg", b"12345678"),
    (b"abcdefghi", b"12345678"),
    (b"abcdefgh", b"1234567"),
    (b"abcdefgh", b""),
])
def test_invalid_lengths(block, key):
    with pytest.raises(InvalidInputLength):
        encrypt_block(block, key)
    with pytest.raises(InvalidInputLength):
        decrypt_block(block, key)


def test_crypt_chunk():
    ciphertext = crypt_chunk(b"abcdefgh", b"12345678", "encrypt")
    assert ciphertext == encrypt_block(b"abcdefgh", b"12345678")
    assert crypt_chunk(ciphertext, b"12345678", "d") == b"abcdefgh"
    with pytest.raises(ValueError):
        crypt_chunk(b"abcdefgh", b"12345678", "sign")


def test_round_key_order_for_operation():
    assert RoundKeyOrder.for_operation("encrypt") is RoundKeyOrder.FORWARD
    assert RoundKeyOrder.for_operation("e") is RoundKeyOrder.FORWARD
    assert RoundKeyOrder.for_operation("decrypt") is RoundKeyOrder.REVERSE
    with pytest.raises(ValueError):
        RoundKeyOrder.for_operation("x")


def test_block_des_key_registry():
    pdes = BlockDES()
    pdes.add_key("key1", 0x133457799BBCDFF1)
    pdes.add_key("key2", b"12345678")

    ciphertext = pdes.encrypt(bytes.fromhex("0123456789ABCDEF"), "key1")
    assert ciphertext == bytes.fromhex("85E813540F0AB405")
    assert pdes.decrypt(ciphertext, "key1") == bytes.fromhex("0123456789ABCDEF")

    assert pdes.process(b"abcdefgh", "key2", "encrypt") == encrypt_block(b"abcdefgh", b"12345678")

    pdes.remove_key("key1")
    with pytest.raises(KeyError):
        pdes.encrypt(b"abcdefgh", "key1")


def test_main_demo(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "Ciphered text:" in out
    assert "Decrypted text: b'abcdefgh'" in out


def test_main_bad_message(capsys):
    assert main(["12345678", "short"]) == 1
    assert "invalid input" in capsys.readouterr().out


def test_block_des_re_registered_ids_stay_distinct():
    pdes = BlockDES()
    assert pdes.add_key("a", b"12345678") is None
    pdes.add_key("b", b"87654321")
    pdes.remove_key("a")
    pdes.add_key("c", b"12345678")
    assert sorted(pdes.keys) == ["b", "c"]
    assert pdes.encrypt(b"abcdefgh", "c") == bytes.fromhex("94D4436BC3B5B693")
    assert pdes.encrypt(b"abcdefgh", "b") != pdes.encrypt(b"abcdefgh", "c")


def test_main_non_ascii_argument(capsys):
    assert main(["ключ1234", "abcdefgh"]) == 1
    assert "invalid input" in capsys.readouterr().out


def test_main_utf8_argument_of_block_size(capsys):
    # two-byte characters, eight bytes in total
    assert main(["ключ", "abcdefgh"]) == 0
    assert "Decrypted text: b'abcdefgh'" in capsys.readouterr().out
