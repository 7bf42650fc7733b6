"""
Unit tests for the Salsa20 stream cipher.

Known-answer vectors are the worked examples from Bernstein's Salsa20 paper
(quarterround, rowround, columnround, doubleround, littleendian,
Salsa20 hash and expansion). Whole-message encryption is checked
against the pycryptodomex implementation.
"""

import pytest
from Cryptodome.Cipher import Salsa20 as ReferenceSalsa20

from blue_avocado.stream import salsa20 as salsa20_module
from blue_avocado.stream.salsa20 import (
    Salsa20, quarter_round, row_round, column_round, double_round,
    little_endian, salsa20_hash, expand_key,
)


MESSAGE = b"there is no spoon"


class TestQuarterRound:
    """Known-answer tests for quarterround."""

    @pytest.mark.parametrize("y, z", [
        ((0, 0, 0, 0), (0, 0, 0, 0)),
        ((1, 0, 0, 0), (0x08008145, 0x00000080, 0x00010200, 0x20500000)),
        ((0, 1, 0, 0), (0x88000100, 0x00000001, 0x00000200, 0x00402000)),
        ((0, 0, 1, 0), (0x80040000, 0x00000000, 0x00000001, 0x00002000)),
        ((0, 0, 0, 1), (0x00048044, 0x00000080, 0x00010000, 0x20100001)),
        ((0xe7e8c006, 0xc4f9417d, 0x6479b4b2, 0x68c67137),
         (0xe876d72b, 0x9361dfd5, 0xf1460244, 0x948541a3)),
        ((0xd3917c5b, 0x55f1c407, 0x52a58a7a, 0x8f887a3b),
         (0x3e2f308c, 0xd90a8f36, 0x6ab2a923, 0x2883524c)),
    ])
    def test_vectors(self, y, z):
        assert quarter_round(*y) == z


SPARSE = [
    0x00000001, 0x00000000, 0x00000000, 0x00000000,
    0x00000001, 0x00000000, 0x00000000, 0x00000000,
    0x00000001, 0x00000000, 0x00000000, 0x00000000,
    0x00000001, 0x00000000, 0x00000000, 0x00000000,
]

DENSE = [
    0x08521bd6, 0x1fe88837, 0xbb2aa576, 0x3aa26365,
    0xc54c6a5b, 0x2fc74c2f, 0x6dd39cc3, 0xda0a64f6,
    0x90a2f23d, 0x067f95a6, 0x06b35f61, 0x41e4732e,
    0xe859c100, 0xea4d84b7, 0x0f619bff, 0xbc6e965a,
]


class TestRounds:
    """Known-answer tests for rowround, columnround and doubleround."""

    def test_row_round_sparse(self):
        assert row_round(SPARSE) == [
            0x08008145, 0x00000080, 0x00010200, 0x20500000,
            0x20100001, 0x00048044, 0x00000080, 0x00010000,
            0x00000001, 0x00002000, 0x80040000, 0x00000000,
            0x00000001, 0x00000200, 0x00402000, 0x88000100,
        ]

    def test_row_round_dense(self):
        assert row_round(DENSE) == [
            0xa890d39d, 0x65d71596, 0xe9487daa, 0xc8ca6a86,
            0x949d2192, 0x764b7754, 0xe408d9b9, 0x7a41b4d1,
            0x3402e183, 0x3c3af432, 0x50669f96, 0xd89ef0a8,
            0x0040ede5, 0xb545fbce, 0xd257ed4f, 0x1818882d,
        ]

    def test_column_round_sparse(self):
        assert column_round(SPARSE) == [
            0x10090288, 0x00000000, 0x00000000, 0x00000000,
            0x00000101, 0x00000000, 0x00000000, 0x00000000,
            0x00020401, 0x00000000, 0x00000000, 0x00000000,
            0x40a04001, 0x00000000, 0x00000000, 0x00000000,
        ]

    def test_column_round_dense(self):
        assert column_round(DENSE) == [
            0x8c9d190a, 0xce8e4c90, 0x1ef8e9d3, 0x1326a71a,
            0x90a20123, 0xead3c4f3, 0x63a091a0, 0xf0708d69,
            0x789b010c, 0xd195a681, 0xeb7d5504, 0xa774135c,
            0x481c2027, 0x53a8e4b5, 0x4c1f89c5, 0x3f78c9c8,
        ]

    def test_double_round_single_bit(self):
        assert double_round([1] + [0] * 15) == [
            0x8186a22d, 0x0040a284, 0x82479210, 0x06929051,
            0x08000090, 0x02402200, 0x00004000, 0x00800000,
            0x00010200, 0x20400000, 0x08008104, 0x00000000,
            0x20500000, 0xa0000040, 0x0008180a, 0x612a8020,
        ]

    def test_double_round_dense(self):
        x = [
            0xde501066, 0x6f9eb8f7, 0xe4fbbd9b, 0x454e3f57,
            0xb75540d3, 0x43e93a4c, 0x3a6f2aa0, 0x726d6b36,
            0x9243f484, 0x9145d1e8, 0x4fa9d247, 0xdc8dee11,
            0x054bf545, 0x254dd653, 0xd9421b6d, 0x67b276c1,
        ]
        assert double_round(x) == [
            0xccaaf672, 0x23d960f7, 0x9153e63a, 0xcd9a60d0,
            0x50440492, 0xf07cad19, 0xae344aa0, 0xdf4cfdfc,
            0xca531c29, 0x8e7943db, 0xac1680cd, 0xd503ca00,
            0xa74b2ad6, 0xbc331c5c, 0x1dda24c7, 0xee928277,
        ]

    def test_rounds_do_not_mutate_input(self):
        """Round functions return new lists."""
        x = list(DENSE)
        double_round(x)
        assert x == DENSE


class TestLittleEndian:
    """Known-answer tests for littleendian."""

    def test_vectors(self):
        assert little_endian(bytes([0, 0, 0, 0])) == 0
        assert little_endian(bytes([86, 75, 30, 9])) == 0x091e4b56
        assert little_endian(bytes([255, 255, 255, 250])) == 0xfaffffff


class TestHash:
    """Known-answer tests for the Salsa20 hash function."""

    def test_zero_input(self):
        """Hash of 64 zero bytes is 64 zero bytes."""
        assert salsa20_hash(bytes(64)) == bytes(64)

    def test_vector_1(self):
        block = bytes([
            211, 159, 13, 115, 76, 55, 82, 183, 3, 117, 222, 37, 191, 187, 234, 136,
            49, 237, 179, 48, 1, 106, 178, 219, 175, 199, 166, 48, 86, 16, 179, 207,
            31, 240, 32, 63, 15, 83, 93, 161, 116, 147, 48, 113, 238, 55, 204, 36,
            79, 201, 235, 79, 3, 81, 156, 47, 203, 26, 244, 243, 88, 118, 104, 54,
        ])
        assert salsa20_hash(block) == bytes([
            109, 42, 178, 168, 156, 240, 248, 238, 168, 196, 190, 203, 26, 110, 170, 154,
            29, 29, 150, 26, 150, 30, 235, 249, 190, 163, 251, 48, 69, 144, 51, 57,
            118, 40, 152, 157, 180, 57, 27, 94, 107, 42, 236, 35, 27, 111, 114, 114,
            219, 236, 232, 135, 111, 155, 110, 18, 24, 232, 95, 158, 179, 19, 48, 202,
        ])

    def test_vector_2(self):
        block = bytes([
            88, 118, 104, 54, 79, 201, 235, 79, 3, 81, 156, 47, 203, 26, 244, 243,
            191, 187, 234, 136, 211, 159, 13, 115, 76, 55, 82, 183, 3, 117, 222, 37,
            86, 16, 179, 207, 49, 237, 179, 48, 1, 106, 178, 219, 175, 199, 166, 48,
            238, 55, 204, 36, 31, 240, 32, 63, 15, 83, 93, 161, 116, 147, 48, 113,
        ])
        assert salsa20_hash(block) == bytes([
            179, 19, 48, 202, 219, 236, 232, 135, 111, 155, 110, 18, 24, 232, 95, 158,
            26, 110, 170, 154, 109, 42, 178, 168, 156, 240, 248, 238, 168, 196, 190, 203,
            69, 144, 51, 57, 29, 29, 150, 26, 150, 30, 235, 249, 190, 163, 251, 48,
            27, 111, 114, 114, 118, 40, 152, 157, 180, 57, 27, 94, 107, 42, 236, 35,
        ])

    def test_wrong_size_rejected(self):
        with pytest.raises(ValueError):
            salsa20_hash(bytes(63))


class TestExpansion:
    """Known-answer test for the 32-byte key expansion."""

    def test_vector(self):
        k0 = bytes(range(1, 17))
        k1 = bytes(range(201, 217))
        n = bytes(range(101, 117))
        assert expand_key(k0, k1, n) == bytes([
            69, 37, 68, 39, 41, 15, 107, 193, 255, 139, 122, 6, 170, 233, 217, 98,
            89, 144, 182, 106, 21, 51, 200, 65, 239, 49, 222, 34, 215, 114, 40, 126,
            104, 197, 7, 225, 197, 153, 31, 2, 102, 78, 76, 176, 84, 245, 246, 184,
            177, 160, 133, 130, 6, 72, 149, 119, 192, 195, 132, 236, 234, 103, 246, 74,
        ])


class TestSalsa20Cipher:
    """Encryption tests for the Salsa20 engine."""

    def test_encrypt_decrypt(self):
        """Encryption followed by decryption should recover plaintext."""
        cipher = Salsa20(bytes(range(32)))
        nonce = bytes(8)
        ciphertext = cipher.encrypt(MESSAGE, nonce)
        assert ciphertext != MESSAGE
        assert cipher.decrypt(ciphertext, nonce) == MESSAGE

    def test_empty_message(self):
        cipher = Salsa20(bytes(range(32)))
        assert cipher.encrypt(b"", bytes(8)) == b""

    def test_same_instance_reusable(self):
        """The engine is stateless: repeated calls agree."""
        cipher = Salsa20(bytes(range(32)))
        assert cipher.encrypt(MESSAGE, bytes(8)) == cipher.encrypt(MESSAGE, bytes(8))

    def test_different_nonce_different_ciphertext(self):
        cipher = Salsa20(bytes(range(32)))
        assert cipher.encrypt(MESSAGE, bytes(8)) != cipher.encrypt(MESSAGE, b"\x01" + bytes(7))

    def test_keystream_block_counter(self):
        """Keystream bytes 64..127 come from block counter 1."""
        cipher = Salsa20(bytes(range(32)))
        nonce = bytes(range(8))
        stream = cipher.keystream(130, nonce)
        assert stream[:64] == cipher.keystream_block(0, nonce)
        assert stream[64:128] == cipher.keystream_block(1, nonce)
        assert stream[128:] == cipher.keystream_block(2, nonce)[:2]

    @pytest.mark.parametrize("length", [1, 17, 63, 64, 65, 128, 300])
    def test_matches_reference(self, length):
        """Ciphertext matches the pycryptodomex Salsa20 implementation."""
        key = bytes(range(32))
        nonce = bytes(range(100, 108))
        message = bytes((7 * i + 3) % 256 for i in range(length))
        expected = ReferenceSalsa20.new(key=key, nonce=nonce).encrypt(message)
        assert Salsa20(key).encrypt(message, nonce) == expected

    def test_accepts_bytearray(self):
        cipher = Salsa20(bytearray(range(32)))
        ct = cipher.encrypt(bytearray(MESSAGE), bytearray(8))
        assert cipher.decrypt(ct, bytes(8)) == MESSAGE

    def test_nonce_checked_once_per_call(self, monkeypatch):
        """A multi-block message validates the nonce once, not per block."""
        calls = []
        check = salsa20_module._check_nonce

        def counting_check(nonce):
            calls.append(nonce)
            check(nonce)

        monkeypatch.setattr(salsa20_module, '_check_nonce', counting_check)
        Salsa20(bytes(range(32))).encrypt(bytes(300), bytes(8))
        assert len(calls) == 1

    @pytest.mark.parametrize("nonce", [bytes(7), bytes(9)])
    def test_keystream_entry_points_check_nonce(self, nonce):
        """keystream() and keystream_block() reject a wrong-size nonce."""
        cipher = Salsa20(bytes(range(32)))
        with pytest.raises(ValueError):
            cipher.keystream(10, nonce)
        with pytest.raises(ValueError):
            cipher.keystream_block(0, nonce)
