"""
Salsa20 Stream Cipher

Implements Salsa20/20 with a 256-bit key and a 64-bit nonce.
The Salsa20 hash function is run in counter mode: block i of the
keystream is the hash of (constants, key, nonce, little-endian i).

Components:
- quarterround / rowround / columnround / doubleround (ARX mixing)
- Salsa20 hash: 10 double rounds plus feed-forward of the input words
- Expansion: "expand 32-byte k" layout of key, nonce and counter
- XOR of the message with the keystream

Security Note:
    Never reuse a (key, nonce) pair for two messages. The engine does
    not track nonces and cannot detect reuse.
"""

import logging
import struct
from typing import List, Sequence, Tuple

from Cryptodome.Util.strxor import strxor

from ..exceptions import ConstructionError

logger = logging.getLogger(__name__)


MASK_32 = 0xFFFFFFFF

KEY_SIZE = 32
NONCE_SIZE = 8
BLOCK_SIZE = 64
DOUBLE_ROUNDS = 10

# "expand 32-byte k", split into the four words placed on the diagonal
SIGMA = (b'expa', b'nd 3', b'2-by', b'te k')

# Word indices fed to each quarterround, in (y0, y1, y2, y3) order
COLUMN_GROUPS = ((0, 4, 8, 12), (5, 9, 13, 1), (10, 14, 2, 6), (15, 3, 7, 11))
ROW_GROUPS = ((0, 1, 2, 3), (5, 6, 7, 4), (10, 11, 8, 9), (15, 12, 13, 14))


def rotate_left(value: int, amount: int) -> int:
    """Left rotate a 32-bit integer by the specified amount."""
    return ((value << amount) | (value >> (32 - amount))) & MASK_32


def quarter_round(y0: int, y1: int, y2: int, y3: int) -> Tuple[int, int, int, int]:
    """
    Salsa20 quarterround.

    z1 = y1 ^ ((y0 + y3) <<< 7)
    z2 = y2 ^ ((z1 + y0) <<< 9)
    z3 = y3 ^ ((z2 + z1) <<< 13)
    z0 = y0 ^ ((z3 + z2) <<< 18)
    """
    z1 = y1 ^ rotate_left((y0 + y3) & MASK_32, 7)
    z2 = y2 ^ rotate_left((z1 + y0) & MASK_32, 9)
    z3 = y3 ^ rotate_left((z2 + z1) & MASK_32, 13)
    z0 = y0 ^ rotate_left((z3 + z2) & MASK_32, 18)
    return z0, z1, z2, z3


def _apply_groups(words: Sequence[int], groups) -> List[int]:
    out = list(words)
    for group in groups:
        mixed = quarter_round(*(words[i] for i in group))
        for index, value in zip(group, mixed):
            out[index] = value
    return out


def row_round(y: Sequence[int]) -> List[int]:
    """Apply quarterround to each row of the 4x4 word matrix."""
    return _apply_groups(y, ROW_GROUPS)


def column_round(x: Sequence[int]) -> List[int]:
    """Apply quarterround to each column of the 4x4 word matrix."""
    return _apply_groups(x, COLUMN_GROUPS)


def double_round(x: Sequence[int]) -> List[int]:
    """A column round followed by a row round."""
    return row_round(column_round(x))


def little_endian(b: bytes) -> int:
    """Read 4 bytes as a little-endian 32-bit word."""
    return struct.unpack('<I', bytes(b))[0]


def salsa20_hash(block: bytes) -> bytes:
    """
    Salsa20 hash function (core) of a 64-byte input.

    Args:
        block: 64 bytes

    Returns:
        64-byte output: the input words after 10 double rounds, with the
        original input words added back (mod 2^32)
    """
    if len(block) != BLOCK_SIZE:
        raise ValueError(f"Salsa20 hash input must be {BLOCK_SIZE} bytes, got {len(block)}")

    x = struct.unpack('<16I', bytes(block))
    z = list(x)
    for _ in range(DOUBLE_ROUNDS):
        z = double_round(z)

    return struct.pack('<16I', *((zi + xi) & MASK_32 for zi, xi in zip(z, x)))


def expand_key(k0: bytes, k1: bytes, n: bytes) -> bytes:
    """
    Salsa20 expansion for 32-byte keys.

    Hashes sigma0 | k0 | sigma1 | n | sigma2 | k1 | sigma3.

    Args:
        k0: First 16 bytes of the key
        k1: Last 16 bytes of the key
        n: 16 bytes, nonce followed by the little-endian block counter

    Returns:
        64-byte keystream block
    """
    return salsa20_hash(
        SIGMA[0] + bytes(k0) + SIGMA[1] + bytes(n) + SIGMA[2] + bytes(k1) + SIGMA[3]
    )


class Salsa20:
    """
    Salsa20 stream cipher keyed with 32 bytes.

    The key is the only state and never changes, so encrypt() is a pure
    function of (key, nonce, message). Decryption is the same operation.

    Example:
        >>> cipher = Salsa20(bytes(range(32)))
        >>> ct = cipher.encrypt(b"there is no spoon", bytes(8))
        >>> cipher.decrypt(ct, bytes(8))
        b'there is no spoon'
    """

    STATEFUL = False

    def __init__(self, key: bytes):
        """
        Key the cipher.

        Args:
            key: 32-byte key

        Raises:
            ConstructionError: If the key is not 32 bytes
        """
        if len(key) != KEY_SIZE:
            raise ConstructionError(f"Salsa20 key must be {KEY_SIZE} bytes, got {len(key)}")

        key = bytes(key)
        self._k0 = key[:16]
        self._k1 = key[16:]

        logger.debug("Salsa20 engine keyed")

    def keystream_block(self, counter: int, nonce: bytes) -> bytes:
        """
        Generate keystream block number `counter` for a nonce.

        Args:
            counter: Block index (64-bit)
            nonce: 8-byte nonce

        Returns:
            64 keystream bytes
        """
        _check_nonce(nonce)
        return self._block(counter, bytes(nonce))

    def keystream(self, length: int, nonce: bytes) -> bytes:
        """Generate the first `length` keystream bytes for a nonce."""
        _check_nonce(nonce)
        return self._keystream(length, bytes(nonce))

    def encrypt(self, message: bytes, nonce: bytes) -> bytes:
        """
        Encrypt a message of any length.

        Byte i is XORed with byte (i mod 64) of keystream block i // 64.

        Args:
            message: Data to encrypt
            nonce: 8-byte nonce, never reused with the same key

        Returns:
            Ciphertext, same length as the message
        """
        _check_nonce(nonce)
        if not message:
            return b''
        return strxor(bytes(message), self._keystream(len(message), bytes(nonce)))

    def decrypt(self, ciphertext: bytes, nonce: bytes) -> bytes:
        """
        Decrypt a message.

        XOR is its own inverse, so this is encrypt() with the same nonce.
        A wrong key or nonce yields garbage, not an error.
        """
        return self.encrypt(ciphertext, nonce)

    def _block(self, counter: int, nonce: bytes) -> bytes:
        return expand_key(self._k0, self._k1, nonce + struct.pack('<Q', counter))

    def _keystream(self, length: int, nonce: bytes) -> bytes:
        blocks = (length + BLOCK_SIZE - 1) // BLOCK_SIZE
        stream = b''.join(self._block(i, nonce) for i in range(blocks))
        return stream[:length]

    def __repr__(self) -> str:
        return "Salsa20(key=<32 bytes>)"


def _check_nonce(nonce: bytes) -> None:
    if len(nonce) != NONCE_SIZE:
        raise ValueError(f"Salsa20 nonce must be {NONCE_SIZE} bytes, got {len(nonce)}")
