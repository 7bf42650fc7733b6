"""
Cipher Registry

Uniform dispatch over the three engines by name, for harnesses and the
command line. Key material is always given as raw bytes here.
"""

import logging
import struct
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .block.mars import Mars
from .stream.salsa20 import Salsa20
from .stream.trivium import Trivium
from .exceptions import ConstructionError, UnknownCipherError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CipherInfo:
    """Sizes and properties of a registered engine."""
    name: str
    cls: type
    key_sizes: Tuple[int, ...]  # accepted key lengths in bytes
    nonce_size: Optional[int]   # nonce (Salsa20) or IV (Trivium) length
    stateful: bool
    description: str


CIPHERS: Dict[str, CipherInfo] = {
    'mars': CipherInfo(
        name='mars',
        cls=Mars,
        key_sizes=tuple(range(16, 57, 4)),
        nonce_size=None,
        stateful=False,
        description='MARS block cipher, one 16-byte block',
    ),
    'salsa20': CipherInfo(
        name='salsa20',
        cls=Salsa20,
        key_sizes=(32,),
        nonce_size=8,
        stateful=False,
        description='Salsa20/20 stream cipher',
    ),
    'trivium': CipherInfo(
        name='trivium',
        cls=Trivium,
        key_sizes=(10,),
        nonce_size=10,
        stateful=True,
        description='Trivium stream cipher (fresh instance per message)',
    ),
}


def get_cipher_info(name: str) -> CipherInfo:
    """Look up a registered engine, case-insensitively."""
    try:
        return CIPHERS[name.lower()]
    except KeyError:
        raise UnknownCipherError(name) from None


def create_cipher(name: str, key: bytes, iv: Optional[bytes] = None):
    """
    Construct an engine from raw key bytes.

    Args:
        name: 'mars', 'salsa20' or 'trivium'
        key: Key bytes (MARS keys are read as little-endian 32-bit words)
        iv: Trivium IV; not used by the other engines

    Returns:
        Keyed engine instance

    Raises:
        UnknownCipherError: If the name is not registered
        ConstructionError: If the key material is rejected
    """
    info = get_cipher_info(name)

    if info.cls is Mars:
        return Mars.from_bytes(key)
    if info.cls is Trivium:
        if iv is None:
            raise ConstructionError("Trivium requires a 10-byte IV")
        return Trivium(iv, key)
    return info.cls(key)


def transform(name: str, key: bytes, data: bytes,
              nonce: Optional[bytes] = None, decrypt: bool = False) -> bytes:
    """
    Encrypt or decrypt data in one call.

    MARS takes exactly one 16-byte block. Salsa20 needs its nonce and
    Trivium its IV in `nonce`. Trivium is rebuilt for every call, so the
    same (key, IV) always starts from the same keystream position.

    Args:
        name: Registered cipher name
        key: Key bytes
        data: Plaintext or ciphertext
        nonce: Salsa20 nonce or Trivium IV
        decrypt: Decrypt instead of encrypt

    Returns:
        Transformed bytes
    """
    info = get_cipher_info(name)

    if info.nonce_size is None and nonce is not None:
        raise ValueError(f"{info.name} does not take a nonce")
    if info.nonce_size is not None and nonce is None:
        raise ValueError(f"{info.name} requires a {info.nonce_size}-byte nonce/IV")

    cipher = create_cipher(info.name, key, iv=nonce)
    direction = 'decrypt' if decrypt else 'encrypt'
    logger.debug("%s: %s %d bytes", info.name, direction, len(data))

    if isinstance(cipher, Mars):
        return cipher.decrypt_block(data) if decrypt else cipher.encrypt_block(data)
    if isinstance(cipher, Salsa20):
        return cipher.decrypt(data, nonce) if decrypt else cipher.encrypt(data, nonce)
    return cipher.decrypt(data) if decrypt else cipher.encrypt(data)
