"""
Capability Protocols

The three engines share no code. These protocols only describe the call
surfaces a harness can rely on:

- BlockCipher: pure transform of one fixed-size block
- NonceStreamCipher: pure keystream cipher, the nonce is passed per call
  and any keystream block can be generated directly
- StatefulStreamCipher: keystream cipher whose state advances with every call
  and is clocked a byte at a time

Each protocol has a member the others lack, so isinstance() separates
the engines.

Every engine class also carries a STATEFUL flag. A stateful engine is
spent by use: decrypting needs a second instance built from the same
(key, IV), never the instance that encrypted.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class BlockCipher(Protocol):
    """Pure block transform."""

    STATEFUL: bool

    def encrypt_block(self, block: bytes) -> bytes:
        ...

    def decrypt_block(self, block: bytes) -> bytes:
        ...


@runtime_checkable
class NonceStreamCipher(Protocol):
    """Pure stream cipher keyed once and given a nonce on every call."""

    STATEFUL: bool

    def encrypt(self, message: bytes, nonce: bytes) -> bytes:
        ...

    def decrypt(self, message: bytes, nonce: bytes) -> bytes:
        ...

    def keystream_block(self, counter: int, nonce: bytes) -> bytes:
        ...


@runtime_checkable
class StatefulStreamCipher(Protocol):
    """Stream cipher that consumes its internal state."""

    STATEFUL: bool

    def encrypt(self, message: bytes) -> bytes:
        ...

    def decrypt(self, message: bytes) -> bytes:
        ...

    def clock_byte(self) -> int:
        ...


def is_stateful(cipher) -> bool:
    """Return True if calling the cipher advances its internal state."""
    return bool(getattr(cipher, 'STATEFUL', False))
