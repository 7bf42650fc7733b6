"""
Blue Avocado - symmetric primitives for study.

Reference implementations of:
- MARS block cipher (blue_avocado.block)
- Salsa20 stream cipher (blue_avocado.stream)
- Trivium stream cipher (blue_avocado.stream)

No modes of operation, padding, key derivation or authentication, and
no side-channel resistance. Not for production use.
"""

from .block import Mars
from .stream import Salsa20, Trivium
from .exceptions import ConstructionError, UnknownCipherError
from .interfaces import BlockCipher, NonceStreamCipher, StatefulStreamCipher, is_stateful
from .registry import CIPHERS, CipherInfo, create_cipher, transform

__version__ = '0.1.0'

__all__ = [
    'Mars',
    'Salsa20',
    'Trivium',
    'ConstructionError',
    'UnknownCipherError',
    'BlockCipher',
    'NonceStreamCipher',
    'StatefulStreamCipher',
    'is_stateful',
    'CIPHERS',
    'CipherInfo',
    'create_cipher',
    'transform',
]
