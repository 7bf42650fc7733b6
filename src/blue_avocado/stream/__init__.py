"""
Stream Ciphers

- Salsa20: ARX hash in counter mode, 32-byte key, 8-byte nonce (stateless)
- Trivium: three coupled NLFSRs, 10-byte IV and key (stateful)
"""

from .salsa20 import (
    Salsa20,
    quarter_round,
    row_round,
    column_round,
    double_round,
    little_endian,
    salsa20_hash,
)

from .trivium import (
    Trivium,
    ShiftRegister,
    RegisterLayout,
    R1,
    R2,
    R3,
    WARMUP_CYCLES,
)

__all__ = [
    # Salsa20
    'Salsa20',
    'quarter_round',
    'row_round',
    'column_round',
    'double_round',
    'little_endian',
    'salsa20_hash',
    # Trivium
    'Trivium',
    'ShiftRegister',
    'RegisterLayout',
    'R1',
    'R2',
    'R3',
    'WARMUP_CYCLES',
]
