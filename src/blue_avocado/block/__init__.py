"""
Block Ciphers

- MARS: 128-bit blocks, 4-14 word keys, 40-word key schedule
"""

from .mars import Mars, expand_key, compute_key_mask, s, s0, s1, SBOX, B_TABLE

__all__ = ['Mars', 'expand_key', 'compute_key_mask', 's', 's0', 's1', 'SBOX', 'B_TABLE']
