#!/usr/bin/env python
"""
BLUE AVOCADO LIVE DEMO

Walks through the three primitives with fixed, reproducible inputs:
- MARS: key expansion and a block round trip
- Salsa20: quarterround vector, hash of zeros, message round trip
- Trivium: warm-up and the fresh-instance decryption rule

Pass --auto to run without pausing.
"""

import sys

from blue_avocado.block.mars import Mars, expand_key, compute_key_mask
from blue_avocado.stream.salsa20 import Salsa20, quarter_round, salsa20_hash
from blue_avocado.stream.trivium import Trivium, WARMUP_CYCLES


AUTO = '--auto' in sys.argv
MESSAGE = b"there is no spoon"


def print_header(title):
    """Print a formatted section header"""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def print_step(step_num, description):
    """Print a numbered step"""
    print(f"\n  [{step_num}] {description}")


def pause(message="Press ENTER to continue..."):
    """Pause for presenter to explain"""
    if AUTO:
        return
    print(f"\n  [PAUSE] {message}")
    input()


def demo_mars():
    print_header("PART 1: MARS BLOCK CIPHER")

    print_step("1.1", "Key expansion (7-word key of 42s)")
    schedule = expand_key([42] * 7)
    print(f"  K[0..3]:   {' '.join(f'{w:08x}' for w in schedule[:4])}")
    print(f"  K[36..39]: {' '.join(f'{w:08x}' for w in schedule[36:])}")
    print(f"  Mask of 0b11: {compute_key_mask(0b11):032b}")

    pause()

    print_step("1.2", "Encrypt and decrypt one block (14-word key of 42s)")
    cipher = Mars([42] * 14)
    ct = cipher.encrypt(2, 4, 24, 42)
    pt = cipher.decrypt(*ct)
    print(f"  Plaintext:  {(2, 4, 24, 42)}")
    print(f"  Ciphertext: {tuple(f'{w:08x}' for w in ct)}")
    print(f"  Decrypted:  {pt}")
    print(f"  [{'OK' if pt == (2, 4, 24, 42) else 'FAIL'}] Round trip")

    pause()


def demo_salsa20():
    print_header("PART 2: SALSA20 STREAM CIPHER")

    print_step("2.1", "Known vectors")
    z = quarter_round(1, 0, 0, 0)
    print(f"  quarterround(1,0,0,0) = {tuple(f'{w:08x}' for w in z)}")
    print(f"  hash(0^64) is all zero: {salsa20_hash(bytes(64)) == bytes(64)}")

    pause()

    print_step("2.2", "Encrypt a message (key 00..1f, zero nonce)")
    cipher = Salsa20(bytes(range(32)))
    nonce = bytes(8)
    ct = cipher.encrypt(MESSAGE, nonce)
    pt = cipher.decrypt(ct, nonce)
    print(f"  Plaintext:  {MESSAGE}")
    print(f"  Ciphertext: {ct.hex()}")
    print(f"  Decrypted:  {pt}")
    print(f"  [{'OK' if pt == MESSAGE else 'FAIL'}] Round trip")

    pause()


def demo_trivium():
    print_header("PART 3: TRIVIUM STREAM CIPHER")

    iv, key = bytes([24] * 10), bytes([42] * 10)

    print_step("3.1", f"Construction runs {WARMUP_CYCLES} warm-up cycles")
    sender = Trivium(iv, key)
    r1, r2, r3 = sender.registers
    print(f"  Register 1: {r1.hex()}")
    print(f"  Register 2: {r2.hex()}")
    print(f"  Register 3: {r3.hex()}")

    pause()

    print_step("3.2", "Encrypt, then decrypt with a fresh instance")
    ct = sender.encrypt(MESSAGE)
    pt = Trivium(iv, key).decrypt(ct)
    print(f"  Ciphertext: {ct.hex()}")
    print(f"  Decrypted:  {pt}")
    print(f"  [{'OK' if pt == MESSAGE else 'FAIL'}] Fresh instance round trip")

    spent = sender.decrypt(ct)
    print(f"  Reusing the spent instance gives: {spent.hex()}")
    print(f"  [{'OK' if spent != MESSAGE else 'FAIL'}] Spent instance does not decrypt")


def main():
    print("\n  Blue Avocado - symmetric primitives for study")
    print("  (no modes, no padding, no authentication, not constant time)")

    pause("Press ENTER to begin the demonstration...")

    demo_mars()
    demo_salsa20()
    demo_trivium()

    print_header("DEMO COMPLETE")


if __name__ == "__main__":
    main()
