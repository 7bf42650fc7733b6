"""
Trivium Stream Cipher

A hardware-oriented stream cipher built from three coupled non-linear
feedback shift registers of 93, 84 and 111 bits (288 bits of state).
Each clock cycle emits one keystream bit.

Components:
- ShiftRegister: bit-addressable register stored as a byte array
- RegisterLayout: tap and feedback positions of one register
- Trivium: loads (IV, key), runs the 1152-cycle warm-up, then produces
  keystream bytes (most significant bit first) and XORs them with data

Register bit numbering:
    Logical position p (1-indexed, p = 1 is the most recently shifted-in
    bit) lives in byte (p - 1) // 8 at bit 7 - (p - 1) % 8. Shifting by
    one moves every bit to position p + 1 and the new bit enters at
    position 1 (bit 7 of byte 0).

Security Note:
    This is a software rendition of a cipher designed for hardware; it is
    slow and is for EDUCATIONAL purposes only.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

from Cryptodome.Util.strxor import strxor

from ..exceptions import ConstructionError

logger = logging.getLogger(__name__)


IV_SIZE = 10
KEY_SIZE = 10
WARMUP_CYCLES = 4 * 288  # 1152


@dataclass(frozen=True)
class RegisterLayout:
    """
    Tap configuration of one Trivium register.

    Attributes:
        size: Number of significant bits
        output_taps: Two positions XORed into the tap output
        and_taps: Two adjacent positions whose AND is added to the tap output
        feedback_tap: Position XORed into this register's own input bit
    """
    size: int
    output_taps: Tuple[int, int]
    and_taps: Tuple[int, int]
    feedback_tap: int

    @property
    def byte_length(self) -> int:
        return (self.size + 7) // 8


# Positions are local to each register (s1..s93, s94..s177, s178..s288)
R1 = RegisterLayout(size=93, output_taps=(66, 93), and_taps=(91, 92), feedback_tap=69)
R2 = RegisterLayout(size=84, output_taps=(69, 84), and_taps=(82, 83), feedback_tap=78)
R3 = RegisterLayout(size=111, output_taps=(66, 111), and_taps=(109, 110), feedback_tap=87)


class ShiftRegister:
    """
    Shift register backed by a bytearray.

    Only two primitives touch the storage: bit() reads a logical
    position and shift_in() shifts everything by one and inserts a bit.
    Padding bits past `size` in the last byte stay zero.
    """

    def __init__(self, layout: RegisterLayout):
        self._layout = layout
        self._cells = bytearray(layout.byte_length)
        tail_bits = layout.size - 8 * (layout.byte_length - 1)
        self._tail_mask = (0xFF << (8 - tail_bits)) & 0xFF

    @property
    def layout(self) -> RegisterLayout:
        return self._layout

    @property
    def cells(self) -> bytes:
        """Snapshot of the backing bytes."""
        return bytes(self._cells)

    def load(self, data: bytes) -> None:
        """Copy data into the register starting at byte 0."""
        if len(data) > len(self._cells):
            raise ValueError(
                f"Cannot load {len(data)} bytes into a {self._layout.size}-bit register"
            )
        self._cells[:len(data)] = data
        self._cells[-1] &= self._tail_mask

    def set_bit(self, position: int) -> None:
        """Set the bit at a logical position to 1."""
        index = self._index(position)
        self._cells[index >> 3] |= 0x80 >> (index & 7)

    def bit(self, position: int) -> int:
        """Read the bit at a logical position (1-indexed)."""
        index = self._index(position)
        return (self._cells[index >> 3] >> (7 - (index & 7))) & 1

    def shift_in(self, bit: int) -> None:
        """
        Shift right by one bit and insert `bit` at position 1.

        The low bit of each byte carries into the high bit of the next
        byte; the bit shifted past `size` is dropped.
        """
        carry = bit & 1
        for i, byte in enumerate(self._cells):
            self._cells[i] = (byte >> 1) | (carry << 7)
            carry = byte & 1
        self._cells[-1] &= self._tail_mask

    def tap(self) -> Tuple[int, int]:
        """
        Evaluate this register's taps.

        Returns:
            (linear, full): linear is the XOR of the two output taps,
            full adds the AND of the two AND taps
        """
        layout = self._layout
        linear = self.bit(layout.output_taps[0]) ^ self.bit(layout.output_taps[1])
        product = self.bit(layout.and_taps[0]) & self.bit(layout.and_taps[1])
        return linear, linear ^ product

    def _index(self, position: int) -> int:
        if position < 1 or position > self._layout.size:
            raise IndexError(f"Bit position must be between 1 and {self._layout.size}")
        return position - 1

    def __repr__(self) -> str:
        return f"ShiftRegister(size={self._layout.size}, cells={self._cells.hex()})"


class Trivium:
    """
    Trivium stream cipher keyed with a 10-byte IV and a 10-byte key.

    Construction loads the registers and runs the warm-up, so a new
    instance is immediately ready to produce keystream. Every call to
    encrypt() or decrypt() consumes keystream and the state cannot be
    rewound: to decrypt, build a second instance from the same (IV, key).

    Example:
        >>> iv, key = bytes([24] * 10), bytes([42] * 10)
        >>> ct = Trivium(iv, key).encrypt(b"there is no spoon")
        >>> Trivium(iv, key).decrypt(ct)
        b'there is no spoon'
    """

    STATEFUL = True

    def __init__(self, iv: bytes, key: bytes):
        """
        Load the registers and warm up.

        Register 1 receives the IV, register 2 the key, and register 3
        has only its last bit (position 111) set.

        Args:
            iv: 10-byte initialization vector
            key: 10-byte key

        Raises:
            ConstructionError: If iv or key is not 10 bytes
        """
        if len(iv) != IV_SIZE:
            raise ConstructionError(f"Trivium IV must be {IV_SIZE} bytes, got {len(iv)}")
        if len(key) != KEY_SIZE:
            raise ConstructionError(f"Trivium key must be {KEY_SIZE} bytes, got {len(key)}")

        self._r1 = ShiftRegister(R1)
        self._r2 = ShiftRegister(R2)
        self._r3 = ShiftRegister(R3)

        self._r1.load(bytes(iv))
        self._r2.load(bytes(key))
        self._r3.set_bit(R3.size)

        self._clocks = 0
        for _ in range(WARMUP_CYCLES):
            self.clock()

        logger.debug("Trivium warm-up complete after %d cycles", WARMUP_CYCLES)

    @property
    def registers(self) -> Tuple[bytes, bytes, bytes]:
        """Snapshot of the three register byte arrays."""
        return self._r1.cells, self._r2.cells, self._r3.cells

    @property
    def clocks(self) -> int:
        """Clock cycles run so far, warm-up included."""
        return self._clocks

    def clock(self) -> int:
        """
        Run one clock cycle.

        Returns:
            One keystream bit, the XOR of the three tap outputs
            (AND terms included)
        """
        _, tap1 = self._r1.tap()
        _, tap2 = self._r2.tap()
        _, tap3 = self._r3.tap()

        # Each register is fed by its predecessor's tap
        in1 = tap3 ^ self._r1.bit(R1.feedback_tap)
        in2 = tap1 ^ self._r2.bit(R2.feedback_tap)
        in3 = tap2 ^ self._r3.bit(R3.feedback_tap)

        self._r1.shift_in(in1)
        self._r2.shift_in(in2)
        self._r3.shift_in(in3)

        self._clocks += 1
        return tap1 ^ tap2 ^ tap3

    def clock_byte(self) -> int:
        """Run 8 clock cycles and pack the bits, first bit most significant."""
        value = 0
        for _ in range(8):
            value = (value << 1) | self.clock()
        return value

    def keystream(self, length: int) -> bytes:
        """Produce the next `length` keystream bytes."""
        return bytes(self.clock_byte() for _ in range(length))

    def encrypt(self, message: bytes) -> bytes:
        """
        XOR the message with the next len(message) keystream bytes.

        Advances the state by 8 cycles per byte.
        """
        if not message:
            return b''
        return strxor(bytes(message), self.keystream(len(message)))

    def decrypt(self, ciphertext: bytes) -> bytes:
        """
        XOR the ciphertext with the next keystream bytes.

        Only recovers the plaintext on a fresh instance built from the
        same (IV, key) as the encrypting one.
        """
        return self.encrypt(ciphertext)

    def __repr__(self) -> str:
        return f"Trivium(clocks={self._clocks})"
