"""Bit-level writer and the frame-independent parts of the AAC bitstream."""

from __future__ import annotations

from .coding import (
    ADTS_FRAMESIZE,
    ADTS_HEADER_BITS,
    BYTE_NUMBIT,
    LEN_BYTE,
    LEN_F_CNT,
    LEN_SE_ID,
    ElementId,
    bit2byte,
)

_CRC_POLY = 0x1D


class BitWriter:
    """Writes bit fields most significant bit first into a byte buffer.

    ``size`` bounds the buffer in bytes; writing past it raises
    ``ValueError``. ``start_bit`` reserves leading bits, which stay zero.
    The write position may be moved with :attr:`position`; bits are
    combined into the buffer with OR, so already written bits are kept.
    """

    def __init__(self, size: int | None = None, start_bit: int = 0) -> None:
        if size is not None and size < 0:
            raise ValueError(f"buffer size must not be negative, got {size}")
        self._size = size
        self._buffer = bytearray()
        self._position = 0
        self.position = start_bit

    @property
    def position(self) -> int:
        """Current bit position in the stream."""
        return self._position

    @position.setter
    def position(self, value: int) -> None:
        if value < 0:
            raise ValueError(f"bit position must not be negative, got {value}")
        if self._size is not None and value > self._size * BYTE_NUMBIT:
            raise ValueError("frame buffer overrun")
        self._position = value

    def put_bits(self, value: int, num_bits: int) -> None:
        """Write the low ``num_bits`` bits of ``value``."""
        if num_bits < 0:
            raise ValueError(f"bit count must not be negative, got {num_bits}")
        if num_bits == 0:
            return
        end = self._position + num_bits
        if self._size is not None and end > self._size * BYTE_NUMBIT:
            raise ValueError("frame buffer overrun")
        needed = bit2byte(end)
        if len(self._buffer) < needed:
            self._buffer.extend(bytes(needed - len(self._buffer)))

        value &= (1 << num_bits) - 1
        remaining = num_bits
        pos = self._position
        while remaining:
            used = pos % BYTE_NUMBIT
            take = min(remaining, BYTE_NUMBIT - used)
            chunk = (value >> (remaining - take)) & ((1 << take) - 1)
            self._buffer[pos // BYTE_NUMBIT] |= chunk << (BYTE_NUMBIT - used - take)
            pos += take
            remaining -= take
        self._position = pos

    def byte_align(self) -> int:
        """Pad with zero bits to the next byte boundary; return the pad length."""
        pad = (BYTE_NUMBIT - self._position % BYTE_NUMBIT) % BYTE_NUMBIT
        self.put_bits(0, pad)
        return pad

    def getvalue(self) -> bytes:
        """The bytes written up to the current position."""
        length = bit2byte(self._position)
        data = bytes(self._buffer[:length])
        return data + bytes(length - len(data))


def write_adts_header(
    writer: BitWriter | None,
    mpeg_version: int,
    object_type: int,
    sample_rate_index: int,
    num_channels: int,
    frame_bytes: int,
) -> int:
    """Write a fixed and variable ADTS header; return its length in bits.

    With ``writer`` set to ``None`` only the length is returned.
    """
    if not 0 <= frame_bytes < ADTS_FRAMESIZE:
        raise ValueError("frame size limit exceeded")
    if writer is not None:
        writer.put_bits(0xFFFF, 12)  # syncword
        writer.put_bits(mpeg_version, 1)
        writer.put_bits(0, 2)  # layer
        writer.put_bits(1, 1)  # protection absent
        writer.put_bits(object_type - 1, 2)  # profile
        writer.put_bits(sample_rate_index, 4)
        writer.put_bits(0, 1)  # private bit
        writer.put_bits(num_channels, 3)  # channel configuration
        writer.put_bits(0, 1)  # original/copy
        writer.put_bits(0, 1)  # home
        writer.put_bits(0, 1)  # copyright id bit
        writer.put_bits(0, 1)  # copyright id start
        writer.put_bits(frame_bytes, 13)
        writer.put_bits(0x7FF, 11)  # buffer fullness, VBR
        writer.put_bits(0, 2)  # one raw data block
    return ADTS_HEADER_BITS


def write_fill_bits(writer: BitWriter | None, num_bits: int) -> int:
    """Fill up to ``num_bits`` bits with fill elements.

    Returns the number of bits that could not be filled, always fewer than
    the seven bits of the smallest fill element. With ``writer`` set to
    ``None`` nothing is written.
    """
    left = num_bits
    min_bits = LEN_SE_ID + LEN_F_CNT
    max_count = (1 << LEN_F_CNT) - 1
    max_escape = (1 << LEN_BYTE) - 1

    while left >= min_bits:
        if writer is not None:
            writer.put_bits(ElementId.FIL, LEN_SE_ID)
        left -= min_bits
        num_bytes = left // LEN_BYTE

        if num_bytes < max_count:
            if writer is not None:
                writer.put_bits(num_bytes, LEN_F_CNT)
                for _ in range(num_bytes):
                    writer.put_bits(0, LEN_BYTE)
        else:
            num_bytes = min(num_bytes, max_count + max_escape)
            if writer is not None:
                writer.put_bits(max_count, LEN_F_CNT)
                writer.put_bits(num_bytes - max_count, LEN_BYTE)
                for _ in range(num_bytes - 1):
                    writer.put_bits(0, LEN_BYTE)
        left -= LEN_BYTE * num_bytes

    return left


def write_faac_string(writer: BitWriter | None, version: str) -> int:
    """Write a fill element carrying the encoder's version string.

    The string bytes are placed on byte boundaries. Returns the element's
    length in bits; with ``writer`` set to ``None`` nothing is written.
    """
    text = f"libfaac {version}".encode("utf-8") + b"\x00"
    count = len(text) + 3
    bit_count = LEN_SE_ID + 4 + (0 if count < 15 else 8) + count * 8
    if writer is None:
        return bit_count

    pad = (8 - ((writer.position + 7) % 8)) % 8
    writer.put_bits(ElementId.FIL, LEN_SE_ID)
    if count < 15:
        writer.put_bits(count, 4)
    else:
        writer.put_bits(15, 4)
        writer.put_bits(count - 14, 8)
    writer.put_bits(0, pad)
    writer.put_bits(0, 8)
    writer.put_bits(0, 8)
    for byte in text:
        writer.put_bits(byte, 8)
    writer.put_bits(0, 8 - pad)
    return bit_count


def _build_crc_table() -> tuple[int, ...]:
    table = []
    for byte in range(256):
        crc = byte
        for _ in range(8):
            crc = ((crc << 1) ^ _CRC_POLY) if crc & 0x80 else (crc << 1)
            crc &= 0xFF
        table.append(crc)
    return tuple(table)


_CRC_TABLE = _build_crc_table()


def crc8(data: bytes, bit_length: int) -> int:
    """CRC-8 (x^8 + x^4 + x^3 + x^2 + 1) over the first ``bit_length`` bits.

    The register starts at all ones and the result is returned inverted.
    """
    if bit_length < 0:
        raise ValueError(f"bit length must not be negative, got {bit_length}")
    if len(data) < bit2byte(bit_length):
        raise ValueError("data is shorter than the requested bit length")

    whole, tail = divmod(bit_length, 8)
    crc = 0xFF
    for byte in data[:whole]:
        crc = _CRC_TABLE[crc ^ byte]
    if tail:
        b = data[whole]
        for _ in range(tail):
            feedback = _CRC_POLY if (b ^ crc) & 0x80 else 0
            crc = ((crc << 1) ^ feedback) & 0xFF
            b = (b << 1) & 0xFF
    return ~crc & 0xFF