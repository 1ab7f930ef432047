"""Syntax constants of the raw AAC bitstream and ADTS framing."""

from __future__ import annotations

from enum import IntEnum

# Field widths, in bits, of the raw data block syntax.
LEN_SE_ID = 3
LEN_TAG = 4
LEN_GLOB_GAIN = 8
LEN_COM_WIN = 1
LEN_ICS_RESERV = 1
LEN_WIN_SEQ = 2
LEN_WIN_SH = 1
LEN_MAX_SFBL = 6
LEN_MAX_SFBS = 4
LEN_CB = 4
LEN_SCL_PCM = 8
LEN_PRED_PRES = 1
LEN_PRED_RST = 1
LEN_PRED_RSTGRP = 5
LEN_PRED_ENAB = 1
LEN_MASK_PRES = 2
LEN_MASK = 1
LEN_PULSE_PRES = 1

LEN_TNS_PRES = 1
LEN_TNS_NFILTL = 2
LEN_TNS_NFILTS = 1
LEN_TNS_COEFF_RES = 1
LEN_TNS_LENGTHL = 6
LEN_TNS_LENGTHS = 4
LEN_TNS_ORDERL = 5
LEN_TNS_ORDERS = 3
LEN_TNS_DIRECTION = 1
LEN_TNS_COMPRESS = 1
LEN_GAIN_PRES = 1

LEN_F_CNT = 4
LEN_F_ESC = 8
LEN_BYTE = 8
LEN_PAD_DATA = 8

# Widths used by huffman codeword reordering (DRM).
LEN_HCR_REORDSD = 14
LEN_HCR_LONGCW = 6
FIRST_PAIR_HCB = 5
QUAD_LEN = 4
PAIR_LEN = 2

BYTE_NUMBIT = 8
LONG_NUMBIT = 32

MAX_SHORT_WINDOWS = 8

# A frame's byte count must fit the 13-bit ADTS frame length field.
ADTS_FRAMESIZE = 1 << 13
ADTS_HEADER_BITS = 56


class BlockType(IntEnum):
    """Window sequence of a frame."""

    ONLY_LONG_WINDOW = 0
    LONG_SHORT_WINDOW = 1
    ONLY_SHORT_WINDOW = 2
    SHORT_LONG_WINDOW = 3


class WindowShape(IntEnum):
    """Shape of the transform window."""

    SINE_WINDOW = 0
    KBD_WINDOW = 1


class ElementId(IntEnum):
    """Identifiers of syntactic elements in a raw data block."""

    SCE = 0
    CPE = 1
    CCE = 2
    LFE = 3
    DSE = 4
    PCE = 5
    FIL = 6
    END = 7


class ObjectType(IntEnum):
    """AAC audio object types."""

    MAIN = 1
    LOW = 2
    SSR = 3
    LTP = 4


class MpegVersion(IntEnum):
    """Value of the ADTS ID bit."""

    MPEG4 = 0
    MPEG2 = 1


def bit2byte(bits: int) -> int:
    """Number of whole bytes needed to hold ``bits`` bits."""
    if bits < 0:
        raise ValueError(f"bit count must not be negative, got {bits}")
    return (bits + BYTE_NUMBIT - 1) // BYTE_NUMBIT