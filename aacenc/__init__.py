"""AAC bitstream writing: channel layout, ADTS framing, raw data blocks and codeword reordering."""

__version__ = "1.30.0"

__all__ = [
    "bitstream",
    "channels",
    "coding",
    "hcr",
    "syntax",
]