"""Raw AAC data blocks: individual channel streams, channel elements and frames."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from .bitstream import BitWriter, write_adts_header, write_faac_string, write_fill_bits
from .channels import ChannelInfo
from .coding import (
    ADTS_FRAMESIZE,
    BYTE_NUMBIT,
    LEN_COM_WIN,
    LEN_GAIN_PRES,
    LEN_GLOB_GAIN,
    LEN_ICS_RESERV,
    LEN_MASK,
    LEN_MASK_PRES,
    LEN_MAX_SFBL,
    LEN_MAX_SFBS,
    LEN_PRED_PRES,
    LEN_PULSE_PRES,
    LEN_SE_ID,
    LEN_TAG,
    LEN_TNS_COEFF_RES,
    LEN_TNS_COMPRESS,
    LEN_TNS_DIRECTION,
    LEN_TNS_LENGTHL,
    LEN_TNS_LENGTHS,
    LEN_TNS_NFILTL,
    LEN_TNS_NFILTS,
    LEN_TNS_ORDERL,
    LEN_TNS_ORDERS,
    LEN_TNS_PRES,
    LEN_WIN_SEQ,
    LEN_WIN_SH,
    MAX_SHORT_WINDOWS,
    BlockType,
    ElementId,
    MpegVersion,
    ObjectType,
    WindowShape,
    bit2byte,
)

# The coefficient resolution bit selects 3 or 4 bit TNS coefficients.
_TNS_RES_OFFSET = 3

DEFAULT_VERSION = "1.30"

# The version string is carried in this frame only.
VERSION_STRING_FRAME = 4


class FrameSizeError(ValueError):
    """A frame does not fit the output buffer or the ADTS frame length field."""


@dataclass
class Codeword:
    """A variable length code: ``length`` low bits of ``data``."""

    data: int = 0
    length: int = 0


@dataclass
class TnsFilter:
    """One TNS filter; ``coefficients`` holds the quantised coefficient indices."""

    length: int = 0
    direction: int = 0
    coef_compress: int = 0
    coefficients: list[int] = field(default_factory=list)

    @property
    def order(self) -> int:
        return len(self.coefficients)


@dataclass
class TnsWindow:
    """TNS filters of one window."""

    coef_resolution: int = 4
    filters: list[TnsFilter] = field(default_factory=list)


@dataclass
class TnsInfo:
    """TNS side information of a channel."""

    data_present: bool = False
    windows: list[TnsWindow] = field(default_factory=list)


@dataclass
class CoderInfo:
    """Coded data of one channel for one frame.

    ``section_data`` and ``scalefactor_data`` hold the already coded
    section and scalefactor fields, ``spectral`` the spectral codewords.
    The remaining fields describe the band layout and are used for
    codeword reordering.
    """

    block_type: BlockType = BlockType.ONLY_LONG_WINDOW
    window_shape: WindowShape = WindowShape.SINE_WINDOW
    global_gain: int = 0
    sfbn: int = 0
    group_lengths: list[int] = field(default_factory=lambda: [1])
    tns: TnsInfo = field(default_factory=TnsInfo)
    section_data: list[Codeword] = field(default_factory=list)
    scalefactor_data: list[Codeword] = field(default_factory=list)
    spectral: list[Codeword] = field(default_factory=list)
    books: list[int] = field(default_factory=list)
    sfb_offset: list[int] = field(default_factory=list)
    all_sfb: int = 0
    codeword_data_counts: list[int] = field(default_factory=list)
    reordered_length: int = 0
    longest_codeword: int = 0

    @property
    def num_groups(self) -> int:
        return len(self.group_lengths)


@dataclass
class StreamConfig:
    """Stream-wide parameters of the frames being written."""

    sample_rate_index: int
    num_channels: int
    adts: bool = True
    mpeg_version: int = MpegVersion.MPEG4
    object_type: int = ObjectType.LOW
    version: str = DEFAULT_VERSION


def grouping_bits(group_lengths: Sequence[int]) -> int:
    """The seven bit scale_factor_grouping field for the given window groups."""
    owners = [group for group, length in enumerate(group_lengths) for _ in range(length)]
    if len(owners) != MAX_SHORT_WINDOWS:
        raise ValueError(
            f"window groups must cover {MAX_SHORT_WINDOWS} windows, got {len(owners)}"
        )
    bits = 0
    for previous, current in zip(owners, owners[1:]):
        bits = (bits << 1) | (current == previous)
    return bits


def _write_codewords(writer: BitWriter | None, codewords: Sequence[Codeword]) -> int:
    bits = 0
    for codeword in codewords:
        if codeword.length > 0:
            if writer is not None:
                writer.put_bits(codeword.data, codeword.length)
            bits += codeword.length
    return bits


def write_ics_info(writer: BitWriter | None, coder: CoderInfo, common_window: bool) -> int:
    """Write ics_info(); return its length in bits. ``None`` only counts."""
    short = coder.block_type == BlockType.ONLY_SHORT_WINDOW
    if writer is not None:
        writer.put_bits(0, LEN_ICS_RESERV)
        writer.put_bits(coder.block_type, LEN_WIN_SEQ)
        writer.put_bits(coder.window_shape, LEN_WIN_SH)
        if short:
            writer.put_bits(coder.sfbn, LEN_MAX_SFBS)
            writer.put_bits(grouping_bits(coder.group_lengths), MAX_SHORT_WINDOWS - 1)
        else:
            writer.put_bits(coder.sfbn, LEN_MAX_SFBL)
            writer.put_bits(0, LEN_PRED_PRES)

    bits = LEN_ICS_RESERV + LEN_WIN_SEQ + LEN_WIN_SH
    if short:
        bits += LEN_MAX_SFBS + MAX_SHORT_WINDOWS - 1
    else:
        bits += LEN_MAX_SFBL + LEN_PRED_PRES
    return bits


def write_tns_data(writer: BitWriter | None, coder: CoderInfo) -> int:
    """Write the TNS presence flag and tns_data(); return the bit count."""
    tns = coder.tns
    bits = LEN_TNS_PRES
    if writer is not None:
        writer.put_bits(int(tns.data_present), LEN_TNS_PRES)
    if not tns.data_present:
        return bits

    if coder.block_type == BlockType.ONLY_SHORT_WINDOW:
        num_windows = MAX_SHORT_WINDOWS
        len_nfilt, len_length, len_order = LEN_TNS_NFILTS, LEN_TNS_LENGTHS, LEN_TNS_ORDERS
    else:
        num_windows = 1
        len_nfilt, len_length, len_order = LEN_TNS_NFILTL, LEN_TNS_LENGTHL, LEN_TNS_ORDERL
    if len(tns.windows) < num_windows:
        raise ValueError(f"TNS data needs {num_windows} windows, got {len(tns.windows)}")

    bits += num_windows * len_nfilt
    for window in tns.windows[:num_windows]:
        filters = window.filters
        if writer is not None:
            writer.put_bits(len(filters), len_nfilt)
        if not filters:
            continue
        resolution = window.coef_resolution
        bits += LEN_TNS_COEFF_RES
        if writer is not None:
            writer.put_bits(resolution - _TNS_RES_OFFSET, LEN_TNS_COEFF_RES)
        bits += len(filters) * (len_length + len_order)
        for tns_filter in filters:
            if writer is not None:
                writer.put_bits(tns_filter.length, len_length)
                writer.put_bits(tns_filter.order, len_order)
            if not tns_filter.order:
                continue
            bits += LEN_TNS_DIRECTION + LEN_TNS_COMPRESS
            if writer is not None:
                writer.put_bits(tns_filter.direction, LEN_TNS_DIRECTION)
                writer.put_bits(tns_filter.coef_compress, LEN_TNS_COMPRESS)
            width = resolution - tns_filter.coef_compress
            bits += tns_filter.order * width
            if writer is not None:
                mask = (1 << width) - 1
                for index in tns_filter.coefficients:
                    writer.put_bits(index & mask, width)
    return bits


def write_spectral_data(writer: BitWriter | None, coder: CoderInfo) -> int:
    """Write the spectral codewords; return their total length in bits."""
    return _write_codewords(writer, coder.spectral)


def write_ics(writer: BitWriter | None, coder: CoderInfo, common_window: bool) -> int:
    """Write an individual_channel_stream(); return its length in bits."""
    bits = LEN_GLOB_GAIN
    if writer is not None:
        writer.put_bits(coder.global_gain, LEN_GLOB_GAIN)
    if not common_window:
        bits += write_ics_info(writer, coder, common_window)
    bits += _write_codewords(writer, coder.section_data)
    bits += _write_codewords(writer, coder.scalefactor_data)

    bits += LEN_PULSE_PRES
    if writer is not None:
        writer.put_bits(0, LEN_PULSE_PRES)
    bits += write_tns_data(writer, coder)
    bits += LEN_GAIN_PRES
    if writer is not None:
        writer.put_bits(0, LEN_GAIN_PRES)
    bits += write_spectral_data(writer, coder)
    return bits


def _write_single(writer: BitWriter | None, element: ElementId, coder: CoderInfo, tag: int) -> int:
    if writer is not None:
        writer.put_bits(element, LEN_SE_ID)
        writer.put_bits(tag, LEN_TAG)
    return LEN_SE_ID + LEN_TAG + write_ics(writer, coder, False)


def write_sce(writer: BitWriter | None, coder: CoderInfo, tag: int) -> int:
    """Write a single_channel_element(); return its length in bits."""
    return _write_single(writer, ElementId.SCE, coder, tag)


def write_lfe(writer: BitWriter | None, coder: CoderInfo, tag: int) -> int:
    """Write an lfe_channel_element(); return its length in bits."""
    return _write_single(writer, ElementId.LFE, coder, tag)


def write_cpe(
    writer: BitWriter | None, left: CoderInfo, right: CoderInfo, channel: ChannelInfo
) -> int:
    """Write a channel_pair_element(); return its length in bits."""
    common = bool(channel.common_window)
    if writer is not None:
        writer.put_bits(ElementId.CPE, LEN_SE_ID)
        writer.put_bits(channel.tag, LEN_TAG)
        writer.put_bits(int(common), LEN_COM_WIN)
    bits = LEN_SE_ID + LEN_TAG + LEN_COM_WIN

    if common:
        bits += write_ics_info(writer, left, common)
        num_windows = left.num_groups
        max_sfb = left.sfbn
        ms = channel.ms_info
        if writer is not None:
            writer.put_bits(ms.is_present, LEN_MASK_PRES)
            if ms.is_present == 1:
                for group in range(num_windows):
                    for used in ms.ms_used[group * max_sfb:(group + 1) * max_sfb]:
                        writer.put_bits(used, LEN_MASK)
        bits += LEN_MASK_PRES
        if ms.is_present == 1:
            bits += num_windows * max_sfb * LEN_MASK

    bits += write_ics(writer, left, common)
    bits += write_ics(writer, right, common)
    return bits


def _write_raw_frame(
    writer: BitWriter | None,
    config: StreamConfig,
    coders: Sequence[CoderInfo],
    channels: Sequence[ChannelInfo],
    frame_number: int,
    frame_bytes: int,
) -> int:
    bits = 0
    if config.adts:
        bits += write_adts_header(
            writer,
            config.mpeg_version,
            config.object_type,
            config.sample_rate_index,
            config.num_channels,
            frame_bytes,
        )
    if frame_number == VERSION_STRING_FRAME:
        bits += write_faac_string(writer, config.version)

    for index, info in enumerate(channels):
        if not info.present:
            continue
        if not info.cpe:
            if info.lfe:
                bits += write_lfe(writer, coders[index], info.tag)
            else:
                bits += write_sce(writer, coders[index], info.tag)
        elif info.ch_is_left:
            bits += write_cpe(writer, coders[index], coders[info.paired_ch], info)

    # Leave room for the END terminator; a few extra bits cover what the
    # fill element cannot use.
    num_fill = max(BYTE_NUMBIT - LEN_SE_ID - bits, 0) + 6
    bits += num_fill - write_fill_bits(writer, num_fill)

    bits += LEN_SE_ID
    if writer is not None:
        writer.put_bits(ElementId.END, LEN_SE_ID)
        bits += writer.byte_align()
    else:
        bits += (BYTE_NUMBIT - bits % BYTE_NUMBIT) % BYTE_NUMBIT
    return bits


def write_frame(
    config: StreamConfig,
    coders: Sequence[CoderInfo],
    channels: Sequence[ChannelInfo],
    frame_number: int,
    buffer_size: int,
) -> bytes:
    """Encode one frame and return its bytes.

    Raises :class:`FrameSizeError` when the frame is larger than
    ``buffer_size`` bytes or too large for the ADTS frame length field.
    """
    if len(coders) < len(channels):
        raise ValueError("every channel needs its coder data")
    bits = _write_raw_frame(None, config, coders, channels, frame_number, 0)
    used_bytes = bit2byte(bits)
    if used_bytes > buffer_size:
        raise FrameSizeError("frame buffer overrun")
    if used_bytes >= ADTS_FRAMESIZE:
        raise FrameSizeError("frame size limit exceeded")

    writer = BitWriter(size=buffer_size)
    _write_raw_frame(writer, config, coders, channels, frame_number, used_bytes)
    return writer.getvalue()