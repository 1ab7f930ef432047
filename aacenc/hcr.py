"""Huffman codeword reordering of spectral data into fixed-width segments."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, replace

from .bitstream import BitWriter
from .coding import FIRST_PAIR_HCB, PAIR_LEN, QUAD_LEN
from .syntax import Codeword, CoderInfo

# Transform length of the frames that use codeword reordering.
_FRAME_LEN = 960

_HCB_ESC = 11

# Order in which codebooks are placed as priority codewords.
_PRESORTED_CODEBOOKS = (
    11, 31, 30, 29, 28, 27, 26, 25, 24, 23, 22,
    21, 20, 19, 18, 17, 16, 9, 7, 5, 3, 1,
)

# Longest codeword per codebook, which bounds the segment width.
_MAX_CODEWORD_LENGTH = (
    0, 11, 9, 20, 16, 13, 11, 14, 12, 17, 14, 49,
    0, 0, 0, 0, 14, 17, 21, 21, 25, 25, 29, 29, 29, 29, 33, 33, 33, 37, 37, 41,
)


@dataclass
class CodewordInfo:
    """Placement data of one spectral codeword.

    ``offset`` is the index of its first data item in the spectral data,
    ``num_data`` the number of items, ``length`` their total bit length.
    ``window`` and ``number`` give the window and the codeword's position
    within it; ``lines`` is the number of spectral lines it codes.
    """

    offset: int = 0
    window: int = 0
    codebook: int = 0
    lines: int = 0
    number: int = 0
    length: int = 0
    num_data: int = 0


@dataclass
class Segment:
    """Free space ``left``..``right`` (inclusive) of one segment."""

    left: int = 0
    right: int = 0
    length: int = 0


def rewind_word(word: int, length: int) -> int:
    """Reverse the order of the low ``length`` bits of ``word``."""
    if length < 0:
        raise ValueError(f"length must not be negative, got {length}")
    result = 0
    for bit in range(length):
        result = (result << 1) | ((word >> bit) & 1)
    return result


def classify_codewords(coder: CoderInfo) -> list[CodewordInfo]:
    """Return placement data for every codeword of ``coder``, in coding order."""
    counts = coder.codeword_data_counts
    spectral = coder.spectral
    if sum(counts) > len(spectral):
        raise ValueError("codeword data counts exceed the spectral data")
    if not counts:
        return []

    groups = coder.group_lengths
    offsets = coder.sfb_offset
    if not groups or groups[0] <= 0:
        raise ValueError("window groups must not be empty")
    if len(offsets) < 2 or not coder.books:
        raise ValueError("band offsets and codebooks are needed")

    infos: list[CodewordInfo] = []
    offset = 0
    for num_data in counts:
        length = sum(item.length for item in spectral[offset:offset + num_data])
        infos.append(CodewordInfo(offset=offset, length=length, num_data=num_data))
        offset += num_data

    window_counts: Counter[int] = Counter()
    sfb = window = group = coefficients = last_sfb = first_window = 0
    sfb_len = offsets[1] // groups[0]
    codebook = coder.books[0]
    for info in infos:
        info.codebook = codebook
        info.lines = QUAD_LEN if codebook < FIRST_PAIR_HCB else PAIR_LEN
        info.window = first_window + window
        info.number = window_counts[info.window]
        window_counts[info.window] += 1

        coefficients += info.lines
        if coefficients - last_sfb < sfb_len:
            continue
        last_sfb += sfb_len
        window += 1
        if window != groups[group]:
            continue
        window = 0
        sfb += 1
        if sfb == coder.all_sfb:
            sfb = 0
            first_window += groups[group]
            group += 1
        codebook = coder.books[sfb]
        if last_sfb < _FRAME_LEN and group < len(groups):
            sfb_len = (offsets[sfb + 1] - offsets[sfb]) // groups[group]
    return infos


def _presort(infos: Sequence[CodewordInfo]) -> list[CodewordInfo]:
    ordered = [
        replace(info)
        for codebook in _PRESORTED_CODEBOOKS
        for info in infos
        if info.codebook == codebook
        or (codebook < _HCB_ESC and info.codebook == codebook + 1)
    ]
    # Codewords of codebooks outside the presort order leave their
    # original entries in place at the end of the list.
    return ordered + [replace(info) for info in infos[len(ordered):]]


def _init_segments(infos: Sequence[CodewordInfo], coder: CoderInfo) -> list[Segment]:
    total = coder.reordered_length
    segments: list[Segment] = []
    used = 0
    for info in infos:
        if not 0 <= info.codebook < len(_MAX_CODEWORD_LENGTH):
            raise ValueError(f"invalid codebook {info.codebook}")
        width = min(_MAX_CODEWORD_LENGTH[info.codebook], coder.longest_codeword)
        if used + width > total:
            if not segments:
                raise ValueError("reordered data length is too short for one segment")
            last = segments[-1]
            last.right = total - 1
            last.length = total - last.left
            break
        segments.append(Segment(left=used, right=used + width - 1, length=width))
        used += width
    return segments


def _put_at(writer: BitWriter, position: int, value: int, num_bits: int) -> None:
    writer.position = position
    writer.put_bits(value, num_bits)


def _fill_segment(
    writer: BitWriter,
    start: int,
    info: CodewordInfo,
    segment: Segment,
    items: list[Codeword],
    backwards: bool,
    available: int,
) -> None:
    for item in items[info.offset:info.offset + info.num_data]:
        if item.length <= available:
            length = item.length
            if backwards:
                _put_at(writer, start + segment.right - length + 1,
                        rewind_word(item.data, length), length)
                segment.right -= length
            else:
                _put_at(writer, start + segment.left, item.data, length)
                segment.left += length
            available -= length
            item.length = 0
        else:
            rest = item.length - available
            head = item.data >> rest
            item.data &= (1 << rest) - 1
            item.length = rest
            if backwards:
                _put_at(writer, start + segment.right - available + 1,
                        rewind_word(head, available), available)
                segment.right -= available
            else:
                _put_at(writer, start + segment.left, head, available)
                segment.left += available
            available = 0
        if available == 0:
            break


def write_reordered_spectral_data(writer: BitWriter | None, coder: CoderInfo) -> int:
    """Write the spectral codewords reordered into segments.

    Priority codewords are placed at segment starts, the rest fill the
    remaining space, every second set in reversed bit order. The data
    always takes ``coder.reordered_length`` bits, which is returned; the
    writer is left positioned after them. ``coder`` is not modified. With
    ``writer`` set to ``None`` only the length is returned.
    """
    total = coder.reordered_length
    if writer is None:
        return total

    infos = _presort(classify_codewords(coder))
    items = [Codeword(item.data, item.length) for item in coder.spectral]
    start = writer.position

    if infos:
        segments = _init_segments(infos, coder)
        num_segments = len(segments)
        num_codewords = len(infos)
        num_sets = num_codewords // num_segments

        for set_index in range(num_sets + 1):
            backwards = set_index % 2 == 1
            base = set_index * num_segments
            for trial in range(num_segments):
                unplaced = num_segments
                if set_index == num_sets:
                    unplaced = num_codewords - base
                for position in range(num_segments):
                    index = base + position
                    if index >= num_codewords:
                        break
                    info = infos[index]
                    segment = segments[(trial + position) % num_segments]
                    if info.length <= 0 or segment.length <= 0:
                        continue
                    if segment.length >= info.length:
                        available = info.length
                        unplaced -= 1
                    else:
                        available = segment.length
                    info.length -= available
                    segment.length -= available
                    _fill_segment(writer, start, info, segment, items, backwards, available)
                if unplaced == 0:
                    break

    writer.position = start + total
    return total