import pytest

from aacenc.bitstream import BitWriter
from aacenc.channels import ChannelInfo, MSInfo, channel_layout
from aacenc.coding import LEN_TNS_PRES, BlockType, ElementId, WindowShape
from aacenc.syntax import (
    Codeword,
    CoderInfo,
    FrameSizeError,
    StreamConfig,
    TnsFilter,
    TnsInfo,
    TnsWindow,
    grouping_bits,
    write_cpe,
    write_frame,
    write_ics,
    write_ics_info,
    write_lfe,
    write_sce,
    write_spectral_data,
    write_tns_data,
)


class _Reader:
    def __init__(self, data):
        self.bits = "".join(f"{byte:08b}" for byte in data)
        self.pos = 0

    def read(self, count):
        chunk = self.bits[self.pos:self.pos + count]
        self.pos += count
        return int(chunk, 2) if chunk else 0


def _coder(**kwargs):
    return CoderInfo(**kwargs)


def test_grouping_bits_single_group():
    assert grouping_bits([8]) == 0b1111111


def test_grouping_bits_all_separate():
    assert grouping_bits([1] * 8) == 0


def test_grouping_bits_two_groups_marks_boundary():
    value = grouping_bits([4, 4])
    assert (value >> 3) & 1 == 0
    assert bin(value).count("1") == 6


def test_grouping_bits_wrong_window_count():
    with pytest.raises(ValueError):
        grouping_bits([3, 3])


def test_ics_info_long_fields_and_count():
    coder = _coder(block_type=BlockType.ONLY_LONG_WINDOW, window_shape=WindowShape.KBD_WINDOW, sfbn=40)
    writer = BitWriter()
    bits = write_ics_info(writer, coder, False)
    assert bits == writer.position
    assert write_ics_info(None, coder, False) == bits
    reader = _Reader(writer.getvalue())
    assert reader.read(1) == 0
    assert reader.read(2) == BlockType.ONLY_LONG_WINDOW
    assert reader.read(1) == WindowShape.KBD_WINDOW
    assert reader.read(6) == 40
    assert reader.read(1) == 0


def test_ics_info_short_writes_grouping():
    coder = _coder(block_type=BlockType.ONLY_SHORT_WINDOW, sfbn=12, group_lengths=[2, 3, 3])
    writer = BitWriter()
    bits = write_ics_info(writer, coder, False)
    assert bits == writer.position
    reader = _Reader(writer.getvalue())
    reader.read(1)
    assert reader.read(2) == BlockType.ONLY_SHORT_WINDOW
    reader.read(1)
    assert reader.read(4) == 12
    assert reader.read(7) == grouping_bits([2, 3, 3])


def test_tns_absent_is_one_zero_bit():
    writer = BitWriter()
    assert write_tns_data(writer, _coder()) == LEN_TNS_PRES
    assert writer.position == LEN_TNS_PRES
    assert writer.getvalue() == b"\x00"


def test_tns_long_filter_roundtrip():
    tns = TnsInfo(
        data_present=True,
        windows=[TnsWindow(coef_resolution=4, filters=[
            TnsFilter(length=20, direction=1, coef_compress=0, coefficients=[3, -1]),
        ])],
    )
    coder = _coder(tns=tns)
    writer = BitWriter()
    bits = write_tns_data(writer, coder)
    assert bits == writer.position
    assert write_tns_data(None, coder) == bits
    reader = _Reader(writer.getvalue())
    assert reader.read(1) == 1
    assert reader.read(2) == 1
    assert reader.read(1) == 1
    assert reader.read(6) == 20
    assert reader.read(5) == 2
    assert reader.read(1) == 1
    assert reader.read(1) == 0
    assert reader.read(4) == 3
    assert reader.read(4) == 15


def test_tns_short_requires_eight_windows():
    tns = TnsInfo(data_present=True, windows=[TnsWindow()])
    coder = _coder(block_type=BlockType.ONLY_SHORT_WINDOW, tns=tns)
    with pytest.raises(ValueError):
        write_tns_data(None, coder)


def test_tns_short_count_matches_write():
    windows = [TnsWindow(coef_resolution=3, filters=[TnsFilter(length=5, coefficients=[1])]) for _ in range(8)]
    coder = _coder(block_type=BlockType.ONLY_SHORT_WINDOW, group_lengths=[8],
                   tns=TnsInfo(data_present=True, windows=windows))
    writer = BitWriter()
    assert write_tns_data(writer, coder) == writer.position == write_tns_data(None, coder)


def test_spectral_data_skips_empty_codewords():
    coder = _coder(spectral=[Codeword(0b101, 3), Codeword(0, 0), Codeword(0b1, 1)])
    writer = BitWriter()
    bits = write_spectral_data(writer, coder)
    assert bits == 4
    assert writer.position == 4
    assert _Reader(writer.getvalue()).read(4) == 0b1011


def test_sce_header_and_count():
    coder = _coder(global_gain=100, sfbn=10, spectral=[Codeword(7, 3)])
    writer = BitWriter()
    bits = write_sce(writer, coder, 5)
    assert bits == writer.position == write_sce(None, coder, 5)
    reader = _Reader(writer.getvalue())
    assert reader.read(3) == ElementId.SCE
    assert reader.read(4) == 5
    assert reader.read(8) == 100


def test_lfe_element_id():
    writer = BitWriter()
    write_lfe(writer, _coder(), 2)
    reader = _Reader(writer.getvalue())
    assert reader.read(3) == ElementId.LFE
    assert reader.read(4) == 2


def test_ics_common_window_omits_ics_info():
    coder = _coder(sfbn=10)
    assert write_ics(None, coder, False) - write_ics(None, coder, True) == write_ics_info(None, coder, False)


def test_cpe_common_window_with_ms_mask():
    left = _coder(sfbn=3, global_gain=7)
    right = _coder(sfbn=3, global_gain=9)
    info = ChannelInfo(tag=1, present=True, cpe=True, ch_is_left=True, paired_ch=1,
                       common_window=True, ms_info=MSInfo(is_present=1, ms_used=[1, 0, 1]))
    writer = BitWriter()
    bits = write_cpe(writer, left, right, info)
    assert bits == writer.position == write_cpe(None, left, right, info)
    reader = _Reader(writer.getvalue())
    assert reader.read(3) == ElementId.CPE
    assert reader.read(4) == 1
    assert reader.read(1) == 1
    reader.read(1)
    reader.read(2)
    reader.read(1)
    assert reader.read(6) == 3
    reader.read(1)
    assert reader.read(2) == 1
    assert [reader.read(1) for _ in range(3)] == [1, 0, 1]
    assert reader.read(8) == 7


def test_raw_mono_frame_ends_with_terminator():
    config = StreamConfig(sample_rate_index=4, num_channels=1, adts=False)
    data = write_frame(config, [_coder(sfbn=0)], channel_layout(1, True), 5, 1024)
    reader = _Reader(data)
    assert reader.read(3) == ElementId.SCE
    assert reader.read(4) == 0
    reader.read(8)
    reader.read(11)
    reader.read(3)
    assert reader.read(3) == ElementId.END
    assert reader.pos == len(data) * 8


def test_adts_frame_length_field_matches_output():
    config = StreamConfig(sample_rate_index=4, num_channels=2)
    coders = [_coder(sfbn=5, spectral=[Codeword(1, 9)] * 20), _coder(sfbn=5)]
    data = write_frame(config, coders, channel_layout(2, True), 7, 8192)
    assert data[0] == 0xFF
    assert data[1] == 0xF1
    reader = _Reader(data)
    reader.read(30)
    assert reader.read(13) == len(data)


def test_version_string_in_fourth_frame():
    config = StreamConfig(sample_rate_index=3, num_channels=1)
    data = write_frame(config, [_coder()], channel_layout(1, True), 4, 4096)
    assert b"libfaac 1.30\x00" in data
    other = write_frame(config, [_coder()], channel_layout(1, True), 5, 4096)
    assert b"libfaac" not in other


def test_frame_buffer_overrun():
    config = StreamConfig(sample_rate_index=4, num_channels=1)
    coder = _coder(spectral=[Codeword(0, 16)] * 100)
    with pytest.raises(FrameSizeError):
        write_frame(config, [coder], channel_layout(1, True), 5, 16)


def test_frame_size_limit():
    config = StreamConfig(sample_rate_index=4, num_channels=1)
    coder = _coder(spectral=[Codeword(0, 16)] * 5000)
    with pytest.raises(FrameSizeError):
        write_frame(config, [coder], channel_layout(1, True), 5, 20000)