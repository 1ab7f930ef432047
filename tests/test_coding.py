import pytest

from aacenc.coding import ADTS_FRAMESIZE, BlockType, ElementId, ObjectType, bit2byte


@pytest.mark.parametrize("count", [0, 1, 7, 100, 1023])
def test_bit2byte_whole_bytes(count):
    assert bit2byte(8 * count) == count


@pytest.mark.parametrize("count", [0, 1, 7, 100])
def test_bit2byte_rounds_up(count):
    for extra in range(1, 8):
        assert bit2byte(8 * count + extra) == count + 1


def test_bit2byte_rejects_negative():
    with pytest.raises(ValueError):
        bit2byte(-1)


def test_adts_frame_size_fits_thirteen_bits():
    assert bit2byte(8 * ADTS_FRAMESIZE) == 1 << 13


def test_enums_convert_from_wire_values():
    assert ElementId(6) is ElementId.FIL
    assert BlockType(2) is BlockType.ONLY_SHORT_WINDOW
    assert ObjectType(2) is ObjectType.LOW