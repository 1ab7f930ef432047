"""Assignment of input channels to AAC syntax elements (SCE, CPE, LFE)."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class MSInfo:
    """Mid/side stereo decisions for a channel pair."""

    is_present: int = 0
    ms_used: list[int] = field(default_factory=list)


@dataclass
class ChannelInfo:
    """Role of one input channel in the AAC element layout."""

    tag: int = 0
    present: bool = False
    ch_is_left: bool = False
    paired_ch: int = 0
    common_window: bool = False
    cpe: bool = False
    sce: bool = False
    lfe: bool = False
    ms_info: MSInfo = field(default_factory=MSInfo)


def channel_layout(num_channels: int, use_lfe: bool) -> list[ChannelInfo]:
    """Return the element layout for ``num_channels`` input channels.

    The first channel becomes a single channel element unless there are
    exactly two channels. Following channels are grouped into channel pair
    elements, and a single remaining channel becomes an LFE element when
    ``use_lfe`` is set, otherwise another single channel element.
    """
    if num_channels < 1:
        raise ValueError(f"number of channels must be positive, got {num_channels}")

    layout = [ChannelInfo() for _ in range(num_channels)]
    sce_tag = 0
    cpe_tag = 0
    lfe_tag = 0
    index = 0

    if num_channels != 2:
        info = layout[index]
        info.present = True
        info.tag = sce_tag
        sce_tag += 1
        index += 1

    while num_channels - index > 1:
        left = layout[index]
        left.present = True
        left.tag = cpe_tag
        cpe_tag += 1
        left.cpe = True
        left.ch_is_left = True
        left.paired_ch = index + 1

        right = layout[index + 1]
        right.present = True
        right.cpe = True
        right.ch_is_left = False
        right.paired_ch = index
        index += 2

    if index < num_channels:
        info = layout[index]
        info.present = True
        if use_lfe:
            info.tag = lfe_tag
            lfe_tag += 1
            info.lfe = True
        else:
            info.tag = sce_tag
            sce_tag += 1

    return layout