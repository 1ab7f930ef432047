# aacenc

The bitstream side of an AAC-LC (MPEG-2/MPEG-4 Advanced Audio Coding)
encoder, in pure Python with no third-party dependencies.

## Modules

- `aacenc.channels`: `channel_layout(num_channels, use_lfe)` maps input
  channels onto AAC syntax elements and returns a list of `ChannelInfo`
  records (with an `MSInfo` for mid/side decisions). The first channel is a
  single channel element unless there are exactly two channels; the
  following channels form channel pair elements; a single remaining channel
  becomes an LFE element when `use_lfe` is set, otherwise another single
  channel element.
- `aacenc.coding`: field widths of the raw data block syntax, the enums
  `BlockType`, `WindowShape`, `ElementId`, `ObjectType` and `MpegVersion`,
  and `bit2byte(bits)`.
- `aacenc.bitstream`: `BitWriter`, an MSB-first bit writer with an optional
  size limit (`put_bits`, `byte_align`, `getvalue`, a movable `position`),
  plus `write_adts_header`, `write_fill_bits`, `write_faac_string` and
  `crc8`, the CRC-8 (x^8 + x^4 + x^3 + x^2 + 1) over a bit range.
- `aacenc.syntax`: the per-channel data model (`CoderInfo`, `TnsInfo`,
  `TnsWindow`, `TnsFilter`, `Codeword`, `StreamConfig`) and the writers for
  `ics_info`, TNS data, spectral data, individual channel streams and
  SCE/LFE/CPE elements. `write_frame` produces a complete raw data block,
  optionally behind an ADTS header, with fill elements, END terminator and
  byte alignment. It raises `FrameSizeError` when the frame exceeds the
  buffer size or the ADTS frame length limit. Every writer also counts: pass
  `None` as the writer to get the bit length without writing.
- `aacenc.hcr`: Huffman codeword reordering of spectral data into
  fixed-width segments (`write_reordered_spectral_data`,
  `classify_codewords`, `rewind_word`).

## Installation

```
pip install .
```

Install the test dependencies with `pip install .[test]`; run the tests with
`pytest`.

## Example

```python
from aacenc.channels import channel_layout
from aacenc.syntax import CoderInfo, StreamConfig, write_frame

config = StreamConfig(sample_rate_index=4, num_channels=1)   # 44.1 kHz, mono
channels = channel_layout(1, use_lfe=False)
frame = write_frame(config, [CoderInfo()], channels,
                    frame_number=1, buffer_size=8192)
```

`frame` is an ADTS frame whose header starts with the 12-bit sync word
`0xFFF`.

## What this package does not do

It writes already coded data; it does not code audio. There is no
transform (MDCT filter bank or windowing), no psychoacoustic model or
long/short block decision, no quantisation or Huffman coding of spectra,
no reading of PCM or WAV input and no command-line encoder. Section data,
scalefactors and spectral codewords must be supplied in `CoderInfo` as
`Codeword` values.