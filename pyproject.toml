[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "aacenc"
version = "1.30.0"
description = "AAC bitstream writing: channel element layout, ADTS framing, raw data blocks and Huffman codeword reordering"
requires-python = ">=3.10"
keywords = ["aac", "audio", "adts", "bitstream", "encoder"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Sound/Audio :: Conversion",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["aacenc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
