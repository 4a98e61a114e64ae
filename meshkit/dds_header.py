"""Reading and validating the headers of DDS texture files."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from .dds_formats import DDPF_FOURCC, DxgiFormat, format_from_pixel_format, make_fourcc

DDS_MAGIC = 0x20534444  # "DDS "

DDSD_HEIGHT = 0x00000002
DDSD_WIDTH = 0x00000004
DDS_HEADER_FLAGS_VOLUME = 0x00800000

DDS_CUBEMAP = 0x00000200
DDS_CUBEMAP_POSITIVEX = 0x00000600
DDS_CUBEMAP_NEGATIVEX = 0x00000A00
DDS_CUBEMAP_POSITIVEY = 0x00001200
DDS_CUBEMAP_NEGATIVEY = 0x00002200
DDS_CUBEMAP_POSITIVEZ = 0x00004200
DDS_CUBEMAP_NEGATIVEZ = 0x00008200
DDS_CUBEMAP_ALLFACES = (
    DDS_CUBEMAP_POSITIVEX | DDS_CUBEMAP_NEGATIVEX
    | DDS_CUBEMAP_POSITIVEY | DDS_CUBEMAP_NEGATIVEY
    | DDS_CUBEMAP_POSITIVEZ | DDS_CUBEMAP_NEGATIVEZ
)

RESOURCE_MISC_TEXTURECUBE = 0x4
ALPHA_MODE_MASK = 0x7

FOURCC_DX10 = make_fourcc("DX10")
_FOURCC_PREMULTIPLIED = (make_fourcc("DXT2"), make_fourcc("DXT4"))

_MAGIC = struct.Struct("<I")
_PIXEL_FORMAT = struct.Struct("<8I")
_HEADER = struct.Struct("<7I11I32s5I")
_DX10 = struct.Struct("<5I")

HEADER_SIZE = _HEADER.size
PIXEL_FORMAT_SIZE = _PIXEL_FORMAT.size
DX10_HEADER_SIZE = _DX10.size

_MAX_FILE_SIZE = 0xFFFFFFFF


class DdsError(ValueError):
    """Raised when data is not a valid DDS file."""


class AlphaMode(IntEnum):
    """How the alpha channel of a texture is to be read."""

    UNKNOWN = 0
    STRAIGHT = 1
    PREMULTIPLIED = 2
    OPAQUE = 3
    CUSTOM = 4


class ResourceDimension(IntEnum):
    """Resource dimension codes stored in the DX10 extension header."""

    UNKNOWN = 0
    BUFFER = 1
    TEXTURE1D = 2
    TEXTURE2D = 3
    TEXTURE3D = 4


@dataclass(frozen=True)
class PixelFormat:
    """The legacy pixel format block of a DDS header."""

    size: int
    flags: int
    fourcc: int
    rgb_bit_count: int
    r_mask: int
    g_mask: int
    b_mask: int
    a_mask: int

    @property
    def dxgi_format(self) -> DxgiFormat:
        """The format this legacy description maps onto, or UNKNOWN."""
        return format_from_pixel_format(
            self.flags, self.fourcc, self.rgb_bit_count,
            self.r_mask, self.g_mask, self.b_mask, self.a_mask,
        )

    @property
    def has_dx10_extension(self) -> bool:
        """Whether a DX10 extension header follows the main header."""
        return bool(self.flags & DDPF_FOURCC) and self.fourcc == FOURCC_DX10


@dataclass(frozen=True)
class DdsHeader:
    """The 124-byte main header of a DDS file."""

    size: int
    flags: int
    height: int
    width: int
    pitch_or_linear_size: int
    depth: int
    mip_map_count: int
    reserved1: tuple
    pixel_format: PixelFormat
    caps: int
    caps2: int
    caps3: int
    caps4: int
    reserved2: int


@dataclass(frozen=True)
class Dx10Header:
    """The extension header that follows the main header for DX10 files."""

    dxgi_format: int
    resource_dimension: int
    misc_flag: int
    array_size: int
    misc_flags2: int


@dataclass(frozen=True)
class DdsFile:
    """A validated DDS file: its headers and the texel data behind them."""

    header: DdsHeader
    dx10: Optional[Dx10Header]
    bit_data: bytes


def _parse_header(raw: bytes) -> DdsHeader:
    values = _HEADER.unpack(raw)
    pixel_format = PixelFormat(*_PIXEL_FORMAT.unpack(values[18]))
    return DdsHeader(
        size=values[0],
        flags=values[1],
        height=values[2],
        width=values[3],
        pitch_or_linear_size=values[4],
        depth=values[5],
        mip_map_count=values[6],
        reserved1=tuple(values[7:18]),
        pixel_format=pixel_format,
        caps=values[19],
        caps2=values[20],
        caps3=values[21],
        caps4=values[22],
        reserved2=values[23],
    )


def parse_dds(data: bytes) -> DdsFile:
    """Validate DDS bytes and split them into headers and texel data."""
    data = bytes(data)
    base = _MAGIC.size + HEADER_SIZE
    if len(data) < base:
        raise DdsError(f"data too short for a DDS header: {len(data)} bytes")

    (magic,) = _MAGIC.unpack_from(data, 0)
    if magic != DDS_MAGIC:
        raise DdsError(f"bad magic number 0x{magic:08x}")

    header = _parse_header(data[_MAGIC.size:base])
    if header.size != HEADER_SIZE:
        raise DdsError(f"header size is {header.size}, expected {HEADER_SIZE}")
    if header.pixel_format.size != PIXEL_FORMAT_SIZE:
        raise DdsError(
            f"pixel format size is {header.pixel_format.size}, expected {PIXEL_FORMAT_SIZE}"
        )

    dx10 = None
    offset = base
    if header.pixel_format.has_dx10_extension:
        if len(data) < base + DX10_HEADER_SIZE:
            raise DdsError("data too short for the DX10 extension header")
        dx10 = Dx10Header(*_DX10.unpack_from(data, base))
        offset += DX10_HEADER_SIZE

    return DdsFile(header=header, dx10=dx10, bit_data=data[offset:])


def load_dds(path: str | os.PathLike) -> DdsFile:
    """Read and validate a DDS file from disk."""
    with open(path, "rb") as handle:
        data = handle.read()
    if len(data) > _MAX_FILE_SIZE:
        raise DdsError("file is too large")
    return parse_dds(data)


def alpha_mode(dds: DdsFile) -> AlphaMode:
    """Work out the alpha mode a DDS file declares."""
    pixel_format = dds.header.pixel_format
    if not pixel_format.flags & DDPF_FOURCC:
        return AlphaMode.UNKNOWN
    if pixel_format.fourcc == FOURCC_DX10:
        if dds.dx10 is None:
            return AlphaMode.UNKNOWN
        mode = dds.dx10.misc_flags2 & ALPHA_MODE_MASK
        try:
            return AlphaMode(mode)
        except ValueError:
            return AlphaMode.UNKNOWN
    if pixel_format.fourcc in _FOURCC_PREMULTIPLIED:
        return AlphaMode.PREMULTIPLIED
    return AlphaMode.UNKNOWN