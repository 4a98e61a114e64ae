"""Pixel formats found in DDS files and the size of their surfaces."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Union

DDPF_ALPHA = 0x00000002
DDPF_FOURCC = 0x00000004
DDPF_RGB = 0x00000040
DDPF_LUMINANCE = 0x00020000


class DxgiFormat(IntEnum):
    """Texture formats, numbered as they are stored in DX10 DDS headers."""

    UNKNOWN = 0
    R32G32B32A32_TYPELESS = 1
    R32G32B32A32_FLOAT = 2
    R32G32B32A32_UINT = 3
    R32G32B32A32_SINT = 4
    R32G32B32_TYPELESS = 5
    R32G32B32_FLOAT = 6
    R32G32B32_UINT = 7
    R32G32B32_SINT = 8
    R16G16B16A16_TYPELESS = 9
    R16G16B16A16_FLOAT = 10
    R16G16B16A16_UNORM = 11
    R16G16B16A16_UINT = 12
    R16G16B16A16_SNORM = 13
    R16G16B16A16_SINT = 14
    R32G32_TYPELESS = 15
    R32G32_FLOAT = 16
    R32G32_UINT = 17
    R32G32_SINT = 18
    R32G8X24_TYPELESS = 19
    D32_FLOAT_S8X24_UINT = 20
    R32_FLOAT_X8X24_TYPELESS = 21
    X32_TYPELESS_G8X24_UINT = 22
    R10G10B10A2_TYPELESS = 23
    R10G10B10A2_UNORM = 24
    R10G10B10A2_UINT = 25
    R11G11B10_FLOAT = 26
    R8G8B8A8_TYPELESS = 27
    R8G8B8A8_UNORM = 28
    R8G8B8A8_UNORM_SRGB = 29
    R8G8B8A8_UINT = 30
    R8G8B8A8_SNORM = 31
    R8G8B8A8_SINT = 32
    R16G16_TYPELESS = 33
    R16G16_FLOAT = 34
    R16G16_UNORM = 35
    R16G16_UINT = 36
    R16G16_SNORM = 37
    R16G16_SINT = 38
    R32_TYPELESS = 39
    D32_FLOAT = 40
    R32_FLOAT = 41
    R32_UINT = 42
    R32_SINT = 43
    R24G8_TYPELESS = 44
    D24_UNORM_S8_UINT = 45
    R24_UNORM_X8_TYPELESS = 46
    X24_TYPELESS_G8_UINT = 47
    R8G8_TYPELESS = 48
    R8G8_UNORM = 49
    R8G8_UINT = 50
    R8G8_SNORM = 51
    R8G8_SINT = 52
    R16_TYPELESS = 53
    R16_FLOAT = 54
    D16_UNORM = 55
    R16_UNORM = 56
    R16_UINT = 57
    R16_SNORM = 58
    R16_SINT = 59
    R8_TYPELESS = 60
    R8_UNORM = 61
    R8_UINT = 62
    R8_SNORM = 63
    R8_SINT = 64
    A8_UNORM = 65
    R1_UNORM = 66
    R9G9B9E5_SHAREDEXP = 67
    R8G8_B8G8_UNORM = 68
    G8R8_G8B8_UNORM = 69
    BC1_TYPELESS = 70
    BC1_UNORM = 71
    BC1_UNORM_SRGB = 72
    BC2_TYPELESS = 73
    BC2_UNORM = 74
    BC2_UNORM_SRGB = 75
    BC3_TYPELESS = 76
    BC3_UNORM = 77
    BC3_UNORM_SRGB = 78
    BC4_TYPELESS = 79
    BC4_UNORM = 80
    BC4_SNORM = 81
    BC5_TYPELESS = 82
    BC5_UNORM = 83
    BC5_SNORM = 84
    B5G6R5_UNORM = 85
    B5G5R5A1_UNORM = 86
    B8G8R8A8_UNORM = 87
    B8G8R8X8_UNORM = 88
    R10G10B10_XR_BIAS_A2_UNORM = 89
    B8G8R8A8_TYPELESS = 90
    B8G8R8A8_UNORM_SRGB = 91
    B8G8R8X8_TYPELESS = 92
    B8G8R8X8_UNORM_SRGB = 93
    BC6H_TYPELESS = 94
    BC6H_UF16 = 95
    BC6H_SF16 = 96
    BC7_TYPELESS = 97
    BC7_UNORM = 98
    BC7_UNORM_SRGB = 99
    AYUV = 100
    Y410 = 101
    Y416 = 102
    NV12 = 103
    P010 = 104
    P016 = 105
    OPAQUE_420 = 106
    YUY2 = 107
    Y210 = 108
    Y216 = 109
    NV11 = 110
    AI44 = 111
    IA44 = 112
    P8 = 113
    A8P8 = 114
    B4G4R4A4_UNORM = 115


F = DxgiFormat


def _group(*names: str) -> frozenset:
    return frozenset(F[name] for name in names)


_BITS_PER_PIXEL: dict = {}
for _bits, _formats in (
    (128, _group("R32G32B32A32_TYPELESS", "R32G32B32A32_FLOAT", "R32G32B32A32_UINT",
                 "R32G32B32A32_SINT")),
    (96, _group("R32G32B32_TYPELESS", "R32G32B32_FLOAT", "R32G32B32_UINT", "R32G32B32_SINT")),
    (64, _group("R16G16B16A16_TYPELESS", "R16G16B16A16_FLOAT", "R16G16B16A16_UNORM",
                "R16G16B16A16_UINT", "R16G16B16A16_SNORM", "R16G16B16A16_SINT",
                "R32G32_TYPELESS", "R32G32_FLOAT", "R32G32_UINT", "R32G32_SINT",
                "R32G8X24_TYPELESS", "D32_FLOAT_S8X24_UINT", "R32_FLOAT_X8X24_TYPELESS",
                "X32_TYPELESS_G8X24_UINT", "Y416", "Y210", "Y216")),
    (32, _group("R10G10B10A2_TYPELESS", "R10G10B10A2_UNORM", "R10G10B10A2_UINT",
                "R11G11B10_FLOAT", "R8G8B8A8_TYPELESS", "R8G8B8A8_UNORM",
                "R8G8B8A8_UNORM_SRGB", "R8G8B8A8_UINT", "R8G8B8A8_SNORM", "R8G8B8A8_SINT",
                "R16G16_TYPELESS", "R16G16_FLOAT", "R16G16_UNORM", "R16G16_UINT",
                "R16G16_SNORM", "R16G16_SINT", "R32_TYPELESS", "D32_FLOAT", "R32_FLOAT",
                "R32_UINT", "R32_SINT", "R24G8_TYPELESS", "D24_UNORM_S8_UINT",
                "R24_UNORM_X8_TYPELESS", "X24_TYPELESS_G8_UINT", "R9G9B9E5_SHAREDEXP",
                "R8G8_B8G8_UNORM", "G8R8_G8B8_UNORM", "B8G8R8A8_UNORM", "B8G8R8X8_UNORM",
                "R10G10B10_XR_BIAS_A2_UNORM", "B8G8R8A8_TYPELESS", "B8G8R8A8_UNORM_SRGB",
                "B8G8R8X8_TYPELESS", "B8G8R8X8_UNORM_SRGB", "AYUV", "Y410", "YUY2")),
    (24, _group("P010", "P016")),
    (16, _group("R8G8_TYPELESS", "R8G8_UNORM", "R8G8_UINT", "R8G8_SNORM", "R8G8_SINT",
                "R16_TYPELESS", "R16_FLOAT", "D16_UNORM", "R16_UNORM", "R16_UINT",
                "R16_SNORM", "R16_SINT", "B5G6R5_UNORM", "B5G5R5A1_UNORM", "A8P8",
                "B4G4R4A4_UNORM")),
    (12, _group("NV12", "OPAQUE_420", "NV11")),
    (8, _group("R8_TYPELESS", "R8_UNORM", "R8_UINT", "R8_SNORM", "R8_SINT", "A8_UNORM",
               "AI44", "IA44", "P8")),
    (1, _group("R1_UNORM")),
    (4, _group("BC1_TYPELESS", "BC1_UNORM", "BC1_UNORM_SRGB", "BC4_TYPELESS", "BC4_UNORM",
               "BC4_SNORM")),
    (8, _group("BC2_TYPELESS", "BC2_UNORM", "BC2_UNORM_SRGB", "BC3_TYPELESS", "BC3_UNORM",
               "BC3_UNORM_SRGB", "BC5_TYPELESS", "BC5_UNORM", "BC5_SNORM", "BC6H_TYPELESS",
               "BC6H_UF16", "BC6H_SF16", "BC7_TYPELESS", "BC7_UNORM", "BC7_UNORM_SRGB")),
):
    for _fmt in _formats:
        _BITS_PER_PIXEL[_fmt] = _bits

_BC_8_BYTES = _group("BC1_TYPELESS", "BC1_UNORM", "BC1_UNORM_SRGB", "BC4_TYPELESS",
                     "BC4_UNORM", "BC4_SNORM")
_BC_16_BYTES = _group("BC2_TYPELESS", "BC2_UNORM", "BC2_UNORM_SRGB", "BC3_TYPELESS",
                      "BC3_UNORM", "BC3_UNORM_SRGB", "BC5_TYPELESS", "BC5_UNORM", "BC5_SNORM",
                      "BC6H_TYPELESS", "BC6H_UF16", "BC6H_SF16", "BC7_TYPELESS", "BC7_UNORM",
                      "BC7_UNORM_SRGB")
_PACKED_4 = _group("R8G8_B8G8_UNORM", "G8R8_G8B8_UNORM", "YUY2")
_PACKED_8 = _group("Y210", "Y216")
_PLANAR_2 = _group("NV12", "OPAQUE_420")
_PLANAR_4 = _group("P010", "P016")

_SRGB = {
    F.R8G8B8A8_UNORM: F.R8G8B8A8_UNORM_SRGB,
    F.BC1_UNORM: F.BC1_UNORM_SRGB,
    F.BC2_UNORM: F.BC2_UNORM_SRGB,
    F.BC3_UNORM: F.BC3_UNORM_SRGB,
    F.B8G8R8A8_UNORM: F.B8G8R8A8_UNORM_SRGB,
    F.B8G8R8X8_UNORM: F.B8G8R8X8_UNORM_SRGB,
    F.BC7_UNORM: F.BC7_UNORM_SRGB,
}


def make_fourcc(code: Union[str, bytes]) -> int:
    """Pack a four character code into its little-endian integer."""
    raw = code.encode("latin-1") if isinstance(code, str) else bytes(code)
    if len(raw) != 4:
        raise ValueError(f"a four character code needs 4 characters, got {len(raw)}")
    return int.from_bytes(raw, "little")


_FOURCC_FORMATS = {
    make_fourcc("DXT1"): F.BC1_UNORM,
    make_fourcc("DXT3"): F.BC2_UNORM,
    make_fourcc("DXT5"): F.BC3_UNORM,
    # premultiplied alpha maps onto the plain block formats
    make_fourcc("DXT2"): F.BC2_UNORM,
    make_fourcc("DXT4"): F.BC3_UNORM,
    make_fourcc("ATI1"): F.BC4_UNORM,
    make_fourcc("BC4U"): F.BC4_UNORM,
    make_fourcc("BC4S"): F.BC4_SNORM,
    make_fourcc("ATI2"): F.BC5_UNORM,
    make_fourcc("BC5U"): F.BC5_UNORM,
    make_fourcc("BC5S"): F.BC5_SNORM,
    make_fourcc("RGBG"): F.R8G8_B8G8_UNORM,
    make_fourcc("GRGB"): F.G8R8_G8B8_UNORM,
    make_fourcc("YUY2"): F.YUY2,
    # legacy D3DFORMAT numbers stored in the fourcc field
    36: F.R16G16B16A16_UNORM,
    110: F.R16G16B16A16_SNORM,
    111: F.R16_FLOAT,
    112: F.R16G16_FLOAT,
    113: F.R16G16B16A16_FLOAT,
    114: F.R32_FLOAT,
    115: F.R32G32_FLOAT,
    116: F.R32G32B32A32_FLOAT,
}

_RGB_MASKS = {
    32: {
        (0x000000FF, 0x0000FF00, 0x00FF0000, 0xFF000000): F.R8G8B8A8_UNORM,
        (0x00FF0000, 0x0000FF00, 0x000000FF, 0xFF000000): F.B8G8R8A8_UNORM,
        (0x00FF0000, 0x0000FF00, 0x000000FF, 0x00000000): F.B8G8R8X8_UNORM,
        # writers commonly swap red and blue masks for 10:10:10:2 data
        (0x3FF00000, 0x000FFC00, 0x000003FF, 0xC0000000): F.R10G10B10A2_UNORM,
        (0x0000FFFF, 0xFFFF0000, 0x00000000, 0x00000000): F.R16G16_UNORM,
        (0xFFFFFFFF, 0x00000000, 0x00000000, 0x00000000): F.R32_FLOAT,
    },
    16: {
        (0x7C00, 0x03E0, 0x001F, 0x8000): F.B5G5R5A1_UNORM,
        (0xF800, 0x07E0, 0x001F, 0x0000): F.B5G6R5_UNORM,
        (0x0F00, 0x00F0, 0x000F, 0xF000): F.B4G4R4A4_UNORM,
    },
}

_LUMINANCE_MASKS = {
    8: {
        (0x000000FF, 0x00000000, 0x00000000, 0x00000000): F.R8_UNORM,
    },
    16: {
        (0x0000FFFF, 0x00000000, 0x00000000, 0x00000000): F.R16_UNORM,
        (0x000000FF, 0x00000000, 0x00000000, 0x0000FF00): F.R8G8_UNORM,
    },
}


@dataclass(frozen=True)
class SurfaceInfo:
    """Byte size, row pitch and row count of one surface."""

    num_bytes: int
    row_bytes: int
    num_rows: int


def _to_format(fmt: int) -> Union[DxgiFormat, None]:
    try:
        return DxgiFormat(fmt)
    except ValueError:
        return None


def bits_per_pixel(fmt: int) -> int:
    """Bits per pixel of a format; 0 for unknown or unsupported formats."""
    known = _to_format(fmt)
    return _BITS_PER_PIXEL.get(known, 0) if known is not None else 0


def surface_info(width: int, height: int, fmt: int) -> SurfaceInfo:
    """Compute the memory layout of a ``width`` x ``height`` surface."""
    if width < 0 or height < 0:
        raise ValueError("surface dimensions cannot be negative")
    known = _to_format(fmt)

    if known in _BC_8_BYTES or known in _BC_16_BYTES:
        block_bytes = 8 if known in _BC_8_BYTES else 16
        blocks_wide = max(1, (width + 3) // 4) if width > 0 else 0
        blocks_high = max(1, (height + 3) // 4) if height > 0 else 0
        row_bytes = blocks_wide * block_bytes
        return SurfaceInfo(row_bytes * blocks_high, row_bytes, blocks_high)

    if known in _PACKED_4 or known in _PACKED_8:
        element = 4 if known in _PACKED_4 else 8
        row_bytes = ((width + 1) >> 1) * element
        return SurfaceInfo(row_bytes * height, row_bytes, height)

    if known == F.NV11:
        row_bytes = ((width + 3) >> 2) * 4
        # Direct3D assumes twice the height, more than 4:1:1 data strictly needs
        num_rows = height * 2
        return SurfaceInfo(row_bytes * num_rows, row_bytes, num_rows)

    if known in _PLANAR_2 or known in _PLANAR_4:
        element = 2 if known in _PLANAR_2 else 4
        row_bytes = ((width + 1) >> 1) * element
        num_bytes = row_bytes * height + ((row_bytes * height + 1) >> 1)
        return SurfaceInfo(num_bytes, row_bytes, height + ((height + 1) >> 1))

    row_bytes = (width * bits_per_pixel(fmt) + 7) // 8
    return SurfaceInfo(row_bytes * height, row_bytes, height)


def format_from_pixel_format(
    flags: int,
    fourcc: int,
    bit_count: int,
    r_mask: int,
    g_mask: int,
    b_mask: int,
    a_mask: int,
) -> DxgiFormat:
    """Map a legacy DDS pixel format description onto a format."""
    masks = (r_mask, g_mask, b_mask, a_mask)
    if flags & DDPF_RGB:
        return _RGB_MASKS.get(bit_count, {}).get(masks, F.UNKNOWN)
    if flags & DDPF_LUMINANCE:
        return _LUMINANCE_MASKS.get(bit_count, {}).get(masks, F.UNKNOWN)
    if flags & DDPF_ALPHA:
        return F.A8_UNORM if bit_count == 8 else F.UNKNOWN
    if flags & DDPF_FOURCC:
        return _FOURCC_FORMATS.get(fourcc, F.UNKNOWN)
    return F.UNKNOWN


def make_srgb(fmt: int) -> int:
    """Return the sRGB variant of a format, or the format itself if it has none."""
    known = _to_format(fmt)
    if known is None:
        return fmt
    return _SRGB.get(known, known)