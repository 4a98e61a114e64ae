"""Lay out the texel data of a DDS file as subresources.

This covers what is needed before a texture object is created: the
validation of sizes and formats and the split of the texel data into one
block per mip level and array slice.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .dds_formats import DxgiFormat, bits_per_pixel, surface_info
from .dds_header import (
    DDS_CUBEMAP,
    DDS_CUBEMAP_ALLFACES,
    DDS_HEADER_FLAGS_VOLUME,
    DDSD_HEIGHT,
    RESOURCE_MISC_TEXTURECUBE,
    DdsError,
    DdsFile,
    ResourceDimension,
)

REQ_MIP_LEVELS = 15
REQ_TEXTURE1D_ARRAY_AXIS_DIMENSION = 2048
REQ_TEXTURE1D_U_DIMENSION = 16384
REQ_TEXTURE2D_ARRAY_AXIS_DIMENSION = 2048
REQ_TEXTURE2D_U_OR_V_DIMENSION = 16384
REQ_TEXTURECUBE_DIMENSION = 16384
REQ_TEXTURE3D_U_V_OR_W_DIMENSION = 2048

_PALETTED = frozenset(
    (DxgiFormat.AI44, DxgiFormat.IA44, DxgiFormat.P8, DxgiFormat.A8P8)
)


@dataclass(frozen=True)
class Subresource:
    """One mip level of one array slice and the bytes that hold it."""

    mip_level: int
    array_index: int
    width: int
    height: int
    depth: int
    offset: int
    row_pitch: int
    slice_pitch: int
    data: bytes = field(repr=False)


@dataclass(frozen=True)
class TextureDescription:
    """Everything needed to create a texture from a DDS file."""

    dimension: ResourceDimension
    width: int
    height: int
    depth: int
    mip_count: int
    array_size: int
    format: DxgiFormat
    is_cube_map: bool
    skip_mip: int
    subresources: list[Subresource] = field(repr=False)


def fill_init_data(
    width: int,
    height: int,
    depth: int,
    mip_count: int,
    array_size: int,
    fmt: int,
    maxsize: int,
    bit_data: bytes,
) -> list[Subresource]:
    """Split texel data into subresources, skipping mips larger than ``maxsize``.

    The first subresource carries the size of the top level kept, and its
    ``mip_level`` tells how many levels were skipped.
    """
    bit_data = bytes(bit_data)
    subresources: list[Subresource] = []
    position = 0

    for array_index in range(array_size):
        w, h, d = width, height, depth
        for mip_level in range(mip_count):
            info = surface_info(w, h, fmt)
            length = info.num_bytes * d
            if position + length > len(bit_data):
                raise DdsError(
                    f"texel data ends early: mip {mip_level} of slice {array_index} "
                    f"needs {length} bytes at offset {position}, "
                    f"{len(bit_data)} bytes in total"
                )
            keep = (
                mip_count <= 1
                or not maxsize
                or (w <= maxsize and h <= maxsize and d <= maxsize)
            )
            if keep:
                subresources.append(
                    Subresource(
                        mip_level=mip_level,
                        array_index=array_index,
                        width=w,
                        height=h,
                        depth=d,
                        offset=position,
                        row_pitch=info.row_bytes,
                        slice_pitch=info.num_bytes,
                        data=bit_data[position:position + length],
                    )
                )
            position += length
            w = max(w >> 1, 1)
            h = max(h >> 1, 1)
            d = max(d >> 1, 1)

    if not subresources:
        raise DdsError("no subresources in texel data")
    return subresources


def _check_bounds(
    dimension: ResourceDimension,
    width: int,
    height: int,
    depth: int,
    array_size: int,
    is_cube_map: bool,
) -> None:
    if dimension == ResourceDimension.TEXTURE1D:
        too_big = (
            array_size > REQ_TEXTURE1D_ARRAY_AXIS_DIMENSION
            or width > REQ_TEXTURE1D_U_DIMENSION
        )
    elif dimension == ResourceDimension.TEXTURE2D:
        limit = REQ_TEXTURECUBE_DIMENSION if is_cube_map else REQ_TEXTURE2D_U_OR_V_DIMENSION
        too_big = (
            array_size > REQ_TEXTURE2D_ARRAY_AXIS_DIMENSION
            or width > limit
            or height > limit
        )
    else:
        too_big = (
            array_size > 1
            or width > REQ_TEXTURE3D_U_V_OR_W_DIMENSION
            or height > REQ_TEXTURE3D_U_V_OR_W_DIMENSION
            or depth > REQ_TEXTURE3D_U_V_OR_W_DIMENSION
        )
    if too_big:
        raise DdsError(
            f"texture of {width}x{height}x{depth} with {array_size} slices "
            f"exceeds the supported size"
        )


def describe_texture(dds: DdsFile, maxsize: int = 0) -> TextureDescription:
    """Validate a parsed DDS file and lay out its subresources."""
    header = dds.header
    width, height, depth = header.width, header.height, header.depth
    mip_count = header.mip_map_count or 1
    array_size = 1
    is_cube_map = False

    if dds.dx10 is not None:
        ext = dds.dx10
        array_size = ext.array_size
        if array_size == 0:
            raise DdsError("DX10 header declares an array size of zero")
        if bits_per_pixel(ext.dxgi_format) == 0:
            raise DdsError(f"unsupported format {ext.dxgi_format}")
        fmt = DxgiFormat(ext.dxgi_format)
        if fmt in _PALETTED:
            raise DdsError(f"unsupported format {fmt.name}")

        if ext.resource_dimension == ResourceDimension.TEXTURE1D:
            if header.flags & DDSD_HEIGHT and height != 1:
                raise DdsError("1D texture with a height other than 1")
            height = depth = 1
        elif ext.resource_dimension == ResourceDimension.TEXTURE2D:
            if ext.misc_flag & RESOURCE_MISC_TEXTURECUBE:
                array_size *= 6
                is_cube_map = True
            depth = 1
        elif ext.resource_dimension == ResourceDimension.TEXTURE3D:
            if not header.flags & DDS_HEADER_FLAGS_VOLUME:
                raise DdsError("3D texture without the volume flag")
            if array_size > 1:
                raise DdsError("3D texture arrays are not supported")
        else:
            raise DdsError(f"unsupported resource dimension {ext.resource_dimension}")
        dimension = ResourceDimension(ext.resource_dimension)
    else:
        fmt = header.pixel_format.dxgi_format
        if fmt == DxgiFormat.UNKNOWN:
            raise DdsError("pixel format does not map onto a supported format")
        if header.flags & DDS_HEADER_FLAGS_VOLUME:
            dimension = ResourceDimension.TEXTURE3D
        else:
            if header.caps2 & DDS_CUBEMAP:
                if header.caps2 & DDS_CUBEMAP_ALLFACES != DDS_CUBEMAP_ALLFACES:
                    raise DdsError("cube map without all six faces")
                array_size = 6
                is_cube_map = True
            depth = 1
            dimension = ResourceDimension.TEXTURE2D

    if mip_count > REQ_MIP_LEVELS:
        raise DdsError(f"{mip_count} mip levels exceed the limit of {REQ_MIP_LEVELS}")
    _check_bounds(dimension, width, height, depth, array_size, is_cube_map)

    subresources = fill_init_data(
        width, height, depth, mip_count, array_size, fmt, maxsize, dds.bit_data
    )
    top = subresources[0]
    skip_mip = top.mip_level
    return TextureDescription(
        dimension=dimension,
        width=top.width,
        height=top.height,
        depth=top.depth,
        mip_count=mip_count - skip_mip,
        array_size=array_size,
        format=fmt,
        is_cube_map=is_cube_map,
        skip_mip=skip_mip,
        subresources=subresources,
    )