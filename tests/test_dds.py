import struct

import pytest

from meshkit.dds import Subresource, TextureDescription, describe_texture, fill_init_data
from meshkit.dds_formats import DDPF_FOURCC, DDPF_RGB, DxgiFormat, make_fourcc, surface_info
from meshkit.dds_header import (
    DDS_CUBEMAP,
    DDS_CUBEMAP_ALLFACES,
    DDS_CUBEMAP_POSITIVEX,
    DDS_HEADER_FLAGS_VOLUME,
    DDS_MAGIC,
    DDSD_HEIGHT,
    RESOURCE_MISC_TEXTURECUBE,
    DdsError,
    ResourceDimension,
    parse_dds,
)

RGBA_MASKS = (0x000000FF, 0x0000FF00, 0x00FF0000, 0xFF000000)


def make_dds(
    width,
    height,
    data,
    *,
    depth=0,
    mips=1,
    flags=0x1007,
    pf_flags=DDPF_RGB,
    fourcc=0,
    bit_count=32,
    masks=RGBA_MASKS,
    caps2=0,
    dx10=None,
):
    pixel_format = struct.pack("<8I", 32, pf_flags, fourcc, bit_count, *masks)
    header = struct.pack(
        "<7I11I32s5I",
        124, flags, height, width, 0, depth, mips,
        *([0] * 11), pixel_format, 0x1000, caps2, 0, 0, 0,
    )
    extension = struct.pack("<5I", *dx10) if dx10 is not None else b""
    return parse_dds(struct.pack("<I", DDS_MAGIC) + header + extension + bytes(data))


def make_dx10(width, height, data, dx10, **kwargs):
    return make_dds(
        width, height, data, pf_flags=DDPF_FOURCC, fourcc=make_fourcc("DX10"),
        bit_count=0, masks=(0, 0, 0, 0), dx10=dx10, **kwargs,
    )


def test_single_level_rgba():
    data = bytes(range(64))
    desc = describe_texture(make_dds(4, 4, data))
    assert isinstance(desc, TextureDescription)
    assert desc.format == DxgiFormat.R8G8B8A8_UNORM
    assert desc.dimension == ResourceDimension.TEXTURE2D
    assert (desc.width, desc.height, desc.depth) == (4, 4, 1)
    assert desc.array_size == 1
    assert not desc.is_cube_map
    assert len(desc.subresources) == 1
    sub = desc.subresources[0]
    info = surface_info(4, 4, DxgiFormat.R8G8B8A8_UNORM)
    assert sub.row_pitch == info.row_bytes
    assert sub.slice_pitch == info.num_bytes
    assert sub.data == data


def test_mip_chain_is_contiguous():
    total = sum(surface_info(s, s, DxgiFormat.R8G8B8A8_UNORM).num_bytes for s in (4, 2, 1))
    data = bytes(i % 256 for i in range(total))
    desc = describe_texture(make_dds(4, 4, data, mips=3))
    assert desc.mip_count == 3
    assert [s.width for s in desc.subresources] == [4, 2, 1]
    assert b"".join(s.data for s in desc.subresources) == data
    for first, second in zip(desc.subresources, desc.subresources[1:]):
        assert second.offset == first.offset + len(first.data)


def test_maxsize_skips_large_mips():
    total = sum(surface_info(s, s, DxgiFormat.R8G8B8A8_UNORM).num_bytes for s in (4, 2, 1))
    desc = describe_texture(make_dds(4, 4, bytes(total), mips=3), maxsize=2)
    assert desc.skip_mip == 1
    assert desc.mip_count == 2
    assert (desc.width, desc.height) == (2, 2)
    assert [s.mip_level for s in desc.subresources] == [1, 2]


def test_maxsize_ignored_for_single_mip():
    desc = describe_texture(make_dds(4, 4, bytes(64)), maxsize=2)
    assert desc.skip_mip == 0
    assert desc.width == 4


def test_truncated_data_raises():
    with pytest.raises(DdsError):
        describe_texture(make_dds(4, 4, bytes(63)))


def test_cube_map():
    face = surface_info(2, 2, DxgiFormat.R8G8B8A8_UNORM).num_bytes
    desc = describe_texture(
        make_dds(2, 2, bytes(face * 6), caps2=DDS_CUBEMAP | DDS_CUBEMAP_ALLFACES)
    )
    assert desc.is_cube_map
    assert desc.array_size == 6
    assert [s.array_index for s in desc.subresources] == list(range(6))


def test_cube_map_missing_faces():
    with pytest.raises(DdsError):
        describe_texture(make_dds(2, 2, bytes(96), caps2=DDS_CUBEMAP_POSITIVEX))


def test_unknown_legacy_format():
    with pytest.raises(DdsError):
        describe_texture(make_dds(4, 4, bytes(64), masks=(1, 2, 3, 4)))


def test_volume_texture():
    slice_bytes = surface_info(2, 2, DxgiFormat.R8G8B8A8_UNORM).num_bytes
    data = bytes(i % 256 for i in range(slice_bytes * 4))
    desc = describe_texture(
        make_dds(2, 2, data, depth=4, flags=0x1007 | DDS_HEADER_FLAGS_VOLUME)
    )
    assert desc.dimension == ResourceDimension.TEXTURE3D
    assert desc.depth == 4
    assert desc.subresources[0].data == data
    assert desc.subresources[0].slice_pitch == slice_bytes


def test_dx10_texture_array():
    layer = surface_info(4, 4, DxgiFormat.BC1_UNORM).num_bytes
    dds = make_dx10(
        4, 4, bytes(layer * 3),
        (DxgiFormat.BC1_UNORM, ResourceDimension.TEXTURE2D, 0, 3, 0),
    )
    desc = describe_texture(dds)
    assert desc.format == DxgiFormat.BC1_UNORM
    assert desc.array_size == 3
    assert len(desc.subresources) == 3


def test_dx10_cube_multiplies_array_size():
    face = surface_info(2, 2, DxgiFormat.R8G8B8A8_UNORM).num_bytes
    dds = make_dx10(
        2, 2, bytes(face * 6),
        (DxgiFormat.R8G8B8A8_UNORM, ResourceDimension.TEXTURE2D,
         RESOURCE_MISC_TEXTURECUBE, 1, 0),
    )
    desc = describe_texture(dds)
    assert desc.is_cube_map
    assert desc.array_size == 6


def test_dx10_1d_forces_unit_height():
    dds = make_dx10(
        8, 1, bytes(32),
        (DxgiFormat.R8G8B8A8_UNORM, ResourceDimension.TEXTURE1D, 0, 1, 0),
    )
    desc = describe_texture(dds)
    assert desc.dimension == ResourceDimension.TEXTURE1D
    assert (desc.height, desc.depth) == (1, 1)


@pytest.mark.parametrize(
    "dx10, flags",
    [
        ((DxgiFormat.R8G8B8A8_UNORM, ResourceDimension.TEXTURE2D, 0, 0, 0), 0x1007),
        ((DxgiFormat.P8, ResourceDimension.TEXTURE2D, 0, 1, 0), 0x1007),
        ((DxgiFormat.A8P8, ResourceDimension.TEXTURE2D, 0, 1, 0), 0x1007),
        ((500, ResourceDimension.TEXTURE2D, 0, 1, 0), 0x1007),
        ((DxgiFormat.R8G8B8A8_UNORM, ResourceDimension.TEXTURE1D, 0, 1, 0), DDSD_HEIGHT),
        ((DxgiFormat.R8G8B8A8_UNORM, ResourceDimension.TEXTURE3D, 0, 1, 0), 0x1007),
        ((DxgiFormat.R8G8B8A8_UNORM, ResourceDimension.TEXTURE3D, 0, 2, 0),
         0x1007 | DDS_HEADER_FLAGS_VOLUME),
        ((DxgiFormat.R8G8B8A8_UNORM, ResourceDimension.BUFFER, 0, 1, 0), 0x1007),
    ],
)
def test_dx10_rejections(dx10, flags):
    with pytest.raises(DdsError):
        describe_texture(make_dx10(4, 4, bytes(1024), dx10, flags=flags))


def test_too_many_mips():
    with pytest.raises(DdsError):
        describe_texture(make_dds(4, 4, bytes(4096), mips=16))


def test_too_wide():
    with pytest.raises(DdsError):
        describe_texture(make_dds(16385, 1, b""))


def test_fill_init_data_without_slices_raises():
    with pytest.raises(DdsError):
        fill_init_data(4, 4, 1, 1, 0, DxgiFormat.R8G8B8A8_UNORM, 0, bytes(64))


def test_fill_init_data_dimensions_clamp_to_one():
    subs = fill_init_data(4, 1, 1, 3, 1, DxgiFormat.R8_UNORM, 0, bytes(7))
    assert all(isinstance(s, Subresource) for s in subs)
    assert [(s.width, s.height) for s in subs] == [(4, 1), (2, 1), (1, 1)]
    assert sum(len(s.data) for s in subs) == 7


def test_fill_init_data_checks_length():
    with pytest.raises(DdsError):
        fill_init_data(4, 1, 1, 3, 1, DxgiFormat.R8_UNORM, 0, bytes(6))