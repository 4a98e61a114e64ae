# meshkit

meshkit reads and writes three binary asset formats: meshes (`.msh`), skeleton
bind poses (`.pose`) and skeletal animations (`.anim`). It can also play back
skeletal animations by blending key frames, collect skeleton line segments, and
parse and lay out DDS texture files. It depends only on the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Data model

`meshkit.structures` defines the plain data classes:

- `Vertex` is frozen. It holds `position`, `color`, `texcoord`, `normal`,
  `tangent`, `binormal`, `joint`, `weight` and `control_point_index`. Equality
  and hashing ignore `control_point_index`. Each vector field is checked for the
  right number of components, and a `ValueError` is raised if it is wrong.
- `Joint` holds `name`, `matrix` and `parent_index`. A `parent_index` of -1
  marks a root joint.
- `KeyFrame` holds `time` and `joints`.
- `Animation` holds `name`, `duration` and `keyframes`.
- `Influence` holds `joint` and `weight` lists.
- `Mesh` holds `vertices`, `indices`, offsets and totals, `world_matrix`, and
  the diffuse, normal and specular texture names and ids.

Matrices are 4×4 tuples of row tuples. `identity_matrix()` returns the identity
matrix. `as_matrix()` turns any nested 4×4 sequence into that form.

## Asset files

`meshkit.binary_format` encodes and decodes the three formats. Counts and string
lengths are stored as little-endian unsigned 64-bit integers. Vector and matrix
components are stored as 32-bit floats.

| Format | What is stored |
| --- | --- |
| Meshes | For each vertex, its 30 floats. Then the indices as unsigned 32-bit integers. Then the diffuse, normal and specular texture names. |
| Bind poses | For each joint, its matrix, its name and its parent index as a signed 64-bit integer. |
| Animations | The name and duration. Then, for each key frame, its time and joints. Each joint is stored as its name, matrix and parent index as a signed 32-bit integer. |

```python
from meshkit.binary_format import read_meshes, write_meshes, read_bind_pose, read_animations

meshes = read_meshes("model.msh")
write_meshes("copy.msh", meshes)

joints = read_bind_pose("model.pose")
animations = read_animations("model_idle.anim")
```

The functions work in pairs:

- Bytes in memory: `encode_meshes`/`decode_meshes`,
  `encode_bind_pose`/`decode_bind_pose` and
  `encode_animations`/`decode_animations`.
- Files: `write_meshes`/`read_meshes`, `write_bind_pose`/`read_bind_pose` and
  `write_animations`/`read_animations`.

Decoding raises `FormatError`, a subclass of `ValueError`, in two cases: when
the data ends early, and when a string is not valid UTF-8. Encoding raises
`FormatError` when a value does not fit its field.

Only the fields listed in the table are stored. A decoded `Mesh` therefore has
default offsets, ids and world matrix.

## Animation playback

`meshkit.animation.AnimationInterpolator` plays an `Animation`.

- Each call to `interpolate(delta)` advances `current_time` by `delta`.
- When `current_time` reaches `duration`, it wraps back to zero.
- It finds the two key frames around the current time and returns the blended
  list of `Joint`s. Rotations are blended with quaternion slerp and translations
  linearly.
- Past the last key frame, it blends the last key frame back towards the first.
- Without an animation, `interpolate` returns an empty list.
- An animation with fewer than two key frames raises `ValueError`.

`set_animation` switches to another animation and takes over its duration.

```python
from meshkit.animation import AnimationInterpolator

player = AnimationInterpolator(animations[0])
pose = player.interpolate(1 / 60)
```

`interpolate_joints(a, b, ratio)` blends two poses joint by joint. The names and
parent indices come from the first pose.

The lower-level helpers are in `meshkit.transforms`: `lerp`,
`interpolate_position`, `quaternion_from_matrix`, `matrix_from_quaternion`,
`normalize_quaternion`, `slerp` and `interpolate_matrix`. Matrices act on row
vectors, so the translation is the last row. Quaternions are `(x, y, z, w)`.

## Skeleton lines

`meshkit.debug_lines.DebugLineBuffer` collects line vertices up to a fixed
capacity. The default capacity is `MAX_VERTICES`, which is 8096.

- `add_line(start, end)` adds one segment. It raises `OverflowError` when the
  buffer is full.
- `add_pose(pose)` adds a segment from each non-root joint's translation to its
  parent's translation.
- `clear()` empties the buffer.
- `len()` gives the number of vertices, and iterating yields them.

## DDS textures

- `meshkit.dds_formats` has the `DxgiFormat` enumeration and these functions:
  - `bits_per_pixel`
  - `surface_info`, which returns a `SurfaceInfo` with `num_bytes`,
    `row_bytes` and `num_rows`
  - `format_from_pixel_format`, which maps a legacy pixel format description
    onto a format
  - `make_srgb`
  - `make_fourcc`
- `meshkit.dds_header` parses files:
  - `parse_dds(data)` and `load_dds(path)` check the magic number and the header
    sizes. They return a `DdsFile` holding the `DdsHeader`, the optional
    `Dx10Header` and the texel bytes.
  - `alpha_mode(dds)` reports the declared `AlphaMode`.
  - Invalid data raises `DdsError`.
- `meshkit.dds` lays out the texel data:
  - `fill_init_data` splits the texel data into `Subresource`s, one per mip
    level and array slice. It skips mips larger than `maxsize`.
  - `describe_texture(dds, maxsize)` checks the format, dimension and size
    limits. It returns a `TextureDescription`.
  - Unsupported or truncated textures raise `DdsError`.

```python
from meshkit.dds_header import load_dds
from meshkit.dds import describe_texture

dds = load_dds("skybox.dds")
description = describe_texture(dds, 0)
for sub in description.subresources:
    print(sub.mip_level, sub.array_index, sub.width, sub.height, len(sub.data))
```

## What meshkit does not do

- It does not import FBX or any other interchange format. Meshes, poses and
  animations must already be in the binary formats above, or be built in code.
- It does not render anything and does not create GPU textures. The DDS modules
  stop at a description of the texture and its subresources.
- It does not decompress block-compressed texel data.
- It has no command-line tool. It is used as a library.