"""Binary files for meshes (.msh), bind poses (.pose) and animations (.anim).

All counts and lengths are little-endian unsigned 64-bit integers; vector and
matrix components are 32-bit floats.
"""

from __future__ import annotations

import os
import struct
from typing import Iterable, Sequence

from .structures import Animation, Joint, KeyFrame, Mesh, Vertex, as_matrix

_SIZE = struct.Struct("<Q")
_POSE_PARENT = struct.Struct("<q")
_ANIM_PARENT = struct.Struct("<i")
_FLOAT = struct.Struct("<f")
_INDEX = struct.Struct("<I")
_MATRIX = struct.Struct("<16f")
_VERTEX = struct.Struct("<30f")

_VERTEX_FIELDS = (
    "position", "color", "texcoord", "normal", "tangent", "binormal", "joint", "weight",
)


class FormatError(ValueError):
    """Raised when data cannot be encoded or decoded in the binary format."""


class _Cursor:
    def __init__(self, data: bytes) -> None:
        self._view = memoryview(data)
        self._pos = 0

    def take(self, count: int) -> memoryview:
        end = self._pos + count
        if end > len(self._view):
            raise FormatError(
                f"unexpected end of data at offset {self._pos}: "
                f"needed {count} bytes, {len(self._view) - self._pos} left"
            )
        chunk = self._view[self._pos:end]
        self._pos = end
        return chunk

    def unpack(self, layout: struct.Struct) -> tuple:
        return layout.unpack(self.take(layout.size))

    def size(self) -> int:
        return self.unpack(_SIZE)[0]

    def string(self) -> str:
        raw = bytes(self.take(self.size()))
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FormatError(f"invalid string: {exc}") from exc

    def matrix(self):
        values = self.unpack(_MATRIX)
        return tuple(tuple(values[row * 4:row * 4 + 4]) for row in range(4))


def _pack(layout: struct.Struct, *values) -> bytes:
    try:
        return layout.pack(*values)
    except struct.error as exc:
        raise FormatError(str(exc)) from exc


def _string(text: str) -> bytes:
    raw = text.encode("utf-8")
    return _pack(_SIZE, len(raw)) + raw


def _matrix(matrix: Sequence[Sequence[float]]) -> bytes:
    try:
        rows = as_matrix(matrix)
    except ValueError as exc:
        raise FormatError(str(exc)) from exc
    return _pack(_MATRIX, *(value for row in rows for value in row))


def _vertex_bytes(vertex: Vertex) -> bytes:
    return _pack(
        _VERTEX, *(value for name in _VERTEX_FIELDS for value in getattr(vertex, name))
    )


def _vertex_from(values: tuple) -> Vertex:
    return Vertex(
        position=values[0:4],
        color=values[4:8],
        texcoord=values[8:10],
        normal=values[10:14],
        tangent=values[14:18],
        binormal=values[18:22],
        joint=values[22:26],
        weight=values[26:30],
    )


def encode_meshes(meshes: Iterable[Mesh]) -> bytes:
    """Serialise meshes: vertices, indices and the three texture names."""
    meshes = list(meshes)
    parts = [_pack(_SIZE, len(meshes))]
    for mesh in meshes:
        parts.append(_pack(_SIZE, len(mesh.vertices)))
        parts.extend(_vertex_bytes(v) for v in mesh.vertices)
        parts.append(_pack(_SIZE, len(mesh.indices)))
        parts.append(_pack(struct.Struct(f"<{len(mesh.indices)}I"), *mesh.indices))
        parts.append(_string(mesh.texture_diffuse_name))
        parts.append(_string(mesh.texture_normal_name))
        parts.append(_string(mesh.texture_specular_name))
    return b"".join(parts)


def decode_meshes(data: bytes) -> list[Mesh]:
    """Parse the output of :func:`encode_meshes`."""
    cursor = _Cursor(data)
    meshes = []
    for _ in range(cursor.size()):
        mesh = Mesh()
        mesh.vertices = [_vertex_from(cursor.unpack(_VERTEX)) for _ in range(cursor.size())]
        mesh.indices = [cursor.unpack(_INDEX)[0] for _ in range(cursor.size())]
        mesh.texture_diffuse_name = cursor.string()
        mesh.texture_normal_name = cursor.string()
        mesh.texture_specular_name = cursor.string()
        meshes.append(mesh)
    return meshes


def encode_bind_pose(joints: Iterable[Joint]) -> bytes:
    """Serialise a bind pose: matrix, name and parent index per joint."""
    joints = list(joints)
    parts = [_pack(_SIZE, len(joints))]
    for joint in joints:
        parts.append(_matrix(joint.matrix))
        parts.append(_string(joint.name))
        parts.append(_pack(_POSE_PARENT, joint.parent_index))
    return b"".join(parts)


def decode_bind_pose(data: bytes) -> list[Joint]:
    """Parse the output of :func:`encode_bind_pose`."""
    cursor = _Cursor(data)
    joints = []
    for _ in range(cursor.size()):
        matrix = cursor.matrix()
        name = cursor.string()
        parent = cursor.unpack(_POSE_PARENT)[0]
        joints.append(Joint(name=name, matrix=matrix, parent_index=parent))
    return joints


def encode_animations(animations: Iterable[Animation]) -> bytes:
    """Serialise animations with their key frames and joint transforms."""
    animations = list(animations)
    parts = [_pack(_SIZE, len(animations))]
    for animation in animations:
        parts.append(_string(animation.name))
        parts.append(_pack(_FLOAT, animation.duration))
        parts.append(_pack(_SIZE, len(animation.keyframes)))
        for keyframe in animation.keyframes:
            parts.append(_pack(_FLOAT, keyframe.time))
            parts.append(_pack(_SIZE, len(keyframe.joints)))
            for joint in keyframe.joints:
                parts.append(_string(joint.name))
                parts.append(_matrix(joint.matrix))
                parts.append(_pack(_ANIM_PARENT, joint.parent_index))
    return b"".join(parts)


def decode_animations(data: bytes) -> list[Animation]:
    """Parse the output of :func:`encode_animations`."""
    cursor = _Cursor(data)
    animations = []
    for _ in range(cursor.size()):
        name = cursor.string()
        duration = cursor.unpack(_FLOAT)[0]
        keyframes = []
        for _ in range(cursor.size()):
            time = cursor.unpack(_FLOAT)[0]
            joints = []
            for _ in range(cursor.size()):
                joint_name = cursor.string()
                matrix = cursor.matrix()
                parent = cursor.unpack(_ANIM_PARENT)[0]
                joints.append(Joint(name=joint_name, matrix=matrix, parent_index=parent))
            keyframes.append(KeyFrame(time=time, joints=joints))
        animations.append(Animation(name=name, duration=duration, keyframes=keyframes))
    return animations


def _write(path: str | os.PathLike, payload: bytes) -> None:
    with open(path, "wb") as handle:
        handle.write(payload)


def _read(path: str | os.PathLike) -> bytes:
    with open(path, "rb") as handle:
        return handle.read()


def write_meshes(path: str | os.PathLike, meshes: Iterable[Mesh]) -> None:
    """Write meshes to a file."""
    _write(path, encode_meshes(meshes))


def read_meshes(path: str | os.PathLike) -> list[Mesh]:
    """Read meshes from a file."""
    return decode_meshes(_read(path))


def write_bind_pose(path: str | os.PathLike, joints: Iterable[Joint]) -> None:
    """Write a bind pose to a file."""
    _write(path, encode_bind_pose(joints))


def read_bind_pose(path: str | os.PathLike) -> list[Joint]:
    """Read a bind pose from a file."""
    return decode_bind_pose(_read(path))


def write_animations(path: str | os.PathLike, animations: Iterable[Animation]) -> None:
    """Write animations to a file."""
    _write(path, encode_animations(animations))


def read_animations(path: str | os.PathLike) -> list[Animation]:
    """Read animations from a file."""
    return decode_animations(_read(path))