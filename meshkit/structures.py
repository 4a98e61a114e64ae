"""Plain data types shared by the mesh, pose and animation formats."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence, Tuple

Vector2 = Tuple[float, float]
Vector4 = Tuple[float, float, float, float]
Matrix = Tuple[Vector4, Vector4, Vector4, Vector4]

_ZERO4: Vector4 = (0.0, 0.0, 0.0, 0.0)
_ZERO2: Vector2 = (0.0, 0.0)


def identity_matrix() -> Matrix:
    """Return the 4x4 identity matrix as a tuple of row tuples."""
    return tuple(
        tuple(1.0 if row == col else 0.0 for col in range(4)) for row in range(4)
    )  # type: ignore[return-value]


def _as_vector(values: Sequence[float], size: int, name: str) -> tuple:
    vector = tuple(float(v) for v in values)
    if len(vector) != size:
        raise ValueError(f"{name} needs {size} components, got {len(vector)}")
    return vector


def as_matrix(rows: Sequence[Sequence[float]]) -> Matrix:
    """Normalise a 4x4 nested sequence into a tuple of row tuples."""
    matrix = tuple(_as_vector(row, 4, "matrix row") for row in rows)
    if len(matrix) != 4:
        raise ValueError(f"matrix needs 4 rows, got {len(matrix)}")
    return matrix  # type: ignore[return-value]


@dataclass(frozen=True)
class Vertex:
    """A skinned vertex.

    Equality and hashing cover every attribute except ``control_point_index``,
    so equal vertices collapse together when used as dictionary keys.
    """

    position: Vector4 = _ZERO4
    color: Vector4 = _ZERO4
    texcoord: Vector2 = _ZERO2
    normal: Vector4 = _ZERO4
    tangent: Vector4 = _ZERO4
    binormal: Vector4 = _ZERO4
    control_point_index: int = field(default=0, compare=False)
    joint: Vector4 = _ZERO4
    weight: Vector4 = _ZERO4

    def __post_init__(self) -> None:
        for name in ("position", "color", "normal", "tangent", "binormal", "joint", "weight"):
            object.__setattr__(self, name, _as_vector(getattr(self, name), 4, name))
        object.__setattr__(self, "texcoord", _as_vector(self.texcoord, 2, "texcoord"))


@dataclass
class Joint:
    """A named joint transform with the index of its parent (-1 for a root)."""

    name: str = ""
    matrix: Matrix = field(default_factory=identity_matrix)
    parent_index: int = -1

    def __post_init__(self) -> None:
        self.matrix = as_matrix(self.matrix)


@dataclass
class KeyFrame:
    """The pose of every joint at one point in time."""

    time: float = 0.0
    joints: list[Joint] = field(default_factory=list)


@dataclass
class Animation:
    """A named, timed sequence of key frames."""

    name: str = ""
    duration: float = 0.0
    keyframes: list[KeyFrame] = field(default_factory=list)


@dataclass
class Influence:
    """Joints influencing a control point and their weights."""

    joint: list[int] = field(default_factory=list)
    weight: list[float] = field(default_factory=list)


@dataclass
class Mesh:
    """Vertices, indices and texture references of one mesh."""

    name: str = ""
    vertices: list[Vertex] = field(default_factory=list)
    indices: list[int] = field(default_factory=list)
    vert_offset: int = -1
    vert_total: int = -1
    index_offset: int = -1
    index_total: int = -1
    world_matrix: Matrix = field(default_factory=identity_matrix)
    texture_diffuse_name: str = ""
    texture_diffuse_id: int = -1
    texture_normal_name: str = ""
    texture_normal_id: int = -1
    texture_specular_name: str = ""
    texture_specular_id: int = -1
    influences: list[Influence] = field(default_factory=list)