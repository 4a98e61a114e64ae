"""Vector, quaternion and matrix helpers used for key frame blending.

Matrices are 4x4 tuples of rows and act on row vectors, so the translation
lives in the last row. Quaternions are ``(x, y, z, w)`` tuples.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

from .structures import Matrix, Vector4, as_matrix

Quaternion = Tuple[float, float, float, float]

_SLERP_THRESHOLD = 1.0 - 0.00001
_IDENTITY_ROW: Vector4 = (0.0, 0.0, 0.0, 1.0)


def lerp(a: float, b: float, ratio: float) -> float:
    """Linear interpolation between ``a`` and ``b``."""
    return (b - a) * ratio + a


def interpolate_position(
    a: Sequence[float], b: Sequence[float], ratio: float
) -> Vector4:
    """Blend the x, y and z of two points; the result always has w = 1."""
    if len(a) < 3 or len(b) < 3:
        raise ValueError("positions need at least three components")
    return (lerp(a[0], b[0], ratio), lerp(a[1], b[1], ratio), lerp(a[2], b[2], ratio), 1.0)


def quaternion_from_matrix(matrix: Sequence[Sequence[float]]) -> Quaternion:
    """Extract the rotation of the upper 3x3 part of a matrix as a quaternion."""
    m = as_matrix(matrix)
    r00, r01, r02 = m[0][0], m[0][1], m[0][2]
    r10, r11, r12 = m[1][0], m[1][1], m[1][2]
    r20, r21, r22 = m[2][0], m[2][1], m[2][2]

    if r22 <= 0.0:
        dif10 = r11 - r00
        omr22 = 1.0 - r22
        if dif10 <= 0.0:
            four_x_sq = omr22 - dif10
            inv = 0.5 / math.sqrt(four_x_sq)
            return (four_x_sq * inv, (r01 + r10) * inv, (r02 + r20) * inv, (r12 - r21) * inv)
        four_y_sq = omr22 + dif10
        inv = 0.5 / math.sqrt(four_y_sq)
        return ((r01 + r10) * inv, four_y_sq * inv, (r12 + r21) * inv, (r20 - r02) * inv)

    sum10 = r11 + r00
    opr22 = 1.0 + r22
    if sum10 <= 0.0:
        four_z_sq = opr22 - sum10
        inv = 0.5 / math.sqrt(four_z_sq)
        return ((r02 + r20) * inv, (r12 + r21) * inv, four_z_sq * inv, (r01 - r10) * inv)
    four_w_sq = opr22 + sum10
    inv = 0.5 / math.sqrt(four_w_sq)
    return ((r12 - r21) * inv, (r20 - r02) * inv, (r01 - r10) * inv, four_w_sq * inv)


def matrix_from_quaternion(quaternion: Sequence[float]) -> Matrix:
    """Build a rotation matrix (no translation) from a unit quaternion."""
    x, y, z, w = (float(c) for c in quaternion)
    xx, yy, zz = x * x, y * y, z * z
    xy, xz, yz = x * y, x * z, y * z
    xw, yw, zw = x * w, y * w, z * w
    return (
        (1.0 - 2.0 * (yy + zz), 2.0 * (xy + zw), 2.0 * (xz - yw), 0.0),
        (2.0 * (xy - zw), 1.0 - 2.0 * (xx + zz), 2.0 * (yz + xw), 0.0),
        (2.0 * (xz + yw), 2.0 * (yz - xw), 1.0 - 2.0 * (xx + yy), 0.0),
        _IDENTITY_ROW,
    )


def normalize_quaternion(quaternion: Sequence[float]) -> Quaternion:
    """Scale a quaternion to unit length; a zero quaternion stays zero."""
    components = tuple(float(c) for c in quaternion)
    if len(components) != 4:
        raise ValueError(f"quaternion needs 4 components, got {len(components)}")
    length = math.sqrt(sum(c * c for c in components))
    if length <= 0.0:
        return (0.0, 0.0, 0.0, 0.0)
    return tuple(c / length for c in components)  # type: ignore[return-value]


def slerp(a: Sequence[float], b: Sequence[float], ratio: float) -> Quaternion:
    """Spherical interpolation along the shortest arc between two quaternions."""
    cos_omega = sum(p * q for p, q in zip(a, b))
    sign = 1.0
    if cos_omega < 0.0:
        cos_omega = -cos_omega
        sign = -1.0

    if cos_omega < _SLERP_THRESHOLD:
        sin_omega = math.sqrt(1.0 - cos_omega * cos_omega)
        omega = math.atan2(sin_omega, cos_omega)
        scale_a = math.sin((1.0 - ratio) * omega) / sin_omega
        scale_b = math.sin(ratio * omega) / sin_omega
    else:
        scale_a = 1.0 - ratio
        scale_b = ratio

    scale_b *= sign
    return tuple(p * scale_a + q * scale_b for p, q in zip(a, b))  # type: ignore[return-value]


def interpolate_matrix(
    a: Sequence[Sequence[float]], b: Sequence[Sequence[float]], ratio: float
) -> Matrix:
    """Blend two transforms: slerp the rotations and lerp the translations."""
    ma = as_matrix(a)
    mb = as_matrix(b)
    rotation_a = normalize_quaternion(quaternion_from_matrix(ma[:3] + (_IDENTITY_ROW,)))
    rotation_b = normalize_quaternion(quaternion_from_matrix(mb[:3] + (_IDENTITY_ROW,)))
    blended = normalize_quaternion(slerp(rotation_a, rotation_b, ratio))
    rotation = matrix_from_quaternion(blended)
    return rotation[:3] + (interpolate_position(ma[3], mb[3], ratio),)  # type: ignore[return-value]