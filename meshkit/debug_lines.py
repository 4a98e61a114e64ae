"""A fixed-capacity list of line vertices for drawing skeletons."""

from __future__ import annotations

from typing import Iterator, Sequence

from .structures import Joint, Vector4

MAX_VERTICES = 8096


class DebugLineBuffer:
    """Collects pairs of points, each pair being one line segment."""

    def __init__(self, capacity: int = MAX_VERTICES) -> None:
        if capacity < 0:
            raise ValueError("capacity cannot be negative")
        self.capacity = capacity
        self._vertices: list[Vector4] = []

    def add_line(self, start: Sequence[float], end: Sequence[float]) -> None:
        """Append one segment; raises OverflowError when it does not fit."""
        if len(self._vertices) + 2 > self.capacity:
            raise OverflowError(f"line buffer is full ({self.capacity} vertices)")
        self._vertices.append(tuple(float(v) for v in start))  # type: ignore[arg-type]
        self._vertices.append(tuple(float(v) for v in end))  # type: ignore[arg-type]

    def add_pose(self, pose: Sequence[Joint]) -> None:
        """Add a segment from each non-root joint to its parent."""
        for joint in pose:
            if joint.parent_index == -1:
                continue
            self.add_line(joint.matrix[3], pose[joint.parent_index].matrix[3])

    def clear(self) -> None:
        """Remove every line."""
        self._vertices.clear()

    def __len__(self) -> int:
        return len(self._vertices)

    def __iter__(self) -> Iterator[Vector4]:
        return iter(self._vertices)