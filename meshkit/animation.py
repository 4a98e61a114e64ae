"""Playback of key framed joint animations."""

from __future__ import annotations

from typing import Optional, Sequence

from .structures import Animation, Joint, KeyFrame
from .transforms import interpolate_matrix


def interpolate_joints(a: Sequence[Joint], b: Sequence[Joint], ratio: float) -> list[Joint]:
    """Blend two poses joint by joint; names and parents come from ``a``."""
    if len(b) < len(a):
        raise ValueError(f"second pose has {len(b)} joints, first has {len(a)}")
    return [
        Joint(
            name=first.name,
            parent_index=first.parent_index,
            matrix=interpolate_matrix(first.matrix, second.matrix, ratio),
        )
        for first, second in zip(a, b)
    ]


class AnimationInterpolator:
    """Steps through an animation and blends the surrounding key frames.

    ``current_time`` and ``duration`` are plain attributes and may be set
    directly. Time wraps back to zero once it reaches the duration.
    """

    def __init__(self, animation: Optional[Animation] = None) -> None:
        self.current_time = 0.0
        self.duration = 0.0
        self.animation: Optional[Animation] = None
        self.set_animation(animation)

    def set_animation(self, animation: Optional[Animation]) -> None:
        """Switch to another animation (or none) and take over its duration."""
        self.animation = animation
        self.duration = animation.duration if animation is not None else 0.0

    def _advance(self, delta: float) -> None:
        self.current_time += delta
        if self.current_time >= self.duration:
            self.current_time = 0.0

    def _bracket(self, keyframes: Sequence[KeyFrame]) -> tuple[int, int]:
        previous, current = 0, 1
        while self.current_time > keyframes[current].time:
            previous, current = previous + 1, current + 1
            if current >= len(keyframes):
                return len(keyframes) - 1, 0
        return previous, current

    def interpolate(self, delta: float) -> list[Joint]:
        """Advance by ``delta`` and return the blended pose at the new time."""
        if self.animation is None:
            return []
        keyframes = self.animation.keyframes
        if len(keyframes) < 2:
            raise ValueError("an animation needs at least two key frames to interpolate")

        self._advance(delta)
        previous, current = self._bracket(keyframes)
        start = keyframes[previous]
        end = keyframes[current]

        span = end.time - start.time
        ratio = (self.current_time - start.time) / span if span != 0.0 else 0.0
        return interpolate_joints(start.joints, end.joints, ratio)