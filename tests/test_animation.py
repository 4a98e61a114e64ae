import pytest

from meshkit.animation import AnimationInterpolator, interpolate_joints
from meshkit.structures import Animation, Joint, KeyFrame
from meshkit.transforms import matrix_from_quaternion, normalize_quaternion


def _pose(quaternion, translation):
    rotation = matrix_from_quaternion(normalize_quaternion(quaternion))
    return rotation[:3] + ((*translation, 1.0),)


def _flat(matrix):
    return [v for row in matrix for v in row]


def _keyframe(time, tag, rotation, translation):
    return KeyFrame(
        time=time,
        joints=[
            Joint(name=f"root-{tag}", matrix=_pose(rotation, translation), parent_index=-1),
            Joint(name=f"arm-{tag}", matrix=_pose((0.0, 0.0, 0.0, 1.0), translation), parent_index=0),
        ],
    )


@pytest.fixture
def animation():
    return Animation(
        name="walk",
        duration=3.0,
        keyframes=[
            _keyframe(0.0, "a", (0.0, 0.0, 0.0, 1.0), (0.0, 0.0, 0.0)),
            _keyframe(1.0, "b", (0.1, 0.2, 0.3, 0.9), (2.0, 4.0, 6.0)),
            _keyframe(2.0, "c", (0.5, 0.5, 0.5, 0.5), (4.0, 0.0, 0.0)),
        ],
    )


def test_no_animation_gives_empty_pose():
    interpolator = AnimationInterpolator()
    assert interpolator.interpolate(0.5) == []
    assert interpolator.duration == 0.0


def test_duration_taken_from_animation(animation):
    interpolator = AnimationInterpolator(animation)
    assert interpolator.duration == animation.duration
    assert interpolator.current_time == 0.0


def test_set_animation_none_resets_duration(animation):
    interpolator = AnimationInterpolator(animation)
    interpolator.set_animation(None)
    assert interpolator.duration == 0.0
    assert interpolator.interpolate(1.0) == []


def test_time_advances(animation):
    interpolator = AnimationInterpolator(animation)
    interpolator.interpolate(0.25)
    interpolator.interpolate(0.5)
    assert interpolator.current_time == pytest.approx(0.75)


def test_time_wraps_at_duration(animation):
    interpolator = AnimationInterpolator(animation)
    pose = interpolator.interpolate(animation.duration)
    assert interpolator.current_time == 0.0
    first = animation.keyframes[0].joints
    for joint, expected in zip(pose, first):
        assert _flat(joint.matrix) == pytest.approx(_flat(expected.matrix), abs=1e-9)


def test_exact_keyframe_time_returns_that_keyframe(animation):
    interpolator = AnimationInterpolator(animation)
    pose = interpolator.interpolate(1.0)
    target = animation.keyframes[1].joints
    assert len(pose) == len(target)
    for joint, expected in zip(pose, target):
        assert _flat(joint.matrix) == pytest.approx(_flat(expected.matrix), abs=1e-9)


def test_names_and_parents_come_from_previous_keyframe(animation):
    interpolator = AnimationInterpolator(animation)
    pose = interpolator.interpolate(1.5)
    assert [j.name for j in pose] == [j.name for j in animation.keyframes[1].joints]
    assert [j.parent_index for j in pose] == [-1, 0]


def test_midpoint_translation(animation):
    interpolator = AnimationInterpolator(animation)
    pose = interpolator.interpolate(0.5)
    assert pose[0].matrix[3] == pytest.approx((1.0, 2.0, 3.0, 1.0))


def test_after_last_keyframe_blends_towards_first(animation):
    interpolator = AnimationInterpolator(animation)
    pose = interpolator.interpolate(2.5)
    assert [j.name for j in pose] == [j.name for j in animation.keyframes[2].joints]


def test_interpolate_does_not_modify_keyframes(animation):
    before = [_flat(j.matrix) for kf in animation.keyframes for j in kf.joints]
    AnimationInterpolator(animation).interpolate(0.7)
    after = [_flat(j.matrix) for kf in animation.keyframes for j in kf.joints]
    assert before == after


def test_single_keyframe_is_rejected():
    single = Animation(name="still", duration=1.0, keyframes=[_keyframe(0.0, "a", (0, 0, 0, 1), (0, 0, 0))])
    with pytest.raises(ValueError):
        AnimationInterpolator(single).interpolate(0.1)


def test_interpolate_joints_endpoints():
    a = _keyframe(0.0, "a", (0.1, 0.2, 0.3, 0.9), (1.0, 1.0, 1.0)).joints
    b = _keyframe(1.0, "b", (0.9, -0.3, 0.2, 0.1), (3.0, 3.0, 3.0)).joints
    start = interpolate_joints(a, b, 0.0)
    end = interpolate_joints(a, b, 1.0)
    for joint, expected in zip(start, a):
        assert _flat(joint.matrix) == pytest.approx(_flat(expected.matrix), abs=1e-9)
    for joint, expected in zip(end, b):
        assert _flat(joint.matrix) == pytest.approx(_flat(expected.matrix), abs=1e-9)
    assert [j.name for j in end] == [j.name for j in a]


def test_interpolate_joints_rejects_short_second_pose():
    a = _keyframe(0.0, "a", (0, 0, 0, 1), (0, 0, 0)).joints
    with pytest.raises(ValueError):
        interpolate_joints(a, a[:1], 0.5)