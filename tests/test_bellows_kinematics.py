import logging
import math

import pytest

from bellows_config import GeometryConfig
from bellows_geometry import arc_end_pose, arc_transform
from bellows_kinematics import (
    chain_segments, lateral_displacement, solve, tilt_angle, total_length,
)
from bellows_models import (
    DeformationState, HardwareKind, JointType, Pose2D, SegmentDescriptor, SegmentKind,
)
from joint_catalog import JOINT_DATA, AllowedDeformation, JointConfig


def test_axial_at_rest():
    solution = solve(JointType.AXIAL, DeformationState())
    assert len(solution.segments) == 1
    seg = solution.segments[0]
    assert seg.kind is SegmentKind.BELLOWS
    assert seg.length == 350.0
    assert seg.bend_angle == 0.0
    assert seg.convolution_count == 10
    assert seg.local_transform == Pose2D.identity()
    assert solution.far_flange == Pose2D(350.0, 0.0, 0.0)
    assert solution.hardware is None


@pytest.mark.parametrize("axial,expected", [(50.0, 370.0), (-100.0, 310.0), (100.0, 390.0)])
def test_axial_stretch(axial, expected):
    solution = solve(JointType.AXIAL, DeformationState(axial=axial))
    assert solution.total_length == pytest.approx(expected)
    assert solution.segments[0].length == pytest.approx(expected)
    assert solution.far_flange.x == pytest.approx(expected)
    assert solution.far_flange.y == 0.0


def test_axial_ignores_unsupported_motions():
    state = DeformationState(axial=25.0, lateral=80.0, angular=12.0)
    solution = solve(JointType.AXIAL, state)
    assert solution.state.lateral == 0.0
    assert solution.state.angular == 0.0
    assert solution.segments[0].bend_angle == 0.0
    assert solution.segments[0].shear == 0.0
    assert solution.far_flange == Pose2D(360.0, 0.0, 0.0)


def test_universal_layout():
    state = DeformationState(lateral=50.0)
    solution = solve(JointType.UNIVERSAL, state)
    kinds = [seg.kind for seg in solution.segments]
    assert kinds == [SegmentKind.BELLOWS, SegmentKind.RIGID_SPOOL, SegmentKind.BELLOWS]
    assert [seg.length for seg in solution.segments] == [87.5, 175.0, 87.5]
    assert [seg.convolution_count for seg in solution.segments] == [5, 0, 5]

    theta = math.asin(160.0 / 350.0)
    assert solution.tilt_angle == pytest.approx(theta)
    assert solution.segments[0].bend_angle == pytest.approx(theta)
    assert solution.segments[1].bend_angle == 0.0
    assert solution.segments[2].bend_angle == pytest.approx(-theta)

    # spool starts where the first bellows ends
    assert solution.segments[1].local_transform == arc_end_pose(87.5, theta)
    assert solution.far_flange.y > 0


@pytest.mark.parametrize("lateral", [0.0, 0.05, 10.0, 33.0, 50.0, 75.0, 100.0])
@pytest.mark.parametrize("axial", [-100.0, 0.0, 100.0])
def test_universal_far_flange_parallel(axial, lateral):
    solution = solve(JointType.UNIVERSAL, DeformationState(axial=axial, lateral=lateral))
    assert abs(solution.far_flange.rotation) < 1e-9


def test_universal_tilt_clamp():
    solution = solve(JointType.UNIVERSAL, DeformationState(lateral=100.0))
    assert solution.lateral_displacement == 320.0
    assert solution.tilt_angle == pytest.approx(math.asin(0.8))
    assert abs(solution.far_flange.rotation) < 1e-9
    assert 0 < solution.far_flange.y < 320.0
    assert all(math.isfinite(v) for v in solution.far_flange.matrix().ravel())


def test_tilt_angle_clamp_is_logged(caplog):
    caplog.set_level(logging.DEBUG, logger="bellows_kinematics")
    assert tilt_angle(500.0, 350.0, 0.8) == pytest.approx(math.asin(0.8))
    assert "clamped" in caplog.text

    caplog.clear()
    assert tilt_angle(100.0, 350.0, 0.8) == pytest.approx(math.asin(100.0 / 350.0))
    assert "clamped" not in caplog.text


def test_hinged_pivot_on_arc():
    solution = solve(JointType.HINGED, DeformationState(angular=20.0))
    bend = math.radians(20.0)
    seg = solution.segments[0]
    assert seg.bend_angle == pytest.approx(bend)

    hardware = solution.hardware
    assert hardware.kind is HardwareKind.PIN
    assert hardware.rotation_deg == pytest.approx(10.0)

    px, py = arc_transform(175.0, 0.0, 350.0, bend)
    assert hardware.pivot.x == pytest.approx(px)
    assert hardware.pivot.y == pytest.approx(py)

    # arc midpoint sits on the convex side of the chord
    far = solution.far_flange
    chord_y = far.y * hardware.pivot.x / far.x
    assert hardware.pivot.y < chord_y
    assert far.rotation == pytest.approx(bend)


def test_hinged_negative_angle_mirrors():
    up = solve(JointType.HINGED, DeformationState(angular=15.0))
    down = solve(JointType.HINGED, DeformationState(angular=-15.0))
    assert up.far_flange.x == pytest.approx(down.far_flange.x)
    assert up.far_flange.y == pytest.approx(-down.far_flange.y)
    assert up.hardware.pivot.y == pytest.approx(-down.hardware.pivot.y)
    assert down.hardware.rotation_deg == pytest.approx(-7.5)


def test_hinged_straight_below_epsilon():
    solution = solve(JointType.HINGED, DeformationState(angular=0.0))
    assert solution.far_flange == Pose2D(350.0, 0.0, 0.0)
    assert solution.hardware.pivot == Pose2D(175.0, 0.0, 0.0)


def test_hinged_ignores_axial():
    solution = solve(JointType.HINGED, DeformationState(axial=80.0, angular=5.0))
    assert solution.state.axial == 0.0
    assert solution.total_length == 350.0


def test_gimbal_uses_ring():
    hinged = solve(JointType.HINGED, DeformationState(angular=-12.0))
    gimbal = solve(JointType.GIMBAL, DeformationState(angular=-12.0))
    assert gimbal.hardware.kind is HardwareKind.RING
    assert gimbal.hardware.pivot == hinged.hardware.pivot
    assert gimbal.far_flange == hinged.far_flange


def test_pressure_balanced_not_modelled():
    with pytest.raises(NotImplementedError):
        solve(JointType.PRESSURE_BALANCED, DeformationState())


def test_solve_is_deterministic():
    state = DeformationState(axial=-30.0, lateral=65.0, angular=7.0, pressure=12.0)
    for joint_type in (JointType.AXIAL, JointType.UNIVERSAL, JointType.HINGED, JointType.GIMBAL):
        assert solve(joint_type, state) == solve(joint_type, state)


def test_pressure_does_not_move_geometry():
    calm = solve(JointType.UNIVERSAL, DeformationState(lateral=40.0))
    loaded = solve(JointType.UNIVERSAL, DeformationState(lateral=40.0, pressure=50.0))
    assert calm.segments == loaded.segments
    assert calm.far_flange == loaded.far_flange


def test_custom_catalog_lateral_shear():
    catalog = [
        JointConfig(JointType.AXIAL, "Axial", "", AllowedDeformation(axial=True, lateral=True)),
        JointConfig(JointType.HINGED, "Hinged", "", AllowedDeformation(lateral=True, angular=True)),
    ]
    axial = solve(JointType.AXIAL, DeformationState(lateral=50.0), catalog=catalog)
    assert axial.segments[0].shear == 160.0
    assert axial.far_flange == Pose2D(350.0, 160.0, 0.0)

    hinged = solve(JointType.HINGED, DeformationState(lateral=50.0, angular=10.0), catalog=catalog)
    px, py = arc_transform(175.0, 0.0, 350.0, math.radians(10.0))
    assert hinged.hardware.pivot.x == pytest.approx(px)
    assert hinged.hardware.pivot.y == pytest.approx(py + 80.0)

    with pytest.raises(KeyError):
        solve(JointType.GIMBAL, DeformationState(), catalog=catalog)


def test_custom_config():
    config = GeometryConfig(base_length=200.0, axial_travel=20.0, single_convolutions=4)
    solution = solve(JointType.AXIAL, DeformationState(axial=50.0), config)
    assert solution.total_length == 210.0
    assert solution.segments[0].convolution_count == 4
    assert solution.segments[0].convolution_width == pytest.approx(52.5)


def test_chain_segments_composes_end_poses():
    config = GeometryConfig()
    specs = [
        SegmentDescriptor(SegmentKind.BELLOWS, 100.0, 0.3, 4),
        SegmentDescriptor(SegmentKind.RIGID_SPOOL, 50.0),
        SegmentDescriptor(SegmentKind.BELLOWS, 100.0, -0.1, 4),
    ]
    placed, end = chain_segments(specs, config)
    assert placed[0].local_transform == Pose2D.identity()

    pose = Pose2D.identity()
    for seg in placed:
        assert seg.local_transform == pose
        pose = pose.compose(arc_end_pose(seg.length, seg.bend_angle))
    assert end == pose
    assert end.rotation == pytest.approx(0.2)


def test_length_helpers():
    config = GeometryConfig()
    assert total_length(DeformationState(axial=-50.0), config) == 330.0
    assert lateral_displacement(DeformationState(lateral=25.0), config) == 80.0


def test_catalog_entries_cover_modelled_joints():
    assert {joint.id for joint in JOINT_DATA} == {
        JointType.AXIAL, JointType.UNIVERSAL, JointType.HINGED, JointType.GIMBAL,
    }
