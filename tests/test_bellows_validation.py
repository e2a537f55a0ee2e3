from dataclasses import replace

import pytest

from bellows_kinematics import solve
from bellows_models import DeformationState, JointType, Pose2D
from bellows_validation import print_constraint_report, validate_solution


def _constraints(violations):
    return {v.constraint for v in violations}


@pytest.mark.parametrize("joint_type,state", [
    (JointType.AXIAL, DeformationState()),
    (JointType.AXIAL, DeformationState(axial=-100.0, cross_section=False)),
    (JointType.UNIVERSAL, DeformationState(axial=30.0, lateral=60.0)),
    (JointType.HINGED, DeformationState(angular=20.0, pressure=50.0, cross_section=False)),
    (JointType.GIMBAL, DeformationState(angular=-20.0)),
])
def test_solved_joints_are_valid(joint_type, state):
    assert validate_solution(solve(joint_type, state)) == []


def test_tilt_clamp_reported_as_warning():
    violations = validate_solution(solve(JointType.UNIVERSAL, DeformationState(lateral=100.0)))
    assert _constraints(violations) == {"universal_tilt_clamp"}
    assert violations[0].severity == "warning"


def test_broken_chain_detected():
    solution = solve(JointType.UNIVERSAL, DeformationState(lateral=40.0))
    segments = list(solution.segments)
    spool = segments[1]
    moved = replace(spool.local_transform, y=spool.local_transform.y + 5.0)
    segments[1] = replace(spool, local_transform=moved)
    broken = replace(solution, segments=tuple(segments))

    violations = validate_solution(broken)
    assert "segment_continuity" in _constraints(violations)
    assert violations[0].segment_index == 1


def test_far_flange_mismatch_detected():
    solution = solve(JointType.UNIVERSAL, DeformationState(lateral=40.0))
    far = solution.far_flange
    broken = replace(solution, far_flange=Pose2D(far.x, far.y, 0.1))
    assert {"far_flange_continuity", "universal_net_angle"} <= _constraints(
        validate_solution(broken))


def test_pivot_off_arc_detected():
    solution = solve(JointType.HINGED, DeformationState(angular=10.0))
    pivot = solution.hardware.pivot
    hardware = replace(solution.hardware, pivot=replace(pivot, x=pivot.x + 2.0))
    broken = replace(solution, hardware=hardware)
    assert _constraints(validate_solution(broken)) == {"pivot_on_arc"}


def test_report_output(capsys):
    print_constraint_report([])
    assert "All constraints satisfied." in capsys.readouterr().out

    solution = solve(JointType.UNIVERSAL, DeformationState(lateral=100.0))
    print_constraint_report(validate_solution(solution))
    out = capsys.readouterr().out
    assert "WARNINGS (1)" in out
    assert "Total: 0 errors, 1 warnings" in out
