#!/usr/bin/env python3
"""
BELLOWS_VALIDATION.PY - Invariant checks for solved assemblies

Contains:
- ConstraintViolation: Data class for constraint violations
- validate_solution: Check all geometric invariants of a JointSolution
- print_constraint_report: Print formatted validation report
"""

import math
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from bellows_assembly import compose_assembly, scene_points
from bellows_config import GeometryConfig
from bellows_geometry import arc_end_pose, arc_transform, closed_outline
from bellows_models import JointSolution, JointType, Pose2D


@dataclass
class ConstraintViolation:
    """A constraint violation found during validation."""
    constraint: str
    message: str
    severity: str = "error"  # "error" or "warning"
    segment_index: Optional[int] = None
    actual_value: Optional[float] = None
    expected_value: Optional[float] = None
    tolerance: Optional[float] = None


def validate_solution(solution: JointSolution, config: Optional[GeometryConfig] = None,
                      tolerance: float = 1e-6) -> List[ConstraintViolation]:
    """
    Validate a solved assembly:
    1. Each segment starts where the previous one ends
    2. The far flange sits at the end of the last segment
    3. Convolution count x width equals segment length
    4. Universal joints exit parallel to the fixed flange
    5. Hinged/gimbal pivots lie on the arc at half the sweep
    6. All generated geometry is finite

    Returns list of violations (empty if all constraints pass).
    """
    config = config or GeometryConfig()
    violations = []

    # ---------------------------------------------------------------------
    # 1-2. END-TO-START CONTINUITY
    # ---------------------------------------------------------------------
    expected = Pose2D.identity()
    for i, seg in enumerate(solution.segments):
        start = seg.local_transform
        gap = math.hypot(start.x - expected.x, start.y - expected.y)
        twist = abs(start.rotation - expected.rotation)
        if gap > tolerance or twist > tolerance:
            violations.append(ConstraintViolation(
                constraint="segment_continuity",
                message=f"Segment {i} starts {gap:.6f} away from the previous end",
                segment_index=i,
                actual_value=gap,
                expected_value=0.0,
                tolerance=tolerance,
            ))
        expected = start.compose(arc_end_pose(seg.length, seg.bend_angle, seg.shear,
                                              config.bend_epsilon))

    far = solution.far_flange
    gap = math.hypot(far.x - expected.x, far.y - expected.y)
    if gap > tolerance or abs(far.rotation - expected.rotation) > tolerance:
        violations.append(ConstraintViolation(
            constraint="far_flange_continuity",
            message=f"Far flange is {gap:.6f} away from the last segment end",
            actual_value=gap,
            expected_value=0.0,
            tolerance=tolerance,
        ))

    # ---------------------------------------------------------------------
    # 3. CONVOLUTION PITCH
    # ---------------------------------------------------------------------
    for i, seg in enumerate(solution.segments):
        if seg.is_bellows and seg.convolution_count >= 1:
            span = seg.convolution_width * seg.convolution_count
            if abs(span - seg.length) > tolerance:
                violations.append(ConstraintViolation(
                    constraint="convolution_pitch",
                    message=f"Segment {i}: {seg.convolution_count} convolutions span "
                            f"{span:.4f}, length is {seg.length:.4f}",
                    segment_index=i,
                    actual_value=span,
                    expected_value=seg.length,
                    tolerance=tolerance,
                ))

    # ---------------------------------------------------------------------
    # 4. UNIVERSAL ZERO NET ANGLE
    # ---------------------------------------------------------------------
    if solution.joint_type is JointType.UNIVERSAL:
        net = solution.far_flange.rotation
        if abs(net) > tolerance:
            violations.append(ConstraintViolation(
                constraint="universal_net_angle",
                message=f"Far flange rotated {math.degrees(net):.4f} deg, expected parallel exit",
                actual_value=net,
                expected_value=0.0,
                tolerance=tolerance,
            ))
        if abs(math.sin(solution.tilt_angle)) >= config.tilt_clamp - tolerance:
            violations.append(ConstraintViolation(
                constraint="universal_tilt_clamp",
                message=f"Tilt clamped at {math.degrees(solution.tilt_angle):.1f} deg; "
                        f"lateral offset not fully reached",
                severity="warning",
                actual_value=solution.far_flange.y,
                expected_value=solution.lateral_displacement,
            ))

    # ---------------------------------------------------------------------
    # 5. PIVOT ON ARC
    # ---------------------------------------------------------------------
    if solution.hardware is not None and solution.segments:
        seg = solution.segments[0]
        px, py = arc_transform(seg.length / 2.0, 0.0, seg.length, seg.bend_angle,
                               config.bend_epsilon)
        pivot = solution.hardware.pivot
        gap = math.hypot(pivot.x - px, pivot.y - (py + seg.shear / 2.0))
        if gap > tolerance:
            violations.append(ConstraintViolation(
                constraint="pivot_on_arc",
                message=f"Pivot is {gap:.6f} away from the arc midpoint",
                actual_value=gap,
                expected_value=0.0,
                tolerance=tolerance,
            ))

    # ---------------------------------------------------------------------
    # 6. FINITE GEOMETRY
    # ---------------------------------------------------------------------
    samples = [np.asarray(scene_points(compose_assembly(solution, config)), dtype=float)]
    for seg in solution.bellows:
        samples.append(closed_outline(seg.length, seg.convolution_count, seg.bend_angle,
                                      seg.shear, config).sample())
    if not all(np.isfinite(s).all() for s in samples):
        violations.append(ConstraintViolation(
            constraint="finite_geometry",
            message="Generated geometry contains NaN or infinite coordinates",
        ))

    return violations


def print_constraint_report(violations: List[ConstraintViolation]):
    """Print formatted constraint validation report."""
    print("\n" + "=" * 60)
    print("GEOMETRY VALIDATION")
    print("=" * 60)

    if not violations:
        print("All constraints satisfied.")
        return

    errors = [v for v in violations if v.severity == "error"]
    warnings = [v for v in violations if v.severity == "warning"]

    if errors:
        print(f"\nERRORS ({len(errors)}):")
        for v in errors:
            print(f"  [{v.constraint}] {v.message}")

    if warnings:
        print(f"\nWARNINGS ({len(warnings)}):")
        for v in warnings:
            print(f"  [{v.constraint}] {v.message}")

    print(f"\nTotal: {len(errors)} errors, {len(warnings)} warnings")
