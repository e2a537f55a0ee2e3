#!/usr/bin/env python3
"""
BELLOWS_KINEMATICS.PY - Joint kinematics solver

Contains:
- solve: map (joint type, deformation state) to segment layout, far
  flange pose and pivot hardware pose
- solve_single / solve_universal: per-topology solvers

Segments are laid out from the fixed (left) flange at the assembly origin
toward the free (right) flange. Each segment's local frame starts at the
previous segment's end pose, so the assembly is a chain of composed
Pose2D transforms with no shared drawing cursor.
"""

import logging
import math
from typing import Callable, Dict, List, Optional

from bellows_config import GeometryConfig
from bellows_geometry import arc_end_pose, arc_transform
from bellows_models import (
    DeformationState, HardwareKind, HardwarePose, JointSolution, JointType,
    Pose2D, SegmentDescriptor, SegmentKind,
)
from joint_catalog import JointConfig, apply_capabilities, get_joint_config


logger = logging.getLogger(__name__)


def total_length(state: DeformationState, config: GeometryConfig) -> float:
    """Flange-to-flange length after axial stretch."""
    return config.base_length + (state.axial / 100.0) * config.axial_travel


def lateral_displacement(state: DeformationState, config: GeometryConfig) -> float:
    return (state.lateral / 100.0) * config.lateral_travel


def chain_segments(specs: List[SegmentDescriptor], config: GeometryConfig):
    """Place segments end to start.

    Returns the placed descriptors and the pose after the last segment.
    """
    pose = Pose2D.identity()
    placed = []
    for seg in specs:
        placed.append(SegmentDescriptor(
            kind=seg.kind,
            length=seg.length,
            bend_angle=seg.bend_angle,
            convolution_count=seg.convolution_count,
            local_transform=pose,
            shear=seg.shear,
        ))
        pose = pose.compose(arc_end_pose(seg.length, seg.bend_angle, seg.shear,
                                         config.bend_epsilon))
    return placed, pose


# =============================================================================
# PER-TOPOLOGY SOLVERS
# =============================================================================

def solve_single(joint_type: JointType, state: DeformationState,
                 config: GeometryConfig) -> JointSolution:
    """One bellows between the flanges (axial, hinged, gimbal).

    The bend angle is the angular input. Lateral input is a perpendicular
    shear of the far end, and half of it at the pivot. Hinged and gimbal
    hardware pivots sit on the arc at half the total sweep, rotated by half
    the bend.
    """
    length = total_length(state, config)
    lateral = lateral_displacement(state, config)
    bend = state.angular_rad

    segments, far_flange = chain_segments([
        SegmentDescriptor(SegmentKind.BELLOWS, length, bend,
                          config.single_convolutions, shear=lateral),
    ], config)

    hardware = None
    if joint_type in (JointType.HINGED, JointType.GIMBAL):
        px, py = arc_transform(length / 2.0, 0.0, length, bend, config.bend_epsilon)
        kind = HardwareKind.PIN if joint_type is JointType.HINGED else HardwareKind.RING
        hardware = HardwarePose(kind, Pose2D(px, py + lateral / 2.0, bend / 2.0))

    return JointSolution(
        joint_type=joint_type,
        state=state,
        segments=tuple(segments),
        far_flange=far_flange,
        hardware=hardware,
        total_length=length,
        lateral_displacement=lateral,
    )


def tilt_angle(lateral: float, effective_length: float, clamp: float) -> float:
    """Common S-curve tilt: asin of the lateral/length ratio, clamped."""
    ratio = lateral / effective_length
    clamped = max(-clamp, min(clamp, ratio))
    if clamped != ratio:
        logger.debug("Tilt ratio %.3f clamped to %.3f", ratio, clamped)
    return math.asin(clamped)


def solve_universal(joint_type: JointType, state: DeformationState,
                    config: GeometryConfig) -> JointSolution:
    """Two bellows and a centre spool bent into an S-curve.

    The first bellows bends by +theta from a horizontal start, the spool
    continues straight at theta and the second bellows bends by -theta, so
    the far flange exits parallel to the fixed flange whatever the offset.
    """
    length = total_length(state, config)
    lateral = lateral_displacement(state, config)
    bellows_len = length * config.universal_bellows_fraction
    spool_len = length * config.universal_spool_fraction
    effective = 2 * bellows_len + spool_len
    theta = tilt_angle(lateral, effective, config.tilt_clamp)

    count = config.universal_convolutions
    segments, far_flange = chain_segments([
        SegmentDescriptor(SegmentKind.BELLOWS, bellows_len, theta, count),
        SegmentDescriptor(SegmentKind.RIGID_SPOOL, spool_len),
        SegmentDescriptor(SegmentKind.BELLOWS, bellows_len, -theta, count),
    ], config)

    return JointSolution(
        joint_type=joint_type,
        state=state,
        segments=tuple(segments),
        far_flange=far_flange,
        hardware=None,
        total_length=length,
        lateral_displacement=lateral,
        tilt_angle=theta,
    )


def _unsupported(joint_type: JointType, state: DeformationState,
                 config: GeometryConfig) -> JointSolution:
    raise NotImplementedError(f"No kinematic model for {joint_type.value} joints")


SOLVERS: Dict[JointType, Callable[[JointType, DeformationState, GeometryConfig], JointSolution]] = {
    JointType.AXIAL: solve_single,
    JointType.UNIVERSAL: solve_universal,
    JointType.HINGED: solve_single,
    JointType.GIMBAL: solve_single,
    JointType.PRESSURE_BALANCED: _unsupported,
}


# =============================================================================
# ENTRY POINT
# =============================================================================

def solve(joint_type: JointType, state: DeformationState,
          config: Optional[GeometryConfig] = None,
          catalog: Optional[List[JointConfig]] = None) -> JointSolution:
    """Solve the assembly layout for a joint type and deformation state.

    Fields the joint cannot take are zeroed first, so the result depends
    only on the arguments.
    """
    config = config or GeometryConfig()
    solver = SOLVERS[joint_type]
    if joint_type is JointType.PRESSURE_BALANCED:
        return solver(joint_type, state, config)
    joint = get_joint_config(joint_type, catalog)
    masked = apply_capabilities(state, joint)
    logger.debug("Solving %s: axial=%.1f lateral=%.1f angular=%.1f",
                 joint_type.value, masked.axial, masked.lateral, masked.angular)
    return solver(joint_type, masked, config)
