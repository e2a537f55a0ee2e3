#!/usr/bin/env python3
"""
BELLOWS_MODELS.PY - Data classes for expansion joint geometry

Contains all the data structures shared by the solver, the path
generators and the compositor:
- JointType, SegmentKind, Side, Direction, FeatureKind, HardwareKind
- DeformationState: live deformation input
- Pose2D: rigid 2-D transform (translation + rotation)
- SegmentDescriptor, HardwarePose, JointSolution: solver output
- CubicSegment, LineTo, PathGeometry, FeatureLine: path generator output
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional, Tuple, Union

import numpy as np


Point = Tuple[float, float]


# =============================================================================
# DEFORMATION RANGES
# =============================================================================

AXIAL_RANGE = (-100.0, 100.0)      # % of nominal axial travel
LATERAL_RANGE = (0.0, 100.0)       # % of nominal lateral travel
ANGULAR_RANGE = (-20.0, 20.0)      # degrees
PRESSURE_RANGE = (0.0, 50.0)       # bar, cosmetic only


# =============================================================================
# VOCABULARY
# =============================================================================

class JointType(Enum):
    """Expansion joint topologies."""
    AXIAL = "axial"
    UNIVERSAL = "universal"
    HINGED = "hinged"
    GIMBAL = "gimbal"
    PRESSURE_BALANCED = "pressure_balanced"


class SegmentKind(Enum):
    BELLOWS = "bellows"
    RIGID_SPOOL = "spool"


class Side(Enum):
    """Bellows wall.

    OUTER is the wall on the -y side of the local frame (the convex side of
    a positive bend), INNER the wall on the +y side.
    """
    OUTER = "outer"
    INNER = "inner"


class Direction(Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


class FeatureKind(Enum):
    PEAK = "peak"
    VALLEY = "valley"


class HardwareKind(Enum):
    PIN = "pin"      # hinged
    RING = "ring"    # gimbal


def _clamp(value: float, bounds: Tuple[float, float]) -> float:
    lo, hi = bounds
    return max(lo, min(hi, value))


# =============================================================================
# DEFORMATION STATE
# =============================================================================

@dataclass(frozen=True)
class DeformationState:
    """Live deformation input, produced by the control surface."""
    axial: float = 0.0                  # -100..100 %
    lateral: float = 0.0                # 0..100 %
    angular: float = 0.0                # degrees
    pressure: float = 0.0               # 0..50 bar
    cross_section: bool = True          # outline vs. solid rendering

    @property
    def angular_rad(self) -> float:
        return math.radians(self.angular)

    def clamped(self) -> "DeformationState":
        """Return a copy with every field clamped to its documented range."""
        return replace(
            self,
            axial=_clamp(self.axial, AXIAL_RANGE),
            lateral=_clamp(self.lateral, LATERAL_RANGE),
            angular=_clamp(self.angular, ANGULAR_RANGE),
            pressure=_clamp(self.pressure, PRESSURE_RANGE),
        )


# =============================================================================
# RIGID TRANSFORMS
# =============================================================================

@dataclass(frozen=True)
class Pose2D:
    """Rigid transform: rotate by `rotation` (rad) then translate by (x, y).

    Screen convention: y grows downward, so a positive rotation turns the
    +x axis toward +y.
    """
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0

    @classmethod
    def identity(cls) -> "Pose2D":
        return cls()

    @property
    def rotation_deg(self) -> float:
        return math.degrees(self.rotation)

    @property
    def position(self) -> Point:
        return (self.x, self.y)

    def apply(self, px: float, py: float) -> Point:
        """Map a point from this pose's local frame into the parent frame."""
        c, s = math.cos(self.rotation), math.sin(self.rotation)
        return (self.x + px * c - py * s, self.y + px * s + py * c)

    def compose(self, other: "Pose2D") -> "Pose2D":
        """Pose of `other` (expressed in this local frame) in the parent frame."""
        x, y = self.apply(other.x, other.y)
        return Pose2D(x, y, self.rotation + other.rotation)

    def matrix(self) -> np.ndarray:
        """3x3 homogeneous matrix."""
        c, s = math.cos(self.rotation), math.sin(self.rotation)
        return np.array([
            [c, -s, self.x],
            [s, c, self.y],
            [0.0, 0.0, 1.0],
        ])

    def svg_transform(self) -> str:
        """SVG transform attribute; empty string for the identity."""
        parts = []
        if self.x or self.y:
            parts.append(f"translate({self.x:.4f},{self.y:.4f})")
        if self.rotation:
            parts.append(f"rotate({self.rotation_deg:.4f})")
        return " ".join(parts)


# =============================================================================
# SOLVER OUTPUT
# =============================================================================

@dataclass(frozen=True)
class SegmentDescriptor:
    """One segment of the assembly, in traversal order from the fixed flange.

    `local_transform` places the segment's local frame (x along the unbent
    axis, y perpendicular) into assembly space. `shear` is a perpendicular
    offset reached at the far end of the segment, growing linearly with
    distance along it.
    """
    kind: SegmentKind
    length: float
    bend_angle: float = 0.0             # radians, 0 for spools
    convolution_count: int = 0
    local_transform: Pose2D = field(default_factory=Pose2D)
    shear: float = 0.0

    @property
    def convolution_width(self) -> float:
        if self.convolution_count < 1:
            return self.length
        return self.length / self.convolution_count

    @property
    def is_bellows(self) -> bool:
        return self.kind is SegmentKind.BELLOWS


@dataclass(frozen=True)
class HardwarePose:
    """Pivot hardware placement for hinged and gimbal joints."""
    kind: HardwareKind
    pivot: Pose2D

    @property
    def rotation_deg(self) -> float:
        return self.pivot.rotation_deg


@dataclass(frozen=True)
class JointSolution:
    """Complete kinematic solution for one (joint type, state) pair."""
    joint_type: JointType
    state: DeformationState             # after capability masking
    segments: Tuple[SegmentDescriptor, ...]
    far_flange: Pose2D
    hardware: Optional[HardwarePose]
    total_length: float
    lateral_displacement: float = 0.0
    tilt_angle: float = 0.0             # universal joints only

    @property
    def bellows(self) -> List[SegmentDescriptor]:
        return [s for s in self.segments if s.is_bellows]


# =============================================================================
# PATH GEOMETRY
# =============================================================================

@dataclass(frozen=True)
class CubicSegment:
    """Cubic Bezier segment from the previous end point."""
    c1: Point
    c2: Point
    end: Point

    def svg(self) -> str:
        return (f"C {self.c1[0]:.4f} {self.c1[1]:.4f}, "
                f"{self.c2[0]:.4f} {self.c2[1]:.4f}, "
                f"{self.end[0]:.4f} {self.end[1]:.4f}")


@dataclass(frozen=True)
class LineTo:
    """Straight segment from the previous end point."""
    end: Point

    def svg(self) -> str:
        return f"L {self.end[0]:.4f} {self.end[1]:.4f}"


PathElement = Union[CubicSegment, LineTo]


@dataclass(frozen=True)
class PathGeometry:
    """An ordered run of path elements starting at `start`."""
    start: Point
    segments: Tuple[PathElement, ...] = ()
    closed: bool = False

    @property
    def end(self) -> Point:
        if not self.segments:
            return self.start
        return self.segments[-1].end

    def junctions(self) -> List[Point]:
        """Start point followed by every segment end point."""
        return [self.start] + [seg.end for seg in self.segments]

    def reversed(self) -> "PathGeometry":
        """Exact reverse traversal of an open path."""
        points = self.junctions()
        segments = []
        for i in range(len(self.segments) - 1, -1, -1):
            seg = self.segments[i]
            prev = points[i]
            if isinstance(seg, CubicSegment):
                segments.append(CubicSegment(seg.c2, seg.c1, prev))
            else:
                segments.append(LineTo(prev))
        return PathGeometry(self.end, tuple(segments), self.closed)

    def to_svg(self) -> str:
        d = f"M {self.start[0]:.4f} {self.start[1]:.4f}"
        for seg in self.segments:
            d += " " + seg.svg()
        if self.closed:
            d += " Z"
        return d

    def sample(self, points_per_segment: int = 16) -> np.ndarray:
        """Polyline approximation, shape (N, 2)."""
        t = np.linspace(0.0, 1.0, points_per_segment)[1:]
        out = [np.array([self.start])]
        p0 = np.array(self.start, dtype=float)
        for seg in self.segments:
            p3 = np.array(seg.end, dtype=float)
            if isinstance(seg, CubicSegment):
                p1 = np.array(seg.c1, dtype=float)
                p2 = np.array(seg.c2, dtype=float)
                tt = t[:, None]
                pts = ((1 - tt) ** 3 * p0 + 3 * (1 - tt) ** 2 * tt * p1
                       + 3 * (1 - tt) * tt ** 2 * p2 + tt ** 3 * p3)
            else:
                tt = t[:, None]
                pts = p0 + (p3 - p0) * tt
            out.append(pts)
            p0 = p3
        return np.vstack(out)


@dataclass(frozen=True)
class FeatureLine:
    """A rib line across the bellows (peak or valley)."""
    kind: FeatureKind
    start: Point
    end: Point
