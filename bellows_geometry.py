#!/usr/bin/env python3
"""
BELLOWS_GEOMETRY.PY - Bellows path and rib generation

Contains:
- arc_transform: bend a straight local frame onto a circular arc
- arc_end_pose: pose of a segment's far end in its own local frame
- generate_boundary: U-profile convolution wall as cubic Bezier segments
- closed_outline: fillable outline of one bellows segment
- generate_feature_lines: peak/valley rib lines for solid rendering

Local frame: x runs along the unbent segment axis from 0 to `length`,
y is the radial offset from the tube centreline (negative = outer wall).
"""

import math
from typing import List, Optional

from bellows_config import GeometryConfig
from bellows_models import (
    CubicSegment, Direction, FeatureKind, FeatureLine, LineTo, PathGeometry,
    Point, Pose2D, Side,
)


BEND_EPSILON = 1e-3     # rad


# =============================================================================
# ARC TRANSFORM
# =============================================================================

def is_bent(bend_angle: float, epsilon: float = BEND_EPSILON) -> bool:
    return abs(bend_angle) > epsilon


def arc_transform(local_x: float, local_y: float, segment_length: float,
                  bend_angle: float, epsilon: float = BEND_EPSILON) -> Point:
    """Map a local point onto a segment bent by `bend_angle` in total.

    With R = L / angle, the point at arc length x sweeps theta = x/L * angle
    around a centre of curvature at (0, R). Local +y points toward that
    centre, so the point's distance from it is r = R - y:

        x' = r * sin(theta)
        y' = R - r * cos(theta)

    At theta = 0 this is (0, y), so the mapping tends to the identity as
    the angle shrinks. Arc length along the axis and radial distance are
    preserved. Angles at or below `epsilon` return the point unchanged.
    """
    if not is_bent(bend_angle, epsilon):
        return (local_x, local_y)
    radius = segment_length / bend_angle
    theta = (local_x / segment_length) * bend_angle
    r = radius - local_y
    return (r * math.sin(theta), radius - r * math.cos(theta))


def arc_end_pose(length: float, bend_angle: float, shear: float = 0.0,
                 epsilon: float = BEND_EPSILON) -> Pose2D:
    """Far end of a segment (centreline) relative to its start frame."""
    x, y = arc_transform(length, 0.0, length, bend_angle, epsilon)
    rotation = bend_angle if is_bent(bend_angle, epsilon) else 0.0
    return Pose2D(x, y + shear, rotation)


class _SegmentFrame:
    """Local-to-segment placement: arc bend followed by perpendicular shear."""

    def __init__(self, length: float, bend_angle: float, shear: float, epsilon: float):
        self.length = length
        self.bend_angle = bend_angle
        self.shear = shear
        self.epsilon = epsilon

    def place(self, lx: float, ly: float) -> Point:
        x, y = arc_transform(lx, ly, self.length, self.bend_angle, self.epsilon)
        if self.shear and self.length > 0:
            y += self.shear * (lx / self.length)
        return (x, y)


def _wall_offsets(side: Side, config: GeometryConfig):
    """(base, peak) radial offsets of a wall."""
    sign = -1.0 if side is Side.OUTER else 1.0
    return sign * config.bellows_radius, sign * config.peak_radius


# =============================================================================
# CONVOLUTION PATHS
# =============================================================================

def generate_boundary(length: float, count: int, side: Side, direction: Direction,
                      bend_angle: float = 0.0, shear: float = 0.0,
                      config: Optional[GeometryConfig] = None) -> PathGeometry:
    """Generate one bellows wall as cubic Bezier segments.

    Each convolution is a rise from the base radius to the peak radius at
    its midpoint and a fall back. Handles are `handle_ratio` of the
    convolution width, which squares the profile into a U rather than a
    sine. BACKWARD retraces the wall from the far end with mirrored handle
    placement so it can close a filled outline.

    A count below 1 yields a single straight span at the base radius.
    """
    config = config or GeometryConfig()
    frame = _SegmentFrame(length, bend_angle, shear, config.bend_epsilon)
    y_base, y_peak = _wall_offsets(side, config)

    if count < 1:
        return _straight_span(frame, y_base, direction)

    width = length / count
    handle = width * config.handle_ratio
    segments = []

    if direction is Direction.FORWARD:
        start = frame.place(0.0, y_base)
        for i in range(count):
            x0 = i * width
            x_peak = x0 + width * 0.5
            x_end = x0 + width
            # Rise (base -> peak)
            segments.append(CubicSegment(
                frame.place(x0 + handle, y_base),
                frame.place(x_peak - handle, y_peak),
                frame.place(x_peak, y_peak),
            ))
            # Fall (peak -> base)
            segments.append(CubicSegment(
                frame.place(x_peak + handle, y_peak),
                frame.place(x_end - handle, y_base),
                frame.place(x_end, y_base),
            ))
    else:
        start = frame.place(length, y_base)
        for i in range(count - 1, -1, -1):
            x_end = i * width               # target (left)
            x_peak = x_end + width * 0.5
            x_start = x_end + width         # start (right)
            segments.append(CubicSegment(
                frame.place(x_start - handle, y_base),
                frame.place(x_peak + handle, y_peak),
                frame.place(x_peak, y_peak),
            ))
            segments.append(CubicSegment(
                frame.place(x_peak - handle, y_peak),
                frame.place(x_end + handle, y_base),
                frame.place(x_end, y_base),
            ))

    return PathGeometry(start, tuple(segments))


def _straight_span(frame: _SegmentFrame, y_base: float, direction: Direction) -> PathGeometry:
    length = frame.length
    xs = [0.0, length / 3.0, 2.0 * length / 3.0, length]
    if direction is Direction.BACKWARD:
        xs.reverse()
    p0, c1, c2, p3 = (frame.place(x, y_base) for x in xs)
    return PathGeometry(p0, (CubicSegment(c1, c2, p3),))


def closing_point(length: float, bend_angle: float = 0.0, shear: float = 0.0,
                  config: Optional[GeometryConfig] = None) -> Point:
    """Far end of the inner wall, where the outline crosses between walls."""
    config = config or GeometryConfig()
    frame = _SegmentFrame(length, bend_angle, shear, config.bend_epsilon)
    return frame.place(length, config.bellows_radius)


def closed_outline(length: float, count: int, bend_angle: float = 0.0,
                   shear: float = 0.0,
                   config: Optional[GeometryConfig] = None) -> PathGeometry:
    """Forward outer wall + closing line + backward inner wall, closed."""
    config = config or GeometryConfig()
    outer = generate_boundary(length, count, Side.OUTER, Direction.FORWARD,
                              bend_angle, shear, config)
    inner_back = generate_boundary(length, count, Side.INNER, Direction.BACKWARD,
                                   bend_angle, shear, config)
    close = LineTo(closing_point(length, bend_angle, shear, config))
    return PathGeometry(outer.start, outer.segments + (close,) + inner_back.segments,
                        closed=True)


# =============================================================================
# RIBS
# =============================================================================

def generate_feature_lines(length: float, count: int, bend_angle: float = 0.0,
                           shear: float = 0.0,
                           config: Optional[GeometryConfig] = None) -> List[FeatureLine]:
    """Peak and valley lines across the bellows.

    One peak line per convolution at its midpoint (peak radius to peak
    radius) and one valley line at every convolution boundary except the
    first, which sits on the flange seam.
    """
    config = config or GeometryConfig()
    if count < 1:
        return []
    frame = _SegmentFrame(length, bend_angle, shear, config.bend_epsilon)
    width = length / count
    r_base = config.bellows_radius
    r_peak = config.peak_radius

    lines = []
    for i in range(count):
        mid_x = i * width + width * 0.5
        lines.append(FeatureLine(FeatureKind.PEAK,
                                 frame.place(mid_x, -r_peak),
                                 frame.place(mid_x, r_peak)))
        if i > 0:
            start_x = i * width
            lines.append(FeatureLine(FeatureKind.VALLEY,
                                     frame.place(start_x, -r_base),
                                     frame.place(start_x, r_base)))
    return lines
