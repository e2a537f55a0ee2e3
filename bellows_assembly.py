#!/usr/bin/env python3
"""
BELLOWS_ASSEMBLY.PY - Assembly compositor

Walks a solved segment list and builds one coordinate-consistent scene:
bellows bodies, spool, flanges, pivot hardware, flow indicator and the
pressure glow.

Contains:
- Style and shape primitives (PathShape, LineShape, RectShape, ...)
- Group, Scene: the primitive tree handed to the renderers
- compose_assembly / compose: build a Scene from a JointSolution

Draw order inside a bellows segment (back to front): back shading, body
fill, rib overlay, highlight strokes. Hardware is drawn last.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from bellows_config import GeometryConfig
from bellows_geometry import closed_outline, generate_boundary, generate_feature_lines
from bellows_kinematics import solve
from bellows_models import (
    DeformationState, Direction, FeatureKind, HardwareKind, JointSolution,
    JointType, PathGeometry, Point, Pose2D, SegmentDescriptor, Side,
)


# Paint servers the renderers know how to resolve
METAL = "metal"
HATCH = "hatch"
PIPE_SHINE = "pipe_shine"

COLORS = {
    "background": "#0f172a",
    "accent": "#38bdf8",
    "shade": "#1e293b",
    "edge": "#475569",
    "edge_dark": "#334155",
    "hub": "#475569",
    "arm": "#64748b",
    "pin": "#cbd5e1",
    "pin_side": "#94a3b8",
    "pressure": "#ef4444",
}


# =============================================================================
# PRIMITIVES
# =============================================================================

@dataclass(frozen=True)
class Style:
    fill: Optional[str] = None
    stroke: Optional[str] = None
    stroke_width: float = 1.0
    opacity: float = 1.0
    stroke_opacity: float = 1.0
    dasharray: Optional[str] = None
    linecap: Optional[str] = None


@dataclass(frozen=True)
class PathShape:
    path: PathGeometry
    style: Style


@dataclass(frozen=True)
class LineShape:
    start: Point
    end: Point
    style: Style


@dataclass(frozen=True)
class RectShape:
    x: float
    y: float
    width: float
    height: float
    style: Style
    rx: float = 0.0


@dataclass(frozen=True)
class CircleShape:
    center: Point
    radius: float
    style: Style


@dataclass(frozen=True)
class EllipseShape:
    center: Point
    rx: float
    ry: float
    style: Style
    blur: float = 0.0


@dataclass(frozen=True)
class PolygonShape:
    points: Tuple[Point, ...]
    style: Style


@dataclass(frozen=True)
class PolylineShape:
    points: Tuple[Point, ...]
    style: Style


@dataclass(frozen=True)
class TextShape:
    position: Point
    text: str
    style: Style
    font_size: float = 12.0
    anchor: str = "middle"


Shape = Union[PathShape, LineShape, RectShape, CircleShape, EllipseShape,
              PolygonShape, PolylineShape, TextShape]


@dataclass
class Group:
    """A named node of the scene tree with its own local transform."""
    name: str
    transform: Pose2D = field(default_factory=Pose2D)
    opacity: float = 1.0
    children: List[Union["Group", Shape]] = field(default_factory=list)

    def add(self, child):
        self.children.append(child)
        return child

    def find(self, name: str) -> Optional["Group"]:
        """Depth-first search for a descendant group by name."""
        if self.name == name:
            return self
        for child in self.children:
            if isinstance(child, Group):
                found = child.find(name)
                if found is not None:
                    return found
        return None

    def shapes(self) -> Iterator[Shape]:
        """All shape leaves below this group, in draw order."""
        for child in self.children:
            if isinstance(child, Group):
                yield from child.shapes()
            else:
                yield child


@dataclass
class Scene:
    width: float
    height: float
    background: str
    layers: List[Group] = field(default_factory=list)

    def find(self, name: str) -> Optional[Group]:
        for layer in self.layers:
            found = layer.find(name)
            if found is not None:
                return found
        return None


# =============================================================================
# SEGMENTS
# =============================================================================

def _draw_bellows(seg: SegmentDescriptor, index: int, cross_section: bool,
                  config: GeometryConfig) -> Group:
    length, count = seg.length, seg.convolution_count
    bend, shear = seg.bend_angle, seg.shear
    group = Group(f"bellows_{index}", transform=seg.local_transform)

    outer = generate_boundary(length, count, Side.OUTER, Direction.FORWARD, bend, shear, config)
    inner = generate_boundary(length, count, Side.INNER, Direction.FORWARD, bend, shear, config)
    outline = closed_outline(length, count, bend, shear, config)

    if cross_section:
        group.add(PathShape(outer, Style(stroke=COLORS["accent"], stroke_width=3)))
        group.add(PathShape(inner, Style(stroke=COLORS["accent"], stroke_width=3)))
        group.add(PathShape(outline, Style(fill=HATCH, opacity=0.15)))
        return group

    shading = group.add(Group("back_shading", transform=Pose2D(0.0, -3.0), opacity=0.5))
    shading.add(PathShape(outline, Style(fill=COLORS["shade"])))

    body = group.add(Group("body"))
    body.add(PathShape(outline, Style(fill=METAL, stroke=COLORS["edge"], stroke_width=1)))

    ribs = group.add(Group("ribs", opacity=0.7))
    for line in generate_feature_lines(length, count, bend, shear, config):
        if line.kind is FeatureKind.PEAK:
            style = Style(stroke="#ffffff", stroke_opacity=0.3, stroke_width=1.5)
        else:
            style = Style(stroke="#000000", stroke_opacity=0.3, stroke_width=1)
        ribs.add(LineShape(line.start, line.end, style))

    highlights = group.add(Group("highlights"))
    highlights.add(PathShape(outer, Style(stroke="#ffffff", stroke_opacity=0.2, stroke_width=2)))
    highlights.add(PathShape(inner, Style(stroke="#000000", stroke_opacity=0.4, stroke_width=2)))
    return group


def _draw_spool(seg: SegmentDescriptor, index: int, cross_section: bool,
                config: GeometryConfig) -> Group:
    r = config.bellows_radius
    length = seg.length
    group = Group(f"spool_{index}", transform=seg.local_transform)
    group.add(RectShape(-2.0, -r, length + 4.0, 2 * r,
                        Style(fill=METAL, stroke=COLORS["edge_dark"])))
    if not cross_section:
        group.add(RectShape(0.0, -r, length, 2 * r, Style(fill=PIPE_SHINE)))
        group.add(LineShape((0.0, -r), (length, -r),
                            Style(stroke="#ffffff", stroke_opacity=0.5)))
        group.add(LineShape((0.0, r), (length, r),
                            Style(stroke="#000000", stroke_opacity=0.5)))
    return group


# =============================================================================
# FLANGES AND HARDWARE
# =============================================================================

def _draw_flanges(far_flange: Pose2D, config: GeometryConfig) -> Group:
    t = config.flange_thickness
    h = config.flange_height
    hub = config.hub_length
    r = config.bellows_radius
    plate_style = Style(fill=METAL, stroke=COLORS["edge"])
    hub_style = Style(fill=COLORS["hub"])

    flanges = Group("flanges")
    fixed = flanges.add(Group("fixed_flange"))
    fixed.add(RectShape(-t, -h / 2, t, h, plate_style, rx=2.0))
    fixed.add(RectShape(-t - hub, -r, hub, 2 * r, hub_style))

    free = flanges.add(Group("free_flange", transform=far_flange))
    free.add(RectShape(0.0, -h / 2, t, h, plate_style, rx=2.0))
    free.add(RectShape(t, -r, hub, 2 * r, hub_style))
    return flanges


def _draw_hinge(solution: JointSolution, config: GeometryConfig) -> Group:
    pivot = solution.hardware.pivot
    far = solution.far_flange
    half_h = config.flange_height / 2
    hardware = Group("hardware")

    pin = hardware.add(Group("pivot_pin", transform=pivot))
    pin.add(CircleShape((0.0, 0.0), 14.0,
                        Style(fill=COLORS["pin"], stroke=COLORS["edge_dark"], stroke_width=2)))
    pin.add(CircleShape((0.0, 0.0), 6.0, Style(fill=COLORS["edge_dark"])))

    arm_style = Style(stroke=COLORS["arm"], stroke_width=5, linecap="round")
    hardware.add(PolylineShape(((-10.0, -half_h), pivot.position, (-10.0, half_h)), arm_style))
    hardware.add(PolylineShape(((far.x, far.y - half_h), pivot.position,
                                (far.x, far.y + half_h)), arm_style))
    return hardware


def _draw_gimbal(solution: JointSolution, config: GeometryConfig) -> Group:
    pivot = solution.hardware.pivot
    far = solution.far_flange
    hardware = Group("hardware")

    ring = hardware.add(Group("gimbal_ring", transform=pivot))
    ring.add(RectShape(-40.0, -110.0, 80.0, 220.0,
                       Style(stroke=COLORS["edge"], stroke_width=8), rx=12.0))
    pin_style = Style(fill=COLORS["pin"], stroke=COLORS["edge_dark"])
    side_style = Style(fill=COLORS["pin_side"], stroke=COLORS["edge_dark"])
    ring.add(CircleShape((0.0, -110.0), 8.0, pin_style))
    ring.add(CircleShape((0.0, 110.0), 8.0, pin_style))
    ring.add(CircleShape((-40.0, 0.0), 8.0, side_style))
    ring.add(CircleShape((40.0, 0.0), 8.0, side_style))

    link_style = Style(stroke=COLORS["arm"], stroke_width=4, dasharray="4 2")
    hardware.add(LineShape((-10.0, 0.0), (pivot.x - 40.0, pivot.y), link_style))
    hardware.add(LineShape((far.x + 10.0, far.y), (pivot.x + 40.0, pivot.y), link_style))
    return hardware


def _draw_flow_indicator() -> Group:
    accent = COLORS["accent"]
    flow = Group("flow_indicator", transform=Pose2D(-80.0, -120.0), opacity=0.6)
    flow.add(TextShape((0.0, -15.0), "FLOW", Style(fill=accent), font_size=12))
    flow.add(LineShape((-30.0, 0.0), (24.0, 0.0), Style(stroke=accent, stroke_width=2)))
    flow.add(PolygonShape(((30.0, 0.0), (21.0, -3.5), (21.0, 3.5)),
                          Style(fill=accent, stroke=accent, stroke_width=0.5)))
    return flow


def pressure_opacity(state: DeformationState, config: GeometryConfig) -> float:
    """Opacity of the pressure glow; 0 means the overlay is not drawn."""
    if state.cross_section or state.pressure <= 0:
        return 0.0
    pressure = min(state.pressure, config.max_pressure)
    return pressure / config.pressure_opacity_divisor


def _draw_pressure(opacity: float, config: GeometryConfig) -> Group:
    w, h = config.canvas_width, config.canvas_height
    overlay = Group("pressure_overlay", opacity=opacity)
    overlay.add(EllipseShape((w / 2, h / 2), w * 0.375, h * 0.25,
                             Style(fill=COLORS["pressure"]), blur=24.0))
    return overlay


# =============================================================================
# COMPOSITION
# =============================================================================

def assembly_origin(solution: JointSolution, config: GeometryConfig) -> Pose2D:
    """Canvas placement of the fixed flange centre."""
    x = (config.canvas_width - solution.total_length) / 2
    y = config.canvas_height / 2 - solution.far_flange.y / 2
    return Pose2D(x, y)


def compose_assembly(solution: JointSolution,
                     config: Optional[GeometryConfig] = None) -> Scene:
    """Build the full scene for a solved joint."""
    config = config or GeometryConfig()
    state = solution.state
    scene = Scene(config.canvas_width, config.canvas_height, COLORS["background"])

    assembly = Group("assembly", transform=assembly_origin(solution, config))
    segments = assembly.add(Group("segments"))
    for i, seg in enumerate(solution.segments):
        if seg.is_bellows:
            segments.add(_draw_bellows(seg, i, state.cross_section, config))
        else:
            segments.add(_draw_spool(seg, i, state.cross_section, config))

    assembly.add(_draw_flanges(solution.far_flange, config))

    if solution.hardware is not None:
        if solution.hardware.kind is HardwareKind.PIN:
            assembly.add(_draw_hinge(solution, config))
        else:
            assembly.add(_draw_gimbal(solution, config))

    assembly.add(_draw_flow_indicator())
    scene.layers.append(assembly)

    opacity = pressure_opacity(state, config)
    if opacity > 0:
        scene.layers.append(_draw_pressure(opacity, config))
    return scene


def compose(joint_type: JointType, state: DeformationState,
            config: Optional[GeometryConfig] = None, catalog=None) -> Scene:
    """Solve and compose in one call."""
    config = config or GeometryConfig()
    return compose_assembly(solve(joint_type, state, config, catalog), config)


def scene_points(scene: Scene) -> Sequence[Point]:
    """Every path junction and shape anchor in canvas space (for bounds)."""
    points: List[Point] = []

    def visit(node: Group, parent: Pose2D):
        pose = parent.compose(node.transform)
        for child in node.children:
            if isinstance(child, Group):
                visit(child, pose)
            elif isinstance(child, PathShape):
                points.extend(pose.apply(*p) for p in child.path.junctions())
            elif isinstance(child, LineShape):
                points.extend([pose.apply(*child.start), pose.apply(*child.end)])
            elif isinstance(child, (PolygonShape, PolylineShape)):
                points.extend(pose.apply(*p) for p in child.points)
            elif isinstance(child, RectShape):
                points.extend([pose.apply(child.x, child.y),
                               pose.apply(child.x + child.width, child.y + child.height)])
            elif isinstance(child, (CircleShape, EllipseShape, TextShape)):
                anchor = child.position if isinstance(child, TextShape) else child.center
                points.append(pose.apply(*anchor))

    for layer in scene.layers:
        visit(layer, Pose2D.identity())
    return points
