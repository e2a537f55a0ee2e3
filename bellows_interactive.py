#!/usr/bin/env python3
"""
BELLOWS_INTERACTIVE.PY - Interactive expansion joint viewer using matplotlib

Pick a joint type, drag the deformation sliders or start the
auto-oscillate demo. Every change re-solves and redraws the assembly and
refreshes the joint description and load status panel.
"""

import argparse
import logging
from dataclasses import replace

import matplotlib.pyplot as plt
from matplotlib.colors import to_rgba
from matplotlib.patches import (
    Circle, Ellipse, FancyBboxPatch, PathPatch, Polygon, Rectangle,
)
from matplotlib.path import Path
from matplotlib.transforms import Affine2D
from matplotlib.widgets import Button, CheckButtons, RadioButtons, Slider

from bellows_animation import OscillationClock, oscillate_state
from bellows_assembly import (
    HATCH, METAL, PIPE_SHINE, COLORS, CircleShape, EllipseShape, Group,
    LineShape, PathShape, PolygonShape, PolylineShape, RectShape, Scene,
    TextShape, compose_assembly,
)
from bellows_config import GeometryConfig, load_config
from bellows_kinematics import solve
from bellows_models import (
    ANGULAR_RANGE, AXIAL_RANGE, LATERAL_RANGE, PRESSURE_RANGE, CubicSegment,
    DeformationState, JointType, PathGeometry, Pose2D,
)
from bellows_renderer import BellowsRenderer
from joint_catalog import (
    JOINT_DATA, JointConfig, apply_capabilities, get_joint_config, status_line,
)


# Flat colors standing in for the SVG paint servers
PAINT_COLORS = {
    METAL: "#cbd5e1",
    PIPE_SHINE: "#ffffff40",
}

LINE_SCALE = 0.6    # canvas units -> points


def path_to_mpl(path: PathGeometry) -> Path:
    """Convert a PathGeometry into a matplotlib Path."""
    vertices = [path.start]
    codes = [Path.MOVETO]
    for seg in path.segments:
        if isinstance(seg, CubicSegment):
            vertices.extend([seg.c1, seg.c2, seg.end])
            codes.extend([Path.CURVE4] * 3)
        else:
            vertices.append(seg.end)
            codes.append(Path.LINETO)
    if path.closed:
        vertices.append(path.start)
        codes.append(Path.CLOSEPOLY)
    return Path(vertices, codes)


def joint_info_text(joint: JointConfig) -> str:
    """Description and feature list of a catalog entry."""
    lines = [joint.name, joint.description]
    if joint.features:
        lines.append("Features: " + ", ".join(joint.features))
    return "\n".join(lines)


class BellowsViewer:
    """Interactive viewer for one expansion joint assembly."""

    def __init__(self, joint_type: JointType = JointType.AXIAL,
                 state: DeformationState = None, config: GeometryConfig = None,
                 catalog=None):
        self.config = config or GeometryConfig()
        self.catalog = catalog if catalog is not None else JOINT_DATA
        self.joint_type = joint_type
        self.state = state or DeformationState()
        self.clock = OscillationClock(self.config.animation_speed)
        self.animating = False
        self.scene = None
        self._syncing = False

        self.fig = plt.figure(figsize=(14, 8))
        self.ax = self.fig.add_axes([0.02, 0.18, 0.66, 0.78])
        self.ax_info = self.fig.add_axes([0.02, 0.01, 0.66, 0.15])
        self.ax_info.axis('off')
        self.info_text = self.ax_info.text(0.0, 1.0, "", va="top", ha="left",
                                           fontsize=9, wrap=True)
        self.status_text = self.ax_info.text(0.0, 0.0, "", va="bottom", ha="left",
                                             fontsize=9, family="monospace")

        self._add_widgets()
        self.timer = self.fig.canvas.new_timer(interval=16)
        self.timer.add_callback(self._on_tick)

        self.set_joint(joint_type)

    # -------------------------------------------------------------------------
    # Widgets
    # -------------------------------------------------------------------------

    def _add_widgets(self):
        # Store widgets as attributes to prevent garbage collection
        labels = [joint.name for joint in self.catalog]
        self._label_to_type = {joint.name: joint.id for joint in self.catalog}
        self.ax_joint = self.fig.add_axes([0.72, 0.70, 0.25, 0.24])
        active = next((i for i, joint in enumerate(self.catalog) if joint.id is self.joint_type), 0)
        self.radio_joint = RadioButtons(self.ax_joint, labels, active=active)
        self.radio_joint.on_clicked(self._on_joint)

        self.sliders = {}
        specs = [
            ("axial", "Axial (%)", AXIAL_RANGE),
            ("lateral", "Lateral (%)", LATERAL_RANGE),
            ("angular", "Angular (deg)", ANGULAR_RANGE),
            ("pressure", "Pressure (bar)", PRESSURE_RANGE),
        ]
        for i, (key, label, (lo, hi)) in enumerate(specs):
            ax = self.fig.add_axes([0.78, 0.58 - i * 0.06, 0.18, 0.03])
            slider = Slider(ax, label, lo, hi, valinit=getattr(self.state, key))
            slider.on_changed(self._on_slider)
            self.sliders[key] = slider

        self.ax_section = self.fig.add_axes([0.72, 0.24, 0.25, 0.06])
        self.check_section = CheckButtons(self.ax_section, ["Cross-Section"],
                                          [self.state.cross_section])
        self.check_section.on_clicked(self._on_section)

        self.ax_animate = self.fig.add_axes([0.72, 0.14, 0.12, 0.05])
        self.btn_animate = Button(self.ax_animate, "Auto Oscillate")
        self.btn_animate.on_clicked(self._toggle_animation)

        self.ax_save = self.fig.add_axes([0.85, 0.14, 0.12, 0.05])
        self.btn_save = Button(self.ax_save, "Save SVG")
        self.btn_save.on_clicked(self._save_svg)

    def _joint(self):
        return get_joint_config(self.joint_type, self.catalog)

    def _sync_sliders(self):
        """Push the current state into the sliders without re-entering update()."""
        self._syncing = True
        try:
            allowed = self._joint().allowed_deformation
            enabled = {
                "axial": allowed.axial and not self.animating,
                "lateral": allowed.lateral and not self.animating,
                "angular": allowed.angular and not self.animating,
                "pressure": True,
            }
            for key, slider in self.sliders.items():
                slider.set_val(getattr(self.state, key))
                slider.set_active(enabled[key])
                slider.ax.set_alpha(1.0 if enabled[key] else 0.3)
                slider.poly.set_alpha(1.0 if enabled[key] else 0.3)
        finally:
            self._syncing = False

    # -------------------------------------------------------------------------
    # Callbacks
    # -------------------------------------------------------------------------

    def set_joint(self, joint_type: JointType):
        """Switch joint type, resetting motions it does not allow."""
        self.joint_type = joint_type
        self.clock.reset()
        self.animating = False
        self.timer.stop()
        self.state = apply_capabilities(self.state, self._joint())
        self._sync_sliders()
        self.update()

    def _on_joint(self, label):
        self.set_joint(self._label_to_type[label])

    def _on_slider(self, _value):
        if self._syncing:
            return
        values = {key: slider.val for key, slider in self.sliders.items()}
        self.state = DeformationState(cross_section=self.state.cross_section,
                                      **values).clamped()
        self.update()

    def _on_section(self, _label):
        cross_section = self.check_section.get_status()[0]
        self.state = replace(self.state, cross_section=cross_section)
        self.update()

    def _toggle_animation(self, _event=None):
        self.animating = not self.animating
        if self.animating:
            self.timer.start()
        else:
            self.timer.stop()
        self._sync_sliders()

    def _on_tick(self):
        phase = self.clock.tick()
        self.state = oscillate_state(phase, self.state, self._joint())
        self._sync_sliders()
        self.update()

    def _save_svg(self, _event=None, output_path: str = "bellows.svg"):
        BellowsRenderer(self.scene).render(output_path)

    # -------------------------------------------------------------------------
    # Drawing
    # -------------------------------------------------------------------------

    def update(self):
        """Re-solve and redraw from the current state."""
        try:
            solution = solve(self.joint_type, self.state, self.config, self.catalog)
        except NotImplementedError as e:
            self.ax.clear()
            self.ax.set_title(str(e))
            self.fig.canvas.draw_idle()
            return
        self.scene = compose_assembly(solution, self.config)
        self.draw_scene(self.scene)
        self.info_text.set_text(joint_info_text(self._joint()))
        self.status_text.set_text(status_line(solution.state))
        mode = "SECTION" if self.state.cross_section else "SOLID"
        self.ax.set_title(f"{self._joint().name} - {mode}", fontsize=12, fontweight='bold')
        self.fig.canvas.draw_idle()

    def draw_scene(self, scene: Scene):
        self.ax.clear()
        self.ax.set_xlim(0, scene.width)
        self.ax.set_ylim(scene.height, 0)
        self.ax.set_aspect('equal')
        self.ax.set_axis_off()
        self.ax.add_patch(Rectangle((0, 0), scene.width, scene.height,
                                    facecolor=scene.background, zorder=0))
        self._zorder = 1
        for layer in scene.layers:
            self._draw_group(layer, Pose2D.identity(), 1.0)

    def _draw_group(self, group: Group, parent: Pose2D, parent_opacity: float):
        pose = parent.compose(group.transform)
        opacity = parent_opacity * group.opacity
        transform = Affine2D(pose.matrix()) + self.ax.transData
        for child in group.children:
            if isinstance(child, Group):
                self._draw_group(child, pose, opacity)
            else:
                self._draw_shape(child, transform, opacity)

    def _colors(self, style, opacity: float):
        alpha = opacity * style.opacity
        if style.fill is None or style.fill == HATCH:
            face = "none"
        else:
            face = to_rgba(PAINT_COLORS.get(style.fill, style.fill))
            face = face[:3] + (face[3] * alpha,)
        if style.stroke is None:
            edge = "none"
        else:
            edge = to_rgba(style.stroke, alpha * style.stroke_opacity)
        return face, edge

    def _draw_shape(self, shape, transform, opacity: float):
        style = shape.style
        face, edge = self._colors(style, opacity)
        kwargs = dict(
            facecolor=face,
            edgecolor=edge,
            linewidth=style.stroke_width * LINE_SCALE if style.stroke else 0.0,
            transform=transform,
            zorder=self._zorder,
        )
        if style.dasharray:
            kwargs["linestyle"] = (0, tuple(float(v) for v in style.dasharray.split()))
        if style.linecap:
            kwargs["capstyle"] = style.linecap
        self._zorder += 1

        if isinstance(shape, PathShape):
            if style.fill == HATCH:
                kwargs["edgecolor"] = to_rgba(COLORS["accent"], opacity * style.opacity)
                kwargs["hatch"] = "//"
                kwargs["linewidth"] = 0.0
            patch = PathPatch(path_to_mpl(shape.path), **kwargs)
        elif isinstance(shape, LineShape):
            patch = Polygon([shape.start, shape.end], closed=False, **kwargs)
        elif isinstance(shape, PolylineShape):
            patch = Polygon(list(shape.points), closed=False, **kwargs)
        elif isinstance(shape, PolygonShape):
            patch = Polygon(list(shape.points), closed=True, **kwargs)
        elif isinstance(shape, RectShape):
            if shape.rx:
                patch = FancyBboxPatch((shape.x, shape.y), shape.width, shape.height,
                                       boxstyle=f"round,pad=0,rounding_size={shape.rx}",
                                       **kwargs)
            else:
                patch = Rectangle((shape.x, shape.y), shape.width, shape.height, **kwargs)
        elif isinstance(shape, CircleShape):
            patch = Circle(shape.center, shape.radius, **kwargs)
        elif isinstance(shape, EllipseShape):
            patch = Ellipse(shape.center, 2 * shape.rx, 2 * shape.ry, **kwargs)
        elif isinstance(shape, TextShape):
            self.ax.text(shape.position[0], shape.position[1], shape.text,
                         color=face, fontsize=shape.font_size * LINE_SCALE,
                         family='monospace', ha='center', va='baseline',
                         transform=transform, zorder=kwargs["zorder"])
            return
        else:
            raise TypeError(f"Unsupported shape: {type(shape).__name__}")
        self.ax.add_patch(patch)

    def show(self):
        """Show the interactive viewer."""
        plt.show()


def main():
    parser = argparse.ArgumentParser(description='Interactive expansion joint viewer')
    parser.add_argument('--joint', choices=[t.value for t in JointType
                                            if t is not JointType.PRESSURE_BALANCED],
                        default='axial', help='Initial joint type (default: axial)')
    parser.add_argument('--config', default=None, help='Path to geometry config JSON')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    viewer = BellowsViewer(JointType(args.joint), config=load_config(args.config))
    viewer.show()


if __name__ == "__main__":
    main()
