#!/usr/bin/env python3
"""
BELLOWS_RENDERER.PY - SVG rendering for bellows scenes

Contains:
- BellowsRenderer: writes a composed Scene to SVG using svgwrite
"""

import svgwrite

from bellows_assembly import (
    HATCH, METAL, PIPE_SHINE, CircleShape, EllipseShape, Group, LineShape,
    PathShape, PolygonShape, PolylineShape, RectShape, Scene, Style, TextShape,
)


class BellowsRenderer:
    """Renders a Scene to SVG using svgwrite."""

    PAINT_SERVERS = {
        METAL: "url(#metalGrad)",
        HATCH: "url(#hatch)",
        PIPE_SHINE: "url(#pipeShine)",
    }

    METAL_STOPS = [
        ("0%", "#94a3b8"),
        ("40%", "#e2e8f0"),
        ("60%", "#cbd5e1"),
        ("100%", "#475569"),
    ]

    def __init__(self, scene: Scene):
        self.scene = scene

    def drawing(self, output_path: str = "bellows.svg") -> svgwrite.Drawing:
        """Build the svgwrite drawing without saving it."""
        w, h = self.scene.width, self.scene.height
        dwg = svgwrite.Drawing(output_path,
                               size=(f"{w:g}", f"{h:g}"),
                               viewBox=f"0 0 {w:g} {h:g}",
                               preserveAspectRatio="xMidYMid meet",
                               debug=False)
        self._add_defs(dwg)
        dwg.add(dwg.rect((0, 0), (w, h), fill=self.scene.background))
        for layer in self.scene.layers:
            self._add_group(dwg, dwg, layer)
        return dwg

    def render(self, output_path: str):
        """Render the scene to an SVG file."""
        dwg = self.drawing(output_path)
        dwg.save()
        print(f"SVG saved to {output_path}")

    def tostring(self) -> str:
        return self.drawing().tostring()

    # -------------------------------------------------------------------------
    # Definitions
    # -------------------------------------------------------------------------

    def _add_defs(self, dwg):
        metal = dwg.linearGradient(start=(0, 0), end=(0, 1), id="metalGrad")
        for offset, color in self.METAL_STOPS:
            metal.add_stop_color(offset=offset, color=color)
        dwg.defs.add(metal)

        shine = dwg.linearGradient(start=(0, 0), end=(0, 1), id="pipeShine")
        shine.add_stop_color(offset="0%", color="white", opacity=0.1)
        shine.add_stop_color(offset="40%", color="white", opacity=0.6)
        shine.add_stop_color(offset="60%", color="black", opacity=0.1)
        dwg.defs.add(shine)

        hatch = dwg.pattern(id="hatch", size=(8, 8), patternUnits="userSpaceOnUse",
                            patternTransform="rotate(45 0 0)")
        hatch.add(dwg.line((0, 0), (0, 8), stroke="#38bdf8", stroke_width=1))
        dwg.defs.add(hatch)

        blur = dwg.filter(id="glow", x="-50%", y="-50%", width="200%", height="200%")
        blur.feGaussianBlur(in_="SourceGraphic", stdDeviation=24)
        dwg.defs.add(blur)

    # -------------------------------------------------------------------------
    # Tree walk
    # -------------------------------------------------------------------------

    def _add_group(self, dwg, parent, group: Group):
        attrs = {"class_": group.name}
        transform = group.transform.svg_transform()
        if transform:
            attrs["transform"] = transform
        if group.opacity != 1.0:
            attrs["opacity"] = f"{group.opacity:g}"
        g = parent.add(dwg.g(**attrs))
        for child in group.children:
            if isinstance(child, Group):
                self._add_group(dwg, g, child)
            else:
                g.add(self._shape(dwg, child))

    def _paint(self, value):
        if value is None:
            return "none"
        return self.PAINT_SERVERS.get(value, value)

    def _style(self, style: Style) -> dict:
        attrs = {
            "fill": self._paint(style.fill),
            "stroke": self._paint(style.stroke),
        }
        if style.stroke is not None:
            attrs["stroke_width"] = f"{style.stroke_width:g}"
            if style.stroke_opacity != 1.0:
                attrs["stroke_opacity"] = f"{style.stroke_opacity:g}"
        if style.opacity != 1.0:
            attrs["opacity"] = f"{style.opacity:g}"
        if style.dasharray:
            attrs["stroke_dasharray"] = style.dasharray
        if style.linecap:
            attrs["stroke_linecap"] = style.linecap
        return attrs

    def _shape(self, dwg, shape):
        style = self._style(shape.style)
        if isinstance(shape, PathShape):
            return dwg.path(d=shape.path.to_svg(), **style)
        if isinstance(shape, LineShape):
            return dwg.line(shape.start, shape.end, **style)
        if isinstance(shape, RectShape):
            if shape.rx:
                style["rx"] = shape.rx
            return dwg.rect((shape.x, shape.y), (shape.width, shape.height), **style)
        if isinstance(shape, CircleShape):
            return dwg.circle(shape.center, shape.radius, **style)
        if isinstance(shape, EllipseShape):
            if shape.blur:
                style["filter"] = "url(#glow)"
            return dwg.ellipse(shape.center, (shape.rx, shape.ry), **style)
        if isinstance(shape, PolygonShape):
            return dwg.polygon(list(shape.points), **style)
        if isinstance(shape, PolylineShape):
            return dwg.polyline(list(shape.points), **style)
        if isinstance(shape, TextShape):
            style["stroke"] = "none"
            return dwg.text(shape.text, insert=shape.position,
                            font_size=f"{shape.font_size:g}",
                            font_family="monospace",
                            text_anchor=shape.anchor, **style)
        raise TypeError(f"Unsupported shape: {type(shape).__name__}")
