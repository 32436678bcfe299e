from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import math
from typing import Any

from aesplot.domains import Domain
from aesplot.scales import BandScale, Scale, build_scale
from aesplot.scene import Circle, Line, Point, Shape, Text
from aesplot.theme import Theme
from aesplot.view import CoordType, ScaleSpec


Projector = Callable[[Any, Any], Point]
PixelProjector = Callable[[float, float], Point]

ARC_SEGMENTS = 20
POLAR_RINGS = 5
POLAR_SPOKES = 8


def polar_pixel_projector(panel_width: float, panel_height: float, margin: float) -> PixelProjector:
    """Map cartesian panel pixels onto a disc: x becomes angle, inverted y becomes radius.

    Angle zero points straight up; the angle grows clockwise in screen space.
    """
    cx = panel_width / 2.0
    cy = panel_height / 2.0
    r_max = min(panel_width / 2.0, panel_height / 2.0) - margin
    inner_w = max(1.0, panel_width - 2.0 * margin)
    inner_h = max(1.0, panel_height - 2.0 * margin)

    def project(px: float, py: float) -> Point:
        t_angle = (px - margin) / inner_w
        t_radius = (margin + (panel_height - 2.0 * margin) - py) / inner_h
        theta = 2.0 * math.pi * t_angle
        r = r_max * t_radius
        return (cx + r * math.cos(theta - math.pi / 2.0), cy + r * math.sin(theta - math.pi / 2.0))

    return project


def munch_arc(
    project_px: PixelProjector,
    a_lo: float,
    a_hi: float,
    b_lo: float,
    b_hi: float,
    segments: int = ARC_SEGMENTS,
) -> tuple[Point, ...]:
    """Closed outline of the pixel rectangle [a_lo, a_hi] x [b_lo, b_hi] after projection.

    The edges at `b_hi` and `b_lo` are sampled `segments` times so that a polar
    projection bends them into arcs; with one segment this is the four corners.
    """
    n = max(1, int(segments))
    outer = [project_px(a_lo + (a_hi - a_lo) * i / n, b_hi) for i in range(n + 1)]
    inner = [project_px(a_lo + (a_hi - a_lo) * i / n, b_lo) for i in range(n, -1, -1)]
    return tuple(outer + inner)


def _identity_px(panel_width: float, panel_height: float, margin: float) -> PixelProjector:
    return lambda a, b: (a, b)


def _swapped_px(panel_width: float, panel_height: float, margin: float) -> PixelProjector:
    return lambda a, b: (b, a)


@dataclass(frozen=True)
class CoordRule:
    pixel_projector: Callable[[float, float, float], PixelProjector]
    swap_domains: bool
    arc_segments: int
    decorate: Callable[["PanelCoord", Theme], tuple[list[Shape], list[Shape], list[Shape]]]


def _cartesian_decorations(coord: "PanelCoord", theme: Theme) -> tuple[list[Shape], list[Shape], list[Shape]]:
    pw, ph, m = coord.panel_width, coord.panel_height, coord.margin
    grid: list[Shape] = []
    x_labels: list[Shape] = []
    y_labels: list[Shape] = []

    x_ticks = coord.scale_x.ticks()
    for t, label in zip(x_ticks, coord.scale_x.format(x_ticks), strict=False):
        px = coord.scale_x(t)
        if not math.isfinite(px):
            continue
        grid.append(Line(px, m, px, ph - m, stroke=theme.grid, stroke_width=theme.grid_width))
        x_labels.append(
            Text(px, ph - 2.0, label, fill=theme.tick_color, font_size=theme.font_size, font_family=theme.font_family, anchor="middle")
        )

    y_ticks = coord.scale_y.ticks()
    for t, label in zip(y_ticks, coord.scale_y.format(y_ticks), strict=False):
        py = coord.scale_y(t)
        if not math.isfinite(py):
            continue
        grid.append(Line(m, py, pw - m, py, stroke=theme.grid, stroke_width=theme.grid_width))
        y_labels.append(
            Text(m - 3.0, py + 3.0, label, fill=theme.tick_color, font_size=theme.font_size, font_family=theme.font_family, anchor="end")
        )
    return grid, x_labels, y_labels


def _polar_decorations(coord: "PanelCoord", theme: Theme) -> tuple[list[Shape], list[Shape], list[Shape]]:
    pw, ph, m = coord.panel_width, coord.panel_height, coord.margin
    cx, cy = pw / 2.0, ph / 2.0
    r_max = max(0.0, min(pw / 2.0, ph / 2.0) - m)
    grid: list[Shape] = []
    for k in range(1, POLAR_RINGS + 1):
        grid.append(Circle(cx, cy, r_max * k / POLAR_RINGS, fill=None, stroke=theme.grid, stroke_width=theme.grid_width))
    for k in range(POLAR_SPOKES):
        theta = 2.0 * math.pi * k / POLAR_SPOKES - math.pi / 2.0
        grid.append(
            Line(cx, cy, cx + r_max * math.cos(theta), cy + r_max * math.sin(theta), stroke=theme.grid, stroke_width=theme.grid_width)
        )
    return grid, [], []


COORD_RULES: dict[str, CoordRule] = {
    "cartesian": CoordRule(_identity_px, swap_domains=False, arc_segments=1, decorate=_cartesian_decorations),
    "flip": CoordRule(_swapped_px, swap_domains=True, arc_segments=1, decorate=_cartesian_decorations),
    "polar": CoordRule(polar_pixel_projector, swap_domains=False, arc_segments=ARC_SEGMENTS, decorate=_polar_decorations),
}


def _data_scales(rule: CoordRule, scale_x: Scale, scale_y: Scale) -> tuple[Scale, Scale]:
    if rule.swap_domains:
        return scale_y, scale_x
    return scale_x, scale_y


def build_coord(
    coord_type: CoordType,
    scale_x: Scale,
    scale_y: Scale,
    panel_width: float,
    panel_height: float,
    margin: float,
) -> Projector:
    """Return the (data-x, data-y) -> pixel function for one coordinate system.

    Under `flip` the caller must have built `scale_x` from the y-domain and
    `scale_y` from the x-domain; the projector then reads data-x through
    `scale_y` and data-y through `scale_x`.
    """
    rule = COORD_RULES[coord_type]
    project_px = rule.pixel_projector(panel_width, panel_height, margin)
    x_data, y_data = _data_scales(rule, scale_x, scale_y)

    def project(dx: Any, dy: Any) -> Point:
        return project_px(x_data(dx), y_data(dy))

    return project


@dataclass(frozen=True)
class PanelCoord:
    """Scales plus projectors for one panel.

    `scale_x`/`scale_y` drive the horizontal/vertical pixel axes. The data
    scales are the same objects seen from the data's point of view, so marks
    can lay out bars along the data axes and hand pixel coordinates to
    `project_px` without knowing the coordinate system.
    """

    coord_type: CoordType
    scale_x: Scale
    scale_y: Scale
    x_data_scale: Scale
    y_data_scale: Scale
    project: Projector
    project_px: PixelProjector
    panel_width: float
    panel_height: float
    margin: float
    arc_segments: int
    rule: CoordRule

    def rect(self, a_lo: float, a_hi: float, b_lo: float, b_hi: float) -> tuple[Point, ...]:
        return munch_arc(self.project_px, a_lo, a_hi, b_lo, b_hi, self.arc_segments)

    def across(self, b: float) -> tuple[Point, ...]:
        """Points along the full data-x extent at data-axis pixel `b`."""
        a0, a1 = self.x_data_scale.range
        n = self.arc_segments
        return tuple(self.project_px(a0 + (a1 - a0) * i / n, b) for i in range(n + 1))

    def along(self, a: float) -> tuple[Point, ...]:
        """Endpoints spanning the full data-y extent at data-axis pixel `a`."""
        b0, b1 = self.y_data_scale.range
        return (self.project_px(a, b0), self.project_px(a, b1))

    def x_band(self, category: Any) -> tuple[float, float] | None:
        if isinstance(self.x_data_scale, BandScale):
            return self.x_data_scale.band(category)
        return None

    def decorations(self, theme: Theme) -> tuple[list[Shape], list[Shape], list[Shape]]:
        """Grid shapes, then horizontal-axis and vertical-axis tick labels."""
        return self.rule.decorate(self, theme)


def build_panel_coord(
    coord_type: CoordType,
    x_domain: Domain,
    y_domain: Domain,
    panel_width: float,
    panel_height: float,
    margin: float,
    x_spec: ScaleSpec | None = None,
    y_spec: ScaleSpec | None = None,
) -> PanelCoord:
    rule = COORD_RULES[coord_type]
    if rule.swap_domains:
        h_domain, h_spec, v_domain, v_spec = y_domain, y_spec, x_domain, x_spec
    else:
        h_domain, h_spec, v_domain, v_spec = x_domain, x_spec, y_domain, y_spec
    scale_x = build_scale(h_domain, (margin, panel_width - margin), h_spec)
    scale_y = build_scale(v_domain, (panel_height - margin, margin), v_spec)
    x_data, y_data = _data_scales(rule, scale_x, scale_y)
    return PanelCoord(
        coord_type=coord_type,
        scale_x=scale_x,
        scale_y=scale_y,
        x_data_scale=x_data,
        y_data_scale=y_data,
        project=build_coord(coord_type, scale_x, scale_y, panel_width, panel_height, margin),
        project_px=rule.pixel_projector(panel_width, panel_height, margin),
        panel_width=panel_width,
        panel_height=panel_height,
        margin=margin,
        arc_segments=rule.arc_segments,
        rule=rule,
    )
