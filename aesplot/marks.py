from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
import math
from typing import Any

from aesplot.adapters import is_number
from aesplot.coords import PanelCoord
from aesplot.domains import NumericDomain
from aesplot.scene import Circle, Point, Polygon, Polyline, Rect, Shape, Text
from aesplot.stats import TransformResult
from aesplot.theme import Theme
from aesplot.view import View


POINT_STROKE_WIDTH = 0.5
SIZE_RADIUS_MIN = 2.0
SIZE_RADIUS_SPAN = 6.0
BAR_FILL_RATIO = 0.8
RULE_DASHARRAY = "4,3"
SHAPES = ("circle", "square", "triangle", "diamond")

# Running bar end per (category, grows upward), threaded from one drawer call to the next.
StackTops = Mapping[tuple[Any, bool], float]


@dataclass(frozen=True)
class MarkContext:
    coord: PanelCoord
    theme: Theme
    color_categories: tuple[Any, ...] = ()
    shape_categories: tuple[Any, ...] = ()

    def color_for(self, key: Any) -> str:
        return self.theme.color_for(key, self.color_categories)

    def shape_for(self, value: Any) -> str:
        if value is None or value not in self.shape_categories:
            return SHAPES[0]
        return SHAPES[self.shape_categories.index(value) % len(SHAPES)]


MarkDrawer = Callable[[View, TransformResult, MarkContext, StackTops], tuple[list[Shape], StackTops]]


def _finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


def _size_radius(sizes: Sequence[Any] | None, default: float) -> Callable[[Any], float]:
    numeric = [float(s) for s in (sizes or ()) if is_number(s) and math.isfinite(float(s))]
    if not numeric:
        return lambda _v: default
    lo, hi = min(numeric), max(numeric)
    span = hi - lo

    def radius(value: Any) -> float:
        if not is_number(value) or not math.isfinite(float(value)):
            return default
        if span == 0:
            return SIZE_RADIUS_MIN + SIZE_RADIUS_SPAN / 2.0
        return SIZE_RADIUS_MIN + SIZE_RADIUS_SPAN * (float(value) - lo) / span

    return radius


def point_shape(kind: str, px: float, py: float, r: float, *, fill: str, theme: Theme) -> Shape:
    style = {
        "fill": fill,
        "stroke": theme.point_stroke,
        "stroke_width": POINT_STROKE_WIDTH,
        "opacity": theme.mark_opacity,
    }
    if kind == "square":
        return Rect(px - r, py - r, 2.0 * r, 2.0 * r, **style)
    if kind == "triangle":
        return Polygon(((px, py - r), (px - r, py + r), (px + r, py + r)), **style)
    if kind == "diamond":
        return Polygon(((px, py - r), (px + r, py), (px, py + r), (px - r, py)), **style)
    return Circle(px, py, r, **style)


def draw_points(view: View, result: TransformResult, ctx: MarkContext, stack: StackTops) -> tuple[list[Shape], StackTops]:
    all_sizes = [s for g in result.points for s in (g.sizes or ())]
    radius = _size_radius(all_sizes, ctx.theme.point_radius)
    shapes: list[Shape] = []
    for group in result.points:
        color = ctx.color_for(group.key)
        for i, (x, y) in enumerate(zip(group.xs, group.ys, strict=False)):
            px, py = ctx.coord.project(x, y)
            if not _finite(px, py):
                continue
            r = radius(group.sizes[i]) if group.sizes is not None else ctx.theme.point_radius
            kind = ctx.shape_for(group.shapes[i]) if group.shapes is not None else SHAPES[0]
            shapes.append(point_shape(kind, px, py, r, fill=color, theme=ctx.theme))
    return shapes, stack


def draw_lines(view: View, result: TransformResult, ctx: MarkContext, stack: StackTops) -> tuple[list[Shape], StackTops]:
    series: list[tuple[Any, Sequence[Any], Sequence[float]]] = [(s.key, s.xs, s.ys) for s in result.lines]
    for group in result.points:
        ordered = sorted(zip(group.xs, group.ys, strict=False), key=lambda p: p[0] if is_number(p[0]) else math.inf)
        series.append((group.key, [p[0] for p in ordered], [p[1] for p in ordered]))

    shapes: list[Shape] = []
    for key, xs, ys in series:
        points = [ctx.coord.project(x, y) for x, y in zip(xs, ys, strict=False)]
        points = [p for p in points if _finite(*p)]
        if len(points) < 2:
            continue
        shapes.append(Polyline(tuple(points), stroke=ctx.color_for(key), stroke_width=ctx.theme.line_width))
    return shapes, stack


def draw_text_labels(view: View, result: TransformResult, ctx: MarkContext, stack: StackTops) -> tuple[list[Shape], StackTops]:
    shapes: list[Shape] = []
    for group in result.points:
        if group.texts is None:
            continue
        color = ctx.color_for(group.key) if group.key is not None else ctx.theme.text_color
        for x, y, label in zip(group.xs, group.ys, group.texts, strict=False):
            if label is None:
                continue
            px, py = ctx.coord.project(x, y)
            if not _finite(px, py):
                continue
            shapes.append(
                Text(px, py - 3.0, str(label), fill=color, font_size=ctx.theme.font_size, font_family=ctx.theme.font_family, anchor="middle")
            )
    return shapes, stack


def _bar_polygon(ctx: MarkContext, a0: float, a1: float, base: float, top: float, color: str) -> Polygon | None:
    b0 = ctx.coord.y_data_scale(base)
    b1 = ctx.coord.y_data_scale(top)
    if not _finite(a0, a1, b0, b1):
        return None
    return Polygon(ctx.coord.rect(a0, a1, b0, b1), fill=color, opacity=ctx.theme.mark_opacity)


def _bin_bars(view: View, result: TransformResult, ctx: MarkContext, stack: StackTops) -> tuple[list[Shape], StackTops]:
    shapes: list[Shape] = []
    xs = ctx.coord.x_data_scale
    for group in result.bins:
        color = ctx.color_for(group.key)
        for b in group.bins:
            if b.count <= 0:
                continue
            poly = _bar_polygon(ctx, xs(b.x0), xs(b.x1), 0.0, float(b.count), color)
            if poly is not None:
                shapes.append(poly)
    return shapes, stack


def _category_bars(
    entries: Sequence[tuple[Any, Any, float]],
    ctx: MarkContext,
    stack: StackTops,
    *,
    stacked: bool,
) -> tuple[list[Shape], StackTops]:
    """Bars from (series key, category, height) triples laid out in category bands."""
    tops = dict(stack)
    per_category: dict[Any, list[tuple[Any, float]]] = {}
    for key, category, height in entries:
        if height != 0:
            per_category.setdefault(category, []).append((key, height))

    shapes: list[Shape] = []
    for category, bars in per_category.items():
        band = ctx.coord.x_band(category)
        if band is None:
            continue
        center = (band[0] + band[1]) / 2.0
        width = (band[1] - band[0]) * BAR_FILL_RATIO
        if stacked:
            for key, height in bars:
                # positive and negative heights stack away from zero separately
                side = (category, height > 0)
                base = tops.get(side, 0.0)
                tops[side] = base + height
                poly = _bar_polygon(ctx, center - width / 2.0, center + width / 2.0, base, base + height, ctx.color_for(key))
                if poly is not None:
                    shapes.append(poly)
            continue
        # dodge: the non-zero bars of a category share its band, centred
        slot = width / len(bars)
        left = center - width / 2.0
        for i, (key, height) in enumerate(bars):
            poly = _bar_polygon(ctx, left + i * slot, left + (i + 1) * slot, 0.0, height, ctx.color_for(key))
            if poly is not None:
                shapes.append(poly)
    return shapes, tops


def _count_bars(view: View, result: TransformResult, ctx: MarkContext, stack: StackTops) -> tuple[list[Shape], StackTops]:
    entries = [(s.key, cc.category, float(cc.count)) for s in result.counts for cc in s.counts]
    return _category_bars(entries, ctx, stack, stacked=view.position == "stack")


def _value_bars(view: View, result: TransformResult, ctx: MarkContext, stack: StackTops) -> tuple[list[Shape], StackTops]:
    entries = [(g.key, x, float(y)) for g in result.points for x, y in zip(g.xs, g.ys, strict=False)]
    return _category_bars(entries, ctx, stack, stacked=view.position == "stack")


BAR_LAYOUTS: dict[str, MarkDrawer] = {
    "bins": _bin_bars,
    "counts": _count_bars,
    "points": _value_bars,
}


def draw_bars(view: View, result: TransformResult, ctx: MarkContext, stack: StackTops) -> tuple[list[Shape], StackTops]:
    layout = BAR_LAYOUTS.get(result.kind)
    if layout is None:
        return [], stack
    return layout(view, result, ctx, stack)


MARK_DRAWERS: dict[str, MarkDrawer] = {
    "point": draw_points,
    "bar": draw_bars,
    "rect": draw_bars,
    "line": draw_lines,
    "text": draw_text_labels,
}


def _annotation_pixel(scale: Any, value: Any) -> float | None:
    if value is None or not is_number(value):
        return None
    domain = getattr(scale, "domain", None)
    if not isinstance(domain, NumericDomain) or not domain.contains(float(value)):
        return None
    px = scale(value)
    return px if math.isfinite(px) else None


def _rule_h(view: View, ctx: MarkContext) -> list[Shape]:
    b = _annotation_pixel(ctx.coord.y_data_scale, view.value)
    if b is None:
        return []
    return [Polyline(ctx.coord.across(b), stroke=ctx.theme.annotation_color, stroke_width=1.0, dasharray=RULE_DASHARRAY)]


def _rule_v(view: View, ctx: MarkContext) -> list[Shape]:
    a = _annotation_pixel(ctx.coord.x_data_scale, view.value)
    if a is None:
        return []
    return [Polyline(ctx.coord.along(a), stroke=ctx.theme.annotation_color, stroke_width=1.0, dasharray=RULE_DASHARRAY)]


def _band_h(view: View, ctx: MarkContext) -> list[Shape]:
    scale = ctx.coord.y_data_scale
    domain = getattr(scale, "domain", None)
    if not isinstance(domain, NumericDomain) or not (is_number(view.y1) and is_number(view.y2)):
        return []
    lo = max(min(float(view.y1), float(view.y2)), domain.lo)
    hi = min(max(float(view.y1), float(view.y2)), domain.hi)
    if lo >= hi:
        return []
    a0, a1 = ctx.coord.x_data_scale.range
    b0, b1 = scale(lo), scale(hi)
    if not _finite(b0, b1):
        return []
    return [Polygon(ctx.coord.rect(a0, a1, b0, b1), fill=ctx.theme.annotation_color, opacity=ctx.theme.band_opacity)]


ANNOTATION_DRAWERS: dict[str, Callable[[View, MarkContext], list[Shape]]] = {
    "rule-h": _rule_h,
    "rule-v": _rule_v,
    "band-h": _band_h,
}


def draw_annotation(view: View, ctx: MarkContext) -> list[Shape]:
    return ANNOTATION_DRAWERS[str(view.mark)](view, ctx)


def legend_swatch(kind: str, center: Point, color: str, theme: Theme) -> Shape:
    return point_shape(kind, center[0], center[1], 4.0, fill=color, theme=theme)
