from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
import logging
from typing import Any, Literal

from aesplot.coords import PanelCoord, build_panel_coord
from aesplot.domains import (
    Domain,
    NumericDomain,
    domain_from_explicit,
    pad_domain,
    stack_extent,
    union_domains,
)
from aesplot.errors import DomainError
from aesplot.marks import MARK_DRAWERS, MarkContext, StackTops, draw_annotation
from aesplot.scene import Group, Rect, Shape, Text, group
from aesplot.stats import TransformResult, compute, stack_contributions
from aesplot.theme import DEFAULT_THEME, Theme
from aesplot.view import DEFAULT_SCALE, CoordType, ScaleSpec, View


LOGGER = logging.getLogger(__name__)

Axis = Literal["x", "y"]


@dataclass(frozen=True)
class PanelOptions:
    """Per-panel inputs decided by the caller (usually the layout composer)."""

    x_domain: Domain | None = None
    y_domain: Domain | None = None
    show_x_ticks: bool = True
    show_y_ticks: bool = True
    color_categories: tuple[Any, ...] | None = None
    shape_categories: tuple[Any, ...] | None = None
    coord: CoordType | None = None
    theme: Theme = DEFAULT_THEME
    # transform results already computed for the data layers, in layer order
    results: tuple[TransformResult, ...] | None = None


@dataclass(frozen=True)
class PanelGraphics:
    group: Group
    x_domain: Domain | None
    y_domain: Domain | None
    results: tuple[TransformResult, ...]
    diagnostic: str | None = None
    coord: PanelCoord | None = None


def data_views(views: Iterable[View]) -> list[View]:
    return [v for v in views if not v.is_annotation]


def panel_coord_type(views: Iterable[View]) -> CoordType:
    for view in views:
        if view.coord is not None:
            return view.coord
    return "cartesian"


def axis_scale_spec(views: Iterable[View], axis: Axis) -> ScaleSpec:
    for view in views:
        spec = view.x_scale if axis == "x" else view.y_scale
        if spec is not None:
            return spec
    return DEFAULT_SCALE


def _value_y_domain(view: View, result: TransformResult) -> Domain:
    # value bars grow from zero on linear axes
    if (
        view.mark in ("bar", "rect")
        and result.kind == "points"
        and isinstance(result.y_domain, NumericDomain)
        and view.y_scale_spec.type == "linear"
    ):
        return union_domains([result.y_domain, NumericDomain(0.0, 0.0)])
    return result.y_domain


def raw_axis_domain(views: Sequence[View], results: Sequence[TransformResult], axis: Axis) -> Domain:
    """Unpadded union of the results' domains on one axis.

    The y-axis of a panel holding stacked layers spans the tallest cumulative
    stack instead of the tallest single bar.
    """
    if axis == "x":
        return union_domains(r.x_domain for r in results)
    stacked = [r for v, r in zip(views, results, strict=False) if v.position == "stack"]
    if not stacked:
        return union_domains(_value_y_domain(v, r) for v, r in zip(views, results, strict=False))
    others = [_value_y_domain(v, r) for v, r in zip(views, results, strict=False) if v.position != "stack"]
    extent = stack_extent(c for r in stacked for c in stack_contributions(r))
    return union_domains([extent, *others])


def finish_axis_domain(raw: Domain, spec: ScaleSpec) -> Domain:
    if spec.domain is not None:
        return domain_from_explicit(spec.domain)
    return pad_domain(raw, spec.type)


def axis_domain(views: Sequence[View], results: Sequence[TransformResult], axis: Axis) -> Domain:
    spec = axis_scale_spec(views, axis)
    if spec.domain is not None:
        return domain_from_explicit(spec.domain)
    return finish_axis_domain(raw_axis_domain(views, results, axis), spec)


def color_categories(results: Iterable[TransformResult]) -> tuple[Any, ...]:
    keys: dict[Any, None] = {}
    for r in results:
        for series in (*r.points, *r.bins, *r.lines, *r.counts):
            if series.key is not None:
                keys.setdefault(series.key, None)
    return tuple(keys)


def shape_categories(results: Iterable[TransformResult]) -> tuple[Any, ...]:
    keys: dict[Any, None] = {}
    for r in results:
        for g in r.points:
            for s in g.shapes or ():
                if s is not None:
                    keys.setdefault(s, None)
    return tuple(keys)


def diagnostic_group(message: str, panel_width: float, panel_height: float, margin: float, theme: Theme) -> Group:
    return group(
        [
            Rect(
                margin,
                margin,
                max(0.0, panel_width - 2.0 * margin),
                max(0.0, panel_height - 2.0 * margin),
                fill=theme.background,
                stroke=theme.diagnostic_color,
                stroke_width=1.0,
            ),
            Text(
                panel_width / 2.0,
                panel_height / 2.0,
                f"cannot draw panel: {message}",
                fill=theme.diagnostic_color,
                font_size=theme.font_size,
                font_family=theme.font_family,
                anchor="middle",
            ),
        ],
        name="diagnostic",
    )


def render_panel(
    views: Sequence[View],
    panel_width: float,
    panel_height: float,
    margin: float,
    options: PanelOptions | None = None,
) -> PanelGraphics:
    """Render one grid cell: transforms, merged domains, scales, projector, marks."""
    options = options or PanelOptions()
    theme = options.theme
    layers = data_views(views)
    annotations = [v for v in views if v.is_annotation]
    results = options.results if options.results is not None else tuple(compute(v) for v in layers)

    try:
        x_domain = options.x_domain if options.x_domain is not None else axis_domain(layers, results, "x")
        y_domain = options.y_domain if options.y_domain is not None else axis_domain(layers, results, "y")
        coord = build_panel_coord(
            options.coord or panel_coord_type(views),
            x_domain,
            y_domain,
            panel_width,
            panel_height,
            margin,
            axis_scale_spec(layers, "x"),
            axis_scale_spec(layers, "y"),
        )
    except DomainError as exc:
        LOGGER.warning("panel not drawn (%s layer(s)): %s", len(layers), exc)
        return PanelGraphics(
            group=diagnostic_group(str(exc), panel_width, panel_height, margin, theme),
            x_domain=None,
            y_domain=None,
            results=results,
            diagnostic=str(exc),
        )

    ctx = MarkContext(
        coord=coord,
        theme=theme,
        color_categories=options.color_categories if options.color_categories is not None else color_categories(results),
        shape_categories=options.shape_categories if options.shape_categories is not None else shape_categories(results),
    )

    background = Rect(margin, margin, panel_width - 2.0 * margin, panel_height - 2.0 * margin, fill=theme.background)
    grid, x_labels, y_labels = coord.decorations(theme)

    annotation_shapes: list[Shape] = []
    for view in annotations:
        annotation_shapes.extend(draw_annotation(view, ctx))

    mark_shapes: list[Shape] = []
    stack: StackTops = {}
    for view, result in zip(layers, results, strict=False):
        drawer = MARK_DRAWERS[view.mark or "point"]
        shapes, stack = drawer(view, result, ctx, stack)
        mark_shapes.extend(shapes)

    children: list[Shape] = [
        background,
        group(grid, name="grid"),
        group(annotation_shapes, name="annotations"),
        group(mark_shapes, name="marks"),
    ]
    tick_labels = [*(x_labels if options.show_x_ticks else ()), *(y_labels if options.show_y_ticks else ())]
    if options.show_x_ticks or options.show_y_ticks:
        children.append(group(tick_labels, name="ticks"))
    return PanelGraphics(
        group=group(children, name="panel"),
        x_domain=x_domain,
        y_domain=y_domain,
        results=results,
        coord=coord,
    )
