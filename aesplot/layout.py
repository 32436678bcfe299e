from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, fields, replace
import logging
from typing import Any, Literal

from aesplot.domains import Domain, union_domains
from aesplot.errors import DomainError
from aesplot.marks import SHAPES, legend_swatch
from aesplot.panel import (
    PanelGraphics,
    PanelOptions,
    axis_scale_spec,
    color_categories,
    data_views,
    finish_axis_domain,
    panel_coord_type,
    raw_axis_domain,
    render_panel,
    shape_categories,
)
from aesplot.scene import Canvas, Shape, Text, group
from aesplot.stats import TransformResult, compute
from aesplot.text_metrics import text_width
from aesplot.theme import DEFAULT_THEME, Theme, validate_theme
from aesplot.view import COORD_TYPES, View


LOGGER = logging.getLogger(__name__)

ScaleMode = Literal["shared", "free", "free-x", "free-y"]
SCALE_MODES = ("shared", "free", "free-x", "free-y")
ArrangementKind = Literal["single", "grid", "facet"]

LEGEND_MIN_WIDTH = 100.0
LEGEND_OFFSET_X = 10.0
LEGEND_TOP = 30.0
LEGEND_ROW = 16.0
HEADER_BASELINE = 12.0


def format_name(name: Any) -> str:
    """Column name as shown in headers and legend titles."""
    return str(name).replace("-", " ").replace("_", " ")


@dataclass(frozen=True)
class PlotOptions:
    width: float = 600.0
    height: float = 400.0
    margin: float = 25.0
    scales: ScaleMode = "shared"
    coord: str | None = None
    theme: Theme = DEFAULT_THEME

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("plot width/height must be > 0")
        if self.margin < 0:
            raise ValueError("margin must be >= 0")
        if self.scales not in SCALE_MODES:
            raise ValueError(f"scales must be one of {SCALE_MODES}, got {self.scales!r}")
        if self.coord is not None and self.coord not in COORD_TYPES:
            raise ValueError(f"unsupported coord: {self.coord!r}")
        if isinstance(self.theme, Mapping):
            object.__setattr__(self, "theme", validate_theme(self.theme))
        elif not isinstance(self.theme, Theme):
            raise ValueError("theme must be a Theme or a mapping of theme overrides")


PLOT_OPTION_FIELDS = frozenset(f.name for f in fields(PlotOptions))


@dataclass(frozen=True)
class Arrangement:
    kind: ArrangementKind
    row_keys: tuple[Any, ...]
    col_keys: tuple[Any, ...]
    cells: dict[tuple[int, int], list[View]] = field(default_factory=dict)

    @property
    def rows(self) -> int:
        return len(self.row_keys)

    @property
    def cols(self) -> int:
        return len(self.col_keys)


def _first_seen(values: Iterable[Any]) -> tuple[Any, ...]:
    return tuple(dict.fromkeys(values))


def arrange(views: Sequence[View]) -> Arrangement:
    """Pick single / variable grid / facet layout and assign views to cells."""
    layers = data_views(views)
    annotations = [v for v in views if v.is_annotation]

    if any(v.facet_row is not None or v.facet_col is not None for v in layers):
        row_keys = _first_seen(v.facet_row for v in layers)
        col_keys = _first_seen(v.facet_col for v in layers)
        cells = {
            (r, c): [v for v in layers if v.facet_row == rk and v.facet_col == ck] + annotations
            for r, rk in enumerate(row_keys)
            for c, ck in enumerate(col_keys)
        }
        return Arrangement("facet", row_keys, col_keys, cells)

    xs = _first_seen(v.x for v in layers)
    ys = _first_seen(v.y for v in layers)
    if len(xs) > 1 or len(ys) > 1:
        cells = {
            (r, c): [v for v in layers if v.y == yk and v.x == xk] + annotations
            for r, yk in enumerate(ys)
            for c, xk in enumerate(xs)
        }
        return Arrangement("grid", ys, xs, cells)

    return Arrangement("single", (None,), (None,), {(0, 0): list(views)})


def _shared_axes(arrangement: Arrangement, scales: ScaleMode) -> tuple[bool, bool]:
    share_x = scales in ("shared", "free-y")
    share_y = scales in ("shared", "free-x")
    if arrangement.kind == "grid":
        # different variables per column/row only share when there is one of them
        share_x = share_x and arrangement.cols == 1
        share_y = share_y and arrangement.rows == 1
    return share_x, share_y


def _shared_domain(
    cells: Mapping[tuple[int, int], list[View]],
    results: Mapping[tuple[int, int], tuple[TransformResult, ...]],
    axis: Literal["x", "y"],
) -> Domain | None:
    raws: list[Domain] = []
    all_layers: list[View] = []
    for key, cell_views in cells.items():
        layers = data_views(cell_views)
        all_layers.extend(layers)
        try:
            raws.append(raw_axis_domain(layers, results[key], axis))
        except DomainError as exc:
            LOGGER.debug("cell %s left out of the shared %s domain: %s", key, axis, exc)
    if not raws:
        return None
    try:
        return finish_axis_domain(union_domains(raws), axis_scale_spec(all_layers, axis))
    except DomainError as exc:
        LOGGER.warning("no shared %s domain: %s", axis, exc)
        return None


def _legend(
    views: Sequence[View],
    colors: tuple[Any, ...],
    shapes: tuple[Any, ...],
    x: float,
    theme: Theme,
) -> list[Shape]:
    out: list[Shape] = []
    y = LEGEND_TOP
    color_title = next((v.color for v in views if v.color is not None), None)
    if colors:
        if color_title is not None:
            out.append(Text(x, y - 12.0, format_name(color_title), fill=theme.text_color, font_size=theme.font_size, font_family=theme.font_family))
        for i, category in enumerate(colors):
            cy = y + i * LEGEND_ROW
            out.append(legend_swatch(SHAPES[0], (x + 5.0, cy), theme.color_for(category, colors), theme))
            out.append(Text(x + 14.0, cy + 3.0, str(category), fill=theme.text_color, font_size=theme.font_size, font_family=theme.font_family))
        y += len(colors) * LEGEND_ROW + LEGEND_ROW

    shape_title = next((v.shape for v in views if v.shape is not None), None)
    if shapes:
        if shape_title is not None:
            out.append(Text(x, y - 12.0, format_name(shape_title), fill=theme.text_color, font_size=theme.font_size, font_family=theme.font_family))
        for i, category in enumerate(shapes):
            cy = y + i * LEGEND_ROW
            out.append(legend_swatch(SHAPES[i % len(SHAPES)], (x + 5.0, cy), theme.default_color, theme))
            out.append(Text(x + 14.0, cy + 3.0, str(category), fill=theme.text_color, font_size=theme.font_size, font_family=theme.font_family))
    return out


def _legend_width(views: Sequence[View], labels: Iterable[Any], theme: Theme) -> float:
    titles = [format_name(v.color) for v in views if v.color is not None] + [format_name(v.shape) for v in views if v.shape is not None]
    widest = max(
        (text_width(str(s), font_family=theme.font_family, font_size_px=theme.font_size) for s in [*labels, *titles]),
        default=0,
    )
    return max(LEGEND_MIN_WIDTH, widest + 14.0 + LEGEND_OFFSET_X * 2.0)


def _headers(arrangement: Arrangement, pw: float, ph: float, theme: Theme, polar: bool) -> list[Shape]:
    if arrangement.kind == "single" or (arrangement.kind == "grid" and polar):
        return []
    out: list[Shape] = []
    # grid keys are column names, facet keys are data values
    label = format_name if arrangement.kind == "grid" else str
    style = {"fill": theme.text_color, "font_size": theme.header_font_size, "font_family": theme.font_family}
    for c, key in enumerate(arrangement.col_keys):
        if key is not None:
            out.append(Text(c * pw + pw / 2.0, HEADER_BASELINE, label(key), anchor="middle", **style))
    x = arrangement.cols * pw - 6.0
    for r, key in enumerate(arrangement.row_keys):
        if key is not None:
            out.append(Text(x, r * ph + ph / 2.0, label(key), anchor="middle", rotate=90.0, **style))
    return out


def plot(views: View | Iterable[View], options: PlotOptions | None = None, **overrides: Any) -> Canvas:
    """Lay out panels for `views` and compose them with headers and legends."""
    opts = options or PlotOptions()
    if overrides:
        unknown = sorted(k for k in overrides if k not in PLOT_OPTION_FIELDS)
        if unknown:
            raise ValueError(f"unknown plot option(s): {', '.join(unknown)}")
        opts = replace(opts, **overrides)

    view_list = [views] if isinstance(views, View) else list(views)
    if opts.coord is not None:
        view_list = [v.merge({"coord": opts.coord}) for v in view_list]
    theme = opts.theme

    arrangement = arrange(view_list)
    rows, cols = arrangement.rows, arrangement.cols
    pw = opts.width / cols
    ph = opts.height / rows
    if arrangement.kind == "grid" and rows > 1 and cols > 1:
        pw = ph = min(pw, ph)

    results = {key: tuple(compute(v) for v in data_views(cell)) for key, cell in arrangement.cells.items()}
    all_results = [r for cell in results.values() for r in cell]
    colors = color_categories(all_results)
    shapes = shape_categories(all_results)

    share_x, share_y = _shared_axes(arrangement, opts.scales)
    x_domain = _shared_domain(arrangement.cells, results, "x") if share_x else None
    y_domain = _shared_domain(arrangement.cells, results, "y") if share_y else None
    LOGGER.debug("layout %s: %sx%s panels, shared x=%s y=%s", arrangement.kind, rows, cols, x_domain, y_domain)

    children: list[Shape] = []
    diagnostics: list[str] = []
    polar = False
    for (r, c), cell in sorted(arrangement.cells.items()):
        if not data_views(cell) and arrangement.kind != "single":
            continue
        coord_type = panel_coord_type(cell)
        polar = polar or coord_type == "polar"
        # flip puts the data x-axis on the vertical side
        shared_h, shared_v = (share_y, share_x) if coord_type == "flip" else (share_x, share_y)
        panel: PanelGraphics = render_panel(
            cell,
            pw,
            ph,
            opts.margin,
            PanelOptions(
                x_domain=x_domain,
                y_domain=y_domain,
                color_categories=colors,
                shape_categories=shapes,
                theme=theme,
                results=results[(r, c)],
                show_x_ticks=r == rows - 1 or not shared_h,
                show_y_ticks=c == 0 or not shared_v,
            ),
        )
        if panel.diagnostic is not None:
            diagnostics.append(f"panel ({r}, {c}): {panel.diagnostic}")
        children.append(group([panel.group], translate=(c * pw, r * ph), name=f"panel-{r}-{c}"))

    children.append(group(_headers(arrangement, pw, ph, theme, polar), name="headers"))

    width = cols * pw
    if colors or shapes:
        legend_x = width + LEGEND_OFFSET_X
        children.append(group(_legend(view_list, colors, shapes, legend_x, theme), name="legend"))
        width += _legend_width(view_list, [*colors, *shapes], theme)

    return Canvas(width=width, height=rows * ph, root=group(children, name="plot"), diagnostics=tuple(diagnostics))
