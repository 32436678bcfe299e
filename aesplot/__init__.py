from .adapters import Dataset, as_dataset
from .algebra import (
    auto,
    bar,
    cross,
    diagonal,
    distribution,
    facet,
    facet_grid,
    facet_rows,
    hband,
    histogram,
    hline,
    infer_defaults,
    layer,
    layers,
    line_mark,
    linear,
    pairs,
    point,
    set_coord,
    set_scale,
    smooth,
    stack,
    stacked_bar,
    text_label,
    value_bar,
    views,
    vline,
    when_diagonal,
    when_off_diagonal,
    where,
    where_not,
)
from .coords import PanelCoord, build_coord, build_panel_coord, munch_arc, polar_pixel_projector
from .domains import CategoricalDomain, NumericDomain, merge_domains, pad_domain, stack_extent, union_domains
from .errors import DomainError, PlotDataError
from .layout import PlotOptions, plot
from .panel import PanelGraphics, PanelOptions, render_panel
from .scales import BandScale, LinearScale, LogScale, build_scale
from .scene import Canvas, to_svg
from .stats import TransformResult, compute
from .theme import DEFAULT_THEME, Theme, validate_theme
from .view import ScaleSpec, View

__all__ = [
    "BandScale",
    "Canvas",
    "CategoricalDomain",
    "DEFAULT_THEME",
    "Dataset",
    "DomainError",
    "LinearScale",
    "LogScale",
    "NumericDomain",
    "PanelCoord",
    "PanelGraphics",
    "PanelOptions",
    "PlotDataError",
    "PlotOptions",
    "ScaleSpec",
    "Theme",
    "TransformResult",
    "View",
    "as_dataset",
    "auto",
    "bar",
    "build_coord",
    "build_panel_coord",
    "build_scale",
    "compute",
    "cross",
    "diagonal",
    "distribution",
    "facet",
    "facet_grid",
    "facet_rows",
    "hband",
    "histogram",
    "hline",
    "infer_defaults",
    "layer",
    "layers",
    "line_mark",
    "linear",
    "merge_domains",
    "munch_arc",
    "pad_domain",
    "pairs",
    "plot",
    "point",
    "polar_pixel_projector",
    "render_panel",
    "set_coord",
    "set_scale",
    "smooth",
    "stack",
    "stack_extent",
    "stacked_bar",
    "text_label",
    "to_svg",
    "union_domains",
    "validate_theme",
    "value_bar",
    "views",
    "vline",
    "when_diagonal",
    "when_off_diagonal",
    "where",
    "where_not",
]
