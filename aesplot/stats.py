from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
import logging
import math
from typing import Any, Literal

import numpy as np
import pandas as pd
from statsmodels.nonparametric.smoothers_lowess import lowess

from aesplot.adapters import Dataset, is_missing, is_number, sort_labels
from aesplot.domains import (
    FALLBACK_DOMAIN,
    CategoricalDomain,
    Domain,
    NumericDomain,
    numeric_extent,
    union_domains,
)
from aesplot.view import View


LOGGER = logging.getLogger(__name__)

SMOOTH_SAMPLES = 80
SMOOTH_MIN_POINTS = 4
DEFAULT_BANDWIDTH = 2.0 / 3.0
DEFAULT_BINS = "sturges"

ResultKind = Literal["points", "bins", "lines", "counts"]


@dataclass(frozen=True)
class PointGroup:
    key: Any
    xs: tuple[Any, ...]
    ys: tuple[float, ...]
    sizes: tuple[Any, ...] | None = None
    shapes: tuple[Any, ...] | None = None
    texts: tuple[Any, ...] | None = None

    def __len__(self) -> int:
        return len(self.xs)


@dataclass(frozen=True)
class Bin:
    x0: float
    x1: float
    count: int


@dataclass(frozen=True)
class BinGroup:
    key: Any
    bins: tuple[Bin, ...]


@dataclass(frozen=True)
class LineSegment:
    key: Any
    xs: tuple[float, ...]
    ys: tuple[float, ...]


@dataclass(frozen=True)
class CategoryCount:
    category: Any
    count: int


@dataclass(frozen=True)
class CountSeries:
    key: Any
    counts: tuple[CategoryCount, ...]


@dataclass(frozen=True)
class TransformResult:
    kind: ResultKind
    x_domain: Domain
    y_domain: Domain
    points: tuple[PointGroup, ...] = ()
    bins: tuple[BinGroup, ...] = ()
    lines: tuple[LineSegment, ...] = ()
    counts: tuple[CountSeries, ...] = ()
    categories: tuple[Any, ...] = field(default=())

    @property
    def is_empty(self) -> bool:
        return not (self.points or self.bins or self.lines or self.counts)


def compute(view: View) -> TransformResult:
    """Run the view's statistical transform and return its payload and axis domains."""
    handler = STAT_HANDLERS[view.resolved_stat]
    return handler(view)


def stack_contributions(result: TransformResult) -> Iterator[tuple[Any, float]]:
    if result.kind == "counts":
        for series in result.counts:
            for cc in series.counts:
                yield cc.category, float(cc.count)
    elif result.kind == "points" and isinstance(result.x_domain, CategoricalDomain):
        for group in result.points:
            yield from zip(group.xs, group.ys)


def _empty(kind: ResultKind, x_domain: Domain = FALLBACK_DOMAIN, y_domain: Domain = FALLBACK_DOMAIN) -> TransformResult:
    return TransformResult(kind=kind, x_domain=x_domain, y_domain=y_domain)


def _is_finite_number(value: Any) -> bool:
    return is_number(value) and math.isfinite(float(value))


def _x_is_categorical(view: View, values: list[Any]) -> bool:
    if view.x_type == "categorical":
        return True
    present = [v for v in values if not is_missing(v)]
    return bool(present) and not any(is_number(v) for v in present)


def _channel(view: View, name: str) -> list[Any] | None:
    column = getattr(view, name)
    if column is None or view.data is None:
        return None
    return view.data.column(column)


def _clean_rows(view: View, data: Dataset, *, categorical_x: bool, need_y: bool) -> list[dict[str, Any]]:
    """Rows of `data` with a usable x (and y), other channels carried along."""
    xs = data.column(view.x)
    ys = data.column(view.y) if need_y else None
    extras = {name: _channel(view, name) for name in ("color", "size", "shape", "text")}

    rows: list[dict[str, Any]] = []
    for i, x in enumerate(xs):
        if categorical_x:
            if is_missing(x):
                continue
            if view.x_type == "categorical":
                x = str(x)
        elif not _is_finite_number(x):
            continue
        row: dict[str, Any] = {"x": x if categorical_x else float(x)}
        if ys is not None:
            if not _is_finite_number(ys[i]):
                continue
            row["y"] = float(ys[i])
        for name, values in extras.items():
            if values is not None:
                value = values[i]
                row[name] = None if is_missing(value) else value
        rows.append(row)
    return rows


def _group_rows(rows: list[dict[str, Any]], *, sort: bool = False) -> list[tuple[Any, list[dict[str, Any]]]]:
    groups: dict[Any, list[dict[str, Any]]] = {}
    for row in rows:
        groups.setdefault(row.get("color"), []).append(row)
    keys = list(groups)
    if sort:
        keys = sort_labels([k for k in keys if k is not None]) + ([None] if None in groups else [])
    return [(k, groups[k]) for k in keys]


def _compute_identity(view: View) -> TransformResult:
    if view.data is None or view.x is None or view.y is None:
        return _empty("points")
    categorical_x = _x_is_categorical(view, view.data.column(view.x))
    rows = _clean_rows(view, view.data, categorical_x=categorical_x, need_y=True)
    if not rows:
        LOGGER.debug("identity: no usable rows for x=%s y=%s", view.x, view.y)
        return _empty("points")

    groups = []
    for key, members in _group_rows(rows):
        groups.append(
            PointGroup(
                key=key,
                xs=tuple(r["x"] for r in members),
                ys=tuple(r["y"] for r in members),
                sizes=tuple(r.get("size") for r in members) if view.size is not None else None,
                shapes=tuple(r.get("shape") for r in members) if view.shape is not None else None,
                texts=tuple(r.get("text") for r in members) if view.text is not None else None,
            )
        )

    if categorical_x:
        x_domain: Domain = CategoricalDomain(tuple(dict.fromkeys(r["x"] for r in rows)))
    else:
        x_domain = numeric_extent(r["x"] for r in rows) or FALLBACK_DOMAIN
    y_domain = numeric_extent(r["y"] for r in rows) or FALLBACK_DOMAIN
    return TransformResult(kind="points", x_domain=x_domain, y_domain=y_domain, points=tuple(groups))


def _compute_bin(view: View) -> TransformResult:
    if view.data is None or view.x is None:
        return _empty("bins")
    rows = _clean_rows(view, view.data, categorical_x=False, need_y=False)
    if not rows:
        LOGGER.debug("bin: no numeric values in column %s", view.x)
        return _empty("bins")

    rule = view.bins if view.bins is not None else DEFAULT_BINS
    groups: list[BinGroup] = []
    for key, members in _group_rows(rows):
        values = np.asarray([r["x"] for r in members], dtype=np.float64)
        counts, edges = np.histogram(values, bins=rule)
        bins = tuple(
            Bin(x0=float(edges[i]), x1=float(edges[i + 1]), count=int(counts[i]))
            for i in range(counts.size)
        )
        groups.append(BinGroup(key=key, bins=bins))

    x_domain = numeric_extent(v for g in groups for b in g.bins for v in (b.x0, b.x1)) or FALLBACK_DOMAIN
    max_count = max((b.count for g in groups for b in g.bins), default=0)
    y_domain = NumericDomain(0.0, float(max(1, max_count)))
    return TransformResult(kind="bins", x_domain=x_domain, y_domain=y_domain, bins=tuple(groups))


def _raw_numeric_rows(view: View, stat: str) -> list[dict[str, Any]] | None:
    if view.data is None or view.x is None or view.y is None:
        return None
    rows = _clean_rows(view, view.data, categorical_x=False, need_y=True)
    if not rows:
        LOGGER.debug("%s: no usable rows for x=%s y=%s", stat, view.x, view.y)
        return None
    return rows


def _fit_line(key: Any, members: list[dict[str, Any]]) -> LineSegment | None:
    xs = np.asarray([r["x"] for r in members], dtype=np.float64)
    ys = np.asarray([r["y"] for r in members], dtype=np.float64)
    if xs.size < 2:
        LOGGER.debug("regress: group %s has %s point(s); skipped", key, xs.size)
        return None
    x_mean = float(np.mean(xs))
    sxx = float(np.sum((xs - x_mean) ** 2))
    if sxx == 0.0:
        LOGGER.debug("regress: group %s has zero x variance; skipped", key)
        return None
    slope = float(np.sum((xs - x_mean) * (ys - np.mean(ys)))) / sxx
    intercept = float(np.mean(ys)) - slope * x_mean
    x0, x1 = float(np.min(xs)), float(np.max(xs))
    return LineSegment(key=key, xs=(x0, x1), ys=(intercept + slope * x0, intercept + slope * x1))


def _compute_regress(view: View) -> TransformResult:
    rows = _raw_numeric_rows(view, "regress")
    if rows is None:
        return _empty("lines")
    lines = tuple(seg for key, members in _group_rows(rows) if (seg := _fit_line(key, members)) is not None)
    return _line_result(rows, lines)


def _smooth_group(key: Any, members: list[dict[str, Any]], frac: float) -> LineSegment | None:
    if len(members) < SMOOTH_MIN_POINTS:
        LOGGER.debug("smooth: group %s has %s point(s); skipped", key, len(members))
        return None
    frame = pd.DataFrame({"x": [r["x"] for r in members], "y": [r["y"] for r in members]})
    averaged = frame.groupby("x", sort=True)["y"].mean()
    if averaged.size < SMOOTH_MIN_POINTS:
        LOGGER.debug("smooth: group %s has %s distinct x value(s); skipped", key, averaged.size)
        return None
    xs = averaged.index.to_numpy(dtype=np.float64)
    ys = averaged.to_numpy(dtype=np.float64)
    grid = np.linspace(xs[0], xs[-1], SMOOTH_SAMPLES)
    fitted = lowess(ys, xs, frac=frac, xvals=grid)
    keep = np.isfinite(fitted)
    if int(np.count_nonzero(keep)) < 2:
        LOGGER.debug("smooth: group %s produced no finite fit", key)
        return None
    return LineSegment(key=key, xs=tuple(grid[keep].tolist()), ys=tuple(fitted[keep].tolist()))


def _compute_smooth(view: View) -> TransformResult:
    rows = _raw_numeric_rows(view, "smooth")
    if rows is None:
        return _empty("lines")
    frac = float(view.bandwidth) if view.bandwidth is not None else DEFAULT_BANDWIDTH
    lines = tuple(
        seg for key, members in _group_rows(rows) if (seg := _smooth_group(key, members, frac)) is not None
    )
    return _line_result(rows, lines)


def _line_result(rows: list[dict[str, Any]], lines: tuple[LineSegment, ...]) -> TransformResult:
    x_domain = numeric_extent(r["x"] for r in rows) or FALLBACK_DOMAIN
    y_raw = numeric_extent(r["y"] for r in rows) or FALLBACK_DOMAIN
    y_fit = numeric_extent(y for seg in lines for y in seg.ys)
    return TransformResult(
        kind="lines",
        x_domain=x_domain,
        y_domain=union_domains([y_raw, y_fit]),
        lines=lines,
    )


def _compute_count(view: View) -> TransformResult:
    if view.data is None or view.x is None:
        return _empty("counts", x_domain=CategoricalDomain(()))
    rows = _clean_rows(view, view.data, categorical_x=True, need_y=False)
    if not rows:
        LOGGER.debug("count: no values in column %s", view.x)
        return _empty("counts", x_domain=CategoricalDomain(()))

    categories = tuple(sort_labels(list(dict.fromkeys(r["x"] for r in rows))))
    series: list[CountSeries] = []
    for key, members in _group_rows(rows, sort=True):
        tally: dict[Any, int] = {}
        for r in members:
            tally[r["x"]] = tally.get(r["x"], 0) + 1
        series.append(CountSeries(key=key, counts=tuple(CategoryCount(c, tally.get(c, 0)) for c in categories)))

    max_count = max((cc.count for s in series for cc in s.counts), default=0)
    return TransformResult(
        kind="counts",
        x_domain=CategoricalDomain(categories),
        y_domain=NumericDomain(0.0, float(max(1, max_count))),
        counts=tuple(series),
        categories=categories,
    )


STAT_HANDLERS: dict[str, Callable[[View], TransformResult]] = {
    "identity": _compute_identity,
    "bin": _compute_bin,
    "regress": _compute_regress,
    "smooth": _compute_smooth,
    "count": _compute_count,
}
