from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from aesplot.adapters import as_dataset
from aesplot.errors import PlotDataError
from aesplot.view import ANNOTATION_MARKS, VIEW_FIELDS, ScaleSpec, View


LayerSpec = Mapping[str, Any]
ViewPredicate = Callable[[View], bool]


def _spec(base: Mapping[str, Any], options: Mapping[str, Any]) -> dict[str, Any]:
    unknown = sorted(str(k) for k in options if k not in VIEW_FIELDS)
    if unknown:
        raise PlotDataError(f"unknown view field(s): {', '.join(unknown)}")
    return {**base, **options}


# Layer specs ---------------------------------------------------------------


def point(**options: Any) -> dict[str, Any]:
    return _spec({"mark": "point", "stat": "identity"}, options)


def linear(**options: Any) -> dict[str, Any]:
    return _spec({"mark": "line", "stat": "regress"}, options)


def smooth(**options: Any) -> dict[str, Any]:
    return _spec({"mark": "line", "stat": "smooth"}, options)


def histogram(**options: Any) -> dict[str, Any]:
    return _spec({"mark": "bar", "stat": "bin"}, options)


def line_mark(**options: Any) -> dict[str, Any]:
    return _spec({"mark": "line", "stat": "identity"}, options)


def bar(**options: Any) -> dict[str, Any]:
    return _spec({"mark": "rect", "stat": "count"}, options)


def value_bar(**options: Any) -> dict[str, Any]:
    """Bars over pre-aggregated values: categorical x, numeric y."""
    return _spec({"mark": "rect", "stat": "identity"}, options)


def stacked_bar(**options: Any) -> dict[str, Any]:
    return _spec({"mark": "rect", "stat": "count", "position": "stack"}, options)


def text_label(column: Any, **options: Any) -> dict[str, Any]:
    return _spec({"mark": "text", "stat": "identity", "text": column}, options)


def hline(value: float, **options: Any) -> dict[str, Any]:
    return _spec({"mark": "rule-h", "value": value}, options)


def vline(value: float, **options: Any) -> dict[str, Any]:
    return _spec({"mark": "rule-v", "value": value}, options)


def hband(y1: float, y2: float, **options: Any) -> dict[str, Any]:
    return _spec({"mark": "band-h", "y1": y1, "y2": y2}, options)


# View collections ----------------------------------------------------------


def views(data: Any, pairs: Iterable[tuple[Any, Any]]) -> list[View]:
    dataset = as_dataset(data)
    return [View(data=dataset, x=x, y=y) for x, y in pairs]


def cross(xs: Sequence[Any], ys: Sequence[Any]) -> list[tuple[Any, Any]]:
    return [(x, y) for y in ys for x in xs]


def pairs(columns: Sequence[Any]) -> list[tuple[Any, Any]]:
    cols = list(columns)
    return [(a, b) for i, a in enumerate(cols) for b in cols[i + 1 :]]


def distribution(data: Any, *columns: Any) -> list[View]:
    return views(data, [(c, c) for c in columns])


def stack(*collections: Iterable[View]) -> list[View]:
    return [v for collection in collections for v in collection]


def _merged(specs: Sequence[LayerSpec], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for spec in specs:
        merged.update(spec)
    merged.update(overrides)
    return merged


def layer(base: Iterable[View], *specs: LayerSpec, **overrides: Any) -> list[View]:
    merged = _merged(specs, overrides)
    return [v.merge(merged) for v in base]


def layers(base: Sequence[View], *specs: LayerSpec) -> list[View]:
    """One copy of `base` per data spec; annotation specs become standalone views."""
    out: list[View] = []
    annotations: list[View] = []
    for spec in specs:
        if spec.get("mark") in ANNOTATION_MARKS:
            annotations.append(View().merge(spec))
        else:
            out.extend(layer(base, spec))
    return out + annotations


# Faceting ------------------------------------------------------------------


def _split(view: View, column: Any) -> list[tuple[Any, View]]:
    if view.data is None:
        return []
    values = view.data.column(column)
    out = []
    for value in view.data.distinct(column, sort=True):
        subset = view.data.filter([v == value for v in values])
        out.append((value, view.merge({"data": subset})))
    return out


def facet(base: Iterable[View], column: Any) -> list[View]:
    out: list[View] = []
    for view in base:
        if view.data is None:
            out.append(view)
            continue
        out.extend(v.merge({"facet_col": value}) for value, v in _split(view, column))
    return out


def facet_rows(base: Iterable[View], column: Any) -> list[View]:
    out: list[View] = []
    for view in base:
        if view.data is None:
            out.append(view)
            continue
        out.extend(v.merge({"facet_row": value}) for value, v in _split(view, column))
    return out


def facet_grid(base: Iterable[View], row_column: Any, col_column: Any) -> list[View]:
    return facet(facet_rows(base, row_column), col_column)


# Defaults and selection ----------------------------------------------------


def diagonal(view: View) -> bool:
    return view.x is not None and view.x == view.y


def infer_defaults(view: View) -> View:
    """Histogram on the diagonal, scatter elsewhere; explicit settings win."""
    if view.is_annotation:
        return view
    defaults = {"mark": "bar", "stat": "bin"} if diagonal(view) else {"mark": "point", "stat": "identity"}
    missing = {k: v for k, v in defaults.items() if getattr(view, k) is None}
    return view.merge(missing) if missing else view


def auto(base: Iterable[View]) -> list[View]:
    return [infer_defaults(v) for v in base]


def where(base: Iterable[View], predicate: ViewPredicate) -> list[View]:
    return [v for v in base if predicate(v)]


def where_not(base: Iterable[View], predicate: ViewPredicate) -> list[View]:
    return [v for v in base if not predicate(v)]


def when_diagonal(base: Iterable[View], spec: LayerSpec) -> list[View]:
    return [v.merge(spec) if diagonal(v) else v for v in base]


def when_off_diagonal(base: Iterable[View], spec: LayerSpec) -> list[View]:
    return [v if diagonal(v) or v.is_annotation else v.merge(spec) for v in base]


def set_scale(base: Iterable[View], channel: str, type: str = "linear", domain: Sequence[Any] | None = None) -> list[View]:
    if channel not in ("x", "y"):
        raise PlotDataError(f"scales can be set on `x` or `y`, not {channel!r}")
    spec = ScaleSpec(type=type, domain=tuple(domain) if domain is not None else None)  # type: ignore[arg-type]
    return [v.merge({f"{channel}_scale": spec}) for v in base]


def set_coord(base: Iterable[View], coord: str) -> list[View]:
    return [v.merge({"coord": coord}) for v in base]
