from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Any, Literal, get_args

from aesplot.adapters import Dataset, as_dataset
from aesplot.errors import PlotDataError


Mark = Literal["point", "bar", "rect", "line", "text", "rule-h", "rule-v", "band-h"]
Stat = Literal["identity", "bin", "regress", "smooth", "count"]
CoordType = Literal["cartesian", "flip", "polar"]
Position = Literal["dodge", "stack"]
ScaleType = Literal["linear", "log"]
XType = Literal["categorical"]

MARKS = frozenset(get_args(Mark))
STATS = frozenset(get_args(Stat))
COORD_TYPES = frozenset(get_args(CoordType))
POSITIONS = frozenset(get_args(Position))
SCALE_TYPES = frozenset(get_args(ScaleType))

ANNOTATION_MARKS = frozenset({"rule-h", "rule-v", "band-h"})
# bin estimators accepted by numpy.histogram_bin_edges
BIN_RULES = frozenset({"auto", "fd", "doane", "scott", "stone", "rice", "sturges", "sqrt"})


@dataclass(frozen=True)
class ScaleSpec:
    type: ScaleType = "linear"
    domain: tuple[Any, ...] | None = None

    def __post_init__(self) -> None:
        if self.type not in SCALE_TYPES:
            raise PlotDataError(f"unsupported scale type: {self.type}")
        if self.domain is not None:
            domain = tuple(self.domain)
            if not domain:
                raise PlotDataError("explicit scale domain must not be empty")
            object.__setattr__(self, "domain", domain)


DEFAULT_SCALE = ScaleSpec()


@dataclass(frozen=True)
class View:
    """One chart layer: data source, channel mappings, mark and transform tags."""

    data: Dataset | None = None
    x: Any = None
    y: Any = None
    color: Any = None
    size: Any = None
    shape: Any = None
    text: Any = None
    mark: Mark | None = None
    stat: Stat | None = None
    position: Position | None = None
    coord: CoordType | None = None
    x_scale: ScaleSpec | None = None
    y_scale: ScaleSpec | None = None
    x_type: XType | None = None
    bins: int | str | None = None
    bandwidth: float | None = None
    facet_row: Any = None
    facet_col: Any = None
    value: float | None = None
    y1: float | None = None
    y2: float | None = None

    def __post_init__(self) -> None:
        if self.data is not None and not isinstance(self.data, Dataset):
            object.__setattr__(self, "data", as_dataset(self.data))
        _check_tag("mark", self.mark, MARKS)
        _check_tag("stat", self.stat, STATS)
        _check_tag("position", self.position, POSITIONS)
        _check_tag("coord", self.coord, COORD_TYPES)
        if self.x_type is not None and self.x_type != "categorical":
            raise PlotDataError(f"unsupported x_type: {self.x_type}")
        for name in ("x_scale", "y_scale"):
            spec = getattr(self, name)
            if spec is not None and not isinstance(spec, ScaleSpec):
                object.__setattr__(self, name, _coerce_scale_spec(spec))
        if isinstance(self.bins, bool) or (
            self.bins is not None and not isinstance(self.bins, (int, str))
        ):
            raise PlotDataError(f"bins must be an int or a numpy bin rule, got {self.bins!r}")
        if isinstance(self.bins, int) and self.bins <= 0:
            raise PlotDataError("bins must be > 0")
        if isinstance(self.bins, str) and self.bins not in BIN_RULES:
            raise PlotDataError(f"unknown bin rule: {self.bins!r}")
        if self.bandwidth is not None and not (0.0 < float(self.bandwidth) <= 1.0):
            raise PlotDataError("bandwidth must be in (0, 1]")

    @property
    def is_annotation(self) -> bool:
        return self.mark in ANNOTATION_MARKS

    @property
    def resolved_stat(self) -> Stat:
        return self.stat or "identity"

    @property
    def x_scale_spec(self) -> ScaleSpec:
        return self.x_scale or DEFAULT_SCALE

    @property
    def y_scale_spec(self) -> ScaleSpec:
        return self.y_scale or DEFAULT_SCALE

    def merge(self, overrides: Mapping[str, Any]) -> "View":
        unknown = sorted(str(k) for k in overrides if k not in VIEW_FIELDS)
        if unknown:
            raise PlotDataError(f"unknown view field(s): {', '.join(unknown)}")
        return replace(self, **dict(overrides))


VIEW_FIELDS = frozenset(f.name for f in fields(View))


def _check_tag(name: str, value: Any, allowed: frozenset[str]) -> None:
    if value is not None and value not in allowed:
        raise PlotDataError(f"unsupported {name}: {value!r} (expected one of {sorted(allowed)})")


def _coerce_scale_spec(spec: Any) -> ScaleSpec:
    if isinstance(spec, str):
        return ScaleSpec(type=spec)  # type: ignore[arg-type]
    if isinstance(spec, Mapping):
        return ScaleSpec(**dict(spec))
    raise PlotDataError(f"unsupported scale spec: {spec!r}")
