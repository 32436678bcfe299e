from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any, Union

import numpy as np

from aesplot.adapters import is_number
from aesplot.domains import CategoricalDomain, Domain, NumericDomain, check_scale_domain
from aesplot.ticks import (
    DEFAULT_TICK_COUNT,
    format_ticks_for_axis,
    generate_log_ticks,
    generate_nice_ticks,
)
from aesplot.view import DEFAULT_SCALE, ScaleSpec


PixelRange = tuple[float, float]

BAND_PADDING_INNER = 0.1
BAND_PADDING_OUTER = 0.1


class LinearScale:
    kind = "linear"

    def __init__(self, domain: NumericDomain, pixel_range: PixelRange) -> None:
        self.domain = domain
        self.range = (float(pixel_range[0]), float(pixel_range[1]))

    def _forward(self, value: float) -> float:
        return value

    def _inverse(self, value: float) -> float:
        return value

    def __call__(self, value: Any) -> float:
        if not is_number(value):
            return math.nan
        v = float(value)
        if not math.isfinite(v):
            return math.nan
        f0 = self._forward(self.domain.lo)
        f1 = self._forward(self.domain.hi)
        t = (self._forward(v) - f0) / (f1 - f0)
        r0, r1 = self.range
        return r0 + t * (r1 - r0)

    def invert(self, pixel: float) -> float:
        r0, r1 = self.range
        t = (pixel - r0) / (r1 - r0)
        f0 = self._forward(self.domain.lo)
        f1 = self._forward(self.domain.hi)
        return self._inverse(f0 + t * (f1 - f0))

    def ticks(self, count: int = DEFAULT_TICK_COUNT) -> list[float]:
        return generate_nice_ticks(self.domain.lo, self.domain.hi, count).tolist()

    def format(self, values: Sequence[float]) -> list[str]:
        return format_ticks_for_axis(np.asarray(values, dtype=np.float64))


class LogScale(LinearScale):
    kind = "log"

    def __call__(self, value: Any) -> float:
        if is_number(value) and float(value) <= 0:
            return math.nan
        return super().__call__(value)

    def _forward(self, value: float) -> float:
        return math.log10(value)

    def _inverse(self, value: float) -> float:
        return 10.0**value

    def ticks(self, count: int = DEFAULT_TICK_COUNT) -> list[float]:
        return generate_log_ticks(self.domain.lo, self.domain.hi).tolist()

    def format(self, values: Sequence[float]) -> list[str]:
        return format_ticks_for_axis(np.asarray(values, dtype=np.float64), log=True)


class BandScale:
    """Evenly spaced category bands with inner/outer padding."""

    kind = "band"

    def __init__(
        self,
        domain: CategoricalDomain,
        pixel_range: PixelRange,
        *,
        padding_inner: float = BAND_PADDING_INNER,
        padding_outer: float = BAND_PADDING_OUTER,
    ) -> None:
        self.domain = domain
        self.range = (float(pixel_range[0]), float(pixel_range[1]))
        self._index = {label: i for i, label in enumerate(domain.labels)}
        n = len(domain.labels)
        r0, r1 = self.range
        self._step = (r1 - r0) / max(1.0, n - padding_inner + 2.0 * padding_outer)
        self._start = r0 + self._step * padding_outer
        self._bandwidth = abs(self._step) * (1.0 - padding_inner)
        self._sign = 1.0 if r1 >= r0 else -1.0

    def bandwidth(self) -> float:
        return self._bandwidth

    def band(self, category: Any) -> tuple[float, float] | None:
        i = self._index.get(category)
        if i is None:
            return None
        a = self._start + i * self._step
        b = a + self._sign * self._bandwidth
        return (min(a, b), max(a, b))

    def __call__(self, category: Any) -> float:
        extent = self.band(category)
        if extent is None:
            return math.nan
        return (extent[0] + extent[1]) / 2.0

    def ticks(self, count: int = DEFAULT_TICK_COUNT) -> list[Any]:
        return list(self.domain.labels)

    def format(self, values: Sequence[Any]) -> list[str]:
        return [str(v) for v in values]


Scale = Union[LinearScale, LogScale, BandScale]


def build_scale(domain: Domain, pixel_range: PixelRange, spec: ScaleSpec | None = None) -> Scale:
    spec = spec or DEFAULT_SCALE
    if isinstance(domain, CategoricalDomain):
        check_scale_domain(domain, "band")
        return BandScale(domain, pixel_range)
    check_scale_domain(domain, spec.type)
    if spec.type == "log":
        return LogScale(domain, pixel_range)
    return LinearScale(domain, pixel_range)
