from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Union

from aesplot.adapters import is_number
from aesplot.errors import DomainError


@dataclass(frozen=True)
class NumericDomain:
    lo: float
    hi: float

    @property
    def span(self) -> float:
        return self.hi - self.lo

    def contains(self, value: float) -> bool:
        return self.lo <= value <= self.hi


@dataclass(frozen=True)
class CategoricalDomain:
    labels: tuple[Any, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", tuple(self.labels))

    def __len__(self) -> int:
        return len(self.labels)

    def contains(self, value: Any) -> bool:
        return value in self.labels


Domain = Union[NumericDomain, CategoricalDomain]

FALLBACK_DOMAIN = NumericDomain(0.0, 1.0)


def numeric_extent(values: Iterable[float]) -> NumericDomain | None:
    lo = math.inf
    hi = -math.inf
    for v in values:
        fv = float(v)
        if not math.isfinite(fv):
            continue
        lo = min(lo, fv)
        hi = max(hi, fv)
    if lo > hi:
        return None
    return NumericDomain(lo, hi)


def domain_from_explicit(values: Sequence[Any]) -> Domain:
    """Build a domain from a user supplied `ScaleSpec.domain` tuple."""
    if len(values) == 2 and all(is_number(v) for v in values):
        lo, hi = float(values[0]), float(values[1])
        return NumericDomain(min(lo, hi), max(lo, hi))
    return CategoricalDomain(tuple(values))


def union_domains(domains: Iterable[Domain | None]) -> Domain:
    present = [d for d in domains if d is not None]
    if not present:
        raise DomainError("no data domains to merge")
    numeric = [d for d in present if isinstance(d, NumericDomain)]
    categorical = [d for d in present if isinstance(d, CategoricalDomain)]
    if numeric and categorical:
        raise DomainError("cannot merge numeric and categorical domains on one axis")

    if categorical:
        labels: dict[Any, None] = {}
        for d in categorical:
            for label in d.labels:
                labels.setdefault(label, None)
        if not labels:
            raise DomainError("categorical domain is empty")
        return CategoricalDomain(tuple(labels))

    lo = min(d.lo for d in numeric)
    hi = max(d.hi for d in numeric)
    if not (math.isfinite(lo) and math.isfinite(hi)):
        raise DomainError(f"numeric domain has non-finite bounds: [{lo}, {hi}]")
    return NumericDomain(lo, hi)


def pad_domain(domain: Domain, scale_type: str = "linear", ratio: float = 0.05) -> Domain:
    if isinstance(domain, CategoricalDomain):
        return domain
    lo, hi = domain.lo, domain.hi

    if scale_type == "log":
        if lo <= 0:
            raise DomainError(f"log scale needs a positive domain, got [{lo}, {hi}]")
        llo, lhi = math.log10(lo), math.log10(hi)
        if llo == lhi:
            delta = 0.5
        else:
            delta = (lhi - llo) * ratio
        return NumericDomain(10 ** (llo - delta), 10 ** (lhi + delta))

    if lo == hi:
        delta = max(1.0, abs(lo) * ratio)
        return NumericDomain(lo - delta, hi + delta)
    pad = (hi - lo) * ratio
    return NumericDomain(lo - pad, hi + pad)


def merge_domains(domains: Iterable[Domain | None], scale_type: str = "linear") -> Domain:
    return pad_domain(union_domains(domains), scale_type)


def check_scale_domain(domain: Domain, scale_type: str) -> None:
    if isinstance(domain, CategoricalDomain):
        if not domain.labels:
            raise DomainError("categorical domain is empty")
        return
    if not (math.isfinite(domain.lo) and math.isfinite(domain.hi)):
        raise DomainError(f"numeric domain has non-finite bounds: [{domain.lo}, {domain.hi}]")
    if domain.lo >= domain.hi:
        raise DomainError(f"numeric domain is degenerate: [{domain.lo}, {domain.hi}]")
    if scale_type == "log" and domain.lo <= 0:
        raise DomainError(f"log scale needs a positive domain, got [{domain.lo}, {domain.hi}]")


def stack_extent(contributions: Iterable[tuple[Any, float]]) -> NumericDomain:
    """Unpadded [deepest negative stack, tallest positive stack] over (category, height) pairs.

    Positive and negative heights accumulate separately from zero, the way
    stacked bars are drawn; the upper bound is at least 1.
    """
    above: dict[Any, float] = {}
    below: dict[Any, float] = {}
    for category, height in contributions:
        h = float(height)
        if not math.isfinite(h) or h == 0:
            continue
        totals = above if h > 0 else below
        totals[category] = totals.get(category, 0.0) + h
    top = max(above.values(), default=0.0)
    bottom = min(below.values(), default=0.0)
    return NumericDomain(bottom, max(1.0, top))
