from __future__ import annotations


class PlotDataError(ValueError):
    """Raised when a chart declaration or its input columns cannot be used."""


class DomainError(PlotDataError):
    """Raised when a merged axis domain cannot back a scale."""
