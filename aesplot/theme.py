from __future__ import annotations

from dataclasses import asdict, dataclass, replace
import re
from typing import Any, Mapping

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}([0-9a-fA-F]{2})?$|^#[0-9a-fA-F]{3}$")

GGPLOT_PALETTE = (
    "#F8766D",
    "#00BA38",
    "#619CFF",
    "#A855F7",
    "#F97316",
    "#14B8A6",
    "#EF4444",
    "#6B7280",
)

_COLOR_KEYS = (
    "background",
    "grid",
    "text_color",
    "tick_color",
    "annotation_color",
    "default_color",
    "point_stroke",
    "diagnostic_color",
)
_POSITIVE_KEYS = (
    "font_size",
    "header_font_size",
    "point_radius",
    "line_width",
    "grid_width",
)
_UNIT_KEYS = ("mark_opacity", "band_opacity")


@dataclass(frozen=True)
class Theme:
    """Colors, opacities and sizes shared by every panel of one plot."""

    background: str = "#EBEBEB"
    grid: str = "#FFFFFF"
    text_color: str = "#333333"
    tick_color: str = "#666666"
    annotation_color: str = "#333333"
    default_color: str = "#333333"
    point_stroke: str = "#FFFFFF"
    diagnostic_color: str = "#B00020"
    palette: tuple[str, ...] = GGPLOT_PALETTE
    mark_opacity: float = 0.7
    band_opacity: float = 0.08
    font_family: str = "sans-serif"
    font_size: float = 8.0
    header_font_size: float = 9.0
    point_radius: float = 2.5
    line_width: float = 1.5
    grid_width: float = 1.0

    def color_for(self, category: Any, categories: tuple[Any, ...]) -> str:
        if category is None or category not in categories:
            return self.default_color
        return self.palette[categories.index(category) % len(self.palette)]


DEFAULT_THEME = Theme()


def validate_theme(overrides: Mapping[str, Any] | None = None, *, base: Theme = DEFAULT_THEME) -> Theme:
    """Validate and merge theme overrides against `base`."""

    raw: dict[str, Any] = asdict(base)
    if overrides:
        for key, value in overrides.items():
            if key not in raw:
                raise ValueError(f"Unknown theme key: {key}")
            raw[key] = value

    for key in _COLOR_KEYS:
        _check_color(key, raw[key])

    palette = raw["palette"]
    if isinstance(palette, str) or not palette:
        raise ValueError("Theme `palette` must be a non-empty sequence of hex colors")
    palette = tuple(palette)
    for color in palette:
        _check_color("palette", color)

    if not isinstance(raw["font_family"], str) or not raw["font_family"].strip():
        raise ValueError("Theme `font_family` must be a non-empty string")

    for key in _POSITIVE_KEYS:
        if not _is_real(raw[key]) or float(raw[key]) <= 0:
            raise ValueError(f"Theme `{key}` must be a positive number")
    for key in _UNIT_KEYS:
        if not _is_real(raw[key]) or not (0.0 <= float(raw[key]) <= 1.0):
            raise ValueError(f"Theme `{key}` must be within [0, 1]")

    return replace(
        base,
        **{k: str(raw[k]) for k in _COLOR_KEYS},
        palette=palette,
        font_family=str(raw["font_family"]),
        **{k: float(raw[k]) for k in _POSITIVE_KEYS + _UNIT_KEYS},
    )


def _check_color(key: str, value: Any) -> None:
    if not isinstance(value, str) or not _HEX_COLOR.match(value):
        raise ValueError(f"Theme `{key}` must be a hex color (#RGB, #RRGGBB or #RRGGBBAA)")


def _is_real(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
