from __future__ import annotations

from functools import lru_cache
import logging
from pathlib import Path

from PIL import ImageFont


LOGGER = logging.getLogger(__name__)

DEFAULT_FONT_FAMILY = "sans-serif"
SANS_FONT_FALLBACK_PATTERNS = (
    "dejavusans",
    "dejavu sans",
    "liberationsans",
    "helvetica",
    "arial",
)
_GENERIC_FAMILIES = frozenset({"sans-serif", "serif", "monospace", "system"})


def text_size(text: str, *, font_family: str = DEFAULT_FONT_FAMILY, font_size_px: float = 8.0) -> tuple[int, int]:
    """Pixel extent (width, height) of one line of text."""
    font = _load_font(font_family=font_family, font_size_px=font_size_px)
    if not text:
        return (0, max(1, int(round(font_size_px))))
    left, top, right, bottom = font.getbbox(text)
    w = max(0, int(right - left))
    h = max(1, int(bottom - top))
    return (w, h)


def text_width(text: str, *, font_family: str = DEFAULT_FONT_FAMILY, font_size_px: float = 8.0) -> int:
    return text_size(text, font_family=font_family, font_size_px=font_size_px)[0]


@lru_cache(maxsize=64)
def _load_font(font_family: str, font_size_px: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    size = max(1, int(round(font_size_px)))
    font_path = _resolve_font_path(font_family)
    if font_path is None:
        return ImageFont.load_default()
    try:
        return ImageFont.truetype(str(font_path), size=size)
    except OSError:
        LOGGER.debug("could not load font %s; using the default bitmap font", font_path)
        return ImageFont.load_default()


def _resolve_font_path(font_family: str) -> Path | None:
    wanted = font_family.strip().lower()
    patterns: tuple[str, ...] = SANS_FONT_FALLBACK_PATTERNS
    if wanted and wanted not in _GENERIC_FAMILIES:
        patterns = (wanted,) + patterns

    font_dirs = [
        Path.home() / "Library" / "Fonts",
        Path("/Library/Fonts"),
        Path("/System/Library/Fonts"),
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
    ]

    candidates: list[Path] = []
    for base in font_dirs:
        if not base.exists():
            continue
        for ext in ("*.ttf", "*.otf", "*.ttc"):
            candidates.extend(base.rglob(ext))

    for pattern in patterns:
        p = pattern.replace(" ", "")
        for path in candidates:
            stem = path.stem.lower().replace(" ", "")
            if p in stem:
                return path
    return None
