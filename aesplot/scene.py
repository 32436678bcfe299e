from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Optional, Union
import xml.etree.ElementTree as ET


Color = str
Point = tuple[float, float]


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: Optional[Color] = None
    stroke: Optional[Color] = None
    stroke_width: float = 0.0
    opacity: float = 1.0


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    r: float
    fill: Optional[Color] = None
    stroke: Optional[Color] = None
    stroke_width: float = 0.0
    opacity: float = 1.0


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: Optional[Color] = None
    stroke_width: float = 1.0
    opacity: float = 1.0
    dasharray: Optional[str] = None


@dataclass(frozen=True)
class Polygon:
    points: tuple[Point, ...]
    fill: Optional[Color] = None
    stroke: Optional[Color] = None
    stroke_width: float = 0.0
    opacity: float = 1.0


@dataclass(frozen=True)
class Polyline:
    points: tuple[Point, ...]
    stroke: Optional[Color] = None
    stroke_width: float = 1.0
    opacity: float = 1.0
    dasharray: Optional[str] = None


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    fill: Optional[Color] = None
    font_size: float = 8.0
    font_family: Optional[str] = None
    anchor: str = "start"
    rotate: Optional[float] = None
    opacity: float = 1.0


@dataclass(frozen=True)
class Group:
    children: tuple["Shape", ...] = ()
    translate: Point = (0.0, 0.0)
    name: Optional[str] = None


Shape = Union[Rect, Circle, Line, Polygon, Polyline, Text, Group]


@dataclass(frozen=True)
class Canvas:
    """Root of a rendered chart: fixed size, one group tree, panel diagnostics."""

    width: float
    height: float
    root: Group
    diagnostics: tuple[str, ...] = field(default=())

    def shapes(self) -> Iterator[tuple[Shape, Point]]:
        return iter_shapes(self.root)


def group(children: Sequence[Shape], *, translate: Point = (0.0, 0.0), name: str | None = None) -> Group:
    return Group(children=tuple(children), translate=(float(translate[0]), float(translate[1])), name=name)


def iter_shapes(node: Shape, offset: Point = (0.0, 0.0)) -> Iterator[tuple[Shape, Point]]:
    """Yield leaf shapes with the absolute offset of their enclosing groups."""
    if isinstance(node, Group):
        ox = offset[0] + node.translate[0]
        oy = offset[1] + node.translate[1]
        for child in node.children:
            yield from iter_shapes(child, (ox, oy))
        return
    yield node, offset


def find_groups(node: Shape, name: str) -> list[Group]:
    out: list[Group] = []
    if isinstance(node, Group):
        if node.name == name:
            out.append(node)
        for child in node.children:
            out.extend(find_groups(child, name))
    return out


def to_svg(canvas: Canvas) -> str:
    root = ET.Element(
        "svg",
        {
            "xmlns": "http://www.w3.org/2000/svg",
            "width": _num(canvas.width),
            "height": _num(canvas.height),
            "viewBox": f"0 0 {_num(canvas.width)} {_num(canvas.height)}",
        },
    )
    _append(root, canvas.root)
    return ET.tostring(root, encoding="unicode")


def _append(parent: ET.Element, node: Shape) -> None:
    if isinstance(node, Group):
        attrs: dict[str, str] = {}
        if node.translate != (0.0, 0.0):
            attrs["transform"] = f"translate({_num(node.translate[0])},{_num(node.translate[1])})"
        if node.name:
            attrs["class"] = node.name
        elem = ET.SubElement(parent, "g", attrs)
        for child in node.children:
            _append(elem, child)
        return

    if isinstance(node, Rect):
        attrs = {"x": _num(node.x), "y": _num(node.y), "width": _num(node.width), "height": _num(node.height)}
        _paint(attrs, node.fill, node.stroke, node.stroke_width, node.opacity)
        ET.SubElement(parent, "rect", attrs)
    elif isinstance(node, Circle):
        attrs = {"cx": _num(node.cx), "cy": _num(node.cy), "r": _num(node.r)}
        _paint(attrs, node.fill, node.stroke, node.stroke_width, node.opacity)
        ET.SubElement(parent, "circle", attrs)
    elif isinstance(node, Line):
        attrs = {"x1": _num(node.x1), "y1": _num(node.y1), "x2": _num(node.x2), "y2": _num(node.y2)}
        _paint(attrs, None, node.stroke, node.stroke_width, node.opacity)
        if node.dasharray:
            attrs["stroke-dasharray"] = node.dasharray
        ET.SubElement(parent, "line", attrs)
    elif isinstance(node, Polygon):
        attrs = {"points": _points(node.points)}
        _paint(attrs, node.fill, node.stroke, node.stroke_width, node.opacity)
        ET.SubElement(parent, "polygon", attrs)
    elif isinstance(node, Polyline):
        attrs = {"points": _points(node.points)}
        _paint(attrs, None, node.stroke, node.stroke_width, node.opacity)
        if node.dasharray:
            attrs["stroke-dasharray"] = node.dasharray
        ET.SubElement(parent, "polyline", attrs)
    elif isinstance(node, Text):
        attrs = {"x": _num(node.x), "y": _num(node.y), "font-size": _num(node.font_size)}
        if node.fill:
            attrs["fill"] = node.fill
        if node.font_family:
            attrs["font-family"] = node.font_family
        if node.anchor != "start":
            attrs["text-anchor"] = node.anchor
        if node.rotate is not None:
            attrs["transform"] = f"rotate({_num(node.rotate)},{_num(node.x)},{_num(node.y)})"
        if node.opacity != 1.0:
            attrs["opacity"] = _num(node.opacity)
        elem = ET.SubElement(parent, "text", attrs)
        elem.text = node.text
    else:
        raise TypeError(f"unsupported scene node: {type(node)!r}")


def _paint(attrs: dict[str, str], fill: Optional[Color], stroke: Optional[Color], stroke_width: float, opacity: float) -> None:
    attrs["fill"] = fill or "none"
    if stroke:
        attrs["stroke"] = stroke
        attrs["stroke-width"] = _num(stroke_width)
    if opacity != 1.0:
        attrs["opacity"] = _num(opacity)


def _points(points: Sequence[Point]) -> str:
    return " ".join(f"{_num(x)},{_num(y)}" for x, y in points)


def _num(value: float) -> str:
    out = f"{float(value):.2f}".rstrip("0").rstrip(".")
    return "0" if out == "-0" else out
