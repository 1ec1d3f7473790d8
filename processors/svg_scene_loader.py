"""
SVG scene loader: markup to SceneTree via defusedxml and svgpathtools.

Converts SVG markup into a SceneTree for the scene renderer. Every shape is
rewritten as path data and parsed with svgpathtools, then flattened into
move/line/cubic segments: quadratic curves are elevated to cubics and
elliptical arcs are split into cubic pieces.

Supported: svg, g, a, path, rect, circle, ellipse, line, polyline, polygon and
linearGradient definitions, with presentation attributes and inline styles.
Other elements are skipped.
"""


import logging
import math
import re
from pathlib import Path as FilePath
from typing import Dict, List, Optional, Tuple, Union
from xml.etree.ElementTree import Element, ParseError

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as DefusedET
from svgpathtools import Arc, CubicBezier, Line, QuadraticBezier, parse_path

from engine.config import RenderOptions
from models.graphics_types import LineCapStyle, LineJoinStyle, Transform
from models.scene_types import (
    ClosePath, CurveTo, Fill, FillRule, GradientReference, GradientStop, GroupNode,
    LinearGradient, LineTo, MoveTo, PathNode, RgbBytes, RootNode, SceneTree,
    SolidColor, Stroke, ViewBox
)
from utils.pdf_transforms import (
    multiply_matrices, rotation_matrix, scale_matrix, skew_matrix, translation_matrix
)
from utils.validation import SvgParseError

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r'[-+]?(?:\d*\.\d+|\d+\.?)(?:[eE][-+]?\d+)?')
_TRANSFORM_RE = re.compile(r'(matrix|translate|scale|rotate|skewX|skewY)\s*\(([^)]*)\)')
_LENGTH_RE = re.compile(r'^\s*([-+]?(?:\d*\.\d+|\d+\.?)(?:[eE][-+]?\d+)?)\s*(px|pt|pc|mm|cm|in|%)?\s*$')
_URL_RE = re.compile(r'url\(\s*[\'"]?#([^\'")]+)[\'"]?\s*\)\s*(.*)$')
_RGB_RE = re.compile(r'rgba?\(\s*([^)]*)\)')

# Points per unit; unitless and px lengths follow the CSS 96 dpi reference
UNIT_TO_PT = {
    None: 0.75,
    'px': 0.75,
    'pt': 1.0,
    'pc': 12.0,
    'mm': 72.0 / 25.4,
    'cm': 72.0 / 2.54,
    'in': 72.0,
}

XLINK_HREF = '{http://www.w3.org/1999/xlink}href'

INHERITED_PROPERTIES = (
    'fill', 'fill-opacity', 'fill-rule', 'stroke', 'stroke-width', 'stroke-opacity',
    'stroke-dasharray', 'stroke-dashoffset', 'stroke-linecap', 'stroke-linejoin',
    'stroke-miterlimit', 'color',
)

DEFAULT_STYLE = {
    'fill': 'black',
    'fill-opacity': '1',
    'fill-rule': 'nonzero',
    'stroke': 'none',
    'stroke-width': '1',
    'stroke-opacity': '1',
    'stroke-dasharray': 'none',
    'stroke-dashoffset': '0',
    'stroke-linecap': 'butt',
    'stroke-linejoin': 'miter',
    'stroke-miterlimit': '4',
    'color': 'black',
}

LINECAPS = {'butt': LineCapStyle.BUTT, 'round': LineCapStyle.ROUND, 'square': LineCapStyle.PROJECTING_SQUARE}
LINEJOINS = {'miter': LineJoinStyle.MITER, 'round': LineJoinStyle.ROUND, 'bevel': LineJoinStyle.BEVEL}

NAMED_COLORS = {
    'black': (0, 0, 0), 'white': (255, 255, 255), 'red': (255, 0, 0),
    'green': (0, 128, 0), 'lime': (0, 255, 0), 'blue': (0, 0, 255),
    'yellow': (255, 255, 0), 'cyan': (0, 255, 255), 'aqua': (0, 255, 255),
    'magenta': (255, 0, 255), 'fuchsia': (255, 0, 255), 'gray': (128, 128, 128),
    'grey': (128, 128, 128), 'silver': (192, 192, 192), 'maroon': (128, 0, 0),
    'olive': (128, 128, 0), 'navy': (0, 0, 128), 'purple': (128, 0, 128),
    'teal': (0, 128, 128), 'orange': (255, 165, 0), 'pink': (255, 192, 203),
    'brown': (165, 42, 42), 'gold': (255, 215, 0), 'indigo': (75, 0, 130),
    'violet': (238, 130, 238), 'coral': (255, 127, 80), 'salmon': (250, 128, 114),
    'tomato': (255, 99, 71), 'crimson': (220, 20, 60), 'darkgray': (169, 169, 169),
    'darkgrey': (169, 169, 169), 'lightgray': (211, 211, 211), 'lightgrey': (211, 211, 211),
    'darkblue': (0, 0, 139), 'darkgreen': (0, 100, 0), 'darkred': (139, 0, 0),
    'lightblue': (173, 216, 230), 'lightgreen': (144, 238, 144), 'steelblue': (70, 130, 180),
    'skyblue': (135, 206, 235), 'turquoise': (64, 224, 208), 'khaki': (240, 230, 140),
    'beige': (245, 245, 220), 'ivory': (255, 255, 240), 'tan': (210, 180, 140),
    'chocolate': (210, 105, 30), 'firebrick': (178, 34, 34), 'forestgreen': (34, 139, 34),
    'seagreen': (46, 139, 87), 'slategray': (112, 128, 144), 'slategrey': (112, 128, 144),
    'dimgray': (105, 105, 105), 'dimgrey': (105, 105, 105), 'whitesmoke': (245, 245, 245),
}

SKIPPED_ELEMENTS = {
    'defs', 'linearGradient', 'radialGradient', 'stop', 'title', 'desc', 'metadata',
    'style', 'script', 'clipPath', 'mask', 'pattern', 'symbol', 'marker', 'filter',
}

_EPSILON = 1e-9
_SWEEP_TOLERANCE = 1e-6


# --- Attribute parsing ---

def local_name(tag: str) -> str:
    return tag.rsplit('}', 1)[-1]


def parse_numbers(text: Optional[str]) -> List[float]:
    if not text:
        return []
    return [float(n) for n in _NUMBER_RE.findall(text)]


def parse_length(text: Optional[str], default: float = 0.0) -> float:
    """Length in user units; percentages and unknown values fall back to ``default``."""
    if text is None:
        return default
    match = _LENGTH_RE.match(text)
    if not match or match.group(2) == '%':
        return default
    return float(match.group(1))


def parse_length_pt(text: Optional[str]) -> Optional[float]:
    """Absolute length converted to points, or None when missing or relative."""
    if text is None:
        return None
    match = _LENGTH_RE.match(text)
    if not match or match.group(2) == '%':
        return None
    return float(match.group(1)) * UNIT_TO_PT[match.group(2)]


def parse_fraction(text: Optional[str], default: float) -> float:
    """Number or percentage as a plain number (50% -> 0.5)."""
    if text is None:
        return default
    text = text.strip()
    try:
        if text.endswith('%'):
            return float(text[:-1]) / 100.0
        return float(text)
    except ValueError:
        return default


def parse_color(text: Optional[str], current_color: Optional[str] = None) -> Optional[RgbBytes]:
    """Parse a CSS color; returns None for 'none' and unrecognized values."""
    if text is None:
        return None
    value = text.strip().lower()
    if value in ('none', 'transparent', ''):
        return None
    if value == 'currentcolor':
        return parse_color(current_color or 'black')
    if value.startswith('#'):
        digits = value[1:]
        if len(digits) in (3, 4):
            digits = ''.join(ch * 2 for ch in digits[:3])
        elif len(digits) in (6, 8):
            digits = digits[:6]
        else:
            logger.debug(f"Unrecognized color '{text}'")
            return None
        try:
            return RgbBytes(red=int(digits[0:2], 16), green=int(digits[2:4], 16), blue=int(digits[4:6], 16))
        except ValueError:
            logger.debug(f"Unrecognized color '{text}'")
            return None
    rgb_match = _RGB_RE.match(value)
    if rgb_match:
        parts = [p.strip() for p in re.split(r'[,\s/]+', rgb_match.group(1)) if p.strip()]
        if len(parts) < 3:
            return None
        channels = []
        for part in parts[:3]:
            try:
                if part.endswith('%'):
                    channels.append(round(float(part[:-1]) * 255 / 100))
                else:
                    channels.append(round(float(part)))
            except ValueError:
                return None
        red, green, blue = (min(255, max(0, c)) for c in channels)
        return RgbBytes(red=red, green=green, blue=blue)
    if value in NAMED_COLORS:
        red, green, blue = NAMED_COLORS[value]
        return RgbBytes(red=red, green=green, blue=blue)
    logger.debug(f"Unrecognized color '{text}'")
    return None


def parse_transform(text: Optional[str]) -> Transform:
    """Parse an SVG transform list into one matrix."""
    matrix = [1.0, 0.0, 0.0, 1.0, 0.0, 0.0]
    if not text:
        return Transform.from_list(matrix)

    for name, args in _TRANSFORM_RE.findall(text):
        values = parse_numbers(args)
        if name == 'matrix' and len(values) == 6:
            step = values
        elif name == 'translate' and values:
            step = translation_matrix(values[0], values[1] if len(values) > 1 else 0.0)
        elif name == 'scale' and values:
            step = scale_matrix(values[0], values[1] if len(values) > 1 else values[0])
        elif name == 'rotate' and values:
            step = rotation_matrix(values[0])
            if len(values) == 3:
                cx, cy = values[1], values[2]
                step = multiply_matrices(
                    multiply_matrices(translation_matrix(cx, cy), step),
                    translation_matrix(-cx, -cy),
                )
        elif name == 'skewX' and values:
            step = skew_matrix(skew_x_degrees=values[0])
        elif name == 'skewY' and values:
            step = skew_matrix(skew_y_degrees=values[0])
        else:
            logger.debug(f"Ignoring malformed transform '{name}({args})'")
            continue
        matrix = multiply_matrices(matrix, step)

    return Transform.from_list(matrix)


def parse_style(element: Element) -> Dict[str, str]:
    """Presentation attributes overridden by declarations in the style attribute."""
    style = {}
    for key in INHERITED_PROPERTIES + ('opacity', 'display'):
        if key in element.attrib:
            style[key] = element.attrib[key].strip()
    for declaration in element.attrib.get('style', '').split(';'):
        if ':' in declaration:
            key, value = declaration.split(':', 1)
            style[key.strip()] = value.strip()
    return style


def inherit_style(parent_style: Dict[str, str], own_style: Dict[str, str]) -> Dict[str, str]:
    """Inherited properties of the parent, overridden by the element's own values."""
    style = dict(parent_style)
    for key in INHERITED_PROPERTIES:
        if key in own_style and own_style[key] != 'inherit':
            style[key] = own_style[key]
    return style


def parse_dasharray(text: str) -> Optional[List[float]]:
    if text.strip() == 'none':
        return None
    values = parse_numbers(text)
    if not values:
        return None
    if len(values) % 2:
        values = values * 2
    return values


# --- Geometry conversion ---

def _xy(point: complex) -> Tuple[float, float]:
    return point.real, point.imag


def _arc_to_cubics(arc: Arc, segments_per_quarter: int) -> List[CurveTo]:
    """Split an elliptical arc into cubic pieces using its tangents."""
    sweep = abs(math.radians(arc.delta))
    count = max(1, math.ceil(sweep / (math.pi / 2) - _SWEEP_TOLERANCE)) * segments_per_quarter
    piece_sweep = sweep / count
    if piece_sweep > _EPSILON:
        k = (4.0 / 3.0) * math.tan(piece_sweep / 4.0) / piece_sweep
    else:
        k = 1.0 / 3.0

    curves = []
    for i in range(count):
        t0, t1 = i / count, (i + 1) / count
        dt = t1 - t0
        p0, p3 = arc.point(t0), arc.point(t1)
        c1 = p0 + arc.derivative(t0) * dt * k
        c2 = p3 - arc.derivative(t1) * dt * k
        curves.append(CurveTo(
            x1=c1.real, y1=c1.imag, x2=c2.real, y2=c2.imag, x=p3.real, y=p3.imag
        ))
    return curves


def path_data_to_segments(d: str, segments_per_quarter: int = 1):
    """
    Parse path data into scene segments.

    Returns:
        Tuple of (segments, bounding box as (xmin, ymin, xmax, ymax) or None)
    """
    path = parse_path(d)
    segments = []
    subpath_start = None
    current = None

    for seg in path:
        if current is None or abs(seg.start - current) > _EPSILON:
            if subpath_start is not None and current is not None and abs(current - subpath_start) <= _EPSILON:
                segments.append(ClosePath())
            x, y = _xy(seg.start)
            segments.append(MoveTo(x=x, y=y))
            subpath_start = seg.start

        if isinstance(seg, Line):
            x, y = _xy(seg.end)
            segments.append(LineTo(x=x, y=y))
        elif isinstance(seg, CubicBezier):
            segments.append(CurveTo(
                x1=seg.control1.real, y1=seg.control1.imag,
                x2=seg.control2.real, y2=seg.control2.imag,
                x=seg.end.real, y=seg.end.imag,
            ))
        elif isinstance(seg, QuadraticBezier):
            c1 = seg.start + (seg.control - seg.start) * (2.0 / 3.0)
            c2 = seg.end + (seg.control - seg.end) * (2.0 / 3.0)
            segments.append(CurveTo(
                x1=c1.real, y1=c1.imag, x2=c2.real, y2=c2.imag,
                x=seg.end.real, y=seg.end.imag,
            ))
        elif isinstance(seg, Arc):
            if abs(seg.radius.real) < _EPSILON or abs(seg.radius.imag) < _EPSILON:
                x, y = _xy(seg.end)
                segments.append(LineTo(x=x, y=y))
            else:
                segments.extend(_arc_to_cubics(seg, segments_per_quarter))
        current = seg.end

    if subpath_start is not None and current is not None and abs(current - subpath_start) <= _EPSILON:
        segments.append(ClosePath())

    bbox = None
    if len(path):
        xmin, xmax, ymin, ymax = path.bbox()
        bbox = (xmin, ymin, xmax, ymax)
    return segments, bbox


def _fmt(*values: float) -> str:
    return ' '.join(repr(float(v)) for v in values)


def shape_to_path_data(name: str, attrib: Dict[str, str]) -> Optional[str]:
    """Path data equivalent to a basic shape, or None when it renders nothing."""
    if name == 'path':
        return attrib.get('d') or None

    if name == 'rect':
        x, y = parse_length(attrib.get('x')), parse_length(attrib.get('y'))
        w, h = parse_length(attrib.get('width')), parse_length(attrib.get('height'))
        if w <= 0 or h <= 0:
            return None
        rx_attr, ry_attr = attrib.get('rx'), attrib.get('ry')
        rx = parse_length(rx_attr if rx_attr is not None else ry_attr)
        ry = parse_length(ry_attr if ry_attr is not None else rx_attr)
        rx, ry = min(max(rx, 0.0), w / 2), min(max(ry, 0.0), h / 2)
        if rx <= 0 or ry <= 0:
            return f"M {_fmt(x, y)} H {_fmt(x + w)} V {_fmt(y + h)} H {_fmt(x)} Z"
        return (
            f"M {_fmt(x + rx, y)} H {_fmt(x + w - rx)} "
            f"A {_fmt(rx, ry)} 0 0 1 {_fmt(x + w, y + ry)} V {_fmt(y + h - ry)} "
            f"A {_fmt(rx, ry)} 0 0 1 {_fmt(x + w - rx, y + h)} H {_fmt(x + rx)} "
            f"A {_fmt(rx, ry)} 0 0 1 {_fmt(x, y + h - ry)} V {_fmt(y + ry)} "
            f"A {_fmt(rx, ry)} 0 0 1 {_fmt(x + rx, y)} Z"
        )

    if name in ('circle', 'ellipse'):
        cx, cy = parse_length(attrib.get('cx')), parse_length(attrib.get('cy'))
        if name == 'circle':
            rx = ry = parse_length(attrib.get('r'))
        else:
            rx, ry = parse_length(attrib.get('rx')), parse_length(attrib.get('ry'))
        if rx <= 0 or ry <= 0:
            return None
        return (
            f"M {_fmt(cx + rx, cy)} "
            f"A {_fmt(rx, ry)} 0 1 1 {_fmt(cx - rx, cy)} "
            f"A {_fmt(rx, ry)} 0 1 1 {_fmt(cx + rx, cy)} Z"
        )

    if name == 'line':
        x1, y1 = parse_length(attrib.get('x1')), parse_length(attrib.get('y1'))
        x2, y2 = parse_length(attrib.get('x2')), parse_length(attrib.get('y2'))
        return f"M {_fmt(x1, y1)} L {_fmt(x2, y2)}"

    if name in ('polyline', 'polygon'):
        values = parse_numbers(attrib.get('points'))
        pairs = list(zip(values[0::2], values[1::2]))
        if len(pairs) < 2:
            return None
        d = f"M {_fmt(*pairs[0])} " + ' '.join(f"L {_fmt(*p)}" for p in pairs[1:])
        return d + (" Z" if name == 'polygon' else "")

    return None


# --- Loader ---

class SvgSceneLoader:
    """Builds a SceneTree from SVG markup."""

    def __init__(self, options: Optional[RenderOptions] = None):
        self.options = options or RenderOptions.default()
        if not self.options.validate():
            raise ValueError("Invalid RenderOptions")
        self._gradient_elements: Dict[str, Element] = {}
        self._definitions: Dict[str, LinearGradient] = {}
        self._bbox_gradient_count = 0

    def load(self, svg_text: Union[str, bytes]) -> SceneTree:
        try:
            root = DefusedET.fromstring(svg_text)
        except (ParseError, DefusedXmlException) as e:
            logger.error(f"Failed to parse SVG: {e}")
            raise SvgParseError(f"Failed to parse SVG: {e}") from e

        if local_name(root.tag) != 'svg':
            raise SvgParseError(f"Root element is <{local_name(root.tag)}>, expected <svg>")

        self._gradient_elements = {}
        self._definitions = {}
        self._bbox_gradient_count = 0
        for element in root.iter():
            if local_name(element.tag) == 'linearGradient' and element.get('id'):
                self._gradient_elements[element.get('id')] = element

        view_box, width, height = self._read_viewport(root)

        root_style = parse_style(root)
        style = inherit_style(DEFAULT_STYLE, root_style)
        opacity = min(1.0, max(0.0, parse_fraction(root_style.get('opacity'), 1.0)))
        children = self._convert_children(root, style, opacity)
        tree = SceneTree(
            root=RootNode(view_box=view_box, children=children),
            definitions=self._definitions,
            width=width,
            height=height,
        )
        logger.debug(
            f"Loaded SVG scene {width:.1f}x{height:.1f}pt with "
            f"{len(children)} top-level node(s), {len(self._definitions)} gradient(s)"
        )
        return tree

    def _read_viewport(self, root: Element) -> Tuple[ViewBox, float, float]:
        width_pt = parse_length_pt(root.get('width'))
        height_pt = parse_length_pt(root.get('height'))
        vb_values = parse_numbers(root.get('viewBox'))

        if len(vb_values) == 4 and vb_values[2] > 0 and vb_values[3] > 0:
            view_box = ViewBox(x=vb_values[0], y=vb_values[1], width=vb_values[2], height=vb_values[3])
        else:
            vb_width = width_pt / UNIT_TO_PT[None] if width_pt else self.options.default_width / UNIT_TO_PT[None]
            vb_height = height_pt / UNIT_TO_PT[None] if height_pt else self.options.default_height / UNIT_TO_PT[None]
            view_box = ViewBox(x=0.0, y=0.0, width=vb_width, height=vb_height)

        # Missing dimensions follow the view box, keeping its aspect ratio when one side is known
        if width_pt is None and height_pt is None:
            width_pt = view_box.width * UNIT_TO_PT[None]
            height_pt = view_box.height * UNIT_TO_PT[None]
        elif width_pt is None:
            width_pt = height_pt * view_box.width / view_box.height
        elif height_pt is None:
            height_pt = width_pt * view_box.height / view_box.width

        return view_box, width_pt, height_pt

    def _convert_children(self, parent: Element, parent_style: Dict[str, str], opacity: float) -> List:
        nodes = []
        for element in parent:
            if not isinstance(element.tag, str):
                continue
            node = self._convert_element(element, parent_style, opacity)
            if node is not None:
                nodes.append(node)
        return nodes

    def _convert_element(self, element: Element, parent_style: Dict[str, str], opacity: float):
        name = local_name(element.tag)
        if name in SKIPPED_ELEMENTS:
            return None

        own_style = parse_style(element)
        if own_style.get('display') == 'none':
            return None

        style = inherit_style(parent_style, own_style)
        opacity *= min(1.0, max(0.0, parse_fraction(own_style.get('opacity'), 1.0)))

        if name in ('g', 'a', 'svg'):
            transform = parse_transform(element.get('transform'))
            if name == 'svg':
                x, y = parse_length(element.get('x')), parse_length(element.get('y'))
                transform = transform.multiply(Transform.translate(x, y))
            return GroupNode(
                id=element.get('id'),
                transform=transform,
                children=self._convert_children(element, style, opacity),
            )

        d = shape_to_path_data(name, element.attrib)
        if d is None:
            if name not in ('path', 'rect', 'circle', 'ellipse', 'line', 'polyline', 'polygon'):
                logger.debug(f"Skipping unsupported element <{name}>")
            return None

        try:
            segments, bbox = path_data_to_segments(d, self.options.arc_segments_per_quarter)
        except (ValueError, IndexError) as e:
            logger.warning(f"Failed to parse path data of <{name}>: {e}")
            return None
        if not segments:
            return None

        fill = None if name == 'line' else self._build_fill(style, opacity, bbox)
        return PathNode(
            id=element.get('id'),
            segments=segments,
            fill=fill,
            stroke=self._build_stroke(style, opacity),
            transform=parse_transform(element.get('transform')),
        )

    def _resolve_paint(self, value: str, current_color: str, bbox):
        url_match = _URL_RE.match(value.strip())
        if url_match:
            gradient_id, fallback = url_match.group(1), url_match.group(2).strip()
            if gradient_id in self._gradient_elements:
                return GradientReference(id=self._gradient_for(gradient_id, bbox))
            if fallback:
                return self._resolve_paint(fallback, current_color, bbox)
            return GradientReference(id=gradient_id)

        color = parse_color(value, current_color)
        if color is None:
            return None
        return SolidColor(color=color)

    def _build_fill(self, style: Dict[str, str], opacity: float, bbox) -> Optional[Fill]:
        paint = self._resolve_paint(style['fill'], style['color'], bbox)
        if paint is None:
            return None
        fill_opacity = min(1.0, max(0.0, parse_fraction(style['fill-opacity'], 1.0)))
        rule = FillRule.EVEN_ODD if style['fill-rule'] == 'evenodd' else FillRule.NON_ZERO
        return Fill(paint=paint, opacity=fill_opacity * opacity, rule=rule)

    def _build_stroke(self, style: Dict[str, str], opacity: float) -> Optional[Stroke]:
        paint = self._resolve_paint(style['stroke'], style['color'], None)
        width = parse_length(style['stroke-width'], 1.0)
        if paint is None or width <= 0:
            return None
        stroke_opacity = min(1.0, max(0.0, parse_fraction(style['stroke-opacity'], 1.0)))
        return Stroke(
            paint=paint,
            width=width,
            opacity=stroke_opacity * opacity,
            dasharray=parse_dasharray(style['stroke-dasharray']),
            dashoffset=parse_length(style['stroke-dashoffset'], 0.0),
            linecap=LINECAPS.get(style['stroke-linecap'], LineCapStyle.BUTT),
            linejoin=LINEJOINS.get(style['stroke-linejoin'], LineJoinStyle.MITER),
            miterlimit=max(1.0, parse_fraction(style['stroke-miterlimit'], 4.0)),
        )

    # --- Gradients ---

    def _gradient_stops(self, element: Element, seen=None) -> List[GradientStop]:
        stops = []
        previous = 0.0
        for child in element:
            if not isinstance(child.tag, str) or local_name(child.tag) != 'stop':
                continue
            stop_style = {'stop-color': child.get('stop-color', 'black'), 'stop-opacity': child.get('stop-opacity', '1')}
            for declaration in child.get('style', '').split(';'):
                if ':' in declaration:
                    key, value = declaration.split(':', 1)
                    stop_style[key.strip()] = value.strip()
            offset = min(1.0, max(0.0, parse_fraction(child.get('offset'), 0.0)))
            offset = max(offset, previous)
            previous = offset
            color = parse_color(stop_style['stop-color']) or RgbBytes(red=0, green=0, blue=0)
            stops.append(GradientStop(
                offset=offset,
                color=color,
                opacity=min(1.0, max(0.0, parse_fraction(stop_style['stop-opacity'], 1.0))),
            ))

        if stops:
            return stops

        # Stops may be inherited through href
        href = element.get('href') or element.get(XLINK_HREF)
        seen = seen or set()
        if href and href.startswith('#') and href[1:] not in seen:
            seen.add(href[1:])
            referenced = self._gradient_elements.get(href[1:])
            if referenced is not None:
                return self._gradient_stops(referenced, seen)
        return stops

    def _gradient_for(self, gradient_id: str, bbox) -> str:
        """Definition id to reference for a path; bounding-box gradients are resolved per path."""
        element = self._gradient_elements[gradient_id]
        user_space = element.get('gradientUnits') == 'userSpaceOnUse'
        transform = parse_transform(element.get('gradientTransform'))

        if user_space:
            x1 = parse_length(element.get('x1'), 0.0)
            y1 = parse_length(element.get('y1'), 0.0)
            x2 = parse_length(element.get('x2'), 0.0)
            y2 = parse_length(element.get('y2'), 0.0)
            definition_id = gradient_id
        else:
            x1 = parse_fraction(element.get('x1'), 0.0)
            y1 = parse_fraction(element.get('y1'), 0.0)
            x2 = parse_fraction(element.get('x2'), 1.0)
            y2 = parse_fraction(element.get('y2'), 0.0)
            if bbox is not None:
                xmin, ymin, xmax, ymax = bbox
                box = Transform(a=max(xmax - xmin, _EPSILON), d=max(ymax - ymin, _EPSILON), e=xmin, f=ymin)
                transform = box.multiply(transform)
            definition_id = f"{gradient_id}#{self._bbox_gradient_count}"
            self._bbox_gradient_count += 1

        if definition_id not in self._definitions:
            self._definitions[definition_id] = LinearGradient(
                id=definition_id,
                x1=x1, y1=y1, x2=x2, y2=y2,
                stops=self._gradient_stops(element),
                transform=transform,
            )
        return definition_id


def load_svg(svg_text: Union[str, bytes], options: Optional[RenderOptions] = None) -> SceneTree:
    """Parse SVG markup into a SceneTree."""
    return SvgSceneLoader(options).load(svg_text)


def load_svg_file(path: Union[str, FilePath], options: Optional[RenderOptions] = None) -> SceneTree:
    try:
        data = FilePath(path).read_bytes()
    except FileNotFoundError:
        logger.error(f"SVG file not found: {path}")
        raise
    return load_svg(data, options)
