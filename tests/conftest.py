"""Shared test fixtures."""

import io

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from engine.config import ExportConfig
from engine.document import PdfDocument
from models.graphics_types import Cmyk, Outline, Point


# Sample SVGs

CIRCLE_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2" stroke-linecap="round" stroke-linejoin="round">
  <circle cx="12" cy="12" r="10"/>
</svg>'''

BAR_CHART_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2" stroke-linecap="round" stroke-linejoin="round">
  <line x1="18" x2="18" y1="20" y2="10"/>
  <line x1="12" x2="12" y1="20" y2="4"/>
  <line x1="6" x2="6" y1="20" y2="14"/>
</svg>'''

FILLED_RECT_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">
  <rect x="10" y="10" width="80" height="80" fill="#4ECDC4"/>
  <circle cx="50" cy="50" r="20" fill="#FF6B6B"/>
</svg>'''

GROUPED_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="200" height="100" viewBox="0 0 200 100">
  <g id="outer" transform="translate(10 20)" fill="blue">
    <g id="inner" transform="scale(2)" opacity="0.5">
      <rect id="box" width="10" height="10" fill-opacity="0.5"/>
      <polygon points="0,0 10,0 5,8" style="fill:#00ff00"/>
    </g>
    <polyline points="0,0 20,20 40,0" fill="none" stroke="black"/>
    <rect width="5" height="5" display="none"/>
  </g>
  <text x="0" y="10">ignored</text>
</svg>'''

GRADIENT_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" viewBox="0 0 100 50">
  <defs>
    <linearGradient id="sunset">
      <stop offset="0%" stop-color="#ff0000"/>
      <stop offset="50%" stop-color="#00ff00"/>
      <stop offset="100%" stop-color="#0000ff"/>
    </linearGradient>
    <linearGradient id="ground" gradientUnits="userSpaceOnUse" x1="0" y1="0" x2="100" y2="0" xlink:href="#sunset"/>
  </defs>
  <rect x="20" y="10" width="40" height="20" fill="url(#sunset)"/>
  <rect x="0" y="30" width="100" height="20" fill="url(#ground)"/>
</svg>'''

MISSING_GRADIENT_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10">
  <rect width="10" height="10" fill="url(#nowhere)"/>
  <rect width="5" height="5" fill="url(#nowhere) red"/>
</svg>'''

ENTITY_SVG = '''<?xml version="1.0"?>
<!DOCTYPE svg [<!ENTITY lol "lol"><!ENTITY lol2 "&lol;&lol;&lol;&lol;">]>
<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10"><text>&lol2;</text></svg>'''


def build_test_font() -> bytes:
    """Minimal TrueType font with .notdef, space and A."""
    pen = TTGlyphPen(None)
    pen.moveTo((0, 0))
    pen.lineTo((0, 700))
    pen.lineTo((500, 700))
    pen.lineTo((500, 0))
    pen.closePath()
    glyph = pen.glyph()

    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder([".notdef", "space", "A"])
    fb.setupCharacterMap({32: "space", 65: "A"})
    fb.setupGlyf({".notdef": glyph, "space": glyph, "A": glyph})
    fb.setupHorizontalMetrics({".notdef": (500, 0), "space": (250, 0), "A": (600, 0)})
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupNameTable({"familyName": "TestSans", "styleName": "Regular", "psName": "TestSans-Regular"})
    fb.setupOS2(sTypoAscender=800, sTypoDescender=-200, usWinAscent=800, usWinDescent=200, sCapHeight=700)
    fb.setupPost()

    buffer = io.BytesIO()
    fb.save(buffer)
    return buffer.getvalue()


def build_demo_shape(layer) -> None:
    """Open, unfilled four-point outline 5pt wide."""
    points = [(Point(x=200.0, y=200.0), False) for _ in range(4)]
    layer.set_outline(Outline(color=Cmyk(c=1.0, m=0.75, y=0.0, k=0.0), thickness=5))
    layer.add_shape(points, False, False)


@pytest.fixture
def test_font_bytes() -> bytes:
    return build_test_font()


@pytest.fixture
def document():
    """One 500x500pt page with one layer."""
    return PdfDocument.new("Test document", 500.0, 500.0, "Layer 1")


@pytest.fixture
def demo_document():
    doc, page, layer = PdfDocument.new("PDF_Document_title", 500.0, 500.0, "Layer 1")
    build_demo_shape(layer)
    return doc


@pytest.fixture
def uncompressed_config() -> ExportConfig:
    return ExportConfig(compress_streams=False)
