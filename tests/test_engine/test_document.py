"""Tests for the document arena and its page/layer handles."""

import io
from datetime import datetime, timezone

import pytest

from tests.conftest import CIRCLE_SVG, build_demo_shape

from constants.pdf_keys import KEY_EXT_GSTATE
from engine.document import PdfDocument
from engine.fonts import BuiltinFont
from models.document_types import PdfConformance
from models.graphics_types import LineCapStyle, LineDashPattern, LineJoinStyle, Point, Rgb
from processors.pdf_graphics import count_balanced_saves, parse_operators, summarize_operators
from processors.svg_scene_loader import load_svg
from utils.geometry import calculate_points_for_circle, calculate_points_for_rect
from utils.validation import DocumentConsumedError, GraphicsStateError


class TestArena:
    def test_new_document(self, document):
        doc, page, layer = document
        assert doc.page_count == 1
        assert page.width == 500.0
        assert page.height == 500.0
        assert layer.name == "Layer 1"
        assert page.layer_count == 1

    def test_pages_and_layers(self, document):
        doc, page, layer = document
        page2, layer2 = doc.add_page(200, 300, "Page 2, Layer 1")
        layer3 = doc.get_page(page2.page_index).add_layer("Layer 3")
        assert doc.page_count == 2
        assert page2.layer_count == 2
        assert layer3.name == "Layer 3"
        assert page2.get_layer(1).name == "Layer 3"

    def test_bad_indices(self, document):
        doc, page, layer = document
        with pytest.raises(IndexError):
            doc.get_page(5)
        with pytest.raises(IndexError):
            page.get_layer(3)

    def test_invalid_page_size(self, document):
        doc, page, layer = document
        with pytest.raises(ValueError):
            doc.add_page(0, 100, "Bad")

    def test_metadata_setters_chain(self, document):
        doc, page, layer = document
        created = datetime(2020, 5, 1, tzinfo=timezone.utc)
        result = (doc.with_title("Renamed")
                  .with_trapping(True)
                  .with_document_id("A" * 32)
                  .with_conformance(PdfConformance.X1A_2001_PDF_1_3)
                  .with_creation_date(created)
                  .with_keywords("test")
                  .with_instance_id("B" * 32)
                  .with_document_version(3)
                  .with_mod_date(created)
                  .with_metadata_date(created))
        assert result is doc
        assert doc.metadata.title == "Renamed"
        assert doc.metadata.trapping is True
        assert doc.metadata.document_id == "A" * 32
        assert doc.metadata.creation_date == created
        assert doc.metadata.modification_date == created
        assert doc.metadata.metadata_date == created
        assert doc.metadata.instance_id == "B" * 32
        assert doc.metadata.document_version == 3


class TestConsumption:
    def test_handles_fail_after_export(self, document):
        doc, page, layer = document
        doc.save_to_bytes()
        assert doc.is_consumed
        with pytest.raises(DocumentConsumedError):
            layer.add_shape([(Point(x=0, y=0), False)], False, False)
        with pytest.raises(DocumentConsumedError):
            page.add_layer("Too late")

    def test_second_export_rejected(self, document):
        doc, page, layer = document
        first = doc.save_to_bytes()
        assert first.startswith(b"%PDF-")
        with pytest.raises(DocumentConsumedError):
            doc.save_to_bytes()

    def test_repr(self, document):
        doc, page, layer = document
        assert "pages=1" in repr(doc)
        doc.save(io.BytesIO())
        assert repr(doc) == "PdfDocument(consumed)"


class TestShapes:
    def test_demo_outline(self, document):
        doc, page, layer = document
        build_demo_shape(layer)
        counts = summarize_operators(layer.content)
        assert counts[b'm'] == 1
        assert counts[b'l'] == 3
        assert counts[b'S'] == 1
        assert counts[b'f'] == 0
        assert counts[b'K'] == 1
        assert counts[b'w'] == 1

    def test_circle_uses_curves(self, document):
        doc, page, layer = document
        layer.add_shape(calculate_points_for_circle(50, 100, 100), True, True)
        counts = summarize_operators(layer.content)
        assert counts[b'c'] == 4
        assert counts[b'b'] == 1

    def test_rect_filled_without_stroke(self, document):
        doc, page, layer = document
        layer.add_shape(calculate_points_for_rect(40, 20, 100, 100), True, True, has_stroke=False)
        counts = summarize_operators(layer.content)
        assert counts[b'l'] == 3
        assert counts[b'f'] == 1

    def test_single_control_point_uses_y(self, document):
        doc, page, layer = document
        points = [(Point(x=0, y=0), False), (Point(x=5, y=10), True), (Point(x=10, y=0), False)]
        layer.add_shape(points, False, False)
        assert summarize_operators(layer.content)[b'y'] == 1

    def test_empty_shape_is_ignored(self, document):
        doc, page, layer = document
        layer.add_shape([], True, True)
        assert layer.content == b""


class TestGraphicsState:
    def test_restore_without_save(self, document):
        doc, page, layer = document
        with pytest.raises(GraphicsStateError):
            layer.restore_graphics_state()

    def test_save_restore_pair(self, document):
        doc, page, layer = document
        layer.save_graphics_state()
        layer.set_fill_color(Rgb(r=1, g=0, b=0))
        layer.restore_graphics_state()
        assert count_balanced_saves(layer.content) == (1, 1)

    def test_alpha_states_are_shared(self, document):
        doc, page, layer = document
        layer.set_fill_alpha(0.5)
        layer.set_fill_alpha(0.5)
        layer.set_outline_alpha(0.5)
        assert len(layer.resources[KEY_EXT_GSTATE]) == 2

    def test_dash_pattern(self, document):
        doc, page, layer = document
        layer.set_line_dash_pattern(LineDashPattern(offset=1, dash_1=6, gap_1=3))
        dash = [operands for op, operands in parse_operators(layer.content) if op == b'd'][0]
        assert [float(v) for v in dash[0]] == [6.0, 3.0]
        assert float(dash[1]) == 1.0

    def test_line_styles(self, document):
        doc, page, layer = document
        layer.set_line_cap_style(LineCapStyle.ROUND)
        layer.set_line_join_style(LineJoinStyle.BEVEL)
        ops = parse_operators(layer.content)
        assert [(op, [int(v) for v in operands]) for op, operands in ops] == [(b'J', [1]), (b'j', [2])]

    def test_solid_dash_pattern(self, document):
        doc, page, layer = document
        layer.set_line_dash_pattern(LineDashPattern.solid())
        dash = [operands for op, operands in parse_operators(layer.content) if op == b'd'][0]
        assert len(dash[0]) == 0


def test_use_text_with_builtin_font(document):
    doc, page, layer = document
    font = doc.add_builtin_font(BuiltinFont.HELVETICA)
    assert font.name == "F0"
    assert doc.add_builtin_font(BuiltinFont.HELVETICA) == font
    layer.use_text("Hello", 24, 50, 400, font)
    ops = [op for op, _ in parse_operators(layer.content)]
    assert ops == [b'BT', b'Tf', b'Td', b'Tj', b'ET']
    assert doc.get_font(font) is BuiltinFont.HELVETICA


class TestSvgPlacement:
    def test_add_svg_flips_and_scales(self, document):
        doc, page, layer = document
        renderer = layer.add_svg(load_svg(CIRCLE_SVG), x=20, y=30, width=240)
        ops = parse_operators(layer.content)
        assert ops[0][0] == b'q'
        assert ops[1][0] == b'cm'
        # 24 unit view box scaled to 240pt, y axis flipped, origin moved to the top edge
        assert [float(v) for v in ops[1][1]] == [10.0, 0.0, 0.0, -10.0, 20.0, 270.0]
        saves, restores = count_balanced_saves(layer.content)
        assert saves == restores
        assert renderer.stats.paths == 1

    def test_add_svg_default_size(self, document):
        doc, page, layer = document
        layer.add_svg(load_svg(CIRCLE_SVG))
        cm = [operands for op, operands in parse_operators(layer.content) if op == b'cm'][0]
        assert [float(v) for v in cm] == pytest.approx([0.75, 0.0, 0.0, -0.75, 0.0, 18.0])

    def test_add_svg_without_flip(self, document):
        doc, page, layer = document
        layer.add_svg(load_svg(CIRCLE_SVG), x=5, y=5, width=48, height=48, flip_y=False)
        cm = [operands for op, operands in parse_operators(layer.content) if op == b'cm'][0]
        assert [float(v) for v in cm] == [2.0, 0.0, 0.0, 2.0, 5.0, 5.0]
