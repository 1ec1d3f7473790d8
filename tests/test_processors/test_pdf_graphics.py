"""Tests for graphics-state helpers and operator selection."""

from decimal import Decimal

import pytest
from pikepdf import Name, unparse_content_stream

from processors.pdf_graphics import (
    GraphicsStateStack, count_balanced_saves, format_operand, make_instruction,
    operators_in, select_path_painting_operator, summarize_operators
)
from utils.validation import GraphicsStateError


class TestPaintingOperator:
    @pytest.mark.parametrize("stroke,fill,closed,expected", [
        (True, True, True, b'b'),
        (True, True, False, b'f'),
        (True, False, True, b's'),
        (True, False, False, b'S'),
        (False, True, True, b'f'),
        (False, True, False, b'f'),
        (False, False, True, b'n'),
        (False, False, False, b'n'),
    ])
    def test_paint_table(self, stroke, fill, closed, expected):
        assert select_path_painting_operator(stroke, fill, closed) == expected

    def test_even_odd_variants(self):
        assert select_path_painting_operator(False, True, False, even_odd=True) == b'f*'
        assert select_path_painting_operator(True, True, True, even_odd=True) == b'b*'
        # Stroke-only and no-paint have no fill rule
        assert select_path_painting_operator(True, False, False, even_odd=True) == b'S'
        assert select_path_painting_operator(False, False, False, even_odd=True) == b'n'


class TestFormatOperand:
    def test_integral_float_becomes_int(self):
        assert format_operand(5.0) == 5
        assert isinstance(format_operand(5.0), int)

    def test_fraction_has_no_exponent(self):
        assert format_operand(0.5) == Decimal('0.5')
        assert format_operand(1e-9) == 0
        assert 'E' not in str(format_operand(0.0000125))

    def test_non_numbers_pass_through(self):
        name = Name('/GS0_0')
        assert format_operand(name) is name
        assert format_operand(True) is True


def test_make_instruction_unparses():
    data = unparse_content_stream([make_instruction(b'cm', 1.0, 0.0, 0.0, 1.0, 10.5, 20.0)])
    assert data == b'1 0 0 1 10.5 20 cm'


class TestGraphicsStateStack:
    def test_restore_without_save_raises(self):
        with pytest.raises(GraphicsStateError):
            GraphicsStateStack().restore_state()

    def test_saved_restores_on_exception(self):
        stack = GraphicsStateStack()
        sink = []
        with pytest.raises(RuntimeError):
            with stack.saved(sink):
                assert stack.depth == 1
                raise RuntimeError("boom")
        assert stack.depth == 0
        assert count_balanced_saves(unparse_content_stream(sink)) == (1, 1)

    def test_nested_saves_track_max_depth(self):
        stack = GraphicsStateStack()
        sink = []
        with stack.saved(sink):
            with stack.saved(sink):
                pass
        assert stack.max_depth == 2
        assert stack.depth == 0

    def test_ctm_restored_after_scope(self):
        stack = GraphicsStateStack()
        sink = []
        with stack.saved(sink):
            stack.track(b'cm', [2, 0, 0, 2, 10, 20])
            assert stack.current_matrix() == [2.0, 0.0, 0.0, 2.0, 10.0, 20.0]
        assert stack.current_matrix() == [1.0, 0.0, 0.0, 1.0, 0.0, 0.0]

    def test_track_colors(self):
        stack = GraphicsStateStack()
        stack.track(b'rg', [1, 0, 0])
        stack.track(b'RG', [0, 0, 1])
        assert stack.fill_color == (1.0, 0.0, 0.0)
        assert stack.stroke_color == (0.0, 0.0, 1.0)


def test_summarize_operators():
    counts = summarize_operators(b"q 1 0 0 1 0 0 cm 0 0 m 10 10 l S Q")
    assert counts[b'q'] == 1
    assert counts[b'cm'] == 1
    assert counts[b'S'] == 1
    assert counts[b'f'] == 0


def test_operators_in_keeps_stream_order():
    content = b"0 0 m 1 1 l h W n"
    assert operators_in(content, [b'h', b'W', b'n']) == [b'h', b'W', b'n']
