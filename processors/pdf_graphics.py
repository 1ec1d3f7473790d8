import logging
from collections import Counter
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np
import pikepdf
from pikepdf import Operator

from constants.pdf_operators import (
    OP_SAVE_STATE, OP_RESTORE_STATE, OP_CTM,
    OP_SET_RGB_COLOR_FILL, OP_SET_RGB_COLOR_STROKE,
    OP_STROKE, OP_CLOSE_STROKE, OP_FILL, OP_CLOSE_FILL_STROKE, OP_END_PATH,
    EVEN_ODD_VARIANTS
)
from utils.validation import GraphicsStateError

logger = logging.getLogger(__name__)

Instruction = Tuple[List[object], Operator]

REAL_PRECISION = 6

def normalize_operator(operator) -> bytes:
    op_name = operator.operator
    if isinstance(op_name, str):
        return op_name.encode('latin-1')
    elif isinstance(op_name, bytes):
        return op_name
    else:
        try:
            return str(op_name).encode('latin-1')
        except UnicodeEncodeError:
            return b''

def format_operand(value):
    """Convert a Python number to a content stream operand.

    Integral floats are written as integers and other reals with fixed
    precision, so the output never contains exponent notation.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return value
    if isinstance(value, int):
        return value
    if value.is_integer():
        return int(value)
    text = f"{value:.{REAL_PRECISION}f}".rstrip('0').rstrip('.')
    if text in ('', '-', '-0'):
        return 0
    return Decimal(text)

def make_instruction(op: bytes, *operands) -> Instruction:
    """Build an (operands, operator) pair accepted by pikepdf.unparse_content_stream."""
    return [format_operand(value) for value in operands], Operator(op.decode('latin-1'))

def select_path_painting_operator(stroke: bool, fill: bool, closed: bool, even_odd: bool = False) -> bytes:
    """
    Pick the painting operator for a constructed path.

    | stroke | fill | closed | operator |
    |--------|------|--------|----------|
    | yes    | yes  | yes    | b        |
    | yes    | yes  | no     | f        |
    | yes    | no   | yes    | s        |
    | yes    | no   | no     | S        |
    | no     | yes  | any    | f        |
    | no     | no   | any    | n        |
    """
    if stroke and fill:
        op = OP_CLOSE_FILL_STROKE if closed else OP_FILL
    elif stroke:
        op = OP_CLOSE_STROKE if closed else OP_STROKE
    elif fill:
        op = OP_FILL
    else:
        return OP_END_PATH

    if even_odd:
        return EVEN_ODD_VARIANTS.get(op, op)
    return op

class GraphicsStateStack:
    """Mirror of the q/Q stack kept while emitting operators."""

    def __init__(self):
        self.ctm = np.identity(3, dtype=float)
        self.state_stack = []
        self.fill_color: Optional[Tuple[float, ...]] = None
        self.stroke_color: Optional[Tuple[float, ...]] = None
        self.max_depth = 0

    @property
    def depth(self) -> int:
        return len(self.state_stack)

    def save_state(self):
        state = {
            'ctm': self.ctm.copy(),
            'fill_color': self.fill_color,
            'stroke_color': self.stroke_color,
        }
        self.state_stack.append(state)
        self.max_depth = max(self.max_depth, self.depth)

    def restore_state(self):
        if not self.state_stack:
            raise GraphicsStateError("Restore without a matching save")
        state = self.state_stack.pop()
        self.ctm = state['ctm']
        self.fill_color = state['fill_color']
        self.stroke_color = state['stroke_color']

    def update_ctm(self, a: float, b: float, c: float, d: float, e: float, f: float):
        new_matrix = np.array([[a, c, e], [b, d, f], [0, 0, 1]], dtype=float)
        self.ctm = np.dot(self.ctm, new_matrix)

    def current_matrix(self) -> List[float]:
        return [
            float(self.ctm[0, 0]), float(self.ctm[1, 0]),
            float(self.ctm[0, 1]), float(self.ctm[1, 1]),
            float(self.ctm[0, 2]), float(self.ctm[1, 2]),
        ]

    @contextmanager
    def saved(self, sink: List[Instruction]) -> Iterator[None]:
        """Emit q on entry and Q on every exit path."""
        sink.append(make_instruction(OP_SAVE_STATE))
        self.save_state()
        try:
            yield
        finally:
            self.restore_state()
            sink.append(make_instruction(OP_RESTORE_STATE))

    def track(self, op_name: bytes, operands: Sequence[object]) -> None:
        """Update tracked state from an operator that was just emitted."""
        try:
            if op_name == OP_CTM and len(operands) == 6:
                self.update_ctm(*[float(op) for op in operands])
            elif op_name == OP_SET_RGB_COLOR_FILL and len(operands) == 3:
                self.fill_color = tuple(float(op) for op in operands)
            elif op_name == OP_SET_RGB_COLOR_STROKE and len(operands) == 3:
                self.stroke_color = tuple(float(op) for op in operands)
        except (ValueError, TypeError) as e:
            logger.warning(f"Error updating graphics state for operator {op_name}: {e}")

def parse_operators(content: bytes) -> List[Tuple[bytes, List[object]]]:
    """Parse raw content bytes into (operator, operands) pairs."""
    pdf = pikepdf.Pdf.new()
    stream = pikepdf.Stream(pdf, content)
    return [
        (normalize_operator(instruction), list(instruction.operands))
        for instruction in pikepdf.parse_content_stream(stream)
    ]

def summarize_operators(content: bytes) -> Counter:
    """Count operators in a content stream, keyed by operator bytes."""
    return Counter(op for op, _ in parse_operators(content))

def count_balanced_saves(content: bytes) -> Tuple[int, int]:
    """Return (save count, restore count) for a content stream."""
    counts = summarize_operators(content)
    return counts[OP_SAVE_STATE], counts[OP_RESTORE_STATE]

def operators_in(content: bytes, ops: Sequence[bytes]) -> List[bytes]:
    """Operators from ``ops`` in stream order."""
    wanted = set(ops)
    return [op for op, _ in parse_operators(content) if op in wanted]
