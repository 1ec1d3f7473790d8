"""
Scene Renderer

Walks a SceneTree and emits drawing operators into a layer. Every Root and
Group node is wrapped in q/Q through GraphicsStateStack.saved, so state never
leaks into siblings even when a branch exits early.

The target layer only needs three methods:
    add_operations(instructions), add_ext_gstate(key, value) -> name,
    add_shading(shading_dictionary) -> name
"""

import logging
from dataclasses import dataclass, asdict
from typing import List

from pikepdf import Name

from constants.pdf_keys import KEY_FILL_OPACITY, KEY_STROKE_OPACITY
from constants.pdf_operators import (
    OP_CTM, OP_SET_DASH, OP_SET_LINE_WIDTH, OP_SET_LINE_CAP, OP_SET_LINE_JOIN,
    OP_SET_MITER_LIMIT, OP_SET_GRAPHICS_STATE_PARAMS,
    OP_SET_RGB_COLOR_FILL, OP_SET_RGB_COLOR_STROKE,
    OP_MOVETO, OP_LINETO, OP_CURVETO, OP_CLOSEPATH,
    OP_CLIP, OP_CLIP_EVEN_ODD, OP_END_PATH, OP_SHADING
)
from models.graphics_types import Transform
from models.scene_types import (
    ClosePath, CurveTo, FillRule, GradientReference, GroupNode, LineTo, MoveTo,
    PathNode, RootNode, SceneTree, SolidColor, Stroke
)
from processors.pdf_graphics import (
    GraphicsStateStack, Instruction, format_operand, make_instruction, select_path_painting_operator
)
from processors.shading import build_shading
from utils.validation import GraphicsStateError

logger = logging.getLogger(__name__)


@dataclass
class RenderStats:
    nodes: int = 0
    paths: int = 0
    gradients: int = 0
    skipped_paths: int = 0
    max_depth: int = 0

    def to_dict(self):
        return asdict(self)


class SceneRenderer:
    """Renders one scene tree; gradients resolve against the tree's definitions."""

    def __init__(self, tree: SceneTree):
        self.tree = tree
        self.state = GraphicsStateStack()
        self.stats = RenderStats()
        self._instructions: List[Instruction] = []
        self._layer = None

    def render(self, layer, node=None) -> None:
        """Emit operators for ``node`` (default: the tree root) into ``layer``."""
        if node is None:
            node = self.tree.root

        self._instructions = []
        depth_before = self.state.depth
        self._layer = layer
        try:
            self._draw_node(node)
        finally:
            self._layer = None

        if self.state.depth != depth_before:
            raise GraphicsStateError(
                f"Graphics state depth {self.state.depth} after render, expected {depth_before}"
            )

        layer.add_operations(self._instructions)
        self.stats.max_depth = max(self.stats.max_depth, self.state.max_depth)
        logger.debug(f"Rendered scene: {self.stats.to_dict()}")

    def _emit(self, op: bytes, *operands) -> None:
        instruction = make_instruction(op, *operands)
        self._instructions.append(instruction)
        self.state.track(op, instruction[0])

    def _emit_transform(self, transform: Transform) -> None:
        self._emit(OP_CTM, *transform.as_list())

    def _draw_node(self, node) -> None:
        self.stats.nodes += 1
        if isinstance(node, RootNode):
            with self.state.saved(self._instructions):
                view_box = node.view_box
                self._emit_transform(Transform.translate(-view_box.x, -view_box.y))
                for child in node.children:
                    self._draw_node(child)
        elif isinstance(node, GroupNode):
            with self.state.saved(self._instructions):
                self._emit_transform(node.transform)
                for child in node.children:
                    self._draw_node(child)
        elif isinstance(node, PathNode):
            self._draw_path(node)
        else:
            logger.debug(f"Skipping unsupported node type {type(node).__name__}")

    def _draw_path(self, node: PathNode) -> None:
        if not node.segments:
            self.stats.skipped_paths += 1
            return

        self.stats.paths += 1
        fill = node.fill
        stroke = node.stroke

        with self.state.saved(self._instructions):
            if fill is not None and isinstance(fill.paint, SolidColor):
                self._emit(OP_SET_RGB_COLOR_FILL, *fill.paint.color.normalized())
                self._set_alpha(KEY_FILL_OPACITY, fill.opacity)

            if stroke is not None:
                self._apply_stroke_style(stroke)

            self._emit_transform(node.transform)
            closed = self._emit_segments(node)

            even_odd = fill is not None and fill.rule == FillRule.EVEN_ODD
            if fill is not None and isinstance(fill.paint, GradientReference):
                self._paint_gradient(fill.paint, even_odd)
            else:
                self._emit(select_path_painting_operator(stroke is not None, fill is not None, closed, even_odd))

    def _set_alpha(self, key: str, alpha: float) -> None:
        name = self._layer.add_ext_gstate(key, alpha)
        self._emit(OP_SET_GRAPHICS_STATE_PARAMS, Name(f"/{name}"))

    def _apply_stroke_style(self, stroke: Stroke) -> None:
        dashes = list(stroke.dasharray or [])
        if any(v < 0 for v in dashes) or (dashes and sum(dashes) == 0):
            dashes = []
        self._emit(OP_SET_DASH, [format_operand(float(v)) for v in dashes], stroke.dashoffset if dashes else 0)
        self._emit(OP_SET_LINE_WIDTH, stroke.width)
        self._emit(OP_SET_LINE_CAP, int(stroke.linecap))
        self._emit(OP_SET_LINE_JOIN, int(stroke.linejoin))
        self._emit(OP_SET_MITER_LIMIT, max(stroke.miterlimit, 1.0))
        if isinstance(stroke.paint, SolidColor):
            self._emit(OP_SET_RGB_COLOR_STROKE, *stroke.paint.color.normalized())
            self._set_alpha(KEY_STROKE_OPACITY, stroke.opacity)

    def _emit_segments(self, node: PathNode) -> bool:
        """
        Emit construction operators; returns whether the path was marked closed.

        A close-path segment emits no geometry of its own. It only marks the
        path, and the mark stays for the rest of the path, so the painting
        operator picked afterwards closes it.
        """
        segments = node.segments
        closed = False

        if not isinstance(segments[0], MoveTo):
            logger.debug(f"Path {node.id or ''} does not start with a move-to, starting at origin")
            self._emit(OP_MOVETO, 0, 0)

        for segment in segments:
            if isinstance(segment, MoveTo):
                self._emit(OP_MOVETO, segment.x, segment.y)
            elif isinstance(segment, LineTo):
                self._emit(OP_LINETO, segment.x, segment.y)
            elif isinstance(segment, CurveTo):
                self._emit(OP_CURVETO, segment.x1, segment.y1, segment.x2, segment.y2, segment.x, segment.y)
            elif isinstance(segment, ClosePath):
                closed = True
        return closed

    def _paint_gradient(self, paint: GradientReference, even_odd: bool) -> None:
        gradient = self.tree.find_gradient(paint.id)
        if gradient is None:
            logger.debug(f"Gradient '{paint.id}' not found, discarding path")
            self.stats.skipped_paths += 1
            self._emit(OP_END_PATH)
            return

        self._emit(OP_CLOSEPATH)
        self._emit(OP_CLIP_EVEN_ODD if even_odd else OP_CLIP)
        self._emit(OP_END_PATH)
        if not gradient.transform.is_identity():
            self._emit_transform(gradient.transform)

        shading_name = self._layer.add_shading(build_shading(gradient.stops, gradient.axis()))
        self._emit(OP_SHADING, Name(f"/{shading_name}"))
        self.stats.gradients += 1


def render_scene(layer, tree: SceneTree, node=None) -> RenderStats:
    """Render ``tree`` into ``layer`` and return the render statistics."""
    renderer = SceneRenderer(tree)
    renderer.render(layer, node)
    return renderer.stats
