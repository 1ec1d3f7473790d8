"""
Document model

PdfDocument is the single owner of all pages, layers, fonts and metadata.
PageRef and LayerRef are lightweight index handles: every call resolves its
page/layer against the document again, and every mutation goes through the
document's state. Exporting moves that state out of the document, after
which any handle raises DocumentConsumedError.
"""

import io
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import BinaryIO, Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING, Union

from pikepdf import Dictionary, Name, Object, String, unparse_content_stream

from constants.pdf_keys import (
    KEY_EXT_GSTATE, KEY_SHADING, KEY_TYPE, KEY_FILL_OPACITY, KEY_STROKE_OPACITY,
    VAL_EXT_GSTATE, RESOURCE_NAME_PREFIX
)
from constants.pdf_operators import (
    OP_SAVE_STATE, OP_RESTORE_STATE, OP_CTM, OP_SET_LINE_WIDTH, OP_SET_LINE_CAP,
    OP_SET_LINE_JOIN, OP_SET_DASH, OP_SET_GRAPHICS_STATE_PARAMS,
    OP_SET_RGB_COLOR_FILL, OP_SET_CMYK_COLOR_FILL, OP_SET_GRAY_FILL,
    OP_SET_RGB_COLOR_STROKE, OP_SET_CMYK_COLOR_STROKE, OP_SET_GRAY_STROKE,
    OP_MOVETO, OP_LINETO, OP_CURVETO, OP_CURVETO_Y,
    OP_BEGIN_TEXT, OP_END_TEXT, OP_SET_FONT, OP_MOVE_TEXT, OP_SHOW_TEXT
)
from engine.fonts import BuiltinFont, ExternalFont, FontList, FontRef
from engine.metadata import PdfMetadata
from engine.object_store import ObjectStore
from models.document_types import IccProfile, PdfConformance
from models.graphics_types import (
    Cmyk, Color, Greyscale, LineCapStyle, LineDashPattern, LineJoinStyle, Outline, Point, Rgb
)
from models.scene_types import SceneTree
from processors.pdf_graphics import Instruction, format_operand, make_instruction, select_path_painting_operator
from processors.scene_renderer import SceneRenderer
from utils.validation import DocumentConsumedError, GraphicsStateError, validate_page_size

if TYPE_CHECKING:
    from engine.config import ExportConfig

logger = logging.getLogger(__name__)

FILL_COLOR_OPS = {Rgb: OP_SET_RGB_COLOR_FILL, Cmyk: OP_SET_CMYK_COLOR_FILL, Greyscale: OP_SET_GRAY_FILL}
STROKE_COLOR_OPS = {Rgb: OP_SET_RGB_COLOR_STROKE, Cmyk: OP_SET_CMYK_COLOR_STROKE, Greyscale: OP_SET_GRAY_STROKE}


@dataclass
class PdfLayer:
    """Content bytes and resources of one layer."""
    name: str
    index: int
    content: bytearray = field(default_factory=bytearray)
    resources: Dict[str, Dict[str, Object]] = field(default_factory=dict)
    state_depth: int = 0
    _ext_gstate_names: Dict[Tuple[str, object], str] = field(default_factory=dict)

    def append(self, instructions: Sequence[Instruction]) -> None:
        if not instructions:
            return
        data = unparse_content_stream(list(instructions))
        if self.content:
            self.content += b"\n"
        self.content += data

    def register_resource(self, category: str, obj: Object) -> str:
        entries = self.resources.setdefault(category, {})
        name = f"{RESOURCE_NAME_PREFIX[category]}{self.index}_{len(entries)}"
        entries[name] = obj
        return name

    def register_ext_gstate(self, key: str, value: float) -> str:
        """Graphics state dictionary setting one parameter, shared by equal requests."""
        value = format_operand(float(value))
        cache_key = (key, value)
        if cache_key not in self._ext_gstate_names:
            gstate = Dictionary({KEY_TYPE: Name(VAL_EXT_GSTATE), key: value})
            self._ext_gstate_names[cache_key] = self.register_resource(KEY_EXT_GSTATE, gstate)
        return self._ext_gstate_names[cache_key]


@dataclass
class PdfPage:
    index: int
    width: float
    height: float
    layers: List[PdfLayer] = field(default_factory=list)


@dataclass
class DocumentState:
    """Everything a document owns; moved out on export."""
    metadata: PdfMetadata
    store: ObjectStore
    pages: List[PdfPage] = field(default_factory=list)
    fonts: FontList = field(default_factory=FontList)
    icc_profiles: List[IccProfile] = field(default_factory=list)


class PdfDocument:
    """
    In-memory document.

    Example:
        >>> doc, page, layer = PdfDocument.new("Demo", 500, 500, "Layer 1")
        >>> layer.set_outline_thickness(5)
        >>> doc.save(open("out.pdf", "wb"))
    """

    def __init__(self, title: str):
        self._state: Optional[DocumentState] = DocumentState(
            metadata=PdfMetadata(title=title),
            store=ObjectStore(),
        )

    @classmethod
    def new(cls, title: str, width: float, height: float, layer_name: str) -> Tuple['PdfDocument', 'PageRef', 'LayerRef']:
        """Document with one page holding one layer. Sizes are in points."""
        doc = cls(title)
        page, layer = doc.add_page(width, height, layer_name)
        return doc, page, layer

    @classmethod
    def empty(cls, title: str) -> 'PdfDocument':
        return cls(title)

    # --- State access ---

    @property
    def is_consumed(self) -> bool:
        return self._state is None

    def _require_state(self) -> DocumentState:
        if self._state is None:
            raise DocumentConsumedError("Document has already been exported")
        return self._state

    def _consume(self) -> DocumentState:
        state = self._require_state()
        self._state = None
        logger.debug(f"Document '{state.metadata.title}' consumed for export")
        return state

    def _page(self, index: int) -> PdfPage:
        pages = self._require_state().pages
        if not 0 <= index < len(pages):
            raise IndexError(f"Page index {index} out of range ({len(pages)} pages)")
        return pages[index]

    def _layer(self, page_index: int, layer_index: int) -> PdfLayer:
        layers = self._page(page_index).layers
        if not 0 <= layer_index < len(layers):
            raise IndexError(f"Layer index {layer_index} out of range ({len(layers)} layers)")
        return layers[layer_index]

    # --- Pages ---

    def add_page(self, width: float, height: float, layer_name: str) -> Tuple['PageRef', 'LayerRef']:
        is_valid, error = validate_page_size(width, height)
        if not is_valid:
            raise ValueError(error)

        state = self._require_state()
        index = len(state.pages)
        state.pages.append(PdfPage(
            index=index,
            width=float(width),
            height=float(height),
            layers=[PdfLayer(name=layer_name, index=0)],
        ))
        logger.debug(f"Added page {index} ({width}x{height}pt) with layer '{layer_name}'")
        return PageRef(self, index), LayerRef(self, index, 0)

    def get_page(self, index: int) -> 'PageRef':
        self._page(index)
        return PageRef(self, index)

    @property
    def page_count(self) -> int:
        return len(self._require_state().pages)

    # --- Metadata ---

    @property
    def metadata(self) -> PdfMetadata:
        return self._require_state().metadata

    def with_title(self, title: str) -> 'PdfDocument':
        self.metadata.title = title
        return self

    def with_trapping(self, trapping: bool) -> 'PdfDocument':
        self.metadata.trapping = trapping
        return self

    def with_document_id(self, document_id: str) -> 'PdfDocument':
        self.metadata.document_id = document_id
        return self

    def with_instance_id(self, instance_id: str) -> 'PdfDocument':
        self.metadata.instance_id = instance_id
        return self

    def with_document_version(self, version: int) -> 'PdfDocument':
        self.metadata.document_version = version
        return self

    def with_conformance(self, conformance: PdfConformance) -> 'PdfDocument':
        self.metadata.conformance = conformance
        return self

    def with_creation_date(self, value: datetime) -> 'PdfDocument':
        self.metadata.creation_date = value
        return self

    def with_mod_date(self, value: datetime) -> 'PdfDocument':
        self.metadata.modification_date = value
        return self

    def with_metadata_date(self, value: datetime) -> 'PdfDocument':
        self.metadata.metadata_date = value
        return self

    def with_keywords(self, keywords: str) -> 'PdfDocument':
        self.metadata.keywords = keywords
        return self

    # --- Fonts, profiles and raw objects ---

    def add_external_font(self, source: Union[bytes, BinaryIO]) -> FontRef:
        """
        Register a TrueType/OpenType font.

        Raises:
            FontLoadError: if the stream cannot be read or parsed
        """
        state = self._require_state()
        if isinstance(source, (bytes, bytearray)):
            font = ExternalFont.from_bytes(bytes(source))
        else:
            font = ExternalFont.from_stream(source)
        return state.fonts.add(font)

    def add_builtin_font(self, font: BuiltinFont) -> FontRef:
        return self._require_state().fonts.add(BuiltinFont(font))

    def get_font(self, ref: FontRef):
        return self._require_state().fonts[ref.index]

    def add_icc_profile(self, profile: IccProfile) -> int:
        profiles = self._require_state().icc_profiles
        profiles.append(profile)
        return len(profiles) - 1

    def add_object(self, obj) -> Object:
        """Store an arbitrary object in the document's object graph."""
        return self._require_state().store.add_object(obj)

    # --- Export ---

    def save(self, writer: BinaryIO, config: Optional['ExportConfig'] = None) -> None:
        """Export to ``writer``. The document cannot be used afterwards."""
        from engine.document_assembler import DocumentAssembler
        DocumentAssembler(config).export(self, writer)

    def save_to_bytes(self, config: Optional['ExportConfig'] = None) -> bytes:
        buffer = io.BytesIO()
        self.save(buffer, config=config)
        return buffer.getvalue()

    def __repr__(self) -> str:
        if self._state is None:
            return "PdfDocument(consumed)"
        return f"PdfDocument(title={self._state.metadata.title!r}, pages={len(self._state.pages)})"


@dataclass(frozen=True)
class PageRef:
    """Handle to a page by index."""
    document: PdfDocument
    page_index: int

    def add_layer(self, name: str) -> 'LayerRef':
        page = self.document._page(self.page_index)
        index = len(page.layers)
        page.layers.append(PdfLayer(name=name, index=index))
        return LayerRef(self.document, self.page_index, index)

    def get_layer(self, index: int) -> 'LayerRef':
        self.document._layer(self.page_index, index)
        return LayerRef(self.document, self.page_index, index)

    @property
    def width(self) -> float:
        return self.document._page(self.page_index).width

    @property
    def height(self) -> float:
        return self.document._page(self.page_index).height

    @property
    def layer_count(self) -> int:
        return len(self.document._page(self.page_index).layers)


@dataclass(frozen=True)
class LayerRef:
    """Handle to a layer by (page index, layer index); all drawing goes through here."""
    document: PdfDocument
    page_index: int
    layer_index: int

    def _layer(self) -> PdfLayer:
        return self.document._layer(self.page_index, self.layer_index)

    @property
    def name(self) -> str:
        return self._layer().name

    @property
    def content(self) -> bytes:
        return bytes(self._layer().content)

    @property
    def resources(self) -> Dict[str, Dict[str, Object]]:
        return self._layer().resources

    def add_operations(self, instructions: Sequence[Instruction]) -> None:
        self._layer().append(instructions)

    def add_ext_gstate(self, key: str, value: float) -> str:
        return self._layer().register_ext_gstate(key, value)

    def add_shading(self, shading: Dictionary) -> str:
        return self._layer().register_resource(KEY_SHADING, shading)

    # --- Graphics state ---

    def save_graphics_state(self) -> None:
        layer = self._layer()
        layer.append([make_instruction(OP_SAVE_STATE)])
        layer.state_depth += 1

    def restore_graphics_state(self) -> None:
        layer = self._layer()
        if layer.state_depth == 0:
            raise GraphicsStateError(f"Restore without a matching save on layer '{layer.name}'")
        layer.append([make_instruction(OP_RESTORE_STATE)])
        layer.state_depth -= 1

    def set_transform(self, a: float, b: float, c: float, d: float, e: float, f: float) -> None:
        self.add_operations([make_instruction(OP_CTM, a, b, c, d, e, f)])

    def set_fill_color(self, color: Color) -> None:
        self.add_operations([make_instruction(FILL_COLOR_OPS[type(color)], *color.components())])

    def set_outline_color(self, color: Color) -> None:
        self.add_operations([make_instruction(STROKE_COLOR_OPS[type(color)], *color.components())])

    def set_outline_thickness(self, thickness: float) -> None:
        self.add_operations([make_instruction(OP_SET_LINE_WIDTH, thickness)])

    def set_line_cap_style(self, style: LineCapStyle) -> None:
        self.add_operations([make_instruction(OP_SET_LINE_CAP, int(style))])

    def set_line_join_style(self, style: LineJoinStyle) -> None:
        self.add_operations([make_instruction(OP_SET_LINE_JOIN, int(style))])

    def set_line_dash_pattern(self, pattern: LineDashPattern) -> None:
        dashes = [format_operand(float(v)) for v in pattern.dash_array()]
        self.add_operations([make_instruction(OP_SET_DASH, dashes, pattern.offset)])

    def set_fill_alpha(self, alpha: float) -> None:
        name = self.add_ext_gstate(KEY_FILL_OPACITY, alpha)
        self.add_operations([make_instruction(OP_SET_GRAPHICS_STATE_PARAMS, Name(f"/{name}"))])

    def set_outline_alpha(self, alpha: float) -> None:
        name = self.add_ext_gstate(KEY_STROKE_OPACITY, alpha)
        self.add_operations([make_instruction(OP_SET_GRAPHICS_STATE_PARAMS, Name(f"/{name}"))])

    def set_outline(self, outline: Outline) -> None:
        self.set_outline_color(outline.color)
        self.set_outline_thickness(outline.thickness)

    # --- Shapes ---

    def add_shape(self, points: Sequence[Tuple[Point, bool]], is_closed: bool, has_fill: bool, has_stroke: bool = True) -> None:
        """
        Draw a polyline or Bézier outline.

        Each point is paired with a flag marking it as a Bézier control point.
        Two consecutive control points followed by an end point become ``c``;
        a single control point followed by an end point becomes ``y``.
        """
        if not points:
            return

        instructions = [make_instruction(OP_MOVETO, points[0][0].x, points[0][0].y)]
        i = 1
        while i < len(points):
            point, is_control = points[i]
            if is_control and i + 2 < len(points) and points[i + 1][1]:
                ctrl_2, end = points[i + 1][0], points[i + 2][0]
                instructions.append(make_instruction(OP_CURVETO, point.x, point.y, ctrl_2.x, ctrl_2.y, end.x, end.y))
                i += 3
            elif is_control and i + 1 < len(points):
                end = points[i + 1][0]
                instructions.append(make_instruction(OP_CURVETO_Y, point.x, point.y, end.x, end.y))
                i += 2
            else:
                instructions.append(make_instruction(OP_LINETO, point.x, point.y))
                i += 1

        instructions.append(make_instruction(select_path_painting_operator(has_stroke, has_fill, is_closed)))
        self.add_operations(instructions)

    # --- Text ---

    def use_text(self, text: str, font_size: float, x: float, y: float, font: FontRef) -> None:
        """Single line of WinAnsi text at (x, y) in points."""
        encoded = text.encode('cp1252', errors='replace')
        self.add_operations([
            make_instruction(OP_BEGIN_TEXT),
            make_instruction(OP_SET_FONT, Name(f"/{font.name}"), font_size),
            make_instruction(OP_MOVE_TEXT, x, y),
            make_instruction(OP_SHOW_TEXT, String(encoded)),
            make_instruction(OP_END_TEXT),
        ])

    # --- Scenes ---

    def draw_scene(self, tree: SceneTree, node=None) -> SceneRenderer:
        """Render ``tree`` (or one of its nodes) in the current coordinate system."""
        renderer = SceneRenderer(tree)
        renderer.render(self, node)
        return renderer

    def add_svg(self, tree: SceneTree, x: float = 0.0, y: float = 0.0,
                width: Optional[float] = None, height: Optional[float] = None,
                flip_y: bool = True) -> SceneRenderer:
        """
        Place a scene with its bottom-left corner at (x, y).

        The view box is scaled to ``width`` x ``height`` (default: the scene's own
        size, keeping the aspect ratio if only one is given). With ``flip_y`` the
        y axis is flipped, since scene coordinates grow downwards.
        """
        view_box = tree.root.view_box
        if width is None and height is None:
            width, height = tree.width, tree.height
        elif width is None:
            width = height * tree.width / tree.height
        elif height is None:
            height = width * tree.height / tree.width

        sx = width / view_box.width
        sy = height / view_box.height

        self.save_graphics_state()
        try:
            if flip_y:
                self.set_transform(sx, 0, 0, -sy, x, y + height)
            else:
                self.set_transform(sx, 0, 0, sy, x, y)
            renderer = self.draw_scene(tree)
        finally:
            self.restore_graphics_state()
        return renderer
