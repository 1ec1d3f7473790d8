"""
Font registration

External fonts are parsed with fontTools only to read the metrics needed for
a simple WinAnsi font dictionary; the font program itself is embedded as-is.
Builtin fonts reference one of the standard 14 Type1 fonts by name.
"""

import io
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple, Union

from fontTools.ttLib import TTFont
from pikepdf import Array, Dictionary, Name

from constants.pdf_keys import (
    KEY_TYPE, KEY_SUBTYPE, VAL_FONT, VAL_FONT_DESCRIPTOR, VAL_TYPE1, VAL_TRUE_TYPE,
    VAL_OPEN_TYPE, VAL_WIN_ANSI_ENCODING, KEY_BASE_FONT, KEY_ENCODING,
    KEY_FIRST_CHAR, KEY_LAST_CHAR, KEY_WIDTHS, KEY_FONT_DESCRIPTOR, KEY_FONT_NAME,
    KEY_FLAGS, KEY_FONT_BBOX, KEY_ITALIC_ANGLE, KEY_ASCENT, KEY_DESCENT,
    KEY_CAP_HEIGHT, KEY_STEM_V, KEY_FONT_FILE2, KEY_FONT_FILE3
)
from processors.pdf_graphics import format_operand
from utils.validation import FontLoadError, validate_font_signature

logger = logging.getLogger(__name__)

FIRST_CHAR = 32
LAST_CHAR = 255
GLYPH_SPACE_UNITS = 1000
FLAG_NONSYMBOLIC = 1 << 5
DEFAULT_STEM_V = 80


class BuiltinFont(str, Enum):
    """The standard 14 fonts every reader provides"""
    TIMES_ROMAN = "Times-Roman"
    TIMES_BOLD = "Times-Bold"
    TIMES_ITALIC = "Times-Italic"
    TIMES_BOLD_ITALIC = "Times-BoldItalic"
    HELVETICA = "Helvetica"
    HELVETICA_BOLD = "Helvetica-Bold"
    HELVETICA_OBLIQUE = "Helvetica-Oblique"
    HELVETICA_BOLD_OBLIQUE = "Helvetica-BoldOblique"
    COURIER = "Courier"
    COURIER_OBLIQUE = "Courier-Oblique"
    COURIER_BOLD = "Courier-Bold"
    COURIER_BOLD_OBLIQUE = "Courier-BoldOblique"
    SYMBOL = "Symbol"
    ZAPF_DINGBATS = "ZapfDingbats"

    def build_dictionary(self) -> Dictionary:
        font = Dictionary({
            KEY_TYPE: Name(VAL_FONT),
            KEY_SUBTYPE: Name(VAL_TYPE1),
            KEY_BASE_FONT: Name(f"/{self.value}"),
        })
        # Symbol and ZapfDingbats carry their own built-in encoding
        if self not in (BuiltinFont.SYMBOL, BuiltinFont.ZAPF_DINGBATS):
            font[KEY_ENCODING] = Name(VAL_WIN_ANSI_ENCODING)
        return font


@dataclass
class ExternalFont:
    """Metrics and program bytes of a TrueType or OpenType font."""
    data: bytes
    postscript_name: str
    units_per_em: int
    ascent: int
    descent: int
    cap_height: int
    italic_angle: float
    bbox: Tuple[int, int, int, int]
    widths: List[int]
    is_cff: bool = False

    @classmethod
    def from_bytes(cls, data: bytes) -> 'ExternalFont':
        """
        Parse a font program.

        Raises:
            FontLoadError: if the bytes are not a readable TrueType/OpenType font
        """
        is_valid, error = validate_font_signature(data)
        if not is_valid:
            logger.error(f"Rejected font stream: {error}")
            raise FontLoadError(error)

        try:
            is_collection = data[:4] == b'ttcf'
            tt = TTFont(io.BytesIO(data), fontNumber=0 if is_collection else -1)
            program = data
            if is_collection:
                buffer = io.BytesIO()
                tt.save(buffer)
                program = buffer.getvalue()
            font = cls._from_ttfont(tt, program)
        except Exception as e:
            logger.error(f"Failed to parse font: {e}")
            raise FontLoadError(f"Failed to parse font: {e}") from e

        logger.debug(f"Loaded font {font.postscript_name} ({len(data)} bytes, {font.units_per_em} upem)")
        return font

    @classmethod
    def from_stream(cls, stream) -> 'ExternalFont':
        try:
            data = stream.read()
        except OSError as e:
            logger.error(f"Failed to read font stream: {e}")
            raise FontLoadError(f"Failed to read font stream: {e}") from e
        return cls.from_bytes(data)

    @classmethod
    def _from_ttfont(cls, tt: TTFont, program: bytes) -> 'ExternalFont':
        head = tt['head']
        hhea = tt['hhea']
        upem = head.unitsPerEm
        scale = GLYPH_SPACE_UNITS / upem

        name = tt['name'].getDebugName(6) or tt['name'].getDebugName(4) or "EmbeddedFont"
        name = "".join(ch for ch in name if ch.isalnum() or ch in "-_")

        ascent = hhea.ascent
        cap_height = ascent
        if 'OS/2' in tt:
            cap_height = getattr(tt['OS/2'], 'sCapHeight', ascent) or ascent
        italic_angle = float(tt['post'].italicAngle) if 'post' in tt else 0.0

        cmap = tt.getBestCmap() or {}
        hmtx = tt['hmtx']
        default_advance = hmtx[tt.getGlyphOrder()[0]][0]
        widths = []
        for code in range(FIRST_CHAR, LAST_CHAR + 1):
            char = bytes([code]).decode('cp1252', errors='ignore')
            glyph = cmap.get(ord(char)) if char else None
            advance = hmtx[glyph][0] if glyph in hmtx.metrics else default_advance
            widths.append(round(advance * scale))

        return cls(
            data=program,
            postscript_name=name,
            units_per_em=upem,
            ascent=round(ascent * scale),
            descent=round(hhea.descent * scale),
            cap_height=round(cap_height * scale),
            italic_angle=italic_angle,
            bbox=tuple(round(v * scale) for v in (head.xMin, head.yMin, head.xMax, head.yMax)),
            widths=widths,
            is_cff='CFF ' in tt,
        )

    def text_width(self, text: str, font_size: float) -> float:
        """Advance width of ``text`` in points when set at ``font_size``."""
        total = 0
        for byte in text.encode('cp1252', errors='replace'):
            if FIRST_CHAR <= byte <= LAST_CHAR:
                total += self.widths[byte - FIRST_CHAR]
        return total * font_size / GLYPH_SPACE_UNITS

    def build_dictionary(self, store) -> Dictionary:
        """Font dictionary with its descriptor and embedded program added to ``store``."""
        if self.is_cff:
            font_file_key = KEY_FONT_FILE3
            font_file = store.make_stream(self.data, Subtype=Name(VAL_OPEN_TYPE))
        else:
            font_file_key = KEY_FONT_FILE2
            font_file = store.make_stream(self.data, Length1=len(self.data))

        descriptor = store.add_object(Dictionary({
            KEY_TYPE: Name(VAL_FONT_DESCRIPTOR),
            KEY_FONT_NAME: Name(f"/{self.postscript_name}"),
            KEY_FLAGS: FLAG_NONSYMBOLIC,
            KEY_FONT_BBOX: Array(list(self.bbox)),
            KEY_ITALIC_ANGLE: format_operand(self.italic_angle),
            KEY_ASCENT: self.ascent,
            KEY_DESCENT: self.descent,
            KEY_CAP_HEIGHT: self.cap_height,
            KEY_STEM_V: DEFAULT_STEM_V,
            font_file_key: font_file,
        }))

        return Dictionary({
            KEY_TYPE: Name(VAL_FONT),
            KEY_SUBTYPE: Name(VAL_TYPE1 if self.is_cff else VAL_TRUE_TYPE),
            KEY_BASE_FONT: Name(f"/{self.postscript_name}"),
            KEY_FIRST_CHAR: FIRST_CHAR,
            KEY_LAST_CHAR: LAST_CHAR,
            KEY_WIDTHS: Array(self.widths),
            KEY_ENCODING: Name(VAL_WIN_ANSI_ENCODING),
            KEY_FONT_DESCRIPTOR: descriptor,
        })


FontSource = Union[ExternalFont, BuiltinFont]


@dataclass(frozen=True)
class FontRef:
    """Handle to a registered font; ``name`` is its key in the page /Font resources."""
    index: int
    name: str


@dataclass
class FontList:
    """Registered fonts in registration order."""
    fonts: List[FontSource] = field(default_factory=list)

    def add(self, font: FontSource) -> FontRef:
        # Builtin fonts are registered once no matter how often they are requested
        if isinstance(font, BuiltinFont) and font in self.fonts:
            index = self.fonts.index(font)
            return FontRef(index=index, name=self.resource_name(index))
        self.fonts.append(font)
        index = len(self.fonts) - 1
        return FontRef(index=index, name=self.resource_name(index))

    @staticmethod
    def resource_name(index: int) -> str:
        return f"F{index}"

    def __len__(self) -> int:
        return len(self.fonts)

    def __getitem__(self, index: int) -> FontSource:
        return self.fonts[index]

    def build_font_dictionary(self, store) -> Dictionary:
        """Map of resource name to indirect font dictionary."""
        fonts: Dict[str, object] = {}
        for index, font in enumerate(self.fonts):
            if isinstance(font, BuiltinFont):
                font_dict = font.build_dictionary()
            else:
                font_dict = font.build_dictionary(store)
            fonts[f"/{self.resource_name(index)}"] = store.add_object(font_dict)
        return Dictionary(fonts)
