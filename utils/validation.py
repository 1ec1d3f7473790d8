"""
Validation Utilities and Error Types
Exception hierarchy for document generation and input checks for fonts and page geometry.
"""

from typing import Optional, Tuple
import logging

logger = logging.getLogger(__name__)

# Validation constants
VALIDATION_CONSTANTS = {
    'FONT_SIGNATURES': (
        b'\x00\x01\x00\x00',  # TrueType outlines
        b'OTTO',              # OpenType with CFF outlines
        b'true',              # Apple TrueType
        b'ttcf',              # TrueType collection
    ),
    'MIN_FONT_SIZE_BYTES': 12,
    'MAX_PAGE_SIZE_PT': 14400.0,  # PDF 1.x user-unit limit (200 in)
    'SUPPORTED_PDF_VERSIONS': ['1.3', '1.4', '1.5', '1.6', '1.7', '2.0'],
}

class FontLoadError(Exception):
    """Custom exception for font streams that cannot be read or parsed"""
    pass

class DocumentConsumedError(Exception):
    """Custom exception for access to a document after it has been exported"""
    pass

class GraphicsStateError(Exception):
    """Custom exception for unbalanced graphics state save/restore"""
    pass

class PdfExportError(Exception):
    """Custom exception for failures while writing the finished document"""
    pass

class SvgParseError(Exception):
    """Custom exception for SVG markup that cannot be turned into a scene"""
    pass

def validate_font_signature(data: bytes) -> Tuple[bool, Optional[str]]:
    """
    Validate font file signature (magic bytes)

    Args:
        data: Raw font bytes

    Returns:
        Tuple of (is_valid, error_message)
    """
    if len(data) < VALIDATION_CONSTANTS['MIN_FONT_SIZE_BYTES']:
        return False, f"Font data too small ({len(data)} bytes)"

    header = data[:4]
    if header not in VALIDATION_CONSTANTS['FONT_SIGNATURES']:
        return False, f"Unrecognized font signature {header!r}"

    return True, None

def validate_page_size(width: float, height: float) -> Tuple[bool, Optional[str]]:
    """Validate page dimensions in points"""
    max_size = VALIDATION_CONSTANTS['MAX_PAGE_SIZE_PT']
    if width <= 0 or height <= 0:
        return False, f"Page size must be positive, got {width}x{height}"
    if width > max_size or height > max_size:
        logger.warning(f"Page size {width}x{height} exceeds {max_size}pt, some readers may clip it")
    return True, None

def validate_pdf_version(version: str) -> Tuple[bool, Optional[str]]:
    if version not in VALIDATION_CONSTANTS['SUPPORTED_PDF_VERSIONS']:
        return False, f"Unsupported PDF version: {version}"
    return True, None
