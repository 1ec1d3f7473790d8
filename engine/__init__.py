"""
PDF Generation Engine

Document arena, object store and the assembler that turns a document into a
finished PDF file.
"""

__version__ = "2.0.0"

from engine.config import ExportConfig, RenderOptions
from engine.object_store import ObjectStore
from engine.metadata import PdfMetadata
from engine.fonts import BuiltinFont, ExternalFont, FontRef
from engine.document import PdfDocument, PageRef, LayerRef
from engine.document_assembler import DocumentAssembler

__all__ = [
    'ExportConfig',
    'RenderOptions',
    'ObjectStore',
    'PdfMetadata',
    'BuiltinFont',
    'ExternalFont',
    'FontRef',
    'PdfDocument',
    'PageRef',
    'LayerRef',
    'DocumentAssembler',
]
