"""
PDF export entry points.

Thin functional wrappers over DocumentAssembler for callers that only want a
file or bytes out of a document, plus a one-call SVG to PDF conversion.
"""

import io
import logging
from pathlib import Path
from typing import BinaryIO, Optional, Union

from engine.config import ExportConfig, RenderOptions
from engine.document import PdfDocument
from engine.document_assembler import DocumentAssembler
from processors.svg_scene_loader import load_svg
from utils.validation import DocumentConsumedError, PdfExportError, SvgParseError

logger = logging.getLogger(__name__)

PathOrStream = Union[str, Path, BinaryIO]


def export_document(document: PdfDocument, output: PathOrStream, config: Optional[ExportConfig] = None) -> int:
    """
    Write ``document`` to a file path or binary stream.

    The document is consumed. When ``output`` is a path the file is only
    created once serialization has succeeded.

    Returns:
        Number of bytes written

    Raises:
        DocumentConsumedError: if the document was already exported
        PdfExportError: if serialization or writing fails
    """
    assembler = DocumentAssembler(config)
    try:
        if isinstance(output, (str, Path)):
            data = assembler.to_bytes(document)
            try:
                Path(output).write_bytes(data)
            except OSError as e:
                raise PdfExportError(f"Failed to write {output}: {e}") from e
            logger.info(f"Saved PDF to {output}")
            return len(data)
        return assembler.export(document, output)
    except (DocumentConsumedError, PdfExportError) as e:
        logger.error(f"PDF export failed: {e}", exc_info=True)
        raise


def export_document_bytes(document: PdfDocument, config: Optional[ExportConfig] = None) -> bytes:
    """Serialize ``document`` into memory; the document is consumed."""
    buffer = io.BytesIO()
    export_document(document, buffer, config=config)
    return buffer.getvalue()


def render_svg_to_pdf(svg_text: Union[str, bytes],
                      output: Optional[PathOrStream] = None,
                      title: str = "SVG document",
                      layer_name: str = "Layer 1",
                      config: Optional[ExportConfig] = None,
                      options: Optional[RenderOptions] = None) -> bytes:
    """
    Render SVG markup onto a single page sized to the drawing.

    Args:
        svg_text: SVG markup
        output: Optional path or stream that also receives the PDF
        title: Document title
        layer_name: Name of the page's only layer
        config: Export configuration
        options: SVG loading options

    Returns:
        The PDF bytes

    Raises:
        SvgParseError: if the markup cannot be parsed
        PdfExportError: if export fails
    """
    try:
        tree = load_svg(svg_text, options)
    except SvgParseError as e:
        logger.error(f"SVG conversion failed: {e}", exc_info=True)
        raise

    options = options or RenderOptions.default()
    width, height = tree.size
    doc, page, layer = PdfDocument.new(title, width, height, layer_name)
    renderer = layer.add_svg(tree, 0, 0, width, height, flip_y=options.flip_y)
    logger.debug(f"SVG render stats: {renderer.stats.to_dict()}")

    data = export_document_bytes(doc, config=config)
    if output is not None:
        if isinstance(output, (str, Path)):
            try:
                Path(output).write_bytes(data)
            except OSError as e:
                logger.error(f"Failed to write {output}: {e}", exc_info=True)
                raise PdfExportError(f"Failed to write {output}: {e}") from e
        else:
            output.write(data)
    return data
