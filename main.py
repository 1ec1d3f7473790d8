"""PDF generator demo"""

import argparse
import logging
import os
import sys

from rich.console import Console
from rich.logging import RichHandler

from engine.document import PdfDocument
from exporters.pdf_exporter import export_document, render_svg_to_pdf
from models.graphics_types import Cmyk, Outline, Point
from utils.validation import PdfExportError, SvgParseError

DEFAULT_OUTPUT = "test_working.pdf"

logger = logging.getLogger("rich")


def _configure_logging() -> Console:
    """Configure logging with Rich handler"""
    console = Console(force_terminal=True)

    # Get level from env, default to INFO
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    rich_handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        show_time=False,
        show_path=True
    )

    # Silence everything by default
    logging.basicConfig(level=logging.WARNING, format="%(message)s", handlers=[rich_handler])

    # Set specific module log levels
    for module_name in ["main", "rich", "engine", "exporters", "processors", "utils"]:
        logging.getLogger(module_name).setLevel(log_level)

    return console


def build_demo_document() -> PdfDocument:
    """One 500x500pt page with an open, unfilled four-point outline."""
    doc, page, layer = PdfDocument.new("PDF_Document_title", 500.0, 500.0, "Layer 1")

    points = [(Point(x=200.0, y=200.0), False) for _ in range(4)]
    layer.set_outline(Outline(color=Cmyk(c=1.0, m=0.75, y=0.0, k=0.0), thickness=5))

    # points, is the shape closed?, is the shape filled?
    layer.add_shape(points, False, False)
    return doc


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Write a demo PDF, or convert an SVG file to PDF")
    parser.add_argument("svg", nargs="?", help="SVG file to render onto a single page")
    parser.add_argument("-o", "--output", default=DEFAULT_OUTPUT, help=f"Output path (default: {DEFAULT_OUTPUT})")
    args = parser.parse_args(argv)

    try:
        if args.svg:
            with open(args.svg, "rb") as f:
                svg_data = f.read()
            logger.info(f"Rendering {args.svg} ({len(svg_data)} bytes)")
            render_svg_to_pdf(svg_data, output=args.output, title=os.path.basename(args.svg))
        else:
            export_document(build_demo_document(), args.output)
    except (SvgParseError, PdfExportError, OSError) as e:
        logger.error(f"Failed to write {args.output}: {e}")
        return 1

    console.print(f"[bold green]Wrote {args.output}[/bold green]")
    return 0


console = _configure_logging()

if __name__ == "__main__":
    sys.exit(main())
