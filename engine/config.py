"""
Configuration system for document export and scene rendering.

Provides structured configuration using dataclasses with clear defaults,
type safety, and compatibility with dict-based configs.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any
import logging

from utils.validation import validate_pdf_version

logger = logging.getLogger(__name__)

OBJECT_STREAM_MODES = ('disable', 'preserve', 'generate')


@dataclass
class ExportConfig:
    """
    Central configuration for the document assembler and object store.

    Example:
        >>> config = ExportConfig(compress_streams=False)
        >>> export_document(doc, "out.pdf", config=config)
    """

    # Post-processing applied to the object graph before writing
    optimize: bool = True  # Prune unreferenced objects and empty streams
    compress_streams: bool = True  # Flate-compress content and font streams
    object_stream_mode: str = "disable"

    # Output
    pdf_version: Optional[str] = None  # None uses the version of the document conformance
    creator: str = "rebirth-pdfgen"
    producer: str = "rebirth-pdfgen"
    include_xmp_metadata: bool = True

    # Logging
    log_level: str = "INFO"

    def validate(self) -> bool:
        """
        Validate configuration values.

        Returns:
            True if all values are valid, False otherwise
        """
        if self.object_stream_mode not in OBJECT_STREAM_MODES:
            logger.error(f"object_stream_mode must be one of {OBJECT_STREAM_MODES}")
            return False

        if self.pdf_version is not None:
            is_valid, error = validate_pdf_version(self.pdf_version)
            if not is_valid:
                logger.error(error)
                return False

        if not self.creator:
            logger.error("creator must not be empty")
            return False

        return True

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary.

        Useful for serialization, logging, and debugging.
        """
        return {
            'optimize': self.optimize,
            'compress_streams': self.compress_streams,
            'object_stream_mode': self.object_stream_mode,
            'pdf_version': self.pdf_version,
            'creator': self.creator,
            'producer': self.producer,
            'include_xmp_metadata': self.include_xmp_metadata,
            'log_level': self.log_level,
        }

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'ExportConfig':
        """
        Create ExportConfig from dictionary.

        Unknown keys are ignored with a warning.
        """
        valid_keys = {
            'optimize', 'compress_streams', 'object_stream_mode',
            'pdf_version', 'creator', 'producer',
            'include_xmp_metadata', 'log_level'
        }

        filtered_config = {}
        for key, value in config.items():
            if key in valid_keys:
                filtered_config[key] = value
            else:
                logger.warning(f"Unknown config key '{key}' will be ignored")

        return cls(**filtered_config)

    @classmethod
    def default(cls) -> 'ExportConfig':
        """Create configuration with default values."""
        return cls()

    def __repr__(self) -> str:
        return (
            f"ExportConfig("
            f"optimize={self.optimize}, "
            f"compress={self.compress_streams}, "
            f"version={self.pdf_version or 'auto'}, "
            f"xmp={self.include_xmp_metadata})"
        )


@dataclass
class RenderOptions:
    """
    Options for turning SVG markup into a scene and placing it on a layer.
    """
    flip_y: bool = True  # SVG is y-down, page space is y-up
    arc_segments_per_quarter: int = 1  # Cubic pieces per 90 degrees of arc sweep
    default_width: float = 300.0  # Used when the SVG has neither width nor viewBox
    default_height: float = 150.0

    def validate(self) -> bool:
        if self.arc_segments_per_quarter < 1:
            logger.error("arc_segments_per_quarter must be at least 1")
            return False

        if self.default_width <= 0 or self.default_height <= 0:
            logger.error("default_width and default_height must be positive")
            return False

        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'flip_y': self.flip_y,
            'arc_segments_per_quarter': self.arc_segments_per_quarter,
            'default_width': self.default_width,
            'default_height': self.default_height,
        }

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'RenderOptions':
        valid_keys = {'flip_y', 'arc_segments_per_quarter', 'default_width', 'default_height'}

        filtered_config = {}
        for key, value in config.items():
            if key in valid_keys:
                filtered_config[key] = value
            else:
                logger.warning(f"Unknown render option '{key}' will be ignored")

        return cls(**filtered_config)

    @classmethod
    def default(cls) -> 'RenderOptions':
        return cls()

    def __repr__(self) -> str:
        return f"RenderOptions(flip_y={self.flip_y}, arc_segments={self.arc_segments_per_quarter})"
