"""
Axial shading construction for linear gradient paint.

A gradient with N stops becomes a stitching function (type 3) over [0, 1]
made of N-1 exponential interpolation functions (type 2, N=1), one per pair
of adjacent stops. Opacity on stops is not part of the color triple; alpha is
applied through the graphics state by the caller.
"""

import logging
from typing import Sequence, Tuple

from pikepdf import Array, Dictionary, Name

from constants.pdf_keys import (
    KEY_SHADING_TYPE, KEY_COLOR_SPACE, KEY_COORDS, KEY_EXTEND, KEY_DOMAIN,
    KEY_FUNCTION, KEY_FUNCTION_TYPE, KEY_FUNCTIONS, KEY_BOUNDS, KEY_ENCODE,
    KEY_C0, KEY_C1, KEY_N, VAL_DEVICE_RGB,
    SHADING_TYPE_AXIAL, FUNCTION_TYPE_EXPONENTIAL, FUNCTION_TYPE_STITCHING
)
from models.scene_types import GradientStop
from processors.pdf_graphics import format_operand

logger = logging.getLogger(__name__)

def _color_array(stop: GradientStop) -> Array:
    return Array([format_operand(c) for c in stop.color.normalized()])

def build_interpolation_function(start: GradientStop, end: GradientStop) -> Dictionary:
    """Linear blend between two stop colors over [0, 1]."""
    return Dictionary({
        KEY_FUNCTION_TYPE: FUNCTION_TYPE_EXPONENTIAL,
        KEY_DOMAIN: Array([0, 1]),
        KEY_C0: _color_array(start),
        KEY_C1: _color_array(end),
        KEY_N: 1,
    })

def build_stitching_function(stops: Sequence[GradientStop]) -> Dictionary:
    """
    Stitch per-interval functions into one function over [0, 1].

    Bounds are the offsets of the interior stops and Encode maps every
    sub-domain onto [0, 1]. Fewer than two stops yields empty arrays.
    """
    functions = [
        build_interpolation_function(start, end)
        for start, end in zip(stops, stops[1:])
    ]
    bounds = [format_operand(float(stop.offset)) for stop in stops[1:-1]]
    encode = [0, 1] * len(functions)

    if not functions:
        logger.debug(f"Gradient with {len(stops)} stop(s) produces an empty shading function")

    return Dictionary({
        KEY_FUNCTION_TYPE: FUNCTION_TYPE_STITCHING,
        KEY_DOMAIN: Array([0, 1]),
        KEY_FUNCTIONS: Array(functions),
        KEY_BOUNDS: Array(bounds),
        KEY_ENCODE: Array(encode),
    })

def build_shading(stops: Sequence[GradientStop], axis: Tuple[float, float, float, float]) -> Dictionary:
    """
    Build an axial shading dictionary.

    Args:
        stops: Gradient stops ordered by offset
        axis: (x1, y1, x2, y2) start and end points of the gradient

    Returns:
        Shading dictionary ready to be registered as a resource
    """
    stops = list(stops)
    x1, y1, x2, y2 = axis
    return Dictionary({
        KEY_SHADING_TYPE: SHADING_TYPE_AXIAL,
        KEY_COLOR_SPACE: Name(VAL_DEVICE_RGB),
        KEY_COORDS: Array([format_operand(float(v)) for v in (x1, y1, x2, y2)]),
        KEY_EXTEND: Array([True, True]),
        KEY_FUNCTION: build_stitching_function(stops),
    })
