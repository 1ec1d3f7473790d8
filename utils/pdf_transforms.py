"""PDF transformation utilities for graphics operations."""

import math
from typing import List, Sequence, Tuple

import numpy as np

MATRIX_EPSILON = 1e-9

# --- Core Transformation Functions ---
def matrix_to_array(m: Sequence[float]) -> np.ndarray:
    """Convert [a, b, c, d, e, f] into the 3x3 column-vector form used for the CTM."""
    a, b, c, d, e, f = m
    return np.array([[a, c, e], [b, d, f], [0, 0, 1]], dtype=float)

def array_to_matrix(arr: np.ndarray) -> List[float]:
    return [
        float(arr[0, 0]), float(arr[1, 0]),
        float(arr[0, 1]), float(arr[1, 1]),
        float(arr[0, 2]), float(arr[1, 2]),
    ]

def multiply_matrices(outer: Sequence[float], inner: Sequence[float]) -> List[float]:
    """Concatenate two matrices the way consecutive ``cm`` operators do.

    Emitting ``outer cm`` and then ``inner cm`` yields the same CTM as a single
    ``multiply_matrices(outer, inner) cm``. Points pass through ``inner`` first.
    """
    return array_to_matrix(np.dot(matrix_to_array(outer), matrix_to_array(inner)))

def translation_matrix(tx: float, ty: float) -> List[float]:
    return [1.0, 0.0, 0.0, 1.0, float(tx), float(ty)]

def scale_matrix(sx: float, sy: float) -> List[float]:
    return [float(sx), 0.0, 0.0, float(sy), 0.0, 0.0]

def rotation_matrix(degrees: float) -> List[float]:
    rad = math.radians(degrees)
    cos_a, sin_a = math.cos(rad), math.sin(rad)
    return [cos_a, sin_a, -sin_a, cos_a, 0.0, 0.0]

def skew_matrix(skew_x_degrees: float = 0.0, skew_y_degrees: float = 0.0) -> List[float]:
    return [
        1.0, math.tan(math.radians(skew_y_degrees)),
        math.tan(math.radians(skew_x_degrees)), 1.0,
        0.0, 0.0,
    ]

def is_identity(m: Sequence[float]) -> bool:
    return all(abs(v - i) < MATRIX_EPSILON for v, i in zip(m, (1, 0, 0, 1, 0, 0)))

def apply_matrix_transform(x: float, y: float, ctm: Sequence[float]) -> Tuple[float, float]:
    """Apply CTM transformation to a point.

    Args:
        x, y: Point coordinates
        ctm: 6-element CTM matrix [a, b, c, d, e, f]

    Returns:
        Transformed (x, y) coordinates
    """
    a, b, c, d, e, f = ctm
    tx = a * x + c * y + e
    ty = b * x + d * y + f
    return tx, ty

