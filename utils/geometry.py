"""
Shape point generation and unit conversion

Points are returned as ``(Point, bool)`` pairs where the flag marks a Bézier
control point; ``LayerRef.add_shape`` turns runs of flagged points into curves.
"""

from typing import List, Tuple

from models.graphics_types import MM_PER_PT, Point

# Distance of the control points from the on-curve points for a quarter circle
BEZIER_CIRCLE_FACTOR = 0.551915024494

def mm_to_pt(value: float) -> float:
    return value / MM_PER_PT

def pt_to_mm(value: float) -> float:
    return value * MM_PER_PT

def calculate_points_for_circle(radius: float, offset_x: float = 0.0, offset_y: float = 0.0) -> List[Tuple[Point, bool]]:
    """Approximate a circle with four cubic Bézier segments.

    Args:
        radius: Circle radius in points
        offset_x, offset_y: Centre of the circle

    Returns:
        Closed outline starting and ending at the top of the circle
    """
    r = radius
    c = BEZIER_CIRCLE_FACTOR * r

    quadrant = [
        ((0.0, r), False),
        ((c, r), True),
        ((r, c), True),
        ((r, 0.0), False),
        ((r, -c), True),
        ((c, -r), True),
        ((0.0, -r), False),
        ((-c, -r), True),
        ((-r, -c), True),
        ((-r, 0.0), False),
        ((-r, c), True),
        ((-c, r), True),
        ((0.0, r), False),
    ]

    return [
        (Point(x=x + offset_x, y=y + offset_y), is_control)
        for (x, y), is_control in quadrant
    ]

def calculate_points_for_rect(width: float, height: float, offset_x: float = 0.0, offset_y: float = 0.0) -> List[Tuple[Point, bool]]:
    """Corner points of a rectangle centred on the offset."""
    half_w = width / 2.0
    half_h = height / 2.0
    corners = [
        (offset_x + half_w, offset_y + half_h),
        (offset_x + half_w, offset_y - half_h),
        (offset_x - half_w, offset_y - half_h),
        (offset_x - half_w, offset_y + half_h),
    ]
    return [(Point(x=x, y=y), False) for x, y in corners]
