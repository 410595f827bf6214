"""
Pure utility functions for probe annotation logic.

These functions have no side effects and can be tested in isolation.
"""

import math
from typing import Optional, Tuple

from .state import ImageInfo, Point, round_half_up


def round_point(point: Point) -> Tuple[int, int]:
    """
    Round an image-space point to the pixel it falls in.

    Args:
        point: Floating point image coordinate

    Returns:
        (x, y) integer pixel coordinate
    """
    return (round_half_up(point.x), round_half_up(point.y))


def in_image_bounds(x: Optional[int], y: Optional[int], image: ImageInfo) -> bool:
    """
    Check that a pixel coordinate lies in [0, columns) x [0, rows).

    Missing coordinates are never in bounds.
    """
    if x is None or y is None:
        return False
    return 0 <= x < image.columns and 0 <= y < image.rows


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(a.x - b.x, a.y - b.y)


def truncate_risk_label(description: str, length: int = 5) -> str:
    """
    Shorten a risk description for display.

    Args:
        description: Text returned by the prediction service
        length: Number of leading characters to keep

    Returns:
        The first ``length`` characters of the description
    """
    return str(description)[:length]


def format_risk_text(risk_label: str) -> str:
    return f"Cancer risk: {risk_label}"
