"""
Render style shared between the handle and the labels of a marker.
"""

from dataclasses import dataclass
from typing import Tuple

from matplotlib.colors import to_rgb

BGR = Tuple[int, int, int]


def color_to_bgr(color: str) -> BGR:
    """Convert a matplotlib color spec to an OpenCV BGR tuple."""
    r, g, b = to_rgb(color)
    return (int(round(b * 255)), int(round(g * 255)), int(round(r * 255)))


@dataclass(frozen=True)
class RenderStyle:
    """
    Colors and sizes used to draw markers.

    Passed into the render pipeline instead of living in module globals.
    """

    tool_color: str = "white"
    active_color: str = "greenyellow"
    font_size: int = 15
    handle_radius: int = 6
    line_width: int = 1

    def color_for(self, marker) -> BGR:
        """Explicit marker color, else the active or idle tool color."""
        if marker.color is not None:
            return marker.color
        return color_to_bgr(self.active_color if marker.active else self.tool_color)
