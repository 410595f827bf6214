"""
Per-frame rendering of probe markers.

The pipeline decides what gets drawn and in which order; the actual
rasterization belongs to the drawing collaborator.
"""

import logging
from typing import List, Optional, Sequence

from .state import ImageInfo, Marker
from .stats import PixelStatsCache
from .utils import format_risk_text, in_image_bounds

logger = logging.getLogger(__name__)


class RenderPipeline:
    """
    Draws every visible marker of a surface.

    Args:
        stats_cache: Cache refreshing marker pixel stats
        transform: Object with ``pixel_to_canvas(surface, point)``
        drawing: Object with ``draw_handle(surface, center, radius, color)``
            and ``draw_text_box(surface, text, x, y, color)``
        style: Colors, font size and handle radius, with ``color_for(marker)``
        label_offset: Image-space offset of the labels from the anchor
    """

    def __init__(
        self,
        stats_cache: PixelStatsCache,
        transform,
        drawing,
        style,
        label_offset: float = 3.0,
    ):
        self.stats_cache = stats_cache
        self.transform = transform
        self.drawing = drawing
        self.style = style
        self.label_offset = label_offset

    def render_frame(
        self,
        surface,
        image: ImageInfo,
        markers: Optional[Sequence[Marker]],
        marker_count: int = 0,
    ) -> List[Marker]:
        """
        Draw one frame.

        Args:
            surface: Surface the markers belong to
            image: Image currently displayed on the surface
            markers: Markers in store order, None when none are registered
            marker_count: Label given to markers that have no fid yet

        Returns:
            The markers that were drawn
        """
        if not markers:
            return []

        drawn = []
        for marker in markers:
            if marker.visible is False:
                continue
            if marker.fid == 0:
                marker.fid = marker_count
            self.render_marker(surface, image, marker)
            drawn.append(marker)
        return drawn

    def render_marker(self, surface, image: ImageInfo, marker: Marker):
        color = self.style.color_for(marker)

        self.drawing.draw_handle(
            surface,
            self.transform.pixel_to_canvas(surface, marker.anchor),
            self.style.handle_radius,
            color,
        )

        if marker.invalidated:
            self.stats_cache.refresh(image, surface, marker)

        stats = marker.stats
        if stats is None or not in_image_bounds(stats.x, stats.y, image):
            return

        text_coords = self.transform.pixel_to_canvas(
            surface, marker.anchor.translate(self.label_offset, -self.label_offset)
        )
        self.drawing.draw_text_box(
            surface,
            format_risk_text(marker.risk_label),
            text_coords.x,
            text_coords.y + self.style.font_size + 5,
            color,
        )
        self.drawing.draw_text_box(
            surface, f"{marker.fid}", text_coords.x, text_coords.y, color
        )
