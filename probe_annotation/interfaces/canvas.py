"""
OpenCV host for the probe tool.

Provides the canvas transform, pixel access and drawing primitives the
tool calls, for surfaces backed by numpy arrays.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

import cv2
import numpy as np

from ..core.annotation.state import ImageInfo, Point
from .pixels import read_rgb_pixels, read_stored_pixels


@dataclass(eq=False)
class CanvasSurface:
    """
    A displayed image and the canvas it is drawn onto.

    Args:
        image_id: Identifier used for metadata lookups
        pixels: Source image, (H, W) stored values or (H, W, 3) BGR
        scale: Canvas pixels per image pixel
        offset: Canvas position of the image origin
    """

    image_id: str
    pixels: np.ndarray
    scale: float = 1.0
    offset: Tuple[float, float] = (0.0, 0.0)
    canvas: Optional[np.ndarray] = field(default=None, repr=False)

    def __post_init__(self):
        if self.canvas is None:
            self.reset_canvas()

    @property
    def image(self) -> ImageInfo:
        rows, columns = self.pixels.shape[:2]
        return ImageInfo(
            image_id=self.image_id,
            rows=rows,
            columns=columns,
            color=self.pixels.ndim == 3,
        )

    def reset_canvas(self):
        """Repaint the canvas with the scaled source image."""
        rows, columns = self.pixels.shape[:2]
        size = (
            max(1, int(round(columns * self.scale))),
            max(1, int(round(rows * self.scale))),
        )
        base = self.pixels
        if base.dtype != np.uint8:
            base = cv2.normalize(base, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)
        if base.ndim == 2:
            base = cv2.cvtColor(base, cv2.COLOR_GRAY2BGR)
        resized = cv2.resize(base, size, interpolation=cv2.INTER_NEAREST)
        ox, oy = (int(round(v)) for v in self.offset)
        canvas = np.zeros((size[1] + max(oy, 0), size[0] + max(ox, 0), 3), np.uint8)
        canvas[max(oy, 0) :, max(ox, 0) :] = resized
        self.canvas = canvas


class OpenCVHost:
    """Collaborator implementations for ``CanvasSurface`` objects."""

    def __init__(self, font_scale: float = 0.5, thickness: int = 1, padding: int = 3):
        self.font_scale = font_scale
        self.thickness = thickness
        self.padding = padding

    # Canvas transform

    def pixel_to_canvas(self, surface: CanvasSurface, point: Point) -> Point:
        ox, oy = surface.offset
        return Point(point.x * surface.scale + ox, point.y * surface.scale + oy)

    def canvas_to_pixel(self, surface: CanvasSurface, point: Point) -> Point:
        ox, oy = surface.offset
        return Point((point.x - ox) / surface.scale, (point.y - oy) / surface.scale)

    # Pixel access

    def get_stored_pixels(self, surface: CanvasSurface, x, y, width, height):
        return read_stored_pixels(surface.pixels, x, y, width, height)

    def get_rgb_pixels(self, surface: CanvasSurface, x, y, width, height):
        return read_rgb_pixels(surface.pixels, x, y, width, height)

    # Drawing

    def draw_handle(self, surface: CanvasSurface, center: Point, radius: int, color):
        cv2.circle(
            surface.canvas,
            (int(round(center.x)), int(round(center.y))),
            int(radius),
            color,
            self.thickness,
            cv2.LINE_AA,
        )

    def draw_text_box(self, surface: CanvasSurface, text: str, x: float, y: float, color):
        """Draw text on a dark box whose top left corner is at (x, y)."""
        (width, height), baseline = cv2.getTextSize(
            text, cv2.FONT_HERSHEY_SIMPLEX, self.font_scale, self.thickness
        )
        left, top = int(round(x)), int(round(y))
        pad = self.padding
        cv2.rectangle(
            surface.canvas,
            (left, top),
            (left + width + 2 * pad, top + height + baseline + 2 * pad),
            (0, 0, 0),
            -1,
        )
        cv2.putText(
            surface.canvas,
            text,
            (left + pad, top + pad + height),
            cv2.FONT_HERSHEY_SIMPLEX,
            self.font_scale,
            color,
            self.thickness,
            cv2.LINE_AA,
        )
