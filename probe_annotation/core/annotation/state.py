"""
State records for the probe annotation tool.

Contains the marker entity and the typed records that flow between
the host interaction loop and the tool.
"""

import math
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

CALCULATING_LABEL = "calculating..."


@dataclass(frozen=True)
class Point:
    """A 2D point, either in image or in canvas space."""

    x: float
    y: float

    def translate(self, dx: float, dy: float) -> "Point":
        return Point(self.x + dx, self.y + dy)


@dataclass
class PixelStats:
    """
    Pixel values under a marker.

    An empty instance (all fields None) means the marker was outside
    the image bounds when the stats were computed.
    """

    x: Optional[int] = None
    y: Optional[int] = None
    stored_pixels: Optional[List[Any]] = None

    @property
    def is_empty(self) -> bool:
        return self.x is None or self.y is None

    def to_dict(self):
        """Convert to dictionary, omitting unset fields."""
        if self.is_empty:
            return {}
        return {"x": self.x, "y": self.y, "stored_pixels": self.stored_pixels}


@dataclass(frozen=True)
class ImageInfo:
    """Geometry of the image currently displayed on a surface."""

    image_id: str
    rows: int
    columns: int
    color: bool = False


@dataclass(frozen=True)
class PointerEvent:
    """
    A pointer event delivered by the host.

    Carries the pointer position in both canvas and image space together
    with the surface and the image it happened on. Either position may be
    missing when the host could not resolve it.
    """

    surface: Any
    image: Optional[ImageInfo] = None
    canvas: Optional[Point] = None
    image_point: Optional[Point] = None


@dataclass(eq=False)
class Marker:
    """
    A single user-placed probe and its derived display state.

    Markers compare by identity so they can key per-marker caches.
    """

    anchor: Point
    visible: bool = True
    active: bool = True
    color: Optional[Tuple[int, int, int]] = None
    is_dragging: bool = False
    fid: int = 0
    invalidated: bool = True
    stats: Optional[PixelStats] = None
    risk_label: str = CALCULATING_LABEL

    def to_dict(self):
        """Convert to dictionary for serialization."""
        return {
            "anchor": {"x": self.anchor.x, "y": self.anchor.y},
            "visible": self.visible,
            "active": self.active,
            "fid": self.fid,
            "invalidated": self.invalidated,
            "risk_label": self.risk_label,
            "stats": self.stats.to_dict() if self.stats is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict):
        """Create from dictionary. Cached stats are not restored."""
        anchor = data["anchor"]
        return cls(
            anchor=Point(float(anchor["x"]), float(anchor["y"])),
            visible=data.get("visible", True),
            active=data.get("active", True),
            fid=data.get("fid", 0),
            risk_label=data.get("risk_label", CALCULATING_LABEL),
        )


def round_half_up(value: float) -> int:
    # round() rounds half to even; pixel lookup wants .5 to go towards +inf
    return int(math.floor(value + 0.5))

