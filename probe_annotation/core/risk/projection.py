"""
Projection of image points into patient space and the metadata it needs.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

from ..annotation.state import Point
from ..errors import MetadataError

logger = logging.getLogger(__name__)

PATIENT_MODULE = "patient"
IMAGE_PLANE_MODULE = "imagePlaneModule"


@dataclass(frozen=True)
class ImagePlane:
    """Geometry of an image plane in patient (LPS) space."""

    image_position_patient: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    row_cosines: Tuple[float, float, float] = (1.0, 0.0, 0.0)
    column_cosines: Tuple[float, float, float] = (0.0, 1.0, 0.0)
    row_pixel_spacing: float = 1.0
    column_pixel_spacing: float = 1.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        def _vector(key: str, default: Sequence[float]):
            value = data.get(key)
            return tuple(float(v) for v in (value if value is not None else default))

        return cls(
            image_position_patient=_vector("image_position_patient", (0.0, 0.0, 0.0)),
            row_cosines=_vector("row_cosines", (1.0, 0.0, 0.0)),
            column_cosines=_vector("column_cosines", (0.0, 1.0, 0.0)),
            row_pixel_spacing=float(data.get("row_pixel_spacing", 1.0)),
            column_pixel_spacing=float(data.get("column_pixel_spacing", 1.0)),
        )


def image_point_to_patient_point(point: Point, plane: ImagePlane) -> np.ndarray:
    """
    Convert an image pixel coordinate to a patient space 3-vector.

    Columns advance along the row cosines scaled by the column spacing and
    rows advance along the column cosines scaled by the row spacing.
    """
    origin = np.asarray(plane.image_position_patient, dtype=np.float64)
    along_row = np.asarray(plane.row_cosines, dtype=np.float64) * (
        point.x * plane.column_pixel_spacing
    )
    along_column = np.asarray(plane.column_cosines, dtype=np.float64) * (
        point.y * plane.row_pixel_spacing
    )
    return origin + along_row + along_column


class MetadataRegistry:
    """In-memory metadata provider keyed by module type and image id."""

    def __init__(self):
        self._modules: Dict[Tuple[str, str], Any] = {}

    def add(self, module_type: str, image_id: str, value: Any):
        self._modules[(module_type, image_id)] = value

    def add_image(
        self,
        image_id: str,
        patient_name: str,
        plane: Optional[ImagePlane] = None,
    ):
        """Register the patient and plane modules for one image."""
        self.add(PATIENT_MODULE, image_id, {"name": patient_name})
        self.add(IMAGE_PLANE_MODULE, image_id, plane or ImagePlane())

    def get(self, module_type: str, image_id: str) -> Optional[Any]:
        return self._modules.get((module_type, image_id))

    def patient_name(self, image_id: str) -> str:
        patient = self.get(PATIENT_MODULE, image_id)
        if not patient or patient.get("name") is None:
            raise MetadataError(f"No patient name registered for image {image_id}")
        return patient["name"]

    def image_plane(self, image_id: str) -> ImagePlane:
        plane = self.get(IMAGE_PLANE_MODULE, image_id)
        if plane is None:
            raise MetadataError(f"No image plane registered for image {image_id}")
        if isinstance(plane, dict):
            plane = ImagePlane.from_dict(plane)
        return plane
