"""
Remote risk estimation for probe markers.
"""

from .estimator import (
    DEFAULT_ENDPOINT,
    DEFAULT_MODEL_NAME,
    PredictionClient,
    RiskEstimator,
    RiskResult,
)
from .projection import ImagePlane, MetadataRegistry, image_point_to_patient_point

__all__ = [
    "DEFAULT_ENDPOINT",
    "DEFAULT_MODEL_NAME",
    "PredictionClient",
    "RiskEstimator",
    "RiskResult",
    "ImagePlane",
    "MetadataRegistry",
    "image_point_to_patient_point",
]
