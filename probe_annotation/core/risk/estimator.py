"""
Risk estimation through the remote prediction service.

One estimate is one POST round trip. There is no retry and no request
coalescing; callers decide what to do with overlapping results.
"""

import asyncio
import logging
from concurrent.futures import Executor
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from ..annotation.state import Point
from ..errors import RiskEstimationError
from .projection import MetadataRegistry, image_point_to_patient_point

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "http://192.241.141.88:5000/predict"
DEFAULT_MODEL_NAME = "Densenet_T2_ABK_auc_079_nozone"


@dataclass
class RiskResult:
    """Parsed response of the prediction service."""

    description: str
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_response(cls, body: Any):
        if not isinstance(body, dict):
            raise RiskEstimationError(
                f"Prediction response must be a JSON object, got {type(body).__name__}"
            )
        description = body.get("description")
        if not isinstance(description, str):
            raise RiskEstimationError("Prediction response has no 'description' string")
        return cls(description=description, raw=body)


class PredictionClient:
    """
    Blocking HTTP client for the prediction endpoint.

    Args:
        endpoint: URL receiving the POST
        timeout: Seconds passed to requests, None waits forever
        session: Optional preconfigured ``requests.Session``
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()

    def predict(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.session.post(
                self.endpoint,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise RiskEstimationError(f"Prediction request failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise RiskEstimationError("Prediction response is not valid JSON") from e


class RiskEstimator:
    """
    Builds prediction requests for image points and awaits their result.

    Args:
        metadata: Provider of patient names and image planes
        client: Object with a blocking ``predict(payload) -> dict``
        model_name: Model the service should run
        executor: Executor the blocking call runs in, None for the loop default
    """

    def __init__(
        self,
        metadata: MetadataRegistry,
        client: Optional[PredictionClient] = None,
        model_name: str = DEFAULT_MODEL_NAME,
        executor: Optional[Executor] = None,
    ):
        self.metadata = metadata
        self.client = client or PredictionClient()
        self.model_name = model_name
        self.executor = executor

    def build_request(self, image_id: str, point: Point) -> Dict[str, Any]:
        """
        Build the JSON body for one prediction.

        Raises:
            MetadataError: If the image has no patient or plane metadata
        """
        case = self.metadata.patient_name(image_id)
        plane = self.metadata.image_plane(image_id)
        lps = image_point_to_patient_point(point, plane)
        return {
            "case": case,
            "model_name": self.model_name,
            "zone": "",
            "lps": [float(v) for v in lps],
        }

    async def estimate(self, image_id: str, point: Point) -> RiskResult:
        """
        Request a risk estimate for an image point.

        The HTTP call runs in an executor so the event loop keeps running
        while it is in flight.
        """
        payload = self.build_request(image_id, point)
        logger.debug("Requesting risk for %s at %s", image_id, payload["lps"])

        loop = asyncio.get_running_loop()
        body = await loop.run_in_executor(self.executor, self.client.predict, payload)
        return RiskResult.from_response(body)
