"""
Tests for the risk estimator, its HTTP client and the point projection.
"""

import asyncio

import numpy as np
import pytest
import requests
from unittest.mock import Mock

from probe_annotation.core.annotation import Point
from probe_annotation.core.errors import MetadataError, RiskEstimationError
from probe_annotation.core.risk import (
    DEFAULT_ENDPOINT,
    ImagePlane,
    MetadataRegistry,
    PredictionClient,
    RiskEstimator,
    RiskResult,
    image_point_to_patient_point,
)

PLANE = ImagePlane(
    image_position_patient=(10.0, 20.0, 30.0),
    row_cosines=(1.0, 0.0, 0.0),
    column_cosines=(0.0, 1.0, 0.0),
    row_pixel_spacing=0.5,
    column_pixel_spacing=2.0,
)


@pytest.fixture
def metadata():
    registry = MetadataRegistry()
    registry.add_image("img-1", "ProstateX-0001", PLANE)
    return registry


def make_session(body=None, status_error=None, json_error=None):
    response = Mock()
    response.json.return_value = body
    if json_error is not None:
        response.json.side_effect = json_error
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    session = Mock()
    session.post.return_value = response
    return session


class TestProjection:
    def test_image_point_to_patient_point(self):
        lps = image_point_to_patient_point(Point(3.0, 4.0), PLANE)

        np.testing.assert_allclose(lps, [16.0, 22.0, 30.0])

    def test_oblique_plane(self):
        plane = ImagePlane(
            image_position_patient=(0.0, 0.0, 0.0),
            row_cosines=(0.0, 1.0, 0.0),
            column_cosines=(0.0, 0.0, -1.0),
        )

        lps = image_point_to_patient_point(Point(5.0, 7.0), plane)

        np.testing.assert_allclose(lps, [0.0, 5.0, -7.0])

    def test_plane_from_dict(self):
        plane = ImagePlane.from_dict(
            {"image_position_patient": [1, 2, 3], "row_pixel_spacing": "0.7"}
        )

        assert plane.image_position_patient == (1.0, 2.0, 3.0)
        assert plane.row_pixel_spacing == 0.7
        assert plane.row_cosines == (1.0, 0.0, 0.0)

    def test_missing_metadata(self):
        registry = MetadataRegistry()

        with pytest.raises(MetadataError):
            registry.patient_name("unknown")
        with pytest.raises(MetadataError):
            registry.image_plane("unknown")

    def test_plane_registered_as_dict(self):
        registry = MetadataRegistry()
        registry.add("imagePlaneModule", "img", {"column_pixel_spacing": 3})

        assert registry.image_plane("img").column_pixel_spacing == 3.0


class TestRiskEstimator:
    def test_build_request(self, metadata):
        estimator = RiskEstimator(metadata, client=Mock())

        body = estimator.build_request("img-1", Point(3.0, 4.0))

        assert body == {
            "case": "ProstateX-0001",
            "model_name": "Densenet_T2_ABK_auc_079_nozone",
            "zone": "",
            "lps": [16.0, 22.0, 30.0],
        }

    def test_estimate(self, metadata):
        client = Mock()
        client.predict.return_value = {"description": "HIGHRISK", "score": 0.9}
        estimator = RiskEstimator(metadata, client=client, model_name="other")

        result = asyncio.run(estimator.estimate("img-1", Point(3.0, 4.0)))

        assert result.description == "HIGHRISK"
        assert result.raw["score"] == 0.9
        payload = client.predict.call_args.args[0]
        assert payload["model_name"] == "other"

    def test_estimate_propagates_client_errors(self, metadata):
        client = Mock()
        client.predict.side_effect = RiskEstimationError("down")
        estimator = RiskEstimator(metadata, client=client)

        with pytest.raises(RiskEstimationError):
            asyncio.run(estimator.estimate("img-1", Point(3.0, 4.0)))

    @pytest.mark.parametrize("body", [[], {"risk": 1}, {"description": 3}])
    def test_malformed_response(self, body):
        with pytest.raises(RiskEstimationError):
            RiskResult.from_response(body)


class TestPredictionClient:
    def test_posts_json(self):
        session = make_session({"description": "0.42 probability"})
        client = PredictionClient(session=session)

        body = client.predict({"case": "x"})

        assert body == {"description": "0.42 probability"}
        session.post.assert_called_once_with(
            DEFAULT_ENDPOINT,
            json={"case": "x"},
            headers={"Content-Type": "application/json"},
            timeout=None,
        )

    def test_timeout_is_forwarded(self):
        session = make_session({"description": "x"})
        PredictionClient("http://localhost/predict", timeout=2.5, session=session).predict({})

        assert session.post.call_args.kwargs["timeout"] == 2.5

    def test_network_error(self):
        session = Mock()
        session.post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(RiskEstimationError):
            PredictionClient(session=session).predict({})

    def test_http_error_status(self):
        session = make_session(status_error=requests.HTTPError("500 Server Error"))

        with pytest.raises(RiskEstimationError):
            PredictionClient(session=session).predict({})

    def test_invalid_json(self):
        session = make_session(json_error=ValueError("no json"))

        with pytest.raises(RiskEstimationError):
            PredictionClient(session=session).predict({})
