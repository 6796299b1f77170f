"""
Tests for building generation requests from form input.

Run with:
    python -m pytest tests/test_request_builder.py -v
"""

import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import reload_config
from services.video_generation import (
    ErrorKind,
    ReferenceImage,
    VideoGenerationError,
    build_request,
)


class TestOutputCount:
    """Video count validation."""

    @pytest.mark.parametrize("count", [1, 2, 4, 100])
    def test_positive_count_is_kept(self, count):
        """The request carries exactly the requested count."""
        request = build_request("a cat", "", count)
        assert request.output_count == count
        assert request.to_payload()["config"]["numberOfVideos"] == count

    @pytest.mark.parametrize("count", [0, -1, -50, 1.5, 2.0, "2", None, True])
    def test_invalid_count_is_rejected(self, count):
        """Zero, negative and non-integer counts fail as MALFORMED, never clamped."""
        with pytest.raises(VideoGenerationError) as exc_info:
            build_request("a cat", "", count)

        assert exc_info.value.kind == ErrorKind.MALFORMED
        assert exc_info.value.error_code == "BAD_OUTPUT_COUNT"


class TestReferenceImage:
    """Optional reference image handling."""

    def test_image_attached_with_png_tag(self):
        """A non-empty encoded image is attached as image/png."""
        request = build_request("a cat", "iVBORw0KGgo=", 1)

        assert request.reference_image is not None
        assert request.reference_image.image_bytes == "iVBORw0KGgo="
        assert request.reference_image.mime_type == "image/png"
        assert request.to_payload()["image"] == {
            "imageBytes": "iVBORw0KGgo=",
            "mimeType": "image/png",
        }

    @pytest.mark.parametrize("encoded", ["", None])
    def test_missing_image_is_omitted(self, encoded):
        """No image means no image field at all, not an empty one."""
        request = build_request("a cat", encoded, 1)

        assert request.reference_image is None
        assert "image" not in request.to_payload()

    def test_reference_image_rejects_empty_payload(self):
        with pytest.raises(VideoGenerationError) as exc_info:
            ReferenceImage(image_bytes="")
        assert exc_info.value.kind == ErrorKind.MALFORMED

    def test_reference_image_rejects_bad_mime_type(self):
        with pytest.raises(VideoGenerationError):
            ReferenceImage(image_bytes="abcd", mime_type="png")


class TestRequestMetadata:

    def test_prompt_and_default_model(self):
        request = build_request("a cat", "", 2)
        payload = request.to_payload()

        assert payload["prompt"] == "a cat"
        assert payload["model"] == "veo-2.0-generate-001"

    def test_model_from_environment(self, monkeypatch):
        monkeypatch.setenv("VEO_MODEL", "veo-3.0-generate-preview")
        reload_config()

        request = build_request("a cat", "", 1)
        assert request.model == "veo-3.0-generate-preview"

    def test_explicit_model_wins(self):
        request = build_request("a cat", "", 1, model="veo-custom")
        assert request.model == "veo-custom"

    def test_each_request_gets_an_id(self):
        first = build_request("a cat", "", 1)
        second = build_request("a cat", "", 1)
        assert first.request_id != second.request_id
