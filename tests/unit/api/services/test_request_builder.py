"""Tests for Responses API parameter assembly."""

from __future__ import annotations

from api.services.request_builder import (
    build_image_generation_tool,
    build_image_response_params,
    build_text_response_params,
)
from models.request_models import ImageResponseRequest, TextResponseRequest


class TestTextResponseParams:
    """Tests for build_text_response_params."""

    def test_minimal_request_uses_default_model(self) -> None:
        """Test only model and input are sent for a bare request."""
        params = build_text_response_params(TextResponseRequest(input="Hello"), "gpt-4o")

        assert params == {"model": "gpt-4o", "input": "Hello"}

    def test_explicit_model_wins(self) -> None:
        """Test a caller model overrides the default."""
        params = build_text_response_params(TextResponseRequest(model="gpt-5", input="Hi"), "gpt-4o")

        assert params["model"] == "gpt-5"

    def test_supplied_options_forwarded(self) -> None:
        """Test supplied options are copied verbatim, unsupplied ones omitted."""
        request = TextResponseRequest(
            input="Hi",
            instructions="Be brief",
            temperature=0.2,
            max_output_tokens=100,
            store=False,
            previous_response_id="resp_0",
            tools=[{"type": "web_search"}],
        )

        params = build_text_response_params(request, "gpt-4o")

        assert params == {
            "model": "gpt-4o",
            "input": "Hi",
            "instructions": "Be brief",
            "tools": [{"type": "web_search"}],
            "temperature": 0.2,
            "previous_response_id": "resp_0",
            "store": False,
            "max_output_tokens": 100,
        }

    def test_explicit_null_on_nullable_field(self) -> None:
        """Test an explicit null is sent only for nullable parameters."""
        request = TextResponseRequest(input="Hi", truncation=None, temperature=None)

        params = build_text_response_params(request, "gpt-4o")

        assert "truncation" in params and params["truncation"] is None
        assert "temperature" not in params

    def test_stream_flags(self) -> None:
        """Test streaming adds stream and stream_options."""
        request = TextResponseRequest(input="Hi", stream_options={"include_obfuscation": False})

        params = build_text_response_params(request, "gpt-4o", stream=True)

        assert params["stream"] is True
        assert params["stream_options"] == {"include_obfuscation": False}
        assert "stream" not in build_text_response_params(request, "gpt-4o")

    def test_modalities_in_extra_body(self) -> None:
        """Test modalities travel in the raw request body."""
        params = build_text_response_params(TextResponseRequest(input="Hi", modalities=["text", "audio"]), "gpt-4o")

        assert params["extra_body"] == {"modalities": ["text", "audio"]}
        assert "modalities" not in params


class TestImageResponseParams:
    """Tests for build_image_response_params."""

    def test_image_tool_appended_after_caller_tools(self) -> None:
        """Test caller tools keep their order and the image tool comes last."""
        request = ImageResponseRequest(
            input="Draw a cat",
            tools=[{"type": "web_search"}, {"type": "file_search", "vector_store_ids": ["vs_1"]}],
            image_quality="high",
            image_size="1024x1024",
        )

        params = build_image_response_params(request, "gpt-5")

        assert params["model"] == "gpt-5"
        assert params["tools"] == [
            {"type": "web_search"},
            {"type": "file_search", "vector_store_ids": ["vs_1"]},
            {"type": "image_generation", "quality": "high", "size": "1024x1024"},
        ]

    def test_stream_defaults_partial_images(self) -> None:
        """Test streaming defaults partial_images to 3."""
        tool = build_image_generation_tool(ImageResponseRequest(input="x"), stream=True)

        assert tool == {"type": "image_generation", "partial_images": 3}

    def test_explicit_partial_images_kept(self) -> None:
        """Test a caller partial_images overrides the default."""
        tool = build_image_generation_tool(ImageResponseRequest(input="x", partial_images=1), stream=True)

        assert tool["partial_images"] == 1

    def test_non_stream_has_no_partial_images(self) -> None:
        """Test non-streaming requests leave partial_images unset."""
        params = build_image_response_params(ImageResponseRequest(input="x", image_format="webp"), "gpt-5")

        assert params["tools"] == [{"type": "image_generation", "output_format": "webp"}]
        assert "stream" not in params
