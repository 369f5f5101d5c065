"""Tests for the note-to-draft pipeline."""

import io
from pathlib import Path
from unittest.mock import MagicMock

import requests
from PIL import Image

from buttondown_publisher.models import (
    AuthFailure,
    ImageReference,
    PipelineResult,
    PublishFailed,
    Published,
    ResizeConfig,
    ResizeMode,
    ResolvedAsset,
    RunStatus,
    Skipped,
    UploadSuccess,
)
from buttondown_publisher.notices import (
    MISSING_KEY_NOTICE,
    PUBLISH_FAILED_NOTICE,
    PUBLISHED_NOTICE,
    result_notices,
)
from buttondown_publisher.pipeline import process_reference, run_pipeline
from buttondown_publisher.resolver import VaultAssetResolver
from buttondown_publisher.settings import Settings
from buttondown_publisher.transformer import ImageTransformer

from conftest import FakeSession, make_image_bytes, make_response


def uploaded(url: str):
    return make_response(201, {"image": url})


def draft_created():
    return make_response(201, {"id": "email-1"})


class TestRunPipeline:
    """Tests for run_pipeline."""

    def test_end_to_end(self, vault: Path, settings: Settings):
        """Marker is rewritten and the rewritten body is published."""
        session = FakeSession({
            "/v1/images": [uploaded("https://cdn.example/img.png")],
            "/v1/emails": [draft_created()],
        })

        result = run_pipeline("My Post", "Hello ![a](img.png) world", settings, VaultAssetResolver(vault), session)

        assert result.body == "Hello ![a](https://cdn.example/img.png) world"
        assert result.status is RunStatus.DONE
        assert result.publish == Published()
        assert session.calls_to("/v1/emails")[0]["json"] == {
            "body": "Hello ![a](https://cdn.example/img.png) world",
            "subject": "My Post",
            "status": "draft",
        }

    def test_text_without_markers_unchanged(self, vault: Path, settings: Settings):
        session = FakeSession({"/v1/emails": [draft_created()]})
        body = "# Title\n\nNo images, just [a link](https://example.com)."

        result = run_pipeline("T", body, settings, VaultAssetResolver(vault), session)

        assert result.body == body
        assert result.outcomes == ()
        assert session.calls_to("/v1/images") == []

    def test_unresolved_marker_left_verbatim(self, vault: Path, settings: Settings):
        session = FakeSession({"/v1/emails": [draft_created()]})
        body = "See ![missing](nowhere.png) and ![[ghost.jpg]]"

        result = run_pipeline("T", body, settings, VaultAssetResolver(vault), session)

        assert result.body == body
        assert [o.outcome for o in result.outcomes] == [Skipped("unresolved"), Skipped("unresolved")]

    def test_unsupported_and_remote_markers_untouched(self, vault: Path, settings: Settings):
        session = FakeSession({"/v1/emails": [draft_created()]})
        body = "![[notes.pdf]] ![logo](https://example.com/logo.png)"

        result = run_pipeline("T", body, settings, VaultAssetResolver(vault), session)

        assert result.body == body
        assert session.calls_to("/v1/images") == []

    def test_small_image_uploaded_unchanged(self, vault: Path, settings: Settings):
        session = FakeSession({
            "/v1/images": [uploaded("https://h/img.png")],
            "/v1/emails": [draft_created()],
        })

        result = run_pipeline("T", "![](img.png)", settings, VaultAssetResolver(vault), session)

        sent = session.calls_to("/v1/images")[0]["files"]["image"]
        assert sent == ("img.png", (vault / "img.png").read_bytes(), "image/png")
        assert result.outcomes[0].resized_to is None

    def test_large_image_resized_before_upload(self, vault: Path):
        settings = Settings(api_key="k", side_preference=ResizeMode.LONGEST, resize_limit=600)
        session = FakeSession({
            "/v1/images": [uploaded("https://h/large.jpg")],
            "/v1/emails": [draft_created()],
        })

        result = run_pipeline("T", "![[large.jpg]]", settings, VaultAssetResolver(vault), session)

        file_name, data, mime = session.calls_to("/v1/images")[0]["files"]["image"]
        assert (file_name, mime) == ("large.jpg", "image/jpeg")
        with Image.open(io.BytesIO(data)) as img:
            assert img.size == (600, 300)
        assert result.outcomes[0].resized_to == (600, 300)
        assert result.body == "![](https://h/large.jpg)"

    def test_auth_failure_does_not_stop_other_markers(self, vault: Path, settings: Settings):
        session = FakeSession({
            "/v1/images": [make_response(403), uploaded("https://h/large.jpg")],
            "/v1/emails": [draft_created()],
        })
        body = "![a](img.png) and ![b](attachments/large.jpg)"

        result = run_pipeline("T", body, settings, VaultAssetResolver(vault), session)

        assert result.body == "![a](img.png) and ![b](https://h/large.jpg)"
        assert isinstance(result.outcomes[0].outcome, AuthFailure)
        assert isinstance(result.outcomes[1].outcome, UploadSuccess)
        assert result.status is RunStatus.DONE

    def test_network_failure_is_not_fatal(self, vault: Path, settings: Settings):
        session = FakeSession({
            "/v1/images": [requests.ConnectionError("down")],
            "/v1/emails": [draft_created()],
        })

        result = run_pipeline("T", "![a](img.png)", settings, VaultAssetResolver(vault), session)

        assert result.body == "![a](img.png)"
        assert result.publish == Published()

    def test_duplicate_markers_rewritten_once_per_upload(self, vault: Path, settings: Settings):
        session = FakeSession({
            "/v1/images": [uploaded("https://h/1.png"), uploaded("https://h/2.png")],
            "/v1/emails": [draft_created()],
        })

        result = run_pipeline("T", "![x](img.png) ![x](img.png)", settings, VaultAssetResolver(vault), session)

        assert result.body == "![x](https://h/1.png) ![x](https://h/2.png)"

    def test_missing_api_key_makes_no_requests(self, vault: Path):
        session = FakeSession()
        body = "Hello ![a](img.png)"

        result = run_pipeline("T", body, Settings(api_key="  "), VaultAssetResolver(vault), session)

        assert result.status is RunStatus.CONFIG_MISSING
        assert result.body == body
        assert result.publish is None
        assert session.calls == []

    def test_publish_failure(self, vault: Path, settings: Settings):
        session = FakeSession({"/v1/emails": [make_response(500, text="oops")]})

        result = run_pipeline("T", "text", settings, VaultAssetResolver(vault), session)

        assert result.status is RunStatus.PUBLISH_FAILED
        assert isinstance(result.publish, PublishFailed)

    def test_over_long_path_leaves_body_unchanged(self, vault: Path, settings: Settings):
        session = FakeSession({"/v1/emails": [draft_created()]})
        body = "![a](" + "x" * 300 + ".png)"

        result = run_pipeline("T", body, settings, VaultAssetResolver(vault), session)

        assert result.body == body
        assert result.status is RunStatus.DONE
        assert result.outcomes[0].outcome == Skipped("unresolved")

    def test_injected_session_left_open(self, vault: Path, settings: Settings):
        session = FakeSession({"/v1/emails": [draft_created()]})

        run_pipeline("T", "text", settings, VaultAssetResolver(vault), session)

        assert session.closed is False


class TestResultNotices:
    """Tests for result_notices."""

    def test_missing_key(self):
        result = PipelineResult(body="x", status=RunStatus.CONFIG_MISSING)

        assert result_notices(result) == [MISSING_KEY_NOTICE]

    def test_resize_and_failure_notices(self, vault: Path):
        settings = Settings(api_key="k", resize_limit=600)
        session = FakeSession({
            "/v1/images": [make_response(403)],
            "/v1/emails": [draft_created()],
        })

        result = run_pipeline("T", "![[large.jpg]] ![[nope.png]]", settings, VaultAssetResolver(vault), session)

        assert result_notices(result) == [
            "Resized image large.jpg to 600x300",
            "Failed to upload image large.jpg: Invalid API key",
            PUBLISHED_NOTICE,
        ]

    def test_publish_failed_notice(self):
        result = PipelineResult(body="x", publish=PublishFailed("HTTP 500"), status=RunStatus.PUBLISH_FAILED)

        assert result_notices(result) == [PUBLISH_FAILED_NOTICE]


class TestProcessReference:
    """Tests for process_reference failure isolation."""

    def test_decompression_bomb_during_resize_is_skipped(self, monkeypatch):
        asset = ResolvedAsset(make_image_bytes(100, 100), "png", 100, 100, "big.png")
        resolver = MagicMock()
        resolver.resolve.return_value = asset
        uploader = MagicMock()
        reference = ImageReference("![[big.png]]", "", "big.png")
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

        outcome = process_reference(reference, resolver, ImageTransformer(ResizeConfig(limit_pixels=50)), uploader)

        assert outcome.outcome == Skipped("unsupported")
        uploader.upload.assert_not_called()
