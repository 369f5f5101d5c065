"""Pytest configuration and fixtures."""

import io
import sys
import tempfile
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests
from loguru import logger
from PIL import Image

from buttondown_publisher.settings import Settings


def make_image_bytes(width: int, height: int, fmt: str = "PNG", color: str = "red") -> bytes:
    """Encode a solid-colour image."""
    img = Image.new("RGB", (width, height), color=color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def make_response(status_code: int = 200, json_data: Any = None, text: str = "") -> MagicMock:
    """Stand-in for requests.Response."""
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.text = text
    if json_data is None:
        response.json.side_effect = ValueError("No JSON body")
    else:
        response.json.return_value = json_data
    return response


class FakeSession:
    """
    Records POST requests and answers them from per-endpoint queues

    Each endpoint suffix maps to a list of responses (or exceptions),
    consumed in order; the last one repeats.
    """

    def __init__(self, routes: dict[str, list[Any]] | None = None):
        self.routes: dict[str, list[Any]] = routes or {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    def post(self, url: str, **kwargs: Any) -> Any:
        self.calls.append((url, kwargs))
        for suffix, queue in self.routes.items():
            if url.endswith(suffix):
                answer = queue.pop(0) if len(queue) > 1 else queue[0]
                if isinstance(answer, Exception):
                    raise answer
                return answer
        raise AssertionError(f"Unexpected POST to {url}")

    def calls_to(self, suffix: str) -> list[dict[str, Any]]:
        return [kwargs for url, kwargs in self.calls if url.endswith(suffix)]

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def vault(temp_dir: Path) -> Path:
    """Vault with a small image, a large image and a non-image attachment."""
    attachments = temp_dir / "attachments"
    attachments.mkdir()
    (temp_dir / "img.png").write_bytes(make_image_bytes(100, 50))
    (attachments / "large.jpg").write_bytes(make_image_bytes(2400, 1200, fmt="JPEG"))
    (attachments / "notes.pdf").write_bytes(b"%PDF-1.4 not an image")
    return temp_dir


@pytest.fixture
def settings() -> Settings:
    return Settings(api_key="test-key")


@pytest.fixture(autouse=True)
def reset_logger():
    """Point loguru back at the real stderr after each test."""
    yield
    logger.remove()
    logger.add(sys.stderr)
