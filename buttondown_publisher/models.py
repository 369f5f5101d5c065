"""
Data model for the note-to-draft pipeline

Everything the pipeline produces or consumes is a small frozen dataclass
created fresh for each run. Upload results are a closed set of outcome
types rather than exceptions, so callers can report every reference
without unwinding the run.
"""

from dataclasses import dataclass, field
from enum import Enum


# Supported image extensions -> (MIME type, Pillow encode format)
IMAGE_TYPES: dict[str, tuple[str, str]] = {
    "png": ("image/png", "PNG"),
    "jpg": ("image/jpeg", "JPEG"),
    "jpeg": ("image/jpeg", "JPEG"),
    "gif": ("image/gif", "GIF"),
    "webp": ("image/webp", "WEBP"),
}

SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(IMAGE_TYPES)


@dataclass(frozen=True)
class ImageReference:
    """
    One embedded-image marker found in the note text

    Attributes:
        raw_marker: Exact marker text as it appears in the source
        alt_text: Alt text (empty for wikilink embeds)
        path_token: Path or link target inside the marker
    """

    raw_marker: str
    alt_text: str
    path_token: str


@dataclass(frozen=True)
class ResolvedAsset:
    """
    Binary image loaded from the asset store

    Only ever built for a supported, non-empty image, so downstream
    components can rely on `mime_type` and `image_format`.
    """

    data: bytes
    extension: str
    width: int
    height: int
    file_name: str

    def __post_init__(self) -> None:
        if not self.data:
            raise ValueError(f"Empty image data for {self.file_name}")
        if self.extension not in SUPPORTED_EXTENSIONS:
            raise ValueError(f"Unsupported image type: {self.extension}")

    @property
    def mime_type(self) -> str:
        return IMAGE_TYPES[self.extension][0]

    @property
    def image_format(self) -> str:
        return IMAGE_TYPES[self.extension][1]


class ResizeMode(str, Enum):
    """Which side of an image the resize limit applies to."""

    LONGEST = "longest"
    WIDTH = "width"
    HEIGHT = "height"


@dataclass(frozen=True)
class ResizeConfig:
    """Resize rule applied to every uploaded image in a run."""

    mode: ResizeMode = ResizeMode.LONGEST
    limit_pixels: int = 1200

    def __post_init__(self) -> None:
        if self.limit_pixels <= 0:
            raise ValueError(f"Resize limit must be positive, got {self.limit_pixels}")


# Upload outcomes


@dataclass(frozen=True)
class UploadSuccess:
    url: str


@dataclass(frozen=True)
class AuthFailure:
    """Image host rejected the API key (HTTP 403)."""


@dataclass(frozen=True)
class HttpFailure:
    status: int
    detail: str = ""


@dataclass(frozen=True)
class NetworkFailure:
    detail: str = ""


@dataclass(frozen=True)
class Skipped:
    """Reference never reached the uploader."""

    reason: str  # "unresolved" or "unsupported"


UploadOutcome = UploadSuccess | AuthFailure | HttpFailure | NetworkFailure | Skipped


@dataclass(frozen=True)
class ReferenceOutcome:
    """
    What happened to a single reference during a run

    Attributes:
        reference: The scanned marker
        outcome: Upload outcome (Skipped when nothing was uploaded)
        resized_to: Final (width, height) when the image was downscaled
    """

    reference: ImageReference
    outcome: UploadOutcome
    resized_to: tuple[int, int] | None = None

    @property
    def rewritten(self) -> bool:
        return isinstance(self.outcome, UploadSuccess)


# Publish outcomes


@dataclass(frozen=True)
class Published:
    """Draft was accepted by the remote service."""


@dataclass(frozen=True)
class PublishFailed:
    detail: str = ""


PublishOutcome = Published | PublishFailed


class RunStatus(str, Enum):
    DONE = "done"
    PUBLISH_FAILED = "publish_failed"
    CONFIG_MISSING = "config_missing"


@dataclass(frozen=True)
class PipelineResult:
    """
    Final state of one pipeline run

    Attributes:
        body: Rewritten note body (the input body when nothing was uploaded)
        outcomes: Per-reference outcomes in processing order
        publish: Publish outcome, None if publishing was never attempted
        status: Terminal state of the run
    """

    body: str
    outcomes: tuple[ReferenceOutcome, ...] = field(default_factory=tuple)
    publish: PublishOutcome | None = None
    status: RunStatus = RunStatus.DONE
