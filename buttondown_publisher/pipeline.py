"""
Note-to-draft pipeline

Runs the whole conversion for one note:

1. Scan the note for image markers
2. For each marker, in order:
   a. Resolve the path token to an image (skip if absent or unsupported)
   b. Downscale the image if it exceeds the resize limit
   c. Upload it to the image host
   d. On success, rewrite the marker to point at the hosted URL
3. Submit the rewritten note as a draft

References are processed strictly one after another because every
successful upload rewrites the same working text. Per-reference failures
are recorded and the run continues; only the publish step decides the
terminal state.
"""

import requests
from loguru import logger
from PIL import Image

from .api import API_BASE_URL
from .models import (
    ImageReference,
    PipelineResult,
    PublishFailed,
    PublishOutcome,
    ReferenceOutcome,
    ResolvedAsset,
    RunStatus,
    Skipped,
    UploadOutcome,
    UploadSuccess,
)
from .publisher import DraftPublisher
from .resolver import AssetResolver
from .rewriter import rewrite_marker
from .scanner import scan_references
from .settings import Settings
from .transformer import ImageTransformer, TransformResult
from .uploader import ImageUploader


def process_reference(
    reference: ImageReference,
    resolver: AssetResolver,
    transformer: ImageTransformer,
    uploader: ImageUploader,
) -> ReferenceOutcome:
    """
    Resolve, transform and upload a single reference

    Args:
        reference: Scanned marker
        resolver: Asset store
        transformer: Resize step for this run
        uploader: Image host client

    Returns:
        Outcome for the reference; the working text is not touched here
    """
    asset: ResolvedAsset | Skipped = resolver.resolve(reference.path_token)
    if isinstance(asset, Skipped):
        logger.debug(f"Skipping {reference.raw_marker}: {asset.reason}")
        return ReferenceOutcome(reference, asset)

    try:
        result: TransformResult = transformer.transform(asset)
    except (Image.DecompressionBombError, OSError, ValueError) as e:
        logger.warning(f"Cannot resize {asset.file_name}: {e}")
        return ReferenceOutcome(reference, Skipped("unsupported"))

    outcome: UploadOutcome = uploader.upload(result.data, asset.file_name, asset.mime_type)

    resized_to: tuple[int, int] | None = (result.width, result.height) if result.resized else None
    return ReferenceOutcome(reference, outcome, resized_to)


def run_pipeline(
    title: str,
    body: str,
    settings: Settings,
    resolver: AssetResolver,
    session: requests.Session | None = None,
    base_url: str = API_BASE_URL,
) -> PipelineResult:
    """
    Upload a note's local images and publish it as a draft

    Args:
        title: Draft subject
        body: Note text
        settings: Configuration for this run
        resolver: Asset store used to look up image markers
        session: HTTP session (created and closed here if omitted)
        base_url: API root

    Returns:
        PipelineResult with the rewritten body, every reference outcome
        and the publish outcome
    """
    if not settings.has_api_key:
        logger.warning("No API key configured, nothing was uploaded or published")
        return PipelineResult(body=body, status=RunStatus.CONFIG_MISSING)

    owns_session: bool = session is None
    http: requests.Session = session or requests.Session()

    try:
        transformer = ImageTransformer(settings.resize_config)
        uploader = ImageUploader(settings.api_key, session=http, base_url=base_url)
        publisher = DraftPublisher(settings.api_key, session=http, base_url=base_url)

        references: list[ImageReference] = scan_references(body)
        logger.info(f"Found {len(references)} image references")

        working_text: str = body
        outcomes: list[ReferenceOutcome] = []

        for reference in references:
            outcome: ReferenceOutcome = process_reference(reference, resolver, transformer, uploader)
            outcomes.append(outcome)

            if isinstance(outcome.outcome, UploadSuccess):
                working_text = rewrite_marker(
                    working_text,
                    reference.raw_marker,
                    outcome.outcome.url,
                    reference.alt_text,
                )

        uploaded: int = sum(1 for o in outcomes if o.rewritten)
        logger.info(f"Uploaded {uploaded} of {len(references)} images")

        publish: PublishOutcome = publisher.publish(title, working_text)
    finally:
        if owns_session:
            http.close()

    status: RunStatus = RunStatus.PUBLISH_FAILED if isinstance(publish, PublishFailed) else RunStatus.DONE

    return PipelineResult(
        body=working_text,
        outcomes=tuple(outcomes),
        publish=publish,
        status=status,
    )
