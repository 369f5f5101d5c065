"""
Image transformer

Downscales images that exceed the configured resize limit before upload.
Images within the limit are passed through byte-for-byte; resized images
are re-encoded in their original format.
"""

import io
from dataclasses import dataclass

from loguru import logger
from PIL import Image

from .models import ResizeConfig, ResizeMode, ResolvedAsset


@dataclass(frozen=True)
class TransformResult:
    """Bytes to upload plus their final dimensions."""

    data: bytes
    width: int
    height: int
    resized: bool


def target_size(width: int, height: int, config: ResizeConfig) -> tuple[int, int] | None:
    """
    Compute the downscaled size for an image

    Args:
        width: Original width in pixels
        height: Original height in pixels
        config: Resize rule

    Returns:
        New (width, height) keeping the aspect ratio, or None when the
        image is within the limit
    """
    limit: int = config.limit_pixels

    if config.mode is ResizeMode.LONGEST:
        constrain_width: bool = width >= height
        if max(width, height) <= limit:
            return None
    elif config.mode is ResizeMode.WIDTH:
        constrain_width = True
        if width <= limit:
            return None
    else:
        constrain_width = False
        if height <= limit:
            return None

    if constrain_width:
        return limit, max(1, round(height * limit / width))
    return max(1, round(width * limit / height)), limit


class ImageTransformer:
    """
    Applies a ResizeConfig to resolved assets

    The config is fixed for the lifetime of the transformer, which in
    turn lives for a single pipeline run.
    """

    def __init__(self, config: ResizeConfig):
        self.config: ResizeConfig = config

    def transform(self, asset: ResolvedAsset) -> TransformResult:
        """
        Resize an asset if it exceeds the limit

        Args:
            asset: Resolved image

        Returns:
            TransformResult; `data` is `asset.data` itself when no resize
            was needed
        """
        new_size: tuple[int, int] | None = target_size(asset.width, asset.height, self.config)
        if new_size is None:
            return TransformResult(asset.data, asset.width, asset.height, resized=False)

        logger.debug(
            f"Resizing {asset.file_name} from {asset.width}x{asset.height} "
            f"to {new_size[0]}x{new_size[1]}"
        )

        with Image.open(io.BytesIO(asset.data)) as img:
            resized: Image.Image = img.resize(new_size, Image.Resampling.LANCZOS)

        # JPEG has no alpha channel or palette
        if asset.image_format == "JPEG" and resized.mode not in ("RGB", "L"):
            resized = resized.convert("RGB")

        buffer = io.BytesIO()
        resized.save(buffer, format=asset.image_format)

        return TransformResult(buffer.getvalue(), new_size[0], new_size[1], resized=True)
