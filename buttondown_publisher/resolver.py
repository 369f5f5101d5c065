"""
Asset resolver

Maps the path token of an image marker to image bytes and dimensions.
The pipeline only depends on the AssetResolver protocol; VaultAssetResolver
is the filesystem-backed store used by the CLI.
"""

import io
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote

from loguru import logger
from PIL import Image, UnidentifiedImageError

from .models import SUPPORTED_EXTENSIONS, ResolvedAsset, Skipped

REMOTE_PREFIXES: tuple[str, ...] = ("http://", "https://", "data:")

UNRESOLVED: Skipped = Skipped("unresolved")
UNSUPPORTED: Skipped = Skipped("unsupported")


class AssetResolver(Protocol):
    """Anything that can turn a path token into an image asset."""

    def resolve(self, path_token: str) -> ResolvedAsset | Skipped:
        """Return the asset, or a Skipped value saying why there is none."""
        ...


def load_asset(file_path: Path) -> ResolvedAsset | Skipped:
    """
    Read an image file and decode its dimensions

    Args:
        file_path: Existing file in the asset store

    Returns:
        ResolvedAsset, or Skipped("unsupported") for files that are not
        a supported, decodable, non-empty image
    """
    extension: str = file_path.suffix.lstrip(".").lower()
    if extension not in SUPPORTED_EXTENSIONS:
        logger.debug(f"Not a supported image type: {file_path.name}")
        return UNSUPPORTED

    try:
        data: bytes = file_path.read_bytes()
    except OSError as e:
        logger.warning(f"Cannot read {file_path}: {e}")
        return UNSUPPORTED

    if not data:
        logger.warning(f"Skipping empty image file: {file_path.name}")
        return UNSUPPORTED

    try:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        logger.warning(f"Cannot decode image {file_path.name}: {e}")
        return UNSUPPORTED

    return ResolvedAsset(
        data=data,
        extension=extension,
        width=width,
        height=height,
        file_name=file_path.name,
    )


class VaultAssetResolver:
    """
    Resolver backed by a directory of notes and attachments

    Resolution mimics how note editors follow links without a base
    directory:

    1. Remote URLs never resolve
    2. The token as a path relative to the vault root (raw, then URL-decoded)
    3. The first file anywhere in the vault with the same file name
       (or the same stem when the token has no extension)

    Hidden directories such as .git or .obsidian are not searched.
    """

    def __init__(self, root: Path):
        """
        Initialize resolver

        Args:
            root: Vault root directory
        """
        self.root: Path = root
        # file name -> first matching path, and stem -> first matching path,
        # both built on first use
        self._name_index: dict[str, Path] | None = None
        self._stem_index: dict[str, Path] = {}

    def _build_index(self) -> None:
        """Walk the vault once, recording the first file for each name and stem."""
        names: dict[str, Path] = {}
        stems: dict[str, Path] = {}
        for path in sorted(self.root.rglob("*")):
            relative_parts: tuple[str, ...] = path.relative_to(self.root).parts
            if any(part.startswith(".") for part in relative_parts):
                continue
            if not path.is_file():
                continue
            names.setdefault(path.name.lower(), path)
            stems.setdefault(path.stem.lower(), path)
        self._name_index = names
        self._stem_index = stems

    def locate(self, path_token: str) -> Path | None:
        """
        Find the file a path token points at

        Args:
            path_token: Path token from an image marker

        Returns:
            Path to the file, or None if nothing matches
        """
        token: str = path_token.strip()
        if not token or token.startswith(REMOTE_PREFIXES):
            return None

        for candidate in dict.fromkeys([token, unquote(token)]):
            location: Path = self.root / candidate.lstrip("/")
            # Over-long names and NUL bytes cannot be on disk
            try:
                inside: bool = location.resolve().is_relative_to(self.root.resolve())
                if inside and location.is_file():
                    return location
            except (OSError, ValueError):
                continue

        if self._name_index is None:
            self._build_index()

        link: Path = Path(unquote(token))
        found: Path | None = self._name_index.get(link.name.lower())
        # Stem matching only applies to links written without an extension
        if found is None and not link.suffix:
            found = self._stem_index.get(link.name.lower())
        return found

    def resolve(self, path_token: str) -> ResolvedAsset | Skipped:
        file_path: Path | None = self.locate(path_token)
        if file_path is None:
            return UNRESOLVED
        return load_asset(file_path)
