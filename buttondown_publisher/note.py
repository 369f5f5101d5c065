"""
Markdown note loader

Reads a note from disk and yields the (title, body) pair the pipeline
publishes. Frontmatter is parsed with python-frontmatter (YAML, TOML or
JSON) only to pick up a title; by default the body is the full raw text,
exactly what an editor would hand over.
"""

from pathlib import Path
from typing import Any

import frontmatter


class NoteParser:
    """
    Parser for a single markdown note

    Attributes:
        file_path: Location of the note
        raw_text: File contents, unmodified
        metadata: Frontmatter metadata (empty if none)
        content: Note text without the frontmatter block
    """

    def __init__(self, file_path: Path):
        """
        Initialize parser with a markdown file

        Args:
            file_path: Path to the note
        """
        self.file_path: Path = file_path
        self.raw_text: str = file_path.read_text(encoding="utf-8")
        post: frontmatter.Post = frontmatter.loads(self.raw_text)
        self.metadata: dict[str, Any] = dict(post.metadata)
        self.content: str = post.content

    def get_title(self) -> str:
        """
        Note title

        Returns:
            Frontmatter title, or the file name without extension
        """
        title: Any = self.metadata.get("title")
        if isinstance(title, str) and title.strip():
            return title.strip()
        return self.file_path.stem

    def get_body(self, strip_frontmatter: bool = False) -> str:
        """
        Note body to publish

        Args:
            strip_frontmatter: Drop the frontmatter block

        Returns:
            Raw note text, or only the content after the frontmatter
        """
        return self.content if strip_frontmatter else self.raw_text
