"""
Image reference scanner

Finds embedded-image markers in raw note text. Two syntaxes are
recognised:

- Markdown images: ![alt](path)
- Wikilink embeds: ![[path]]

Each syntax is scanned separately over the original text, so all markdown
images come before all wikilink embeds in the result regardless of where
they sit in the document.
"""

import re

from .models import ImageReference

# Markdown image syntax: ![alt](path)
MARKDOWN_IMAGE: re.Pattern[str] = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")

# Wikilink embed syntax: ![[path]]
WIKILINK_IMAGE: re.Pattern[str] = re.compile(r"!\[\[([^\]]+)\]\]")


def scan_references(text: str) -> list[ImageReference]:
    """
    Find all image markers in text

    Args:
        text: Raw note text

    Returns:
        References in per-syntax order of appearance (empty if none)
    """
    references: list[ImageReference] = []

    for match in MARKDOWN_IMAGE.finditer(text):
        references.append(
            ImageReference(
                raw_marker=match.group(0),
                alt_text=match.group(1),
                path_token=match.group(2),
            )
        )

    # Wikilink embeds carry no alt text
    for match in WIKILINK_IMAGE.finditer(text):
        references.append(
            ImageReference(
                raw_marker=match.group(0),
                alt_text="",
                path_token=match.group(1),
            )
        )

    return references
