"""
Content rewriter

Swaps an uploaded image's marker for a markdown image pointing at the
hosted URL. Only the first occurrence is replaced per call, so a marker
repeated verbatim in the note is rewritten once per successful upload of
that marker.
"""


def hosted_marker(alt_text: str, url: str) -> str:
    """
    Build a markdown image pointing at a hosted URL

    Args:
        alt_text: Image alt text
        url: Hosted image URL

    Returns:
        Markdown image marker
    """
    return f"![{alt_text}]({url})"


def rewrite_marker(text: str, raw_marker: str, url: str, alt_text: str) -> str:
    """
    Replace the first occurrence of a marker with a hosted image

    Args:
        text: Current working text
        raw_marker: Marker exactly as scanned from the original note
        url: Hosted image URL
        alt_text: Alt text to keep on the new marker

    Returns:
        Updated text (unchanged if the marker is no longer present)
    """
    return text.replace(raw_marker, hosted_marker(alt_text, url), 1)
