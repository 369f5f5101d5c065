"""
User-facing notices

The pipeline only returns values; this module decides what the user is
told about them. Skipped references produce no notice, resizes and
failures do.
"""

from .models import (
    AuthFailure,
    HttpFailure,
    NetworkFailure,
    PipelineResult,
    PublishFailed,
    Published,
    ReferenceOutcome,
    RunStatus,
)

MISSING_KEY_NOTICE: str = "Please set your API key in the settings!"
PUBLISHED_NOTICE: str = "Sent draft to Buttondown"
PUBLISH_FAILED_NOTICE: str = (
    "Something went wrong sending draft to Buttondown. Please check the console for more info"
)


def reference_notices(outcome: ReferenceOutcome) -> list[str]:
    """Notices for a single reference, in the order they happened."""
    messages: list[str] = []
    path: str = outcome.reference.path_token

    if outcome.resized_to is not None:
        width, height = outcome.resized_to
        messages.append(f"Resized image {path} to {width}x{height}")

    result = outcome.outcome
    if isinstance(result, AuthFailure):
        messages.append(f"Failed to upload image {path}: Invalid API key")
    elif isinstance(result, HttpFailure):
        messages.append(f"Failed to upload image {path}: HTTP {result.status}")
    elif isinstance(result, NetworkFailure):
        messages.append(f"Error uploading image {path}. Check console for details.")

    return messages


def result_notices(result: PipelineResult) -> list[str]:
    """
    All notices for a finished run

    Args:
        result: Pipeline result

    Returns:
        Messages in display order, ending with the publish notice
    """
    if result.status is RunStatus.CONFIG_MISSING:
        return [MISSING_KEY_NOTICE]

    messages: list[str] = []
    for outcome in result.outcomes:
        messages.extend(reference_notices(outcome))

    if isinstance(result.publish, Published):
        messages.append(PUBLISHED_NOTICE)
    elif isinstance(result.publish, PublishFailed):
        messages.append(PUBLISH_FAILED_NOTICE)

    return messages
