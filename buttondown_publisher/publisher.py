"""
Draft publisher

Submits the rewritten note to Buttondown as an email draft. The payload
is the minimal email object the API accepts:

    {"body": "...", "subject": "...", "status": "draft"}
"""

from typing import Any

import requests
from loguru import logger

from .api import API_BASE_URL, EMAILS_ENDPOINT, REQUEST_TIMEOUT, auth_headers, is_success
from .models import PublishFailed, PublishOutcome, Published


class DraftPublisher:
    """Client for POST /v1/emails."""

    STATUS: str = "draft"

    def __init__(
        self,
        api_key: str,
        session: requests.Session | None = None,
        base_url: str = API_BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
    ):
        """
        Initialize publisher

        Args:
            api_key: Buttondown API key
            session: HTTP session to reuse (a new one is created if omitted)
            base_url: API root, without trailing slash
            timeout: Request timeout in seconds
        """
        self.api_key: str = api_key
        self.session: requests.Session = session or requests.Session()
        self.url: str = f"{base_url.rstrip('/')}{EMAILS_ENDPOINT}"
        self.timeout: float = timeout

    @classmethod
    def build_payload(cls, title: str, body: str) -> dict[str, Any]:
        """
        Draft email request body

        Args:
            title: Email subject
            body: Markdown body

        Returns:
            JSON-serialisable payload with draft status
        """
        return {
            "body": body,
            "subject": title,
            "status": cls.STATUS,
        }

    def publish(self, title: str, body: str) -> PublishOutcome:
        """
        Create a draft email

        Any transport error or non-2xx response is a failure; the detail
        goes to the log and into the returned PublishFailed.

        Args:
            title: Email subject
            body: Final markdown body

        Returns:
            Published or PublishFailed
        """
        headers: dict[str, str] = auth_headers(self.api_key)
        headers["Content-Type"] = "application/json"

        try:
            response: requests.Response = self.session.post(
                self.url,
                headers=headers,
                json=self.build_payload(title, body),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Error sending draft: {e}")
            return PublishFailed(str(e))

        if not is_success(response):
            detail: str = f"HTTP {response.status_code}: {response.text}"
            logger.error(f"Error sending draft: {detail}")
            return PublishFailed(detail)

        logger.debug(f"Draft created: {title}")
        return Published()
