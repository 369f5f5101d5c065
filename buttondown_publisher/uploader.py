"""
Image uploader

Sends image bytes to the Buttondown image endpoint and turns the
response into an UploadOutcome. Failures never raise: they are logged
here and returned as outcome values so the pipeline can move on to the
next reference. No request is ever retried.
"""

import requests
from loguru import logger

from .api import API_BASE_URL, IMAGES_ENDPOINT, REQUEST_TIMEOUT, auth_headers, is_success
from .models import AuthFailure, HttpFailure, NetworkFailure, UploadOutcome, UploadSuccess


class ImageUploader:
    """
    Client for POST /v1/images

    The request is a multipart form with a single `image` field; the
    hosted URL comes back in the `image` field of the JSON response.
    """

    def __init__(
        self,
        api_key: str,
        session: requests.Session | None = None,
        base_url: str = API_BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
    ):
        """
        Initialize uploader

        Args:
            api_key: Buttondown API key
            session: HTTP session to reuse (a new one is created if omitted)
            base_url: API root, without trailing slash
            timeout: Request timeout in seconds
        """
        self.api_key: str = api_key
        self.session: requests.Session = session or requests.Session()
        self.url: str = f"{base_url.rstrip('/')}{IMAGES_ENDPOINT}"
        self.timeout: float = timeout

    def upload(self, data: bytes, file_name: str, mime_type: str) -> UploadOutcome:
        """
        Upload one image

        Args:
            data: Image bytes
            file_name: File name sent with the form field
            mime_type: Content type of the image

        Returns:
            UploadSuccess with the hosted URL, or the matching failure
        """
        try:
            response: requests.Response = self.session.post(
                self.url,
                headers=auth_headers(self.api_key),
                files={"image": (file_name, data, mime_type)},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Error uploading image {file_name}: {e}")
            return NetworkFailure(str(e))

        if response.status_code == 403:
            logger.error(f"Image upload failed with 403 for {file_name}")
            return AuthFailure()

        if not is_success(response):
            logger.error(f"Image upload failed for {file_name}: {response.status_code} {response.text}")
            return HttpFailure(response.status_code, response.text)

        try:
            url = response.json().get("image")
        except (ValueError, AttributeError):
            url = None

        if not isinstance(url, str) or not url:
            logger.error(f"Image upload for {file_name} returned no image URL: {response.text}")
            return HttpFailure(response.status_code, "response contained no image URL")

        logger.debug(f"Uploaded {file_name} -> {url}")
        return UploadSuccess(url)
