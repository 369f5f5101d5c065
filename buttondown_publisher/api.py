"""Shared Buttondown API constants and helpers."""

import requests

API_BASE_URL: str = "https://api.buttondown.email"
IMAGES_ENDPOINT: str = "/v1/images"
EMAILS_ENDPOINT: str = "/v1/emails"
REQUEST_TIMEOUT: float = 30.0


def auth_headers(api_key: str) -> dict[str, str]:
    """
    Authorization header for the Buttondown API

    Args:
        api_key: Buttondown API key

    Returns:
        Header dictionary using the Token scheme
    """
    return {"Authorization": f"Token {api_key}"}


def is_success(response: requests.Response) -> bool:
    """
    Check for a 2xx status

    Args:
        response: HTTP response

    Returns:
        True if the status code is in the 200 range
    """
    return 200 <= response.status_code < 300
