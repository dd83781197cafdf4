"""Image host client for the ImgBB upload API."""

import base64
from typing import Optional

import requests

from .errors import ServiceError, classify_http_error
from .logger import StructuredLogger, get_logger

IMGBB_UPLOAD_ENDPOINT = "https://api.imgbb.com/1/upload"


class ImgbbImageHost:
    """Re-host image bytes on ImgBB and return the public URL."""

    def __init__(
        self,
        api_key: str,
        endpoint: str = IMGBB_UPLOAD_ENDPOINT,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.api_key = api_key
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logger or get_logger()

    @classmethod
    def from_config(cls, config, **kwargs) -> "ImgbbImageHost":
        return cls(api_key=config.imgbb_api_key, **kwargs)

    def upload(self, content: bytes, name: str = "logo") -> str:
        """
        Upload image bytes as base64 form data.

        Args:
            content: Raw image bytes
            name: Name stored alongside the image

        Returns:
            Hosted URL of the uploaded image

        Raises:
            RateLimitedError: ImgBB answered 429
            ServiceError: Any other failure, including a reply without a URL
        """
        payload = {
            "key": self.api_key,
            "image": base64.b64encode(content).decode("ascii"),
            "name": name or "logo",
        }
        self.logger.record_service_call("imgbb")
        try:
            resp = self.session.post(self.endpoint, data=payload, timeout=self.timeout)
            resp.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise classify_http_error(e, "imgbb") from e
        try:
            body = resp.json()
        except ValueError as e:
            raise ServiceError(f"imgbb returned invalid JSON: {e}", service="imgbb") from e

        url = (body.get("data") or {}).get("url") if isinstance(body, dict) else None
        if not url:
            raise ServiceError("imgbb response did not include an image URL", service="imgbb")
        return url
