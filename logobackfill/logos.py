"""Public logo lookup (Clearbit-style GET /{domain})."""

from dataclasses import dataclass
from typing import Optional

import requests

from .config import DEFAULT_LOGO_LOOKUP_URL, DEFAULT_USER_AGENT
from .errors import ContentValidationError, classify_http_error
from .logger import StructuredLogger, get_logger


@dataclass
class LogoImage:
    content: bytes
    content_type: str


class ClearbitLogoLookup:
    """Fetch a candidate logo image for a domain key."""

    def __init__(
        self,
        url_template: str = DEFAULT_LOGO_LOOKUP_URL,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.url_template = url_template
        self.timeout = timeout
        self.user_agent = user_agent
        self.session = session or requests.Session()
        self.logger = logger or get_logger()

    @classmethod
    def from_config(cls, config, **kwargs) -> "ClearbitLogoLookup":
        return cls(
            url_template=config.logo_lookup_url,
            timeout=config.logo_timeout,
            user_agent=config.user_agent,
            **kwargs,
        )

    def logo_url(self, key: str) -> str:
        return self.url_template.format(domain=key)

    def fetch(self, key: str) -> LogoImage:
        """
        Download the logo for key and check that it is an image.

        An empty key is requested as-is and is expected to fail.

        Raises:
            LogoNotFoundError: The service has no logo (404)
            RateLimitedError: The service answered 429
            ContentValidationError: The response is not declared as an image
            ServiceError: Any other HTTP or transport error
        """
        url = self.logo_url(key)
        self.logger.record_service_call("logo")
        try:
            resp = self.session.get(
                url,
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
            )
            resp.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise classify_http_error(e, "logo") from e

        content_type = resp.headers.get("Content-Type", "")
        if "image" not in content_type.lower():
            raise ContentValidationError(
                f"Response is not an image (content-type: {content_type or 'missing'})"
            )
        return LogoImage(content=resp.content, content_type=content_type)
