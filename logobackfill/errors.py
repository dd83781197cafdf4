"""
Error taxonomy for the logo backfill job.

Per-record failures are caught by the runner and counted; only
FatalListingError (and ConfigError at startup) end the process.
"""

from typing import Optional

import requests


class BackfillError(Exception):
    """Base class for all backfill errors."""
    pass


class ConfigError(BackfillError):
    """Missing or invalid process configuration."""
    pass


class FatalListingError(BackfillError):
    """Listing records from the store failed; the run cannot continue."""
    pass


class ContentValidationError(BackfillError):
    """The logo lookup answered with something that is not an image."""
    pass


class ServiceError(BackfillError):
    """Transport or API failure talking to an external service."""

    def __init__(self, message: str, service: str = "", status: Optional[int] = None):
        super().__init__(message)
        self.service = service
        self.status = status


class LogoNotFoundError(ServiceError):
    """The logo lookup has no image for this domain (HTTP 404)."""
    pass


class RateLimitedError(ServiceError):
    """An external service answered HTTP 429."""
    pass


def response_status(exc: Exception) -> Optional[int]:
    """Return the HTTP status attached to a requests exception, if any."""
    response = getattr(exc, "response", None)
    if response is None:
        return None
    return getattr(response, "status_code", None)


def classify_http_error(exc: Exception, service: str) -> ServiceError:
    """
    Map a requests exception onto the backfill taxonomy.

    Args:
        exc: Exception raised by requests (or raise_for_status)
        service: Service name used in messages ('logo', 'imgbb', 'airtable')

    Returns:
        LogoNotFoundError for a 404 from the logo lookup, RateLimitedError
        for a 429 from any service, ServiceError otherwise
    """
    status = response_status(exc)
    if status == 404 and service == "logo":
        return LogoNotFoundError(f"No logo found (404): {exc}", service=service, status=404)
    if status == 429:
        return RateLimitedError(f"{service} rate limited (429)", service=service, status=429)
    if isinstance(exc, requests.exceptions.Timeout):
        return ServiceError(f"{service} request timed out", service=service)
    if status is not None:
        return ServiceError(f"{service} request failed ({status}): {exc}", service=service, status=status)
    return ServiceError(f"{service} request error: {exc}", service=service)
