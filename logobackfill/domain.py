from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

WEBSITE_FIELD = "Website"
LOGO_FIELD = "Logo"


@dataclass
class Record:
    """One row of the directory table. Fields are passed through untouched."""

    id: str
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Record":
        return cls(id=data["id"], fields=dict(data.get("fields") or {}))

    @property
    def website(self) -> str:
        value = self.fields.get(WEBSITE_FIELD)
        return value if isinstance(value, str) else ""

    @property
    def logos(self) -> List[Dict[str, Any]]:
        value = self.fields.get(LOGO_FIELD)
        return value if isinstance(value, list) else []


def derive_key(url: str) -> str:
    """Return the lowercase host of url without a leading 'www.'.

    Returns "" when the URL cannot be parsed or has no host; "not a url"
    parses but has no scheme or host, so it yields "" as well.
    """
    try:
        host = urlparse(url.strip()).hostname
    except (ValueError, AttributeError):
        return ""
    if not host:
        return ""
    host = host.lower()
    return host[4:] if host.startswith("www.") else host


def is_eligible(record: Record) -> bool:
    """A record needs a logo when it has a website and no logo attachment."""
    return bool(record.website) and not record.logos


def logo_attachment(url: str) -> Dict[str, List[Dict[str, str]]]:
    """Write-back payload: the Logo field replaced by exactly one attachment."""
    return {LOGO_FIELD: [{"url": url}]}


def first_logo_url(record: Record) -> Optional[str]:
    for attachment in record.logos:
        if isinstance(attachment, dict) and attachment.get("url"):
            return attachment["url"]
    return None
