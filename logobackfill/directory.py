"""Read-only product view of the directory table."""

import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlparse

from .domain import Record, first_logo_url

DEFAULT_CATEGORY = "Dental Technology"
DEFAULT_CATEGORIES = [
    "Practice Management",
    "Clinical Software",
    "Imaging & Diagnostics",
    "Patient Communication",
    "Billing & Insurance",
    "Marketing & Analytics",
    "Supplies & Equipment",
    "Laboratory Services",
]

_TLD_SUFFIX = re.compile(r"\.(com|io|co|net|org|ai|app|dev).*$")
_WORD_SPLIT = re.compile(r"[.-]")


def extract_company_name(url: Optional[str]) -> Optional[str]:
    """Turn a website URL into a display name, e.g. https://www.open-dental.com -> 'Open Dental'."""
    if not url:
        return None
    try:
        host = urlparse(url.strip()).hostname
    except ValueError:
        return None
    if not host:
        return None
    host = re.sub(r"^www\.", "", host)
    host = _TLD_SUFFIX.sub("", host)
    words = [w[:1].upper() + w[1:] for w in _WORD_SPLIT.split(host)]
    name = " ".join(words)
    return name or None


def _text(fields: Dict[str, Any], name: str) -> str:
    value = fields.get(name)
    return value if isinstance(value, str) else ""


def to_product(record: Record) -> Dict[str, Any]:
    fields = record.fields
    name = extract_company_name(record.website)
    return {
        "id": record.id,
        "name": name,
        "manufacturer": name,
        "category": fields.get("Category") or DEFAULT_CATEGORY,
        "basic_description": f"Professional dental solutions from {name}",
        "detailed_description": (
            f"{name} provides innovative dental technology and services "
            "to enhance patient care and practice efficiency."
        ),
        "website": record.website,
        "email": _text(fields, "Email"),
        "phone": _text(fields, "Phone"),
        "address": _text(fields, "Address"),
        "rating": fields.get("Rating"),
        "logo": first_logo_url(record),
        "image": f"https://via.placeholder.com/400x320?text={quote(name or '')}",
    }


def list_products(store, view: Optional[str] = None) -> List[Dict[str, Any]]:
    """Products for every record with a website a company name can be derived from."""
    return [
        to_product(record)
        for record in store.list_records(view)
        if record.website and extract_company_name(record.website)
    ]


def list_categories(store, view: Optional[str] = None) -> List[str]:
    """'all' followed by the categories in use, or the defaults when none are set."""
    categories = ["all"]
    for record in store.list_records(view):
        category = record.fields.get("Category")
        if category and category not in categories:
            categories.append(category)
    if len(categories) == 1:
        categories.extend(DEFAULT_CATEGORIES)
    return categories
