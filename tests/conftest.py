"""
Pytest configuration and shared fixtures.
"""

import json
from typing import Any, Dict, List, Optional

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from logobackfill.config import BackfillConfig
from logobackfill.domain import Record
from logobackfill.errors import FatalListingError
from logobackfill.logger import StructuredLogger
from logobackfill.logos import LogoImage


def make_response(
    status: int = 200,
    content: bytes = b"",
    headers: Optional[Dict[str, str]] = None,
    json_body: Any = None,
    url: str = "https://example.test/",
) -> requests.Response:
    """Build a real requests.Response without touching the network."""
    resp = requests.Response()
    resp.status_code = status
    resp.url = url
    resp.encoding = "utf-8"
    if json_body is not None:
        content = json.dumps(json_body).encode("utf-8")
        resp.headers["Content-Type"] = "application/json"
    resp._content = content
    resp.headers.update(headers or {})
    return resp


class StubSession:
    """Stands in for requests.Session; replays queued responses or exceptions."""

    def __init__(self, *replies):
        self.headers = CaseInsensitiveDict()
        self.replies = list(replies)
        self.calls: List[Dict[str, Any]] = []

    def _next(self, method: str, url: str, **kwargs):
        call = {"method": method, "url": url}
        for k, v in kwargs.items():
            call[k] = dict(v) if isinstance(v, dict) else v
        self.calls.append(call)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)

    def patch(self, url, **kwargs):
        return self._next("PATCH", url, **kwargs)


class FakeStore:
    """In-memory record store that remembers every update."""

    def __init__(self, records: List[Record], fail_listing: bool = False, update_error: Exception = None):
        self.records = records
        self.fail_listing = fail_listing
        self.update_error = update_error
        self.updates: List[tuple] = []
        self.views: List[Optional[str]] = []

    def list_records(self, view=None):
        self.views.append(view)
        if self.fail_listing:
            raise FatalListingError("Airtable listing failed: boom")
        return list(self.records)

    def update_record(self, record_id, fields):
        if self.update_error is not None:
            raise self.update_error
        self.updates.append((record_id, fields))
        return Record(id=record_id, fields=dict(fields))


class FakeLookup:
    """Logo lookup keyed by domain; values are bytes or an exception to raise."""

    def __init__(self, results: Optional[Dict[str, Any]] = None, default: Any = b"\x89PNG"):
        self.results = results or {}
        self.default = default
        self.keys: List[str] = []

    def fetch(self, key):
        self.keys.append(key)
        result = self.results.get(key, self.default)
        if isinstance(result, Exception):
            raise result
        return LogoImage(content=result, content_type="image/png")


class FakeHost:
    def __init__(self, error: Exception = None):
        self.error = error
        self.uploads: List[tuple] = []

    def upload(self, content, name="logo"):
        if self.error is not None:
            raise self.error
        self.uploads.append((content, name))
        return f"https://i.ibb.co/{name}.png"


@pytest.fixture
def logger(tmp_path) -> StructuredLogger:
    """Quiet logger writing into the test's temp dir."""
    return StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)


@pytest.fixture
def config() -> BackfillConfig:
    return BackfillConfig(
        airtable_api_key="key-airtable",
        airtable_base_id="appBase",
        airtable_table_name="Products",
        imgbb_api_key="key-imgbb",
    )


@pytest.fixture
def sleeps() -> List[float]:
    return []


@pytest.fixture
def sleep(sleeps):
    """Records requested delays instead of waiting."""
    return sleeps.append


@pytest.fixture
def sample_records() -> List[Record]:
    """A: no website, B: website with logo, C: eligible."""
    return [
        Record(id="recA", fields={"Name": "No site"}),
        Record(id="recB", fields={
            "Website": "https://www.dentrix.com",
            "Logo": [{"url": "https://i.ibb.co/existing.png"}],
        }),
        Record(id="recC", fields={"Website": "https://www.Open-Dental.com/about", "Logo": []}),
    ]
