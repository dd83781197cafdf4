"""Record store backed by the Airtable REST API."""

import time
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import requests

from .domain import Record
from .errors import FatalListingError, classify_http_error
from .logger import StructuredLogger, get_logger
from .retry import RetryError, exponential_backoff

AIRTABLE_API_ROOT = "https://api.airtable.com/v0"
PAGE_SIZE = 100


class AirtableRecordStore:
    """
    Lists and updates records of one Airtable table.

    Pagination is handled here: list_records follows the 'offset' cursor
    until Airtable stops returning one.
    """

    def __init__(
        self,
        api_key: str,
        base_id: str,
        table_name: str,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[StructuredLogger] = None,
    ):
        self.base_id = base_id
        self.table_name = table_name
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })
        self._sleep = sleep
        self.logger = logger or get_logger()

    @classmethod
    def from_config(cls, config, **kwargs) -> "AirtableRecordStore":
        return cls(
            api_key=config.airtable_api_key,
            base_id=config.airtable_base_id,
            table_name=config.airtable_table_name,
            **kwargs,
        )

    @property
    def table_url(self) -> str:
        return f"{AIRTABLE_API_ROOT}/{self.base_id}/{quote(self.table_name, safe='')}"

    def _get_page(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.logger.record_service_call("airtable")
        resp = self.session.get(self.table_url, params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def _on_retry(self, attempt: int, exc: Exception, delay: float):
        self.logger.warning(
            "Airtable listing request failed, retrying",
            attempt=attempt, delay=delay, error=str(exc),
        )

    def list_records(self, view: Optional[str] = None) -> List[Record]:
        """
        Fetch every record of the table, following pagination.

        Args:
            view: Optional view name restricting and ordering the records

        Returns:
            All records visible in the view

        Raises:
            FatalListingError: On any HTTP, transport or payload error
        """
        fetch_page = exponential_backoff(
            max_retries=2,
            base_delay=1.0,
            exceptions=(requests.exceptions.Timeout, requests.exceptions.ConnectionError),
            on_retry=self._on_retry,
            sleep=self._sleep,
        )(self._get_page)

        params: Dict[str, Any] = {"pageSize": PAGE_SIZE}
        if view:
            params["view"] = view

        records: List[Record] = []
        while True:
            try:
                data = fetch_page(params)
                if not isinstance(data, dict):
                    raise FatalListingError(f"Airtable returned an unexpected payload: {type(data).__name__}")
                records.extend(Record.from_api(item) for item in data.get("records", []))
            except RetryError as e:
                raise FatalListingError(f"Airtable listing failed: {e}") from e
            except requests.exceptions.RequestException as e:
                raise FatalListingError(f"Airtable listing failed: {classify_http_error(e, 'airtable')}") from e
            except (ValueError, KeyError, TypeError) as e:
                raise FatalListingError(f"Airtable returned an unexpected payload: {e}") from e

            offset = data.get("offset")
            if not offset:
                break
            params["offset"] = offset

        self.logger.debug("Listed Airtable records", count=len(records), view=view)
        return records

    def update_record(self, record_id: str, fields: Dict[str, Any]) -> Record:
        """
        Patch the given fields of one record; other fields are left alone.

        Raises:
            ServiceError: RateLimitedError on 429, ServiceError otherwise
        """
        self.logger.record_service_call("airtable")
        try:
            resp = self.session.patch(
                f"{self.table_url}/{record_id}",
                json={"fields": fields},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return Record.from_api(resp.json())
        except requests.exceptions.RequestException as e:
            raise classify_http_error(e, "airtable") from e
