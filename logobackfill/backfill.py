"""
Logo backfill job.

Walks every record of the directory table and, for records with a
website but no logo, fetches a logo from the public lookup, re-hosts it
and writes the hosted URL back to the record. Records are handled one at
a time; a failing record never stops the run.
"""

import time
from dataclasses import dataclass, field, asdict
from typing import Any, Callable, Dict, List, Optional, Protocol

import requests

from .config import BackfillConfig
from .domain import Record, derive_key, is_eligible, logo_attachment
from .errors import BackfillError, LogoNotFoundError, RateLimitedError, classify_http_error
from .logger import StructuredLogger, get_logger
from .logos import LogoImage

SUCCEEDED = "succeeded"
FAILED = "failed"
SKIPPED = "skipped"
ELIGIBLE = "eligible"  # dry runs only


class RecordStore(Protocol):
    def list_records(self, view: Optional[str] = None) -> List[Record]: ...

    def update_record(self, record_id: str, fields: Dict[str, Any]) -> Record: ...


class LogoLookup(Protocol):
    def fetch(self, key: str) -> LogoImage: ...


class ImageHost(Protocol):
    def upload(self, content: bytes, name: str = "logo") -> str: ...


@dataclass
class RecordOutcome:
    record_id: str
    status: str
    key: str = ""
    hosted_url: Optional[str] = None
    error: Optional[str] = None
    rate_limited: bool = False


@dataclass
class RunSummary:
    total: int = 0
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    outcomes: List[RecordOutcome] = field(default_factory=list)

    def as_dict(self) -> Dict[str, int]:
        data = asdict(self)
        data.pop("outcomes")
        return data


class BackfillJob:
    """Sequential logo backfill over one listing of the record store."""

    def __init__(
        self,
        config: BackfillConfig,
        store: RecordStore,
        lookup: LogoLookup,
        host: ImageHost,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[StructuredLogger] = None,
    ):
        self.config = config
        self.store = store
        self.lookup = lookup
        self.host = host
        self.sleep = sleep
        self.logger = logger or get_logger()

    def list_records(self) -> List[Record]:
        """List every record in the configured view. Errors are fatal."""
        return self.store.list_records(self.config.view)

    def fetch_candidate_image(self, key: str) -> LogoImage:
        return self.lookup.fetch(key)

    def rehost_image(self, content: bytes, name: str) -> str:
        return self.host.upload(content, name or "logo")

    def write_back(self, record_id: str, hosted_url: str) -> Record:
        return self.store.update_record(record_id, logo_attachment(hosted_url))

    def run_once(self, limit: Optional[int] = None, dry_run: bool = False) -> RunSummary:
        """
        Run the backfill once over the full listing.

        Args:
            limit: Process at most this many eligible records
            dry_run: Count eligible records without fetching or writing

        Returns:
            RunSummary with per-record outcomes

        Raises:
            FatalListingError: If the records cannot be listed
        """
        self.logger.info("Starting logo update process", view=self.config.view, dry_run=dry_run)
        records = self.list_records()
        self.logger.info(f"Found {len(records)} total records")

        summary = RunSummary(total=len(records))
        seen = set()
        deferred = 0

        for record in records:
            if record.id in seen or not is_eligible(record):
                seen.add(record.id)
                summary.skipped += 1
                summary.outcomes.append(RecordOutcome(record_id=record.id, status=SKIPPED))
                self.logger.record_skip()
                continue
            seen.add(record.id)

            if limit is not None and summary.processed >= limit:
                deferred += 1
                continue

            summary.processed += 1
            key = derive_key(record.website)

            if dry_run:
                self.logger.info(f"[{summary.processed}] Would process: {key or record.website}")
                summary.outcomes.append(RecordOutcome(record_id=record.id, status=ELIGIBLE, key=key))
                continue

            outcome = self._process(record, key, summary.processed)
            summary.outcomes.append(outcome)
            if outcome.status == SUCCEEDED:
                summary.succeeded += 1
            else:
                summary.failed += 1

            self.sleep(self.config.request_delay)
            if outcome.rate_limited:
                self.logger.warning(
                    f"Rate limited. Waiting {self.config.rate_limit_backoff:g} seconds..."
                )
                self.sleep(self.config.rate_limit_backoff)

        if deferred:
            self.logger.info(f"Left {deferred} eligible records unprocessed (limit={limit})")
        self._log_summary(summary)
        return summary

    def _process(self, record: Record, key: str, position: int) -> RecordOutcome:
        """Fetch, re-host and write back one record's logo."""
        self.logger.record_attempt()
        self.logger.info(f"[{position}] Processing: {key}", record_id=record.id)
        try:
            image = self.fetch_candidate_image(key)
            hosted_url = self.rehost_image(image.content, key)
            self.logger.info("Uploaded to image host", record_id=record.id, url=hosted_url)
            self.write_back(record.id, hosted_url)
            self.logger.info("Updated record", record_id=record.id)
        except requests.exceptions.RequestException as e:
            return self._failure(record, key, classify_http_error(e, "external"))
        except Exception as e:
            return self._failure(record, key, e)

        self.logger.record_success()
        return RecordOutcome(record_id=record.id, status=SUCCEEDED, key=key, hosted_url=hosted_url)

    def _failure(self, record: Record, key: str, error: Exception) -> RecordOutcome:
        self.logger.record_failure(type(error).__name__)
        if isinstance(error, LogoNotFoundError):
            self.logger.info("No logo available for this domain", record_id=record.id, key=key)
        elif isinstance(error, BackfillError):
            self.logger.error(f"Error: {error}", record_id=record.id, key=key)
        else:
            self.logger.error(f"Unexpected error: {error}", record_id=record.id, key=key)
        return RecordOutcome(
            record_id=record.id,
            status=FAILED,
            key=key,
            error=str(error),
            rate_limited=isinstance(error, RateLimitedError),
        )

    def _log_summary(self, summary: RunSummary):
        self.logger.info("Logo update process complete!")
        self.logger.info(f"Total records: {summary.total}")
        self.logger.info(f"Skipped (has logo or no website): {summary.skipped}")
        self.logger.info(f"Successfully updated: {summary.succeeded}")
        self.logger.info(f"Failed: {summary.failed}")
