"""
Process configuration for the backfill job.

Everything the job needs from the environment is collected into a
BackfillConfig once at startup and passed in explicitly.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigError

DEFAULT_VIEW = "Grid view"
DEFAULT_LOGO_LOOKUP_URL = "https://logo.clearbit.com/{domain}"
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

REQUIRED_ENV_VARS = {
    "airtable_api_key": "AIRTABLE_API_KEY",
    "airtable_base_id": "AIRTABLE_BASE_ID",
    "airtable_table_name": "AIRTABLE_TABLE_NAME",
    "imgbb_api_key": "IMGBB_API_KEY",
}


@dataclass(frozen=True)
class BackfillConfig:
    airtable_api_key: str
    airtable_base_id: str
    airtable_table_name: str
    imgbb_api_key: str
    view: str = DEFAULT_VIEW
    logo_lookup_url: str = DEFAULT_LOGO_LOOKUP_URL
    logo_timeout: float = 10.0
    request_delay: float = 0.2
    rate_limit_backoff: float = 5.0
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "BackfillConfig":
        """
        Build a config from environment variables.

        Args:
            environ: Mapping to read from (default: os.environ)
            **overrides: Field values that win over the environment

        Raises:
            ConfigError: If any required variable is missing or blank
        """
        env = os.environ if environ is None else environ

        values = {}
        missing = []
        for field_name, var in REQUIRED_ENV_VARS.items():
            value = (env.get(var) or "").strip()
            if not value:
                missing.append(var)
            values[field_name] = value
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

        view = (env.get("BACKFILL_VIEW") or "").strip()
        if view:
            values["view"] = view

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
