"""Logo backfill for the product directory table."""

__version__ = "0.1.0"
