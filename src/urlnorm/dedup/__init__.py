"""
URL deduplication.

Applies the normalizer to collections of URLs: an in-memory tracker for
streams and a Polars pipeline for batches.
"""

from .duplicate_tracker import DuplicateTracker, deduplicate_urls
from .processor import DedupProcessor

__all__ = ["DuplicateTracker", "DedupProcessor", "deduplicate_urls"]
