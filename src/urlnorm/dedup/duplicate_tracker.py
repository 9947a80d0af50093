"""Utilities for tracking seen URLs and filtering normalized duplicates."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Optional

from urlnorm.normalization import URLNormalizer
from urlnorm.normalization.url_normalizer import URLInput

logger = logging.getLogger(__name__)


class DuplicateTracker:
    """Track which normalized URLs have been seen, in memory."""

    def __init__(self, normalizer: Optional[URLNormalizer] = None) -> None:
        self.normalizer = normalizer or URLNormalizer()
        self._seen: set[int] = set()

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, url: URLInput) -> bool:
        return self.is_duplicate(url)

    def is_duplicate(self, url: URLInput) -> bool:
        """Return True if a URL normalizing to the same key was already recorded."""

        return self.normalizer.compute_normalization_id(url) in self._seen

    def add(self, url: URLInput) -> bool:
        """Record a URL; return True if it was not seen before."""

        key = self.normalizer.compute_normalization_id(url)
        if key in self._seen:
            return False
        self._seen.add(key)
        return True

    def record_batch(self, urls: Iterable[URLInput]) -> int:
        """Record URLs, returning how many were new."""

        new_count = 0
        for url in urls:
            if self.add(url):
                new_count += 1
        return new_count

    def filter_new(self, urls: Iterable[URLInput]) -> Iterator[URLInput]:
        """Yield each URL whose normalization has not been seen yet, recording it."""

        for url in urls:
            if self.add(url):
                yield url
            else:
                logger.debug("Dropping duplicate URL: %s", url)

    def reset(self) -> None:
        """Forget all recorded URLs."""

        self._seen.clear()


def deduplicate_urls(
    urls: Iterable[str], normalizer: Optional[URLNormalizer] = None
) -> list[str]:
    """
    Remove URLs that normalize to an already-seen URL.

    Keeps the first occurrence of each normalized URL, in input order.

    Raises:
        ValueError: If a URL cannot be parsed
    """
    urls = list(urls)
    unique = list(DuplicateTracker(normalizer).filter_new(urls))
    logger.info("Removed %d duplicate URLs out of %d", len(urls) - len(unique), len(urls))
    return unique
