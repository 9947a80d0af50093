"""
Batch normalization pipeline.

Adds normalization keys to a Polars DataFrame of URLs and collapses rows that
refer to the same resource.
"""

import logging
from typing import Optional

import polars as pl

from urlnorm.normalization import URLNormalizer, get_normalization_id

logger = logging.getLogger(__name__)

NORMALIZATION_COLUMN = "normalization"
NORMALIZATION_ID_COLUMN = "normalization_id"


class DedupProcessor:
    """
    Normalize and deduplicate URL batches.

    Output schema of :meth:`process_batch` is the input schema plus:
        - normalization: String (normalization string)
        - normalization_id: Int64 (xxh3_64 of the normalization string)
    """

    def __init__(self, normalizer: Optional[URLNormalizer] = None):
        """
        Initialize processor.

        Args:
            normalizer: URL normalizer instance (default rules if None)
        """
        self.normalizer = normalizer or URLNormalizer()

    def process_batch(self, df: pl.DataFrame, column: str = "url") -> pl.DataFrame:
        """
        Compute normalization keys for a batch of URLs.

        Rows with an empty URL or one that fails to parse are dropped.

        Args:
            df: Input Polars DataFrame
            column: Name of the URL column

        Returns:
            DataFrame with normalization columns appended

        Raises:
            ValueError: If the URL column is missing
        """
        if column not in df.columns:
            raise ValueError(f"Column '{column}' not found in DataFrame")

        normalizations: list[Optional[str]] = []
        ids: list[Optional[int]] = []
        failures = 0

        for raw_url in df[column]:
            if raw_url is None or raw_url == "":
                normalizations.append(None)
                ids.append(None)
                continue

            try:
                if not isinstance(raw_url, str):
                    raise ValueError(f"expected a string, got {type(raw_url).__name__}")
                normalization = self.normalizer.compute_normalization_string(raw_url)
            except ValueError as e:
                logger.warning(f"Failed to normalize URL '{raw_url}': {e}")
                failures += 1
                normalizations.append(None)
                ids.append(None)
                continue

            normalizations.append(normalization)
            ids.append(get_normalization_id(normalization))

        result_df = df.with_columns(
            pl.Series(NORMALIZATION_COLUMN, normalizations, dtype=pl.Utf8),
            pl.Series(NORMALIZATION_ID_COLUMN, ids, dtype=pl.Int64),
        ).filter(pl.col(NORMALIZATION_ID_COLUMN).is_not_null())

        logger.info(
            f"Normalized {len(result_df)} of {len(df)} URLs ({failures} failed to parse)"
        )
        return result_df

    def deduplicate(self, df: pl.DataFrame, column: str = "url") -> pl.DataFrame:
        """
        Keep the first row for each normalized URL, preserving input order.

        Args:
            df: Input Polars DataFrame
            column: Name of the URL column

        Returns:
            Processed DataFrame without normalized duplicates
        """
        processed = self.process_batch(df, column)
        result_df = processed.unique(
            subset=[NORMALIZATION_ID_COLUMN], keep="first", maintain_order=True
        )
        logger.info(f"Removed {len(processed) - len(result_df)} duplicate URLs")
        return result_df

    def group_duplicates(self, df: pl.DataFrame, column: str = "url") -> pl.DataFrame:
        """
        Group URLs that normalize to the same key.

        Returns:
            DataFrame with one row per normalization shared by more than one
            URL: normalization, normalization_id, urls (list), count
        """
        processed = self.process_batch(df, column)
        return (
            processed.group_by(NORMALIZATION_COLUMN, maintain_order=True)
            .agg(
                pl.col(NORMALIZATION_ID_COLUMN).first(),
                pl.col(column).alias("urls"),
                pl.len().alias("count"),
            )
            .filter(pl.col("count") > 1)
        )
