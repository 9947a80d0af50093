"""
Normalization throughput benchmark.

Measures compute_normalization_string on a long feed URL with tracking
parameters, and batch deduplication through Polars.

Usage:
    python examples/benchmark.py
    python examples/benchmark.py --iterations 500000 --batch-size 200000
"""

import argparse
import logging
import sys
import time
from pathlib import Path

import polars as pl

# Add src to path for direct execution
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from urlnorm import DedupProcessor, URLNormalizer, get_config, parse_url

SAMPLE_URL = (
    "http://content.usatoday.com/communities/sciencefair/post/2011/07/"
    "invasion-of-the-viking-women-unearthed/1?csp=34tech&utm_source=feedburner"
    "&utm_medium=feed&utm_campaign=Feed:+usatoday-TechTopStories+%28Tech+-+Top"
    "+Stories%29&siteID=je6NUbpObpQ-K0N7ZWh0LJjcLzI4zsnGxg#.VAcNjWOna51"
)


def bench_single(normalizer: URLNormalizer, iterations: int) -> None:
    """Time normalization of one URL, pre-parsed and from text."""
    parsed = parse_url(SAMPLE_URL)

    start = time.perf_counter()
    for _ in range(iterations):
        normalizer.compute_normalization_string(parsed)
    elapsed = time.perf_counter() - start
    print(f"normalize parsed url: {elapsed / iterations * 1e6:.2f} us/op")

    start = time.perf_counter()
    for _ in range(iterations):
        normalizer.compute_normalization_string(SAMPLE_URL)
    elapsed = time.perf_counter() - start
    print(f"parse + normalize:    {elapsed / iterations * 1e6:.2f} us/op")


def bench_batch(normalizer: URLNormalizer, batch_size: int) -> None:
    """Time deduplication of a synthetic batch with many equivalent URLs."""
    urls = [
        f"https://{'www.' if i % 2 else ''}example{i % 1000}.com/post/{i % 5000}.html"
        f"?utm_source=feed&id={i % 5000}"
        for i in range(batch_size)
    ]
    df = pl.DataFrame({"url": urls})

    start = time.perf_counter()
    result = DedupProcessor(normalizer).deduplicate(df)
    elapsed = time.perf_counter() - start
    print(
        f"deduplicate {batch_size} urls -> {len(result)} unique in {elapsed:.2f}s "
        f"({batch_size / elapsed:,.0f} urls/s)"
    )


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--iterations", type=int, default=100_000)
    parser.add_argument("--batch-size", type=int, default=100_000)
    args = parser.parse_args()

    logging.basicConfig(
        level=get_config().log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    normalizer = URLNormalizer.from_config()
    print(f"Normalization: {normalizer.compute_normalization_string(SAMPLE_URL)}")
    bench_single(normalizer, args.iterations)
    bench_batch(normalizer, args.batch_size)


if __name__ == "__main__":
    main()
