"""
urlnorm: decide whether two URLs refer to the same resource.
"""

from .config import NormalizerConfig, get_config, reset_config
from .dedup import DedupProcessor, DuplicateTracker, deduplicate_urls
from .normalization import (
    CompareToken,
    EscapedCompareToken,
    Options,
    ParsedURL,
    PatternCompileError,
    URLNormalizer,
    default_options,
    parse_url,
)

__version__ = "0.1.0"

__all__ = [
    "URLNormalizer",
    "Options",
    "PatternCompileError",
    "default_options",
    "ParsedURL",
    "parse_url",
    "CompareToken",
    "EscapedCompareToken",
    "DuplicateTracker",
    "DedupProcessor",
    "deduplicate_urls",
    "NormalizerConfig",
    "get_config",
    "reset_config",
]
