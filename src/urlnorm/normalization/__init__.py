"""
URL normalization.

Compiles a rule set into a normalizer that reduces URLs to comparable
token streams.
"""

from .ids import get_key_prefix, get_normalization_id
from .options import (
    DEFAULT_EXTENSION_SUFFIX,
    DEFAULT_HOST_PREFIX,
    DEFAULT_IGNORED_QUERY_PARAMS,
    DEFAULT_PATH_EXTENSION_LENGTH,
    Options,
    PatternCompileError,
    default_options,
)
from .parsed_url import ParsedURL, URLLike, parse_url
from .tokens import CompareToken, EscapedCompareToken
from .url_normalizer import NORMALIZATION_SEPARATOR, URLNormalizer

__all__ = [
    "URLNormalizer",
    "Options",
    "PatternCompileError",
    "default_options",
    "DEFAULT_IGNORED_QUERY_PARAMS",
    "DEFAULT_HOST_PREFIX",
    "DEFAULT_EXTENSION_SUFFIX",
    "DEFAULT_PATH_EXTENSION_LENGTH",
    "NORMALIZATION_SEPARATOR",
    "ParsedURL",
    "URLLike",
    "parse_url",
    "CompareToken",
    "EscapedCompareToken",
    "get_normalization_id",
    "get_key_prefix",
]
