"""
URL equivalence by token stream.

A URL is reduced to an ordered sequence of tokens:
- host, with www./m./mobile.-style prefixes stripped repeatedly
- non-empty path segments, with a file-extension-like suffix trimmed from
  the last one
- query key/value pairs, tracking parameters removed, sorted
- hash-bang (#!) and slash-hash-slash (/#/) fragment routes

Two URLs are the same iff their token sequences are equal.
"""

import re
from dataclasses import dataclass, field
from itertools import zip_longest
from typing import Iterator, Optional, Union

from .ids import get_normalization_id
from .options import Options
from .parsed_url import URLLike, parse_url
from .tokens import CompareToken

NORMALIZATION_SEPARATOR = ":"

URLInput = Union[str, URLLike]


@dataclass(frozen=True)
class URLNormalizer:
    """
    Compiled, immutable URL normalizer.

    Holds no mutable state, so one instance can be shared between threads.

    Usage:
        normalizer = URLNormalizer()
        normalizer.are_same("http://www.example.com", "https://example.com")  # True
        normalizer.compute_normalization_string(
            "https://m.example.com/a/b.html?utm_source=x&q=1"
        )  # 'example.com:a:b:q:1:'

    Raises:
        PatternCompileError: If the options' patterns do not compile
    """

    options: Options = field(default_factory=Options.default)
    _ignored_query_params: re.Pattern = field(init=False, repr=False, compare=False)
    _trimmed_host_prefixes: re.Pattern = field(init=False, repr=False, compare=False)
    _trimmed_path_extension_suffixes: re.Pattern = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self):
        ignored, prefixes, suffixes = self.options.compile_matchers()
        object.__setattr__(self, "_ignored_query_params", ignored)
        object.__setattr__(self, "_trimmed_host_prefixes", prefixes)
        object.__setattr__(self, "_trimmed_path_extension_suffixes", suffixes)

    @property
    def path_extension_length(self) -> int:
        return self.options.path_extension_length

    def normalize_host(self, url: URLInput) -> Optional[str]:
        """
        Return the host with all leading trimmed prefixes removed.

        ``m.m.www.example.com`` becomes ``example.com``; ``test.www.example.com``
        is left alone because prefixes are only stripped from the front.

        Args:
            url: Parsed URL or URL text

        Returns:
            Normalized host, or None if the URL has no host
        """
        host = _as_parsed(url).host
        if host is None:
            return None

        while True:
            match = self._trimmed_host_prefixes.match(host)
            if match is None or match.end() == 0:
                break
            host = host[match.end() :]
        return host

    def token_stream(self, url: URLInput) -> Iterator[CompareToken]:
        """
        Generate the comparison tokens of a URL, in order.

        The order is part of the comparison: host, path segments, sorted query
        pairs (key then value), fragment route. Empty tokens are skipped.

        Args:
            url: Parsed URL or URL text

        Returns:
            Lazy iterator over non-empty tokens
        """
        parsed = _as_parsed(url)
        for token in self._raw_tokens(parsed):
            if token:
                yield CompareToken(token)

    def _raw_tokens(self, url: URLLike) -> Iterator[str]:
        yield self.normalize_host(url) or ""
        yield from self._path_tokens(url.path_segments)
        yield from self._query_tokens(url.query)

        fragment = url.fragment or ""
        if fragment.startswith("!"):
            # #!-style fragment routes
            yield fragment[1:]
        elif url.path.endswith("/") and fragment.startswith("/"):
            # /#/-style fragment routes
            yield fragment[1:]

    def _path_tokens(self, segments: Optional[tuple[str, ...]]) -> Iterator[str]:
        if segments is None:
            return
        segments = [segment for segment in segments if segment]
        if not segments:
            return

        yield from segments[:-1]

        # Remove anything that looks like a trailing file type (.html, etc)
        last = segments[-1]
        stem, dot, suffix = last.rpartition(".")
        if (
            dot
            and len(suffix) <= self.path_extension_length
            and self._trimmed_path_extension_suffixes.search(suffix)
        ):
            yield stem
        else:
            yield last

    def _query_tokens(self, query: Optional[str]) -> Iterator[str]:
        if query is None:
            return

        pairs = []
        for piece in query.split("&"):
            key, _, value = piece.partition("=")
            if not self._ignored_query_params.fullmatch(key):
                pairs.append((key, value))

        for key, value in sorted(pairs):
            yield key
            yield value

    def tokens(self, url: URLInput) -> list[CompareToken]:
        """Materialize the token stream of a URL."""
        return list(self.token_stream(url))

    def are_same(self, a: URLInput, b: URLInput) -> bool:
        """
        Are these two URLs considered the same?

        Compares the token sequences element by element, so token boundaries
        are significant (unlike comparing normalization strings).
        """
        missing = object()
        return all(
            x == y
            for x, y in zip_longest(
                self.token_stream(a), self.token_stream(b), fillvalue=missing
            )
        )

    def compute_normalization_string(self, url: URLInput) -> str:
        """
        Compute a normalization string that can be persisted for later comparison.

        Every token is followed by ``:``. Separators inside tokens are not
        escaped, so the string is an opaque key, not a reversible encoding.
        """
        return "".join(
            token + NORMALIZATION_SEPARATOR for token in self.token_stream(url)
        )

    def compute_normalization_id(self, url: URLInput) -> int:
        """Compute the signed 64-bit hash of the URL's normalization string."""
        return get_normalization_id(self.compute_normalization_string(url))

    @classmethod
    def from_options(cls, options: Options) -> "URLNormalizer":
        return cls(options)

    @classmethod
    def from_config(cls, config=None) -> "URLNormalizer":
        """Build a normalizer from NormalizerConfig (global config if None)."""
        from urlnorm.config import get_config

        config = config or get_config()
        return cls(config.to_options())


def _as_parsed(url: URLInput) -> URLLike:
    if isinstance(url, str):
        return parse_url(url)
    return url
