"""
Parsed URL input.

The normalizer consumes URLs that are already decomposed into host, path
segments, raw query and raw fragment. ``parse_url`` is a thin adapter over
``urllib.parse`` producing such objects from URL text; any object exposing the
same attributes (see ``URLLike``) can be passed instead.
"""

from dataclasses import dataclass
from typing import Optional, Protocol
from urllib.parse import quote, unquote, urlsplit

# Characters left as-is when percent-encoding each component; everything else
# (space, quotes, angle brackets, non-ASCII) is escaped as UTF-8. "%" is kept so
# existing escapes survive.
_PATH_SAFE = "/%!$&'()*+,;=:@[]\\^|"
_QUERY_SAFE = "/%!$&()*+,;=:@?[]\\^`{|}"
_FRAGMENT_SAFE = "/%!$&'()*+,;=:@?#[]\\^{|}"

# Stripped from both ends, like urlsplit does
_C0_CONTROL_OR_SPACE = "".join(chr(i) for i in range(0x21))


class URLLike(Protocol):
    """Attributes the normalizer reads from a parsed URL."""

    @property
    def host(self) -> Optional[str]: ...

    @property
    def path(self) -> str: ...

    @property
    def path_segments(self) -> Optional[tuple[str, ...]]: ...

    @property
    def query(self) -> Optional[str]: ...

    @property
    def fragment(self) -> Optional[str]: ...


@dataclass(frozen=True)
class ParsedURL:
    """
    Decomposed URL.

    Attributes:
        scheme: Lowercase scheme
        host: Lowercase, percent-decoded, punycode host (None without authority)
        path: Percent-encoded path with dot segments resolved
        path_segments: '/'-separated path segments, percent-encoded, not decoded
            (None for URLs without a hierarchical path, e.g. mailto:)
        query: Percent-encoded query string (None if the URL has no '?')
        fragment: Percent-encoded fragment (None if the URL has no '#')
        raw: Original URL text
    """

    scheme: str
    host: Optional[str]
    path: str
    path_segments: Optional[tuple[str, ...]]
    query: Optional[str]
    fragment: Optional[str]
    raw: str


def parse_url(url: str) -> ParsedURL:
    """
    Parse absolute URL text into a ParsedURL.

    Args:
        url: Raw URL string

    Returns:
        ParsedURL

    Raises:
        ValueError: If the URL is empty, relative, or cannot be parsed
    """
    if not url or not isinstance(url, str):
        raise ValueError(f"Invalid URL: {url!r}")

    # urlsplit drops tabs and newlines anywhere; do the same so offsets agree
    text = url.strip(_C0_CONTROL_OR_SPACE)
    for c in "\t\r\n":
        text = text.replace(c, "")

    try:
        parsed = urlsplit(text)
    except ValueError as e:
        raise ValueError(f"Failed to parse URL '{url}': {e}") from e

    if not parsed.scheme:
        raise ValueError(f"Relative URL without a base: '{url}'")

    # urlsplit reports "" for both a missing and an empty query/fragment
    before_fragment, has_fragment, _ = text.partition("#")
    query = quote(parsed.query, safe=_QUERY_SAFE) if "?" in before_fragment else None
    fragment = quote(parsed.fragment, safe=_FRAGMENT_SAFE) if has_fragment else None

    has_authority = before_fragment[len(parsed.scheme) + 1 :].startswith("//")
    path = parsed.path
    if has_authority or path.startswith("/"):
        path = _resolve_dot_segments(quote(path or "/", safe=_PATH_SAFE))
        path_segments: Optional[tuple[str, ...]] = tuple(path[1:].split("/"))
    else:
        path_segments = None

    return ParsedURL(
        scheme=parsed.scheme.lower(),
        host=_normalize_host(parsed.hostname),
        path=path,
        path_segments=path_segments,
        query=query,
        fragment=fragment,
        raw=url,
    )


def _normalize_host(host: Optional[str]) -> Optional[str]:
    """
    Normalize host: percent-decode, lowercase and convert to punycode if needed.

    Args:
        host: Hostname from urlsplit (already lowercase)

    Returns:
        Normalized host, or None if the URL has no host
    """
    if not host:
        return None

    host = unquote(host).lower()

    # Convert to punycode (idna encoding) if needed
    try:
        host = host.encode("idna").decode("ascii")
    except UnicodeError:
        # Already ASCII or not a valid IDN, keep as-is
        pass

    return host


def _resolve_dot_segments(path: str) -> str:
    """
    Resolve ``.`` and ``..`` segments of an absolute path.

    Empty segments are kept; the normalizer decides what to do with them.
    """
    segments = path.split("/")[1:]
    resolved: list[str] = []
    for segment in segments:
        if segment == ".":
            continue
        elif segment == "..":
            # Don't go above root
            if resolved:
                resolved.pop()
        else:
            resolved.append(segment)

    # A trailing dot segment addresses a directory
    if segments and segments[-1] in (".", ".."):
        resolved.append("")

    return "/" + "/".join(resolved)
