"""
Normalization rule set.

Holds the three pattern lists (ignored query parameters, trimmed host
prefixes, trimmed path-extension suffixes) and the extension length bound,
and compiles them into the matchers used by URLNormalizer.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from .url_normalizer import URLNormalizer

logger = logging.getLogger(__name__)

# Query parameters that carry tracking/attribution data only.
DEFAULT_IGNORED_QUERY_PARAMS: tuple[str, ...] = (
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_term",
    "utm_content",
    "utm_expid",
    "gclid",
    "_ga",
    "_gl",
    "msclkid",
    "fbclid",
    "mc_cid",
    "mc_eid",
    r"[Ww][Tt]\.mc_(id|ev)",
    r"__[a-z]+",
)

# www, ww, www1, www-03, m, mobile, m-abc ... followed by a dot.
DEFAULT_HOST_PREFIX = r"(www?[0-9]*|m|mobile)(-[a-z0-9]{1,3})?\."

# .html, .htm, .php5, .js; at most one trailing digit.
DEFAULT_EXTENSION_SUFFIX = r"[a-zA-Z]+[0-9]?$"

DEFAULT_PATH_EXTENSION_LENGTH = 6

# Compiled in place of an empty pattern list.
_NEVER_MATCHES = r"(?!)"


class PatternCompileError(ValueError):
    """Raised when a configured pattern list is not a valid regular expression."""

    def __init__(self, option: str, pattern: str, error: re.error):
        self.option = option
        self.pattern = pattern
        self.error = error
        super().__init__(f"Invalid pattern for '{option}' ({pattern!r}): {error}")


class Options(BaseModel):
    """
    Normalization rule set.

    Values are immutable: every ``with_*`` method returns a new Options with
    one field replaced. Patterns are only validated by :meth:`compile`.

    Usage:
        normalizer = (
            Options.default()
            .with_ignored_query_params(["utm_.*", "ref"])
            .with_path_extension_length(4)
            .compile()
        )
    """

    model_config = ConfigDict(frozen=True)

    ignored_query_params: tuple[str, ...] = Field(
        default=(), description="Query keys (whole-key regex) dropped with their value"
    )
    trimmed_host_prefixes: tuple[str, ...] = Field(
        default=(), description="Host prefixes stripped repeatedly from the start"
    )
    trimmed_path_extension_suffixes: tuple[str, ...] = Field(
        default=(), description="Extension patterns trimmed from the last path segment"
    )
    path_extension_length: int = Field(
        default=0, ge=0, description="Maximum length of a trimmed extension"
    )

    @classmethod
    def default(cls) -> Options:
        """Build a fresh rule set holding the default patterns."""
        return cls(
            ignored_query_params=DEFAULT_IGNORED_QUERY_PARAMS,
            trimmed_host_prefixes=(DEFAULT_HOST_PREFIX,),
            trimmed_path_extension_suffixes=(DEFAULT_EXTENSION_SUFFIX,),
            path_extension_length=DEFAULT_PATH_EXTENSION_LENGTH,
        )

    def _replace(self, **changes) -> Options:
        # Re-validate rather than model_copy(update=...), which skips validation
        return type(self)(**{**self.model_dump(), **changes})

    def with_ignored_query_params(self, patterns: Iterable[str]) -> Options:
        return self._replace(ignored_query_params=tuple(patterns))

    def with_trimmed_host_prefixes(self, patterns: Iterable[str]) -> Options:
        return self._replace(trimmed_host_prefixes=tuple(patterns))

    def with_trimmed_path_extension_suffixes(self, patterns: Iterable[str]) -> Options:
        return self._replace(trimmed_path_extension_suffixes=tuple(patterns))

    def with_path_extension_length(self, path_extension_length: int) -> Options:
        return self._replace(path_extension_length=path_extension_length)

    def compile_matchers(self) -> tuple[re.Pattern, re.Pattern, re.Pattern]:
        """
        Compile the three pattern lists.

        Each list is joined into one non-capturing alternation so that the
        anchoring applies to every alternative:

        - ignored query params: used with whole-string matching
        - host prefixes: anchored at the start of the host
        - extension suffixes: anchored at the end of the suffix

        Returns:
            (ignored_query_params, trimmed_host_prefixes,
            trimmed_path_extension_suffixes) compiled patterns

        Raises:
            PatternCompileError: If any list does not compile
        """
        matchers = (
            _compile("ignored_query_params", _alternation(self.ignored_query_params)),
            _compile("trimmed_host_prefixes", _alternation(self.trimmed_host_prefixes)),
            _compile(
                "trimmed_path_extension_suffixes",
                _alternation(self.trimmed_path_extension_suffixes) + r"\Z",
            ),
        )
        logger.debug(
            "Compiled normalization rules: %d ignored params, %d host prefixes, "
            "%d extension suffixes (max length %d)",
            len(self.ignored_query_params),
            len(self.trimmed_host_prefixes),
            len(self.trimmed_path_extension_suffixes),
            self.path_extension_length,
        )
        return matchers

    def compile(self) -> URLNormalizer:
        """
        Build an immutable normalizer from this rule set.

        Raises:
            PatternCompileError: If any pattern list does not compile
        """
        from .url_normalizer import URLNormalizer

        return URLNormalizer(self)


def default_options() -> Options:
    """Return a fresh default rule set."""
    return Options.default()


def _alternation(patterns: tuple[str, ...]) -> str:
    if not patterns:
        return _NEVER_MATCHES
    return "(?:" + "|".join(patterns) + ")"


def _compile(option: str, pattern: str) -> re.Pattern:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternCompileError(option, pattern, e) from e
