"""Unit tests for URL normalization."""

import dataclasses
import itertools
from concurrent.futures import ThreadPoolExecutor

import pytest

from urlnorm.normalization import CompareToken, Options, URLNormalizer, parse_url


@pytest.fixture
def normalizer():
    """Create a URLNormalizer with default rules."""
    return URLNormalizer()


class TestHostNormalization:
    """Test suite for URLNormalizer.normalize_host."""

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("http://www.example.com", "example.com"),
            ("http://m.www.example.com", "example.com"),
            ("http://www1.example.com", "example.com"),
            ("http://ww1.example.com", "example.com"),
            ("http://test.www.example.com", "test.www.example.com"),
            ("http://www-03.example.com", "example.com"),
            ("http://m.example.com", "example.com"),
            ("http://m.m.m.m.m.example.com", "example.com"),
            ("http://mobile.example.com", "example.com"),
            # Negative cases
            ("http://bwwwww.example.com", "bwwwww.example.com"),
            ("http://www-refresh.example.com", "www-refresh.example.com"),
            ("http://mobile1.example.com", "mobile1.example.com"),
        ],
    )
    def test_host_normalization(self, normalizer, url, expected):
        """Test leading www/mobile prefixes are stripped."""
        assert normalizer.normalize_host(parse_url(url)) == expected

    def test_accepts_url_text(self, normalizer):
        """Test URL strings are parsed on the fly."""
        assert normalizer.normalize_host("https://www.example.com/path") == "example.com"

    def test_no_host(self, normalizer):
        """Test URLs without a host return None."""
        assert normalizer.normalize_host("mailto:someone@example.com") is None

    @pytest.mark.parametrize(
        "url",
        [
            "http://www.www.example.com",
            "http://m.mobile.www-1.example.com",
            "http://example.com",
            "http://1.2.3.4",
        ],
    )
    def test_idempotent(self, normalizer, url):
        """Test normalizing an already-normalized host changes nothing."""
        host = normalizer.normalize_host(url)
        assert normalizer.normalize_host(f"http://{host}") == host


class TestTokenStream:
    """Test suite for URLNormalizer.token_stream."""

    def test_token_order(self, normalizer):
        """Test host, path, sorted query and fragment route order."""
        tokens = normalizer.tokens(
            "https://www.example.com/a/b.html?z=1&utm_source=x&a=2#!route/1"
        )
        assert tokens == ["example.com", "a", "b", "a", "2", "z", "1", "route/1"]
        assert all(isinstance(token, CompareToken) for token in tokens)

    def test_lazy_iterator(self, normalizer):
        """Test token_stream returns an iterator that recomputes per call."""
        url = parse_url("https://example.com/a")
        stream = normalizer.token_stream(url)
        assert next(stream) == "example.com"
        assert list(normalizer.token_stream(url)) == ["example.com", "a"]

    def test_empty_tokens_dropped(self, normalizer):
        """Test empty host, segments, values and fragments contribute nothing."""
        assert normalizer.tokens("https://example.com/?a=&=&#!") == ["example.com", "a"]

    @pytest.mark.parametrize(
        "path", ["/foo", "/foo/", "//foo", "/foo//", "/./foo"]
    )
    def test_trailing_slash_invariance(self, normalizer, path):
        """Test trailing and repeated slashes do not matter."""
        assert normalizer.tokens(f"https://example.com{path}") == ["example.com", "foo"]

    def test_only_last_segment_trimmed(self, normalizer):
        """Test extensions are only trimmed from the final segment."""
        assert normalizer.tokens("https://example.com/a.html/b.php5") == [
            "example.com",
            "a.html",
            "b",
        ]

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/foo.html", "foo"),
            ("/foo.htm", "foo"),
            ("/foo.php5", "foo"),
            ("/foo.js", "foo"),
            ("/foo.tar.gz", "foo.tar"),
            # Not extensions
            ("/1405.0126", "1405.0126"),
            ("/bmj.j5855", "bmj.j5855"),
            ("/foo.html55", "foo.html55"),
            ("/foo.longextension", "foo.longextension"),
            ("/foo.", "foo."),
        ],
    )
    def test_extension_trimming(self, normalizer, path, expected):
        """Test extension-like suffixes are trimmed from the last segment."""
        assert normalizer.tokens(f"https://example.com{path}") == ["example.com", expected]

    def test_extension_length_boundary(self):
        """Test suffixes exactly at the length bound are trimmed, longer ones not."""
        normalizer = Options.default().with_path_extension_length(4).compile()
        assert normalizer.tokens("https://example.com/a.abcd") == ["example.com", "a"]
        assert normalizer.tokens("https://example.com/a.abcde") == [
            "example.com",
            "a.abcde",
        ]

    def test_dotfile_segment_dropped(self, normalizer):
        """Test a last segment that is only an extension leaves no token."""
        assert normalizer.tokens("https://example.com/dir/.html") == ["example.com", "dir"]

    def test_query_pairs_sorted(self, normalizer):
        """Test duplicate keys are kept and sorted by key then value."""
        assert normalizer.tokens("https://example.com/?b=2&a=3&a=1") == [
            "example.com",
            "a",
            "1",
            "a",
            "3",
            "b",
            "2",
        ]

    def test_query_split_on_first_equals(self, normalizer):
        """Test only the first '=' separates key from value."""
        assert normalizer.tokens("https://example.com/?q=a=b") == ["example.com", "q", "a=b"]

    def test_query_permutations(self, normalizer):
        """Test every ordering of query pairs yields the same tokens."""
        pairs = ["a=1", "b=2", "c", "utm_medium=feed", "a=0"]
        expected = normalizer.tokens("https://example.com/?" + "&".join(pairs))
        for permutation in itertools.permutations(pairs):
            url = "https://example.com/?" + "&".join(permutation)
            assert normalizer.tokens(url) == expected

    @pytest.mark.parametrize(
        "key",
        [
            "utm_source",
            "utm_campaign",
            "gclid",
            "fbclid",
            "_ga",
            "msclkid",
            "mc_eid",
            "WT.mc_id",
            "wt.mc_ev",
            "__hstc",
        ],
    )
    def test_tracking_params_dropped(self, normalizer, key):
        """Test default tracking parameters are dropped with their value."""
        assert normalizer.tokens(f"https://example.com/?{key}=x&id=1") == [
            "example.com",
            "id",
            "1",
        ]

    @pytest.mark.parametrize("key", ["xfbclid", "utm_source2", "__Hstc", "wt.mc_idx"])
    def test_ignored_params_match_whole_key(self, normalizer, key):
        """Test ignored parameter patterns must match the entire key."""
        assert key in normalizer.tokens(f"https://example.com/?{key}=x")

    def test_hashbang_fragment(self, normalizer):
        """Test #! fragments are kept without the '!'."""
        assert normalizer.tokens("https://example.com/app#!/inbox") == [
            "example.com",
            "app",
            "/inbox",
        ]

    def test_slash_hash_slash_fragment(self, normalizer):
        """Test /#/ fragments are kept when the path ends with '/'."""
        assert normalizer.tokens("https://example.com/app/#/intro") == [
            "example.com",
            "app",
            "intro",
        ]
        assert normalizer.tokens("https://example.com#/intro") == ["example.com", "intro"]

    def test_slash_fragment_without_trailing_slash(self, normalizer):
        """Test /-fragments are dropped when the path has no trailing slash."""
        assert normalizer.tokens("https://example.com/app#/intro") == ["example.com", "app"]

    def test_anchor_fragment_dropped(self, normalizer):
        """Test plain anchors are not part of the identity."""
        assert normalizer.tokens("https://example.com/page#section-2") == [
            "example.com",
            "page",
        ]

    def test_non_hierarchical_url(self, normalizer):
        """Test URLs without host or path segments yield no tokens."""
        assert normalizer.tokens("mailto:someone@example.com") == []
        assert normalizer.tokens("mailto:someone@example.com?subject=hi") == [
            "subject",
            "hi",
        ]


class TestAreSame:
    """Test suite for URLNormalizer.are_same."""

    @pytest.mark.parametrize(
        "url",
        [
            "http://x.com",
            "http://1.2.3.4",
            "http://google.com/path/?query",
            "http://google.com/path/?query=bar",
            "http://facebook.com/path/?fbclid=bar&somequery=ok",
        ],
    )
    def test_identical(self, normalizer, url):
        """Test a URL is the same as itself."""
        assert normalizer.are_same(url, url)

    @pytest.mark.parametrize(
        "a,b",
        [
            # http/https
            ("http://google.com", "https://google.com"),
            ("http://www.example.com", "https://example.com"),
            # Escaped period
            ("http://google%2ecom", "https://google.com"),
            # www.
            ("https://www.google.com", "https://google.com"),
            # .html
            ("https://www.google.com/foo.html", "https://www.google.com/foo"),
            # Empty query/fragment/path
            ("https://www.google.com/?#", "https://www.google.com"),
            # Trailing/multiple slashes
            ("https://www.google.com/", "https://www.google.com"),
            ("https://www.google.com/foo", "https://www.google.com/foo/"),
            ("https://www.google.com//foo", "https://www.google.com/foo"),
            # Ignored query params
            ("http://x.com?utm_source=foo", "http://x.com"),
            ("http://x.com?fbclid=foo&gclid=bar", "http://x.com"),
            ("http://x.com?fbclid=foo", "http://x.com?fbclid=basdf"),
            (
                "http://archinte.jamanetwork.com/article.aspx?articleid=1898878"
                "&__hstc=9292970.6d480b0896ec071bae4c3d40c40ec7d5.1407456000124"
                ".1407456000125.1407456000126.1&__hssc=9292970.1.1407456000127"
                "&__hsfp=1314462730",
                "http://archinte.jamanetwork.com/article.aspx?articleid=1898878",
            ),
            # Query order
            ("http://x.com/?a=1&b=2", "http://x.com/?b=2&a=1"),
            # Ignored fragments
            ("http://x.com", "http://x.com#something"),
        ],
    )
    def test_same(self, normalizer, a, b):
        """Test URLs that normalize together."""
        assert normalizer.compute_normalization_string(
            a
        ) == normalizer.compute_normalization_string(b)
        assert normalizer.are_same(a, b)
        assert normalizer.are_same(b, a)

    @pytest.mark.parametrize(
        "a,b",
        [
            ("http://1.2.3.4", "http://1.2.3.5"),
            ("https://test.www.google.com", "https://test.www1.google.com"),
            ("https://google.com", "https://facebook.com"),
            ("https://google.com/abc", "https://google.com/def"),
            ("https://google.com/?page=1", "https://google.com/?page=2"),
            ("https://google.com/?page=%31", "https://google.com/?page=%32"),
            ("https://amazon.com/product/ref=a", "https://amazon.com/product/ref=b"),
            # Slightly modified query string param
            ("http://x.com?xfbclid=foo", "http://x.com?xfbclid=basdf"),
            # Examples of real URLs that should not be normalized together
            ("http://arxiv.org/abs/1405.0126", "http://arxiv.org/abs/1405.0351"),
            (
                "http://www.bmj.com/content/360/bmj.j5855",
                "http://www.bmj.com/content/360/bmj.k322",
            ),
            (
                "https://www.google.com/contributor/welcome/#/intro",
                "https://www.google.com/contributor/welcome/#/about",
            ),
            (
                "https://groups.google.com/forum/#!topic/mailing.postfix.users/6Kkel3J_nv4",
                "https://groups.google.com/forum/#!topic/erlang-programming/nFWfmwK64RU",
            ),
            ("https://groups.google.com/forum/#!topic/a/1", "https://groups.google.com/forum/#!topic/b/2"),
        ],
    )
    def test_different(self, normalizer, a, b):
        """Test URLs that must stay distinct."""
        assert normalizer.compute_normalization_string(
            a
        ) != normalizer.compute_normalization_string(b)
        assert not normalizer.are_same(a, b)
        assert not normalizer.are_same(b, a)

    def test_different_lengths(self, normalizer):
        """Test a token stream that is a prefix of another is not the same."""
        assert not normalizer.are_same("https://example.com/a", "https://example.com/a/b")
        assert not normalizer.are_same("https://example.com/a/b", "https://example.com/a")

    def test_token_boundaries_significant(self, normalizer):
        """Test separators inside tokens cannot produce a false match."""
        a = "http://x.com/a:b"
        b = "http://x.com/a/b"
        # The joined string is ambiguous, the token comparison is not
        assert normalizer.compute_normalization_string(
            a
        ) == normalizer.compute_normalization_string(b)
        assert not normalizer.are_same(a, b)

    def test_accepts_parsed_urls(self, normalizer):
        """Test ParsedURL objects and strings can be mixed."""
        assert normalizer.are_same(parse_url("https://www.example.com/a/"), "http://example.com/a")

    @pytest.mark.parametrize(
        "a,b",
        [
            ("http://x.com/?q=café", "http://x.com/?q=caf%C3%A9"),
            ("http://x.com/a b", "http://x.com/a%20b"),
            ("http://x.com/café/", "http://x.com/caf%C3%A9"),
            ("http://x.com/app/#/ñ", "http://x.com/app/#/%C3%B1"),
        ],
    )
    def test_escaped_and_unescaped_input(self, normalizer, a, b):
        """Test typed and percent-encoded forms of a URL are the same."""
        assert normalizer.are_same(a, b)
        assert normalizer.compute_normalization_string(
            a
        ) == normalizer.compute_normalization_string(b)

    def test_non_ascii_suffix_counted_encoded(self, normalizer):
        """Test a non-ASCII suffix is measured in its encoded form."""
        assert normalizer.tokens("http://x.com/v.ñab") == ["x.com", "v.%C3%B1ab"]


class TestNormalizationString:
    """Test suite for compute_normalization_string."""

    def test_format(self, normalizer):
        """Test each token is followed by a ':' separator."""
        result = normalizer.compute_normalization_string(
            "https://m.example.com/a/b.html?utm_source=x&q=1"
        )
        assert result == "example.com:a:b:q:1:"

    def test_no_tokens(self, normalizer):
        """Test a URL without tokens yields an empty string."""
        assert normalizer.compute_normalization_string("mailto:someone@example.com") == ""

    def test_long_url(self, normalizer):
        """Test a real-world feed URL with tracking parameters."""
        url = (
            "http://content.usatoday.com/communities/sciencefair/post/2011/07/"
            "invasion-of-the-viking-women-unearthed/1?csp=34tech&utm_source=feedburner"
            "&utm_medium=feed&utm_campaign=Feed:+usatoday-TechTopStories+%28Tech+-+Top"
            "+Stories%29&siteID=je6NUbpObpQ-K0N7ZWh0LJjcLzI4zsnGxg#.VAcNjWOna51"
        )
        assert normalizer.compute_normalization_string(url) == (
            "content.usatoday.com:communities:sciencefair:post:2011:07:"
            "invasion-of-the-viking-women-unearthed:1:csp:34tech:"
            "siteID:je6NUbpObpQ-K0N7ZWh0LJjcLzI4zsnGxg:"
        )

    def test_normalization_id(self, normalizer):
        """Test normalization ids agree for equivalent URLs."""
        a = normalizer.compute_normalization_id("http://www.example.com/a.html")
        b = normalizer.compute_normalization_id("https://example.com/a")
        c = normalizer.compute_normalization_id("https://example.com/b")
        assert a == b
        assert a != c
        assert -(2**63) <= a < 2**63


class TestURLNormalizer:
    """Test construction and sharing of normalizers."""

    def test_immutability(self, normalizer):
        """Test URLNormalizer is immutable (frozen)."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            normalizer.options = Options()

    def test_default_matches_options(self):
        """Test the default constructor uses the default rule set."""
        assert URLNormalizer() == Options.default().compile()
        assert URLNormalizer.from_options(Options.default()) == URLNormalizer()

    def test_concurrent_use(self, normalizer):
        """Test one normalizer can be shared between threads."""
        urls = [
            f"https://www.example{i % 7}.com/p/{i % 5}.html?b={i}&utm_source=x&a={i % 3}"
            for i in range(500)
        ]
        expected = [normalizer.compute_normalization_string(url) for url in urls]

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(normalizer.compute_normalization_string, urls))

        assert results == expected
