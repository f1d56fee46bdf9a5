"""Unit tests for cache keys."""

from unveil.cache import cache_id, normalize_url


class TestNormalizeUrl:
    """Tests for normalize_url."""

    def test_scheme_and_www_dropped(self) -> None:
        """Test that scheme and a leading www do not split entries."""
        assert normalize_url("https://www.example.com/a?b=1") == "example.com/a?b=1"
        assert normalize_url("http://example.com/a?b=1") == "example.com/a?b=1"

    def test_scheme_case_ignored(self) -> None:
        """Test that an upper-case scheme is dropped like a lower-case one."""
        assert normalize_url("HTTPS://example.com/a") == "example.com/a"
        assert normalize_url("Http://www.example.com/a") == "example.com/a"

    def test_rest_kept(self) -> None:
        """Test that host casing, path and fragment are preserved."""
        assert normalize_url("https://News.Example.com/A#top") == "News.Example.com/A#top"

    def test_inner_www_kept(self) -> None:
        """Test that only a leading www is removed."""
        assert normalize_url("https://cdn.www.example.com/") == "cdn.www.example.com/"


class TestCacheId:
    """Tests for cache_id."""

    def test_variants_share_key(self) -> None:
        """Test that URL variants map to one key."""
        assert cache_id("https://www.example.com/a") == cache_id("http://example.com/a")

    def test_distinct_urls_distinct_keys(self) -> None:
        """Test that different paths give different keys."""
        assert cache_id("https://example.com/a") != cache_id("https://example.com/b")

    def test_sha256_hex(self) -> None:
        """Test the key format."""
        key = cache_id("https://example.com/")

        assert len(key) == 64
        assert all(c in "0123456789abcdef" for c in key)

    def test_scheme_case_shares_key(self) -> None:
        """Test that scheme casing does not split entries."""
        assert cache_id("HTTPS://example.com/a") == cache_id("https://example.com/a")
