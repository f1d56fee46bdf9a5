"""Unit tests for inline style cleanup."""

from bs4 import BeautifulSoup

from unveil.transform.styles import clean_declarations, clean_inline_styles


class TestCleanDeclarations:
    """Tests for clean_declarations."""

    def test_blocking_declarations_removed(self) -> None:
        """Test that clipping declarations are dropped and others kept."""
        result = clean_declarations("color: red; max-height: 100px; overflow: hidden;")

        assert result == "color: red;"

    def test_all_blocking_properties(self) -> None:
        """Test every property the cleanup targets."""
        style = (
            "height: 0; position: fixed; display: none; visibility: hidden; "
            "overflow-y: scroll;"
        )

        assert clean_declarations(style) == "overflow-y: scroll;"

    def test_suffix_properties_untouched(self) -> None:
        """Test that line-height is not mistaken for height."""
        assert clean_declarations("line-height: 1.4;") == "line-height: 1.4;"

    def test_case_insensitive(self) -> None:
        """Test that uppercase property names are matched."""
        assert clean_declarations("DISPLAY: NONE") == ""


class TestCleanInlineStyles:
    """Tests for clean_inline_styles."""

    def test_counts_changed_elements(self) -> None:
        """Test that only changed elements are counted."""
        soup = BeautifulSoup(
            '<div style="display: none">a</div>'
            '<div style="color: blue; height: 10px">b</div>'
            '<div style="color: green">c</div>',
            "lxml",
        )

        changed = clean_inline_styles(soup)

        divs = soup.find_all("div")
        assert changed == 2
        assert "style" not in divs[0].attrs
        assert divs[1]["style"] == "color: blue;"
        assert divs[2]["style"] == "color: green"
