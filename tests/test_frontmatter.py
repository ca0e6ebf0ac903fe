"""Tests for frontmatter detection and parsing."""

import pytest

from notetemplate import frontmatter
from notetemplate.exceptions import FrontmatterParseError

SIMPLE = "---\ntitle: Test\nname: Mike\n---\nHello World"


class TestDetection:
    """Test frontmatter block detection."""

    def test_is_frontmatter_template(self) -> None:
        """Test a template with a complete block."""
        assert frontmatter.is_frontmatter_template(SIMPLE)

    def test_requires_closing_delimiter(self) -> None:
        """Test that an unclosed block is not frontmatter."""
        assert not frontmatter.is_frontmatter_template("---\ntitle: Test\nbody")

    def test_requires_opening_on_first_line(self) -> None:
        """Test that the block must start on the first line."""
        assert not frontmatter.is_frontmatter_template("intro\n---\ntitle: x\n---\n")

    def test_horizontal_rule_in_body_is_not_frontmatter(self) -> None:
        """Test that a rule in the body is not mistaken for a block."""
        assert not frontmatter.is_frontmatter_template("Text\n\n---\n\nMore")

    def test_get_frontmatter_text(self) -> None:
        """Test that the block text includes both delimiters."""
        assert frontmatter.get_frontmatter_text(SIMPLE) == "---\ntitle: Test\nname: Mike\n---\n"

    def test_get_frontmatter_text_without_block(self) -> None:
        """Test that text without a block gives an empty string."""
        assert frontmatter.get_frontmatter_text("plain") == ""


class TestBody:
    """Test body extraction."""

    def test_body(self) -> None:
        """Test that the block is removed from the body."""
        assert frontmatter.body(SIMPLE) == "Hello World"

    def test_body_without_frontmatter(self) -> None:
        """Test that text without a block is returned whole."""
        assert frontmatter.body("no block here") == "no block here"

    @pytest.mark.parametrize(
        "text",
        [
            SIMPLE,
            "---\n---\n",
            "---\ntitle: x\n---",
            "---\r\ntitle: x\r\n---\r\nbody\r\n",
            "no frontmatter\n---\n",
            "",
        ],
    )
    def test_round_trip(self, text: str) -> None:
        """Test that block text and body put back together give the input."""
        assert frontmatter.get_frontmatter_text(text) + frontmatter.body(text) == text


class TestAttributes:
    """Test lenient attribute parsing."""

    def test_simple_attributes(self) -> None:
        """Test plain key/value pairs."""
        assert frontmatter.attributes(SIMPLE) == {"title": "Test", "name": "Mike"}

    def test_order_is_preserved(self) -> None:
        """Test that keys keep their document order."""
        text = "---\nzeta: 1\nalpha: 2\nmid: 3\n---\n"
        assert list(frontmatter.attributes(text)) == ["zeta", "alpha", "mid"]

    def test_sequences_and_nested_maps(self) -> None:
        """Test block and flow sequences and nested mappings."""
        text = (
            "---\n"
            "tags: [work, review]\n"
            "people:\n"
            "  - Ada\n"
            "  - Grace\n"
            "project:\n"
            "  name: Apollo\n"
            "  phase: 2\n"
            "---\n"
        )

        attributes = frontmatter.attributes(text)

        assert attributes["tags"] == ["work", "review"]
        assert attributes["people"] == ["Ada", "Grace"]
        assert attributes["project"] == {"name": "Apollo", "phase": "2"}

    def test_scalars_are_strings_booleans_kept(self) -> None:
        """Test scalar normalisation."""
        text = "---\ncount: 3\ndone: true\nempty:\n---\n"

        assert frontmatter.attributes(text) == {"count": "3", "done": True, "empty": ""}

    def test_values_needing_quotes(self) -> None:
        """Test values that only parse once quoted."""
        text = (
            "---\n"
            "tag: #project\n"
            "person: @ada\n"
            "heading: Agenda: Monday\n"
            "prompt: Ends with:\n"
            "created: <%= date.now() %>\n"
            "---\n"
        )

        assert frontmatter.attributes(text) == {
            "tag": "#project",
            "person": "@ada",
            "heading": "Agenda: Monday",
            "prompt": "Ends with:",
            "created": "<%= date.now() %>",
        }

    def test_illegal_keys_are_skipped(self) -> None:
        """Test that keys which are not identifiers are dropped."""
        text = "---\n'1bad': x\n'has space': y\ngood: z\n---\n"
        assert frontmatter.attributes(text) == {"good": "z"}

    def test_only_illegal_keys(self) -> None:
        """Test a block with nothing usable."""
        assert frontmatter.attributes("---\n'2fast': yes\n---\n") == {}

    def test_empty_block(self) -> None:
        """Test an empty block."""
        assert frontmatter.attributes("---\n---\nbody") == {}

    def test_no_block(self) -> None:
        """Test text without a block."""
        assert frontmatter.attributes("just text") == {}

    def test_malformed_returns_empty(self) -> None:
        """Test that malformed YAML gives no attributes."""
        assert frontmatter.attributes("---\ntitle: [unclosed\n---\n") == {}


class TestParseAttributes:
    """Test strict attribute parsing."""

    def test_raises_on_malformed_yaml(self) -> None:
        """Test that malformed YAML raises."""
        with pytest.raises(FrontmatterParseError):
            frontmatter.parse_attributes("---\ntitle: [unclosed\n---\n")

    def test_missing_comma_in_flow_collection(self) -> None:
        """Test the hint for a missing comma in a flow collection."""
        text = "---\ntags: [\"one\" \"two\"]\n---\n"

        with pytest.raises(FrontmatterParseError) as exc_info:
            frontmatter.parse_attributes(text)

        assert "wrapped in quotes" in str(exc_info.value)
        assert exc_info.value.line_number == 2

    def test_non_mapping_raises(self) -> None:
        """Test that a top-level sequence raises."""
        with pytest.raises(FrontmatterParseError):
            frontmatter.parse_attributes("---\n- one\n- two\n---\n")
