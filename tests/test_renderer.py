"""Tests for template translation and rendering."""

import pytest

from notetemplate.errors import RenderErrorKind
from notetemplate.renderer import (
    CODE_BLOCKS_NAME,
    TemplateRenderer,
    clean_output,
    translate,
)


@pytest.fixture()
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


class TestTranslate:
    """Test conversion of template bodies into Jinja source."""

    def test_raw_output_tag(self) -> None:
        """Test that `<%- %>` becomes a safe output tag."""
        assert translate("<%- name %>").source == "<%= ( name )|safe %>"

    def test_raw_output_keeps_trim_marker(self) -> None:
        """Test that a trailing trim marker survives the rewrite."""
        assert translate("<%- name -%>").source == "<%= ( name )|safe -%>"

    def test_slurp_markers(self) -> None:
        """Test that `<%_` and `_%>` become Jinja trim markers."""
        assert translate("<%_ if x _%>").source == "<%- if x -%>"

    def test_smart_quotes_inside_tags(self) -> None:
        """Test that smart quotes are straightened only inside tags."""
        assert translate("“<%= “a” %>”").source == "“<%= \"a\" %>”"

    def test_code_blocks_are_replaced_by_placeholders(self) -> None:
        """Test that protected blocks are lifted out of the source."""
        body = "a\n```\n<%- x %>\n```\nb"

        translated = translate(body)

        assert translated.code_blocks == ["```\n<%- x %>\n```"]
        assert "<%- x %>" not in translated.source
        assert f"<%= {CODE_BLOCKS_NAME}[0]|safe %>" in translated.source

    def test_only_ignored_code_blocks(self) -> None:
        """Test that only marked blocks are lifted out in `ignored` mode."""
        body = "```\n<%= x %>\n```\n```\ntemplate: ignore\n<%= y %>\n```"

        translated = translate(body, "ignored")

        assert translated.source.startswith("```\n<%= x %>\n```")
        assert translated.code_blocks == ["```\ntemplate: ignore\n<%= y %>\n```"]

    def test_no_protection(self) -> None:
        """Test that nothing is lifted out when protection is off."""
        translated = translate("```\n<%= x %>\n```", "none")

        assert translated.source == "```\n<%= x %>\n```"
        assert translated.code_blocks == []

    def test_line_count_is_preserved(self) -> None:
        """Test that translation keeps every line where it was."""
        body = "one\n<%- a %>\n```\ncode\n```\n<%_ b _%>\nlast"
        assert translate(body).source.count("\n") == body.count("\n")


class TestRender:
    """Test successful renders."""

    async def test_plain_text_fast_path(self, renderer: TemplateRenderer) -> None:
        """Test that text without tags is returned as is."""
        result = await renderer.render("no tags {{ here }}", {})

        assert result.ok
        assert result.text == "no tags {{ here }}"

    async def test_output_tags(self, renderer: TemplateRenderer) -> None:
        """Test escaped and raw output tags."""
        result = await renderer.render(
            "<%= a %> and <%- b %>", {}, {"a": "<i>", "b": "<b>bold</b>"}
        )

        assert result.text == "&lt;i&gt; and <b>bold</b>"

    async def test_statements(self, renderer: TemplateRenderer) -> None:
        """Test loops and conditionals."""
        body = "<% for item in items %><%= item %>,<% endfor %><% if done %> done<% endif %>"

        result = await renderer.render(body, {}, {"items": ["a", "b"], "done": True})

        assert result.text == "a,b, done"

    async def test_comments_are_dropped(self, renderer: TemplateRenderer) -> None:
        """Test that comment tags produce no output."""
        result = await renderer.render("a<%# hidden %>b", {})
        assert result.text == "ab"

    async def test_trim_marker(self, renderer: TemplateRenderer) -> None:
        """Test that `-%>` removes the following newline."""
        result = await renderer.render("<% set x = 1 -%>\nvalue", {})
        assert result.text == "value"

    async def test_none_renders_empty(self, renderer: TemplateRenderer) -> None:
        """Test that None values render as nothing."""
        result = await renderer.render("[<%= nothing %>]", {}, {"nothing": None})
        assert result.text == "[]"

    async def test_local_vars_override_helpers(self, renderer: TemplateRenderer) -> None:
        """Test that caller variables shadow helpers."""
        result = await renderer.render("<%= name %>", {"name": "helper"}, {"name": "local"})
        assert result.text == "local"

    async def test_async_helpers_are_awaited(self, renderer: TemplateRenderer) -> None:
        """Test that coroutine helpers are awaited while rendering."""

        async def fetch(value):
            return value.upper()

        result = await renderer.render("<%= fetch('hi') %>", {"fetch": fetch})

        assert result.text == "HI"

    async def test_code_block_passed_through(self, renderer: TemplateRenderer) -> None:
        """Test that tags inside a code block are emitted verbatim."""
        body = "<%= 1 + 1 %>\n```\n<%= not_rendered %>\n```"

        result = await renderer.render(body, {})

        assert result.text == "2\n```\n<%= not_rendered %>\n```"

    async def test_code_block_with_jinja_block_tags(self, renderer: TemplateRenderer) -> None:
        """Test that Jinja block syntax inside a code block is not parsed."""
        body = "x <%= 1 %>\n```\nuse <% endraw %> in jinja\n<% raw %>{{ x }}\n```"

        result = await renderer.render(body, {})

        assert result.ok
        assert result.text == "x 1\n```\nuse <% endraw %> in jinja\n<% raw %>{{ x }}\n```"

    async def test_code_block_contents_are_not_escaped(
        self, renderer: TemplateRenderer
    ) -> None:
        """Test that markup inside a code block is kept as written."""
        result = await renderer.render("<%= 'a' %>\n```\n<b>&</b>\n```", {})
        assert result.text == "a\n```\n<b>&</b>\n```"

    async def test_trailing_newline_kept(self, renderer: TemplateRenderer) -> None:
        """Test that a trailing newline survives rendering."""
        result = await renderer.render("<%= 'x' %>\n", {})
        assert result.text == "x\n"


class TestRenderErrors:
    """Test conversion of template failures into render errors."""

    async def test_undefined_name(self, renderer: TemplateRenderer) -> None:
        """Test that an undefined name reports its line and context."""
        body = "first\nsecond\n<%= missing %>\nfourth"

        result = await renderer.render(body, {})

        assert not result.ok
        assert result.error.kind == RenderErrorKind.RENDER_RUNTIME_ERROR
        assert result.error.line_number == 3
        assert "missing" in result.error.description
        assert " >> 3| <%= missing %>" in result.error.context

    async def test_line_numbers_after_code_block(self, renderer: TemplateRenderer) -> None:
        """Test that errors below a protected block keep their line numbers."""
        body = "```\none\ntwo\n```\n<%= missing %>"

        result = await renderer.render(body, {})

        assert result.error.line_number == 5

    async def test_helper_exception(self, renderer: TemplateRenderer) -> None:
        """Test that helper exceptions become runtime errors."""

        def explode():
            raise ValueError("kaboom")

        result = await renderer.render("ok\n<%= explode() %>", {"explode": explode})

        assert result.error.kind == RenderErrorKind.RENDER_RUNTIME_ERROR
        assert result.error.line_number == 2
        assert result.error.description == "ValueError: kaboom"

    async def test_syntax_error(self, renderer: TemplateRenderer) -> None:
        """Test that an unclosed block is a syntax error."""
        body = "line\n<% if x %>\nnever closed"

        result = await renderer.render(body, {}, {"x": True})

        assert result.error.kind == RenderErrorKind.RENDER_SYNTAX_ERROR
        assert result.error.description.startswith("SyntaxError:")
        assert result.error.line_number > 0

    async def test_unknown_statement(self, renderer: TemplateRenderer) -> None:
        """Test that an unknown statement reports its line."""
        result = await renderer.render("a\n<% frobnicate %>", {})

        assert result.error.kind == RenderErrorKind.RENDER_SYNTAX_ERROR
        assert result.error.line_number == 2

    async def test_unresolved_include_is_undefined(self, renderer: TemplateRenderer) -> None:
        """Test that a leftover include directive fails as an undefined name."""
        result = await renderer.render("<%- include('nowhere') %>", {})

        assert result.error.kind == RenderErrorKind.RENDER_RUNTIME_ERROR
        assert "include" in result.error.description

    async def test_render_text_propagates(self, renderer: TemplateRenderer) -> None:
        """Test that render_text lets template exceptions through."""
        with pytest.raises(Exception):
            await renderer.render_text("<%= missing %>", {})


class TestCleanOutput:
    """Test cleanup of error text."""

    def test_removes_noise(self) -> None:
        """Test that library hints are removed."""
        text = "Bad tag\nIf the above error is not helpful, you may want to try EJS-Lint:"
        assert clean_output(text) == "Bad tag\n"

    def test_rewrites_documentation_link(self) -> None:
        """Test that internal links are replaced by the public docs link."""
        text = "See https://github.com/RyanZim/EJS-Lint"

        cleaned = clean_output(text, "https://docs.example.com")

        assert "RyanZim" not in cleaned
        assert cleaned.endswith(
            "\nFor more information on proper template syntax, refer to:\nhttps://docs.example.com\n"
        )

    def test_clean_text_untouched(self) -> None:
        """Test that clean text is returned unchanged."""
        assert clean_output("Nothing to see") == "Nothing to see"
