"""
Execution of preprocessed template bodies.

Templates use EJS-shaped delimiters around Jinja expressions and statements:

    <%= expr %>     escaped output
    <%- expr %>     raw output
    <% stmt %>      statement (if/for/set/...)
    <%# text %>     comment

The body is translated into a Jinja template with those delimiters, keeping
every line where it was so that errors point at the author's source.

"""

import re
import traceback
from collections.abc import Mapping
from typing import Any, NamedTuple

from jinja2 import Environment, StrictUndefined, TemplateSyntaxError

from notetemplate.errors import (
    RenderError,
    RenderErrorKind,
    RenderResult,
    get_error_context,
)
from notetemplate.logger import get_logger
from notetemplate.tags import TAG_OPEN, TAG_PATTERN, ProtectMode, protected_spans

logger = get_logger(__name__)

TEMPLATE_FILENAME = "<template>"

CODE_BLOCKS_NAME = "_code_blocks"

DEFAULT_DOCS_URL = "https://noteplan.co/templates/docs"

RAW_OUTPUT_TAG = re.compile(r"<%-(?P<expr>.*?)(?P<close>[-_]?%>)", re.DOTALL)
UNDEFINED_NAME = re.compile(r"'([^']+)' is undefined")

SMART_QUOTES = str.maketrans({"“": '"', "”": '"', "‘": "'", "’": "'"})

NOISY_PHRASES = [
    "If the above error is not helpful, you may want to try EJS-Lint:",
    "jinja2.exceptions.",
]
INTERNAL_DOC_URLS = [
    "https://github.com/RyanZim/EJS-Lint",
    "https://jinja.palletsprojects.com/en/stable/templates/",
]


def _finalize(value: Any) -> Any:
    return "" if value is None else value


def create_environment() -> Environment:
    return Environment(
        block_start_string="<%",
        block_end_string="%>",
        variable_start_string="<%=",
        variable_end_string="%>",
        comment_start_string="<%#",
        comment_end_string="%>",
        autoescape=True,
        undefined=StrictUndefined,
        enable_async=True,
        keep_trailing_newline=True,
        finalize=_finalize,
        extensions=["jinja2.ext.do", "jinja2.ext.loopcontrols"],
    )


def _translate_tags(segment: str) -> str:
    """Rewrite the EJS-only tag forms of a non-code segment into their Jinja forms."""
    segment = TAG_PATTERN.sub(lambda match: match.group(0).translate(SMART_QUOTES), segment)

    def _raw_output(match: re.Match) -> str:
        close = match.group("close").replace("_", "-")
        expr = match.group("expr")
        if not expr.strip():
            return f"<%= ''{expr}{close}"
        return f"<%= ({expr})|safe {close}"

    segment = RAW_OUTPUT_TAG.sub(_raw_output, segment)
    return segment.replace("<%_", "<%-").replace("_%>", "-%>")


class TranslatedTemplate(NamedTuple):
    source: str
    code_blocks: list[str]


def translate(
    template_body: str, protect_code_blocks: ProtectMode = "all"
) -> TranslatedTemplate:
    """
    Convert a template body into Jinja source.

    Protected fenced code blocks never reach the Jinja lexer. Each is replaced by
    an output tag reading it back from `CODE_BLOCKS_NAME`, followed by a comment
    holding the block's newlines so later lines keep their numbers.

    """
    pieces = []
    code_blocks = []
    cursor = 0
    for start, end in protected_spans(template_body, protect_code_blocks):
        block = template_body[start:end]
        pieces.append(_translate_tags(template_body[cursor:start]))
        pieces.append(f"<%= {CODE_BLOCKS_NAME}[{len(code_blocks)}]|safe %>")
        newlines = "\n" * block.count("\n")
        if newlines:
            pieces.append(f"<%#{newlines}%>")
        code_blocks.append(block)
        cursor = end
    pieces.append(_translate_tags(template_body[cursor:]))
    return TranslatedTemplate("".join(pieces), code_blocks)


def _template_line(error: BaseException) -> int:
    """Deepest template line in the traceback Jinja rewrote for us."""
    line_number = 0
    for frame in traceback.extract_tb(error.__traceback__):
        if frame.filename == TEMPLATE_FILENAME and frame.lineno:
            line_number = frame.lineno
    return line_number


def clean_output(text: str, docs_url: str = DEFAULT_DOCS_URL) -> str:
    """Strip library noise and point internal documentation links at the public docs."""
    result = text
    for phrase in NOISY_PHRASES:
        result = result.replace(phrase, "")

    replaced_url = False
    for url in INTERNAL_DOC_URLS:
        if url in result:
            result = result.replace(url, "")
            replaced_url = True

    if replaced_url:
        result += f"\nFor more information on proper template syntax, refer to:\n{docs_url}\n"

    return result


class TemplateRenderer:
    """Renders preprocessed bodies against a helper namespace."""

    def __init__(self, protect_code_blocks: ProtectMode = "all") -> None:
        self.protect_code_blocks = protect_code_blocks
        self.environment = create_environment()

    async def render_text(
        self,
        template_body: str,
        helpers: Mapping[str, Any],
        local_vars: Mapping[str, Any] | None = None,
    ) -> str:
        """Render and return the text, letting template exceptions propagate."""
        if TAG_OPEN not in template_body:
            return template_body

        translated = translate(template_body, self.protect_code_blocks)
        template = self.environment.from_string(translated.source)

        scope = {
            **helpers,
            **(local_vars or {}),
            CODE_BLOCKS_NAME: translated.code_blocks,
        }
        return await template.render_async(scope)

    async def render(
        self,
        template_body: str,
        helpers: Mapping[str, Any],
        local_vars: Mapping[str, Any] | None = None,
    ) -> RenderResult:
        try:
            text = await self.render_text(template_body, helpers, local_vars)
        except Exception as e:
            error = self.to_render_error(template_body, e)
            logger.debug(f"Render failed near line {error.line_number}: {error.description}")
            return RenderResult.failure(error)

        return RenderResult.success(text)

    def to_render_error(self, template_body: str, error: Exception) -> RenderError:
        """Convert an exception raised while rendering `template_body` into a RenderError."""
        if isinstance(error, TemplateSyntaxError):
            kind = RenderErrorKind.RENDER_SYNTAX_ERROR
            line_number = error.lineno or 0
            description = f"SyntaxError: {error.message}"
        else:
            kind = RenderErrorKind.RENDER_RUNTIME_ERROR
            line_number = _template_line(error)
            description = f"{type(error).__name__}: {error}"

        lines = template_body.split("\n")
        if 0 < line_number <= len(lines):
            snippet = lines[line_number - 1]
        else:
            line_number = 0
            undefined = UNDEFINED_NAME.search(str(error))
            snippet = undefined.group(1) if undefined else ""

        return RenderError(
            kind=kind,
            line_number=line_number,
            context=get_error_context(template_body, snippet, line_number),
            description=description,
        )
