"""Scanning helpers for script tags and fenced code blocks."""

import re
from typing import Literal

from notetemplate.errors import RenderError, RenderErrorKind, get_error_context
from notetemplate.logger import get_logger

logger = get_logger(__name__)

ProtectMode = Literal["all", "ignored", "none"]

TAG_OPEN = "<%"
TAG_CLOSE = "%>"
CODE_FENCE = "```"

SNIPPET_LENGTH = 50

IGNORE_COMMENTS = ("template: ignore", "template:ignore")

TAG_PATTERN = re.compile(r"<%.*?%>", re.DOTALL)


def get_tags(template_body: str) -> list[str]:
    """Return every complete `<% ... %>` tag in document order."""
    return TAG_PATTERN.findall(template_body)


def is_comment_tag(tag: str) -> bool:
    return tag.startswith("<%#")


def validate_tags(template_body: str) -> RenderError | None:
    """
    Check that opening and closing tag markers balance. Only the counts are
    compared; mis-nested tags surface later as render syntax errors.

    """
    open_count = template_body.count(TAG_OPEN)
    close_count = template_body.count(TAG_CLOSE)

    if open_count == close_count:
        return None

    position = template_body.rfind(TAG_OPEN)
    if position < 0:
        position = template_body.rfind(TAG_CLOSE)

    snippet = template_body[position : position + SNIPPET_LENGTH]
    line_number = template_body.count("\n", 0, position) + 1

    description = (
        f"Template has {open_count} opening tags but {close_count} closing tags"
    )
    logger.debug(f"Tag validation failed near line {line_number}: {description}")

    return RenderError(
        kind=RenderErrorKind.UNCLOSED_TAG,
        line_number=line_number,
        context=get_error_context(template_body, snippet, line_number),
        description=description,
    )


def code_block_spans(template_body: str) -> list[tuple[int, int]]:
    """
    Locate fenced code blocks as (start, end) offsets, fences included. An
    unterminated fence runs to the end of the text.

    """
    spans = []
    start = template_body.find(CODE_FENCE)
    while start >= 0:
        close = template_body.find(CODE_FENCE, start + len(CODE_FENCE))
        end = len(template_body) if close < 0 else close + len(CODE_FENCE)
        spans.append((start, end))
        start = template_body.find(CODE_FENCE, end)
    return spans


def get_code_blocks(template_body: str) -> list[str]:
    return [template_body[start:end] for start, end in code_block_spans(template_body)]


def code_block_has_ignore_comment(code_block: str) -> bool:
    return any(comment in code_block for comment in IGNORE_COMMENTS)


def protected_spans(
    template_body: str, protect_code_blocks: ProtectMode = "all"
) -> list[tuple[int, int]]:
    """Spans of the fenced code blocks that pass through rendering untouched."""
    if protect_code_blocks == "none":
        return []

    spans = code_block_spans(template_body)
    if protect_code_blocks == "ignored":
        spans = [
            (start, end)
            for start, end in spans
            if code_block_has_ignore_comment(template_body[start:end])
        ]
    return spans


def in_spans(position: int, spans: list[tuple[int, int]]) -> bool:
    return any(start <= position < end for start, end in spans)
