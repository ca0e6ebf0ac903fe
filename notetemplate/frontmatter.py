"""Frontmatter detection, parsing and body extraction for note templates."""

import re
from typing import Any

import yaml
from frontmatter import YAMLHandler

from notetemplate.exceptions import FrontmatterParseError
from notetemplate.logger import get_logger

logger = get_logger(__name__)

DELIMITER = "---"

SAFE_KEY = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")
SIMPLE_ATTRIBUTE = re.compile(r"^([A-Za-z][A-Za-z0-9_-]*):[ \t]+(.+?)[ \t]*$")

FLOW_COLLECTION_MESSAGE = (
    "**Frontmatter Template Parsing Error**\n\n"
    "When using template tags in frontmatter attributes, the entire block must "
    "be wrapped in quotes"
)

yaml_handler = YAMLHandler()


def _closing_offset(text: str) -> int:
    """Offset just past the closing delimiter line, or -1 when there is no block."""
    lines = text.splitlines(keepends=True)
    if len(lines) < 2 or lines[0].rstrip("\r\n") != DELIMITER:
        return -1

    offset = len(lines[0])
    for line in lines[1:]:
        offset += len(line)
        if line.rstrip("\r\n") == DELIMITER:
            return offset
    return -1


def is_frontmatter_template(text: str) -> bool:
    """True when the text opens with a `---` line that is later closed by another."""
    return _closing_offset(text) >= 0


def get_frontmatter_text(text: str) -> str:
    """The exact frontmatter block, delimiters included, or an empty string."""
    end = _closing_offset(text)
    return text[:end] if end >= 0 else ""


def body(text: str) -> str:
    """The text that follows the frontmatter block, untouched."""
    return text[len(get_frontmatter_text(text)) :]


def _inner_text(block: str) -> str:
    lines = block.splitlines(keepends=True)
    return "".join(lines[1:-1])


def _needs_quoting(value: str) -> bool:
    if value[0] in "'\"[{|>":
        return False
    return (
        ": " in value
        or value.endswith(":")
        or value[0] in "#@`%!&*"
        or " #" in value
        or "<%" in value
    )


def _quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _sanitize(inner: str) -> str:
    """
    Quote top-level `key: value` lines whose values YAML would misread, such as
    hashtags, mentions, embedded colons and unrendered template tags.

    """
    sanitized = []
    for line in inner.splitlines(keepends=True):
        content = line.rstrip("\r\n")
        ending = line[len(content) :]
        match = SIMPLE_ATTRIBUTE.match(content)
        if match and _needs_quoting(match.group(2)):
            content = f"{match.group(1)}: {_quote(match.group(2))}"
        sanitized.append(content + ending)
    return "".join(sanitized)


def _normalize(value: Any) -> Any:
    if isinstance(value, dict):
        return _filter_keys(value)
    if isinstance(value, list):
        return [_normalize(item) for item in value]
    if isinstance(value, bool):
        return value
    if value is None:
        return ""
    return str(value)


def _filter_keys(mapping: dict) -> dict[str, Any]:
    attributes: dict[str, Any] = {}
    for key, value in mapping.items():
        if not SAFE_KEY.match(str(key)):
            logger.debug(f"Skipping illegal frontmatter key: {key!r}")
            continue
        attributes[str(key)] = _normalize(value)
    return attributes


def _describe_yaml_error(error: yaml.YAMLError) -> tuple[str, int]:
    mark = getattr(error, "problem_mark", None)
    # +1 for the opening delimiter, +1 because marks are zero based
    line_number = mark.line + 2 if mark is not None else 0
    problem = getattr(error, "problem", None) or ""

    if problem.startswith("expected ','"):
        return f"{FLOW_COLLECTION_MESSAGE}\n{mark}", line_number
    return f"Invalid frontmatter: {error}", line_number


def parse_attributes(text: str) -> dict[str, Any]:
    """
    Parse the frontmatter block into an ordered attribute mapping.

    Raises:
        FrontmatterParseError: the block is not valid YAML or not a mapping
    """
    block = get_frontmatter_text(text)
    if not block:
        return {}

    try:
        loaded = yaml_handler.load(_sanitize(_inner_text(block)))
    except yaml.YAMLError as e:
        message, line_number = _describe_yaml_error(e)
        raise FrontmatterParseError(message, line_number) from e

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise FrontmatterParseError(
            f"Frontmatter must be a mapping of attributes, got {type(loaded).__name__}",
            2,
        )

    return _filter_keys(loaded)


def attributes(text: str) -> dict[str, Any]:
    """Lenient variant of `parse_attributes`: malformed blocks give an empty mapping."""
    try:
        return parse_attributes(text)
    except FrontmatterParseError as e:
        logger.warning(f"Could not parse frontmatter, ignoring attributes: {e}")
        return {}
