"""Structured render diagnostics and the source-context formatter."""

from enum import Enum, unique

from pydantic import BaseModel, Field

ERROR_CONTEXT_NOT_FOUND = "**Error context not found in template**"

CONTEXT_LINES_BEFORE = 3
CONTEXT_LINES_AFTER = 3
ERROR_LINE_MARKER = " >> "
LINE_MARKER = "    "


@unique
class RenderErrorKind(str, Enum):
    UNCLOSED_TAG = "UnclosedTag"
    FRONTMATTER_PARSE_ERROR = "FrontmatterParseError"
    RENDER_SYNTAX_ERROR = "RenderSyntaxError"
    RENDER_RUNTIME_ERROR = "RenderRuntimeError"
    INCLUDE_DEPTH_EXCEEDED = "IncludeDepthExceeded"
    INCLUDE_LOOKUP_ERROR = "IncludeLookupError"


class RenderError(BaseModel):
    """A rendering failure that is reported back to the user instead of text."""

    kind: RenderErrorKind
    line_number: int = 0
    """1-based line of the offending source, 0 when unknown"""

    context: str = ""
    """Numbered window of the surrounding source lines"""

    description: str = ""

    def format(self) -> str:
        return format_template_error(
            self.kind.value, self.line_number, self.context, self.description
        )


class RenderResult(BaseModel):
    """Outcome of a single render call."""

    ok: bool
    text: str = ""
    error: RenderError | None = None
    warnings: list[RenderError] = Field(default_factory=list)

    @classmethod
    def success(cls, text: str, warnings: list[RenderError] | None = None) -> "RenderResult":
        return cls(ok=True, text=text, warnings=warnings or [])

    @classmethod
    def failure(
        cls, error: RenderError, warnings: list[RenderError] | None = None
    ) -> "RenderResult":
        return cls(ok=False, error=error, warnings=warnings or [])

    @property
    def output(self) -> str:
        """The text a host would insert into the note."""
        if not self.ok and self.error is not None:
            output = self.error.format()
        else:
            output = self.text

        if self.warnings:
            issues = "\n".join(warning.format() for warning in self.warnings)
            output = f"{output}\n\n**Issues occurred during frontmatter processing:**\n{issues}"

        return output


def get_error_context(
    template_body: str, match_snippet: str, known_line_number: int = 0
) -> str:
    """
    Render the lines around the first occurrence of `match_snippet`, numbered
    from 1, with the offending line marked by ` >> `.

    """
    position = template_body.find(match_snippet)
    if position < 0:
        return ERROR_CONTEXT_NOT_FOUND

    lines = template_body.split("\n")

    if 0 < known_line_number <= len(lines):
        line_number = known_line_number
    else:
        line_number = template_body.count("\n", 0, position) + 1

    start = max(line_number - CONTEXT_LINES_BEFORE, 0)
    end = min(len(lines), line_number + CONTEXT_LINES_AFTER)

    rendered = []
    for index, line in enumerate(lines[start:end], start=start + 1):
        marker = ERROR_LINE_MARKER if index == line_number else LINE_MARKER
        rendered.append(f"{marker}{index}| {line}")

    return "\n".join(rendered)


def format_template_error(
    error_type: str, line_number: int, context: str, description: str = ""
) -> str:
    """User-facing text for a render error: header, description and fenced context."""
    location = f" near line {line_number}" if line_number > 0 else ""
    desc = f"\n{description}" if description else ""
    block = f"\n```\n{context}\n```" if context else ""
    return f"==Template error: Found {error_type}{location}=={desc}{block}\n"
