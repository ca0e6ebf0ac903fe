"""Recursive resolution of include/import directives."""

import inspect
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from notetemplate import frontmatter
from notetemplate.logger import get_logger
from notetemplate.tags import ProtectMode, in_spans, protected_spans

logger = get_logger(__name__)

DEFAULT_MAX_PASSES = 10

TemplateLookup = Callable[[str], Awaitable[str | None] | str | None]

DIRECTIVE_PATTERN = re.compile(
    r"<%[-=_]?\s*(?:set\s+(?P<target>[A-Za-z_]\w*)\s*=\s*)?(?:await\s+)?"
    r"(?P<kind>include|import|template)\(\s*"
    r"(?P<quote>['\"`])(?P<name>[^'\"`]+?)(?P=quote)\s*(?:,[^)]*)?\)\s*[-_]?%>"
)

TEMPLATE_STRING = re.compile(r"\$\{([^}]+)\}")


@dataclass
class Directive:
    """An include-style tag found in the template body."""

    kind: str
    name: str
    start: int
    end: int
    tag: str
    target: str | None = None

    def splice(self, content: str) -> str:
        """Text that replaces the tag, captured into `target` when one is assigned."""
        if self.target is None:
            return content
        return f"<% set {self.target} %>{content}<% endset %>"


def _expand_name(name: str, variables: dict[str, Any]) -> str:
    """Expand `${a.b}` placeholders in a directive name from the given variables."""

    def _replace(match: re.Match) -> str:
        value: Any = variables
        for part in match.group(1).strip().split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return match.group(0)
        return str(value)

    return TEMPLATE_STRING.sub(_replace, name)


def find_directives(
    template_body: str, protect_code_blocks: ProtectMode = "all"
) -> list[Directive]:
    """Scan left to right for directives outside the protected code blocks."""
    spans = protected_spans(template_body, protect_code_blocks)
    directives = []
    for match in DIRECTIVE_PATTERN.finditer(template_body):
        if in_spans(match.start(), spans):
            continue
        directives.append(
            Directive(
                kind=match.group("kind"),
                name=match.group("name").strip(),
                start=match.start(),
                end=match.end(),
                tag=match.group(0),
                target=match.group("target"),
            )
        )
    return directives


class IncludeResolver:
    """
    Splices referenced templates into a body until no directive can be resolved.

    Every pass rescans the whole text, so directives brought in by included
    content are resolved on the next pass. A template that includes itself,
    directly or through others, stops after `max_passes` with `exhausted` set.
    A lookup that raises stops resolution with `failed_directive` and
    `lookup_error` set.

    """

    def __init__(
        self,
        lookup: TemplateLookup,
        max_passes: int = DEFAULT_MAX_PASSES,
        variables: dict[str, Any] | None = None,
        protect_code_blocks: ProtectMode = "all",
    ) -> None:
        self.lookup = lookup
        self.max_passes = max_passes
        self.variables = variables or {}
        self.protect_code_blocks = protect_code_blocks

        self.passes = 0
        self.exhausted = False
        self.unresolved: list[str] = []
        self.remaining: list[Directive] = []
        self.attributes: dict[str, Any] = {}

        self.failed_directive: Directive | None = None
        self.lookup_error: Exception | None = None

        self._cache: dict[str, str | None] = {}

    async def _lookup(self, name: str) -> str | None:
        if name in self._cache:
            return self._cache[name]

        content = self.lookup(name)
        if inspect.isawaitable(content):
            content = await content

        if content is None:
            logger.warning(f"Included template not found, leaving directive: {name}")
            self.unresolved.append(name)
        elif frontmatter.is_frontmatter_template(content):
            for key, value in frontmatter.attributes(content).items():
                self.attributes.setdefault(key, value)
            content = frontmatter.body(content)

        self._cache[name] = content
        return content

    async def resolve(self, template_body: str) -> str:
        text = template_body

        while True:
            directives = find_directives(text, self.protect_code_blocks)
            contents = []
            for directive in directives:
                name = _expand_name(directive.name, self.variables)
                try:
                    contents.append(await self._lookup(name))
                except Exception as e:
                    logger.warning(f"Lookup of included template '{name}' failed: {e}")
                    self.failed_directive = directive
                    self.lookup_error = e
                    return text

            if all(content is None for content in contents):
                return text

            if self.passes >= self.max_passes:
                self.exhausted = True
                self.remaining = directives
                logger.warning(
                    f"Stopped resolving includes after {self.passes} passes; "
                    f"remaining: {[d.name for d in directives]}"
                )
                return text

            pieces = []
            cursor = 0
            for directive, content in zip(directives, contents):
                if content is None:
                    continue
                pieces.append(text[cursor : directive.start])
                pieces.append(directive.splice(content))
                cursor = directive.end
            pieces.append(text[cursor:])

            text = "".join(pieces)
            self.passes += 1
            logger.debug(f"Include pass {self.passes} complete")


async def resolve_includes(
    template_body: str,
    lookup: TemplateLookup,
    max_passes: int = DEFAULT_MAX_PASSES,
) -> str:
    """Resolve include/import directives recursively through `lookup`."""
    resolver = IncludeResolver(lookup, max_passes=max_passes)
    text = await resolver.resolve(template_body)
    if resolver.lookup_error is not None:
        raise resolver.lookup_error
    return text
