"""Frontmatter stage for splitting attributes from the template body."""

from typing import Any

from notetemplate import frontmatter
from notetemplate.context import RenderContext
from notetemplate.errors import RenderError, RenderErrorKind, get_error_context
from notetemplate.exceptions import FrontmatterParseError
from notetemplate.logger import get_logger
from notetemplate.renderer import TemplateRenderer
from notetemplate.stages.base import RenderStage
from notetemplate.stages.config import FrontmatterStageConfig, StageName
from notetemplate.tags import TAG_OPEN

logger = get_logger(__name__)


class FrontmatterStage(RenderStage[FrontmatterStageConfig]):
    """Parse the frontmatter block and render tags found in attribute values."""

    name = StageName.FRONTMATTER

    def __init__(self, config: FrontmatterStageConfig, renderer: TemplateRenderer) -> None:
        super().__init__(config)
        self.renderer = renderer

    async def process(self, ctx: RenderContext) -> RenderContext:
        if not frontmatter.is_frontmatter_template(ctx.source):
            ctx.body = ctx.source
            return ctx

        try:
            attributes = frontmatter.parse_attributes(ctx.source)
        except FrontmatterParseError as e:
            ctx.error = self._parse_error(ctx.source, e)
            return ctx

        ctx.body = frontmatter.body(ctx.source)

        if self.config.render_attributes:
            attributes = await self._render_attributes(attributes, ctx)

        ctx.attributes = attributes
        logger.debug(f"Parsed frontmatter attributes: {list(attributes)}")
        return ctx

    async def _render_attributes(
        self, attributes: dict[str, Any], ctx: RenderContext
    ) -> dict[str, Any]:
        """
        Render top-level string values that contain tags, in document order, so a
        value can refer to the attributes declared above it. A value that fails
        to render is kept verbatim and reported as a warning.

        """
        rendered: dict[str, Any] = {}
        for key, value in attributes.items():
            if not isinstance(value, str) or TAG_OPEN not in value:
                rendered[key] = value
                continue

            try:
                rendered[key] = await self.renderer.render_text(
                    value, ctx.helpers, {**rendered, **ctx.variables}
                )
            except Exception as e:
                logger.warning(f"Could not render frontmatter attribute '{key}': {e}")
                ctx.warnings.append(self.renderer.to_render_error(value, e))
                rendered[key] = value

        return rendered

    @staticmethod
    def _parse_error(source: str, error: FrontmatterParseError) -> RenderError:
        lines = source.split("\n")
        line_number = error.line_number if 0 < error.line_number <= len(lines) else 0
        snippet = lines[line_number - 1] if line_number else frontmatter.DELIMITER

        return RenderError(
            kind=RenderErrorKind.FRONTMATTER_PARSE_ERROR,
            line_number=line_number,
            context=get_error_context(source, snippet, line_number),
            description=str(error),
        )
