"""Includes stage splicing referenced templates into the body."""

from typing import TYPE_CHECKING

from notetemplate.context import RenderContext
from notetemplate.errors import RenderError, RenderErrorKind, get_error_context
from notetemplate.includes import (
    DEFAULT_MAX_PASSES,
    Directive,
    IncludeResolver,
    TemplateLookup,
)
from notetemplate.logger import get_logger
from notetemplate.stages.base import RenderStage
from notetemplate.stages.config import IncludesStageConfig, StageName

if TYPE_CHECKING:
    from notetemplate.config import TemplatingConfig

logger = get_logger(__name__)


def _directive_error(
    text: str, directive: Directive, kind: RenderErrorKind, description: str
) -> RenderError:
    line_number = text.count("\n", 0, directive.start) + 1
    return RenderError(
        kind=kind,
        line_number=line_number,
        context=get_error_context(text, directive.tag, line_number),
        description=description,
    )


class IncludesStage(RenderStage[IncludesStageConfig]):
    name = StageName.INCLUDES

    def __init__(
        self,
        config: IncludesStageConfig,
        lookup: TemplateLookup | None = None,
        global_config: "TemplatingConfig | None" = None,
    ) -> None:
        super().__init__(config)
        self.lookup = lookup
        self.global_config = global_config

    @property
    def max_passes(self) -> int:
        if self.config.max_passes is not None:
            return self.config.max_passes
        if self.global_config is not None:
            return self.global_config.max_include_passes
        return DEFAULT_MAX_PASSES

    async def process(self, ctx: RenderContext) -> RenderContext:
        if self.lookup is None:
            logger.debug("No template lookup configured, skipping includes")
            return ctx

        resolver = IncludeResolver(
            self.lookup,
            max_passes=self.max_passes,
            variables=ctx.scope(),
            protect_code_blocks=(
                self.global_config.protect_code_blocks
                if self.global_config is not None
                else "all"
            ),
        )
        ctx.body = await resolver.resolve(ctx.body)

        # Attributes of the including template win over included ones
        for key, value in resolver.attributes.items():
            ctx.attributes.setdefault(key, value)

        ctx.include_passes = resolver.passes
        ctx.unresolved_includes = resolver.unresolved

        if resolver.failed_directive is not None:
            error = resolver.lookup_error
            ctx.error = _directive_error(
                ctx.body,
                resolver.failed_directive,
                RenderErrorKind.INCLUDE_LOOKUP_ERROR,
                f"Could not load '{resolver.failed_directive.name}': "
                f"{type(error).__name__}: {error}",
            )
        elif resolver.exhausted:
            names = ", ".join(sorted({d.name for d in resolver.remaining}))
            ctx.error = _directive_error(
                ctx.body,
                resolver.remaining[0],
                RenderErrorKind.INCLUDE_DEPTH_EXCEEDED,
                f"Includes were still unresolved after {resolver.passes} passes "
                f"(possible circular include): {names}",
            )

        return ctx
