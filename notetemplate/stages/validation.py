"""Validation stage rejecting templates whose tags do not balance."""

from notetemplate.context import RenderContext
from notetemplate.logger import get_logger
from notetemplate.stages.base import RenderStage
from notetemplate.stages.config import StageName, ValidationStageConfig
from notetemplate.tags import validate_tags

logger = get_logger(__name__)


class ValidationStage(RenderStage[ValidationStageConfig]):
    name = StageName.VALIDATION

    async def process(self, ctx: RenderContext) -> RenderContext:
        ctx.error = validate_tags(ctx.source)
        if ctx.error is not None:
            logger.info(f"Unbalanced tags: {ctx.error.description}")
        return ctx
