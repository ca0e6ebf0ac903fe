"""Render stage executing the preprocessed body."""

from notetemplate.context import RenderContext
from notetemplate.renderer import TemplateRenderer
from notetemplate.stages.base import RenderStage
from notetemplate.stages.config import RenderStageConfig, StageName


class RenderTemplateStage(RenderStage[RenderStageConfig]):
    name = StageName.RENDER

    def __init__(self, config: RenderStageConfig, renderer: TemplateRenderer) -> None:
        super().__init__(config)
        self.renderer = renderer

    async def process(self, ctx: RenderContext) -> RenderContext:
        result = await self.renderer.render(ctx.body, ctx.helpers, ctx.scope())
        if result.ok:
            ctx.text = result.text
        else:
            ctx.error = result.error
        return ctx
