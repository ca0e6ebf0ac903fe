"""Cleanup stage removing library noise from rendered output."""

import re
from typing import TYPE_CHECKING

from notetemplate.context import RenderContext
from notetemplate.renderer import DEFAULT_DOCS_URL, clean_output
from notetemplate.stages.base import RenderStage
from notetemplate.stages.config import CleanupStageConfig, StageName

if TYPE_CHECKING:
    from notetemplate.config import TemplatingConfig

TRAILING_WHITESPACE = re.compile(r"[ \t]+$", re.MULTILINE)


class CleanupStage(RenderStage[CleanupStageConfig]):
    name = StageName.CLEANUP

    def __init__(
        self,
        config: CleanupStageConfig,
        global_config: "TemplatingConfig | None" = None,
    ) -> None:
        super().__init__(config)
        self.docs_url = (
            global_config.docs_url if global_config is not None else DEFAULT_DOCS_URL
        )

    async def process(self, ctx: RenderContext) -> RenderContext:
        # Without a render stage the body is the output
        text = ctx.text if ctx.text is not None else ctx.body
        text = clean_output(text, self.docs_url)

        if self.config.strip_trailing_whitespace:
            text = TRAILING_WHITESPACE.sub("", text)

        ctx.text = text
        return ctx
