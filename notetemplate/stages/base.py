"""Base stage class for the render pipeline."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from notetemplate.context import RenderContext
from notetemplate.stages.config import StageName

ConfigT = TypeVar("ConfigT")


class RenderStage(ABC, Generic[ConfigT]):
    """
    One step of the render pipeline. A stage mutates the context it is given and
    reports failures through `ctx.error`, which ends the pipeline.

    """

    name: StageName

    def __init__(self, config: ConfigT) -> None:
        self.config = config

    @abstractmethod
    async def process(self, ctx: RenderContext) -> RenderContext:
        pass
