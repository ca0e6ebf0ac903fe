"""Stage manager for loading and executing render stages."""

import inspect
import time
from typing import TYPE_CHECKING, Any

from notetemplate.context import RenderContext
from notetemplate.includes import TemplateLookup
from notetemplate.logger import get_logger
from notetemplate.renderer import TemplateRenderer
from notetemplate.stages.base import RenderStage
from notetemplate.stages.cleanup import CleanupStage
from notetemplate.stages.config import StageConfig, StageName
from notetemplate.stages.frontmatter import FrontmatterStage
from notetemplate.stages.includes import IncludesStage
from notetemplate.stages.render import RenderTemplateStage
from notetemplate.stages.validation import ValidationStage

if TYPE_CHECKING:
    from notetemplate.config import TemplatingConfig

logger = get_logger(__name__)


class StageManager:
    """
    Loads the configured render stages and runs a context through them.

    Stages always run in the order `StageName` declares them: tags are checked
    before frontmatter is parsed, includes are spliced before the body renders,
    and cleanup runs last. Disabled stages are skipped, and each stage may only
    be configured once.

    """

    def __init__(
        self,
        global_config: "TemplatingConfig | None" = None,
        renderer: TemplateRenderer | None = None,
        lookup: TemplateLookup | None = None,
    ) -> None:
        self.global_config = global_config
        self.renderer = renderer or TemplateRenderer(
            global_config.protect_code_blocks if global_config is not None else "all"
        )
        self.lookup = lookup
        self.stages: list[RenderStage] = []
        self._stage_registry: dict[StageName, type[RenderStage]] = {
            StageName.VALIDATION: ValidationStage,
            StageName.FRONTMATTER: FrontmatterStage,
            StageName.INCLUDES: IncludesStage,
            StageName.RENDER: RenderTemplateStage,
            StageName.CLEANUP: CleanupStage,
        }

    def _order_stage_configs(self, stage_configs: list[StageConfig]) -> list[StageConfig]:
        """Enabled configs in pipeline order, rejecting a stage configured twice."""
        seen: set[StageName] = set()
        enabled = []
        for config in stage_configs:
            if config.name in seen:
                raise ValueError(f"Stage '{config.name.value}' is configured more than once")
            seen.add(config.name)
            if config.enabled:
                enabled.append(config)

        return sorted(enabled, key=lambda config: config.name.position)

    def load_stage(self, config: StageConfig) -> RenderStage:
        """Instantiate the stage for `config`."""
        if config.name not in self._stage_registry:
            raise ValueError(f"Unknown stage: {config.name}")

        stage_class = self._stage_registry[config.name]
        return stage_class(**self._get_constructor_params(stage_class, config))

    def load_stages(self, stage_configs: list[StageConfig]) -> None:
        self.stages = [
            self.load_stage(config) for config in self._order_stage_configs(stage_configs)
        ]
        logger.info(
            f"Loaded render stages: {[stage.name.value for stage in self.stages]}"
        )

    def _get_constructor_params(
        self, stage_class: type[RenderStage], config: StageConfig
    ) -> dict[str, Any]:
        """Inspect the stage constructor and determine what parameters to provide.

        Uses simple name-based conventions:
        - 'config': gets the stage config
        - 'renderer': gets the shared TemplateRenderer
        - 'global_config' / 'lookup': provided when available
        - other params with defaults: skipped
        - other required params: error

        """
        signature = inspect.signature(stage_class.__init__)
        available = {
            "renderer": self.renderer,
            "global_config": self.global_config,
            "lookup": self.lookup,
        }
        params: dict[str, Any] = {}

        for param_name, param in signature.parameters.items():
            if param_name == "self":
                continue

            if param_name == "config":
                params[param_name] = config
            elif available.get(param_name) is not None:
                params[param_name] = available[param_name]
            elif param.default is not inspect.Parameter.empty:
                continue
            else:
                raise ValueError(
                    f"Stage {stage_class.__name__} requires '{param_name}' "
                    f"but none provided"
                )

        return params

    async def process(self, ctx: RenderContext) -> RenderContext:
        """Run the context through every loaded stage, stopping at the first error."""
        for stage in self.stages:
            start_time = time.perf_counter()
            ctx = await stage.process(ctx)
            duration = time.perf_counter() - start_time
            logger.info(f"Stage {stage.name.value} took {duration:.4f}s")

            if ctx.failed:
                logger.info(f"Stage {stage.name.value} reported {ctx.error.kind.value}")
                break

        return ctx
