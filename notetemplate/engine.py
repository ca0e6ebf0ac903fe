"""Render entry point wiring configuration, helpers, lookup and stages together."""

import inspect
from types import MappingProxyType
from typing import Any

from notetemplate.config import TemplatingConfig
from notetemplate.context import NoteInfo, RenderContext
from notetemplate.errors import RenderResult
from notetemplate.exceptions import TemplateNotFoundError
from notetemplate.includes import TemplateLookup
from notetemplate.logger import get_logger
from notetemplate.lookup import DirectoryTemplateLookup
from notetemplate.modules.date import Clock
from notetemplate.namespace import HelperNamespaceBuilder
from notetemplate.renderer import TemplateRenderer, clean_output
from notetemplate.stages.config import StageConfig
from notetemplate.stages.manager import StageManager

logger = get_logger(__name__)


class TemplatingEngine:
    """
    Renders note templates.

    Example:
        engine = TemplatingEngine(lookup=DictTemplateLookup({"header": "# Title"}))
        result = await engine.render("<%- include('header') %>\\n<%= date.now() %>")
        print(result.output)

    """

    def __init__(
        self,
        config: TemplatingConfig | None = None,
        lookup: TemplateLookup | None = None,
        note: NoteInfo | None = None,
        stages: list[StageConfig] | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config or TemplatingConfig()

        if lookup is None and self.config.templates_dir is not None:
            lookup = DirectoryTemplateLookup(self.config.templates_dir)
        self.lookup = lookup

        self.namespace_builder = HelperNamespaceBuilder(self.config, note, clock)
        self._namespace: MappingProxyType | None = None

        self.renderer = TemplateRenderer(self.config.protect_code_blocks)
        self.stage_manager = StageManager(
            global_config=self.config, renderer=self.renderer, lookup=self.lookup
        )
        self.stage_manager.load_stages(
            stages if stages is not None else self.config.stages
        )

    @property
    def namespace(self) -> MappingProxyType:
        """Helper namespace, built on first use and reused across renders."""
        if self._namespace is None:
            self._namespace = self.namespace_builder.build()
        return self._namespace

    def register(self, name: str, helper: Any) -> None:
        """Expose an additional function or module to templates."""
        self.namespace_builder.register(name, helper)
        self._namespace = None

    async def render(
        self, source: str, local_vars: dict[str, Any] | None = None
    ) -> RenderResult:
        ctx = RenderContext(
            source=source,
            body=source,
            helpers=self.namespace,
            variables=dict(local_vars or {}),
        )
        ctx = await self.stage_manager.process(ctx)

        if ctx.error is not None:
            error = ctx.error.model_copy(
                update={"description": clean_output(ctx.error.description, self.config.docs_url)}
            )
            return RenderResult.failure(error, ctx.warnings)

        text = ctx.text if ctx.text is not None else ctx.body
        return RenderResult.success(text, ctx.warnings)

    async def get_template(self, name: str) -> str:
        """
        Fetch a template through the lookup.

        Raises:
            TemplateNotFoundError: no lookup is configured, it has no such template
                or it failed to load it
        """
        if self.lookup is None:
            raise TemplateNotFoundError(f"No template lookup configured to find '{name}'")

        try:
            content = self.lookup(name)
            if inspect.isawaitable(content):
                content = await content
        except Exception as e:
            raise TemplateNotFoundError(f"Template '{name}' could not be loaded: {e}") from e

        if content is None:
            raise TemplateNotFoundError(f"Template not found: {name}")
        return content

    async def render_template_by_name(
        self, name: str, local_vars: dict[str, Any] | None = None
    ) -> RenderResult:
        """
        Render a template fetched by name. Problems inside the template, unreadable
        frontmatter included, come back as a failed RenderResult.

        Raises:
            TemplateNotFoundError: the template does not exist
        """
        source = await self.get_template(name)

        logger.info(f"Rendering template '{name}'")
        return await self.render(source, local_vars)
