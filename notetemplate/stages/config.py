"""Render stage configuration models."""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field


class StageName(str, Enum):
    """Render stages, declared in the order the pipeline runs them."""

    VALIDATION = "validation"
    FRONTMATTER = "frontmatter"
    INCLUDES = "includes"
    RENDER = "render"
    CLEANUP = "cleanup"

    @property
    def position(self) -> int:
        return list(StageName).index(self)


class BaseStageConfig(BaseModel):
    """Base configuration for all render stages."""

    name: StageName
    enabled: bool = True


class ValidationStageConfig(BaseStageConfig):
    """Configuration for the tag balance check.

    Example YAML configuration:
    ```yaml
    stages:
      - name: validation
        enabled: true
    ```
    """

    name: Literal[StageName.VALIDATION] = StageName.VALIDATION


class FrontmatterStageConfig(BaseStageConfig):
    """Configuration for frontmatter parsing.

    Example YAML configuration:
    ```yaml
    stages:
      - name: frontmatter
        render_attributes: true
    ```
    """

    name: Literal[StageName.FRONTMATTER] = StageName.FRONTMATTER

    render_attributes: bool = Field(
        default=True,
        description="Render template tags found inside attribute values",
    )


class IncludesStageConfig(BaseStageConfig):
    """Configuration for include/import resolution.

    Example YAML configuration:
    ```yaml
    stages:
      - name: includes
        max_passes: 5
    ```
    """

    name: Literal[StageName.INCLUDES] = StageName.INCLUDES

    max_passes: int | None = Field(
        default=None,
        ge=1,
        description="Override for the global max_include_passes setting",
    )


class RenderStageConfig(BaseStageConfig):
    """Configuration for template execution.

    Example YAML configuration:
    ```yaml
    stages:
      - name: render
        enabled: true
    ```
    """

    name: Literal[StageName.RENDER] = StageName.RENDER


class CleanupStageConfig(BaseStageConfig):
    """Configuration for output cleanup.

    Example YAML configuration:
    ```yaml
    stages:
      - name: cleanup
        strip_trailing_whitespace: false
    ```
    """

    name: Literal[StageName.CLEANUP] = StageName.CLEANUP

    strip_trailing_whitespace: bool = Field(
        default=False,
        description="Remove trailing spaces and tabs from every rendered line",
    )


StageConfig = Annotated[
    ValidationStageConfig
    | FrontmatterStageConfig
    | IncludesStageConfig
    | RenderStageConfig
    | CleanupStageConfig,
    Field(discriminator="name"),
]


def default_stage_configs() -> list[StageConfig]:
    return [
        ValidationStageConfig(),
        FrontmatterStageConfig(),
        IncludesStageConfig(),
        RenderStageConfig(),
        CleanupStageConfig(),
    ]
