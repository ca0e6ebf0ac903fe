"""Models for the per-render state passed through the render stages."""

from typing import Any

from pydantic import BaseModel, Field

from notetemplate.errors import RenderError


class NoteInfo(BaseModel):
    """The note a template is being rendered for, as plain data."""

    title: str = ""
    filename: str = ""
    content: str = ""
    selection: str = ""


class RenderContext(BaseModel):
    """Context object passed through stages containing the template and its state."""

    # Raw template text, frontmatter included
    source: str

    # Body being transformed by the stages
    body: str = ""

    attributes: dict[str, Any] = Field(default_factory=dict)

    # Read-only helper namespace, lowest priority in the render scope
    helpers: Any = Field(default_factory=dict)

    # Caller supplied variables, highest priority in the render scope
    variables: dict[str, Any] = Field(default_factory=dict)

    # Final output, set by the render stage
    text: str | None = None

    error: RenderError | None = None
    warnings: list[RenderError] = Field(default_factory=list)

    include_passes: int = 0
    unresolved_includes: list[str] = Field(default_factory=list)

    model_config = {"arbitrary_types_allowed": True}

    @property
    def failed(self) -> bool:
        return self.error is not None

    def scope(self) -> dict[str, Any]:
        """Template variables: attributes, the attribute mapping itself, then caller variables."""
        return {**self.attributes, "frontmatter": self.attributes, **self.variables}
