"""Render stages for notetemplate."""

from .base import RenderStage
from .cleanup import CleanupStage
from .frontmatter import FrontmatterStage
from .includes import IncludesStage
from .manager import StageManager
from .render import RenderTemplateStage
from .validation import ValidationStage

__all__ = [
    "RenderStage",
    "StageManager",
    "CleanupStage",
    "FrontmatterStage",
    "IncludesStage",
    "RenderTemplateStage",
    "ValidationStage",
]
