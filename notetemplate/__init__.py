from notetemplate.config import TemplatingConfig
from notetemplate.context import NoteInfo
from notetemplate.engine import TemplatingEngine
from notetemplate.errors import RenderError, RenderErrorKind, RenderResult
from notetemplate.lookup import DictTemplateLookup, DirectoryTemplateLookup

__all__ = [
    "DictTemplateLookup",
    "DirectoryTemplateLookup",
    "NoteInfo",
    "RenderError",
    "RenderErrorKind",
    "RenderResult",
    "TemplatingConfig",
    "TemplatingEngine",
]
