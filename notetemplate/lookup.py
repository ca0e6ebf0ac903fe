"""Template lookups used to resolve templates referenced by name."""

import glob
from pathlib import Path, PurePosixPath

from notetemplate.logger import get_logger

logger = get_logger(__name__)

TEMPLATE_SUFFIXES = ("", ".md", ".txt")


class DictTemplateLookup:
    """Serves templates from an in-memory mapping of name to text."""

    def __init__(self, templates: dict[str, str] | None = None) -> None:
        self.templates = dict(templates or {})

    def __call__(self, name: str) -> str | None:
        return self.templates.get(name)


class DirectoryTemplateLookup:
    """
    Serves templates from files under a directory. A name may be given with or
    without its `.md` / `.txt` suffix and may be a path relative to the root;
    bare names are also searched for in subdirectories. Absolute names and names
    stepping outside the root are never served.

    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root).expanduser()

    @staticmethod
    def is_safe_name(name: str) -> bool:
        path = PurePosixPath(name.replace("\\", "/"))
        return bool(name.strip()) and not path.is_absolute() and ".." not in path.parts

    def find(self, name: str) -> Path | None:
        if not self.is_safe_name(name) or Path(name).is_absolute():
            logger.warning(f"Refusing template name outside {self.root}: {name}")
            return None

        for suffix in TEMPLATE_SUFFIXES:
            candidate = self.root / f"{name}{suffix}"
            if candidate.is_file():
                return candidate

        pattern = glob.escape(name)
        for suffix in TEMPLATE_SUFFIXES:
            for candidate in sorted(self.root.rglob(f"{pattern}{suffix}")):
                if candidate.is_file():
                    return candidate

        return None

    def __call__(self, name: str) -> str | None:
        path = self.find(name)
        if path is None:
            logger.debug(f"No template named '{name}' under {self.root}")
            return None

        return path.read_text(encoding="utf-8").rstrip("\n")
