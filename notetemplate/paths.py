"""Path resolution utilities for notetemplate configuration."""

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel


def resolve_path(path: str | Path, base_dir: Path | None) -> Path:
    """Resolve a path, making it relative to base_dir if it's relative."""
    path_obj = Path(os.path.expanduser(str(path)))

    if path_obj.is_absolute() or base_dir is None:
        return path_obj

    return base_dir / path_obj


def resolve_paths_recursively(obj: Any, base_dir: Path) -> None:
    """Resolve every Path field of a model, and of the models nested inside it, in place."""
    if isinstance(obj, list):
        for item in obj:
            resolve_paths_recursively(item, base_dir)
    elif isinstance(obj, BaseModel):
        for field_name in obj.__class__.model_fields:
            value = getattr(obj, field_name)
            if isinstance(value, Path):
                setattr(obj, field_name, resolve_path(value, base_dir))
            elif isinstance(value, list | BaseModel):
                resolve_paths_recursively(value, base_dir)
