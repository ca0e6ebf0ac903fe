"""Helpers over the note being rendered, exposed as `note`."""

from typing import Any

from notetemplate import frontmatter
from notetemplate.context import NoteInfo


class NoteModule:
    def __init__(self, note: NoteInfo | None = None) -> None:
        self.note = note or NoteInfo()

    def title(self) -> str:
        return self.note.title

    def filename(self) -> str:
        return self.note.filename

    def content(self) -> str:
        return self.note.content

    def selection(self) -> str:
        return self.note.selection

    def attributes(self) -> dict[str, Any]:
        """Frontmatter attributes of the note, empty when it has none or they do not parse."""
        return frontmatter.attributes(self.note.content)
