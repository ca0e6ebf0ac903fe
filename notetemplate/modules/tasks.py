"""Task listing helpers exposed to templates as `tasks`."""

import re
from enum import Enum

from notetemplate.context import NoteInfo

# `* [ ] text`, `- [x] text`, or a bare `* text` which is an open task
TASK_PATTERN = re.compile(
    r"^\s*(?:[-*+]\s*\[(?P<mark>[ xX\->])\]|\*(?!\s*\[))\s+(?P<text>.*?)\s*$"
)


class TaskStatus(str, Enum):
    OPEN = "open"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    SCHEDULED = "scheduled"


MARK_STATUS = {
    " ": TaskStatus.OPEN,
    "x": TaskStatus.COMPLETED,
    "X": TaskStatus.COMPLETED,
    "-": TaskStatus.CANCELLED,
    ">": TaskStatus.SCHEDULED,
}


def parse_tasks(content: str) -> list[tuple[TaskStatus, str]]:
    tasks = []
    for line in content.splitlines():
        match = TASK_PATTERN.match(line)
        if match is None:
            continue
        mark = match.group("mark")
        status = MARK_STATUS[mark] if mark is not None else TaskStatus.OPEN
        tasks.append((status, match.group("text")))
    return tasks


class TasksModule:
    def __init__(self, note: NoteInfo | None = None) -> None:
        self.note = note or NoteInfo()

    def _with_status(self, status: TaskStatus) -> list[str]:
        return [text for task_status, text in parse_tasks(self.note.content) if task_status == status]

    def open(self) -> list[str]:
        return self._with_status(TaskStatus.OPEN)

    def completed(self) -> list[str]:
        return self._with_status(TaskStatus.COMPLETED)

    def count(self, status: str = "open") -> int:
        return len(self._with_status(TaskStatus(status)))
