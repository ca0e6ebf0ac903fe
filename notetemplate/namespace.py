"""Assembly of the read-only helper namespace templates are evaluated against."""

from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from notetemplate.context import NoteInfo
from notetemplate.logger import get_logger
from notetemplate.modules import (
    DateModule,
    NoteModule,
    TasksModule,
    TimeModule,
    UtilityModule,
)
from notetemplate.modules.date import Clock

if TYPE_CHECKING:
    from notetemplate.config import TemplatingConfig

logger = get_logger(__name__)

BUILTIN_NAMES = frozenset(
    {"date", "time", "note", "tasks", "utility", "user", "log", "np"}
)


def log(message: Any = "") -> str:
    """Write a message to the notetemplate log from inside a template."""
    logger.info(str(message))
    return ""


class HelperNamespaceBuilder:
    """
    Collects built-in helper modules and caller registrations into one mapping.

    Every entry is also reachable through `np`, so `np.date.now()` and
    `date.now()` are the same call.

    """

    def __init__(
        self,
        config: "TemplatingConfig | None" = None,
        note: NoteInfo | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config
        self.note = note
        self.clock = clock
        self._extras: dict[str, Any] = {}

    def register(self, name: str, helper: Any) -> "HelperNamespaceBuilder":
        """
        Add a function or module under `name`.

        Raises:
            ValueError: the name is reserved by a built-in helper or is not a valid identifier
        """
        if name in BUILTIN_NAMES:
            raise ValueError(f"Helper name '{name}' is reserved by a built-in helper")
        if not name.isidentifier():
            raise ValueError(f"Helper name '{name}' is not a valid identifier")

        self._extras[name] = helper
        return self

    def _user(self) -> MappingProxyType:
        config = self.config
        return MappingProxyType(
            {
                "first": config.user_first_name if config else "",
                "last": config.user_last_name if config else "",
                "email": config.user_email if config else "",
                "phone": config.user_phone if config else "",
                "name": config.user_full_name if config else "",
            }
        )

    def build(self) -> MappingProxyType:
        entries: dict[str, Any] = {
            "date": DateModule(self.config, self.clock),
            "time": TimeModule(self.config, self.clock),
            "note": NoteModule(self.note),
            "tasks": TasksModule(self.note),
            "utility": UtilityModule(),
            "user": self._user(),
            "log": log,
        }
        entries.update(self._extras)
        entries["np"] = MappingProxyType(dict(entries))

        logger.debug(f"Built helper namespace: {sorted(entries)}")
        return MappingProxyType(entries)
