"""Time helpers exposed to templates as `time`."""

from datetime import datetime
from typing import TYPE_CHECKING

from notetemplate.modules.date import Clock, format_date

if TYPE_CHECKING:
    from notetemplate.config import TemplatingConfig

DEFAULT_TIME_FORMAT = "h:mm A"


class TimeModule:
    def __init__(
        self, config: "TemplatingConfig | None" = None, clock: Clock | None = None
    ) -> None:
        self.clock = clock or datetime.now
        self.time_format = config.time_format if config else DEFAULT_TIME_FORMAT

    def now(self, fmt: str = "") -> str:
        return format_date(self.clock(), fmt or self.time_format)
