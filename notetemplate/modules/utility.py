"""String helpers exposed to templates as `utility`."""

import re
from typing import Any


class UtilityModule:
    def lowercase(self, text: str = "") -> str:
        return str(text).lower()

    def uppercase(self, text: str = "") -> str:
        return str(text).upper()

    def titlecase(self, text: str = "") -> str:
        return " ".join(word[:1].upper() + word[1:].lower() for word in str(text).split(" "))

    def concat(self, *values: Any, separator: str = "") -> str:
        return separator.join(str(value) for value in values)

    def split(self, text: str = "", separator: str | None = None) -> list[str]:
        return str(text).split(separator)

    def slug(self, text: str = "") -> str:
        """Generate URL-safe slug from text."""
        if not text:
            return ""

        slug = str(text).lower().replace(" ", "-")
        slug = re.sub(r"[^a-z0-9\-]", "", slug)
        slug = re.sub(r"-+", "-", slug)
        return slug.strip("-")
