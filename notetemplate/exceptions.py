class TemplatingError(Exception):
    """Base class for errors raised by notetemplate."""

    pass


class FrontmatterParseError(TemplatingError):
    """The frontmatter block could not be parsed as YAML."""

    def __init__(self, message: str, line_number: int = 0) -> None:
        super().__init__(message)
        self.line_number = line_number


class TemplateNotFoundError(TemplatingError):
    """A template requested by name does not exist in the lookup."""

    pass
