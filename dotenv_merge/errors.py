"""Exception hierarchy for dotenv merging."""

from typing import Optional


class DotenvMergeError(Exception):
    """Base class for all dotenv-merge errors."""


class ConfigurationError(DotenvMergeError, ValueError):
    """Raised when merge options are invalid."""


class ParseError(DotenvMergeError):
    """Raised when a dotenv source cannot be analyzed."""

    def __init__(
        self,
        message: Optional[str] = None,
        content: Optional[bytes] = None,
        errors: Optional[list] = None
    ):
        self.content = content
        self.errors = list(errors or [])
        if message is None:
            message = "Failed to parse dotenv source"
            if self.errors:
                message += ": " + "; ".join(str(e) for e in self.errors)
        super().__init__(message)


class TemplateParseError(ParseError):
    """Raised when the template cannot be analyzed."""


class DestinationParseError(ParseError):
    """Raised when the destination cannot be analyzed."""
