"""Error types for malformed site configuration and content documents"""

from pathlib import Path


class ContentError(ValueError):
    """Base error carrying the offending file path."""

    def __init__(self, message: str, path: Path | str | None = None):
        self.path = Path(path) if path is not None else None
        self.message = message
        super().__init__(f"{path}: {message}" if path is not None else message)


class FrontmatterError(ContentError):
    """A content document's metadata block is missing, unparseable or invalid."""


class SiteConfigError(ContentError):
    """The site configuration file is missing, unparseable or invalid."""
