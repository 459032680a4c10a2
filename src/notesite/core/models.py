"""Content document model shared by parsing, rendering, checks and the index"""

from datetime import datetime
from pathlib import PurePosixPath
from typing import Any, Optional

from pydantic import BaseModel, Field


LIST_PAGE_NAME = "_index.md"


class ContentDoc(BaseModel):
    """One article (or section intro) with its validated front matter and Markdown body."""
    path:       str                     # posix path relative to the content dir
    slug:       str
    section:    str = ""                # first path component; "" for root-level files
    title:      str
    date:       Optional[datetime] = None
    draft:      bool = False
    tags:       list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    weight:     int = 0
    layout:     Optional[str] = None
    summary:    Optional[str] = None
    extra:      dict[str, Any] = Field(default_factory=dict)
    body:       str = ""
    format:     str = Field(default="yaml", pattern="^(yaml|toml)$")
    hash:       str = ""

    @property
    def is_list_page(self) -> bool:
        return PurePosixPath(self.path).name == LIST_PAGE_NAME

    @property
    def parent_dir(self) -> str:
        parent = PurePosixPath(self.path).parent
        return "" if str(parent) == "." else str(parent)

    @property
    def url(self) -> str:
        """Site-relative URL: /<dir>/<slug>/ for pages, /<dir>/ for _index.md."""
        custom = self.extra.get("url")
        if isinstance(custom, str) and custom.strip("/"):
            return "/" + custom.strip("/") + "/"
        parent = self.parent_dir
        if self.is_list_page:
            return f"/{parent}/" if parent else "/"
        return f"/{parent}/{self.slug}/" if parent else f"/{self.slug}/"

    def terms(self, plural: str) -> list[str]:
        """Return the values this document lists for a taxonomy."""
        if plural == "tags":
            return list(self.tags)
        if plural == "categories":
            return list(self.categories)
        values = self.extra.get(plural) or []
        return [str(v) for v in values] if isinstance(values, list) else [str(values)]

    def same_record(self, other: "ContentDoc") -> bool:
        """Compare two documents ignoring the raw-file hash."""
        return self.model_dump(exclude={"hash"}) == other.model_dump(exclude={"hash"})
