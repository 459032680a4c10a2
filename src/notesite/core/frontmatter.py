"""Front matter blocks: YAML (---) and TOML (+++) splitting, date coercion, serialization"""

import re
import tomllib
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import tomli_w
import yaml

from notesite.core.errors import FrontmatterError
from notesite.core.models import ContentDoc


FRONTMATTER_RE = re.compile(
    r'\A(?P<fence>---|\+\+\+)[ \t]*\r?\n(?P<meta>.*?)^(?P=fence)[ \t]*(?:\r?\n|\Z)',
    re.DOTALL | re.MULTILINE,
)
FENCES = {"yaml": "---", "toml": "+++"}

# Keys with a dedicated ContentDoc field, in the order they are written back.
KNOWN_KEYS = ("title", "date", "draft", "tags", "categories", "weight", "layout", "summary")


def split_frontmatter(text: str, path: Path | str | None = None) -> tuple[dict[str, Any], str, str]:
    """Return (metadata, body, format) with the delimited header removed."""
    m = FRONTMATTER_RE.match(text)
    if not m:
        return {}, text, "yaml"

    fmt = "toml" if m.group("fence") == "+++" else "yaml"
    meta = m.group("meta")
    try:
        data = tomllib.loads(meta) if fmt == "toml" else yaml.safe_load(meta)
    except (yaml.YAMLError, tomllib.TOMLDecodeError) as e:
        raise FrontmatterError(f"invalid {fmt.upper()} front matter: {e}", path) from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontmatterError(
            f"invalid front matter: expected a mapping, got {type(data).__name__}", path
        )
    return data, text[m.end():].lstrip("\r\n"), fmt


def coerce_date(value: Any, path: Path | str | None = None) -> datetime:
    """Coerce a front matter date into an aware datetime; naive values are taken as UTC."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise FrontmatterError(f"'date' is not an ISO-8601 timestamp: {value!r}", path) from e
    else:
        raise FrontmatterError(f"'date' is not a timestamp: {value!r}", path)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def doc_metadata(doc: ContentDoc) -> dict[str, Any]:
    """Rebuild the front matter mapping for a document: known keys first, extras after."""
    fm: dict[str, Any] = {"title": doc.title}
    if doc.date is not None:
        fm["date"] = doc.date.isoformat() if doc.format == "yaml" else doc.date
    fm["draft"] = doc.draft
    fm["tags"] = list(doc.tags)
    if doc.categories:
        fm["categories"] = list(doc.categories)
    if doc.weight:
        fm["weight"] = doc.weight
    if doc.layout is not None:
        fm["layout"] = doc.layout
    if doc.summary is not None:
        fm["summary"] = doc.summary
    for key, value in doc.extra.items():
        # TOML has no null
        if value is None and doc.format == "toml":
            continue
        fm[key] = value
    return fm


def dump_doc(doc: ContentDoc) -> str:
    """Serialize a document back to text in its own front matter format."""
    fm = doc_metadata(doc)
    if doc.format == "toml":
        header = tomli_w.dumps(fm)
    else:
        header = yaml.safe_dump(fm, default_flow_style=False, allow_unicode=True, sort_keys=False)
    fence = FENCES[doc.format]
    return f"{fence}\n{header}{fence}\n\n{doc.body}"
