"""File discovery and front matter validation for content documents"""

from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Any

from pydantic import ValidationError

from notesite.core.errors import FrontmatterError
from notesite.core.frontmatter import FENCES, KNOWN_KEYS, coerce_date, dump_doc, split_frontmatter
from notesite.core.models import ContentDoc
from notesite.core.utils.hashing import sha256
from notesite.core.utils.slug import slugify


MD_EXTENSIONS = {'.md', '.markdown'}


def _string_list(fm: dict[str, Any], key: str, path: Path) -> list[str]:
    """Return fm[key] as a list of strings, [] when absent; raise on any other shape."""
    value = fm.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise FrontmatterError(f"'{key}' must be a list of strings", path)
    return list(value)


def _relative(path: Path, content_dir: Path | None) -> PurePosixPath:
    if content_dir is not None:
        try:
            return PurePosixPath(path.resolve().relative_to(content_dir.resolve()).as_posix())
        except ValueError:
            pass
    return PurePosixPath(path.name)


def build_doc(fm: dict[str, Any], body: str, fmt: str, relpath: PurePosixPath, path: Path) -> ContentDoc:
    """Validate a front matter mapping and assemble a ContentDoc."""
    title = fm.get("title")
    if not isinstance(title, str) or not title.strip():
        raise FrontmatterError("'title' must be a non-empty string", path)

    is_list_page = relpath.name == "_index.md"
    raw_date = fm.get("date")
    if raw_date is None and not (is_list_page or fm.get("layout")):
        raise FrontmatterError("'date' is required", path)
    doc_date = coerce_date(raw_date, path) if raw_date is not None else None

    draft = fm.get("draft", False)
    if not isinstance(draft, bool):
        raise FrontmatterError(f"'draft' must be a boolean, got {draft!r}", path)

    weight = fm.get("weight", 0)
    if isinstance(weight, bool) or not isinstance(weight, int):
        raise FrontmatterError(f"'weight' must be an integer, got {weight!r}", path)

    parts = relpath.parts
    section = parts[0] if len(parts) > 1 else ""
    slug = fm.get("slug") or slugify(relpath.stem)

    try:
        return ContentDoc(
            path=str(relpath),
            slug=str(slug),
            section=section,
            title=title,
            date=doc_date,
            draft=draft,
            tags=_string_list(fm, "tags", path),
            categories=_string_list(fm, "categories", path),
            weight=weight,
            layout=fm.get("layout"),
            summary=fm.get("summary"),
            extra={k: v for k, v in fm.items() if k not in KNOWN_KEYS},
            body=body,
            format=fmt,
        )
    except ValidationError as e:
        raise FrontmatterError(f"invalid front matter: {e}", path) from e


def discover_files(path: Path) -> list[Path]:
    """Return sorted Markdown files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.is_file() and p.suffix in MD_EXTENSIONS)


def parse_text(raw: str, relpath: str, path: Path | None = None) -> ContentDoc:
    """Parse document text as if it lived at relpath inside the content dir."""
    rel = PurePosixPath(relpath)
    where = path or Path(relpath)
    fm, body, fmt = split_frontmatter(raw, where)
    doc = build_doc(fm, body, fmt, rel, where)
    doc.hash = sha256(raw)
    return doc


def parse_file(path: Path, content_dir: Path | None = None) -> ContentDoc:
    """Parse and validate a single content document."""
    raw = path.read_text(encoding='utf-8')
    return parse_text(raw, str(_relative(path, content_dir)), path)


def parse_dir(content_dir: Path) -> list[ContentDoc]:
    """Parse every document under content_dir; the first invalid one raises."""
    docs = []
    for p in discover_files(content_dir):
        try:
            docs.append(parse_file(p, content_dir))
        except (FrontmatterError, UnicodeDecodeError) as e:
            raise RuntimeError(f"Failed to parse {p}: {e}") from e
    return docs


def collect_dir(content_dir: Path) -> tuple[list[ContentDoc], list[FrontmatterError]]:
    """Parse every document under content_dir, returning failures alongside the valid docs."""
    docs, errors = [], []
    for p in discover_files(content_dir):
        try:
            docs.append(parse_file(p, content_dir))
        except FrontmatterError as e:
            errors.append(e)
        except UnicodeDecodeError as e:
            errors.append(FrontmatterError(f"not valid UTF-8: {e}", p))
    return docs, errors


def new_doc(content_dir: Path, relpath: str, now: datetime, fmt: str = "toml") -> Path:
    """Write a draft article skeleton at content_dir/relpath and return its path."""
    if fmt not in FENCES:
        raise ValueError(f"Unknown front matter format: {fmt}")
    target = content_dir / relpath
    if target.suffix not in MD_EXTENSIONS:
        target = target.with_suffix('.md')
    if target.exists():
        raise FileExistsError(f"{target} already exists")

    title = target.stem.replace('-', ' ').replace('_', ' ').strip().title() or "Untitled"
    rel = _relative(target, content_dir)
    doc = ContentDoc(
        path=str(rel),
        slug=slugify(target.stem),
        section=rel.parts[0] if len(rel.parts) > 1 else "",
        title=title,
        date=now.replace(microsecond=0),
        draft=True,
        format=fmt,
    )
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(dump_doc(doc), encoding='utf-8')
    return target
