"""Pipeline step functions: load, index, check and build orchestration"""

import logging
import shutil
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy.engine import Engine
from sqlmodel import Session

from notesite.config import Settings
from notesite.core.checks import Issue, run_checks
from notesite.core.models import ContentDoc
from notesite.core.output import SiteWriter
from notesite.core.pages import assemble_site, select_published
from notesite.core.parse import parse_dir
from notesite.core.site import SiteConfig, load_site_config
from notesite.crud.documents import commit_doc, prune_missing


logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    written:   list[Path] = field(default_factory=list)
    counts:    dict[str, int] = field(default_factory=dict)
    changes:   list[tuple[str, str]] = field(default_factory=list)
    published: int = 0
    skipped:   int = 0


def load_site(settings: Settings) -> SiteConfig:
    """Load the site configuration and apply CLI/env overrides."""
    site = load_site_config(Path(settings.site_config))
    updates = {}
    if settings.build_drafts is not None:
        updates["build_drafts"] = settings.build_drafts
    if settings.build_future is not None:
        updates["build_future"] = settings.build_future
    if settings.base_url:
        updates["base_url"] = settings.base_url
    return site.model_copy(update=updates) if updates else site


def run_index(engine: Engine, docs: list[ContentDoc]) -> tuple[dict[str, int], list[tuple[str, str]]]:
    """Commit docs to the content index and prune documents whose files are gone.

    Returns (counts, changes) where changes lists (status, path) for every
    created, updated or removed document.
    """
    indexed_at = datetime.now()
    counts = {"created": 0, "updated": 0, "unchanged": 0, "removed": 0}
    changes = []
    with Session(engine) as session:
        for doc in docs:
            _, status = commit_doc(session, doc, indexed_at)
            counts[status] += 1
            if status != 'unchanged':
                changes.append((status, doc.path))
        for path in prune_missing(session, {d.path for d in docs}):
            counts["removed"] += 1
            changes.append(("removed", path))
        session.commit()
    return counts, changes


def run_check(settings: Settings) -> list[Issue]:
    """Run content checks against the configured site and content dir."""
    return run_checks(load_site(settings), Path(settings.content_dir))


def _check_clean_target(output_dir: Path, settings: Settings) -> None:
    """Refuse to empty a directory inside the content dir, or one holding it, the working dir or the site config."""
    target = output_dir.resolve()
    content = Path(settings.content_dir).resolve()
    if content in target.parents:
        raise RuntimeError(f"Refusing to clean {output_dir}: it is inside {content}")
    for path in (Path.cwd().resolve(), content, Path(settings.site_config).resolve()):
        if target == path or target in path.parents:
            raise RuntimeError(f"Refusing to clean {output_dir}: it contains {path}")


def _clean(output_dir: Path) -> None:
    if output_dir.exists():
        logger.info("Cleaning %s", output_dir)
        shutil.rmtree(output_dir)


def run_build(
    settings: Settings,
    engine: Engine | None = None,
    clean: bool = True,
    now: datetime | None = None,
    ) -> BuildResult:
    """Load, index and render the site into settings.output_dir."""
    site = load_site(settings)
    output_dir = Path(settings.output_dir)
    if clean:
        _check_clean_target(output_dir, settings)
    docs = parse_dir(Path(settings.content_dir))
    result = BuildResult()

    if engine is not None:
        result.counts, result.changes = run_index(engine, docs)

    published = select_published(site, docs, now or datetime.now(timezone.utc))
    result.published = len(published)
    result.skipped = len(docs) - len(published)
    logger.info("Publishing %d of %d documents", len(published), len(docs))

    if clean:
        _clean(output_dir)
    model = assemble_site(site, published, settings.parser_config)
    try:
        result.written = SiteWriter(model, output_dir).write_all()
    except OSError as e:
        raise RuntimeError(f"Failed to write {output_dir}: {e}") from e
    return result
