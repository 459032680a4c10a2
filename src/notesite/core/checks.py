"""Content hygiene checks: metadata, duplicates, tag reachability and menu links"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from notesite.core.models import ContentDoc
from notesite.core.pages import is_external, normalize_url, resolve_main_sections, select_published
from notesite.core.parse import collect_dir
from notesite.core.site import SiteConfig
from notesite.core.taxonomy import build_taxonomies


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Issue:
    path:     str
    code:     str
    message:  str
    severity: str = "error"         # error | warning

    def __str__(self) -> str:
        return f"{self.severity} [{self.code}] {self.path}: {self.message}"


def check_duplicates(docs: list[ContentDoc]) -> list[Issue]:
    """Flag every document after the first sharing an identical title and date."""
    groups: dict[tuple, list[ContentDoc]] = defaultdict(list)
    for doc in docs:
        if doc.date is not None:
            groups[(doc.title, doc.date)].append(doc)
    issues = []
    for (title, _), dupes in groups.items():
        first, *rest = sorted(dupes, key=lambda d: d.path)
        for doc in rest:
            issues.append(Issue(doc.path, "duplicate", f"same title and date as {first.path}: {title!r}"))
    return issues


def check_reachable(site: SiteConfig, docs: list[ContentDoc]) -> list[Issue]:
    """Published pages in main sections must be listed on at least one tag page."""
    has_tags = "tags" in site.effective_taxonomies().values()
    main = set(resolve_main_sections(site, docs))
    issues = []
    for doc in docs:
        if doc.draft or doc.is_list_page or doc.section not in main:
            continue
        if not doc.tags:
            issues.append(Issue(doc.path, "unreachable", "published document has no tags"))
        elif not has_tags:
            issues.append(Issue(doc.path, "unreachable", "document has tags but no 'tags' taxonomy is configured"))
    return issues


def known_urls(site: SiteConfig, docs: list[ContentDoc]) -> set[str]:
    """Every site-relative URL a build of these documents would produce."""
    urls = {"/"}
    for doc in docs:
        if not (doc.is_list_page and '/' in doc.parent_dir):
            urls.add(doc.url)
        if doc.section:
            urls.add(f"/{doc.section}/")
            urls.add(f"/{doc.section}/index.xml")
    for tax in build_taxonomies(site, docs).values():
        urls.add(tax.url)
        urls.update(tax.term_url(t) for t in tax.terms.values())
    urls.add("/index.xml")
    return urls


def check_menu(site: SiteConfig, docs: list[ContentDoc]) -> list[Issue]:
    """Menu entries must point at an existing section, taxonomy, term or page."""
    urls = known_urls(site, docs)
    issues = []
    for entry in site.menu_entries("main"):
        if is_external(entry.url):
            continue
        if normalize_url(entry.url) not in urls:
            issues.append(Issue(
                "<menu>", "menu-url", f"menu entry {entry.name!r} points to missing {entry.url!r}"
            ))
    return issues


def check_nested_sections(docs: list[ContentDoc]) -> list[Issue]:
    """Only top-level sections get list pages; a deeper _index.md is never rendered."""
    return [
        Issue(d.path, "nested-section", "section intro below the top level is not rendered", "warning")
        for d in docs if d.is_list_page and '/' in d.parent_dir
    ]


def _display_path(path: Path | None, content_dir: Path) -> str:
    if path is None:
        return "<unknown>"
    return path.relative_to(content_dir).as_posix() if path.is_relative_to(content_dir) else str(path)


def run_checks(site: SiteConfig, content_dir: Path, now: datetime | None = None) -> list[Issue]:
    """Run every check; invalid documents are reported and left out of the other checks."""
    docs, errors = collect_dir(content_dir)
    issues = [Issue(_display_path(e.path, content_dir), "invalid-frontmatter", e.message) for e in errors]
    issues += check_duplicates(docs)
    issues += check_reachable(site, docs)
    issues += check_menu(site, select_published(site, docs, now or datetime.now(timezone.utc)))
    issues += check_nested_sections(docs)
    issues += [Issue(d.path, "draft", "draft, excluded from published output", "warning")
               for d in docs if d.draft and not site.build_drafts]
    logger.info("Checked %d documents: %d issues", len(docs) + len(errors), len(issues))
    return issues
