"""Jinja2 template environment and output file writing"""

import logging
from datetime import datetime
from email.utils import format_datetime
from itertools import groupby
from pathlib import Path
from typing import Any
from urllib.parse import unquote

from jinja2 import Environment, FileSystemLoader, select_autoescape

from notesite.core.pages import Page, SiteModel, paginate
from notesite.core.render import markdownify


logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

LIST_TEMPLATES = {"home": "home.html", "section": "list.html", "term": "list.html", "taxonomy": "terms.html"}


def _rfc822(value: datetime | None) -> str:
    return format_datetime(value) if value else ""


def _human_date(value: datetime | None) -> str:
    return f"{value:%B} {value.day}, {value:%Y}" if value else ""


def make_env(site: SiteModel) -> Environment:
    """Build the template environment with site-aware filters."""
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["absurl"] = site.config.abs_url
    env.filters["rfc822"] = _rfc822
    env.filters["human_date"] = _human_date
    env.filters["markdownify"] = markdownify
    env.globals["param"] = site.config.param
    return env


def url_to_file(output_dir: Path, url: str, name: str = "index.html") -> Path:
    """Map a site URL like /posts/x/ onto output_dir/posts/x/<name>, percent-escapes decoded."""
    return output_dir.joinpath(*[unquote(p) for p in url.split('/') if p], name)


def archive_groups(pages: list[Page]) -> list[tuple[int, list[tuple[str, list[Page]]]]]:
    """Group dated pages by year then month, newest first."""
    dated = sorted((p for p in pages if p.date), key=lambda p: p.date, reverse=True)
    years = []
    for year, in_year in groupby(dated, key=lambda p: p.date.year):
        months = []
        for _, in_month in groupby(in_year, key=lambda p: p.date.month):
            month_pages = list(in_month)
            months.append((f"{month_pages[0].date:%B}", month_pages))
        years.append((year, months))
    return years


class SiteWriter:
    """Renders a SiteModel into an output directory and records every file written."""

    def __init__(self, site: SiteModel, output_dir: Path):
        self.site = site
        self.output_dir = output_dir
        self.env = make_env(site)
        self.written: list[Path] = []

    def _context(self, **extra: Any) -> dict[str, Any]:
        return {"site": self.site.config, "model": self.site, "menu": self.site.menu, **extra}

    def _write(self, path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        self.written.append(path)
        logger.debug("Wrote %s", path)

    def render(self, template: str, path: Path, **ctx: Any) -> None:
        self._write(path, self.env.get_template(template).render(**self._context(**ctx)))

    def write_list(self, page: Page) -> None:
        """Write a list page (paginated where it lists pages) and its RSS feed."""
        template = LIST_TEMPLATES[page.kind]
        if page.kind == "taxonomy":
            self.render(template, url_to_file(self.output_dir, page.url), page=page, pager=None)
        else:
            for pager in paginate(page.pages, self.site.config.paginate, page.url):
                self.render(template, url_to_file(self.output_dir, pager.url), page=page, pager=pager)
        if page.rss_url:
            items = page.pages if page.kind != "taxonomy" else self.site.pages
            self.render("rss.xml", url_to_file(self.output_dir, page.url, "index.xml"), page=page, items=items)

    def write_single(self, page: Page) -> None:
        if page.layout == "archives":
            show_all = self.site.config.param("ShowAllPagesInArchive", False)
            pages = self.site.pages if show_all else [p for p in self.site.pages if p.doc.section in self.site.main_sections]
            self.render("archives.html", url_to_file(self.output_dir, page.url),
                        page=page, archive=archive_groups([p for p in pages if p.layout != "archives"]))
        else:
            self.render("single.html", url_to_file(self.output_dir, page.url), page=page)

    def write_all(self) -> list[Path]:
        self.write_list(self.site.home)
        for section in self.site.sections.values():
            self.write_list(section)
        for page in self.site.pages:
            self.write_single(page)
        for tax_page in self.site.taxonomy_pages.values():
            self.write_list(tax_page)
        for term_page in self.site.term_pages:
            self.write_list(term_page)
        self.render("sitemap.xml", self.output_dir / "sitemap.xml", pages=self.site.all_pages())
        if self.site.config.enable_robots_txt:
            self.render("robots.txt", self.output_dir / "robots.txt")
        return self.written
