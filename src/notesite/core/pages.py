"""Site assembly: published selection, page kinds, URLs, pagination and menus"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from notesite.core.models import ContentDoc
from notesite.core.render import RenderedDoc, render_doc
from notesite.core.site import MenuEntry, SiteConfig
from notesite.core.taxonomy import Taxonomy, Term, build_taxonomies, sort_pages, term_slug


logger = logging.getLogger(__name__)


@dataclass
class Link:
    title: str
    url:   str


@dataclass
class Pager:
    number:   int
    total:    int
    url:      str
    pages:    list["Page"]
    prev_url: Optional[str] = None
    next_url: Optional[str] = None


@dataclass
class Page:
    """Everything a template needs to render one output page."""
    kind:        str                        # home | section | page | taxonomy | term
    title:       str
    url:         str
    doc:         Optional[ContentDoc] = None
    rendered:    Optional[RenderedDoc] = None
    intro:       Optional[RenderedDoc] = None      # _index.md of a list page
    pages:       list["Page"] = field(default_factory=list)
    terms:       list[tuple[Term, str]] = field(default_factory=list)
    tags:        list[Link] = field(default_factory=list)
    breadcrumbs: list[Link] = field(default_factory=list)
    newer:       Optional["Page"] = None
    older:       Optional["Page"] = None
    outputs:     list[str] = field(default_factory=lambda: ["HTML"])

    @property
    def date(self) -> Optional[datetime]:
        return self.doc.date if self.doc else None

    @property
    def layout(self) -> Optional[str]:
        return self.doc.layout if self.doc else None

    @property
    def rss_url(self) -> Optional[str]:
        return f"{self.url}index.xml" if "RSS" in self.outputs else None


@dataclass
class SiteModel:
    config:        SiteConfig
    home:          Page
    pages:         list[Page]                   # regular pages, display order
    sections:      dict[str, Page]
    taxonomies:    dict[str, Taxonomy]
    taxonomy_pages: dict[str, Page]
    term_pages:    list[Page]
    main_sections: list[str]
    menu:          list[MenuEntry]

    def all_pages(self) -> list[Page]:
        """Every page that gets an HTML file, home first."""
        return [self.home, *self.sections.values(), *self.pages,
                *self.taxonomy_pages.values(), *self.term_pages]

    def urls(self) -> set[str]:
        return {p.url for p in self.all_pages()}


def select_published(site: SiteConfig, docs: list[ContentDoc], now: datetime) -> list[ContentDoc]:
    """Drop drafts and future-dated documents unless the site builds them."""
    published = []
    for doc in docs:
        if doc.draft and not site.build_drafts:
            logger.debug("Skipping draft %s", doc.path)
            continue
        if doc.date is not None and doc.date > now and not site.build_future:
            logger.debug("Skipping future-dated %s", doc.path)
            continue
        published.append(doc)
    return published


def normalize_url(url: str) -> str:
    """Turn 'posts', 'tags/' or '/posts' into '/posts/'; files like index.xml keep no trailing slash."""
    url = url.strip()
    if not url.startswith('/'):
        url = '/' + url
    last = url.rsplit('/', 1)[-1]
    if last and '.' not in last:
        url += '/'
    return url


def is_external(url: str) -> bool:
    return url.startswith(('http://', 'https://', 'mailto:', '//'))


def resolve_main_sections(site: SiteConfig, docs: list[ContentDoc]) -> list[str]:
    """Configured mainsections, else the section holding the most regular pages."""
    if site.main_sections:
        return list(site.main_sections)
    counts = Counter(d.section for d in docs if d.section and not d.is_list_page)
    if not counts:
        return []
    return [min(counts.items(), key=lambda kv: (-kv[1], kv[0]))[0]]


def paginate(pages: list[Page], size: int, base_url: str) -> list[Pager]:
    """Split pages into pagers; pager 1 lives at base_url, pager N at base_url/page/N/."""
    chunks = [pages[i:i + size] for i in range(0, len(pages), size)] or [[]]
    total = len(chunks)

    def _url(n: int) -> str:
        return base_url if n == 1 else f"{base_url}page/{n}/"

    return [
        Pager(
            number=n,
            total=total,
            url=_url(n),
            pages=chunk,
            prev_url=_url(n - 1) if n > 1 else None,
            next_url=_url(n + 1) if n < total else None,
        )
        for n, chunk in enumerate(chunks, start=1)
    ]


def _section_title(name: str) -> str:
    return name.replace('-', ' ').replace('_', ' ').title()


def assemble_site(site: SiteConfig, docs: list[ContentDoc], preset: str = 'gfm-like') -> SiteModel:
    """Render published documents and arrange them into the site's page tree."""
    list_docs = {d.parent_dir: d for d in docs if d.is_list_page}
    for nested in [k for k in list_docs if '/' in k]:
        logger.warning("Not rendering nested section intro %s", list_docs.pop(nested).path)
    regular = sort_pages([d for d in docs if not d.is_list_page])
    taxonomies = build_taxonomies(site, regular)

    home_doc = list_docs.get("")
    home = Page(
        kind="home",
        title=site.title,
        url="/",
        doc=home_doc,
        intro=render_doc(home_doc, preset) if home_doc else None,
        outputs=site.output_formats("home"),
    )

    sections: dict[str, Page] = {}
    for name in sorted({d.section for d in regular if d.section} | {k.split('/')[0] for k in list_docs if k}):
        intro_doc = list_docs.get(name)
        sections[name] = Page(
            kind="section",
            title=intro_doc.title if intro_doc else _section_title(name),
            url=f"/{name}/",
            doc=intro_doc,
            intro=render_doc(intro_doc, preset) if intro_doc else None,
            breadcrumbs=[Link(site.title or "Home", "/")],
            outputs=site.output_formats("section"),
        )

    term_links: dict[str, dict[str, Link]] = {}
    for plural, tax in taxonomies.items():
        term_links[plural] = {t.slug: Link(t.name, tax.term_url(t)) for t in tax.terms.values()}

    pages: list[Page] = []
    by_path: dict[str, Page] = {}
    for doc in regular:
        crumbs = [Link(site.title or "Home", "/")]
        if doc.section in sections:
            crumbs.append(Link(sections[doc.section].title, sections[doc.section].url))
        page = Page(
            kind="page",
            title=doc.title,
            url=doc.url,
            doc=doc,
            rendered=render_doc(doc, preset),
            tags=[term_links["tags"][s] for s in dict.fromkeys(map(term_slug, doc.tags))]
                 if "tags" in term_links else [],
            breadcrumbs=crumbs,
            outputs=site.output_formats("page"),
        )
        pages.append(page)
        by_path[doc.path] = page

    for name, section in sections.items():
        section.pages = [p for p in pages if p.doc.section == name]
        for newer, older in zip(section.pages, section.pages[1:]):
            newer.older, older.newer = older, newer

    main = resolve_main_sections(site, regular)
    home.pages = [p for p in pages if p.doc.section in main]

    taxonomy_pages: dict[str, Page] = {}
    term_pages: list[Page] = []
    for plural, tax in taxonomies.items():
        tax_page = Page(
            kind="taxonomy",
            title=_section_title(plural),
            url=tax.url,
            terms=[(t, tax.term_url(t)) for t in tax.sorted_terms()],
            breadcrumbs=[Link(site.title or "Home", "/")],
            outputs=site.output_formats("taxonomy"),
        )
        taxonomy_pages[plural] = tax_page
        for term in tax.sorted_terms():
            term_pages.append(Page(
                kind="term",
                title=term.name,
                url=tax.term_url(term),
                pages=[by_path[d.path] for d in term.pages],
                breadcrumbs=[Link(site.title or "Home", "/"), Link(tax_page.title, tax_page.url)],
                outputs=site.output_formats("term"),
            ))

    logger.info("Assembled %d pages, %d sections, %d terms", len(pages), len(sections), len(term_pages))
    return SiteModel(
        config=site,
        home=home,
        pages=pages,
        sections=sections,
        taxonomies=taxonomies,
        taxonomy_pages=taxonomy_pages,
        term_pages=term_pages,
        main_sections=main,
        menu=site.menu_entries("main"),
    )
