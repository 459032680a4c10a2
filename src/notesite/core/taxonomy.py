"""Page ordering and taxonomy term indexes"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from urllib.parse import quote

from notesite.core.models import ContentDoc
from notesite.core.site import SiteConfig
from notesite.core.utils.slug import slugify


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class Term:
    name:  str
    slug:  str
    pages: list[ContentDoc] = field(default_factory=list)


@dataclass
class Taxonomy:
    singular: str
    plural:   str
    terms:    dict[str, Term] = field(default_factory=dict)     # keyed by term slug

    @property
    def url(self) -> str:
        return f"/{self.plural}/"

    def term_url(self, term: Term) -> str:
        return f"/{self.plural}/{quote(term.slug, safe='+')}/"

    def sorted_terms(self) -> list[Term]:
        return sorted(self.terms.values(), key=lambda t: (t.name.lower(), t.slug))


def _page_key(doc: ContentDoc) -> tuple:
    """weight asc (0 = unset, last), date desc, title, path."""
    ts = (doc.date or _EPOCH).timestamp()
    return (doc.weight == 0, doc.weight, -ts, doc.title, doc.path)


def sort_pages(pages: list[ContentDoc]) -> list[ContentDoc]:
    """Return pages in the site's default display order."""
    return sorted(pages, key=_page_key)


def term_slug(name: str) -> str:
    """URL segment for a term; '+' and '#' are kept so C, C++ and C# stay apart."""
    return slugify(name, keep='+#') or name.lower()


def build_taxonomies(site: SiteConfig, docs: list[ContentDoc]) -> dict[str, Taxonomy]:
    """Index regular pages by each configured taxonomy; returns plural -> Taxonomy."""
    result: dict[str, Taxonomy] = {}
    for singular, plural in site.effective_taxonomies().items():
        tax = Taxonomy(singular=singular, plural=plural)
        for doc in docs:
            if doc.is_list_page:
                continue
            for name in doc.terms(plural):
                slug = term_slug(name)
                term = tax.terms.setdefault(slug, Term(name=name, slug=slug))
                if doc not in term.pages:
                    term.pages.append(doc)
        for term in tax.terms.values():
            term.pages = sort_pages(term.pages)
        result[plural] = tax
    return result
