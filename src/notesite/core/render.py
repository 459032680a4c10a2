"""Markdown rendering with markdown-it: HTML, heading anchors, TOC, word count, summary"""

import math
from dataclasses import dataclass, field
from functools import lru_cache

from markdown_it import MarkdownIt

from notesite.core.models import ContentDoc
from notesite.core.utils.slug import unique_slug


WORDS_PER_MINUTE = 213
SUMMARY_WORDS = 70
TOC_LEVELS = range(2, 5)


@dataclass
class TocEntry:
    level: int
    title: str
    anchor: str


@dataclass
class RenderedDoc:
    """A ContentDoc plus everything the templates derive from its body."""
    doc:          ContentDoc
    content:      str                                   # HTML
    toc:          list[TocEntry] = field(default_factory=list)
    word_count:   int = 0
    reading_time: int = 0
    summary:      str = ""


@lru_cache(maxsize=None)
def make_parser(preset: str = 'gfm-like') -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def _inline_text(token) -> str:
    """Plain text of an inline token, markup dropped."""
    if not token.children:
        return token.content
    return ''.join(c.content for c in token.children if c.type in ('text', 'code_inline'))


def _add_heading_ids(tokens: list) -> list[TocEntry]:
    """Set an id on every heading and return TOC entries for h2-h4."""
    seen: dict[str, int] = {}
    toc = []
    for i, tok in enumerate(tokens):
        if tok.type != 'heading_open':
            continue
        title = _inline_text(tokens[i + 1])
        anchor = unique_slug(title, seen)
        tok.attrSet('id', anchor)
        level = int(tok.tag[1:])
        if level in TOC_LEVELS:
            toc.append(TocEntry(level=level, title=title, anchor=anchor))
    return toc


def plain_text(tokens: list) -> str:
    """Concatenate inline text and code block contents."""
    parts = []
    for tok in tokens:
        if tok.type == 'inline':
            parts.append(_inline_text(tok))
        elif tok.type in ('fence', 'code_block'):
            parts.append(tok.content)
    return '\n'.join(parts)


def word_count(text: str) -> int:
    return len(text.split())


def reading_time(words: int) -> int:
    """Minutes to read, rounded up; never below one."""
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


def first_paragraph(tokens: list) -> str:
    for i, tok in enumerate(tokens):
        if tok.type == 'paragraph_open' and i + 1 < len(tokens):
            text = _inline_text(tokens[i + 1]).strip()
            if text:
                return text
    return ""


def truncate_words(text: str, limit: int = SUMMARY_WORDS) -> str:
    words = text.split()
    if len(words) <= limit:
        return ' '.join(words)
    return ' '.join(words[:limit]) + '…'


def render_markdown(text: str, preset: str = 'gfm-like') -> str:
    """Render a Markdown string to HTML without any document bookkeeping."""
    return make_parser(preset).render(text)


def markdownify(text: str, preset: str = 'gfm-like') -> str:
    """Render inline Markdown (no wrapping <p>)."""
    return make_parser(preset).renderInline(text or "")


def render_doc(doc: ContentDoc, preset: str = 'gfm-like') -> RenderedDoc:
    """Render a document body and compute its reading metadata."""
    md = make_parser(preset)
    env: dict = {}
    tokens = md.parse(doc.body, env)
    toc = _add_heading_ids(tokens)
    words = word_count(plain_text(tokens))
    return RenderedDoc(
        doc=doc,
        content=md.renderer.render(tokens, md.options, env),
        toc=toc,
        word_count=words,
        reading_time=reading_time(words),
        summary=doc.summary or truncate_words(first_paragraph(tokens)),
    )
