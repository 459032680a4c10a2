"""Document index persistence: upsert, tag replacement, pruning and listing"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, col, select

from notesite.core.models import ContentDoc
from notesite.core.taxonomy import term_slug
from notesite.crud.tables import Document, DocumentTag, Tag


def _utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite keeps no offsets; store UTC wall time."""
    if value is None:
        return None
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def get_by_path(session: Session, path: str) -> Document | None:
    """Return the Document with the given content path, or None if not found."""
    return session.exec(select(Document).where(Document.path == path)).one_or_none()


def get_tags(session: Session, document: Document) -> list[Tag]:
    """Return a document's tags in front matter order."""
    rows = session.exec(
        select(Tag, DocumentTag)
        .where(DocumentTag.document_id == document.id)
        .where(DocumentTag.tag_slug == Tag.slug)
        .order_by(DocumentTag.position)
    ).all()
    return [tag for tag, _ in rows]


def _prune_tags(session: Session) -> None:
    """Delete tags no document links to any more."""
    linked = select(DocumentTag.tag_slug)
    for tag in session.exec(select(Tag).where(col(Tag.slug).not_in(linked))).all():
        session.delete(tag)
    session.flush()


def _replace_tags(session: Session, doc_id, tags: list[str]) -> None:
    """Delete existing tag links for a document and insert new ones in order."""
    for row in session.exec(select(DocumentTag).where(DocumentTag.document_id == doc_id)).all():
        session.delete(row)
    session.flush()

    for position, slug in enumerate(dict.fromkeys(term_slug(t) for t in tags)):
        if not session.get(Tag, slug):
            name = next(t for t in tags if term_slug(t) == slug)
            session.add(Tag(slug=slug, name=name))
            session.flush()
        session.add(DocumentTag(document_id=doc_id, tag_slug=slug, position=position))
    session.flush()
    _prune_tags(session)


def commit_doc(
    session: Session,
    doc: ContentDoc,
    indexed_at: datetime | None = None,
    ) -> tuple[Document, str]:
    """Upsert one parsed document.

    Returns (row, status) where status is 'created', 'updated', or 'unchanged'.
    Flushes but does not commit; caller controls the transaction.
    """
    indexed_at = indexed_at or datetime.now()
    row = get_by_path(session, doc.path)

    if row:
        if row.hash == doc.hash:
            return row, 'unchanged'
        status = 'updated'
    else:
        row = Document(path=doc.path, slug=doc.slug, title=doc.title, hash=doc.hash)
        status = 'created'

    row.slug = doc.slug
    row.section = doc.section
    row.title = doc.title
    row.date = _utc_naive(doc.date)
    row.draft = doc.draft
    row.hash = doc.hash
    row.indexed_at = indexed_at
    session.add(row)
    session.flush()
    _replace_tags(session, row.id, doc.tags)
    return row, status


def prune_missing(session: Session, keep_paths: set[str]) -> list[str]:
    """Delete indexed documents whose path is not in keep_paths. Returns removed paths."""
    removed = []
    for row in session.exec(select(Document)).all():
        if row.path in keep_paths:
            continue
        for link in session.exec(select(DocumentTag).where(DocumentTag.document_id == row.id)).all():
            session.delete(link)
        session.delete(row)
        removed.append(row.path)
    session.flush()
    _prune_tags(session)
    return sorted(removed)


def list_documents(
    session: Session,
    drafts: Optional[bool] = None,
    tag: Optional[str] = None,
    section: Optional[str] = None,
    ) -> list[Document]:
    """Indexed documents newest first, optionally filtered by draft flag, tag or section."""
    query = select(Document)
    if drafts is not None:
        query = query.where(Document.draft == drafts)
    if section is not None:
        query = query.where(Document.section == section)
    if tag is not None:
        query = query.where(col(Document.id).in_(
            select(DocumentTag.document_id).where(DocumentTag.tag_slug == term_slug(tag))
        ))
    rows = session.exec(query).all()
    return sorted(rows, key=lambda d: (d.date or datetime.min, d.path), reverse=True)


def list_tags(session: Session) -> list[tuple[Tag, int]]:
    """Every tag with its count of published (non-draft) documents, by name."""
    counts = dict(session.exec(
        select(DocumentTag.tag_slug, func.count(DocumentTag.document_id))
        .join(Document, Document.id == DocumentTag.document_id)
        .where(Document.draft == False)  # noqa: E712
        .group_by(DocumentTag.tag_slug)
    ).all())
    tags = session.exec(select(Tag)).all()
    return sorted(((t, counts.get(t.slug, 0)) for t in tags), key=lambda tc: tc[0].name.lower())
