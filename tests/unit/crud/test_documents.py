"""Unit tests for crud/documents.py"""

from datetime import datetime

from sqlmodel import select

from notesite.crud.documents import commit_doc, get_by_path, get_tags, list_documents, list_tags, prune_missing
from notesite.crud.tables import Document, DocumentTag, Tag


INDEXED_AT = datetime(2025, 1, 1, 8, 0)


# --- commit_doc ---

def test_commit_doc_creates(session, make_doc):
    """A new path inserts a Document row with its metadata."""
    doc = make_doc("posts/a.md", "A", 2, tags=["GoLang"])
    row, status = commit_doc(session, doc, INDEXED_AT)
    assert status == "created"
    assert row.path == "posts/a.md"
    assert row.section == "posts"
    assert row.title == "A"
    assert row.date == datetime(2024, 1, 2, 12, 0)
    assert row.indexed_at == INDEXED_AT
    assert get_by_path(session, "posts/a.md").id == row.id


def test_commit_doc_unchanged(session, make_doc):
    """Re-committing the same hash is a no-op."""
    doc = make_doc("posts/a.md", "A", 2)
    row, _ = commit_doc(session, doc, INDEXED_AT)
    again, status = commit_doc(session, doc, datetime(2025, 2, 1))
    assert status == "unchanged"
    assert again.id == row.id
    assert again.indexed_at == INDEXED_AT


def test_commit_doc_updates(session, make_doc):
    """A changed hash updates the row in place."""
    row, _ = commit_doc(session, make_doc("posts/a.md", "A", 2), INDEXED_AT)
    edited = make_doc("posts/a.md", "A, revised", 2, draft=True)
    updated, status = commit_doc(session, edited, INDEXED_AT)
    assert status == "updated"
    assert updated.id == row.id
    assert updated.title == "A, revised"
    assert updated.draft is True
    assert len(session.exec(select(Document)).all()) == 1


def test_commit_doc_tags_ordered(session, make_doc):
    """Tags keep front matter order; spelling variants share one Tag row."""
    row, _ = commit_doc(session, make_doc("posts/a.md", "A", 1, tags=["Profiling", "GoLang", "golang"]), INDEXED_AT)
    assert [t.slug for t in get_tags(session, row)] == ["profiling", "golang"]
    commit_doc(session, make_doc("posts/b.md", "B", 2, tags=["golang"]), INDEXED_AT)
    assert session.get(Tag, "golang").name == "GoLang"


def test_commit_doc_replaces_tags(session, make_doc):
    row, _ = commit_doc(session, make_doc("posts/a.md", "A", 1, tags=["GoLang"]), INDEXED_AT)
    commit_doc(session, make_doc("posts/a.md", "A", 1, tags=["Rust"], body="New body\n"), INDEXED_AT)
    assert [t.name for t in get_tags(session, row)] == ["Rust"]


# --- prune_missing ---

def test_prune_missing(session, make_doc):
    """Rows whose path is gone are deleted along with their tag links."""
    commit_doc(session, make_doc("posts/a.md", "A", 1, tags=["GoLang"]), INDEXED_AT)
    commit_doc(session, make_doc("posts/b.md", "B", 2, tags=["GoLang"]), INDEXED_AT)
    assert prune_missing(session, {"posts/a.md"}) == ["posts/b.md"]
    assert get_by_path(session, "posts/b.md") is None
    assert len(session.exec(select(DocumentTag)).all()) == 1


def test_prune_missing_nothing(session, make_doc):
    commit_doc(session, make_doc("posts/a.md", "A", 1), INDEXED_AT)
    assert prune_missing(session, {"posts/a.md"}) == []


# --- listing ---

def _seed(session, make_doc):
    commit_doc(session, make_doc("posts/a.md", "A", 1, tags=["GoLang"]), INDEXED_AT)
    commit_doc(session, make_doc("posts/b.md", "B", 3, tags=["GoLang", "Profiling"], draft=True), INDEXED_AT)
    commit_doc(session, make_doc("notes/c.md", "C", 2), INDEXED_AT)


def test_list_documents_newest_first(session, make_doc):
    _seed(session, make_doc)
    assert [d.title for d in list_documents(session)] == ["B", "C", "A"]


def test_list_documents_filters(session, make_doc):
    _seed(session, make_doc)
    assert [d.title for d in list_documents(session, drafts=False)] == ["C", "A"]
    assert [d.title for d in list_documents(session, drafts=True)] == ["B"]
    assert [d.title for d in list_documents(session, tag="golang")] == ["B", "A"]
    assert [d.title for d in list_documents(session, tag="GoLang", drafts=False)] == ["A"]
    assert [d.title for d in list_documents(session, section="notes")] == ["C"]


def test_list_tags_counts_published(session, make_doc):
    """Counts only include non-draft documents."""
    _seed(session, make_doc)
    assert [(t.name, n) for t, n in list_tags(session)] == [("GoLang", 1), ("Profiling", 0)]


def test_list_tags_drops_tag_of_pruned_document(session, make_doc):
    """A tag whose only document is removed disappears from the tag list."""
    commit_doc(session, make_doc("posts/a.md", "A", 1, tags=["Profiling"]), INDEXED_AT)
    prune_missing(session, set())
    assert list_tags(session) == []
    assert session.get(Tag, "profiling") is None


def test_retagging_drops_unused_tag(session, make_doc):
    commit_doc(session, make_doc("posts/a.md", "A", 1, tags=["GoLang"]), INDEXED_AT)
    commit_doc(session, make_doc("posts/a.md", "A", 1, tags=["Rust"], body="New body\n"), INDEXED_AT)
    assert [t.name for t, _ in list_tags(session)] == ["Rust"]


def test_tag_respelled_after_last_use(session, make_doc):
    """Once its last link is gone, a tag takes the next spelling it is given."""
    commit_doc(session, make_doc("posts/a.md", "A", 1, tags=["golang"]), INDEXED_AT)
    prune_missing(session, set())
    commit_doc(session, make_doc("posts/b.md", "B", 2, tags=["GoLang"]), INDEXED_AT)
    assert session.get(Tag, "golang").name == "GoLang"
