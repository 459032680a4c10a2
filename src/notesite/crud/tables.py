"""Content index tables: documents, tags and their ordered links"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime, String, Text
from sqlmodel import Field, SQLModel


class Document(SQLModel, table=True):
    """One indexed content file; the file on disk stays the source of truth"""
    __tablename__ = "documents"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    path: str = Field(..., sa_column=Column(Text, nullable=False, unique=True))
    slug: str = Field(..., index=True, nullable=False)
    section: str = Field(default="", index=True, nullable=False)
    title: str = Field(..., sa_column=Column(Text, nullable=False))
    date: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=False), nullable=True))
    draft: bool = Field(default=False, nullable=False)
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    indexed_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class Tag(SQLModel, table=True):
    """A tag term keyed by its URL slug; name keeps the first spelling seen"""
    __tablename__ = "tags"
    slug: str = Field(primary_key=True)
    name: str = Field(..., nullable=False)


class DocumentTag(SQLModel, table=True):
    """Ordered many-to-many link between documents and tags"""
    __tablename__ = "document_tags"
    document_id: UUID = Field(foreign_key="documents.id", primary_key=True)
    tag_slug: str = Field(foreign_key="tags.slug", primary_key=True)
    position: int = Field(default=0, nullable=False)
