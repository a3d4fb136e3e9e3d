"""SQLAlchemy models."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class Repository(Base):
    """Indexed repository root."""

    __tablename__ = "repositories"

    id = Column(Integer, primary_key=True, index=True)
    root_path = Column(String(1024), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    last_indexed_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    files = relationship("SourceFile", back_populates="repository", cascade="all, delete-orphan")


class SourceFile(Base):
    """One file per (repository, path) with the hash of its last indexed content."""

    __tablename__ = "files"
    __table_args__ = (UniqueConstraint("repository_id", "path", name="uq_files_repository_path"),)

    id = Column(Integer, primary_key=True, index=True)
    repository_id = Column(Integer, ForeignKey("repositories.id", ondelete="CASCADE"), nullable=False, index=True)
    path = Column(String(1024), nullable=False)
    content_hash = Column(String(64), nullable=False, default="")
    language = Column(String(64), nullable=False, default="text")
    content = Column(Text, nullable=False, default="")
    indexed_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    repository = relationship("Repository", back_populates="files")
    chunks = relationship("CodeChunk", back_populates="file", cascade="all, delete-orphan")


class CodeChunk(Base):
    """Embedded chunk of a file; embedding is little-endian float32 bytes."""

    __tablename__ = "chunks"
    __table_args__ = (
        UniqueConstraint("file_id", "chunk_index", name="uq_chunks_file_index"),
        Index("ix_chunks_repository_path", "repository_id", "path"),
    )

    id = Column(Integer, primary_key=True, index=True)
    file_id = Column(Integer, ForeignKey("files.id", ondelete="CASCADE"), nullable=False, index=True)
    repository_id = Column(Integer, ForeignKey("repositories.id", ondelete="CASCADE"), nullable=False)
    path = Column(String(1024), nullable=False)
    chunk_index = Column(Integer, nullable=False)
    extension = Column(String(32), nullable=False, default="")
    language = Column(String(64), nullable=False, default="text")
    content = Column(Text, nullable=False)
    file_hash = Column(String(64), nullable=False)
    embedding = Column(LargeBinary, nullable=False, default=b"")

    file = relationship("SourceFile", back_populates="chunks")
