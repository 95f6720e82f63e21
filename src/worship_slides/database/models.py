"""SQLAlchemy database models for the song catalogue."""

from datetime import datetime
from typing import List

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class Song(Base):
    """A song identified by its letter code and order number (e.g. C3)."""

    __tablename__ = "songs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)

    # Composite key: code is stored uppercase, order starts at 1
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    order: Mapped[int] = mapped_column("order", Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    slides: Mapped[List["Slide"]] = relationship(
        "Slide",
        back_populates="song",
        cascade="all, delete-orphan",
        order_by="Slide.slide_number",
    )
    song_tags: Mapped[List["SongTag"]] = relationship(
        "SongTag", back_populates="song", cascade="all, delete-orphan"
    )

    __table_args__ = (
        UniqueConstraint("code", "order", name="uq_song_code_order"),
        Index("idx_song_code", "code"),
    )

    @property
    def display_code(self) -> str:
        """Code and order joined, e.g. ``C3``."""
        return f"{self.code}{self.order}"

    def __repr__(self) -> str:
        """String representation of Song."""
        return f"<Song(id={self.id}, code='{self.display_code}', title='{self.title}')>"


class Slide(Base):
    """One slide of a song. Slide 1 is the title, the rest are lyrics."""

    __tablename__ = "slides"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    song_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("songs.id", ondelete="CASCADE"), nullable=False
    )
    slide_number: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    song: Mapped["Song"] = relationship("Song", back_populates="slides")

    __table_args__ = (
        UniqueConstraint("song_id", "slide_number", name="uq_slide_song_number"),
        Index("idx_slide_song", "song_id"),
    )

    def __repr__(self) -> str:
        """String representation of Slide."""
        return (
            f"<Slide(id={self.id}, song_id={self.song_id}, "
            f"slide_number={self.slide_number})>"
        )


class Tag(Base):
    """A tag shared between songs.

    Tag names are matched case-insensitively through ``normalized_name``.
    """

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    normalized_name: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False, index=True
    )

    song_tags: Mapped[List["SongTag"]] = relationship(
        "SongTag", back_populates="tag", cascade="all, delete-orphan"
    )

    @staticmethod
    def normalize(name: str) -> str:
        """Return the lookup key for a tag name."""
        return name.strip().casefold()

    def __repr__(self) -> str:
        """String representation of Tag."""
        return f"<Tag(id={self.id}, name='{self.name}')>"


class SongTag(Base):
    """Many-to-many relationship between songs and tags."""

    __tablename__ = "song_tags"

    song_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("songs.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True
    )

    song: Mapped["Song"] = relationship("Song", back_populates="song_tags")
    tag: Mapped["Tag"] = relationship("Tag", back_populates="song_tags")

    __table_args__ = (Index("idx_song_tag_tag", "tag_id"),)

    def __repr__(self) -> str:
        """String representation of SongTag."""
        return f"<SongTag(song_id={self.song_id}, tag_id={self.tag_id})>"
