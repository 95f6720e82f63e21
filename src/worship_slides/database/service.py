"""Database service for the song catalogue."""

import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence

from sqlalchemy import create_engine, delete, event, func, inspect, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from alembic import command  # type: ignore[attr-defined]
from alembic.config import Config as AlembicConfig  # type: ignore[import-not-found]

from .models import Base, Slide, Song, SongTag, Tag

logger = logging.getLogger(__name__)

SONG_CODE_PATTERN = re.compile(r"^([a-zA-Z]+)(\d+)$")


@dataclass
class PresentationSlide:
    """A slide joined with the song it belongs to."""

    song_id: int
    song_title: str
    song_code: str
    song_order: int
    slide_number: int
    content: str


def parse_song_code(song_code: str) -> Optional[tuple[str, int]]:
    """Split a song code such as ``c5`` into ``("C", 5)``.

    Returns:
        (code, order) tuple, or None if the text is not a song code
    """
    match = SONG_CODE_PATTERN.match(song_code.strip())
    if not match:
        return None
    return match.group(1).upper(), int(match.group(2))


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseService:
    """Service for catalogue database operations and transaction management.

    Every operation accepts an optional ``session``. Without one the operation
    runs in its own session and commits. With one it only flushes, so several
    operations can be grouped into a single unit of work via ``transaction()``.
    """

    def __init__(self, db_path: Optional[Path] = None) -> None:
        """Initialize database service.

        Args:
            db_path: Path to SQLite database file.
                    If None, uses default ~/.worship-slides/worship.db
        """
        if db_path is None:
            db_path = Path.home() / ".worship-slides" / "worship.db"

        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        # Check if database exists before creating engine
        db_exists = self.db_path.exists()

        db_url = f"sqlite:///{self.db_path}"
        self.engine: Engine = create_engine(db_url, echo=False)
        event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        # Objects stay usable after their session closes
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine,
        )

        logger.info("Database initialized at: %s", self.db_path)

        if not db_exists:
            logger.info("New database detected, initializing schema...")
            self.init_db()

    def init_db(self) -> None:
        """Initialize database schema.

        This creates the tables using SQLAlchemy and then stamps Alembic to mark
        the database as current.
        """
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema created successfully")
        self._stamp_migrations()

    def _alembic_config(self) -> Optional[AlembicConfig]:
        # alembic.ini and alembic/ live in the project root, four levels up
        project_dir = Path(__file__).parent.parent.parent.parent
        alembic_ini = project_dir / "alembic.ini"
        alembic_dir = project_dir / "alembic"

        if not alembic_ini.exists() or not alembic_dir.exists():
            logger.warning("Alembic not found at %s, skipping", project_dir)
            return None

        alembic_cfg = AlembicConfig(str(alembic_ini))
        alembic_cfg.set_main_option("script_location", str(alembic_dir))
        alembic_cfg.set_main_option("sqlalchemy.url", f"sqlite:///{self.db_path}")
        return alembic_cfg

    def _stamp_migrations(self) -> None:
        """Stamp database as being at the latest migration version."""
        try:
            alembic_cfg = self._alembic_config()
            if alembic_cfg is None:
                return
            command.stamp(alembic_cfg, "head")
            logger.info("Database stamped with latest migration version")
        except Exception as e:
            logger.error("Failed to stamp migrations: %s", e)
            logger.warning("Database may need manual migration")

    def run_migrations(self) -> bool:
        """Run Alembic migrations to upgrade database to latest version.

        Returns:
            True if migrations ran, False if Alembic is not available
        """
        alembic_cfg = self._alembic_config()
        if alembic_cfg is None:
            return False
        command.upgrade(alembic_cfg, "head")
        logger.info("Database migrations applied successfully")
        return True

    def get_session(self) -> Session:
        """Get a new database session.

        Note:
            Caller is responsible for closing the session
        """
        return self.SessionLocal()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Open a session that commits on success and rolls back on error."""
        with self.get_session() as session:
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise

    @contextmanager
    def _session_scope(self, session: Optional[Session]) -> Iterator[Session]:
        if session is not None:
            yield session
            session.flush()
            return
        with self.transaction() as own_session:
            yield own_session

    def is_initialized(self) -> bool:
        """Check that the engine is connected and the catalogue tables exist."""
        try:
            inspector = inspect(self.engine)
            missing = [
                table
                for table in ("songs", "slides", "tags", "song_tags")
                if not inspector.has_table(table)
            ]
            if missing:
                logger.debug("Required tables missing: %s", missing)
                return False

            with self.SessionLocal() as session:
                session.execute(select(1))
            return True
        except Exception as e:
            logger.debug("Database initialization check failed: %s", e)
            return False

    # =========================================================================
    # Song Operations
    # =========================================================================

    def create_song(
        self,
        title: str,
        code: str,
        order: int,
        session: Optional[Session] = None,
    ) -> Song:
        """Create a new song. The code is stored uppercase.

        Raises:
            sqlalchemy.exc.IntegrityError: if (code, order) already exists
        """
        with self._session_scope(session) as s:
            song = Song(title=title, code=code.upper(), order=order)
            s.add(song)
            s.flush()
            logger.info(
                "Created song: %s - %s (ID: %s)", song.display_code, title, song.id
            )
            return song

    def get_song_by_code_order(
        self, code: str, order: int, session: Optional[Session] = None
    ) -> Optional[Song]:
        """Get song by its composite key. The code is matched case-insensitively."""
        with self._session_scope(session) as s:
            stmt = select(Song).where(Song.code == code.upper(), Song.order == order)
            return s.scalar(stmt)

    def get_song_by_id(
        self, song_id: int, session: Optional[Session] = None
    ) -> Optional[Song]:
        """Get song by database ID."""
        with self._session_scope(session) as s:
            return s.get(Song, song_id)

    def get_all_songs(self, session: Optional[Session] = None) -> List[Song]:
        """Get all songs ordered by code, then order."""
        with self._session_scope(session) as s:
            stmt = select(Song).order_by(Song.code, Song.order)
            return list(s.scalars(stmt).all())

    def get_max_order_by_code(
        self, code: str, session: Optional[Session] = None
    ) -> int:
        """Get the highest order number used by a code (0 if unused)."""
        with self._session_scope(session) as s:
            stmt = select(func.max(Song.order)).where(Song.code == code.upper())
            return s.scalar(stmt) or 0

    def update_song(
        self,
        song_id: int,
        title: str,
        code: str,
        order: int,
        session: Optional[Session] = None,
    ) -> bool:
        """Update title, code and order of a song.

        Returns:
            True if the song existed and was updated
        """
        with self._session_scope(session) as s:
            song = s.get(Song, song_id)
            if not song:
                logger.warning("Song not found for update: %s", song_id)
                return False
            song.title = title
            song.code = code.upper()
            song.order = order
            logger.debug("Updated song: %s", song.display_code)
            return True

    def update_song_title(
        self, song_id: int, title: str, session: Optional[Session] = None
    ) -> bool:
        """Update only the title of a song."""
        with self._session_scope(session) as s:
            song = s.get(Song, song_id)
            if not song:
                logger.warning("Song not found for title update: %s", song_id)
                return False
            song.title = title
            return True

    def delete_song(self, song_id: int, session: Optional[Session] = None) -> bool:
        """Delete a song together with its slides and tag associations."""
        with self._session_scope(session) as s:
            song = s.get(Song, song_id)
            if not song:
                logger.warning("Song not found for deletion: %s", song_id)
                return False
            s.delete(song)
            logger.info("Deleted song: %s", song.display_code)
            return True

    # =========================================================================
    # Slide Operations
    # =========================================================================

    def create_slide(
        self,
        song_id: int,
        slide_number: int,
        content: str,
        session: Optional[Session] = None,
    ) -> Slide:
        """Create a slide for a song."""
        with self._session_scope(session) as s:
            slide = Slide(song_id=song_id, slide_number=slide_number, content=content)
            s.add(slide)
            s.flush()
            return slide

    def get_slides_by_song_id(
        self, song_id: int, session: Optional[Session] = None
    ) -> List[Slide]:
        """Get all slides of a song ordered by slide number."""
        with self._session_scope(session) as s:
            stmt = (
                select(Slide)
                .where(Slide.song_id == song_id)
                .order_by(Slide.slide_number)
            )
            return list(s.scalars(stmt).all())

    def update_slide(
        self, slide_id: int, content: str, session: Optional[Session] = None
    ) -> bool:
        """Replace the content of one slide."""
        with self._session_scope(session) as s:
            slide = s.get(Slide, slide_id)
            if not slide:
                return False
            slide.content = content
            return True

    def delete_slide(self, slide_id: int, session: Optional[Session] = None) -> bool:
        """Delete one slide."""
        with self._session_scope(session) as s:
            slide = s.get(Slide, slide_id)
            if not slide:
                return False
            s.delete(slide)
            return True

    def delete_slides_by_song_id(
        self, song_id: int, session: Optional[Session] = None
    ) -> int:
        """Delete every slide of a song.

        Returns:
            Number of slides deleted
        """
        with self._session_scope(session) as s:
            result = s.execute(delete(Slide).where(Slide.song_id == song_id))
            return result.rowcount or 0

    # =========================================================================
    # Tag Operations
    # =========================================================================

    def create_tag(self, name: str, session: Optional[Session] = None) -> Tag:
        """Create a tag.

        Raises:
            ValueError: if the name is blank
            sqlalchemy.exc.IntegrityError: if the name already exists
        """
        clean_name = name.strip()
        if not clean_name:
            raise ValueError("Tag name cannot be empty")

        with self._session_scope(session) as s:
            tag = Tag(name=clean_name, normalized_name=Tag.normalize(clean_name))
            s.add(tag)
            s.flush()
            logger.info("Created tag: %s (ID: %s)", tag.name, tag.id)
            return tag

    def get_all_tags(self, session: Optional[Session] = None) -> List[Tag]:
        """Get all tags ordered by name."""
        with self._session_scope(session) as s:
            stmt = select(Tag).order_by(Tag.name)
            return list(s.scalars(stmt).all())

    def get_tag_by_id(
        self, tag_id: int, session: Optional[Session] = None
    ) -> Optional[Tag]:
        """Get tag by database ID."""
        with self._session_scope(session) as s:
            return s.get(Tag, tag_id)

    def get_tag_by_name(
        self, name: str, session: Optional[Session] = None
    ) -> Optional[Tag]:
        """Get tag by name, ignoring case and surrounding whitespace."""
        with self._session_scope(session) as s:
            stmt = select(Tag).where(Tag.normalized_name == Tag.normalize(name))
            return s.scalar(stmt)

    def find_or_create_tag(self, name: str, session: Optional[Session] = None) -> Tag:
        """Return the tag with this name, creating it when absent.

        The same tag (and id) is returned for repeated calls.
        """
        with self._session_scope(session) as s:
            tag = self.get_tag_by_name(name, session=s)
            if tag is None:
                tag = self.create_tag(name, session=s)
            return tag

    def update_tag(
        self, tag_id: int, name: str, session: Optional[Session] = None
    ) -> bool:
        """Rename a tag."""
        clean_name = name.strip()
        if not clean_name:
            raise ValueError("Tag name cannot be empty")

        with self._session_scope(session) as s:
            tag = s.get(Tag, tag_id)
            if not tag:
                return False
            tag.name = clean_name
            tag.normalized_name = Tag.normalize(clean_name)
            return True

    def delete_tag(self, tag_id: int, session: Optional[Session] = None) -> bool:
        """Delete a tag and detach it from every song."""
        with self._session_scope(session) as s:
            tag = s.get(Tag, tag_id)
            if not tag:
                return False
            s.delete(tag)
            logger.info("Deleted tag: %s", tag.name)
            return True

    # =========================================================================
    # Song-Tag Relationship Operations
    # =========================================================================

    def add_tag_to_song(
        self, song_id: int, tag_id: int, session: Optional[Session] = None
    ) -> bool:
        """Attach a tag to a song.

        Returns:
            False if the tag was already attached
        """
        with self._session_scope(session) as s:
            if s.get(SongTag, (song_id, tag_id)) is not None:
                return False
            s.add(SongTag(song_id=song_id, tag_id=tag_id))
            return True

    def remove_tag_from_song(
        self, song_id: int, tag_id: int, session: Optional[Session] = None
    ) -> bool:
        """Detach a tag from a song."""
        with self._session_scope(session) as s:
            song_tag = s.get(SongTag, (song_id, tag_id))
            if song_tag is None:
                return False
            s.delete(song_tag)
            return True

    def get_tags_by_song_id(
        self, song_id: int, session: Optional[Session] = None
    ) -> List[Tag]:
        """Get the tags attached to a song ordered by name."""
        with self._session_scope(session) as s:
            stmt = (
                select(Tag)
                .join(SongTag, SongTag.tag_id == Tag.id)
                .where(SongTag.song_id == song_id)
                .order_by(Tag.name)
            )
            return list(s.scalars(stmt).all())

    def get_songs_by_tag_id(
        self, tag_id: int, session: Optional[Session] = None
    ) -> List[Song]:
        """Get the songs carrying a tag ordered by code, then order."""
        with self._session_scope(session) as s:
            stmt = (
                select(Song)
                .join(SongTag, SongTag.song_id == Song.id)
                .where(SongTag.tag_id == tag_id)
                .order_by(Song.code, Song.order)
            )
            return list(s.scalars(stmt).all())

    def set_tags_for_song(
        self,
        song_id: int,
        tag_ids: Sequence[int],
        session: Optional[Session] = None,
    ) -> None:
        """Replace the whole tag set of a song with ``tag_ids``."""
        with self._session_scope(session) as s:
            s.execute(delete(SongTag).where(SongTag.song_id == song_id))
            for tag_id in dict.fromkeys(tag_ids):
                s.add(SongTag(song_id=song_id, tag_id=tag_id))

    # =========================================================================
    # Whole-song Operations
    # =========================================================================

    def create_song_with_content(
        self,
        title: str,
        code: str,
        order: int,
        slides: Sequence[tuple[int, str]],
        tag_names: Sequence[str],
        session: Optional[Session] = None,
    ) -> Song:
        """Create a song together with its slides and tags as one unit.

        Args:
            title: Song title
            code: Letter code (stored uppercase)
            order: Order number within the code
            slides: (slide_number, content) pairs, stored as given
            tag_names: Tag names, created when missing
        """
        with self._session_scope(session) as s:
            song = self.create_song(title, code, order, session=s)
            for slide_number, content in slides:
                self.create_slide(song.id, slide_number, content, session=s)
            tag_ids = [
                self.find_or_create_tag(name, session=s).id for name in tag_names
            ]
            self.set_tags_for_song(song.id, tag_ids, session=s)
            return song

    def replace_song_content(
        self,
        song_id: int,
        title: str,
        slides: Sequence[tuple[int, str]],
        tag_names: Sequence[str],
        session: Optional[Session] = None,
    ) -> bool:
        """Replace title, slides and tag set of an existing song as one unit.

        Slides are deleted and re-inserted, never patched. Tags missing from
        ``tag_names`` are detached.

        Returns:
            False if the song does not exist
        """
        with self._session_scope(session) as s:
            if not self.update_song_title(song_id, title, session=s):
                return False
            self.delete_slides_by_song_id(song_id, session=s)
            s.flush()
            for slide_number, content in slides:
                self.create_slide(song_id, slide_number, content, session=s)
            tag_ids = [
                self.find_or_create_tag(name, session=s).id for name in tag_names
            ]
            self.set_tags_for_song(song_id, tag_ids, session=s)
            return True

    # =========================================================================
    # Presentation
    # =========================================================================

    def get_slides_for_presentation(
        self, song_codes: Sequence[str], session: Optional[Session] = None
    ) -> List[PresentationSlide]:
        """Collect the slides of several songs in the given order.

        Args:
            song_codes: Codes such as ``["c5", "C6", "a3"]``. Codes that do not
                parse or do not match a song are ignored.
        """
        result: List[PresentationSlide] = []
        with self._session_scope(session) as s:
            for song_code in song_codes:
                parsed = parse_song_code(song_code)
                if parsed is None:
                    logger.debug("Ignoring invalid song code: %s", song_code)
                    continue

                song = self.get_song_by_code_order(*parsed, session=s)
                if song is None:
                    logger.debug("No song for code: %s", song_code)
                    continue

                for slide in self.get_slides_by_song_id(song.id, session=s):
                    result.append(
                        PresentationSlide(
                            song_id=song.id,
                            song_title=song.title,
                            song_code=song.code,
                            song_order=song.order,
                            slide_number=slide.slide_number,
                            content=slide.content,
                        )
                    )
        return result

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def get_statistics(self) -> Dict[str, Any]:
        """Get row counts for the catalogue tables."""
        with self.get_session() as session:
            return {
                "songs": session.scalar(select(func.count(Song.id))) or 0,
                "slides": session.scalar(select(func.count(Slide.id))) or 0,
                "tags": session.scalar(select(func.count(Tag.id))) or 0,
                "song_tags": session.scalar(
                    select(func.count()).select_from(SongTag)
                )
                or 0,
            }

    def close(self) -> None:
        """Close database connections."""
        self.engine.dispose()
        logger.info("Database connections closed")
