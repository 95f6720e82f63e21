"""Shared fixtures for catalogue tests."""

import pytest

from worship_slides.database.service import DatabaseService


@pytest.fixture
def db_service(tmp_path):
    """Create a temporary database service."""
    service = DatabaseService(tmp_path / "test.db")
    yield service
    service.close()


def make_song_doc(code, order, title=None, slides=None, tags=None):
    """Build a backup song document."""
    title = title or f"Song {code}{order}"
    if slides is None:
        slides = [title, f"{title} verse"]
    return {
        "title": title,
        "code": code,
        "order": order,
        "slides": [
            {"slideNumber": number, "content": content}
            for number, content in enumerate(slides, start=1)
        ],
        "tags": tags or [],
    }


def make_envelope_doc(songs, tags=None):
    """Build a backup envelope document."""
    return {
        "version": 1,
        "exportedAt": "2024-05-01T10:00:00+00:00",
        "songs": songs,
        "tags": tags or [],
    }
