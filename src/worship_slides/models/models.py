"""Data models for song entry."""

from typing import List, Sequence, Tuple

from pydantic import BaseModel, ValidationInfo, field_validator

DEFAULT_ALLOWED_CODES = ("A", "B", "C", "D", "E", "F", "G")


class SongForm(BaseModel):
    """A new song as entered by the user.

    ``lyrics`` holds the lyric slides only. The title slide is generated.
    Pass ``allowed_codes`` in the validation context to override the default
    code list.
    """

    title: str
    code: str
    order: int
    lyrics: List[str]
    tags: List[str] = []

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Title is required and at most 100 characters."""
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        if len(v) > 100:
            raise ValueError("Title must be 100 characters or fewer")
        return v

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str, info: ValidationInfo) -> str:
        """Code must be one of the allowed codes. Stored uppercase."""
        allowed: Sequence[str] = DEFAULT_ALLOWED_CODES
        if info.context and "allowed_codes" in info.context:
            allowed = info.context["allowed_codes"]

        v = v.strip().upper()
        if v not in allowed:
            raise ValueError(f"Code must be one of {', '.join(allowed)}")
        return v

    @field_validator("order")
    @classmethod
    def validate_order(cls, v: int) -> int:
        """Order starts at 1."""
        if v < 1:
            raise ValueError("Order must be 1 or greater")
        return v

    @field_validator("lyrics")
    @classmethod
    def validate_lyrics(cls, v: List[str]) -> List[str]:
        """The first lyric slide must have content."""
        if not v or not v[0].strip():
            raise ValueError("The first lyric slide is required")
        return v

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        """Drop blank names and case-insensitive duplicates."""
        seen = set()
        tags = []
        for name in (tag.strip() for tag in v):
            if name and name.casefold() not in seen:
                seen.add(name.casefold())
                tags.append(name)
        return tags

    def slide_pairs(self) -> List[Tuple[int, str]]:
        """Title slide followed by the non-blank lyric slides, numbered from 1."""
        lyrics = [lyric.strip() for lyric in self.lyrics if lyric.strip()]
        contents = [self.title] + lyrics
        return list(enumerate(contents, start=1))
