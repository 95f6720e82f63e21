"""Transfer objects and result types for catalogue backups."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ...database.models import Song

BACKUP_VERSION = 1


class BackupSlide(BaseModel):
    """One slide as stored in a backup."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    slide_number: int = Field(alias="slideNumber", ge=1, strict=True)
    content: str


class BackupSongData(BaseModel):
    """A song with its slides and tag names, as stored in a backup."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    title: str
    code: str
    order: int = Field(ge=1, strict=True)
    slides: List[BackupSlide] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        """Codes are letters only and stored uppercase."""
        value = value.strip()
        if not value or not value.isalpha():
            raise ValueError("code must be a non-empty string of letters")
        return value.upper()

    @field_validator("tags")
    @classmethod
    def strip_tags(cls, value: List[str]) -> List[str]:
        """Tag names are stripped and may not be blank."""
        stripped = [name.strip() for name in value]
        if any(not name for name in stripped):
            raise ValueError("tag names cannot be blank")
        return stripped

    @model_validator(mode="after")
    def unique_slide_numbers(self) -> "BackupSongData":
        """Reject songs with two slides sharing a number."""
        numbers = [slide.slide_number for slide in self.slides]
        if len(numbers) != len(set(numbers)):
            raise ValueError(f"duplicate slide numbers in song {self.display_code}")
        return self

    @property
    def key(self) -> Tuple[str, int]:
        """Composite (code, order) key."""
        return self.code, self.order

    @property
    def display_code(self) -> str:
        """Code and order joined, e.g. ``C3``."""
        return f"{self.code}{self.order}"

    def slide_pairs(self) -> List[Tuple[int, str]]:
        """Slides as (slide_number, content) pairs in backup order."""
        return [(slide.slide_number, slide.content) for slide in self.slides]


class BackupEnvelope(BaseModel):
    """Versioned container of a whole catalogue snapshot.

    ``tags`` is the complete tag vocabulary at export time, including tags
    that no song uses.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    version: int = Field(strict=True)
    exported_at: Optional[datetime] = Field(default=None, alias="exportedAt")
    songs: List[BackupSongData]
    tags: List[str] = Field(default_factory=list)

    @field_validator("version")
    @classmethod
    def known_version(cls, value: int) -> int:
        """Only the current envelope version is understood."""
        if value != BACKUP_VERSION:
            raise ValueError(
                f"unsupported backup version {value} (expected {BACKUP_VERSION})"
            )
        return value

    @field_validator("tags")
    @classmethod
    def strip_tags(cls, value: List[str]) -> List[str]:
        """Vocabulary names are stripped and may not be blank."""
        stripped = [name.strip() for name in value]
        if any(not name for name in stripped):
            raise ValueError("tag names cannot be blank")
        return stripped

    def to_document(self) -> dict:
        """Serialize to the JSON-compatible document layout."""
        return self.model_dump(mode="json", by_alias=True)


class ConflictStrategy(str, Enum):
    """How to resolve a backup song whose key already exists."""

    SKIP = "skip"
    OVERWRITE = "overwrite"
    NEW_CODE = "newCode"


class ImportStatus(str, Enum):
    """Outcome of importing one backup song."""

    SKIPPED = "skipped"
    OVERWRITTEN = "overwritten"
    ADDED = "added"
    ADDED_WITH_REASSIGNED_ORDER = "added_with_reassigned_order"
    FAILED = "failed"


@dataclass(frozen=True)
class ConflictRecord:
    """A backup song whose (code, order) already exists in the catalogue."""

    backup_song: BackupSongData
    existing_song: Song

    @property
    def key(self) -> Tuple[str, int]:
        """Composite key shared by both songs."""
        return self.backup_song.key


@dataclass(frozen=True)
class ImportOutcome:
    """Result of importing one backup song."""

    code: str
    order: int
    status: ImportStatus
    new_order: Optional[int] = None
    error: Optional[str] = None

    def __str__(self) -> str:
        """Human readable outcome, e.g. ``C1 → added as C3``."""
        label = f"{self.code}{self.order}"
        if self.status == ImportStatus.ADDED_WITH_REASSIGNED_ORDER:
            return f"{label} → added as {self.code}{self.new_order}"
        if self.status == ImportStatus.FAILED:
            return f"{label} → failed ({self.error})"
        return f"{label} → {self.status.value}"
