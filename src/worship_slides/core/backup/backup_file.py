"""Reading and writing backup documents.

Backups are UTF-8 JSON documents with the fields ``version``, ``exportedAt``,
``songs`` and ``tags``.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .errors import BackupFormatError
from .models import BackupEnvelope

logger = logging.getLogger(__name__)


def default_backup_filename(now: Optional[datetime] = None) -> str:
    """Return a dated file name such as ``worship-backup-2024-05-01.json``."""
    now = now or datetime.now()
    return f"worship-backup-{now:%Y-%m-%d}.json"


def save_backup(envelope: BackupEnvelope, path: Path) -> Path:
    """Write an envelope to ``path``, creating parent directories.

    Returns:
        The path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(envelope.to_document(), f, ensure_ascii=False, indent=2)
    logger.info("Saved backup with %d songs to %s", len(envelope.songs), path)
    return path


def read_backup(path: Path) -> Dict[str, Any]:
    """Load the raw backup document from ``path``.

    Raises:
        BackupFormatError: if the file is not a JSON object
        OSError: if the file cannot be read
    """
    with open(path, encoding="utf-8") as f:
        try:
            document = json.load(f)
        except json.JSONDecodeError as e:
            raise BackupFormatError(f"Backup file is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise BackupFormatError("Backup file must contain a JSON object")
    return document


def parse_envelope(raw: Any) -> BackupEnvelope:
    """Validate a raw document into a typed envelope.

    Args:
        raw: Decoded JSON document, or an already built envelope

    Raises:
        BackupFormatError: listing every field that failed validation
    """
    if isinstance(raw, BackupEnvelope):
        return raw
    if not isinstance(raw, dict):
        raise BackupFormatError("Backup data must be an object")

    try:
        return BackupEnvelope.model_validate(raw)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: "
            f"{error['msg']}"
            for error in e.errors()
        ]
        logger.warning("Rejected backup document: %d invalid field(s)", len(errors))
        raise BackupFormatError("Invalid backup document", errors) from e


def load_backup(path: Path) -> BackupEnvelope:
    """Read and validate a backup file in one step."""
    return parse_envelope(read_backup(path))
