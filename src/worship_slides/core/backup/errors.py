"""Exceptions raised by the backup engine."""

from typing import List, Optional


class BackupFormatError(ValueError):
    """The backup document cannot be read as a valid envelope.

    Raised before any catalogue change, so the import can be retried safely.
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None) -> None:
        """Initialize format error.

        Args:
            message: Summary of the problem
            errors: Individual validation messages, one per offending field
        """
        super().__init__(message)
        self.errors = errors or []

    def __str__(self) -> str:
        """Summary followed by each validation message."""
        message = super().__str__()
        if not self.errors:
            return message
        return message + "\n" + "\n".join(f"  - {error}" for error in self.errors)


class ImportSessionError(RuntimeError):
    """An import session was driven in a state that does not allow the call."""
