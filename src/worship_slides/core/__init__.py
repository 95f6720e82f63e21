"""Core business logic modules.

This package contains the catalogue logic built on top of the database layer:
- backup: snapshot export and conflict-aware import
"""

__all__: list[str] = []
