"""Database module for SQLAlchemy models."""

from dossier_engine.database.models import (
    Dossier,
    Person,
    PersonAttribute,
    PersonMedia,
    PersonMergeLog,
    PersonRelationship,
)

__all__ = [
    "Dossier",
    "Person",
    "PersonAttribute",
    "PersonMedia",
    "PersonMergeLog",
    "PersonRelationship",
]
