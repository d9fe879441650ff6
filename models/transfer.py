from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Any, List, Optional, Tuple
from datetime import datetime

from .card import CardStatus
from .note import NoteFields

class SnapshotRow(BaseModel):
    """One entity as it appears in a JSON export. ``id`` is kept only for remapping."""
    id: Any = None

    class Config:
        populate_by_name = True
        alias_generator = to_camel

class SnapshotDeck(SnapshotRow):
    name: str
    created_at: Optional[datetime] = None

class SnapshotNote(SnapshotRow):
    deck_id: Any = None
    fields: NoteFields = NoteFields()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class SnapshotCard(SnapshotRow):
    deck_id: Any = None
    note_id: Any = None
    due: Optional[datetime] = None
    interval: Optional[int] = None
    ease: Optional[float] = None
    reps: Optional[int] = None
    lapses: Optional[int] = None
    state: Optional[CardStatus] = None

class ImportSummary(BaseModel):
    decks: int = 0
    notes: int = 0
    cards: int = 0

class CsvImportResult(BaseModel):
    imported: int = 0
    failed: int = 0
    errors: List[Tuple[int, str]] = []
