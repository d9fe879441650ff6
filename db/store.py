"""
Persistent decks, notes and cards.

A Store wraps one SQLite connection. Every multi-row mutation (deck cascade,
note + card creation and deletion, a whole JSON import, one CSV row) runs in
a single transaction so readers never see a card without its note or a note
with two cards.
"""
import logging
import random
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from errors import DataImportError, NotFoundError, ValidationError
from models.card import Card, CardPatch, CardState, CardStatus
from models.deck import Deck, DeckStats
from models.note import Note, NoteFields
from models.transfer import (
    CsvImportResult,
    ImportSummary,
    SnapshotCard,
    SnapshotDeck,
    SnapshotNote,
)
from utils import interchange
from utils.dates import from_db, to_db, utcnow
from .database import connect, init_db

logger = logging.getLogger(__name__)

DUE_LIMIT = 50
RANDOM_POOL = 100

FieldsLike = Union[NoteFields, Dict[str, Any]]
PatchLike = Union[CardPatch, CardState, Dict[str, Any]]


class Store:
    def __init__(
        self,
        path: Union[str, Path],
        due_limit: int = DUE_LIMIT,
        random_pool: int = RANDOM_POOL,
        rng: Optional[random.Random] = None,
    ):
        self.path = path
        self.due_limit = due_limit
        self.random_pool = random_pool
        self._rng = rng or random.Random()
        self.conn = connect(path)
        init_db(self.conn)
        logger.debug("Opened store at %s", path)

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None
            logger.debug("Closed store at %s", self.path)

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextmanager
    def transaction(self):
        """All-or-nothing scope. Nested calls join the outer transaction."""
        if self.conn.in_transaction:
            yield self.conn
            return
        self.conn.execute("BEGIN")
        try:
            yield self.conn
        except BaseException:
            self.conn.execute("ROLLBACK")
            raise
        self.conn.execute("COMMIT")

    # DECKS ================================================

    def create_deck(self, name: str, created_at: Optional[datetime] = None) -> int:
        deck_id = self._insert_deck(name, created_at or utcnow())
        logger.info("Created deck %s (%r)", deck_id, name)
        return deck_id

    def get_decks(self) -> List[Deck]:
        rows = self.conn.execute("SELECT * FROM decks ORDER BY id").fetchall()
        return [_deck_from_row(row) for row in rows]

    def get_deck(self, deck_id: int) -> Deck:
        row = self.conn.execute("SELECT * FROM decks WHERE id = ?", (deck_id,)).fetchone()
        if not row:
            raise NotFoundError("Deck", deck_id)
        return _deck_from_row(row)

    def deck_stats(self, deck_id: int, now: Optional[datetime] = None) -> DeckStats:
        """Note count and due-card count for one deck."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT COUNT(*) FROM notes WHERE deck_id = ?", (deck_id,))
        notes = cursor.fetchone()[0]
        cursor.execute(
            """
            SELECT COUNT(*) FROM cards
            WHERE deck_id = ? AND state != ? AND due <= ?
            """,
            (deck_id, CardStatus.SUSPENDED.value, to_db(now or utcnow())),
        )
        due = cursor.fetchone()[0]
        return DeckStats(notes=notes, due=due)

    def rename_deck(self, deck_id: int, name: str) -> None:
        cursor = self.conn.execute("UPDATE decks SET name = ? WHERE id = ?", (name, deck_id))
        if cursor.rowcount == 0:
            raise NotFoundError("Deck", deck_id)
        logger.info("Renamed deck %s to %r", deck_id, name)

    def delete_deck(self, deck_id: int) -> Dict[str, int]:
        """Delete a deck with all of its notes and cards. Returns how many of each went."""
        with self.transaction() as conn:
            self._require("decks", "Deck", deck_id)
            cards = conn.execute(
                """
                DELETE FROM cards
                WHERE deck_id = ? OR note_id IN (SELECT id FROM notes WHERE deck_id = ?)
                """,
                (deck_id, deck_id),
            ).rowcount
            notes = conn.execute("DELETE FROM notes WHERE deck_id = ?", (deck_id,)).rowcount
            conn.execute("DELETE FROM decks WHERE id = ?", (deck_id,))
        logger.info("Deleted deck %s with %s notes and %s cards", deck_id, notes, cards)
        return {"notes": notes, "cards": cards}

    # NOTES + CARDS ========================================

    def create_note(
        self,
        deck_id: int,
        fields: Optional[FieldsLike] = None,
        now: Optional[datetime] = None,
    ) -> Tuple[int, int]:
        """Insert a note and its single card, due immediately. Returns (note_id, card_id)."""
        fields = _coerce_fields(fields)
        created_at = now or utcnow()
        with self.transaction():
            self._require("decks", "Deck", deck_id)
            note_id = self._insert_note(deck_id, fields, created_at, created_at)
            card_id = self._insert_card(deck_id, note_id, CardState(due=created_at))
        logger.info("Created note %s with card %s in deck %s", note_id, card_id, deck_id)
        return note_id, card_id

    def get_note(self, note_id: int) -> Note:
        row = self.conn.execute("SELECT * FROM notes WHERE id = ?", (note_id,)).fetchone()
        if not row:
            raise NotFoundError("Note", note_id)
        return _note_from_row(row)

    def update_note(
        self,
        note_id: int,
        fields: FieldsLike,
        now: Optional[datetime] = None,
    ) -> Note:
        """Replace a note's fields. Its card's scheduling is left alone."""
        fields = _coerce_fields(fields)
        cursor = self.conn.execute(
            "UPDATE notes SET front = ?, back = ?, updated_at = ? WHERE id = ?",
            (fields.front, fields.back, to_db(now or utcnow()), note_id),
        )
        if cursor.rowcount == 0:
            raise NotFoundError("Note", note_id)
        logger.info("Updated note %s", note_id)
        return self.get_note(note_id)

    def delete_note(self, note_id: int) -> None:
        with self.transaction() as conn:
            self._require("notes", "Note", note_id)
            conn.execute("DELETE FROM cards WHERE note_id = ?", (note_id,))
            conn.execute("DELETE FROM notes WHERE id = ?", (note_id,))
        logger.info("Deleted note %s and its card", note_id)

    def get_notes_by_deck(self, deck_id: int) -> List[Note]:
        """Notes of a deck, most recently created first."""
        rows = self.conn.execute(
            "SELECT * FROM notes WHERE deck_id = ? ORDER BY created_at DESC, id DESC",
            (deck_id,),
        ).fetchall()
        return [_note_from_row(row) for row in rows]

    # CARDS ================================================

    def get_card(self, card_id: int) -> Card:
        row = self.conn.execute("SELECT * FROM cards WHERE id = ?", (card_id,)).fetchone()
        if not row:
            raise NotFoundError("Card", card_id)
        return _card_from_row(row)

    def get_due_cards(
        self,
        deck_id: int,
        limit: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[Card]:
        """Unsuspended cards of a deck with ``due <= now``, at most ``limit`` of them.

        No ordering is guaranteed.
        """
        limit = self.due_limit if limit is None else limit
        rows = self.conn.execute(
            """
            SELECT * FROM cards
            WHERE deck_id = ? AND state != ? AND due <= ?
            LIMIT ?
            """,
            (deck_id, CardStatus.SUSPENDED.value, to_db(now or utcnow()), max(0, limit)),
        ).fetchall()
        logger.debug("Deck %s has %s due cards (limit %s)", deck_id, len(rows), limit)
        return [_card_from_row(row) for row in rows]

    def get_random_due_card(self, deck_id: int, now: Optional[datetime] = None) -> Optional[Card]:
        """Pick a due card at random from the first ``random_pool`` due cards.

        Only the first ``random_pool`` rows are sampled, so for larger due sets
        the pick is not uniform over all due cards.
        """
        pool = self.get_due_cards(deck_id, self.random_pool, now)
        if not pool:
            return None
        return self._rng.choice(pool)

    def update_card(self, card_id: int, patch: PatchLike) -> Card:
        """Merge the set fields of ``patch`` onto a stored card and return the result."""
        values = _coerce_patch(patch).model_dump(exclude_unset=True, exclude_none=True)
        if not values:
            return self.get_card(card_id)
        if "due" in values:
            values["due"] = to_db(values["due"])
        if "state" in values:
            values["state"] = CardStatus(values["state"]).value
        assignments = ", ".join(f"{column} = ?" for column in values)
        cursor = self.conn.execute(
            f"UPDATE cards SET {assignments} WHERE id = ?",
            (*values.values(), card_id),
        )
        if cursor.rowcount == 0:
            raise NotFoundError("Card", card_id)
        logger.debug("Updated card %s: %s", card_id, sorted(values))
        return self.get_card(card_id)

    # EXPORT / IMPORT ======================================

    def export_json(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        decks = self.get_decks()
        notes = [_note_from_row(row) for row in self.conn.execute("SELECT * FROM notes ORDER BY id")]
        cards = [_card_from_row(row) for row in self.conn.execute("SELECT * FROM cards ORDER BY id")]
        logger.info("Exported %s decks, %s notes, %s cards", len(decks), len(notes), len(cards))
        return interchange.build_snapshot(decks, notes, cards, now or utcnow())

    def import_json(self, snapshot: Any) -> ImportSummary:
        """Insert a snapshot's entities under fresh ids, all or nothing.

        Deck and note ids from the snapshot are only used to reconnect notes
        and cards to their newly created parents.
        """
        decks, notes, cards = interchange.validate_snapshot(snapshot)
        now = utcnow()
        try:
            with self.transaction():
                summary = self._import_snapshot_rows(decks, notes, cards, now)
        except Exception as exc:
            logger.error("JSON import rolled back: %s", exc)
            raise DataImportError(f"Import failed: {exc}") from exc
        logger.info(
            "Imported %s decks, %s notes, %s cards",
            summary.decks, summary.notes, summary.cards,
        )
        return summary

    def export_csv(self) -> str:
        """One ``deckName,front,back`` row per note; no scheduling data."""
        rows = self.conn.execute(
            """
            SELECT d.name AS deck_name, n.front, n.back
            FROM notes n
            LEFT JOIN decks d ON d.id = n.deck_id
            ORDER BY n.id
            """
        ).fetchall()
        return interchange.write_csv(
            (row["deck_name"] or interchange.UNKNOWN_DECK, row["front"], row["back"])
            for row in rows
        )

    def import_csv(self, text: str) -> CsvImportResult:
        """Import rows one transaction at a time.

        A failing row is recorded and skipped; rows already imported stay.
        """
        result = CsvImportResult()
        for row in interchange.read_csv(text):
            try:
                with self.transaction():
                    deck_id = self._get_or_create_deck(row.deck_name)
                    self.create_note(deck_id, NoteFields(front=row.front, back=row.back))
                result.imported += 1
            except (sqlite3.Error, NotFoundError) as exc:
                logger.warning("CSV line %s skipped: %s", row.line, exc)
                result.failed += 1
                result.errors.append((row.line, str(exc)))
        logger.info("CSV import: %s rows imported, %s failed", result.imported, result.failed)
        return result

    # INTERNALS ============================================

    def _require(self, table: str, kind: str, entity_id: int) -> None:
        row = self.conn.execute(f"SELECT 1 FROM {table} WHERE id = ?", (entity_id,)).fetchone()
        if not row:
            raise NotFoundError(kind, entity_id)

    def _insert_deck(self, name: str, created_at: datetime) -> int:
        cursor = self.conn.execute(
            "INSERT INTO decks (name, created_at) VALUES (?, ?)",
            (name, to_db(created_at)),
        )
        return cursor.lastrowid

    def _get_or_create_deck(self, name: str) -> int:
        row = self.conn.execute(
            "SELECT id FROM decks WHERE name = ? ORDER BY id LIMIT 1", (name,)
        ).fetchone()
        if row:
            return row["id"]
        return self.create_deck(name)

    def _insert_note(
        self,
        deck_id: int,
        fields: NoteFields,
        created_at: datetime,
        updated_at: datetime,
    ) -> int:
        cursor = self.conn.execute(
            """
            INSERT INTO notes (deck_id, front, back, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (deck_id, fields.front, fields.back, to_db(created_at), to_db(updated_at)),
        )
        return cursor.lastrowid

    def _insert_card(self, deck_id: int, note_id: int, state: CardState) -> int:
        cursor = self.conn.execute(
            """
            INSERT INTO cards (deck_id, note_id, due, interval, ease, reps, lapses, state)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                deck_id,
                note_id,
                to_db(state.due),
                state.interval,
                state.ease,
                state.reps,
                state.lapses,
                state.state.value,
            ),
        )
        return cursor.lastrowid

    def _import_snapshot_rows(
        self,
        decks: List[Any],
        notes: List[Any],
        cards: List[Any],
        now: datetime,
    ) -> ImportSummary:
        deck_id_map: Dict[Any, int] = {}
        note_id_map: Dict[Any, int] = {}
        note_deck: Dict[int, int] = {}
        note_created: Dict[int, datetime] = {}
        for raw in decks:
            deck = SnapshotDeck.model_validate(raw)
            deck_id_map[deck.id] = self._insert_deck(deck.name, deck.created_at or now)
        for raw in notes:
            note = SnapshotNote.model_validate(raw)
            if note.deck_id not in deck_id_map:
                raise ValueError(f"note {note.id} references unknown deck {note.deck_id}")
            deck_id = deck_id_map[note.deck_id]
            new_id = self._insert_note(
                deck_id,
                note.fields,
                note.created_at or now,
                note.updated_at or now,
            )
            note_id_map[note.id] = new_id
            note_deck[new_id] = deck_id
            note_created[new_id] = note.created_at or now
        for raw in cards:
            card = SnapshotCard.model_validate(raw)
            if card.note_id not in note_id_map:
                raise ValueError(f"card {card.id} references unknown note {card.note_id}")
            note_id = note_id_map[card.note_id]
            # The card's deck is always its note's deck.
            self._insert_card(
                note_deck[note_id],
                note_id,
                interchange.card_state_from_snapshot(card, now),
            )
            del note_created[note_id]
        # Every note gets exactly one card; cardless notes start new.
        for note_id, created_at in note_created.items():
            self._insert_card(note_deck[note_id], note_id, CardState(due=created_at))
        return ImportSummary(
            decks=len(decks), notes=len(notes), cards=len(cards) + len(note_created),
        )


def _coerce_fields(fields: Optional[FieldsLike]) -> NoteFields:
    if fields is None:
        return NoteFields()
    if isinstance(fields, NoteFields):
        return fields
    try:
        return NoteFields.model_validate(fields)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid note fields: {exc}") from exc


def _coerce_patch(patch: PatchLike) -> CardPatch:
    if isinstance(patch, CardPatch):
        return patch
    if isinstance(patch, CardState):
        return CardPatch.from_state(patch)
    try:
        return CardPatch.model_validate(patch)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid card patch: {exc}") from exc


def _deck_from_row(row: sqlite3.Row) -> Deck:
    return Deck(id=row["id"], name=row["name"], created_at=from_db(row["created_at"]))


def _note_from_row(row: sqlite3.Row) -> Note:
    return Note(
        id=row["id"],
        deck_id=row["deck_id"],
        fields=NoteFields(front=row["front"], back=row["back"]),
        created_at=from_db(row["created_at"]),
        updated_at=from_db(row["updated_at"]),
    )


def _card_from_row(row: sqlite3.Row) -> Card:
    return Card(
        id=row["id"],
        deck_id=row["deck_id"],
        note_id=row["note_id"],
        due=from_db(row["due"]),
        interval=row["interval"],
        ease=row["ease"],
        reps=row["reps"],
        lapses=row["lapses"],
        state=CardStatus(row["state"]),
    )
