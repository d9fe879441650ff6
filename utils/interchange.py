"""JSON snapshot and CSV formats used for export and import."""
import csv
import io
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, NamedTuple, Sequence, Tuple

from errors import FormatError, ValidationError
from models.card import Card, CardState, CardStatus, DEFAULT_EASE
from models.deck import Deck
from models.note import Note
from models.transfer import SnapshotCard

APP_NAME = "cardbox"
SNAPSHOT_VERSION = 1
SNAPSHOT_KEYS = ("decks", "notes", "cards")

CSV_HEADER = ("deckName", "front", "back")
DEFAULT_IMPORT_DECK = "Imported"
UNKNOWN_DECK = "Unknown"


class CsvRow(NamedTuple):
    line: int
    deck_name: str
    front: str
    back: str


def build_snapshot(
    decks: Iterable[Deck],
    notes: Iterable[Note],
    cards: Iterable[Card],
    exported_at: datetime,
) -> Dict[str, Any]:
    """Full dump of the store, keyed the same way the import side expects."""
    return {
        "meta": {
            "app": APP_NAME,
            "version": SNAPSHOT_VERSION,
            "exportedAt": exported_at.isoformat(),
        },
        "decks": [deck.model_dump(mode="json", by_alias=True) for deck in decks],
        "notes": [note.model_dump(mode="json", by_alias=True) for note in notes],
        "cards": [card.model_dump(mode="json", by_alias=True) for card in cards],
    }


def validate_snapshot(snapshot: Any) -> Tuple[List[Any], List[Any], List[Any]]:
    """Check the top-level shape and return the raw deck, note and card rows."""
    if not isinstance(snapshot, dict):
        raise ValidationError("Invalid JSON format: expected an object")
    missing = [key for key in SNAPSHOT_KEYS if not isinstance(snapshot.get(key), list)]
    if missing:
        raise ValidationError(f"Invalid JSON format: missing {', '.join(missing)}")
    return snapshot["decks"], snapshot["notes"], snapshot["cards"]


def card_state_from_snapshot(card: SnapshotCard, now: datetime) -> CardState:
    """Fill in scheduling fields an older or hand-written export may lack."""
    return CardState(
        due=card.due or now,
        interval=card.interval if card.interval is not None else 0,
        ease=card.ease if card.ease is not None else DEFAULT_EASE,
        reps=card.reps if card.reps is not None else 0,
        lapses=card.lapses if card.lapses is not None else 0,
        state=card.state or CardStatus.NEW,
    )


def write_csv(rows: Iterable[Sequence[str]]) -> str:
    buffer = io.StringIO()
    buffer.write(",".join(CSV_HEADER) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue().removesuffix("\n")


def _is_header(row: Sequence[str]) -> bool:
    cells = [cell.replace('"', "").strip().lower() for cell in row]
    return cells[:len(CSV_HEADER)] == [name.lower() for name in CSV_HEADER]


def read_csv(text: str) -> Iterator[CsvRow]:
    """Check the header, then return an iterator over the data rows.

    The header is validated before this returns, so a bad file raises
    FormatError without any row having been consumed.
    """
    # No single field can be longer than the whole text.
    csv.field_size_limit(max(len(text), csv.field_size_limit()))
    reader = csv.reader(io.StringIO(text, newline=""))
    header = next((row for row in reader if row), None)
    if header is None or not _is_header(header):
        raise FormatError("CSV header must be: " + ",".join(CSV_HEADER))
    return _iter_rows(reader)


def _iter_rows(reader) -> Iterator[CsvRow]:
    try:
        for row in reader:
            if not row:
                continue
            deck_name, front, back = (list(row) + ["", "", ""])[:3]
            yield CsvRow(reader.line_num, deck_name or DEFAULT_IMPORT_DECK, front, back)
    except csv.Error as exc:
        raise FormatError(f"CSV line {reader.line_num}: {exc}") from exc
