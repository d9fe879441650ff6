# SQL schema for CardBox database

SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Decks
CREATE TABLE IF NOT EXISTS decks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    created_at TEXT NOT NULL
);

-- Notes (one card each)
CREATE TABLE IF NOT EXISTS notes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    deck_id INTEGER NOT NULL,
    front TEXT NOT NULL DEFAULT '',
    back TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    FOREIGN KEY (deck_id) REFERENCES decks (id)
);

-- Cards (with SM-2 fields)
CREATE TABLE IF NOT EXISTS cards (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    deck_id INTEGER NOT NULL,
    note_id INTEGER NOT NULL UNIQUE,
    due TEXT NOT NULL,
    interval INTEGER NOT NULL DEFAULT 0 CHECK(interval >= 0),
    ease REAL NOT NULL DEFAULT 2.5 CHECK(ease >= 1.3),
    reps INTEGER NOT NULL DEFAULT 0 CHECK(reps >= 0),
    lapses INTEGER NOT NULL DEFAULT 0 CHECK(lapses >= 0),
    state TEXT NOT NULL DEFAULT 'new' CHECK(state IN ('new', 'review', 'suspended')),
    FOREIGN KEY (deck_id) REFERENCES decks (id),
    FOREIGN KEY (note_id) REFERENCES notes (id)
);
"""

INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_notes_deck ON notes (deck_id, created_at);
CREATE INDEX IF NOT EXISTS idx_cards_deck_due ON cards (deck_id, due);
CREATE INDEX IF NOT EXISTS idx_decks_name ON decks (name);
"""
