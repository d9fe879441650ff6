from .deck import Deck, DeckCreate, DeckRename, DeckStats, DeckSummary
from .note import Note, NoteFields
from .card import Card, CardState, CardPatch, CardStatus
from .review import Grade, ReviewCreate, ReviewResult, NextCard
from .transfer import ImportSummary, CsvImportResult

__all__ = [
    'Deck', 'DeckCreate', 'DeckRename', 'DeckStats', 'DeckSummary',
    'Note', 'NoteFields',
    'Card', 'CardState', 'CardPatch', 'CardStatus',
    'Grade', 'ReviewCreate', 'ReviewResult', 'NextCard',
    'ImportSummary', 'CsvImportResult',
]
