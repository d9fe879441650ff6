# Routes package __init__.py - re-exports routers for main.py convenience
from .decks import router as decks_router
from .notes import router as notes_router
from .cards import router as cards_router
from .review import router as review_router
from .transfer import router as transfer_router

__all__ = ['decks_router', 'notes_router', 'cards_router', 'review_router', 'transfer_router']
