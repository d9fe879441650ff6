from fastapi import APIRouter, Depends, HTTPException, status
from typing import Dict, List
from db.database import get_store
from db.store import Store
from models.deck import DeckCreate, DeckRename, DeckSummary
from models.note import Note, NoteFields

router = APIRouter()

def _summary(store: Store, deck_id: int) -> DeckSummary:
    deck = store.get_deck(deck_id)
    return DeckSummary(**deck.model_dump(), stats=store.deck_stats(deck_id))

@router.get("/", response_model=List[DeckSummary])
async def list_decks(store: Store = Depends(get_store)):
    """List all decks with note and due counts."""
    return [_summary(store, deck.id) for deck in store.get_decks()]

@router.post("/", response_model=DeckSummary, status_code=status.HTTP_201_CREATED)
async def create_deck(payload: DeckCreate, store: Store = Depends(get_store)):
    """Create new deck."""
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Name is required")
    deck_id = store.create_deck(name)
    return _summary(store, deck_id)

@router.get("/{deck_id}", response_model=DeckSummary)
async def deck_detail(deck_id: int, store: Store = Depends(get_store)):
    return _summary(store, deck_id)

@router.patch("/{deck_id}", response_model=DeckSummary)
async def rename_deck(deck_id: int, payload: DeckRename, store: Store = Depends(get_store)):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Name is required")
    store.rename_deck(deck_id, name)
    return _summary(store, deck_id)

@router.delete("/{deck_id}")
async def delete_deck(deck_id: int, store: Store = Depends(get_store)) -> Dict[str, int]:
    """Delete deck together with its notes and cards."""
    return store.delete_deck(deck_id)

@router.get("/{deck_id}/notes", response_model=List[Note])
async def list_notes(deck_id: int, store: Store = Depends(get_store)):
    """Notes in a deck, newest first."""
    store.get_deck(deck_id)
    return store.get_notes_by_deck(deck_id)

@router.post("/{deck_id}/notes", response_model=Note, status_code=status.HTTP_201_CREATED)
async def create_note(deck_id: int, fields: NoteFields, store: Store = Depends(get_store)):
    """Add a note (and its card) to a deck."""
    front, back = fields.front.strip(), fields.back.strip()
    if not front and not back:
        raise HTTPException(status_code=400, detail="Enter front/back")
    note_id, _ = store.create_note(deck_id, NoteFields(front=front, back=back))
    return store.get_note(note_id)
