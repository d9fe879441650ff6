from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from db.database import get_store
from db.store import Store
from models.note import Note, NoteFields

router = APIRouter()

@router.get("/{note_id}", response_model=Note)
async def get_note(note_id: int, store: Store = Depends(get_store)):
    return store.get_note(note_id)

@router.put("/{note_id}", response_model=Note)
async def update_note(note_id: int, fields: NoteFields, store: Store = Depends(get_store)):
    """Replace front/back; the card keeps its schedule."""
    return store.update_note(note_id, fields)

@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(note_id: int, store: Store = Depends(get_store)):
    """Delete note and its card."""
    store.delete_note(note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
