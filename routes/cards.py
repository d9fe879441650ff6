from fastapi import APIRouter, Depends
from db.database import get_store
from db.store import Store
from models.card import Card, CardPatch, CardStatus

router = APIRouter()

@router.get("/{card_id}", response_model=Card)
async def get_card(card_id: int, store: Store = Depends(get_store)):
    return store.get_card(card_id)

@router.post("/{card_id}/suspend", response_model=Card)
async def suspend_card(card_id: int, store: Store = Depends(get_store)):
    """Take a card out of review until it is unsuspended."""
    return store.update_card(card_id, CardPatch(state=CardStatus.SUSPENDED))

@router.post("/{card_id}/unsuspend", response_model=Card)
async def unsuspend_card(card_id: int, store: Store = Depends(get_store)):
    card = store.get_card(card_id)
    if card.state is not CardStatus.SUSPENDED:
        return card
    # A card that was never graded goes back to new, otherwise to review.
    restored = CardStatus.NEW if card.reps == 0 and card.lapses == 0 and card.interval == 0 else CardStatus.REVIEW
    return store.update_card(card_id, CardPatch(state=restored))
