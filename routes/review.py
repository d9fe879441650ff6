import logging
from fastapi import APIRouter, Depends, HTTPException
from db.database import get_store
from db.store import Store
from models.card import CardPatch, CardStatus
from models.review import NextCard, ReviewCreate, ReviewResult
from utils.dates import utcnow
from utils.sm2 import preview_intervals, schedule

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/{deck_id}/next", response_model=NextCard)
async def next_card(deck_id: int, store: Store = Depends(get_store)):
    """Random due card from the deck with its note and the interval each grade would give."""
    store.get_deck(deck_id)
    card = store.get_random_due_card(deck_id)
    if card is None:
        return NextCard()
    return NextCard(
        card=card,
        note=store.get_note(card.note_id),
        previews=preview_intervals(card, utcnow()),
    )

@router.post("/{card_id}", response_model=ReviewResult)
async def submit_review(card_id: int, payload: ReviewCreate, store: Store = Depends(get_store)):
    """Grade a card, reschedule it and persist the new state."""
    card = store.get_card(card_id)
    if card.state is CardStatus.SUSPENDED:
        raise HTTPException(status_code=409, detail=f"Card {card_id} is suspended")
    updated = schedule(card, payload.grade, utcnow())
    saved = store.update_card(card_id, CardPatch.from_state(updated))
    logger.info(
        "Card %s graded %s: next in %s day(s)", card_id, payload.grade.value, saved.interval
    )
    return ReviewResult(card=saved, interval=saved.interval)
