from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime
from enum import Enum

DEFAULT_EASE = 2.5
MIN_EASE = 1.3
MAX_EASE = 3.5

class CardStatus(str, Enum):
    NEW = "new"
    REVIEW = "review"
    SUSPENDED = "suspended"

class CardState(BaseModel):
    """Scheduling fields of a card; the scheduler reads and returns these."""
    due: datetime
    interval: int = Field(0, ge=0)
    ease: float = Field(DEFAULT_EASE, ge=MIN_EASE)
    reps: int = Field(0, ge=0)
    lapses: int = Field(0, ge=0)
    state: CardStatus = CardStatus.NEW

    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel

class Card(CardState):
    id: int
    deck_id: int
    note_id: int

class CardPatch(BaseModel):
    """Partial update for a stored card. Unknown keys are rejected."""
    due: Optional[datetime] = None
    interval: Optional[int] = Field(None, ge=0)
    ease: Optional[float] = Field(None, ge=MIN_EASE)
    reps: Optional[int] = Field(None, ge=0)
    lapses: Optional[int] = Field(None, ge=0)
    state: Optional[CardStatus] = None

    class Config:
        extra = "forbid"

    @classmethod
    def from_state(cls, state: CardState) -> "CardPatch":
        return cls(
            due=state.due,
            interval=state.interval,
            ease=state.ease,
            reps=state.reps,
            lapses=state.lapses,
            state=state.state,
        )
