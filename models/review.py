from pydantic import BaseModel
from typing import Dict, Optional
from enum import Enum

from .card import Card
from .note import Note

class Grade(str, Enum):
    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"

class ReviewCreate(BaseModel):
    grade: Grade

class ReviewResult(BaseModel):
    card: Card
    interval: int

class NextCard(BaseModel):
    card: Optional[Card] = None
    note: Optional[Note] = None
    previews: Dict[Grade, int] = {}
