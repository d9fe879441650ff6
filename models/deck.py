from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from datetime import datetime

class DeckBase(BaseModel):
    name: str

    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel

class DeckCreate(DeckBase):
    pass

class DeckRename(DeckBase):
    pass

class Deck(DeckBase):
    id: int
    created_at: datetime

class DeckStats(BaseModel):
    notes: int = 0
    due: int = 0

class DeckSummary(Deck):
    stats: DeckStats
