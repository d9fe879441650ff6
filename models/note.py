from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from datetime import datetime

class NoteFields(BaseModel):
    front: str = ""
    back: str = ""

class NoteBase(BaseModel):
    deck_id: int
    fields: NoteFields

    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel

class Note(NoteBase):
    id: int
    created_at: datetime
    updated_at: datetime
