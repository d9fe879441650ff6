"""Error taxonomy shared by the store, the scheduler and the API routes."""


class CardBoxError(Exception):
    """Base class for every error raised by CardBox itself."""


class NotFoundError(CardBoxError):
    """A referenced deck, note or card does not exist."""

    def __init__(self, kind: str, entity_id):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} {entity_id} not found")


class ValidationError(CardBoxError):
    """A payload or patch was rejected before anything was written."""


class FormatError(ValidationError):
    """CSV text does not have the expected deckName,front,back layout."""


class DataImportError(CardBoxError):
    """A JSON import failed part way through and was rolled back."""


class InvalidGradeError(CardBoxError, ValueError):
    """A grade outside again/hard/good/easy reached the scheduler."""

    def __init__(self, grade):
        self.grade = grade
        super().__init__(f"Unknown grade: {grade!r}")
