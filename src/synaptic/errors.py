"""Error taxonomy for the layout engine.

None of these ever crash the hosting view: malformed notes are skipped at
seed time and rejected confirmations leave the form open. Geometric
degeneracies (coincident nodes) are absorbed by the stepper's distance
floor and have no exception type.
"""


class SynapticError(Exception):
    """Base class for layout engine errors."""


class DataError(SynapticError):
    """A note snapshot could not be turned into a node (e.g. missing id)."""

    def __init__(self, message: str, note_id: str | None = None) -> None:
        super().__init__(message)
        self.note_id = note_id


class InteractionError(SynapticError):
    """A user gesture was rejected, e.g. a confirmation with empty fields."""

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.fields = fields or []
