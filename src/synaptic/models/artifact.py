"""Recall artifact request - the flashcard produced when an edge is solidified."""

import time
import uuid
from dataclasses import dataclass, field


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ArtifactRequest:
    """
    A front/back recall item handed to the external flashcard store.

    New cards start at level 0 and are due for review immediately.
    """

    front: str
    back: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    level: int = 0
    next_review: int = field(default_factory=now_ms)  # Epoch milliseconds

    # Provenance, not part of the store's card format
    edge_id: str | None = None

    def to_dict(self) -> dict:
        """Convert to the flashcard store's record format."""
        return {
            "id": self.id,
            "front": self.front,
            "back": self.back,
            "level": self.level,
            "nextReview": self.next_review,
        }
