"""Note snapshot model - the read-only input the layout is seeded from."""

from dataclasses import dataclass, field
from typing import Any

from synaptic.errors import DataError


def normalize_tag(tag: str) -> str:
    """Normalize a tag for matching: strip '#' and whitespace, lowercase."""
    return tag.strip().lstrip("#").strip().lower()


@dataclass(frozen=True)
class Note:
    """
    A snapshot of a free-form note taken at seed time.

    The engine owns nothing about a note beyond what rendering needs
    (title and excerpt) and what hypothesis generation needs (tags).
    """

    id: str
    content: str = ""
    title: str | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)
    color: str | None = None

    @property
    def tag_set(self) -> frozenset[str]:
        """Normalized tags, blanks dropped."""
        return frozenset(t for t in (normalize_tag(tag) for tag in self.tags) if t)

    def excerpt(self, length: int = 30) -> str:
        """First `length` characters of content, with an ellipsis when cut."""
        text = " ".join(self.content.split())
        if len(text) <= length:
            return text
        return text[:length] + "..."

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "tags": list(self.tags),
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Note":
        """Create from a note collaborator record.

        Raises:
            DataError: if the record has no usable id or malformed fields
        """
        if not isinstance(data, dict):
            raise DataError(f"Note record must be a mapping, got {type(data).__name__}")

        note_id = data.get("id")
        if note_id is None or (isinstance(note_id, str) and not note_id.strip()):
            raise DataError("Note record is missing an id")
        return _checked(
            str(note_id),
            content=data.get("content"),
            title=data.get("title"),
            tags=data.get("tags"),
            color=data.get("color"),
        )


def _checked(note_id: str, content: Any, title: Any, tags: Any, color: Any) -> Note:
    """Build a Note from raw field values, rejecting anything not text-shaped."""
    content = content if content is not None else ""
    if not isinstance(content, str):
        raise DataError(f"Note {note_id} has non-text content", note_id=note_id)

    for name, value in (("title", title), ("color", color)):
        if value is not None and not isinstance(value, str):
            raise DataError(f"Note {note_id} has non-text {name}", note_id=note_id)

    tags = tags if tags is not None else ()
    if isinstance(tags, (str, bytes)):
        raise DataError(f"Note {note_id} has malformed tags", note_id=note_id)
    try:
        tags = tuple(tags)
    except TypeError:
        raise DataError(f"Note {note_id} has malformed tags", note_id=note_id) from None
    if not all(isinstance(t, str) for t in tags):
        raise DataError(f"Note {note_id} has malformed tags", note_id=note_id)

    return Note(id=note_id, content=content, title=title, tags=tags, color=color)


def coerce_note(value: Any) -> Note:
    """Accept either a Note or a collaborator record and return a Note.

    Note instances go through the same field checks as records, since the
    dataclass itself does not enforce its annotations.

    Raises:
        DataError: if the value cannot represent a note
    """
    if isinstance(value, Note):
        if not isinstance(value.id, str) or not value.id.strip():
            raise DataError("Note is missing an id")
        checked = _checked(value.id, value.content, value.title, value.tags, value.color)
        return value if checked == value else checked
    return Note.from_dict(value)
