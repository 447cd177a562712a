"""Value types shared by the store, the subscription manager and the view state."""
import dataclasses
from typing import Any, Dict, Optional


@dataclasses.dataclass(frozen=True)
class User:
    """The signed-in identity. Only the stable ``uid`` is used."""
    uid: str
    display_name: str = ''


@dataclasses.dataclass(frozen=True)
class Document:
    """A single document of a live snapshot, as delivered by the store."""
    id: str
    data: Dict[str, Any] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass(frozen=True)
class Expense:
    """Projection of an expense document used for display and editing.

    ``date`` is a ``YYYY-MM-DD`` string, or empty when the stored value is not a timestamp.
    """
    id: str
    amount: Any
    category: str
    date: str
    note: Optional[str] = None


@dataclasses.dataclass
class EditBuffer:
    """Pending user input for the expense in edit mode. All fields hold text."""
    amount: str = ''
    category: str = ''
    date: str = ''
    note: str = ''
