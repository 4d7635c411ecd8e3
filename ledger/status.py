"""EntryStatus enum for the ledger entry lifecycle."""

from enum import Enum


class EntryStatus(Enum):
    """Lifecycle of a usage segment. CLOSED is terminal."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"

    def can_transition_to(self, target: "EntryStatus") -> bool:
        return target in TRANSITIONS[self]


TRANSITIONS = {
    EntryStatus.OPEN: frozenset({EntryStatus.CLOSED}),
    EntryStatus.CLOSED: frozenset(),
}
