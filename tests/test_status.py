#!/usr/bin/env python3
"""Tests for EntryStatus and EntryKind enums."""

from ledger import EntryKind, EntryStatus


class TestEntryStatus:
    """Tests for the OPEN -> CLOSED lifecycle table."""

    def test_open_can_close(self):
        assert EntryStatus.OPEN.can_transition_to(EntryStatus.CLOSED)

    def test_closed_is_terminal(self):
        """No transition leaves CLOSED, not even back to OPEN."""
        assert not EntryStatus.CLOSED.can_transition_to(EntryStatus.OPEN)
        assert not EntryStatus.CLOSED.can_transition_to(EntryStatus.CLOSED)

    def test_open_cannot_reopen(self):
        assert not EntryStatus.OPEN.can_transition_to(EntryStatus.OPEN)


class TestEntryKind:
    """Tests for EntryKind labels."""

    def test_labels(self):
        assert EntryKind.DAILY_LOG.label == "daily log"
        assert EntryKind.FUEL_ENTRY.label == "fuel entry"
