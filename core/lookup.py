"""
Lookup session: the state container behind the WordSmith page.

A ``LookupSession`` owns everything the page shows (current word, displayed
collocations, search history, notification queue) and implements the search
action that ties them together. It is constructed and torn down explicitly;
nothing lives in module state.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum
from typing import Any, Optional

from core.history import HISTORY_LIMIT, SearchHistoryStore, record
from core.models import Collocation, Severity
from core.notifications import NotificationQueue

logger = logging.getLogger(__name__)

Analyzer = Callable[[str], list[Collocation]]

_GENERIC_FAILURE = "Failed to analyze collocations."


class SearchOutcome(str, Enum):
    """How a call to ``LookupSession.search`` ended."""

    FOUND = "found"        # Collocations displayed, history updated
    EMPTY = "empty"        # Service answered with no collocations
    INVALID = "invalid"    # Blank input, service not called
    FAILED = "failed"      # Service call raised
    BUSY = "busy"          # Another lookup is still in flight


class LookupSession:
    """Page state plus the search action.

    Args:
        analyzer: ``analyze(word) -> list[Collocation]``; may raise.
        history_store: Where the search history is persisted.
        notifications: The queue that status messages are posted to.
        history_limit: Number of words kept in the history.
    """

    def __init__(
        self,
        analyzer: Analyzer,
        history_store: SearchHistoryStore,
        notifications: Optional[NotificationQueue] = None,
        history_limit: int = HISTORY_LIMIT,
    ) -> None:
        self.analyzer = analyzer
        self.history_store = history_store
        self.notifications = notifications or NotificationQueue()
        self.history_limit = history_limit

        self.word = ""
        self.collocations: list[Collocation] = []
        self.is_loading = False
        self._loading_lock = threading.Lock()

        self.history_store.init_db()
        self.history: list[str] = self.history_store.load()

    # ── Actions ────────────────────────────────────────────────────────────

    def search(self, word: Optional[str] = None) -> SearchOutcome:
        """Look up collocations for *word* (defaults to the current word).

        Every outcome is reported through a notification; nothing is raised.
        History is only touched when the lookup finds at least one collocation.
        """
        if word is not None:
            self.word = word
        word = self.word.strip()

        if not word:
            self.notifications.add(
                title="Error",
                description="Please enter a word to search for.",
                severity=Severity.DESTRUCTIVE,
            )
            return SearchOutcome.INVALID

        with self._loading_lock:
            if self.is_loading:
                logger.info("Ignoring search for %r: a lookup is in progress", word)
                return SearchOutcome.BUSY
            self.is_loading = True

        try:
            collocations = self.analyzer(word)
        except Exception as exc:
            logger.exception("Collocation lookup failed for word=%r", word)
            self.collocations = []
            self.notifications.add(
                title="Error",
                description=str(exc) or _GENERIC_FAILURE,
                severity=Severity.DESTRUCTIVE,
            )
            return SearchOutcome.FAILED
        else:
            return self._show(word, collocations)
        finally:
            self.is_loading = False

    def _show(self, word: str, collocations: list[Collocation]) -> SearchOutcome:
        """Display a successful lookup. Runs while ``is_loading`` is still set."""
        if not collocations:
            self.collocations = []
            self.notifications.add(
                title="No Collocations Found",
                description=f'No collocations found for the word "{word}".',
                severity=Severity.WARNING,
            )
            return SearchOutcome.EMPTY

        self.collocations = list(collocations)
        self.history = record(self.history, word, self.history_limit)
        self.history_store.save(self.history)
        self.notifications.add(
            title="Success",
            description=f'Collocations found for "{word}".',
        )
        return SearchOutcome.FOUND

    def select_history(self, word: str) -> None:
        """Make a history entry the current word."""
        self.word = word

    # ── Views ──────────────────────────────────────────────────────────────

    def snapshot(self) -> dict[str, Any]:
        """Return the whole page state as JSON-ready data."""
        return {
            "word": self.word,
            "is_loading": self.is_loading,
            "collocations": [c.model_dump(by_alias=True) for c in self.collocations],
            "history": list(self.history),
            "notifications": [
                n.model_dump(mode="json") for n in self.notifications.notifications
            ],
        }

    # ── Teardown ───────────────────────────────────────────────────────────

    def close(self) -> None:
        self.notifications.close()

    def __enter__(self) -> LookupSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
