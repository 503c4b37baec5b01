"""
Transient notification ("toast") queue.

The queue is split in two halves:

reducer()          — pure state transition: (state, action) → state
NotificationQueue  — owns the state, assigns ids, and runs the timed-removal
                     effect: every dismissed notification gets exactly one
                     removal timer, and tearing the queue down cancels them.

Lifecycle of a notification
───────────────────────────
  CREATED (visible)  ──dismiss──▶  DISMISSED (hidden)  ──REMOVE_DELAY──▶  REMOVED
        └──────────── capacity eviction / remove() ──────────────────────▶  REMOVED
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError

from core.models import Notification

logger = logging.getLogger(__name__)

#: Maximum number of notifications kept in the active list.
CAPACITY = 1
#: Seconds between a dismissal and the removal of the notification.
REMOVE_DELAY = 5.0

#: ``scheduler(delay, callback)`` arms a one-shot timer and returns a handle
#: with a ``cancel()`` method.
Scheduler = Callable[[float, Callable[[], None]], Any]


def thread_scheduler(delay: float, callback: Callable[[], None]) -> threading.Timer:
    """Default scheduler: a daemon ``threading.Timer``."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


# ── Reducer ────────────────────────────────────────────────────────────────────


class ActionType(str, Enum):
    ADD = "add"
    UPDATE = "update"
    DISMISS = "dismiss"
    REMOVE = "remove"


@dataclass(frozen=True)
class Action:
    """A state transition request.

    ``notification`` is set for ADD, ``changes`` for UPDATE. A missing
    ``notification_id`` on DISMISS / REMOVE targets every notification.
    """

    type: ActionType
    notification_id: Optional[str] = None
    notification: Optional[Notification] = None
    changes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class QueueState:
    notifications: tuple[Notification, ...] = ()


#: Fields an UPDATE may never touch.
_PROTECTED_FIELDS = frozenset({"id", "visible"})


def reducer(state: QueueState, action: Action, capacity: int = CAPACITY) -> QueueState:
    """Apply *action* to *state* and return the new state.

    Pure: no timers, no logging, *state* is never mutated.
    """
    notifications = state.notifications

    if action.type is ActionType.ADD:
        if action.notification is None:
            raise ValueError("ADD requires a notification")
        return QueueState((action.notification, *notifications)[: max(capacity, 0)])

    if action.type is ActionType.UPDATE:
        changes = {
            k: v for k, v in action.changes.items() if k not in _PROTECTED_FIELDS
        }
        return QueueState(
            tuple(
                Notification.model_validate({**n.model_dump(), **changes})
                if n.id == action.notification_id
                else n
                for n in notifications
            )
        )

    if action.type is ActionType.DISMISS:
        target = action.notification_id
        return QueueState(
            tuple(
                n.model_copy(update={"visible": False})
                if n.visible and (target is None or n.id == target)
                else n
                for n in notifications
            )
        )

    if action.type is ActionType.REMOVE:
        if action.notification_id is None:
            return QueueState()
        return QueueState(
            tuple(n for n in notifications if n.id != action.notification_id)
        )

    return state


# ── Queue ──────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class NotificationHandle:
    """Controls bound to one notification returned by ``NotificationQueue.add``."""

    id: str
    queue: NotificationQueue = field(repr=False)

    def dismiss(self) -> None:
        self.queue.dismiss(self.id)

    def update(self, **changes: Any) -> None:
        self.queue.update(self.id, **changes)


class NotificationQueue:
    """Owned, capacity-bounded list of transient notifications.

    Removal timers live in an id → handle table. An entry exists exactly
    while its timer is pending: it is dropped when the timer fires or when
    the timer is cancelled because its notification left the list.

    Timers may fire on another thread (see ``thread_scheduler``), so every
    transition runs under a lock.
    """

    def __init__(
        self,
        capacity: int = CAPACITY,
        remove_delay: float = REMOVE_DELAY,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self.capacity = capacity
        self.remove_delay = remove_delay
        self._scheduler: Scheduler = scheduler or thread_scheduler
        self._state = QueueState()
        self._ids = itertools.count(1)
        self._timers: dict[str, Any] = {}
        self._lock = threading.RLock()
        self._closed = False

    # ── Queries ────────────────────────────────────────────────────────────

    @property
    def notifications(self) -> list[Notification]:
        """Snapshot of the active list, newest first."""
        with self._lock:
            return list(self._state.notifications)

    def get(self, notification_id: str) -> Optional[Notification]:
        with self._lock:
            for n in self._state.notifications:
                if n.id == notification_id:
                    return n
        return None

    def has_pending_removal(self, notification_id: str) -> bool:
        with self._lock:
            return notification_id in self._timers

    @property
    def closed(self) -> bool:
        return self._closed

    # ── Operations ─────────────────────────────────────────────────────────

    def add(self, **payload: Any) -> NotificationHandle:
        """Show a new notification and return its handle.

        *payload* carries ``title``, ``description``, ``severity`` and any
        extra display fields. ``id`` and ``visible`` are assigned here.

        Raises:
            pydantic.ValidationError: If ``severity`` is not a ``Severity``
                value. The set of severities is closed.
        """
        with self._lock:
            notification_id = str(next(self._ids))
            fields = {k: v for k, v in payload.items() if k not in _PROTECTED_FIELDS}
            notification = Notification(id=notification_id, visible=True, **fields)
            self._dispatch(Action(ActionType.ADD, notification=notification))
        return NotificationHandle(notification_id, self)

    def update(self, notification_id: str, **changes: Any) -> None:
        """Merge *changes* into a notification. Invalid changes are dropped.

        A change that fails validation (e.g. an unknown ``severity``) is
        logged and leaves the notification as it was.
        """
        with self._lock:
            action = Action(ActionType.UPDATE, notification_id=notification_id, changes=changes)
            try:
                self._dispatch(action)
            except ValidationError as exc:
                logger.warning(
                    "Ignoring invalid update for notification id=%s: %s", notification_id, exc
                )

    def dismiss(self, notification_id: Optional[str] = None) -> None:
        """Hide one notification (or all of them) and schedule removal."""
        with self._lock:
            self._dispatch(Action(ActionType.DISMISS, notification_id=notification_id))

    def remove(self, notification_id: Optional[str] = None) -> None:
        """Drop one notification (or all of them) from the list immediately."""
        with self._lock:
            self._dispatch(Action(ActionType.REMOVE, notification_id=notification_id))

    def close(self) -> None:
        """Cancel every pending removal timer. Idempotent."""
        with self._lock:
            self._closed = True
            for timer in self._timers.values():
                timer.cancel()
            if self._timers:
                logger.debug("Cancelled %d pending notification timers", len(self._timers))
            self._timers.clear()

    def __enter__(self) -> NotificationQueue:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ── Internals ──────────────────────────────────────────────────────────

    def _dispatch(self, action: Action) -> None:
        self._state = reducer(self._state, action, self.capacity)
        self._sync_timers()

    def _sync_timers(self) -> None:
        present = {n.id: n for n in self._state.notifications}

        for notification_id in [i for i in self._timers if i not in present]:
            self._timers.pop(notification_id).cancel()

        if self._closed:
            return

        for notification in present.values():
            if not notification.visible and notification.id not in self._timers:
                self._timers[notification.id] = self._scheduler(
                    self.remove_delay,
                    lambda notification_id=notification.id: self._expire(notification_id),
                )

    def _expire(self, notification_id: str) -> None:
        with self._lock:
            if self._closed:
                return
            self._timers.pop(notification_id, None)
            self._dispatch(Action(ActionType.REMOVE, notification_id=notification_id))
