"""Per-room state cache.

Holds a snapshot of each room's tasks, templates and rating summary so that the
overview endpoint does not rebuild it on every request. Entries are refreshed
lazily: ``invalidate`` marks a room stale and the next ``get`` reloads it.
"""

import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from allfreedo.database.repository import TaskRepository
from allfreedo.database.task_rating_repository import TaskRatingRepository
from allfreedo.database.task_template_repository import TaskTemplateRepository
from allfreedo.engine.ratings import average_rating
from allfreedo.models.task import Task
from allfreedo.models.task_template import TaskTemplate

logger = logging.getLogger(__name__)


class RoomSnapshot(BaseModel):
    """Derived view of one room at load time."""

    room_id: int
    active_tasks: List[Task] = Field(default_factory=list)
    completed_tasks: List[Task] = Field(default_factory=list)
    templates: List[TaskTemplate] = Field(default_factory=list)
    task_ratings: Dict[int, Optional[float]] = Field(
        default_factory=dict, description="Average rating per completed task id"
    )
    has_rated: Dict[int, bool] = Field(
        default_factory=dict, description="Whether the assignee rated each completed task"
    )
    loaded_at: float = Field(default_factory=time.time)


def load_room_snapshot(db: Session, room_id: int) -> RoomSnapshot:
    """Build a fresh snapshot for a room from the database."""
    task_repo = TaskRepository(db)
    active = task_repo.list_for_room(room_id, completed=False)
    completed = task_repo.list_for_room(room_id, completed=True)
    templates = TaskTemplateRepository(db).list_for_room(room_id)

    ratings_by_task = TaskRatingRepository(db).list_for_tasks(t.id for t in completed)
    averages: Dict[int, Optional[float]] = {}
    has_rated: Dict[int, bool] = {}
    for task in completed:
        ratings = ratings_by_task.get(task.id, [])
        averages[task.id] = average_rating(r.rating for r in ratings)
        has_rated[task.id] = any(r.roomie_id == task.assigned_roomie_id for r in ratings)

    return RoomSnapshot(
        room_id=room_id,
        active_tasks=active,
        completed_tasks=completed,
        templates=templates,
        task_ratings=averages,
        has_rated=has_rated,
    )


class RoomStateCache:
    """Thread-safe map of room id to RoomSnapshot.

    Each room carries a generation counter that ``invalidate`` and ``evict``
    bump. A load that finished after its room's generation moved is returned to
    the caller but not cached, so a mutation committed mid-load is never hidden
    behind a fresh-looking entry.
    """

    def __init__(self, max_age_seconds: Optional[float] = None) -> None:
        self._entries: Dict[int, RoomSnapshot] = {}
        self._stale: set = set()
        self._generations: Dict[int, int] = {}
        self._lock = threading.Lock()
        self.max_age_seconds = max_age_seconds

    def _is_fresh(self, room_id: int) -> bool:
        entry = self._entries.get(room_id)
        if entry is None or room_id in self._stale:
            return False
        if self.max_age_seconds is not None and time.time() - entry.loaded_at > self.max_age_seconds:
            return False
        return True

    def _bump(self, room_id: int) -> None:
        self._generations[room_id] = self._generations.get(room_id, 0) + 1

    def get(self, room_id: int, loader: Callable[[int], RoomSnapshot]) -> RoomSnapshot:
        """Return the cached snapshot, calling ``loader(room_id)`` when missing or stale."""
        with self._lock:
            if self._is_fresh(room_id):
                logger.debug(f"Room cache hit for room {room_id}")
                return self._entries[room_id]
            generation = self._generations.get(room_id, 0)

        snapshot = loader(room_id)
        with self._lock:
            if self._generations.get(room_id, 0) != generation:
                logger.debug(f"Room {room_id} changed while loading; not caching")
                return snapshot
            self._entries[room_id] = snapshot
            self._stale.discard(room_id)
        logger.debug(f"Room cache loaded room {room_id}")
        return snapshot

    def peek(self, room_id: int) -> Optional[RoomSnapshot]:
        """Cached snapshot without loading (None when absent)."""
        with self._lock:
            return self._entries.get(room_id)

    def is_stale(self, room_id: int) -> bool:
        with self._lock:
            return not self._is_fresh(room_id)

    def invalidate(self, room_id: int) -> None:
        with self._lock:
            self._bump(room_id)
            if room_id in self._entries:
                self._stale.add(room_id)

    def evict(self, room_id: int) -> None:
        """Forget a room entirely (e.g. after it was deleted)."""
        with self._lock:
            self._bump(room_id)
            self._entries.pop(room_id, None)
            self._stale.discard(room_id)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._stale.clear()
            self._generations.clear()
