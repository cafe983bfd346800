"""Repository for TaskRating database operations."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from allfreedo.database.models import TaskRatingDB
from allfreedo.engine.ratings import average_rating
from allfreedo.models.rating import TaskRating

logger = logging.getLogger(__name__)


class DuplicateRatingError(Exception):
    """Raised when a roomie rates the same task twice."""

    def __init__(self, task_id: int, roomie_id: int):
        super().__init__("You have already rated this task")
        self.task_id = task_id
        self.roomie_id = roomie_id


class TaskRatingRepository:
    def __init__(self, db: Session):
        self.db = db

    def find(self, task_id: int, roomie_id: int) -> Optional[TaskRating]:
        row = self.db.query(TaskRatingDB).filter(
            TaskRatingDB.task_id == task_id,
            TaskRatingDB.roomie_id == roomie_id,
        ).first()
        return row.to_pydantic() if row else None

    def rate(self, task_id: int, roomie_id: int, rating: int, comment: Optional[str] = None) -> TaskRating:
        """Record a rating; raises DuplicateRatingError if this roomie already rated the task."""
        if self.find(task_id, roomie_id) is not None:
            raise DuplicateRatingError(task_id, roomie_id)
        try:
            row = TaskRatingDB(
                task_id=task_id,
                roomie_id=roomie_id,
                rating=rating,
                comment=comment,
                created_at=datetime.utcnow(),
            )
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Roomie {roomie_id} rated task {task_id}: {rating}")
            return row.to_pydantic()
        except IntegrityError as e:
            # Unique (task_id, roomie_id) caught a concurrent duplicate.
            self.db.rollback()
            raise DuplicateRatingError(task_id, roomie_id) from e
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to rate task {task_id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, rating_id: int) -> Optional[TaskRating]:
        row = self.db.query(TaskRatingDB).filter(TaskRatingDB.id == rating_id).first()
        return row.to_pydantic() if row else None

    def list_for_task(self, task_id: int) -> List[TaskRating]:
        rows = (
            self.db.query(TaskRatingDB)
            .filter(TaskRatingDB.task_id == task_id)
            .order_by(TaskRatingDB.created_at, TaskRatingDB.id)
            .all()
        )
        return [r.to_pydantic() for r in rows]

    def list_for_tasks(self, task_ids: Iterable[int]) -> Dict[int, List[TaskRating]]:
        """Ratings grouped by task id (tasks without ratings map to an empty list)."""
        ids = list(task_ids)
        grouped: Dict[int, List[TaskRating]] = {task_id: [] for task_id in ids}
        if not ids:
            return grouped
        rows = self.db.query(TaskRatingDB).filter(TaskRatingDB.task_id.in_(ids)).all()
        for row in rows:
            grouped[row.task_id].append(row.to_pydantic())
        return grouped

    def average_for_task(self, task_id: int) -> Optional[float]:
        return average_rating(r.rating for r in self.list_for_task(task_id))

    def update(self, rating_id: int, rating: Optional[int] = None, comment: Optional[str] = None) -> Optional[TaskRating]:
        row = self.db.query(TaskRatingDB).filter(TaskRatingDB.id == rating_id).first()
        if not row:
            return None
        if rating is not None:
            row.rating = rating
        if comment is not None:
            row.comment = comment
        try:
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Updated rating {rating_id}")
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update rating {rating_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, rating_id: int) -> bool:
        row = self.db.query(TaskRatingDB).filter(TaskRatingDB.id == rating_id).first()
        if not row:
            return False
        try:
            self.db.delete(row)
            self.db.commit()
            logger.debug(f"Deleted rating {rating_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete rating {rating_id}: {type(e).__name__}: {str(e)}")
            raise
