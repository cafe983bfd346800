"""Repository layer for task database operations."""

import logging
from datetime import date, datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from allfreedo.models.task import Task
from allfreedo.database.models import TaskDB, TaskRatingDB

logger = logging.getLogger(__name__)


class TaskRepository:
    """Repository for Task database operations."""
    
    def __init__(self, db: Session):
        self.db = db
    
    def create(self, task: Task) -> Task:
        """Create a new task."""
        try:
            task_db = TaskDB.from_pydantic(task)
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created task {task_db.id}: {task.name[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task {task.name[:50]}: {type(e).__name__}: {str(e)}")
            raise
    
    def get(self, task_id: int) -> Optional[Task]:
        """Get task by ID."""
        task_db = self.db.query(TaskDB).filter(TaskDB.id == task_id).first()
        return task_db.to_pydantic() if task_db else None
    
    def list_for_room(
        self,
        room_id: int,
        completed: Optional[bool] = None,
        assigned_roomie_id: Optional[int] = None,
        after_date: Optional[date] = None,
        before_date: Optional[date] = None,
    ) -> List[Task]:
        """Tasks in a room ordered by scheduled date (unscheduled tasks last).

        Date bounds are inclusive.
        """
        query = self.db.query(TaskDB).filter(TaskDB.room_id == room_id)
        if completed is not None:
            query = query.filter(TaskDB.is_done.is_(completed))
        if assigned_roomie_id is not None:
            query = query.filter(TaskDB.assigned_roomie_id == assigned_roomie_id)
        if after_date is not None:
            query = query.filter(TaskDB.scheduled_date >= after_date)
        if before_date is not None:
            query = query.filter(TaskDB.scheduled_date <= before_date)

        tasks_db = query.order_by(
            TaskDB.scheduled_date.is_(None),
            TaskDB.scheduled_date,
            TaskDB.id,
        ).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def exists_for_template_on(self, task_template_id: int, scheduled_date: date) -> bool:
        """Whether a template already spawned a task scheduled for this day."""
        row = self.db.query(TaskDB.id).filter(
            TaskDB.task_template_id == task_template_id,
            TaskDB.scheduled_date == scheduled_date,
        ).first()
        return row is not None

    def update(self, task: Task) -> Task:
        """Update the editable fields of an existing task."""
        task_db = self.db.query(TaskDB).filter(TaskDB.id == task.id).first()
        if not task_db:
            raise ValueError(f"Task {task.id} not found")
        
        task_db.name = task.name
        task_db.description = task.description
        task_db.weight = task.weight
        task_db.assigned_roomie_id = task.assigned_roomie_id
        task_db.scheduled_date = task.scheduled_date
        
        try:
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Updated task {task.id}: {task.name[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update task {task.id}: {type(e).__name__}: {str(e)}")
            raise

    def mark_done(self, task_id: int, done_by: int, done_date: Optional[datetime] = None) -> Optional[Task]:
        """Mark a task done. Completing an already done task leaves it unchanged."""
        task_db = self.db.query(TaskDB).filter(TaskDB.id == task_id).first()
        if not task_db:
            return None
        if task_db.is_done:
            return task_db.to_pydantic()

        task_db.is_done = True
        task_db.done_date = done_date or datetime.utcnow()
        task_db.done_by = done_by

        try:
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Task {task_id} done by roomie {done_by}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to mark task {task_id} done: {type(e).__name__}: {str(e)}")
            raise
    
    def delete(self, task_id: int) -> bool:
        """Permanently delete a task and its ratings."""
        task_db = self.db.query(TaskDB).filter(TaskDB.id == task_id).first()
        if not task_db:
            return False
        
        try:
            self.db.query(TaskRatingDB).filter(TaskRatingDB.task_id == task_id).delete(synchronize_session=False)
            self.db.delete(task_db)
            self.db.commit()
            logger.debug(f"Deleted task {task_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete task {task_id}: {type(e).__name__}: {str(e)}")
            raise
