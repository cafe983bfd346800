"""Repository for TaskTemplate database operations."""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from allfreedo.database.models import TaskDB, TaskTemplateDB
from allfreedo.models.task_template import TaskTemplate

logger = logging.getLogger(__name__)


class TaskTemplateRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, template: TaskTemplate) -> TaskTemplate:
        try:
            row = TaskTemplateDB.from_pydantic(template)
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Created task template {row.id}: {template.name[:50]}")
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task template {template.name[:50]}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, template_id: int) -> Optional[TaskTemplate]:
        row = self.db.query(TaskTemplateDB).filter(TaskTemplateDB.id == template_id).first()
        return row.to_pydantic() if row else None

    def list_for_room(self, room_id: int) -> List[TaskTemplate]:
        rows = (
            self.db.query(TaskTemplateDB)
            .filter(TaskTemplateDB.room_id == room_id)
            .order_by(TaskTemplateDB.name, TaskTemplateDB.id)
            .all()
        )
        return [r.to_pydantic() for r in rows]

    def list_recurring_for_room(self, room_id: int) -> List[TaskTemplate]:
        rows = (
            self.db.query(TaskTemplateDB)
            .filter(
                TaskTemplateDB.room_id == room_id,
                TaskTemplateDB.recurring.is_(True),
                TaskTemplateDB.recurrence_rule.isnot(None),
            )
            .order_by(TaskTemplateDB.name, TaskTemplateDB.id)
            .all()
        )
        return [r.to_pydantic() for r in rows]

    def update(self, template: TaskTemplate) -> TaskTemplate:
        row = self.db.query(TaskTemplateDB).filter(TaskTemplateDB.id == template.id).first()
        if not row:
            raise ValueError(f"Task template {template.id} not found")

        row.name = template.name
        row.description = template.description
        row.weight = template.weight
        row.recurring = template.recurring
        row.recurrence_rule = template.recurrence_rule

        try:
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Updated task template {template.id}")
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update task template {template.id}: {type(e).__name__}: {str(e)}")
            raise

    def set_last_assigned(self, template_id: int, roomie_id: Optional[int]) -> bool:
        """Persist the round-robin marker (the roomie who got the latest spawned task)."""
        row = self.db.query(TaskTemplateDB).filter(TaskTemplateDB.id == template_id).first()
        if not row:
            return False
        try:
            row.last_assigned_roomie_id = roomie_id
            self.db.commit()
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update last assigned roomie for template {template_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, template_id: int) -> bool:
        """Delete a template. Tasks already spawned from it are kept and unlinked."""
        row = self.db.query(TaskTemplateDB).filter(TaskTemplateDB.id == template_id).first()
        if not row:
            return False
        try:
            self.db.query(TaskDB).filter(TaskDB.task_template_id == template_id).update(
                {TaskDB.task_template_id: None}, synchronize_session=False
            )
            self.db.delete(row)
            self.db.commit()
            logger.debug(f"Deleted task template {template_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete task template {template_id}: {type(e).__name__}: {str(e)}")
            raise
