"""Task creation factory for Allfreedo.

This module centralizes task creation logic so that manually created tasks and
tasks spawned from templates get the same defaults.
"""

from datetime import date, datetime
from typing import Optional

from allfreedo.models.task import Task
from allfreedo.models.task_template import TaskTemplate
from allfreedo.models.constants import DEFAULT_WEIGHT


def create_task_base(
    room_id: int,
    name: str,
    description: Optional[str] = None,
    weight: Optional[int] = None,
    assigned_roomie_id: Optional[int] = None,
    scheduled_date: Optional[date] = None,
    task_template_id: Optional[int] = None,
) -> Task:
    """Create an active (not done) task with defaults applied.

    Args:
        room_id: Room the task belongs to (required)
        name: Task name (required)
        description: Task description (defaults to empty)
        weight: Importance 1-5 (defaults to constant)
        assigned_roomie_id: Roomie responsible for the task
        scheduled_date: Day the task is scheduled for
        task_template_id: Template the task was spawned from

    Returns:
        Task object without an id (the database assigns it)
    """
    return Task(
        room_id=room_id,
        name=name,
        description=description or "",
        weight=weight if weight is not None else DEFAULT_WEIGHT,
        assigned_roomie_id=assigned_roomie_id,
        scheduled_date=scheduled_date,
        is_done=False,
        done_date=None,
        done_by=None,
        task_template_id=task_template_id,
        created_at=datetime.utcnow(),
    )


def create_task_from_template(
    template: TaskTemplate,
    *,
    assigned_roomie_id: int,
    scheduled_date: date,
) -> Task:
    """Spawn a task instance from a template."""
    return create_task_base(
        room_id=template.room_id,
        name=template.name,
        description=template.description,
        weight=template.weight,
        assigned_roomie_id=assigned_roomie_id,
        scheduled_date=scheduled_date,
        task_template_id=template.id,
    )
