"""Materialize task templates into concrete Task instances."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from allfreedo.database.repository import TaskRepository
from allfreedo.database.roomie_repository import RoomieRepository
from allfreedo.database.task_template_repository import TaskTemplateRepository
from allfreedo.engine.assignment import NoAssigneeAvailable, select_next_assignee
from allfreedo.models.task import Task
from allfreedo.models.task_factory import create_task_from_template
from allfreedo.models.task_template import TaskTemplate
from allfreedo.recurrence.evaluator import is_due_today

logger = logging.getLogger(__name__)


def spawn_task_from_template(
    db: Session,
    template: TaskTemplate,
    scheduled_date: Optional[date] = None,
) -> Task:
    """Create one task from a template, assigned to the next roomie in rotation.

    The template's round-robin marker is advanced to the new assignee once the
    task exists. Raises NoAssigneeAvailable when the room has no members.
    """
    day = scheduled_date or date.today()
    members = RoomieRepository(db).list_ids_in_room(template.room_id)
    if not members:
        raise NoAssigneeAvailable(template.room_id)

    assignee = select_next_assignee(members, template.last_assigned_roomie_id)
    task = TaskRepository(db).create(
        create_task_from_template(template, assigned_roomie_id=assignee, scheduled_date=day)
    )
    TaskTemplateRepository(db).set_last_assigned(template.id, assignee)
    logger.debug(f"Spawned task {task.id} from template {template.id} for roomie {assignee}")
    return task


def process_recurring_tasks(db: Session, room_id: int, today: Optional[date] = None) -> int:
    """Spawn today's task for every recurring template in a room that is due.

    A template that already spawned a task scheduled for today is skipped, as is
    one whose stored rule does not parse. Returns the number of tasks created.
    """
    day = today or date.today()
    template_repo = TaskTemplateRepository(db)
    task_repo = TaskRepository(db)

    if not RoomieRepository(db).list_ids_in_room(room_id):
        return 0

    created = 0
    for template in template_repo.list_recurring_for_room(room_id):
        rule = template.parsed_rule()
        if rule is None or not is_due_today(rule, day):
            continue
        if task_repo.exists_for_template_on(template.id, day):
            continue
        try:
            spawn_task_from_template(db, template, day)
            created += 1
        except NoAssigneeAvailable:
            # Last member left between the check above and this spawn.
            break
    if created:
        logger.info(f"Processed recurring tasks for room {room_id}: {created} created")
    return created
