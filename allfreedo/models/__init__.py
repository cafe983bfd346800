"""Data models for Allfreedo."""

from allfreedo.models.recurrence import RecurrenceFrequency, RecurrenceRule, Weekday
from allfreedo.models.room import Room
from allfreedo.models.roomie import Roomie
from allfreedo.models.task import Task
from allfreedo.models.task_template import TaskTemplate
from allfreedo.models.rating import TaskRating
from allfreedo.models.user import User

__all__ = [
    "RecurrenceFrequency",
    "RecurrenceRule",
    "Weekday",
    "Room",
    "Roomie",
    "Task",
    "TaskTemplate",
    "TaskRating",
    "User",
]
