"""Assignment and rating engine for Allfreedo."""

from allfreedo.engine.assignment import NoAssigneeAvailable, select_next_assignee
from allfreedo.engine.ratings import average_rating

__all__ = [
    "NoAssigneeAvailable",
    "select_next_assignee",
    "average_rating",
]
