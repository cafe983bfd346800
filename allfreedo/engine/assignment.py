"""Round-robin task assignment.

The rotation marker is the id of the roomie who was assigned last; positional
indexes are never stored because they go stale as soon as membership changes.
"""

from typing import Optional, Sequence


class NoAssigneeAvailable(Exception):
    """Raised when a room has no members to assign a task to."""

    def __init__(self, room_id: Optional[int] = None):
        self.room_id = room_id
        super().__init__("No roomies found in this room")


def select_next_assignee(members: Sequence[int], last_assigned: Optional[int] = None) -> int:
    """Select who receives the next task instance.

    Args:
        members: Roomie ids in stable membership order (join order)
        last_assigned: Roomie id of the previous assignee, or None for the first assignment

    Returns:
        Roomie id of the next assignee. The first member when there is no previous
        assignee or when the previous assignee has left the room; otherwise the
        member after the previous assignee, wrapping around to the first.

    Raises:
        NoAssigneeAvailable: If ``members`` is empty
    """
    if not members:
        raise NoAssigneeAvailable()

    if last_assigned is None:
        return members[0]

    try:
        last_index = list(members).index(last_assigned)
    except ValueError:
        return members[0]

    return members[(last_index + 1) % len(members)]
