"""Tests for round-robin assignee selection."""

import pytest

from allfreedo.engine import NoAssigneeAvailable, select_next_assignee


class TestSelectNextAssignee:
    def test_first_assignment_goes_to_first_member(self):
        assert select_next_assignee([7, 3, 9], None) == 7

    def test_advances_to_next_member(self):
        assert select_next_assignee([7, 3, 9], 7) == 3
        assert select_next_assignee([7, 3, 9], 3) == 9

    def test_wraps_around(self):
        assert select_next_assignee([7, 3, 9], 9) == 7

    def test_single_member_always_assigned(self):
        assert select_next_assignee([4], None) == 4
        assert select_next_assignee([4], 4) == 4

    def test_departed_member_restarts_rotation(self):
        assert select_next_assignee([7, 3, 9], 42) == 7

    def test_empty_membership_raises(self):
        with pytest.raises(NoAssigneeAvailable) as excinfo:
            select_next_assignee([], None)
        assert str(excinfo.value) == "No roomies found in this room"

    def test_full_cycle_visits_each_member_once(self):
        members = [5, 1, 8, 2]
        last = None
        seen = []
        for _ in range(len(members)):
            last = select_next_assignee(members, last)
            seen.append(last)
        assert seen == members
        assert select_next_assignee(members, last) == members[0]

    def test_is_referentially_transparent(self):
        members = (1, 2, 3)
        assert {select_next_assignee(members, 2) for _ in range(5)} == {3}
