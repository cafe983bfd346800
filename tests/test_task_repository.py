"""Tests for TaskRepository CRUD operations."""

import pytest
from datetime import date, datetime

from allfreedo.database.repository import TaskRepository
from allfreedo.models.task import Task


@pytest.fixture
def room_with_members(make_roomie, make_room):
    alice = make_roomie("Alice")
    bob = make_roomie("Bob")
    return make_room([alice, bob]), alice, bob


class TestTaskRepository:
    """Test TaskRepository CRUD operations."""

    def test_create_task(self, task_repository, sample_task_base, room_with_members):
        room_id, alice, _ = room_with_members
        created = task_repository.create(Task(**{**sample_task_base, "room_id": room_id, "assigned_roomie_id": alice}))

        assert created.id is not None
        assert created.name == "Take out trash"
        assert created.room_id == room_id
        assert created.is_done is False
        assert created.done_date is None

    def test_get_task_by_id(self, task_repository, sample_task_base, room_with_members):
        room_id, _, _ = room_with_members
        created = task_repository.create(Task(**{**sample_task_base, "room_id": room_id}))
        retrieved = task_repository.get(created.id)

        assert retrieved is not None
        assert retrieved.id == created.id
        assert retrieved.scheduled_date == date(2025, 3, 4)

    def test_get_nonexistent_task(self, task_repository):
        assert task_repository.get(12345) is None

    def test_list_orders_by_scheduled_date(self, task_repository, sample_task_base, room_with_members):
        room_id, _, _ = room_with_members
        for name, day in [("C", date(2025, 3, 9)), ("A", date(2025, 3, 1)), ("None", None), ("B", date(2025, 3, 5))]:
            task_repository.create(Task(**{**sample_task_base, "room_id": room_id, "name": name, "scheduled_date": day}))

        names = [t.name for t in task_repository.list_for_room(room_id)]
        assert names == ["A", "B", "C", "None"]

    def test_list_filters(self, task_repository, sample_task_base, room_with_members):
        room_id, alice, bob = room_with_members
        t1 = task_repository.create(Task(**{**sample_task_base, "room_id": room_id, "assigned_roomie_id": alice, "scheduled_date": date(2025, 3, 1)}))
        task_repository.create(Task(**{**sample_task_base, "room_id": room_id, "assigned_roomie_id": bob, "scheduled_date": date(2025, 3, 5)}))
        task_repository.create(Task(**{**sample_task_base, "room_id": room_id, "assigned_roomie_id": alice, "scheduled_date": date(2025, 3, 10)}))
        task_repository.mark_done(t1.id, done_by=alice)

        assert len(task_repository.list_for_room(room_id, completed=True)) == 1
        assert len(task_repository.list_for_room(room_id, completed=False)) == 2
        assert len(task_repository.list_for_room(room_id, assigned_roomie_id=alice)) == 2
        # Date bounds are inclusive.
        between = task_repository.list_for_room(room_id, after_date=date(2025, 3, 5), before_date=date(2025, 3, 10))
        assert [t.scheduled_date for t in between] == [date(2025, 3, 5), date(2025, 3, 10)]

    def test_list_is_scoped_to_room(self, task_repository, sample_task_base, make_roomie, make_room):
        carol = make_roomie("Carol")
        room_a = make_room([carol], name="A")
        room_b = make_room([carol], name="B")
        task_repository.create(Task(**{**sample_task_base, "room_id": room_a}))
        assert task_repository.list_for_room(room_b) == []

    def test_update_task(self, task_repository, sample_task_base, room_with_members):
        room_id, _, bob = room_with_members
        created = task_repository.create(Task(**{**sample_task_base, "room_id": room_id}))
        updated = task_repository.update(created.model_copy(update={"name": "Recycling", "weight": 4, "assigned_roomie_id": bob}))

        assert updated.name == "Recycling"
        assert updated.weight == 4
        assert updated.assigned_roomie_id == bob

    def test_update_nonexistent_task_raises(self, task_repository, sample_task_base):
        with pytest.raises(ValueError):
            task_repository.update(Task(**{**sample_task_base, "id": 999, "room_id": 1}))

    def test_mark_done_sets_completion_fields(self, task_repository, sample_task_base, room_with_members):
        room_id, alice, bob = room_with_members
        created = task_repository.create(Task(**{**sample_task_base, "room_id": room_id, "assigned_roomie_id": alice}))
        when = datetime(2025, 3, 4, 21, 15)
        done = task_repository.mark_done(created.id, done_by=bob, done_date=when)

        assert done.is_done is True
        assert done.done_by == bob
        assert done.done_date == when

    def test_mark_done_is_terminal(self, task_repository, sample_task_base, room_with_members):
        room_id, alice, bob = room_with_members
        created = task_repository.create(Task(**{**sample_task_base, "room_id": room_id}))
        first = task_repository.mark_done(created.id, done_by=alice)
        again = task_repository.mark_done(created.id, done_by=bob)

        assert again.is_done is True
        assert again.done_by == alice
        assert again.done_date == first.done_date

    def test_mark_done_missing_task(self, task_repository):
        assert task_repository.mark_done(404, done_by=1) is None

    def test_delete_task(self, task_repository, sample_task_base, room_with_members):
        room_id, _, _ = room_with_members
        created = task_repository.create(Task(**{**sample_task_base, "room_id": room_id}))

        assert task_repository.delete(created.id) is True
        assert task_repository.get(created.id) is None
        assert task_repository.delete(created.id) is False

    def test_exists_for_template_on(self, task_repository, sample_task_base, room_with_members):
        from allfreedo.database.task_template_repository import TaskTemplateRepository
        from allfreedo.models.task_template import TaskTemplate

        room_id, _, _ = room_with_members
        template = TaskTemplateRepository(task_repository.db).create(
            TaskTemplate(room_id=room_id, name="Dishes", created_at=datetime.utcnow())
        )
        task_repository.create(Task(**{**sample_task_base, "room_id": room_id, "task_template_id": template.id}))

        assert task_repository.exists_for_template_on(template.id, date(2025, 3, 4)) is True
        assert task_repository.exists_for_template_on(template.id, date(2025, 3, 5)) is False
