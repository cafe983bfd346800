"""SQLAlchemy database models for Allfreedo."""

from datetime import datetime
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from allfreedo.database.database import Base
from allfreedo.models.constants import DEFAULT_WEIGHT, MAX_RATING, MIN_RATING


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"

    id = Column(String, primary_key=True)  # Google user ID (sub claim)
    email = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from allfreedo.models.user import User

        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, user):
        """Create database model from Pydantic model."""
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class RoomieDB(Base):
    """Database model for Roomie (one profile per user)."""

    __tablename__ = "roomies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    name = Column(String, nullable=False)
    avatar = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def to_pydantic(self):
        from allfreedo.models.roomie import Roomie

        return Roomie(
            id=self.id,
            name=self.name,
            user_id=self.user_id,
            avatar=self.avatar,
            created_at=self.created_at,
        )


class RoomDB(Base):
    """Database model for Room."""

    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    access_code = Column(String, nullable=False, unique=True, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    created_by = Column(Integer, ForeignKey("roomies.id", ondelete="SET NULL"), nullable=True)

    def to_pydantic(self):
        from allfreedo.models.room import Room

        return Room(
            id=self.id,
            name=self.name,
            description=self.description or "",
            access_code=self.access_code,
            created_at=self.created_at,
            created_by=self.created_by,
        )


class RoomieRoomDB(Base):
    """Membership link between a roomie and a room.

    ``joined_at`` (then ``id``) defines the stable member order used for
    round-robin assignment.
    """

    __tablename__ = "roomie_room"
    __table_args__ = (
        UniqueConstraint("room_id", "roomie_id", name="uq_roomie_room_membership"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    roomie_id = Column(Integer, ForeignKey("roomies.id", ondelete="CASCADE"), nullable=False, index=True)
    joined_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class TaskTemplateDB(Base):
    """Database model for TaskTemplate."""

    __tablename__ = "task_templates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    weight = Column(Integer, nullable=False, default=DEFAULT_WEIGHT)
    recurring = Column(Boolean, nullable=False, default=False)
    # Opaque serialized RecurrenceRule (JSON text); parsed at the recurrence boundary.
    recurrence_rule = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    created_by = Column(Integer, ForeignKey("roomies.id", ondelete="SET NULL"), nullable=True)
    last_assigned_roomie_id = Column(Integer, ForeignKey("roomies.id", ondelete="SET NULL"), nullable=True)

    def to_pydantic(self):
        from allfreedo.models.task_template import TaskTemplate

        return TaskTemplate(
            id=self.id,
            room_id=self.room_id,
            name=self.name,
            description=self.description or "",
            weight=self.weight,
            recurring=bool(self.recurring),
            recurrence_rule=self.recurrence_rule,
            created_at=self.created_at,
            created_by=self.created_by,
            last_assigned_roomie_id=self.last_assigned_roomie_id,
        )

    @classmethod
    def from_pydantic(cls, template):
        return cls(
            id=template.id,
            room_id=template.room_id,
            name=template.name,
            description=template.description,
            weight=template.weight,
            recurring=template.recurring,
            recurrence_rule=template.recurrence_rule,
            created_at=template.created_at,
            created_by=template.created_by,
            last_assigned_roomie_id=template.last_assigned_roomie_id,
        )


class TaskDB(Base):
    """Database model for Task."""

    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    weight = Column(Integer, nullable=False, default=DEFAULT_WEIGHT)

    # Assignment and scheduling
    assigned_roomie_id = Column(Integer, ForeignKey("roomies.id", ondelete="SET NULL"), nullable=True, index=True)
    scheduled_date = Column(Date, nullable=True, index=True)

    # Completion
    is_done = Column(Boolean, nullable=False, default=False, index=True)
    done_date = Column(DateTime, nullable=True)
    done_by = Column(Integer, ForeignKey("roomies.id", ondelete="SET NULL"), nullable=True)

    # Template linkage (optional)
    task_template_id = Column(Integer, ForeignKey("task_templates.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from allfreedo.models.task import Task

        return Task(
            id=self.id,
            room_id=self.room_id,
            name=self.name,
            description=self.description or "",
            weight=self.weight,
            assigned_roomie_id=self.assigned_roomie_id,
            scheduled_date=self.scheduled_date,
            is_done=bool(self.is_done),
            done_date=self.done_date,
            done_by=self.done_by,
            task_template_id=self.task_template_id,
            created_at=self.created_at,
        )

    @classmethod
    def from_pydantic(cls, task):
        """Create database model from Pydantic model."""
        return cls(
            id=task.id,
            room_id=task.room_id,
            name=task.name,
            description=task.description,
            weight=task.weight,
            assigned_roomie_id=task.assigned_roomie_id,
            scheduled_date=task.scheduled_date,
            is_done=task.is_done,
            done_date=task.done_date,
            done_by=task.done_by,
            task_template_id=task.task_template_id,
            created_at=task.created_at,
        )


class TaskRatingDB(Base):
    """Database model for TaskRating (at most one rating per roomie per task)."""

    __tablename__ = "task_ratings"
    __table_args__ = (
        UniqueConstraint("task_id", "roomie_id", name="uq_task_rating_roomie"),
        CheckConstraint(f"rating >= {MIN_RATING} AND rating <= {MAX_RATING}", name="ck_task_rating_range"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    roomie_id = Column(Integer, ForeignKey("roomies.id", ondelete="CASCADE"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def to_pydantic(self):
        from allfreedo.models.rating import TaskRating

        return TaskRating(
            id=self.id,
            task_id=self.task_id,
            roomie_id=self.roomie_id,
            rating=self.rating,
            comment=self.comment,
            created_at=self.created_at,
        )
