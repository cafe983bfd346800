"""Repository for Room and membership database operations."""

import logging
import secrets
from datetime import datetime
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from allfreedo.models.constants import ACCESS_CODE_ALPHABET, ACCESS_CODE_LENGTH, ACCESS_CODE_MAX_ATTEMPTS
from allfreedo.models.room import Room
from allfreedo.database.models import RoomDB, RoomieRoomDB, TaskDB, TaskRatingDB, TaskTemplateDB

logger = logging.getLogger(__name__)


def generate_access_code(length: int = ACCESS_CODE_LENGTH) -> str:
    """Random uppercase alphanumeric code, e.g. "K3F9QZ"."""
    return "".join(secrets.choice(ACCESS_CODE_ALPHABET) for _ in range(length))


class RoomRepository:
    """Repository for Room database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _unused_access_code(self) -> str:
        for _ in range(ACCESS_CODE_MAX_ATTEMPTS):
            code = generate_access_code()
            exists = self.db.query(RoomDB.id).filter(RoomDB.access_code == code).first()
            if not exists:
                return code
        raise RuntimeError("Could not generate a unique room access code")

    def create(self, name: str, created_by: int, description: str = "") -> Room:
        """Create a room and make its creator the first member."""
        try:
            now = datetime.utcnow()
            room_db = RoomDB(
                name=name,
                description=description or "",
                access_code=self._unused_access_code(),
                created_at=now,
                created_by=created_by,
            )
            self.db.add(room_db)
            self.db.flush()
            self.db.add(RoomieRoomDB(room_id=room_db.id, roomie_id=created_by, joined_at=now))
            self.db.commit()
            self.db.refresh(room_db)
            logger.debug(f"Created room {room_db.id}: {name[:50]}")
            return room_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create room {name[:50]}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, room_id: int) -> Optional[Room]:
        room_db = self.db.query(RoomDB).filter(RoomDB.id == room_id).first()
        return room_db.to_pydantic() if room_db else None

    def get_by_access_code(self, access_code: str) -> Optional[Room]:
        """Look up a room by its join code (case-insensitive, surrounding spaces ignored)."""
        code = (access_code or "").strip().upper()
        if not code:
            return None
        room_db = self.db.query(RoomDB).filter(RoomDB.access_code == code).first()
        return room_db.to_pydantic() if room_db else None

    def list_for_roomie(self, roomie_id: int) -> List[Room]:
        """Rooms the roomie belongs to, oldest membership first."""
        rows = (
            self.db.query(RoomDB)
            .join(RoomieRoomDB, RoomieRoomDB.room_id == RoomDB.id)
            .filter(RoomieRoomDB.roomie_id == roomie_id)
            .order_by(RoomieRoomDB.joined_at, RoomDB.id)
            .all()
        )
        return [r.to_pydantic() for r in rows]

    def update(self, room_id: int, name: Optional[str] = None, description: Optional[str] = None) -> Optional[Room]:
        room_db = self.db.query(RoomDB).filter(RoomDB.id == room_id).first()
        if not room_db:
            return None

        if name is not None:
            room_db.name = name
        if description is not None:
            room_db.description = description

        try:
            self.db.commit()
            self.db.refresh(room_db)
            logger.debug(f"Updated room {room_id}")
            return room_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update room {room_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, room_id: int) -> bool:
        """Delete a room with its memberships, templates, tasks and ratings."""
        room_db = self.db.query(RoomDB).filter(RoomDB.id == room_id).first()
        if not room_db:
            return False

        try:
            task_ids = [row.id for row in self.db.query(TaskDB.id).filter(TaskDB.room_id == room_id).all()]
            self.db.query(TaskRatingDB).filter(TaskRatingDB.task_id.in_(task_ids)).delete(synchronize_session=False)
            self.db.query(TaskDB).filter(TaskDB.room_id == room_id).delete(synchronize_session=False)
            self.db.query(TaskTemplateDB).filter(TaskTemplateDB.room_id == room_id).delete(synchronize_session=False)
            self.db.query(RoomieRoomDB).filter(RoomieRoomDB.room_id == room_id).delete(synchronize_session=False)
            self.db.delete(room_db)
            self.db.commit()
            logger.debug(f"Deleted room {room_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete room {room_id}: {type(e).__name__}: {str(e)}")
            raise

    def is_member(self, room_id: int, roomie_id: int) -> bool:
        row = self.db.query(RoomieRoomDB.id).filter(
            RoomieRoomDB.room_id == room_id,
            RoomieRoomDB.roomie_id == roomie_id,
        ).first()
        return row is not None

    def add_member(self, room_id: int, roomie_id: int) -> bool:
        """Add a roomie to a room. Returns False if already a member."""
        if self.is_member(room_id, roomie_id):
            return False
        try:
            self.db.add(RoomieRoomDB(room_id=room_id, roomie_id=roomie_id, joined_at=datetime.utcnow()))
            self.db.commit()
            logger.debug(f"Roomie {roomie_id} joined room {room_id}")
            return True
        except IntegrityError:
            # Unique (room_id, roomie_id) lost a race with a concurrent join.
            self.db.rollback()
            return False
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to add roomie {roomie_id} to room {room_id}: {type(e).__name__}: {str(e)}")
            raise

    def remove_member(self, room_id: int, roomie_id: int) -> bool:
        """Remove a roomie from a room. Returns False if not a member."""
        link = self.db.query(RoomieRoomDB).filter(
            RoomieRoomDB.room_id == room_id,
            RoomieRoomDB.roomie_id == roomie_id,
        ).first()
        if not link:
            return False
        try:
            self.db.delete(link)
            self.db.commit()
            logger.debug(f"Roomie {roomie_id} left room {room_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to remove roomie {roomie_id} from room {room_id}: {type(e).__name__}: {str(e)}")
            raise
