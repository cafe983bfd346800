"""Repository for Roomie (member profile) database operations."""

import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from allfreedo.models.roomie import Roomie
from allfreedo.database.models import RoomieDB, RoomieRoomDB

logger = logging.getLogger(__name__)


class RoomieRepository:
    """Repository for Roomie database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: str, name: str, avatar: Optional[str] = None) -> Roomie:
        """Create the profile for a user (one per user)."""
        try:
            roomie_db = RoomieDB(user_id=user_id, name=name, avatar=avatar, created_at=datetime.utcnow())
            self.db.add(roomie_db)
            self.db.commit()
            self.db.refresh(roomie_db)
            logger.debug(f"Created roomie {roomie_db.id} for user {user_id}")
            return roomie_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create roomie for user {user_id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, roomie_id: int) -> Optional[Roomie]:
        roomie_db = self.db.query(RoomieDB).filter(RoomieDB.id == roomie_id).first()
        return roomie_db.to_pydantic() if roomie_db else None

    def get_by_user(self, user_id: str) -> Optional[Roomie]:
        """Get the profile bound to an authenticated user."""
        roomie_db = self.db.query(RoomieDB).filter(RoomieDB.user_id == user_id).first()
        return roomie_db.to_pydantic() if roomie_db else None

    def update(self, roomie_id: int, name: Optional[str] = None, avatar: Optional[str] = None) -> Optional[Roomie]:
        """Update name and/or avatar. Fields left as None are unchanged."""
        roomie_db = self.db.query(RoomieDB).filter(RoomieDB.id == roomie_id).first()
        if not roomie_db:
            return None

        if name is not None:
            roomie_db.name = name
        if avatar is not None:
            roomie_db.avatar = avatar

        try:
            self.db.commit()
            self.db.refresh(roomie_db)
            logger.debug(f"Updated roomie {roomie_id}")
            return roomie_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update roomie {roomie_id}: {type(e).__name__}: {str(e)}")
            raise

    def list_in_room(self, room_id: int) -> List[Roomie]:
        """Members of a room in stable join order (round-robin order)."""
        rows = (
            self.db.query(RoomieDB)
            .join(RoomieRoomDB, RoomieRoomDB.roomie_id == RoomieDB.id)
            .filter(RoomieRoomDB.room_id == room_id)
            .order_by(RoomieRoomDB.joined_at, RoomieRoomDB.id)
            .all()
        )
        return [r.to_pydantic() for r in rows]

    def list_ids_in_room(self, room_id: int) -> List[int]:
        return [r.id for r in self.list_in_room(room_id)]
