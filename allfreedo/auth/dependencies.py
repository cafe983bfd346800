"""FastAPI dependencies for authentication."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from allfreedo.database.database import get_db
from allfreedo.database.models import UserDB
from allfreedo.database.roomie_repository import RoomieRepository
from allfreedo.auth.jwt import get_user_id_from_token
from allfreedo.models.roomie import Roomie
from allfreedo.models.user import User

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user from JWT token.
    
    Raises:
        HTTPException: 401 if the token is missing, invalid or names an unknown user
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = get_user_id_from_token(credentials.credentials)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    user_db = db.query(UserDB).filter(UserDB.id == user_id).first()
    if not user_db:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    return user_db.to_pydantic()


def get_current_roomie(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Roomie:
    """Roomie profile of the current user.

    Raises:
        HTTPException: 403 when the user has not created a profile yet
    """
    roomie = RoomieRepository(db).get_by_user(current_user.id)
    if roomie is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Roomie profile required",
        )
    return roomie
