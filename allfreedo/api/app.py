"""FastAPI web application for Allfreedo."""

import logging
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from sqlalchemy.orm import Session

from allfreedo.api.auth_models import AuthResponse, GoogleOAuthCallbackRequest
from allfreedo.api.schemas import (
    JoinRoomRequest,
    RatingCreateRequest,
    RatingUpdateRequest,
    RoomCreateRequest,
    RoomieCreateRequest,
    RoomieUpdateRequest,
    RoomUpdateRequest,
    SpawnTaskRequest,
    TaskCreateRequest,
    TaskTemplateCreateRequest,
    TaskTemplateUpdateRequest,
    TaskUpdateRequest,
)
from allfreedo.auth.dependencies import get_current_roomie, get_current_user
from allfreedo.auth.google_oauth import verify_google_token
from allfreedo.auth.jwt import create_access_token
from allfreedo.database.database import get_db, init_db
from allfreedo.database.repository import TaskRepository
from allfreedo.database.room_repository import RoomRepository
from allfreedo.database.roomie_repository import RoomieRepository
from allfreedo.database.task_rating_repository import DuplicateRatingError, TaskRatingRepository
from allfreedo.database.task_template_repository import TaskTemplateRepository
from allfreedo.database.user_repository import UserRepository
from allfreedo.engine.assignment import NoAssigneeAvailable
from allfreedo.engine.ratings import average_rating
from allfreedo.models.room import Room
from allfreedo.models.roomie import Roomie
from allfreedo.models.task import Task
from allfreedo.models.task_factory import create_task_base
from allfreedo.models.task_template import TaskTemplate
from allfreedo.models.user import User
from allfreedo.recurrence.materialize import process_recurring_tasks, spawn_task_from_template
from allfreedo.recurrence.serialization import (
    RecurrenceParseError,
    describe_serialized_rule,
    is_serialized_rule_due_today,
    serialize_rule,
    validate_rule,
)
from allfreedo.services.room_cache import RoomStateCache, load_room_snapshot

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title="Allfreedo API",
    description="Shared-household chores: rooms, recurring task templates, round-robin assignment and ratings",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.room_cache = RoomStateCache()


def get_room_cache(request: Request) -> RoomStateCache:
    """Room state cache owned by the application."""
    return request.app.state.room_cache


# ---------------------------------------------------------------------------
# Access helpers
# ---------------------------------------------------------------------------

def _require_room_member(db: Session, room_id: int, roomie: Roomie) -> Room:
    room_repo = RoomRepository(db)
    room = room_repo.get(room_id)
    if room is None:
        raise HTTPException(status_code=404, detail=f"Room {room_id} not found")
    if not room_repo.is_member(room_id, roomie.id):
        raise HTTPException(status_code=403, detail="You are not a member of this room")
    return room


def _require_task(db: Session, task_id: int, roomie: Roomie) -> Task:
    task = TaskRepository(db).get(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
    _require_room_member(db, task.room_id, roomie)
    return task


def _require_template(db: Session, template_id: int, roomie: Roomie) -> TaskTemplate:
    template = TaskTemplateRepository(db).get(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Task template {template_id} not found")
    _require_room_member(db, template.room_id, roomie)
    return template


def _require_assignee_in_room(db: Session, room_id: int, roomie_id: Optional[int]) -> None:
    if roomie_id is None:
        return
    if not RoomRepository(db).is_member(room_id, roomie_id):
        raise HTTPException(status_code=400, detail="Assigned roomie is not a member of this room")


def _validated_rule_text(payload) -> str:
    try:
        return serialize_rule(validate_rule(payload))
    except RecurrenceParseError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _template_payload(template: TaskTemplate) -> dict:
    rule = template.parsed_rule()
    data = template.model_dump(mode="json")
    data["recurrence"] = rule.model_dump(by_alias=True, exclude_none=True) if rule else None
    data["schedule"] = describe_serialized_rule(template.recurrence_rule) if template.recurring else ""
    return data


# ---------------------------------------------------------------------------
# Health and authentication
# ---------------------------------------------------------------------------

@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.utcnow().isoformat()}


@app.post("/auth/google/callback", response_model=AuthResponse)
def google_oauth_callback(request: GoogleOAuthCallbackRequest, db: Session = Depends(get_db)):
    """Exchange a Google ID token for an Allfreedo access token."""
    user_info = verify_google_token(request.id_token)
    if not user_info:
        raise HTTPException(status_code=401, detail="Invalid Google ID token")

    user_repo = UserRepository(db)
    now = datetime.utcnow()
    existing = user_repo.get(user_info["id"])
    user = user_repo.create_or_update(
        User(
            id=user_info["id"],
            email=user_info["email"],
            name=user_info.get("name"),
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
    )
    has_profile = RoomieRepository(db).get_by_user(user.id) is not None
    logger.info(f"User {user.id} signed in (profile: {has_profile})")
    return AuthResponse(
        access_token=create_access_token(user.id),
        user=user.model_dump(mode="json"),
        has_profile=has_profile,
    )


@app.get("/auth/me")
def get_me(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Current user and their roomie profile (if any)."""
    roomie = RoomieRepository(db).get_by_user(current_user.id)
    return {"user": current_user, "roomie": roomie, "has_profile": roomie is not None}


# ---------------------------------------------------------------------------
# Roomies
# ---------------------------------------------------------------------------

@app.post("/roomies", status_code=status.HTTP_201_CREATED)
def create_roomie(
    request: RoomieCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create the current user's roomie profile."""
    roomie_repo = RoomieRepository(db)
    if roomie_repo.get_by_user(current_user.id) is not None:
        raise HTTPException(status_code=409, detail="Roomie profile already exists")
    roomie = roomie_repo.create(current_user.id, request.name, avatar=request.avatar)
    return {"roomie": roomie}


@app.get("/roomies/me")
def get_my_roomie(roomie: Roomie = Depends(get_current_roomie)):
    return {"roomie": roomie}


@app.put("/roomies/me")
def update_my_roomie(
    request: RoomieUpdateRequest,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
    cache: RoomStateCache = Depends(get_room_cache),
):
    updated = RoomieRepository(db).update(roomie.id, name=request.name, avatar=request.avatar)
    for room in RoomRepository(db).list_for_roomie(roomie.id):
        cache.invalidate(room.id)
    return {"roomie": updated}


@app.get("/roomies/{roomie_id}")
def get_roomie(
    roomie_id: int,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
):
    found = RoomieRepository(db).get(roomie_id)
    if found is None:
        raise HTTPException(status_code=404, detail=f"Roomie {roomie_id} not found")
    return {"roomie": found}


# ---------------------------------------------------------------------------
# Rooms and membership
# ---------------------------------------------------------------------------

@app.post("/rooms", status_code=status.HTTP_201_CREATED)
def create_room(
    request: RoomCreateRequest,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
):
    """Create a room; the creator becomes its first member."""
    room = RoomRepository(db).create(request.name, created_by=roomie.id, description=request.description)
    logger.info(f"Roomie {roomie.id} created room {room.id}")
    return {"room": room}


@app.get("/rooms")
def list_my_rooms(roomie: Roomie = Depends(get_current_roomie), db: Session = Depends(get_db)):
    rooms = RoomRepository(db).list_for_roomie(roomie.id)
    return {"rooms": rooms, "count": len(rooms)}


@app.post("/rooms/join")
def join_room(
    request: JoinRoomRequest,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
    cache: RoomStateCache = Depends(get_room_cache),
):
    """Join a room by access code."""
    room_repo = RoomRepository(db)
    room = room_repo.get_by_access_code(request.access_code)
    if room is None:
        raise HTTPException(status_code=404, detail="Invalid access code")
    if not room_repo.add_member(room.id, roomie.id):
        raise HTTPException(status_code=409, detail="You're already a member of this room")
    cache.invalidate(room.id)
    logger.info(f"Roomie {roomie.id} joined room {room.id}")
    return {"room": room}


@app.get("/rooms/{room_id}")
def get_room(room_id: int, roomie: Roomie = Depends(get_current_roomie), db: Session = Depends(get_db)):
    return {"room": _require_room_member(db, room_id, roomie)}


@app.put("/rooms/{room_id}")
def update_room(
    room_id: int,
    request: RoomUpdateRequest,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
):
    _require_room_member(db, room_id, roomie)
    room = RoomRepository(db).update(room_id, name=request.name, description=request.description)
    return {"room": room}


@app.delete("/rooms/{room_id}")
def delete_room(
    room_id: int,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
    cache: RoomStateCache = Depends(get_room_cache),
):
    """Delete a room with everything in it."""
    _require_room_member(db, room_id, roomie)
    RoomRepository(db).delete(room_id)
    cache.evict(room_id)
    logger.info(f"Roomie {roomie.id} deleted room {room_id}")
    return {"deleted": True, "room_id": room_id}


@app.post("/rooms/{room_id}/leave")
def leave_room(
    room_id: int,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
    cache: RoomStateCache = Depends(get_room_cache),
):
    _require_room_member(db, room_id, roomie)
    RoomRepository(db).remove_member(room_id, roomie.id)
    cache.invalidate(room_id)
    return {"left": True, "room_id": room_id}


@app.get("/rooms/{room_id}/roomies")
def list_room_roomies(room_id: int, roomie: Roomie = Depends(get_current_roomie), db: Session = Depends(get_db)):
    """Members in join order (the round-robin order)."""
    _require_room_member(db, room_id, roomie)
    roomies = RoomieRepository(db).list_in_room(room_id)
    return {"roomies": roomies, "count": len(roomies)}


@app.get("/rooms/{room_id}/overview")
def room_overview(
    room_id: int,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
    cache: RoomStateCache = Depends(get_room_cache),
):
    """Room, members and the cached task/template/rating snapshot."""
    room = _require_room_member(db, room_id, roomie)
    snapshot = cache.get(room_id, lambda rid: load_room_snapshot(db, rid))
    return {
        "room": room,
        "roomies": RoomieRepository(db).list_in_room(room_id),
        "active_tasks": snapshot.active_tasks,
        "completed_tasks": snapshot.completed_tasks,
        "templates": [_template_payload(t) for t in snapshot.templates],
        "task_ratings": snapshot.task_ratings,
        "has_rated": snapshot.has_rated,
    }


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

@app.post("/rooms/{room_id}/tasks", status_code=status.HTTP_201_CREATED)
def create_task(
    room_id: int,
    request: TaskCreateRequest,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
    cache: RoomStateCache = Depends(get_room_cache),
):
    """Create a one-off task in a room."""
    _require_room_member(db, room_id, roomie)
    _require_assignee_in_room(db, room_id, request.assigned_roomie_id)
    task = TaskRepository(db).create(
        create_task_base(
            room_id=room_id,
            name=request.name,
            description=request.description,
            weight=request.weight,
            assigned_roomie_id=request.assigned_roomie_id,
            scheduled_date=request.scheduled_date,
        )
    )
    cache.invalidate(room_id)
    return {"task": task}


@app.get("/rooms/{room_id}/tasks")
def list_tasks(
    room_id: int,
    completed: Optional[bool] = None,
    assigned_roomie_id: Optional[int] = None,
    after_date: Optional[date] = None,
    before_date: Optional[date] = None,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
):
    """Tasks in a room ordered by scheduled date; date bounds are inclusive."""
    _require_room_member(db, room_id, roomie)
    tasks = TaskRepository(db).list_for_room(
        room_id,
        completed=completed,
        assigned_roomie_id=assigned_roomie_id,
        after_date=after_date,
        before_date=before_date,
    )
    return {"tasks": tasks, "count": len(tasks)}


@app.post("/rooms/{room_id}/tasks/process-recurring")
def process_recurring(
    room_id: int,
    today: Optional[date] = None,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
    cache: RoomStateCache = Depends(get_room_cache),
):
    """Spawn today's tasks for every recurring template in the room that is due."""
    _require_room_member(db, room_id, roomie)
    created = process_recurring_tasks(db, room_id, today=today)
    if created:
        cache.invalidate(room_id)
    return {"created": created}


@app.get("/tasks/{task_id}")
def get_task(task_id: int, roomie: Roomie = Depends(get_current_roomie), db: Session = Depends(get_db)):
    return {"task": _require_task(db, task_id, roomie)}


@app.put("/tasks/{task_id}")
def update_task(
    task_id: int,
    request: TaskUpdateRequest,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
    cache: RoomStateCache = Depends(get_room_cache),
):
    """Update a task's editable fields. Completion is changed via /done only."""
    task = _require_task(db, task_id, roomie)
    updates = request.model_dump(exclude_unset=True)
    if "assigned_roomie_id" in updates:
        _require_assignee_in_room(db, task.room_id, updates["assigned_roomie_id"])
    for field in ("name", "description", "weight"):
        if field in updates and updates[field] is None:
            raise HTTPException(status_code=400, detail=f"{field} cannot be null")
    updated = TaskRepository(db).update(task.model_copy(update=updates))
    cache.invalidate(task.room_id)
    return {"task": updated}


@app.post("/tasks/{task_id}/done")
def mark_task_done(
    task_id: int,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
    cache: RoomStateCache = Depends(get_room_cache),
):
    """Mark a task done by the current roomie. Already done tasks are returned unchanged."""
    task = _require_task(db, task_id, roomie)
    done = TaskRepository(db).mark_done(task_id, done_by=roomie.id)
    cache.invalidate(task.room_id)
    return {"task": done}


@app.delete("/tasks/{task_id}")
def delete_task(
    task_id: int,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
    cache: RoomStateCache = Depends(get_room_cache),
):
    task = _require_task(db, task_id, roomie)
    TaskRepository(db).delete(task_id)
    cache.invalidate(task.room_id)
    return {"deleted": True, "task_id": task_id}


# ---------------------------------------------------------------------------
# Task templates
# ---------------------------------------------------------------------------

@app.post("/rooms/{room_id}/task-templates", status_code=status.HTTP_201_CREATED)
def create_task_template(
    room_id: int,
    request: TaskTemplateCreateRequest,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
    cache: RoomStateCache = Depends(get_room_cache),
):
    """Create a template; recurring templates need a valid recurrence rule."""
    _require_room_member(db, room_id, roomie)
    rule_text = None
    if request.recurring:
        if request.recurrence_rule is None:
            raise HTTPException(status_code=400, detail="Recurring templates require a recurrence rule")
        rule_text = _validated_rule_text(request.recurrence_rule)

    template = TaskTemplateRepository(db).create(
        TaskTemplate(
            room_id=room_id,
            name=request.name,
            description=request.description,
            weight=request.weight,
            recurring=request.recurring,
            recurrence_rule=rule_text,
            created_at=datetime.utcnow(),
            created_by=roomie.id,
        )
    )
    cache.invalidate(room_id)
    return {"template": _template_payload(template)}


@app.get("/rooms/{room_id}/task-templates")
def list_task_templates(room_id: int, roomie: Roomie = Depends(get_current_roomie), db: Session = Depends(get_db)):
    _require_room_member(db, room_id, roomie)
    templates = TaskTemplateRepository(db).list_for_room(room_id)
    return {"templates": [_template_payload(t) for t in templates], "count": len(templates)}


@app.get("/rooms/{room_id}/task-templates/due-today")
def list_due_templates(
    room_id: int,
    today: Optional[date] = None,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
):
    """Recurring templates whose rule is due today (or on ``today`` when given)."""
    _require_room_member(db, room_id, roomie)
    due = [
        t
        for t in TaskTemplateRepository(db).list_recurring_for_room(room_id)
        if is_serialized_rule_due_today(t.recurrence_rule, today)
    ]
    return {"templates": [_template_payload(t) for t in due], "count": len(due)}


@app.get("/task-templates/{template_id}")
def get_task_template(template_id: int, roomie: Roomie = Depends(get_current_roomie), db: Session = Depends(get_db)):
    return {"template": _template_payload(_require_template(db, template_id, roomie))}


@app.put("/task-templates/{template_id}")
def update_task_template(
    template_id: int,
    request: TaskTemplateUpdateRequest,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
    cache: RoomStateCache = Depends(get_room_cache),
):
    template = _require_template(db, template_id, roomie)
    updates = request.model_dump(exclude_unset=True, exclude={"recurrence_rule"})
    for field in ("name", "description", "weight", "recurring"):
        if field in updates and updates[field] is None:
            raise HTTPException(status_code=400, detail=f"{field} cannot be null")

    recurring = updates.get("recurring", template.recurring)
    if request.recurrence_rule is not None:
        updates["recurrence_rule"] = _validated_rule_text(request.recurrence_rule)
    if not recurring:
        updates["recurrence_rule"] = None
    elif updates.get("recurrence_rule", template.recurrence_rule) is None:
        raise HTTPException(status_code=400, detail="Recurring templates require a recurrence rule")

    updated = TaskTemplateRepository(db).update(template.model_copy(update=updates))
    cache.invalidate(template.room_id)
    return {"template": _template_payload(updated)}


@app.delete("/task-templates/{template_id}")
def delete_task_template(
    template_id: int,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
    cache: RoomStateCache = Depends(get_room_cache),
):
    template = _require_template(db, template_id, roomie)
    TaskTemplateRepository(db).delete(template_id)
    cache.invalidate(template.room_id)
    return {"deleted": True, "template_id": template_id}


@app.post("/task-templates/{template_id}/tasks", status_code=status.HTTP_201_CREATED)
def spawn_task(
    template_id: int,
    request: Optional[SpawnTaskRequest] = None,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
    cache: RoomStateCache = Depends(get_room_cache),
):
    """Create a task from a template, assigned to the next roomie in rotation."""
    template = _require_template(db, template_id, roomie)
    day = (request.scheduled_date if request else None) or date.today()
    if TaskRepository(db).exists_for_template_on(template_id, day):
        raise HTTPException(status_code=409, detail=f"A task from this template is already scheduled for {day.isoformat()}")
    try:
        task = spawn_task_from_template(db, template, day)
    except NoAssigneeAvailable as e:
        raise HTTPException(status_code=409, detail=str(e))
    cache.invalidate(template.room_id)
    return {"task": task}


# ---------------------------------------------------------------------------
# Ratings
# ---------------------------------------------------------------------------

@app.post("/tasks/{task_id}/ratings", status_code=status.HTTP_201_CREATED)
def rate_task(
    task_id: int,
    request: RatingCreateRequest,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
    cache: RoomStateCache = Depends(get_room_cache),
):
    """Rate a completed task (once per roomie)."""
    task = _require_task(db, task_id, roomie)
    if not task.is_done:
        raise HTTPException(status_code=400, detail="Only completed tasks can be rated")
    try:
        rating = TaskRatingRepository(db).rate(task_id, roomie.id, request.rating, comment=request.comment)
    except DuplicateRatingError as e:
        raise HTTPException(status_code=409, detail=str(e))
    cache.invalidate(task.room_id)
    return {"rating": rating}


@app.get("/tasks/{task_id}/ratings")
def list_task_ratings(task_id: int, roomie: Roomie = Depends(get_current_roomie), db: Session = Depends(get_db)):
    _require_task(db, task_id, roomie)
    ratings = TaskRatingRepository(db).list_for_task(task_id)
    return {
        "ratings": ratings,
        "count": len(ratings),
        "average": average_rating(r.rating for r in ratings),
        "has_rated": any(r.roomie_id == roomie.id for r in ratings),
    }


def _require_own_rating(db: Session, rating_id: int, roomie: Roomie):
    rating = TaskRatingRepository(db).get(rating_id)
    if rating is None:
        raise HTTPException(status_code=404, detail=f"Rating {rating_id} not found")
    if rating.roomie_id != roomie.id:
        raise HTTPException(status_code=403, detail="You can only change your own rating")
    return rating


@app.put("/ratings/{rating_id}")
def update_rating(
    rating_id: int,
    request: RatingUpdateRequest,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
    cache: RoomStateCache = Depends(get_room_cache),
):
    rating = _require_own_rating(db, rating_id, roomie)
    updated = TaskRatingRepository(db).update(rating_id, rating=request.rating, comment=request.comment)
    task = TaskRepository(db).get(rating.task_id)
    if task is not None:
        cache.invalidate(task.room_id)
    return {"rating": updated}


@app.delete("/ratings/{rating_id}")
def delete_rating(
    rating_id: int,
    roomie: Roomie = Depends(get_current_roomie),
    db: Session = Depends(get_db),
    cache: RoomStateCache = Depends(get_room_cache),
):
    rating = _require_own_rating(db, rating_id, roomie)
    task = TaskRepository(db).get(rating.task_id)
    TaskRatingRepository(db).delete(rating_id)
    if task is not None:
        cache.invalidate(task.room_id)
    return {"deleted": True, "rating_id": rating_id}
