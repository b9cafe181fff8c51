import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import select, insert, update, delete, and_

from db import engine, lists, tasks, gen_id, now_ts
from errors import ValidationError, Forbidden, NotFound
from position_store import apply_positions, next_position, reopen_position, ordered_tasks_stmt
from routes_lists import owned_list
from schemas import TaskCreate, TaskUpdate, TaskOut, ReorderPayload, to_task_out
from security import require_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["tasks"])

MAX_TITLE = 500

def clean_title(title: str) -> str:
    t = (title or "").strip()
    if not t:
        raise ValidationError("Task title is required")
    if len(t) > MAX_TITLE:
        raise ValidationError(f"Task title must not exceed {MAX_TITLE} characters")
    return t

def owned_task(conn, user_id: str, task_id: str):
    row = conn.execute(select(tasks).where(tasks.c.id == task_id)).mappings().first()
    if not row:
        raise NotFound("Task not found")
    if row["user_id"] != user_id:
        logger.warning("user %s denied access to task %s", user_id, task_id)
        raise Forbidden("Operation not permitted")
    return row

def task_with_list_name(conn, task_id: str):
    stmt = (
        select(tasks, lists.c.name.label("list_name"))
        .join(lists, tasks.c.list_id == lists.c.id)
        .where(tasks.c.id == task_id)
    )
    return conn.execute(stmt).mappings().first()

@router.get("/lists/{list_id}/tasks", response_model=List[TaskOut])
def get_tasks(list_id: str, user=Depends(require_user)):
    with engine.connect() as conn:
        owned_list(conn, user["id"], list_id)
        rows = conn.execute(ordered_tasks_stmt(list_id)).mappings().all()
    return [to_task_out(r) for r in rows]

@router.get("/tasks/important", response_model=List[TaskOut])
def get_important_tasks(user=Depends(require_user)):
    stmt = (
        select(tasks, lists.c.name.label("list_name"))
        .join(lists, tasks.c.list_id == lists.c.id)
        .where(and_(tasks.c.user_id == user["id"], tasks.c.is_important.is_(True)))
        .order_by(tasks.c.created_at.desc(), tasks.c.id.desc())
    )
    with engine.connect() as conn:
        rows = conn.execute(stmt).mappings().all()
    return [to_task_out(r) for r in rows]

@router.post("/lists/{list_id}/tasks", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(list_id: str, payload: TaskCreate, user=Depends(require_user)):
    title = clean_title(payload.title)
    tid = gen_id(); ts = now_ts()
    with engine.begin() as conn:
        owned_list(conn, user["id"], list_id)
        stmt = insert(tasks).values(
            id=tid, list_id=list_id, user_id=user["id"], title=title,
            is_completed=False, is_important=False, position=next_position(conn, list_id),
            created_at=ts, updated_at=ts, completed_at=None,
        ).returning(tasks)
        row = conn.execute(stmt).mappings().first()
    logger.info("created task %s in list %s at position %s", tid, list_id, row["position"])
    return to_task_out(row)

@router.patch("/tasks/{task_id}", response_model=TaskOut)
def update_task(task_id: str, payload: TaskUpdate, user=Depends(require_user)):
    with engine.begin() as conn:
        cur = owned_task(conn, user["id"], task_id)
        values = {}
        if payload.title is not None:
            values["title"] = clean_title(payload.title)
        if payload.is_completed is not None and payload.is_completed != bool(cur["is_completed"]):
            values["is_completed"] = payload.is_completed
            if payload.is_completed:
                values["completed_at"] = now_ts()
            else:
                values["completed_at"] = None
                values["position"] = reopen_position(conn, cur)
        if payload.is_important is not None:
            values["is_important"] = payload.is_important
        if values:
            values["updated_at"] = now_ts()
            conn.execute(update(tasks).where(tasks.c.id == task_id).values(**values))
        row = task_with_list_name(conn, task_id)
    return to_task_out(row)

@router.patch("/lists/{list_id}/tasks/reorder", status_code=status.HTTP_204_NO_CONTENT)
def reorder_tasks(list_id: str, payload: ReorderPayload, user=Depends(require_user)):
    orders = [(o.id, o.position) for o in payload.taskOrders]
    with engine.begin() as conn:
        apply_positions(conn, list_id, user["id"], orders)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: str, user=Depends(require_user)):
    with engine.begin() as conn:
        owned_task(conn, user["id"], task_id)
        conn.execute(delete(tasks).where(tasks.c.id == task_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
