import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import select, insert, update, delete, and_

from db import engine, lists, tasks, gen_id, now_ts
from errors import ValidationError, DuplicateListName, Forbidden, NotFound
from schemas import ListName, ListOut, to_list_out
from security import require_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/lists", tags=["lists"])

MAX_LIST_NAME = 255

def owned_list(conn, user_id: str, list_id: str):
    """Return the list row if the user owns it.

    Raises NotFound for an unknown id and Forbidden for another user's list.
    """
    row = conn.execute(select(lists).where(lists.c.id == list_id)).mappings().first()
    if not row:
        raise NotFound("List not found")
    if row["user_id"] != user_id:
        logger.warning("user %s denied access to list %s", user_id, list_id)
        raise Forbidden("Operation not permitted")
    return row

def clean_list_name(name: str) -> str:
    n = (name or "").strip()
    if not n:
        raise ValidationError("List name is required")
    if len(n) > MAX_LIST_NAME:
        raise ValidationError(f"List name must not exceed {MAX_LIST_NAME} characters")
    return n

def ensure_name_free(conn, user_id: str, name: str, exclude_id: str | None = None):
    stmt = select(lists.c.id).where(and_(lists.c.user_id == user_id, lists.c.name == name))
    if exclude_id is not None:
        stmt = stmt.where(lists.c.id != exclude_id)
    if conn.execute(stmt).first():
        raise DuplicateListName("List with this name already exists")

@router.get("", response_model=List[ListOut])
def get_lists(user=Depends(require_user)):
    stmt = select(lists).where(lists.c.user_id == user["id"]).order_by(
        lists.c.is_default.desc(), lists.c.created_at.asc(), lists.c.id.asc()
    )
    with engine.connect() as conn:
        rows = conn.execute(stmt).mappings().all()
    return [to_list_out(r) for r in rows]

@router.get("/{list_id}", response_model=ListOut)
def get_list(list_id: str, user=Depends(require_user)):
    with engine.connect() as conn:
        row = owned_list(conn, user["id"], list_id)
    return to_list_out(row)

@router.post("", response_model=ListOut, status_code=status.HTTP_201_CREATED)
def create_list(payload: ListName, user=Depends(require_user)):
    name = clean_list_name(payload.name)
    lid = gen_id()
    with engine.begin() as conn:
        ensure_name_free(conn, user["id"], name)
        conn.execute(insert(lists).values(id=lid, user_id=user["id"], name=name, is_default=False, created_at=now_ts()))
        row = conn.execute(select(lists).where(lists.c.id == lid)).mappings().first()
    logger.info("created list %s for user %s", lid, user["id"])
    return to_list_out(row)

@router.api_route("/{list_id}", methods=["PUT", "PATCH"], response_model=ListOut)
def rename_list(list_id: str, payload: ListName, user=Depends(require_user)):
    name = clean_list_name(payload.name)
    with engine.begin() as conn:
        cur = owned_list(conn, user["id"], list_id)
        if cur["is_default"]:
            raise Forbidden("Cannot rename default list")
        ensure_name_free(conn, user["id"], name, exclude_id=list_id)
        row = conn.execute(
            update(lists).where(lists.c.id == list_id).values(name=name).returning(lists)
        ).mappings().first()
    return to_list_out(row)

@router.delete("/{list_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_list(list_id: str, user=Depends(require_user)):
    """Delete a list together with its tasks."""
    with engine.begin() as conn:
        cur = owned_list(conn, user["id"], list_id)
        if cur["is_default"]:
            raise Forbidden("Cannot delete default list")
        res = conn.execute(delete(tasks).where(tasks.c.list_id == list_id))
        conn.execute(delete(lists).where(lists.c.id == list_id))
    logger.info("deleted list %s (%d tasks)", list_id, res.rowcount)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
