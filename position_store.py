"""Durable ordering of tasks inside a list.

Only incomplete tasks take part in ordering. Completed tasks keep whatever
position they had and are listed after the incomplete ones.
"""
from __future__ import annotations
import logging
from typing import Iterable, Tuple

from sqlalchemy import select, update, and_, func, case

from db import lists, tasks
from errors import ValidationError, Forbidden, Conflict

logger = logging.getLogger(__name__)

def ordered_tasks_stmt(list_id: str):
    """Tasks of a list: incomplete by position, then completed."""
    completed_last = case((tasks.c.is_completed.is_(True), 1), else_=0)
    return (
        select(tasks)
        .where(tasks.c.list_id == list_id)
        .order_by(completed_last.asc(), tasks.c.position.asc(), tasks.c.created_at.asc(), tasks.c.id.asc())
    )

def next_position(conn, list_id: str) -> int:
    cur = conn.execute(select(func.max(tasks.c.position)).where(tasks.c.list_id == list_id)).scalar()
    return 0 if cur is None else int(cur) + 1

def reopen_position(conn, task) -> int:
    """Position for a task moving from completed back to incomplete.

    The task keeps its old slot unless another incomplete task took it while
    it was completed; then it goes to the end of the list.
    """
    taken = conn.execute(
        select(tasks.c.id).where(and_(
            tasks.c.list_id == task["list_id"],
            tasks.c.position == task["position"],
            tasks.c.is_completed.is_(False),
            tasks.c.id != task["id"],
        ))
    ).first()
    if taken is None:
        return int(task["position"])
    return next_position(conn, task["list_id"])

def apply_positions(conn, list_id: str, user_id: str, orders: Iterable[Tuple[str, int]]) -> int:
    """Replace the positions of every incomplete task in one list.

    The batch must name exactly the list's incomplete tasks, each once, with
    distinct non-negative positions. Ids that are not tasks of this list are
    ``Forbidden``. A batch built from a stale view (a task reopened, completed
    or added since) is a ``Conflict``.

    Must run inside a transaction (``engine.begin()``). Every check happens
    before the first write, so a rejected batch leaves the list untouched.
    Returns the number of tasks updated.
    """
    orders = [(str(tid), int(pos)) for tid, pos in orders]
    if not orders:
        raise ValidationError("taskOrders must not be empty")
    if any(pos < 0 for _, pos in orders):
        raise ValidationError("Positions must be non-negative")

    owner = conn.execute(select(lists.c.user_id).where(lists.c.id == list_id)).scalar_one_or_none()
    if owner is None or owner != user_id:
        logger.warning("reorder rejected: list %s not owned by user %s", list_id, user_id)
        raise Forbidden("Operation not permitted")

    ids = [tid for tid, _ in orders]
    positions = [pos for _, pos in orders]
    if len(set(ids)) != len(ids):
        raise Conflict("Duplicate task id in reorder batch")
    if len(set(positions)) != len(positions):
        raise Conflict("Duplicate position in reorder batch")

    found = set(conn.execute(
        select(tasks.c.id).where(and_(
            tasks.c.id.in_(ids),
            tasks.c.list_id == list_id,
            tasks.c.user_id == user_id,
        ))
    ).scalars())
    if len(found) != len(ids):
        logger.warning("reorder rejected: %d task(s) outside list %s", len(ids) - len(found), list_id)
        raise Forbidden("Operation not permitted")

    incomplete = set(conn.execute(
        select(tasks.c.id).where(and_(
            tasks.c.list_id == list_id,
            tasks.c.is_completed.is_(False),
        ))
    ).scalars())
    if set(ids) != incomplete:
        logger.warning(
            "reorder rejected for list %s: batch has %d id(s), list has %d incomplete, %d in common",
            list_id, len(ids), len(incomplete), len(incomplete & set(ids)),
        )
        raise Conflict("Reorder batch does not match the list's incomplete tasks; reload and retry")

    for tid, pos in orders:
        conn.execute(update(tasks).where(tasks.c.id == tid).values(position=pos))
    logger.info("applied %d positions to list %s", len(orders), list_id)
    return len(orders)
