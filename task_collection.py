"""Client-side task cache for one active view.

Edits are applied to the cache before the server answers. When the server
confirms, its row replaces the cached one. When it fails, the error is
stored on ``error`` and re-raised, and the optimistic state stays visible:
the previous server value is not kept, so there is nothing to roll back to.
Responses are not sequenced; the last one to arrive for a task wins.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from api_client import ApiClient
from errors import NotFound, OperationNotSupportedForView, ReorderInProgress, TodoError, ValidationError
from list_collection import ListCollection
from reorder import is_reorderable, plan_move
from views import IMPORTANT_QUERY, ViewSelector

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "is_completed", "is_important")


class TaskCollectionManager:
    def __init__(self, api: ApiClient, lists: ListCollection, selector: Optional[ViewSelector] = None):
        self.api = api
        self.lists = lists
        self.selector = selector or lists.selector
        self.tasks: List[Dict] = []
        self.is_loading = False
        self.error: Optional[TodoError] = None
        self._reorder_pending = False

    def _fail(self, exc: TodoError) -> None:
        logger.warning("task operation failed: %s", exc)
        self.error = exc

    def _find(self, task_id: str) -> Dict:
        for t in self.tasks:
            if t["id"] == task_id:
                return t
        raise NotFound(f"Task {task_id} is not in the current view")

    def _replace(self, row: Dict) -> None:
        self.tasks = [row if t["id"] == row["id"] else t for t in self.tasks]

    def _remove(self, task_id: str) -> None:
        self.tasks = [t for t in self.tasks if t["id"] != task_id]

    def _write_list_id(self) -> str:
        return self.lists.resolve_for_write(self.selector)

    @property
    def reorder_pending(self) -> bool:
        return self._reorder_pending

    @property
    def can_reorder(self) -> bool:
        return not self.selector.is_important and not self._reorder_pending and is_reorderable(self.tasks)

    async def load(self, selector: Optional[ViewSelector] = None) -> List[Dict]:
        """Replace the cache with the server's tasks for ``selector`` (default: the active one)."""
        if selector is not None:
            self.selector = selector
        self.is_loading = True
        try:
            target = self.lists.resolve(self.selector)
            if target is IMPORTANT_QUERY:
                data = await self.api.get_important_tasks()
            else:
                data = await self.api.get_tasks(target)
        except TodoError as e:
            self._fail(e)
            raise
        finally:
            self.is_loading = False
        self.tasks = list(data)
        return self.tasks

    async def create(self, title: str) -> Dict:
        if self.selector.is_important:
            raise OperationNotSupportedForView("Cannot add tasks to the Important view. Select a specific list.")
        if not title or not title.strip():
            raise ValidationError("Task title is required")
        try:
            new_task = await self.api.create_task(self._write_list_id(), title.strip())
        except TodoError as e:
            self._fail(e)
            raise
        self.tasks.append(new_task)
        return new_task

    async def update(self, task_id: str, **fields) -> Dict:
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
        if "title" in fields:
            if not fields["title"] or not fields["title"].strip():
                raise ValidationError("Task title is required")
            fields["title"] = fields["title"].strip()
        return await self._persist(task_id, fields)

    async def toggle_complete(self, task_id: str) -> Dict:
        task = self._find(task_id)
        return await self._persist(task_id, {"is_completed": not task["is_completed"]})

    async def toggle_important(self, task_id: str) -> Dict:
        task = self._find(task_id)
        return await self._persist(task_id, {"is_important": not task["is_important"]})

    async def _persist(self, task_id: str, fields: Dict) -> Dict:
        """Apply ``fields`` optimistically, then replace the row with the server's.

        In the Important view a confirmed row that is no longer important is
        dropped from the cache instead, since it no longer matches the query.
        """
        in_important_view = self.selector.is_important
        self._replace({**self._find(task_id), **fields})
        try:
            row = await self.api.update_task(task_id, fields)
        except TodoError as e:
            self._fail(e)
            raise
        if in_important_view and not row["is_important"]:
            self._remove(task_id)
        else:
            self._replace(row)
        return row

    async def delete(self, task_id: str) -> None:
        try:
            await self.api.delete_task(task_id)
        except TodoError as e:
            self._fail(e)
            raise
        self._remove(task_id)

    async def reorder(self, source: int, target: int) -> bool:
        """Move the incomplete task at ``source`` to ``target`` and persist the new order.

        Returns False when the move is a no-op. After a successful write the
        list is re-fetched so concurrent edits elsewhere are picked up. If the
        cache is stale the server answers with ``Conflict``; the optimistic
        order stays until the next ``load()``.
        """
        if self.selector.is_important:
            raise OperationNotSupportedForView("Tasks in the Important view span several lists and cannot be reordered.")
        list_id = self._write_list_id()
        plan = plan_move(self.tasks, source, target)
        if plan is None:
            return False
        if self._reorder_pending:
            raise ReorderInProgress("A previous reorder is still being saved")

        self.tasks = plan.tasks
        self._reorder_pending = True
        try:
            await self.api.reorder_tasks(list_id, plan.payload())
        except TodoError as e:
            self._fail(e)
            raise
        finally:
            self._reorder_pending = False
        await self.load()
        return True
