from __future__ import annotations

import logging
from typing import Dict, List, Optional

from api_client import ApiClient
from errors import TodoError, ValidationError
from views import Resolved, SelectorKind, ViewSelector, resolve, resolve_for_write

logger = logging.getLogger(__name__)


class ListCollection:
    """Client-side list state: the user's lists, the default list id and the active selector.

    The default list is kept out of ``lists``; it is only reachable through
    the My Day selector.
    """

    def __init__(self, api: ApiClient, selector: Optional[ViewSelector] = None):
        self.api = api
        self.lists: List[Dict] = []
        self.default_list_id: Optional[str] = None
        self.selector = selector or ViewSelector.my_day()
        self.is_loading = True
        self.error: Optional[TodoError] = None

    def _fail(self, exc: TodoError) -> None:
        logger.warning("list operation failed: %s", exc)
        self.error = exc

    def resolve(self, selector: Optional[ViewSelector] = None) -> Resolved:
        return resolve(selector or self.selector, self.lists, self.default_list_id)

    def resolve_for_write(self, selector: Optional[ViewSelector] = None) -> str:
        return resolve_for_write(selector or self.selector, self.lists, self.default_list_id)

    def select(self, selector: ViewSelector) -> None:
        self.selector = selector

    @property
    def selected_name(self) -> Optional[str]:
        if self.selector.kind is SelectorKind.MY_DAY:
            return "My Day"
        if self.selector.is_important:
            return "Important Tasks"
        for lst in self.lists:
            if lst["id"] == self.selector.list_id:
                return lst["name"]
        return None

    async def fetch(self) -> None:
        try:
            all_lists = await self.api.get_lists()
        except TodoError as e:
            self._fail(e)
            raise
        finally:
            self.is_loading = False
        default = next((lst for lst in all_lists if lst["is_default"]), None)
        self.default_list_id = default["id"] if default else None
        self.lists = [lst for lst in all_lists if not lst["is_default"]]

    async def create(self, name: str) -> Dict:
        if not name or not name.strip():
            raise ValidationError("List name is required")
        try:
            new_list = await self.api.create_list(name.strip())
        except TodoError as e:
            self._fail(e)
            raise
        self.lists.append(new_list)
        self.selector = ViewSelector.list(new_list["id"])
        return new_list

    async def rename(self, list_id: str, name: str) -> Dict:
        if not name or not name.strip():
            raise ValidationError("List name is required")
        try:
            updated = await self.api.update_list(list_id, name.strip())
        except TodoError as e:
            self._fail(e)
            raise
        self.lists = [updated if lst["id"] == list_id else lst for lst in self.lists]
        return updated

    async def delete(self, list_id: str) -> None:
        try:
            await self.api.delete_list(list_id)
        except TodoError as e:
            self._fail(e)
            raise
        self.lists = [lst for lst in self.lists if lst["id"] != list_id]
        if self.selector.list_id == list_id:
            self.selector = ViewSelector.my_day()
