"""View selectors and their resolution to concrete list ids.

A selector names what the user is looking at: a stored list, the "My Day"
view (backed by the user's default list) or the "Important" view (a query
over every list, with no single backing list).
"""
from __future__ import annotations
import enum
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from errors import OperationNotSupportedForView, UnresolvedDefaultList


class SelectorKind(enum.Enum):
    LIST = "list"
    MY_DAY = "my-day"
    IMPORTANT = "important"


@dataclass(frozen=True)
class ViewSelector:
    kind: SelectorKind
    list_id: Optional[str] = None

    def __post_init__(self):
        if (self.kind is SelectorKind.LIST) != (self.list_id is not None):
            raise ValueError("list_id is required for LIST selectors and only for them")

    @classmethod
    def list(cls, list_id: str) -> "ViewSelector":
        return cls(SelectorKind.LIST, list_id)

    @classmethod
    def my_day(cls) -> "ViewSelector":
        return cls(SelectorKind.MY_DAY)

    @classmethod
    def important(cls) -> "ViewSelector":
        return cls(SelectorKind.IMPORTANT)

    @property
    def is_important(self) -> bool:
        return self.kind is SelectorKind.IMPORTANT


class ViewQuery(enum.Enum):
    """Resolution of a view that reads a query rather than one list."""

    IMPORTANT = "important"


IMPORTANT_QUERY = ViewQuery.IMPORTANT

Resolved = Union[str, ViewQuery]


def resolve(selector: ViewSelector, known_lists: Iterable[dict] = (), default_list_id: Optional[str] = None) -> Resolved:
    """Map a selector to the list id it reads from, or to IMPORTANT_QUERY.

    Concrete ids pass through unchanged; the server checks they exist.
    ``known_lists`` is accepted so callers re-resolve whenever their list
    state changes; resolution itself only needs ``default_list_id``.
    """
    if selector.kind is SelectorKind.MY_DAY:
        if default_list_id is None:
            raise UnresolvedDefaultList("Default list has not been loaded yet")
        return default_list_id
    if selector.kind is SelectorKind.IMPORTANT:
        return IMPORTANT_QUERY
    if selector.kind is SelectorKind.LIST:
        return selector.list_id
    raise ValueError(f"Unknown selector kind: {selector.kind!r}")


def resolve_for_write(selector: ViewSelector, known_lists: Iterable[dict] = (), default_list_id: Optional[str] = None) -> str:
    """Like resolve(), but only a single list id is acceptable."""
    resolved = resolve(selector, known_lists, default_list_id)
    if resolved is IMPORTANT_QUERY:
        raise OperationNotSupportedForView("Cannot add or reorder tasks in the Important view. Select a specific list.")
    return resolved
