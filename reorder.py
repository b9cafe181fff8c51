"""Pure part of drag-drop reordering.

Only incomplete tasks are reorderable. A move is a single-element splice:
the task is taken out at ``source`` and inserted at ``target`` of the
incomplete sequence, then every incomplete task gets ``position = index``.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Sequence, Tuple


@dataclass
class ReorderPlan:
    tasks: List[dict]
    orders: List[Tuple[str, int]]

    def payload(self) -> List[dict]:
        return [{"id": tid, "position": pos} for tid, pos in self.orders]


def partition(tasks: Sequence[dict]) -> Tuple[List[dict], List[dict]]:
    incomplete = [t for t in tasks if not t["is_completed"]]
    completed = [t for t in tasks if t["is_completed"]]
    return incomplete, completed


def array_move(items: Sequence, source: int, target: int) -> list:
    n = len(items)
    if not (0 <= source < n and 0 <= target < n):
        raise IndexError(f"move {source} -> {target} out of range for {n} items")
    out = list(items)
    out.insert(target, out.pop(source))
    return out


def densify(tasks: Sequence[dict]) -> List[dict]:
    """Copies of ``tasks`` with positions 0..n-1 in sequence order."""
    return [{**t, "position": i} for i, t in enumerate(tasks)]


def is_reorderable(tasks: Sequence[dict]) -> bool:
    incomplete, _ = partition(tasks)
    return len(incomplete) > 1


def plan_move(tasks: Sequence[dict], source: int, target: int) -> ReorderPlan | None:
    """New cache order and position batch for a move, or None for a no-op.

    ``source`` and ``target`` index the incomplete subset. Completed tasks are
    appended unchanged after the re-densified incomplete ones.
    """
    incomplete, completed = partition(tasks)
    if len(incomplete) < 2 or source == target:
        return None
    moved = densify(array_move(incomplete, source, target))
    return ReorderPlan(
        tasks=moved + list(completed),
        orders=[(t["id"], t["position"]) for t in moved],
    )
