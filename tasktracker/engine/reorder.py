"""Manual reorder logic for drag-and-drop on the visible view.

Positions refer to the filtered, sorted view; the result rewrites the
``order`` field of the canonical collection.
"""

from typing import Dict, Iterable, Optional, Sequence

from tasktracker.models.task import Task


def reorder_orders(
    view: Sequence[Task],
    tasks: Iterable[Task],
    from_index: int,
    to_index: int,
) -> Optional[Dict[str, int]]:
    """Compute new order values for moving a task within the view.

    The moved task takes the current order of the task at the target
    position, then every other task whose order is >= that value is shifted
    up by one. Tasks sharing an order value are resolved by the view's own
    sort, which falls back to the task id.

    Args:
        view: Current filtered/sorted view
        tasks: Canonical task collection
        from_index: View position of the task being moved
        to_index: View position it is dropped on

    Returns:
        Mapping of task id to new order for every task whose order changes,
        or None when the move is a no-op: either index is outside the view,
        or ``from_index == to_index`` (dropping a task on itself leaves the
        collection untouched)
    """
    if not (0 <= from_index < len(view)) or not (0 <= to_index < len(view)):
        return None
    if from_index == to_index:
        return None

    moved = view[from_index]
    target_order = view[to_index].order

    changes: Dict[str, int] = {}
    for task in tasks:
        if task.id == moved.id:
            new_order = target_order
        elif task.order >= target_order:
            new_order = task.order + 1
        else:
            continue
        if new_order != task.order:
            changes[task.id] = new_order
    return changes
