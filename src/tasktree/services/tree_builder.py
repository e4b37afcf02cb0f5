"""Turn the flat task collection into a forest of TaskTreeNode.

The flat collection is the only source of truth; trees are derived on demand
and never stored. All functions here are pure apart from logging.
"""

from __future__ import annotations

from collections import defaultdict, deque
from collections.abc import Iterable, Iterator

from tasktree.exceptions import IntegrityError
from tasktree.models import Task, TaskTreeNode
from tasktree.utils.logger import get_logger

logger = get_logger(__name__)


def build_tree(tasks: Iterable[Task]) -> list[TaskTreeNode]:
    """Build a forest from a flat task list.

    Children keep their input order. A task whose parent is not part of the
    input becomes a root; this is what filtered views rely on.

    Args:
        tasks: Flat task collection, any order

    Returns:
        Root nodes in input order, with ``level`` set on every node

    Raises:
        IntegrityError: If some tasks sit on a parent cycle
    """
    tasks = list(tasks)
    nodes: dict[int, TaskTreeNode] = {}
    for task in tasks:
        nodes[task.id] = TaskTreeNode(task=task)

    roots: list[TaskTreeNode] = []
    for task in tasks:
        node = nodes[task.id]
        parent_id = task.parent_id
        if parent_id is None:
            roots.append(node)
        elif parent_id in nodes:
            nodes[parent_id].children.append(node)
        else:
            logger.warning(
                "task %s references missing parent %s, shown as root", task.id, parent_id
            )
            roots.append(node)

    # Levels come from an explicit walk so depth never depends on input order.
    reached: set[int] = set()
    stack = [(root, 0) for root in reversed(roots)]
    while stack:
        node, level = stack.pop()
        if node.task.id in reached:
            continue
        reached.add(node.task.id)
        node.level = level
        stack.extend((child, level + 1) for child in reversed(node.children))

    if len(reached) < len(nodes):
        stuck = sorted(task_id for task_id in nodes if task_id not in reached)
        raise IntegrityError(f"Parent cycle detected among tasks: {stuck}")

    return roots


def flatten(forest: Iterable[TaskTreeNode]) -> Iterator[TaskTreeNode]:
    """Yield every node of ``forest`` in pre-order (parent before children)."""
    stack = list(reversed(list(forest)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def iter_subtree_ids(tasks: Iterable[Task], root_id: int) -> list[int]:
    """Return ``root_id`` followed by the ids of every descendant.

    Uses a worklist rather than recursion, so depth is unbounded. An id that
    is not in ``tasks`` yields an empty list.
    """
    children: dict[int, list[int]] = defaultdict(list)
    known: set[int] = set()
    for task in tasks:
        known.add(task.id)
        if task.parent_id is not None:
            children[task.parent_id].append(task.id)

    if root_id not in known:
        return []

    collected: list[int] = []
    seen: set[int] = set()
    queue = deque([root_id])
    while queue:
        task_id = queue.popleft()
        if task_id in seen:
            continue
        seen.add(task_id)
        collected.append(task_id)
        queue.extend(children.get(task_id, ()))
    return collected
