"""
Bao Rewrite Engine - locate and path-copy

The engine knows nothing about axioms. It provides:
1. locate(forest, ids) - find nodes and their immediate parents
2. rewrite_single_target(forest, id, transform) - replace one node
3. rewrite_sibling_group(forest, ids, transform) - replace a group of siblings
4. add_children(forest, parent_id, forms) - append under a parent or at root

Rewrites never mutate their input. Only the path from a root to the change is
rebuilt; ancestors keep their ids but get a new children tuple, and every
untouched subtree is passed through by reference.

A failed rewrite returns NOT_MODIFIED, which is distinct from [] (a valid,
empty forest).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.form import Form

Forest = List[Form]
SingleTransform = Callable[[Form], List[Form]]
GroupTransform = Callable[[List[Form]], List[Form]]


class _NotModified:
    __slots__ = ()

    def __repr__(self) -> str:
        return "NOT_MODIFIED"


NOT_MODIFIED = _NotModified()


# =============================================================================
# Locate
# =============================================================================


@dataclass(frozen=True)
class Located:
    node: Form
    parent: Optional[Form]

    @property
    def parent_id(self) -> Optional[str]:
        return self.parent.id if self.parent is not None else None


def locate(forest: Sequence[Form], ids: Iterable[str]) -> Dict[str, Located]:
    """
    Find each requested id in the forest.

    Args:
        forest: Root forms to search.
        ids: Ids to look for. Unknown ids are not an error.

    Returns:
        Dict mapping every found id to its Located record. Traversal stops as
        soon as all ids have been found.
    """
    wanted = set(ids)
    found: Dict[str, Located] = {}
    if not wanted:
        return found

    stack: List[Tuple[Form, Optional[Form]]] = [(root, None) for root in reversed(forest)]
    while stack and len(found) < len(wanted):
        node, parent = stack.pop()
        if node.id in wanted:
            found[node.id] = Located(node, parent)
        stack.extend((child, node) for child in reversed(node.children))
    return found


def index_forest(forest: Sequence[Form]) -> Dict[str, Tuple[Form, Optional[str]]]:
    """Every node in the forest keyed by id, with its parent's id (None at root)."""
    index: Dict[str, Tuple[Form, Optional[str]]] = {}
    stack: List[Tuple[Form, Optional[str]]] = [(root, None) for root in forest]
    while stack:
        node, parent_id = stack.pop()
        index[node.id] = (node, parent_id)
        stack.extend((child, node.id) for child in node.children)
    return index


# =============================================================================
# Rewrites
# =============================================================================


def _path_to(forest: Sequence[Form], target_id: str) -> Optional[List[Form]]:
    """Nodes from a root down to the target (inclusive), or None."""
    parents: Dict[int, Optional[Form]] = {}
    stack: List[Tuple[Form, Optional[Form]]] = [(root, None) for root in reversed(forest)]
    while stack:
        node, parent = stack.pop()
        parents[id(node)] = parent
        if node.id == target_id:
            path = [node]
            while parents[id(path[-1])] is not None:
                path.append(parents[id(path[-1])])
            path.reverse()
            return path
        stack.extend((child, node) for child in reversed(node.children))
    return None


def _splice(items: Sequence[Form], old: Form, replacement: Sequence[Form]) -> List[Form]:
    out: List[Form] = []
    for item in items:
        if item is old:
            out.extend(replacement)
        else:
            out.append(item)
    return out


def rewrite_single_target(forest: Sequence[Form], target_id: str, transform: SingleTransform):
    """
    Replace one node with the output of `transform`.

    Args:
        forest: Current root forms.
        target_id: Id of the node to rewrite.
        transform: Form -> list of Forms placed where the node was.

    Returns:
        The new forest, or NOT_MODIFIED if target_id is not in the forest.
    """
    path = _path_to(forest, target_id)
    if path is None:
        return NOT_MODIFIED

    replacement: List[Form] = list(transform(path[-1]))
    for depth in range(len(path) - 1, 0, -1):
        parent = path[depth - 1]
        children = _splice(parent.children, path[depth], replacement)
        replacement = [parent.with_children(children)]
    return _splice(forest, path[0], replacement)


def rewrite_sibling_group(forest: Sequence[Form], target_ids: Iterable[str],
                          transform: GroupTransform):
    """
    Replace a group of siblings with the output of `transform`.

    Every id must resolve and all nodes must share one parent (or all be
    roots); otherwise NOT_MODIFIED. The transform receives the nodes in the
    order their ids were given. Survivors keep their positions and the
    transform's output is appended after them.
    """
    unique_ids = list(dict.fromkeys(target_ids))
    if not unique_ids:
        return NOT_MODIFIED

    located = locate(forest, unique_ids)
    if len(located) != len(unique_ids):
        return NOT_MODIFIED

    parent_ids = {entry.parent_id for entry in located.values()}
    if len(parent_ids) != 1:
        return NOT_MODIFIED

    targets = [located[fid].node for fid in unique_ids]
    transformed = list(transform(targets))
    removed = set(unique_ids)

    parent = located[unique_ids[0]].parent
    if parent is None:
        return [f for f in forest if f.id not in removed] + transformed

    def _replace_children(current: Form) -> List[Form]:
        kept = [c for c in current.children if c.id not in removed]
        return [current.with_children(kept + transformed)]

    return rewrite_single_target(forest, parent.id, _replace_children)


def add_children(forest: Sequence[Form], parent_id: Optional[str], new_children: Sequence[Form]):
    """Append forms at the root (parent_id None) or under the given parent."""
    if parent_id is None:
        return list(forest) + list(new_children)

    def _append(current: Form) -> List[Form]:
        return [current.with_children(list(current.children) + list(new_children))]

    return rewrite_single_target(forest, parent_id, _append)
