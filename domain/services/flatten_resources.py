from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import List, Set, Tuple

from domain.errors import MalformedInput
from domain.models import ResourceGroup, ResourceLeaf

_EXHAUSTED = object()


def flatten(requirement: ResourceLeaf | ResourceGroup) -> List[ResourceLeaf]:
    """Expand nested account groups into leaves, depth-first and left to right.

    Group names are dropped. A group reachable from itself raises
    ``MalformedInput``; so does any item that is neither a leaf nor a group.
    An explicit stack keeps deep nesting clear of the interpreter recursion limit.
    """
    if isinstance(requirement, ResourceLeaf):
        return [requirement]
    if not isinstance(requirement, ResourceGroup):
        raise MalformedInput(_unknown_item_message(requirement))

    leaves: List[ResourceLeaf] = []
    active: Set[int] = {id(requirement)}
    stack: List[Tuple[ResourceGroup, Iterator[object]]] = [
        (requirement, iter(requirement.accounts))
    ]
    while stack:
        group, children = stack[-1]
        child = next(children, _EXHAUSTED)
        if child is _EXHAUSTED:
            stack.pop()
            active.discard(id(group))
            continue
        if isinstance(child, ResourceLeaf):
            leaves.append(child)
        elif isinstance(child, ResourceGroup):
            if id(child) in active:
                msg = f"Account group {child.name!r} contains itself"
                raise MalformedInput(msg)
            active.add(id(child))
            stack.append((child, iter(child.accounts)))
        else:
            raise MalformedInput(_unknown_item_message(child))
    return leaves


def flatten_all(requirements: Iterable[ResourceLeaf | ResourceGroup]) -> List[ResourceLeaf]:
    return flatten(ResourceGroup.model_construct(name="", accounts=list(requirements)))


def _unknown_item_message(item: object) -> str:
    return f"Unsupported account item: {type(item).__name__}"
