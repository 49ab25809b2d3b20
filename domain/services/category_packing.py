from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Dict, List, Tuple

from domain.errors import InvalidConfiguration
from domain.models import CATEGORY_ORDER, Category, ResourceLeaf


@dataclass(frozen=True)
class PackedCategory:
    rows: int
    positions: Tuple[Tuple[int, int], ...]


def _ensure_width(width: int) -> None:
    if width <= 0:
        msg = f"Grid width must be a positive integer, got {width!r}"
        raise InvalidConfiguration(msg)


def rows_needed(count: int, width: int) -> int:
    _ensure_width(width)
    return -(-count // width)


def signer_rows(count: int, width: int) -> int:
    # The signer block always reserves a row so accounts start at a fixed offset.
    return max(1, rows_needed(count, width))


def position_of(index: int, width: int) -> Tuple[int, int]:
    """Row-major (row, column) of the item at ``index``."""
    _ensure_width(width)
    return divmod(index, width)


def pack(items: Sequence[object], width: int, start: int = 0) -> PackedCategory:
    """Place ``items`` row-major, numbering from ``start`` inside a shared block."""
    positions = tuple(position_of(start + index, width) for index in range(len(items)))
    return PackedCategory(rows=rows_needed(start + len(items), width), positions=positions)


def classify(leaf: ResourceLeaf) -> Category:
    if leaf.is_signer:
        return Category.SIGNER
    if leaf.is_mutable:
        return Category.MUTABLE
    return Category.IMMUTABLE


def partition(leaves: Sequence[ResourceLeaf]) -> Dict[Category, List[ResourceLeaf]]:
    """Split leaves by category, keeping arrival order inside each one."""
    buckets: Dict[Category, List[ResourceLeaf]] = {
        category: [] for category in CATEGORY_ORDER if category != Category.ARGUMENT
    }
    for leaf in leaves:
        buckets[classify(leaf)].append(leaf)
    return buckets
