from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Dict, List, Tuple

from domain.models import (
    CATEGORY_COLORS,
    CATEGORY_LABELS,
    DEFAULT_PROGRAM_VERSION,
    SEPARATOR_COLOR,
    CanvasPlan,
    Category,
    ColumnRows,
    DiagramPlan,
    DrawPrimitive,
    FilledRect,
    FontWeight,
    GridSpec,
    LayoutPlacement,
    Operation,
    Point,
    ProgramDescription,
    Text,
)
from domain.ports.layout import LayoutEngine
from domain.services.category_packing import pack, partition, rows_needed, signer_rows
from domain.services.flatten_resources import flatten_all

logger = logging.getLogger(__name__)

# Categories sharing one row numbering. Mutable and immutable accounts form a
# single "accounts" block; its order must follow CATEGORY_ORDER.
COLUMN_BLOCKS: Tuple[Tuple[Category, ...], ...] = (
    (Category.SIGNER,),
    (Category.MUTABLE, Category.IMMUTABLE),
    (Category.ARGUMENT,),
)

Labels = Tuple[str, str]


def _column_entries(operation: Operation) -> Dict[Category, List[Labels]]:
    buckets = partition(flatten_all(operation.accounts))
    entries: Dict[Category, List[Labels]] = {
        category: [(CATEGORY_LABELS[category], leaf.name) for leaf in leaves]
        for category, leaves in buckets.items()
    }
    entries[Category.ARGUMENT] = [(arg.type_label(), arg.name) for arg in operation.args]
    return entries


def _block_rows(block: Tuple[Category, ...], count: int, width: int) -> int:
    if block[0] == Category.SIGNER:
        return signer_rows(count, width)
    return rows_needed(count, width)


def column_rows(operation: Operation, grid: GridSpec) -> ColumnRows:
    entries = _column_entries(operation)
    signers, accounts, arguments = (
        _block_rows(block, sum(len(entries[category]) for category in block), grid.width)
        for block in COLUMN_BLOCKS
    )
    return ColumnRows(signers=signers, accounts=accounts, arguments=arguments)


def _box_corners(grid: GridSpec, origin_x: int, row: int, col: int) -> Tuple[Point, Point]:
    left = origin_x + grid.buffer * (col + 1) + grid.box_width * col
    top = grid.rows_top + row * grid.row_pitch
    return Point(left, top), Point(left + grid.box_width, top + grid.box_height)


def _title_placement(operation: Operation, grid: GridSpec, origin_x: int) -> LayoutPlacement:
    center_x = origin_x + grid.column_width // 2
    return LayoutPlacement(
        category=Category.OPERATION,
        top_left=Point(center_x - grid.box_width // 2, grid.title_top),
        bottom_right=Point(center_x + grid.box_width // 2, grid.title_top + grid.box_height),
        primary_label=operation.heading(),
        secondary_label=operation.title(),
    )


def plan_column(operation: Operation, grid: GridSpec, column_index: int) -> List[LayoutPlacement]:
    """Title box followed by every account and argument box of one operation."""
    origin_x = column_index * grid.column_stride
    entries = _column_entries(operation)
    placements = [_title_placement(operation, grid, origin_x)]

    row_offset = 0
    for block in COLUMN_BLOCKS:
        index = 0
        for category in block:
            items = entries[category]
            packed = pack(items, grid.width, start=index)
            for (primary, secondary), (row, col) in zip(items, packed.positions):
                top_left, bottom_right = _box_corners(grid, origin_x, row_offset + row, col)
                placements.append(
                    LayoutPlacement(
                        category=category,
                        top_left=top_left,
                        bottom_right=bottom_right,
                        primary_label=primary,
                        secondary_label=secondary,
                    )
                )
            index += len(items)
        row_offset += _block_rows(block, index, grid.width)
    return placements


def plan_canvas(operations: Sequence[Operation], grid: GridSpec) -> CanvasPlan:
    columns = len(operations)
    if not columns:
        return CanvasPlan(width=0, height=grid.header_height, rows=0)
    rows = max(column_rows(operation, grid).total for operation in operations)
    width = columns * grid.column_width + (columns - 1) * grid.separator_width
    height = grid.rows_top + 2 * grid.buffer + rows * grid.row_pitch
    return CanvasPlan(
        width=width,
        height=height,
        rows=rows,
        column_origins=tuple(index * grid.column_stride for index in range(columns)),
    )


def header_primitives(
    program_name: str, version: str, canvas: CanvasPlan, grid: GridSpec
) -> List[DrawPrimitive]:
    center_x = canvas.width // 2
    return [
        Text(
            content=f"Anchor Program: {program_name}",
            anchor=Point(center_x, grid.header_height // 4),
            font_size=grid.title_font_size,
            font_weight=FontWeight.BOLD,
        ),
        Text(
            content=f"Version: {version}",
            anchor=Point(center_x, grid.header_height // 2),
            font_size=grid.title_font_size,
        ),
    ]


def separator_primitives(canvas: CanvasPlan, grid: GridSpec) -> List[DrawPrimitive]:
    separators: List[DrawPrimitive] = []
    for index in range(1, canvas.columns):
        right = index * grid.column_stride
        separators.append(
            FilledRect(
                top_left=Point(right - grid.separator_width, grid.title_top),
                bottom_right=Point(right, canvas.height - 3 * grid.buffer),
                fill_color=SEPARATOR_COLOR,
            )
        )
    return separators


def placement_primitives(placement: LayoutPlacement, grid: GridSpec) -> List[DrawPrimitive]:
    center_x = placement.top_left.x + placement.width // 2
    top = placement.top_left.y
    return [
        FilledRect(
            top_left=placement.top_left,
            bottom_right=placement.bottom_right,
            fill_color=CATEGORY_COLORS[placement.category],
        ),
        Text(
            content=placement.primary_label,
            anchor=Point(center_x, top + placement.height // 3),
            font_size=grid.text_font_size,
        ),
        Text(
            content=placement.secondary_label,
            anchor=Point(center_x, top + 2 * placement.height // 3),
            font_size=grid.text_font_size,
        ),
    ]


def _assemble(
    operations: Sequence[Operation],
    grid: GridSpec,
    canvas: CanvasPlan,
    program_name: str,
    version: str,
) -> List[DrawPrimitive]:
    primitives = header_primitives(program_name, version, canvas, grid)
    primitives.extend(separator_primitives(canvas, grid))
    for index, operation in enumerate(operations):
        for placement in plan_column(operation, grid, index):
            primitives.extend(placement_primitives(placement, grid))
    return primitives


def build(
    operations: Sequence[Operation],
    grid: GridSpec,
    program_name: str = "",
    version: str = DEFAULT_PROGRAM_VERSION,
) -> List[DrawPrimitive]:
    operations = list(operations)
    canvas = plan_canvas(operations, grid)
    return _assemble(operations, grid, canvas, program_name, version)


class GridLayoutEngine(LayoutEngine):
    def __init__(self, config: GridSpec | None = None) -> None:
        self.config = config or GridSpec()

    def build_plan(self, program: ProgramDescription) -> DiagramPlan:
        operations = program.operations()
        canvas = plan_canvas(operations, self.config)
        primitives = _assemble(operations, self.config, canvas, program.name, program.version)
        logger.debug(
            "Planned %s: %d columns, %d rows, canvas %dx%d, %d primitives",
            program.name,
            canvas.columns,
            canvas.rows,
            canvas.width,
            canvas.height,
            len(primitives),
        )
        return DiagramPlan(
            program_name=program.name,
            version=program.version,
            canvas=canvas,
            primitives=tuple(primitives),
        )
