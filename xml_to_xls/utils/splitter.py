"""Decide which parts of a parsed tree become spreadsheet sheets.

Every list found while walking objects becomes a sheet named after its full
path, one flattened row per element. Objects are walked into. Scalars that no
list carries are gathered into a single metadata row.

The traversal returns its sheets instead of appending to a shared workbook,
so ``split`` depends on nothing but its input.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from .errors import DepthExceeded
from .flattener import flatten, join_key
from .parser import DEFAULT_MAX_DEPTH, VALUE_KEY, ParsedNode

log = logging.getLogger(__name__)

FlatRow = Dict[str, Any]
SheetPlan = Dict[str, List[FlatRow]]

ROOT_SHEET = "root"
METADATA_SHEET = "metadata"


def merge_plans(plan: SheetPlan, other: SheetPlan) -> SheetPlan:
    """Return a new plan with ``other``'s rows appended to same-named sheets."""
    merged = {name: list(rows) for name, rows in plan.items()}
    for name, rows in other.items():
        merged.setdefault(name, []).extend(rows)
    return merged


def free_sheet_name(plan: SheetPlan, name: str) -> str:
    """``name``, or ``name_2``, ``name_3``, ... when a sheet already uses it."""
    candidate = name
    counter = 1
    while candidate in plan:
        counter += 1
        candidate = join_key(name, str(counter))
    return candidate


def _list_rows(key: str, items: List[ParsedNode], max_depth: int) -> List[FlatRow]:
    rows = []
    for item in items:
        if isinstance(item, dict):
            rows.append(flatten(item, max_depth=max_depth))
        else:
            rows.append({key: item})
    return rows


def _walk(node: Dict[str, Any], path: str, max_depth: int, depth: int) -> Tuple[SheetPlan, FlatRow]:
    if depth > max_depth:
        raise DepthExceeded(f"Nesting exceeds the maximum depth of {max_depth} while splitting sheets")

    plan: SheetPlan = {}
    loose: FlatRow = {}
    for key, value in node.items():
        current = join_key(path, key)
        if isinstance(value, list):
            plan = merge_plans(plan, {current: _list_rows(key, value, max_depth)})
        elif isinstance(value, dict):
            nested_plan, nested_loose = _walk(value, current, max_depth, depth + 1)
            plan = merge_plans(plan, nested_plan)
            loose = {**loose, **nested_loose}
        else:
            loose = {**loose, current: value}
    return plan, loose


def split(root: ParsedNode, max_depth: int = DEFAULT_MAX_DEPTH, metadata_sheet: Optional[str] = METADATA_SHEET) -> SheetPlan:
    """Build the sheet plan for a parsed tree.

    A list root is treated as a single field named ``root``. Scalars outside
    any list go to ``metadata_sheet`` as one row, suffixed with ``_2``, ``_3``,
    ... when a list sheet already has that name; pass ``None`` to drop them.
    """
    if isinstance(root, list):
        root = {ROOT_SHEET: root}
    elif not isinstance(root, dict):
        root = {VALUE_KEY: root}

    plan, loose = _walk(root, "", max_depth, 0)

    if loose:
        if metadata_sheet:
            plan = merge_plans(plan, {free_sheet_name(plan, metadata_sheet): [loose]})
        else:
            log.info(f"Dropping {len(loose)} values found outside repeated elements")

    log.info(f"Split parsed tree into {len(plan)} sheet(s)")
    return plan
