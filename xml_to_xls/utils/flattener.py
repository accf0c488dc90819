import logging
from typing import Any, Dict

from .errors import DepthExceeded
from .parser import DEFAULT_MAX_DEPTH, VALUE_KEY, ParsedNode

log = logging.getLogger(__name__)

KEY_SEPARATOR = "_"


def join_key(prefix: str, key: str) -> str:
    return f"{prefix}{KEY_SEPARATOR}{key}" if prefix else key


def flatten(node: ParsedNode, prefix: str = "", max_depth: int = DEFAULT_MAX_DEPTH, _depth: int = 0) -> Dict[str, Any]:
    """Collapse a parsed node into a single-level row of compound keys.

    Nested objects contribute ``parent_child`` keys. A list found inside the
    node contributes its first element only. When two paths produce the same
    key the later one wins.
    """
    if _depth > max_depth:
        raise DepthExceeded(f"Nesting exceeds the maximum depth of {max_depth} while flattening")

    if isinstance(node, list):
        if not node:
            return {prefix or VALUE_KEY: ""}
        log.debug(f"Flattening first of {len(node)} repeated elements at '{prefix}'")
        return flatten(node[0], prefix, max_depth, _depth + 1)

    if not isinstance(node, dict):
        return {prefix or VALUE_KEY: node}

    row: Dict[str, Any] = {}
    for key, value in node.items():
        for flat_key, flat_value in flatten(value, join_key(prefix, key), max_depth, _depth + 1).items():
            if flat_key in row:
                log.warning(f"Flattened key collision on '{flat_key}'; keeping the later value")
            row[flat_key] = flat_value
    return row
