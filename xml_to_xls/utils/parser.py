"""Tolerant XML parsing.

Sanitized text is parsed with lxml under an ordered tuple of strategies, from
the most information-preserving to the most forgiving. The first strategy
that succeeds wins and ``ParseFailure`` is raised only when all of them fail.

Parsed nodes are plain Python values:

- a scalar: ``str``, or ``int``/``float``/``bool`` when coercion is enabled
- an object: ``dict`` mapping field names to nodes, in document order
- a list: ``list`` of objects or scalars, produced for repeated siblings

The returned tree is the content of the document element; the element's own
name is dropped.
"""
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from lxml import etree

from .errors import DepthExceeded, ParseFailure

log = logging.getLogger(__name__)

VALUE_KEY = "value"
TEXT_SUFFIX = "_text"
FRAGMENT_ROOT = "fragments"
DEFAULT_MAX_DEPTH = 200

Scalar = Union[str, int, float, bool]
ParsedNode = Union[Scalar, Dict[str, Any], List[Any]]

_XML_DECLARATION = re.compile(r"<\?xml[^>]*\?>")
_DOCTYPE = re.compile(r"<!DOCTYPE[^>]*>", re.IGNORECASE)
_INTEGER = re.compile(r"^-?(?:0|[1-9]\d*)$")
_DECIMAL = re.compile(r"^-?(?:0|[1-9]\d*)\.\d+(?:[eE][-+]?\d+)?$")


class AttributeCollision(ValueError):
    """An attribute and a child element map to the same field name."""


@dataclass(frozen=True)
class ParserStrategy:
    name: str
    keep_attributes: bool = True
    coerce_types: bool = False
    require_single_root: bool = True
    recover: bool = False


def default_strategies(coerce_types: bool = False) -> Tuple[ParserStrategy, ...]:
    return (
        ParserStrategy("strict", keep_attributes=True, coerce_types=coerce_types),
        ParserStrategy("relaxed", keep_attributes=False),
        ParserStrategy("fragments", keep_attributes=False, require_single_root=False, recover=True),
    )


def local_name(tag: str) -> str:
    """Strip a ``{namespace}`` or ``prefix:`` qualifier from a tag or attribute name."""
    if tag.startswith("{"):
        tag = tag.split("}", 1)[1]
    return tag.rsplit(":", 1)[-1]


def coerce_scalar(text: str) -> Scalar:
    lowered = text.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if _INTEGER.match(text):
        return int(text)
    if _DECIMAL.match(text):
        return float(text)
    return text


def _direct_text(element) -> str:
    parts = [element.text or ""]
    parts.extend(child.tail or "" for child in element)
    return " ".join(part.strip() for part in parts if part.strip())


def text_key(fields: Dict[str, Any]) -> str:
    """The field for an element's own text: ``value``, or ``value_text`` when an
    attribute or child already uses that name."""
    key = VALUE_KEY
    while key in fields:
        key += TEXT_SUFFIX
    return key


def element_to_node(element, strategy: ParserStrategy, max_depth: int = DEFAULT_MAX_DEPTH, depth: int = 0) -> ParsedNode:
    """Convert an lxml element into a parsed node."""
    if depth > max_depth:
        raise DepthExceeded(f"Element nesting exceeds the maximum depth of {max_depth}")

    def scalar(value: str) -> Scalar:
        return coerce_scalar(value) if strategy.coerce_types else value

    fields: Dict[str, Any] = {}
    if strategy.keep_attributes:
        for name, value in element.attrib.items():
            fields[local_name(name)] = scalar(value)

    grouped: Dict[str, List[ParsedNode]] = {}
    for child in element:
        # Comments and processing instructions have a non-string tag
        if not isinstance(child.tag, str):
            continue
        key = local_name(child.tag)
        grouped.setdefault(key, []).append(element_to_node(child, strategy, max_depth, depth + 1))

    text = _direct_text(element)
    if not fields and not grouped:
        return scalar(text)

    tag = local_name(element.tag)
    for key, nodes in grouped.items():
        if key in fields:
            raise AttributeCollision(f"<{tag}> has both an attribute and a child element named '{key}'")
        fields[key] = nodes[0] if len(nodes) == 1 else nodes

    if text:
        fields[text_key(fields)] = scalar(text)
    return fields


def _make_parser(strategy: ParserStrategy) -> etree.XMLParser:
    return etree.XMLParser(
        recover=strategy.recover,
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
        encoding="utf-8",
    )


def parse_with(text: str, strategy: ParserStrategy, max_depth: int = DEFAULT_MAX_DEPTH) -> ParsedNode:
    """Parse ``text`` under a single strategy, raising on any failure."""
    parser = _make_parser(strategy)
    if strategy.require_single_root:
        root = etree.fromstring(text.encode("utf-8"), parser)
    else:
        body = _DOCTYPE.sub("", _XML_DECLARATION.sub("", text))
        wrapped = f"<{FRAGMENT_ROOT}>{body}</{FRAGMENT_ROOT}>"
        root = etree.fromstring(wrapped.encode("utf-8"), parser)
    if root is None:
        raise ValueError("Document has no root element")
    return element_to_node(root, strategy, max_depth)


def parse(text: str, strategies: Optional[Sequence[ParserStrategy]] = None, max_depth: int = DEFAULT_MAX_DEPTH) -> ParsedNode:
    """Parse sanitized XML, trying each strategy in order until one succeeds."""
    if strategies is None:
        strategies = default_strategies()
    if not strategies:
        raise ParseFailure("No parser strategies configured")

    last_error = None
    last_strategy = None
    for strategy in strategies:
        try:
            result = parse_with(text, strategy, max_depth)
        except (etree.LxmlError, ValueError) as e:
            log.info(f"Parser strategy '{strategy.name}' failed: {str(e)}")
            last_error, last_strategy = e, strategy
            continue
        log.info(f"Parsed XML with strategy '{strategy.name}'")
        return result

    raise ParseFailure(f"All parser strategies failed; last strategy '{last_strategy.name}': {str(last_error)}")
