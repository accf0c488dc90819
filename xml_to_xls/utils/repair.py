"""Heuristic clean-up of raw XML text before parsing.

``repair`` never fails. Each step is a plain text substitution, so the result
is only "more likely to parse": unbalanced or badly nested tags are left for
the tolerant parser to deal with.
"""
import re

BYTE_ORDER_MARK = "\ufeff"
ROOT_TAG = "root"

# Control characters other than tab/LF/CR, DEL and C1 controls, stray BOMs
# and the non-characters U+FFFE/U+FFFF
_INVALID_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f\ufeff\ufffe\uffff]")
_BARE_AMPERSAND = re.compile(r"&(?!(?:amp|lt|gt|quot|apos);)")
_TAG_EDGE_WHITESPACE = re.compile(r"<\s*(/?)\s*([^<>]*?)\s*>")
_WHITESPACE = re.compile(r"\s+")
_BETWEEN_TAGS = re.compile(r">\s+<")
_TAG_PAIR = re.compile(r"<[^>]+>.*</[^>]+>", re.DOTALL)


def strip_bom(text: str) -> str:
    return text.lstrip(BYTE_ORDER_MARK)


def remove_invalid_chars(text: str) -> str:
    return _INVALID_CHARS.sub("", text)


def escape_bare_ampersands(text: str) -> str:
    """Escape ``&`` unless it starts one of the five predefined XML entities."""
    return _BARE_AMPERSAND.sub("&amp;", text)


def normalize_tag_whitespace(text: str) -> str:
    """Turn ``< tag >`` into ``<tag>`` and ``</ tag >`` into ``</tag>``."""
    return _TAG_EDGE_WHITESPACE.sub(r"<\1\2>", text)


def collapse_whitespace(text: str) -> str:
    text = _WHITESPACE.sub(" ", text)
    return _BETWEEN_TAGS.sub("><", text)


def ensure_root(text: str) -> str:
    if _TAG_PAIR.search(text):
        return text
    return f"<{ROOT_TAG}>{text}</{ROOT_TAG}>"


def repair(text: str) -> str:
    """Sanitize raw XML text. Applying it twice gives the same result as once."""
    text = strip_bom(text)
    text = remove_invalid_chars(text)
    text = escape_bare_ampersands(text)
    text = normalize_tag_whitespace(text)
    text = collapse_whitespace(text)
    text = text.strip()
    return ensure_root(text)
