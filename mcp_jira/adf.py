"""Conversion between plain text and Atlassian Document Format (ADF).

Jira Cloud REST API v3 takes and returns ADF documents for issue
descriptions, comment bodies and worklog comments.
"""

from enum import Enum
from typing import Any

ADF_VERSION = 1
PARAGRAPH_SEPARATOR = "\n\n"
LINE_SEPARATOR = "\n"
CODE_FENCE = "```"
LIST_BULLET = "•"
QUOTE_PREFIX = "> "
DEFAULT_MENTION_TEXT = "user"
MIN_HEADING_LEVEL = 1
MAX_HEADING_LEVEL = 6
# Nodes nested deeper than this render as empty text
MAX_NESTING_DEPTH = 100


class NodeType(str, Enum):
    """ADF node kinds with dedicated handling.

    Any other kind is treated as a plain container of child nodes.
    """

    DOC = "doc"
    PARAGRAPH = "paragraph"
    TEXT = "text"
    HARD_BREAK = "hardBreak"
    MENTION = "mention"
    HEADING = "heading"
    BULLET_LIST = "bulletList"
    ORDERED_LIST = "orderedList"
    LIST_ITEM = "listItem"
    BLOCKQUOTE = "blockquote"
    CODE_BLOCK = "codeBlock"


def _text_node(text: str) -> dict[str, Any]:
    return {"type": NodeType.TEXT.value, "text": text}


def _paragraph_node(paragraph: str) -> dict[str, Any]:
    inline: list[dict[str, Any]] = []
    for index, line in enumerate(paragraph.split(LINE_SEPARATOR)):
        if index:
            inline.append({"type": NodeType.HARD_BREAK.value})
        inline.append(_text_node(line))
    return {"type": NodeType.PARAGRAPH.value, "content": inline}


def text_to_adf(text: str) -> dict[str, Any]:
    """Wrap a plain-text string into a minimal ADF document.

    Blank lines separate paragraphs, single newlines become hard breaks.
    Nothing is escaped or normalized, so carriage returns and backtick
    fences are carried through as ordinary text.

    Args:
        text: Plain text, possibly empty

    Returns:
        A new ADF ``doc`` node with at least one paragraph
    """
    return {
        "type": NodeType.DOC.value,
        "version": ADF_VERSION,
        "content": [_paragraph_node(paragraph) for paragraph in text.split(PARAGRAPH_SEPARATOR)],
    }


def _children(node: dict[str, Any]) -> list[Any] | None:
    content = node.get("content")
    return content if isinstance(content, list) else None


def _attrs(node: dict[str, Any]) -> dict[str, Any]:
    attrs = node.get("attrs")
    return attrs if isinstance(attrs, dict) else {}


def _string_or(value: Any, default: str) -> str:
    return default if value is None else str(value)


def _heading_level(attrs: dict[str, Any]) -> int:
    level = attrs.get("level")
    if level is None:
        return MIN_HEADING_LEVEL
    try:
        parsed = int(level)
    except (TypeError, ValueError, OverflowError):
        return MIN_HEADING_LEVEL
    return min(max(parsed, MIN_HEADING_LEVEL), MAX_HEADING_LEVEL)


def _render_code_block(node: dict[str, Any]) -> str:
    language = _string_or(_attrs(node).get("language"), "")
    code = "".join(
        _string_or(child.get("text"), "")
        for child in _children(node) or []
        if isinstance(child, dict) and child.get("type") == NodeType.TEXT
    )
    return f"{CODE_FENCE}{language}{LINE_SEPARATOR}{code}{LINE_SEPARATOR}{CODE_FENCE}"


def _render_node(node: Any, depth: int = 0) -> str:
    """Render a single ADF node (and its subtree) as plain text."""
    if not isinstance(node, dict) or depth > MAX_NESTING_DEPTH:
        return ""

    node_type = node.get("type")
    if node_type == NodeType.TEXT:
        return _string_or(node.get("text"), "")
    if node_type == NodeType.HARD_BREAK:
        return LINE_SEPARATOR
    if node_type == NodeType.MENTION:
        return f"@{_string_or(_attrs(node).get('text'), DEFAULT_MENTION_TEXT)}"
    if node_type == NodeType.CODE_BLOCK:
        return _render_code_block(node)

    children = _children(node)
    if children is None:
        return ""

    inner = "".join(_render_node(child, depth + 1) for child in children)
    if node_type == NodeType.HEADING:
        return f"{'#' * _heading_level(_attrs(node))} {inner}"
    if node_type == NodeType.LIST_ITEM:
        return f"{LIST_BULLET} {inner}"
    if node_type == NodeType.BLOCKQUOTE:
        return LINE_SEPARATOR.join(f"{QUOTE_PREFIX}{line}" for line in inner.split(LINE_SEPARATOR))
    # bulletList and orderedList add nothing: each listItem carries its own bullet
    return inner


def adf_to_text(adf: Any) -> str:
    """Extract readable plain text from an ADF document (best-effort).

    Never raises: missing documents, unknown node kinds and absent
    attributes degrade to empty or unwrapped text.

    Args:
        adf: ADF document as decoded from JSON, or None

    Returns:
        Top-level blocks rendered and joined by blank lines
    """
    if not isinstance(adf, dict):
        return ""
    blocks = _children(adf)
    if blocks is None:
        return ""
    return PARAGRAPH_SEPARATOR.join(_render_node(block) for block in blocks)
