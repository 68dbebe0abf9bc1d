"""
Structured document field: configuration and validation.

A document is the JSON node tree produced by the rich-text editor. Element
nodes carry ``type`` and ``children``; leaves carry ``text`` plus optional
boolean marks. Which node types are accepted depends on the field's
``DocumentFieldConfig``.
"""

from dataclasses import dataclass
from typing import Any, Iterable
from urllib.parse import urlparse

TEXT = "text"

MARKS = frozenset(
    {"bold", "italic", "underline", "strikethrough", "code", "superscript", "subscript", "keyboard"}
)

# Element types gated behind ``formatting=True``
FORMATTING_TYPES = frozenset(
    {
        "heading",
        "blockquote",
        "code",
        "ordered-list",
        "unordered-list",
        "list-item",
        "list-item-content",
    }
)

_INLINE = frozenset({TEXT, "link"})
_BLOCK = frozenset(
    {"paragraph", "heading", "blockquote", "code", "ordered-list", "unordered-list", "divider"}
)

ALLOWED_CHILDREN: dict[str, frozenset] = {
    "paragraph": _INLINE,
    "heading": _INLINE,
    "blockquote": frozenset({"paragraph"}),
    "code": frozenset({TEXT}),
    "ordered-list": frozenset({"list-item"}),
    "unordered-list": frozenset({"list-item"}),
    "list-item": frozenset({"list-item-content", "ordered-list", "unordered-list"}),
    "list-item-content": _INLINE,
    "layout": frozenset({"layout-area"}),
    "layout-area": _BLOCK,
    "divider": frozenset({TEXT}),
    "link": frozenset({TEXT}),
}

TOP_LEVEL = _BLOCK | {"layout"}

SAFE_LINK_SCHEMES = frozenset({"http", "https", "mailto", "tel"})


class DocumentValidationError(ValueError):
    """Raised when a document does not satisfy its field configuration."""

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


@dataclass(frozen=True)
class DocumentFieldConfig:
    """Features enabled in the editor for one document field."""

    formatting: bool = False
    layouts: tuple[tuple[int, ...], ...] = ()
    links: bool = False
    dividers: bool = False

    def describe(self) -> dict:
        return {
            "formatting": self.formatting,
            "layouts": [list(layout) for layout in self.layouts],
            "links": self.links,
            "dividers": self.dividers,
        }

    def allows(self, node_type: str) -> bool:
        if node_type in FORMATTING_TYPES:
            return self.formatting
        if node_type in ("layout", "layout-area"):
            return bool(self.layouts)
        if node_type == "link":
            return self.links
        if node_type == "divider":
            return self.dividers
        return node_type in ALLOWED_CHILDREN


def is_safe_href(href: Any) -> bool:
    """Only absolute http(s)/mailto/tel URLs and same-site paths or fragments."""
    if not isinstance(href, str) or not href.strip():
        return False
    href = href.strip()
    if href.startswith("//"):
        return False
    if href.startswith(("/", "#", "?")):
        return True
    parsed = urlparse(href)
    return parsed.scheme.lower() in SAFE_LINK_SCHEMES


def _node_kind(node: Any, path: str) -> str:
    if not isinstance(node, dict):
        raise DocumentValidationError(path, "node must be an object")
    if "type" in node:
        node_type = node["type"]
        if not isinstance(node_type, str):
            raise DocumentValidationError(path, "node type must be a string")
        return node_type
    if TEXT in node:
        return TEXT
    raise DocumentValidationError(path, "node has neither a type nor text")


def _validate_text(node: dict, path: str, config: DocumentFieldConfig) -> None:
    if not isinstance(node[TEXT], str):
        raise DocumentValidationError(path, "text must be a string")
    for key, value in node.items():
        if key == TEXT:
            continue
        if key not in MARKS:
            raise DocumentValidationError(path, f"unknown mark '{key}'")
        if value is not True:
            raise DocumentValidationError(path, f"mark '{key}' must be true")
        if not config.formatting:
            raise DocumentValidationError(path, f"mark '{key}' requires formatting")


def _validate_element(node: dict, node_type: str, path: str, config: DocumentFieldConfig) -> None:
    if node_type not in ALLOWED_CHILDREN:
        raise DocumentValidationError(path, f"unknown node type '{node_type}'")
    if not config.allows(node_type):
        raise DocumentValidationError(path, f"'{node_type}' is not enabled for this field")

    children = node.get("children")
    if not isinstance(children, list) or not children:
        raise DocumentValidationError(path, "element must have at least one child")

    if node_type == "heading":
        level = node.get("level")
        if not isinstance(level, int) or isinstance(level, bool) or not 1 <= level <= 6:
            raise DocumentValidationError(path, "heading level must be between 1 and 6")

    if node_type == "link" and not is_safe_href(node.get("href")):
        raise DocumentValidationError(path, "link href must be a safe URL")

    if node_type == "layout":
        layout = node.get("layout")
        if not isinstance(layout, list) or tuple(layout) not in config.layouts:
            raise DocumentValidationError(path, f"layout {layout!r} is not one of the allowed layouts")
        if len(children) != len(layout):
            raise DocumentValidationError(
                path, f"layout {layout!r} needs {len(layout)} areas, got {len(children)}"
            )

    if node_type == "divider":
        if len(children) != 1 or children[0] != {TEXT: ""}:
            raise DocumentValidationError(path, "divider must contain a single empty text node")
        return

    allowed = ALLOWED_CHILDREN[node_type]
    for index, child in enumerate(children):
        child_path = f"{path}.children[{index}]"
        child_type = _node_kind(child, child_path)
        if child_type not in allowed:
            raise DocumentValidationError(
                child_path, f"'{child_type}' is not allowed inside '{node_type}'"
            )
        _validate_node(child, child_type, child_path, config)


def _validate_node(node: dict, node_type: str, path: str, config: DocumentFieldConfig) -> None:
    if node_type == TEXT:
        _validate_text(node, path, config)
    else:
        _validate_element(node, node_type, path, config)


def validate_document(nodes: Any, config: DocumentFieldConfig, path: str = "content") -> list:
    """
    Validate a document against the field configuration.

    Args:
        nodes: The document, a list of top-level element nodes.
        config: Features enabled for the field.
        path: Prefix used in error locations.

    Returns:
        The same list, unchanged, when valid.

    Raises:
        DocumentValidationError: On the first node that violates the configuration.
    """
    if not isinstance(nodes, list):
        raise DocumentValidationError(path, "document must be a list of nodes")
    for index, node in enumerate(nodes):
        node_path = f"{path}[{index}]"
        node_type = _node_kind(node, node_path)
        if node_type not in TOP_LEVEL:
            raise DocumentValidationError(node_path, f"'{node_type}' is not allowed at the top level")
        _validate_node(node, node_type, node_path, config)
    return nodes


def _leaf_text(nodes: Iterable[dict]) -> str:
    parts = []
    for node in nodes:
        if TEXT in node and "type" not in node:
            parts.append(node[TEXT])
        else:
            parts.append(_leaf_text(node.get("children", [])))
    return "".join(parts)


def document_to_text(nodes: list | None) -> str:
    """Plain text of a document, one line per text-bearing block."""
    if not nodes:
        return ""
    lines: list[str] = []

    def walk(items: Iterable[dict]) -> None:
        for node in items:
            children = node.get("children", [])
            if any("type" in child and child["type"] != "link" for child in children):
                walk(children)
            else:
                line = _leaf_text(children)
                if line:
                    lines.append(line)

    walk(nodes)
    return "\n".join(lines)
