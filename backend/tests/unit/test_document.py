"""
Unit tests for the structured document field.

Covers:
- Node types gated by formatting, links, dividers and layouts
- Layout area counts
- Link href safety
- Plain text extraction
"""

import pytest

from core.schema.document import (
    DocumentFieldConfig,
    DocumentValidationError,
    document_to_text,
    is_safe_href,
    validate_document,
)
from core.schema.lists import LISTS, POST_LAYOUTS

POST_CONTENT = LISTS["Post"].fields["content"].document
PLAIN = DocumentFieldConfig()


def paragraph(text: str, **marks) -> dict:
    return {"type": "paragraph", "children": [{"text": text, **marks}]}


def layout(columns: list[int], areas: int | None = None) -> dict:
    return {
        "type": "layout",
        "layout": columns,
        "children": [
            {"type": "layout-area", "children": [paragraph(f"area {i}")]}
            for i in range(len(columns) if areas is None else areas)
        ],
    }


class TestPostContentConfig:
    """The Post.content field enables every editor feature."""

    def test_features_enabled(self):
        assert POST_CONTENT.formatting is True
        assert POST_CONTENT.links is True
        assert POST_CONTENT.dividers is True
        assert [list(layout) for layout in POST_CONTENT.layouts] == POST_LAYOUTS

    def test_describe(self):
        described = POST_CONTENT.describe()
        assert described["layouts"] == [[1, 1], [1, 1, 1], [2, 1], [1, 2], [1, 2, 1]]
        assert described["formatting"] is True


class TestValidateDocument:
    """Tests for validate_document."""

    def test_empty_document_is_valid(self):
        assert validate_document([], POST_CONTENT) == []

    def test_paragraph_is_always_allowed(self):
        nodes = [paragraph("Hello")]
        assert validate_document(nodes, PLAIN) is nodes

    def test_not_a_list(self):
        with pytest.raises(DocumentValidationError) as exc_info:
            validate_document({"type": "paragraph"}, POST_CONTENT)
        assert exc_info.value.path == "content"

    def test_unknown_node_type(self):
        with pytest.raises(DocumentValidationError, match="not allowed at the top level"):
            validate_document([{"type": "image", "children": [{"text": ""}]}], POST_CONTENT)

    def test_heading_requires_formatting(self):
        heading = {"type": "heading", "level": 2, "children": [{"text": "Title"}]}
        assert validate_document([heading], POST_CONTENT)
        with pytest.raises(DocumentValidationError, match="not enabled"):
            validate_document([heading], PLAIN)

    @pytest.mark.parametrize("level", [0, 7, "2", True, None])
    def test_heading_level_bounds(self, level):
        heading = {"type": "heading", "level": level, "children": [{"text": "Title"}]}
        with pytest.raises(DocumentValidationError, match="heading level"):
            validate_document([heading], POST_CONTENT)

    def test_marks_require_formatting(self):
        nodes = [paragraph("bold", bold=True)]
        assert validate_document(nodes, POST_CONTENT)
        with pytest.raises(DocumentValidationError, match="requires formatting"):
            validate_document(nodes, PLAIN)

    def test_unknown_mark(self):
        with pytest.raises(DocumentValidationError, match="unknown mark 'glow'"):
            validate_document([paragraph("x", glow=True)], POST_CONTENT)

    def test_element_without_children(self):
        with pytest.raises(DocumentValidationError, match="at least one child"):
            validate_document([{"type": "paragraph", "children": []}], POST_CONTENT)

    def test_nested_lists(self):
        nodes = [
            {
                "type": "unordered-list",
                "children": [
                    {
                        "type": "list-item",
                        "children": [
                            {"type": "list-item-content", "children": [{"text": "one"}]},
                            {
                                "type": "ordered-list",
                                "children": [
                                    {
                                        "type": "list-item",
                                        "children": [
                                            {"type": "list-item-content", "children": [{"text": "a"}]}
                                        ],
                                    }
                                ],
                            },
                        ],
                    }
                ],
            }
        ]
        assert validate_document(nodes, POST_CONTENT) is nodes

    def test_child_not_allowed_in_parent(self):
        nodes = [{"type": "paragraph", "children": [paragraph("nested")]}]
        with pytest.raises(DocumentValidationError) as exc_info:
            validate_document(nodes, POST_CONTENT)
        assert exc_info.value.path == "content[0].children[0]"


class TestLayouts:
    """Layouts must be one of the configured column ratios."""

    @pytest.mark.parametrize("columns", POST_LAYOUTS)
    def test_allowed_layouts(self, columns):
        assert validate_document([layout(columns)], POST_CONTENT)

    def test_layout_not_configured(self):
        with pytest.raises(DocumentValidationError, match="not one of the allowed layouts"):
            validate_document([layout([3, 1])], POST_CONTENT)

    def test_layouts_disabled(self):
        with pytest.raises(DocumentValidationError, match="not enabled"):
            validate_document([layout([1, 1])], PLAIN)

    def test_area_count_must_match(self):
        with pytest.raises(DocumentValidationError, match="needs 3 areas, got 2"):
            validate_document([layout([1, 2, 1], areas=2)], POST_CONTENT)


class TestLinksAndDividers:
    """Links need safe hrefs; dividers hold a single empty text node."""

    def link(self, href):
        return {
            "type": "paragraph",
            "children": [
                {"text": "see "},
                {"type": "link", "href": href, "children": [{"text": "here"}]},
            ],
        }

    def test_link_allowed(self):
        assert validate_document([self.link("https://example.com")], POST_CONTENT)

    def test_links_disabled(self):
        with pytest.raises(DocumentValidationError, match="not enabled"):
            validate_document([self.link("https://example.com")], PLAIN)

    def test_unsafe_link(self):
        with pytest.raises(DocumentValidationError, match="safe URL"):
            validate_document([self.link("javascript:alert(1)")], POST_CONTENT)

    def test_divider(self):
        divider = {"type": "divider", "children": [{"text": ""}]}
        assert validate_document([divider], POST_CONTENT)
        with pytest.raises(DocumentValidationError, match="not enabled"):
            validate_document([divider], PLAIN)

    def test_divider_with_text(self):
        divider = {"type": "divider", "children": [{"text": "oops"}]}
        with pytest.raises(DocumentValidationError, match="single empty text node"):
            validate_document([divider], POST_CONTENT)


class TestIsSafeHref:
    @pytest.mark.parametrize(
        "href",
        ["https://example.com", "http://example.com/a?b=c", "mailto:a@b.c", "tel:+123", "/posts/1", "#top"],
    )
    def test_safe(self, href):
        assert is_safe_href(href) is True

    @pytest.mark.parametrize(
        "href",
        ["javascript:alert(1)", "JAVASCRIPT:alert(1)", "data:text/html,x", "//evil.com", "", "   ", None, 42],
    )
    def test_unsafe(self, href):
        assert is_safe_href(href) is False


class TestDocumentToText:
    def test_empty(self):
        assert document_to_text(None) == ""
        assert document_to_text([]) == ""

    def test_blocks_become_lines(self):
        nodes = [
            paragraph("First"),
            {
                "type": "paragraph",
                "children": [
                    {"text": "Go "},
                    {"type": "link", "href": "/x", "children": [{"text": "there"}]},
                ],
            },
            layout([1, 1]),
        ]
        assert document_to_text(nodes) == "First\nGo there\narea 0\narea 1"
