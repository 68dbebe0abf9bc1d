"""
Unit tests for list and field declarations.
"""

import pytest

from core.schema.fields import checkbox, document, password, relationship, select, text, timestamp
from core.schema.lists import (
    LISTS,
    SchemaConfigError,
    admin_meta,
    define_list,
    list_config,
    validate_relationships,
)
from infrastructure.database.models import Organization, User


class TestFieldHelpers:
    """Tests for the field declaration helpers."""

    def test_text_defaults(self):
        field = text()
        assert field.kind == "text"
        assert field.validation.is_required is False
        assert field.is_indexed is False
        assert field.is_unique is False

    def test_unique_text(self):
        field = text(validation={"is_required": True}, is_indexed="unique", is_filterable=True)
        assert field.is_unique is True
        assert field.validation.is_required is True
        assert field.is_filterable is True

    def test_select_is_filterable(self):
        field = select(options=[{"label": "A", "value": "a"}], default_value="a")
        assert field.is_filterable is True
        assert field.option_values() == ["a"]

    def test_select_default_must_be_an_option(self):
        with pytest.raises(ValueError, match="not one of the select options"):
            select(options=[{"label": "A", "value": "a"}], default_value="b")

    def test_relationship_refs(self):
        two_sided = relationship(ref="Post.author")
        assert two_sided.ref_list == "Post"
        assert two_sided.ref_field == "author"
        one_sided = relationship(ref="Tag", many=True)
        assert one_sided.ref_list == "Tag"
        assert one_sided.ref_field is None
        assert one_sided.many is True

    def test_other_kinds(self):
        assert password().kind == "password"
        assert checkbox(default_value=True).default_value is True
        assert timestamp().kind == "timestamp"
        assert document(dividers=True).document.dividers is True

    def test_describe(self):
        described = relationship(ref="Tag.posts", many=True, ui={"display_mode": "cards"}).describe()
        assert described["kind"] == "relationship"
        assert described["ref"] == "Tag.posts"
        assert described["many"] is True
        assert described["ui"] == {"display_mode": "cards"}


class TestLists:
    """The four declared lists."""

    def test_list_keys(self):
        assert list(LISTS) == ["User", "Post", "Tag", "Organization"]

    def test_user_fields(self):
        user = LISTS["User"]
        assert list(user.fields) == ["name", "email", "password", "posts"]
        assert user.required_fields == ["name", "email", "password"]
        assert user.fields["email"].is_unique is True
        assert user.fields["email"].is_filterable is True
        assert user.fields["posts"].ref == "Post.author"
        assert user.fields["posts"].many is True
        assert user.initial_columns == ["name", "posts"]

    def test_post_fields(self):
        post = LISTS["Post"]
        status = post.fields["status"]
        assert status.option_values() == ["published", "draft"]
        assert status.default_value == "draft"
        assert status.ui["display_mode"] == "segmented-control"
        assert post.fields["author"].ref == "User.posts"
        assert post.fields["author"].many is False
        assert post.fields["tags"].ref == "Tag.posts"
        assert post.fields["tags"].many is True
        assert post.required_fields == []

    def test_post_relationship_ui(self):
        author_ui = LISTS["Post"].fields["author"].ui
        assert author_ui["display_mode"] == "cards"
        assert author_ui["card_fields"] == ["name", "email"]
        assert author_ui["inline_edit"] == {"fields": ["name", "email"]}
        assert author_ui["link_to_item"] is True
        assert author_ui["inline_create"] == {"fields": ["name", "email"]}

        tags_ui = LISTS["Post"].fields["tags"].ui
        assert tags_ui["card_fields"] == ["name"]
        assert tags_ui["inline_connect"] is True
        assert tags_ui["inline_create"] == {"fields": ["name"]}

    def test_tag_is_hidden(self):
        assert LISTS["Tag"].ui.is_hidden is True
        assert LISTS["Post"].ui.is_hidden is False

    def test_organization_fields_required(self):
        assert LISTS["Organization"].required_fields == ["name", "city", "country"]

    def test_default_initial_columns_skip_passwords(self):
        assert LISTS["Post"].initial_columns == ["title", "status", "content"]
        assert LISTS["Organization"].initial_columns == ["name", "city", "country"]

    def test_label_field_fallback(self):
        assert LISTS["User"].ui.label_field == "name"
        assert LISTS["Post"].ui.label_field == "title"

    @pytest.mark.parametrize(
        "list_key, model",
        [("User", User), ("Organization", Organization)],
    )
    def test_table_columns_match_declared_fields(self, list_key: str, model):
        declared = {
            f"{name}_hash" if field.kind == "password" else name
            for name, field in LISTS[list_key].fields.items()
            if field.kind != "relationship"
        }
        columns = set(model.__table__.columns.keys()) - {"id", "created_at", "updated_at"}
        assert columns == declared

    def test_paths(self):
        assert LISTS["Organization"].path == "organizations"
        assert list_config("posts") is LISTS["Post"]
        assert list_config("Tag") is LISTS["Tag"]
        with pytest.raises(KeyError):
            list_config("comments")


class TestValidateRelationships:
    """Tests for relationship wiring checks."""

    def test_declared_lists_are_consistent(self):
        validate_relationships(LISTS)

    def test_unknown_list(self):
        lists = {"Post": define_list("Post", {"author": relationship(ref="Person.posts")})}
        with pytest.raises(SchemaConfigError, match="unknown list 'Person'"):
            validate_relationships(lists)

    def test_unknown_field(self):
        lists = {
            "Post": define_list("Post", {"author": relationship(ref="User.articles")}),
            "User": define_list("User", {"name": text()}),
        }
        with pytest.raises(SchemaConfigError, match="unknown field 'User.articles'"):
            validate_relationships(lists)

    def test_back_reference_mismatch(self):
        lists = {
            "Post": define_list("Post", {"author": relationship(ref="User.posts")}),
            "User": define_list("User", {"posts": relationship(ref="Post.editor", many=True)}),
        }
        with pytest.raises(SchemaConfigError, match="but that field refers to"):
            validate_relationships(lists)

    def test_one_sided_relationship(self):
        lists = {
            "Post": define_list("Post", {"tags": relationship(ref="Tag", many=True)}),
            "Tag": define_list("Tag", {"name": text()}),
        }
        validate_relationships(lists)

    def test_unknown_initial_column(self):
        lists = {
            "Tag": define_list("Tag", {"name": text()}, ui={"list_view": {"initial_columns": ["slug"]}}),
        }
        with pytest.raises(SchemaConfigError, match="initial column 'slug'"):
            validate_relationships(lists)

    def test_unknown_card_field(self):
        lists = {
            "Post": define_list(
                "Post",
                {"tags": relationship(ref="Tag", many=True, ui={"card_fields": ["slug"]})},
            ),
            "Tag": define_list("Tag", {"name": text()}),
        }
        with pytest.raises(SchemaConfigError, match="card field 'slug'"):
            validate_relationships(lists)


class TestAdminMeta:
    def test_meta_shape(self):
        meta = admin_meta()["lists"]
        assert set(meta) == {"User", "Post", "Tag", "Organization"}
        assert meta["Tag"]["is_hidden"] is True
        assert meta["User"]["path"] == "users"
        assert meta["User"]["initial_columns"] == ["name", "posts"]
        assert meta["Post"]["fields"]["status"]["default_value"] == "draft"
        assert meta["Post"]["fields"]["content"]["document"]["links"] is True
