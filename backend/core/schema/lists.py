"""
List declarations: User, Post, Tag and Organization.

This module is the single source of truth for the shape of the content
model and its admin UI hints. It lives in core/ so the API, admin and auth
layers can all import it without circular dependencies.
"""

from dataclasses import dataclass, field
from typing import Optional

from .fields import (
    FieldConfig,
    document,
    password,
    relationship,
    select,
    text,
    timestamp,
)

# Number of columns shown in a list view when none are declared
DEFAULT_COLUMN_COUNT = 3


class SchemaConfigError(ValueError):
    """Raised when list declarations are inconsistent."""


@dataclass
class ListUI:
    """Admin UI hints for a whole list."""

    is_hidden: bool = False
    initial_columns: Optional[list[str]] = None
    label_field: str = "name"


@dataclass
class ListConfig:
    """A named collection of typed fields."""

    key: str
    fields: dict[str, FieldConfig]
    ui: ListUI = field(default_factory=ListUI)

    def __post_init__(self):
        if self.ui.label_field not in self.fields:
            # Lists without a `name` field label items by their first text field
            text_fields = [name for name, f in self.fields.items() if f.kind == "text"]
            self.ui.label_field = text_fields[0] if text_fields else "id"

    @property
    def path(self) -> str:
        """URL segment for the list ("Organization" -> "organizations")."""
        return f"{self.key.lower()}s"

    @property
    def initial_columns(self) -> list[str]:
        if self.ui.initial_columns:
            return list(self.ui.initial_columns)
        visible = [name for name, f in self.fields.items() if f.kind != "password"]
        return visible[:DEFAULT_COLUMN_COUNT]

    @property
    def required_fields(self) -> list[str]:
        return [name for name, f in self.fields.items() if f.validation.is_required]

    @property
    def filterable_fields(self) -> list[str]:
        return [name for name, f in self.fields.items() if f.is_filterable]

    @property
    def searchable_fields(self) -> list[str]:
        return [name for name, f in self.fields.items() if f.kind == "text"]

    def relationships(self) -> dict[str, FieldConfig]:
        return {name: f for name, f in self.fields.items() if f.is_relationship}


def define_list(key: str, fields: dict[str, FieldConfig], ui: Optional[dict] = None) -> ListConfig:
    ui = ui or {}
    list_view = ui.get("list_view", {})
    return ListConfig(
        key=key,
        fields=fields,
        ui=ListUI(
            is_hidden=ui.get("is_hidden", False),
            initial_columns=list_view.get("initial_columns"),
        ),
    )


POST_LAYOUTS = [
    [1, 1],
    [1, 1, 1],
    [2, 1],
    [1, 2],
    [1, 2, 1],
]

LISTS: dict[str, ListConfig] = {
    "User": define_list(
        "User",
        fields={
            "name": text(validation={"is_required": True}),
            "email": text(
                validation={"is_required": True},
                is_indexed="unique",
                is_filterable=True,
            ),
            "password": password(validation={"is_required": True}),
            "posts": relationship(ref="Post.author", many=True),
        },
        ui={"list_view": {"initial_columns": ["name", "posts"]}},
    ),
    "Post": define_list(
        "Post",
        fields={
            "title": text(),
            "status": select(
                options=[
                    {"label": "Published", "value": "published"},
                    {"label": "Draft", "value": "draft"},
                ],
                default_value="draft",
                ui={"display_mode": "segmented-control"},
            ),
            "content": document(
                formatting=True,
                layouts=POST_LAYOUTS,
                links=True,
                dividers=True,
            ),
            "publish_date": timestamp(),
            "author": relationship(
                ref="User.posts",
                ui={
                    "display_mode": "cards",
                    "card_fields": ["name", "email"],
                    "inline_edit": {"fields": ["name", "email"]},
                    "link_to_item": True,
                    "inline_create": {"fields": ["name", "email"]},
                },
            ),
            "tags": relationship(
                ref="Tag.posts",
                many=True,
                ui={
                    "display_mode": "cards",
                    "card_fields": ["name"],
                    "inline_edit": {"fields": ["name"]},
                    "link_to_item": True,
                    "inline_connect": True,
                    "inline_create": {"fields": ["name"]},
                },
            ),
        },
    ),
    "Tag": define_list(
        "Tag",
        fields={
            "name": text(),
            "posts": relationship(ref="Post.tags", many=True),
        },
        ui={"is_hidden": True},
    ),
    "Organization": define_list(
        "Organization",
        fields={
            "name": text(validation={"is_required": True}),
            "city": text(validation={"is_required": True}),
            "country": text(validation={"is_required": True}),
        },
    ),
}


def list_config(key: str, lists: Optional[dict[str, ListConfig]] = None) -> ListConfig:
    """Look up a list by key ("Post") or URL path ("posts")."""
    lists = LISTS if lists is None else lists
    if key in lists:
        return lists[key]
    for config in lists.values():
        if config.path == key:
            return config
    raise KeyError(key)


def validate_relationships(lists: dict[str, ListConfig]) -> None:
    """
    Check that every relationship points at a real list and, when two-sided,
    that the other side points back.

    Raises:
        SchemaConfigError: On the first broken reference.
    """
    for list_key, config in lists.items():
        for field_name, field_config in config.relationships().items():
            where = f"{list_key}.{field_name}"
            target_list = field_config.ref_list
            if target_list not in lists:
                raise SchemaConfigError(f"{where} refers to unknown list '{target_list}'")

            target_field = field_config.ref_field
            if target_field is None:
                continue
            other = lists[target_list].fields.get(target_field)
            if other is None:
                raise SchemaConfigError(f"{where} refers to unknown field '{field_config.ref}'")
            if not other.is_relationship:
                raise SchemaConfigError(f"{where} refers to non-relationship field '{field_config.ref}'")
            if other.ref != where:
                raise SchemaConfigError(
                    f"{where} refers to '{field_config.ref}' but that field refers to '{other.ref}'"
                )

        for column in config.initial_columns:
            if column not in config.fields:
                raise SchemaConfigError(f"{list_key} initial column '{column}' is not a field")

        for field_name, field_config in config.relationships().items():
            target = lists[field_config.ref_list]
            for card_field in field_config.ui.get("card_fields", []):
                if card_field not in target.fields:
                    raise SchemaConfigError(
                        f"{list_key}.{field_name} card field '{card_field}' is not a field of {target.key}"
                    )


def admin_meta(lists: Optional[dict[str, ListConfig]] = None) -> dict:
    """Serializable description of every list for the admin UI."""
    lists = LISTS if lists is None else lists
    return {
        "lists": {
            key: {
                "key": key,
                "path": config.path,
                "is_hidden": config.ui.is_hidden,
                "label_field": config.ui.label_field,
                "initial_columns": config.initial_columns,
                "fields": {name: f.describe() for name, f in config.fields.items()},
            }
            for key, config in lists.items()
        }
    }
