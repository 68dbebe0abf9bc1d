"""
Field declarations for lists.

Each helper returns a ``FieldConfig`` describing how a list attribute is
validated, indexed, filtered and shown in the admin UI. The descriptors are
plain data: the ORM models, API schemas and admin metadata are all built to
agree with them.
"""

from dataclasses import dataclass, field
from typing import Any, Literal, Optional, Union

from .document import DocumentFieldConfig

IndexMode = Union[bool, Literal["unique"]]


@dataclass(frozen=True)
class Validation:
    """Per-field validation rules."""

    is_required: bool = False


@dataclass(frozen=True)
class SelectOption:
    label: str
    value: str


@dataclass
class FieldConfig:
    """Declarative description of a single list field."""

    kind: str
    validation: Validation = field(default_factory=Validation)
    is_indexed: IndexMode = False
    is_filterable: bool = False
    default_value: Any = None
    ui: dict = field(default_factory=dict)
    # select
    options: tuple[SelectOption, ...] = ()
    # relationship
    ref: Optional[str] = None
    many: bool = False
    # document
    document: Optional[DocumentFieldConfig] = None

    @property
    def is_unique(self) -> bool:
        return self.is_indexed == "unique"

    @property
    def is_relationship(self) -> bool:
        return self.kind == "relationship"

    @property
    def ref_list(self) -> Optional[str]:
        """List key half of ``ref`` ("Post.author" -> "Post")."""
        if not self.ref:
            return None
        return self.ref.split(".", 1)[0]

    @property
    def ref_field(self) -> Optional[str]:
        """Field half of ``ref``, or None for one-sided relationships."""
        if not self.ref or "." not in self.ref:
            return None
        return self.ref.split(".", 1)[1]

    def option_values(self) -> list[str]:
        return [option.value for option in self.options]

    def describe(self) -> dict:
        """Serializable form used by the admin metadata endpoint."""
        data: dict[str, Any] = {
            "kind": self.kind,
            "is_required": self.validation.is_required,
            "is_indexed": self.is_indexed,
            "is_filterable": self.is_filterable,
            "ui": dict(self.ui),
        }
        if self.default_value is not None:
            data["default_value"] = self.default_value
        if self.options:
            data["options"] = [{"label": o.label, "value": o.value} for o in self.options]
        if self.ref:
            data["ref"] = self.ref
            data["many"] = self.many
        if self.document:
            data["document"] = self.document.describe()
        return data


def _validation(validation: Optional[dict]) -> Validation:
    if not validation:
        return Validation()
    return Validation(is_required=bool(validation.get("is_required", False)))


def text(
    validation: Optional[dict] = None,
    is_indexed: IndexMode = False,
    is_filterable: bool = False,
    default_value: Optional[str] = None,
    ui: Optional[dict] = None,
) -> FieldConfig:
    return FieldConfig(
        kind="text",
        validation=_validation(validation),
        is_indexed=is_indexed,
        is_filterable=is_filterable,
        default_value=default_value,
        ui=ui or {},
    )


def password(validation: Optional[dict] = None, ui: Optional[dict] = None) -> FieldConfig:
    """Write-only secret; stored as a bcrypt hash and never returned."""
    return FieldConfig(kind="password", validation=_validation(validation), ui=ui or {})


def checkbox(default_value: bool = False, ui: Optional[dict] = None) -> FieldConfig:
    return FieldConfig(kind="checkbox", default_value=default_value, ui=ui or {})


def timestamp(
    validation: Optional[dict] = None,
    is_filterable: bool = False,
    ui: Optional[dict] = None,
) -> FieldConfig:
    return FieldConfig(
        kind="timestamp",
        validation=_validation(validation),
        is_filterable=is_filterable,
        ui=ui or {},
    )


def select(
    options: list[dict],
    default_value: Optional[str] = None,
    validation: Optional[dict] = None,
    ui: Optional[dict] = None,
) -> FieldConfig:
    """
    Single choice out of a fixed set of options.

    Args:
        options: ``[{"label": ..., "value": ...}]``
        default_value: Value used when none is supplied; must be one of the options.
    """
    parsed = tuple(SelectOption(label=o["label"], value=o["value"]) for o in options)
    if default_value is not None and default_value not in {o.value for o in parsed}:
        raise ValueError(f"default_value {default_value!r} is not one of the select options")
    return FieldConfig(
        kind="select",
        validation=_validation(validation),
        # selects can always be filtered on their value
        is_filterable=True,
        default_value=default_value,
        options=parsed,
        ui=ui or {},
    )


def relationship(ref: str, many: bool = False, ui: Optional[dict] = None) -> FieldConfig:
    """
    Reference to items of another list.

    Args:
        ref: ``"List.field"`` for two-sided relationships, ``"List"`` for one-sided.
        many: Whether the field holds several items.
    """
    return FieldConfig(kind="relationship", ref=ref, many=many, ui=ui or {})


def document(
    formatting: bool = False,
    layouts: Optional[list[list[int]]] = None,
    links: bool = False,
    dividers: bool = False,
    ui: Optional[dict] = None,
) -> FieldConfig:
    return FieldConfig(
        kind="document",
        document=DocumentFieldConfig(
            formatting=formatting,
            layouts=tuple(tuple(layout) for layout in (layouts or [])),
            links=links,
            dividers=dividers,
        ),
        ui=ui or {},
    )
