"""
Declarative content model: lists, fields and admin UI hints.
"""

from .document import DocumentFieldConfig, DocumentValidationError, document_to_text, validate_document
from .fields import FieldConfig
from .lists import LISTS, ListConfig, SchemaConfigError, admin_meta, list_config, validate_relationships

__all__ = [
    "LISTS",
    "ListConfig",
    "FieldConfig",
    "DocumentFieldConfig",
    "DocumentValidationError",
    "SchemaConfigError",
    "admin_meta",
    "list_config",
    "validate_relationships",
    "validate_document",
    "document_to_text",
]
