"""
Admin UI schemas.
"""

from typing import Any, Optional

from pydantic import BaseModel


class AdminListRow(BaseModel):
    """One row of a list view, limited to the list's initial columns."""

    id: str
    label: Optional[str] = None
    values: dict[str, Any]


class AdminListViewResponse(BaseModel):
    list_key: str
    columns: list[str]
    items: list[AdminListRow]
    total: int
    page: int
    page_size: int
    total_pages: int


class AdminItemResponse(BaseModel):
    """Item view: every field, relationships rendered per their UI hints."""

    list_key: str
    id: str
    label: Optional[str] = None
    values: dict[str, Any]


class AdminMetaResponse(BaseModel):
    lists: dict[str, Any]
    auth: Optional[dict[str, Any]] = None
