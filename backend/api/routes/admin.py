"""
Admin UI API routes.

The admin screens are driven by the list declarations: ``/admin/meta``
describes every list and its UI hints, and the list and item views render
rows according to those hints (initial columns, card fields, labels).
"""

import logging
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from api.deps_admin import require_admin_access
from api.schemas.admin import (
    AdminItemResponse,
    AdminListRow,
    AdminListViewResponse,
    AdminMetaResponse,
)
from api.utils import paginate, search_filter, total_pages
from core.auth import Session
from core.schema.fields import FieldConfig
from core.schema.lists import ListConfig, admin_meta, list_config
from core.system import system_config
from infrastructure.database.connection import get_db
from infrastructure.database.models import Organization, Post, Tag, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

MODELS = {
    "User": User,
    "Post": Post,
    "Tag": Tag,
    "Organization": Organization,
}


def _resolve_list(list_key: str) -> ListConfig:
    try:
        return list_config(list_key, system_config.lists)
    except KeyError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown list '{list_key}'",
        )


def _label(config: ListConfig, item: Any) -> Optional[str]:
    value = getattr(item, config.ui.label_field, None)
    return str(value) if value is not None else str(item.id)


def _scalar(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _related(field_config: FieldConfig, item: Any, with_cards: bool) -> dict:
    """Render a related item as ``{id, label}`` or, for card display, with its card fields."""
    target = system_config.lists[field_config.ref_list]
    data = {"id": str(item.id), "label": _label(target, item)}
    if with_cards and field_config.ui.get("display_mode") == "cards":
        for card_field in field_config.ui.get("card_fields", []):
            data[card_field] = _scalar(getattr(item, card_field, None))
    return data


def _field_value(field_name: str, field_config: FieldConfig, item: Any, with_cards: bool) -> Any:
    if field_config.kind == "password":
        # Only whether a password is set is ever exposed
        return {"is_set": bool(getattr(item, "password_hash", None))}
    value = getattr(item, field_name)
    if field_config.is_relationship:
        if field_config.many:
            return [_related(field_config, related, with_cards) for related in value]
        return _related(field_config, value, with_cards) if value is not None else None
    return _scalar(value)


def _load_options(config: ListConfig, model: Any, fields: list[str]) -> list:
    return [
        selectinload(getattr(model, name))
        for name in fields
        if config.fields[name].is_relationship
    ]


@router.get("/meta", response_model=AdminMetaResponse)
async def get_admin_meta(session: Session = Depends(require_admin_access)):
    """Lists, fields and UI hints for the admin UI."""
    meta = admin_meta(system_config.lists)
    auth = system_config.auth.describe() if system_config.auth else None
    return AdminMetaResponse(lists=meta["lists"], auth=auth)


@router.get("/lists/{list_key}", response_model=AdminListViewResponse)
async def get_list_view(
    list_key: str,
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(None, description="Search in text fields"),
    session: Session = Depends(require_admin_access),
    db: AsyncSession = Depends(get_db),
):
    """List view rows restricted to the list's initial columns."""
    config = _resolve_list(list_key)
    model = MODELS[config.key]
    columns = config.initial_columns

    query = (
        select(model)
        .options(*_load_options(config, model, columns))
        .execution_options(populate_existing=True)
    )
    if search and config.searchable_fields:
        query = query.where(
            search_filter([getattr(model, name) for name in config.searchable_fields], search)
        )
    query = query.order_by(desc(model.created_at), model.id)

    items, total = await paginate(db, query, page, page_size)
    rows = [
        AdminListRow(
            id=str(item.id),
            label=_label(config, item),
            values={
                name: _field_value(name, config.fields[name], item, with_cards=False)
                for name in columns
            },
        )
        for item in items
    ]
    return AdminListViewResponse(
        list_key=config.key,
        columns=columns,
        items=rows,
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


@router.get("/lists/{list_key}/{item_id}", response_model=AdminItemResponse)
async def get_item_view(
    list_key: str,
    item_id: UUID,
    session: Session = Depends(require_admin_access),
    db: AsyncSession = Depends(get_db),
):
    """Every field of one item; relationships shown as cards where configured."""
    config = _resolve_list(list_key)
    model = MODELS[config.key]
    field_names = list(config.fields)

    result = await db.execute(
        select(model)
        .options(*_load_options(config, model, field_names))
        .where(model.id == str(item_id))
        .execution_options(populate_existing=True)
    )
    item = result.scalar_one_or_none()
    if item is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{config.key} {item_id} not found",
        )

    values = {
        name: _field_value(name, config.fields[name], item, with_cards=True)
        for name in field_names
    }
    values["created_at"] = _scalar(item.created_at)
    values["updated_at"] = _scalar(item.updated_at)
    return AdminItemResponse(list_key=config.key, id=str(item.id), label=_label(config, item), values=values)
