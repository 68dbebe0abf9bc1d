"""
Organization list API routes.
"""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.routes.auth import get_current_user
from api.schemas.content import (
    DeleteResponse,
    OrganizationCreateRequest,
    OrganizationListResponse,
    OrganizationResponse,
    OrganizationUpdateRequest,
)
from api.utils import paginate, search_filter, total_pages
from infrastructure.database.connection import get_db
from infrastructure.database.models.organization import Organization
from infrastructure.database.models.user import User

router = APIRouter(prefix="/organizations", tags=["Organizations"])


async def _load_organization(db: AsyncSession, organization_id: UUID) -> Organization:
    organization_id = str(organization_id)
    result = await db.execute(select(Organization).where(Organization.id == organization_id))
    organization = result.scalar_one_or_none()
    if organization is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Organization {organization_id} not found",
        )
    return organization


@router.get("", response_model=OrganizationListResponse)
async def list_organizations(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    country: Optional[str] = Query(None, description="Filter by country"),
    search: Optional[str] = Query(None, description="Search in name, city and country"),
    db: AsyncSession = Depends(get_db),
):
    query = select(Organization)
    if country:
        query = query.where(Organization.country == country)
    if search:
        query = query.where(
            search_filter([Organization.name, Organization.city, Organization.country], search)
        )
    query = query.order_by(Organization.name, Organization.id)

    organizations, total = await paginate(db, query, page, page_size)
    return OrganizationListResponse(
        items=[OrganizationResponse.model_validate(o) for o in organizations],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


@router.get("/{organization_id}", response_model=OrganizationResponse)
async def get_organization(organization_id: UUID, db: AsyncSession = Depends(get_db)):
    return OrganizationResponse.model_validate(await _load_organization(db, organization_id))


@router.post("", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
async def create_organization(
    organization_data: OrganizationCreateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    organization = Organization(**organization_data.model_dump())
    db.add(organization)
    await db.commit()
    await db.refresh(organization)
    return OrganizationResponse.model_validate(organization)


@router.patch("/{organization_id}", response_model=OrganizationResponse)
async def update_organization(
    organization_id: UUID,
    update_data: OrganizationUpdateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    organization = await _load_organization(db, organization_id)
    for field_name, value in update_data.model_dump(exclude_unset=True).items():
        if value is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"{field_name} is required",
            )
        setattr(organization, field_name, value)
    await db.commit()
    await db.refresh(organization)
    return OrganizationResponse.model_validate(organization)


@router.delete("/{organization_id}", response_model=DeleteResponse)
async def delete_organization(
    organization_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    organization = await _load_organization(db, organization_id)
    await db.delete(organization)
    await db.commit()
    return DeleteResponse(success=True, message="Organization deleted", deleted_id=str(organization_id))
