from fastapi import APIRouter, Depends, HTTPException, Security, Query
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.db.session import get_db
from app.core.config import settings
from app.schemas.all_schemas import (
    ActivityOrganizations,
    ActivitySearchResult,
    BuildingOrganizations,
    ErrorResponse,
    NameSearchResult,
    NearbyOrganizations,
    OrganizationDetail,
    ValidationErrorResponse,
)
from app.services.business import (
    get_organization,
    get_organizations_by_activity,
    get_organizations_by_building,
    get_organizations_nearby,
    search_organizations_by_activity,
    search_organizations_by_name,
)
from app.services.geo import parse_bbox

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

async def get_api_key(api_key_header: Optional[str] = Security(api_key_header)):
    # ключ не настроен - пускаем всех
    if settings.API_KEY is None or api_key_header == settings.API_KEY:
        return api_key_header
    raise HTTPException(status_code=403, detail="Could not validate credentials")


router = APIRouter(
    prefix="/organizations",
    tags=["Organizations"],
    dependencies=[Depends(get_api_key)],
    responses={422: {"model": ValidationErrorResponse}},
)

NOT_FOUND = {404: {"model": ErrorResponse}}


@router.get("/by-building/{building_id}", response_model=BuildingOrganizations, responses=NOT_FOUND)
async def organizations_by_building(
    building_id: int,
    session: AsyncSession = Depends(get_db),
):
    # список всех организаций в здании
    building, organizations = await get_organizations_by_building(session, building_id)
    return {"building": building, "organizations": organizations, "count": len(organizations)}

@router.get("/by-activity/{activity_id}", response_model=ActivityOrganizations, responses=NOT_FOUND)
async def organizations_by_activity(
    activity_id: int,
    session: AsyncSession = Depends(get_db),
):
    activity, organizations = await get_organizations_by_activity(session, activity_id)
    return {"activity": activity, "organizations": organizations, "count": len(organizations)}

@router.get("/nearby", response_model=NearbyOrganizations, responses={400: {"model": ErrorResponse}})
async def organizations_nearby(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius: Optional[float] = Query(None, gt=0, description="Search radius in kilometers"),
    bbox: Optional[str] = Query(None, description="min_lat,min_lng,max_lat,max_lng", examples=["55.9,37.5,56.0,37.6"]),
    session: AsyncSession = Depends(get_db),
):
    # пустая строка = параметра нет
    bbox = bbox or None
    # формат bbox проверяем всегда, даже если задан радиус
    bounds = parse_bbox(bbox) if bbox is not None else None

    organizations = await get_organizations_nearby(session, lat, lng, radius=radius, bbox=bounds)
    return {
        "center": {"lat": lat, "lng": lng},
        "radius": radius,
        "bbox": bbox,
        "organizations": organizations,
        "count": len(organizations),
    }

@router.get("/search/activity", response_model=ActivitySearchResult)
async def search_by_activity(
    activity_id: Optional[int] = Query(None, description="Includes all descendant activities"),
    session: AsyncSession = Depends(get_db),
):
    activity, activity_ids, organizations = await search_organizations_by_activity(session, activity_id)
    return {
        "search_activity": activity,
        "included_activity_ids": sorted(activity_ids),
        "organizations": organizations,
        "count": len(organizations),
    }

@router.get("/search/name", response_model=NameSearchResult)
async def search_by_name(
    name: Optional[str] = Query(None, description="Organization name (partial match, 2+ characters)"),
    session: AsyncSession = Depends(get_db),
):
    # простой поиск по названию (ilike)
    organizations = await search_organizations_by_name(session, name)
    return {"search_query": name, "organizations": organizations, "count": len(organizations)}

@router.get("/{organization_id}", response_model=OrganizationDetail, responses=NOT_FOUND)
async def organization_detail(
    organization_id: int,
    session: AsyncSession = Depends(get_db),
):
    return await get_organization(session, organization_id)
