import logging
from typing import List, Optional, Sequence, Set, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import BadRequestError, NotFoundError, ValidationError
from app.models.orm import Activity, Building, Organization
from app.services.activity_tree import get_activity_subtree_ids
from app.services.geo import (
    BoundingBox,
    RadiusFilter,
    get_buildings_in_bbox,
    get_buildings_in_radius,
)

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2


def _organizations_query():
    # здание, телефоны и деятельности грузим сразу, в async ленивой подгрузки нет
    return select(Organization).options(
        selectinload(Organization.building),
        selectinload(Organization.activities),
        selectinload(Organization.phones)
    ).order_by(Organization.id)


async def _fetch(session: AsyncSession, stmt) -> List[Organization]:
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_organizations_by_building(session: AsyncSession, building_id: int) -> Tuple[Building, List[Organization]]:
    building = await session.get(Building, building_id)
    if building is None:
        raise NotFoundError("Building not found")

    organizations = await _fetch(session, _organizations_query().where(Organization.building_id == building_id))
    logger.info("Building %s: %d organizations", building_id, len(organizations))
    return building, organizations


async def get_organizations_by_activity(session: AsyncSession, activity_id: int) -> Tuple[Activity, List[Organization]]:
    # только прямая привязка, без потомков
    activity = await session.get(Activity, activity_id)
    if activity is None:
        raise NotFoundError("Activity not found")

    stmt = _organizations_query().where(Organization.activities.any(Activity.id == activity_id))
    organizations = await _fetch(session, stmt)
    logger.info("Activity %s: %d organizations", activity_id, len(organizations))
    return activity, organizations


async def get_organizations_nearby(
    session: AsyncSession,
    lat: float,
    lng: float,
    radius: Optional[float] = None,
    bbox: Optional[BoundingBox] = None,
) -> List[Organization]:
    # два режима: радиус или квадрат, при обоих радиус главнее
    if radius is not None:
        buildings = await get_buildings_in_radius(session, RadiusFilter(lat=lat, lng=lng, radius_km=radius))
    elif bbox is not None:
        buildings = await get_buildings_in_bbox(session, bbox)
    else:
        raise BadRequestError("Either radius or bbox parameter is required")

    building_ids = [b.id for b in buildings]
    if not building_ids:
        return []

    organizations = await _fetch(session, _organizations_query().where(Organization.building_id.in_(building_ids)))
    logger.info(
        "Nearby (%s, %s) radius=%s bbox=%s: %d buildings, %d organizations",
        lat, lng, radius, bbox, len(building_ids), len(organizations),
    )
    return organizations


async def get_organization(session: AsyncSession, organization_id: int) -> Organization:
    result = await session.execute(_organizations_query().where(Organization.id == organization_id))
    org = result.scalar_one_or_none()
    if org is None:
        raise NotFoundError("Organization not found")
    return org


async def search_organizations_by_activity(
    session: AsyncSession, activity_id: Optional[int]
) -> Tuple[Activity, Set[int], List[Organization]]:
    # рекурсивный поиск по дереву: "Еда" находит и "Мясо", и "Говядину"
    if activity_id is None:
        raise ValidationError({"activity_id": ["The activity id field is required."]})

    activity = await session.get(Activity, activity_id)
    if activity is None:
        raise ValidationError({"activity_id": ["The selected activity id is invalid."]})

    activity_ids = await get_activity_subtree_ids(session, activity_id)
    stmt = _organizations_query().where(Organization.activities.any(Activity.id.in_(activity_ids)))
    organizations = await _fetch(session, stmt)
    logger.info(
        "Activity subtree %s (%d ids): %d organizations",
        activity_id, len(activity_ids), len(organizations),
    )
    return activity, activity_ids, organizations


async def search_organizations_by_name(session: AsyncSession, name: Optional[str]) -> Sequence[Organization]:
    # валидируем до похода в базу
    if not name:
        raise ValidationError({"name": ["The name field is required."]})
    if len(name) < MIN_NAME_LENGTH:
        raise ValidationError({"name": [f"The name field must be at least {MIN_NAME_LENGTH} characters."]})

    # ilike без учета регистра, % и _ из запроса экранируем
    stmt = _organizations_query().where(Organization.name.icontains(name, autoescape=True))
    organizations = await _fetch(session, stmt)
    logger.info("Name search %r: %d organizations", name, len(organizations))
    return organizations
