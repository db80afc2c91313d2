import logging
import math
import re
from dataclasses import dataclass
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ValidationError
from app.models.orm import Building

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
# грубо: сколько км в градусе широты
KM_PER_DEGREE = 111.0

BBOX_PATTERN = re.compile(r"^-?\d+\.?\d*,-?\d+\.?\d*,-?\d+\.?\d*,-?\d+\.?\d*$")
BBOX_FORMAT_MESSAGE = (
    "The bbox parameter must contain exactly 4 floating-point numbers "
    "separated by commas without spaces. Example: 55.9,37.5,56.0,37.6"
)


def great_circle_distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    # сферическая теорема косинусов, как в sql-версии
    if lat1 == lat2 and lng1 == lng2:
        return 0.0
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    cos_angle = (
        math.cos(phi1) * math.cos(phi2) * math.cos(math.radians(lng2) - math.radians(lng1))
        + math.sin(phi1) * math.sin(phi2)
    )
    # в точке центра float может дать 1.0000000000000002
    cos_angle = max(-1.0, min(1.0, cos_angle))
    return EARTH_RADIUS_KM * math.acos(cos_angle)


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    min_lng: float
    max_lat: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        # границы включительно, переход через 180-й меридиан не поддерживаем
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng


@dataclass(frozen=True)
class RadiusFilter:
    lat: float
    lng: float
    radius_km: float

    @property
    def lat_range(self) -> float:
        return self.radius_km / KM_PER_DEGREE

    @property
    def lng_range(self) -> float:
        # у полюса косинус около нуля -> диапазон огромный или бесконечный
        scale = KM_PER_DEGREE * math.cos(math.radians(self.lat))
        if scale == 0:
            return math.inf
        return self.radius_km / scale

    def in_prefilter(self, lat: float, lng: float) -> bool:
        if not (self.lat - self.lat_range <= lat <= self.lat + self.lat_range):
            return False
        lng_range = self.lng_range
        if not math.isfinite(lng_range):
            return True
        return self.lng - lng_range <= lng <= self.lng + lng_range

    def distance_km(self, lat: float, lng: float) -> float:
        return great_circle_distance_km(self.lat, self.lng, lat, lng)

    def contains(self, lat: float, lng: float) -> bool:
        # сначала прямоугольник, потом точная формула - точка за прямоугольником
        # не попадает даже если по расстоянию проходит
        return self.in_prefilter(lat, lng) and self.distance_km(lat, lng) <= self.radius_km


def parse_bbox(raw: str) -> BoundingBox:
    # строго minLat,minLng,maxLat,maxLng без пробелов, порядок не чиним
    if not BBOX_PATTERN.match(raw):
        raise ValidationError({"bbox": [BBOX_FORMAT_MESSAGE]})
    min_lat, min_lng, max_lat, max_lng = (float(part) for part in raw.split(","))
    return BoundingBox(min_lat=min_lat, min_lng=min_lng, max_lat=max_lat, max_lng=max_lng)


async def get_buildings_in_radius(session: AsyncSession, area: RadiusFilter) -> List[Building]:
    # прямоугольник режем в базе по индексам, расстояние досчитываем в питоне
    stmt = select(Building).where(
        Building.latitude.between(area.lat - area.lat_range, area.lat + area.lat_range)
    )
    lng_range = area.lng_range
    if math.isfinite(lng_range):
        stmt = stmt.where(Building.longitude.between(area.lng - lng_range, area.lng + lng_range))

    result = await session.execute(stmt.order_by(Building.id))
    candidates = result.scalars().all()
    buildings = [
        b for b in candidates
        if area.distance_km(b.latitude, b.longitude) <= area.radius_km
    ]
    logger.debug(
        "Radius %.3f km around (%s, %s): %d candidates, %d within distance",
        area.radius_km, area.lat, area.lng, len(candidates), len(buildings),
    )
    return buildings


async def get_buildings_in_bbox(session: AsyncSession, box: BoundingBox) -> List[Building]:
    stmt = select(Building).where(
        Building.latitude.between(box.min_lat, box.max_lat),
        Building.longitude.between(box.min_lng, box.max_lng),
    ).order_by(Building.id)
    result = await session.execute(stmt)
    return list(result.scalars().all())

