from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# форма ответа отличается от ручки к ручке, поэтому на каждую свой набор схем

class Coordinates(BaseModel):
    lat: float
    lng: float

class BuildingSummary(BaseModel):
    id: int
    address: str
    model_config = ConfigDict(from_attributes=True)

class BuildingWithCoordinates(BuildingSummary):
    coordinates: Coordinates

    @model_validator(mode="before")
    @classmethod
    def pack_coordinates(cls, data: Any) -> Any:
        # из orm-объекта собираем вложенный coordinates
        if isinstance(data, dict):
            return data
        return {
            "id": data.id,
            "address": data.address,
            "coordinates": {"lat": data.latitude, "lng": data.longitude},
        }

class ActivitySummary(BaseModel):
    id: int
    name: str
    model_config = ConfigDict(from_attributes=True)

class ActivityWithLevel(ActivitySummary):
    level: int

class ActivityDetail(ActivityWithLevel):
    parent_id: Optional[int] = None

class OrganizationBase(BaseModel):
    id: int
    name: str
    phones: List[str]
    model_config = ConfigDict(from_attributes=True)

    @field_validator("phones", mode="before")
    @classmethod
    def pluck_phone_numbers(cls, v: Any) -> Any:
        return [getattr(phone, "phone_number", phone) for phone in v]

class OrganizationRead(OrganizationBase):
    building: BuildingSummary
    activities: List[ActivitySummary]

class OrganizationWithCoordinates(OrganizationBase):
    building: BuildingWithCoordinates
    activities: List[ActivitySummary]

class OrganizationInBuilding(OrganizationBase):
    building: BuildingWithCoordinates
    activities: List[ActivityWithLevel]

class OrganizationWithLevels(OrganizationBase):
    building: BuildingSummary
    activities: List[ActivityWithLevel]

class OrganizationDetail(OrganizationBase):
    building: BuildingWithCoordinates
    activities: List[ActivityDetail]

class BuildingOrganizations(BaseModel):
    building: BuildingSummary
    organizations: List[OrganizationInBuilding]
    count: int

class ActivityOrganizations(BaseModel):
    activity: ActivitySummary
    organizations: List[OrganizationRead]
    count: int

class NearbyOrganizations(BaseModel):
    center: Coordinates
    radius: Optional[float] = None
    bbox: Optional[str] = None
    organizations: List[OrganizationWithCoordinates]
    count: int

class ActivitySearchResult(BaseModel):
    search_activity: ActivitySummary
    included_activity_ids: List[int]
    organizations: List[OrganizationWithLevels]
    count: int

class NameSearchResult(BaseModel):
    search_query: str
    organizations: List[OrganizationRead]
    count: int

class ErrorResponse(BaseModel):
    error: str

class ValidationErrorResponse(BaseModel):
    message: str
    errors: dict
