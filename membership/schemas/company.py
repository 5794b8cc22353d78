from datetime import datetime
from typing import Optional

from pydantic import field_validator

from membership.core.clock import as_utc
from membership.models.company import Company
from membership.schemas.common import CamelModel, require_text


class CompanyCreate(CamelModel):
    name: str
    country: str
    county: Optional[str] = None
    city: str
    street: str
    postal_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @field_validator("name", "country", "city", "street", mode="before")
    @classmethod
    def _non_blank(cls, value, info):
        return require_text(value, info.field_name.capitalize())

    @field_validator("latitude")
    @classmethod
    def _latitude_range(cls, value):
        if value is not None and not -90 <= value <= 90:
            raise ValueError("Latitude must be between -90 and 90")
        return value

    @field_validator("longitude")
    @classmethod
    def _longitude_range(cls, value):
        if value is not None and not -180 <= value <= 180:
            raise ValueError("Longitude must be between -180 and 180")
        return value


class CompanyView(CamelModel):
    id: str
    name: str
    country: str
    county: Optional[str]
    city: str
    street: str
    postal_code: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    created_by_id: str
    created_at: datetime

    @classmethod
    def from_model(cls, company: Company) -> "CompanyView":
        return cls(
            id=company.id,
            name=company.name,
            country=company.country,
            county=company.county,
            city=company.city,
            street=company.street,
            postal_code=company.postal_code,
            latitude=company.latitude,
            longitude=company.longitude,
            created_by_id=company.created_by_id,
            created_at=as_utc(company.created_at),
        )
