"""
Bus Admin Backend — Bus Request/Response Schemas
==================================================

What:  Validated input structs for create/update and the JSON shape of a bus.
How:   Multipart form fields are collected by the route and passed to
       `BusCreate.from_form()` / `BusUpdate.from_form()`. Pydantic failures are
       converted into the application's ValidationError (HTTP 400).

Field Parsing:
    - Strings are trimmed; required fields must be non-blank
    - stops: "X, Y ,Z" → ["X", "Y", "Z"]; blank entries are dropped
    - status: "active" | "inactive"
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from busadmin.exceptions import ValidationError

BusStatus = Literal["active", "inactive"]

_M = TypeVar("_M", bound=BaseModel)


def split_stops(value: Any) -> Any:
    """Comma-separated stop list → ordered list of trimmed, non-blank names."""
    if value is None:
        return value
    if isinstance(value, str):
        return [stop.strip() for stop in value.split(",") if stop.strip()]
    if isinstance(value, list):
        return [str(stop).strip() for stop in value if str(stop).strip()]
    return value


def _build(model: Type[_M], data: Dict[str, Any]) -> _M:
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(
            message=f"{field}: {first['msg']}" if field else first["msg"],
            field=field,
            context={"errors": [err["msg"] for err in e.errors()]},
        )


class BusCreate(BaseModel):
    """Input for Create. name, route, fare and schedule are required."""

    name: str = Field(min_length=1, max_length=200)
    route: str = Field(min_length=1, max_length=500)
    fare: str = Field(min_length=1, max_length=100)
    schedule: str = Field(min_length=1, max_length=500)
    stops: List[str] = Field(default_factory=list)
    status: BusStatus = "active"

    model_config = {"str_strip_whitespace": True}

    @field_validator("stops", mode="before")
    @classmethod
    def parse_stops(cls, v: Any) -> Any:
        return split_stops(v)

    @classmethod
    def from_form(
        cls,
        name: Optional[str] = None,
        route: Optional[str] = None,
        fare: Optional[str] = None,
        schedule: Optional[str] = None,
        stops: Optional[str] = None,
        status: Optional[str] = None,
    ) -> "BusCreate":
        data = {
            "name": name,
            "route": route,
            "fare": fare,
            "schedule": schedule,
            "stops": stops,
            "status": status,
        }
        return _build(cls, {k: v for k, v in data.items() if v is not None})


class BusUpdate(BaseModel):
    """Input for Update. Only the fields the client sent are applied."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    route: Optional[str] = Field(default=None, min_length=1, max_length=500)
    fare: Optional[str] = Field(default=None, min_length=1, max_length=100)
    schedule: Optional[str] = Field(default=None, min_length=1, max_length=500)
    stops: Optional[List[str]] = None
    status: Optional[BusStatus] = None

    model_config = {"str_strip_whitespace": True}

    @field_validator("stops", mode="before")
    @classmethod
    def parse_stops(cls, v: Any) -> Any:
        return split_stops(v)

    @classmethod
    def from_form(
        cls,
        name: Optional[str] = None,
        route: Optional[str] = None,
        fare: Optional[str] = None,
        schedule: Optional[str] = None,
        stops: Optional[str] = None,
        status: Optional[str] = None,
    ) -> "BusUpdate":
        data = {
            "name": name,
            "route": route,
            "fare": fare,
            "schedule": schedule,
            "stops": stops,
            "status": status,
        }
        return _build(cls, {k: v for k, v in data.items() if v is not None})

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class BusResponse(BaseModel):
    """
    JSON representation of a bus.

    Serialized with camelCase keys (imageUrl, createdAt, updatedAt) for the
    admin frontend.
    """

    id: uuid.UUID
    name: str
    route: str
    image_url: str
    stops: List[str]
    status: str
    schedule: str
    fare: str
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }
