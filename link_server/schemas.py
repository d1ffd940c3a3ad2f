from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator


# --- Auth ---

class SignupIn(BaseModel):
    name: str | None = None
    email: str = ""
    password: str = ""


class LoginIn(BaseModel):
    email: str = ""
    password: str = ""


# --- Trip ---

TripStatus = Literal["planning", "ongoing", "completed"]


class UpdateTripIn(BaseModel):
    title: str | None = Field(None, min_length=1)
    description: str | None = None
    destination: str | None = Field(None, min_length=1)
    start_date: datetime | None = Field(None, alias="startDate")
    end_date: datetime | None = Field(None, alias="endDate")
    status: TripStatus | None = None
    members: list[str] | None = None
    color: str | None = None

    model_config = {"populate_by_name": True, "extra": "forbid"}

    @field_validator("start_date", "end_date")
    @classmethod
    def to_naive_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self
