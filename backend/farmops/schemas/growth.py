"""Growth Schemas — Pydantic contracts for growth stages and growth records.

Invariants:
    - Update schemas ignore unknown/protected keys (id, crop_id, organization_id,
      created_by, created_at, updated_at) instead of rejecting the request
    - start_date cannot be cleared; end_date never precedes start_date
    - health_score within [0, 100] when present

Design Decisions:
    - extra="ignore" on updates: the dashboard client sends whole objects back on edit
    - Updates applied with model_dump(exclude_unset=True) so omitted fields stay put
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


# --- Growth stages ------------------------------------------------------------

class GrowthStageCreate(BaseModel):
    organization_id: UUID | None = None  # checked for membership → 403 when absent
    crop_type_id: UUID | None = None
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    duration_days: int = Field(0, ge=0)
    order: int = Field(0, ge=0)


class GrowthStageUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    crop_type_id: UUID | None = None
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    duration_days: int | None = Field(None, ge=0)
    order: int | None = Field(None, ge=0)

    @model_validator(mode="after")
    def reject_null_required(self):
        for name in ("name", "duration_days", "order"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class GrowthStageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    crop_type_id: UUID | None
    name: str
    description: str | None
    duration_days: int
    order: int
    created_by: UUID | None
    updated_by: UUID | None
    created_at: datetime
    updated_at: datetime


# --- Growth records -----------------------------------------------------------

def _check_dates(start: date | None, end: date | None) -> None:
    if start and end and end < start:
        raise ValueError("end_date cannot be before start_date")


class GrowthRecordCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    crop_id: UUID | None = None  # ?cropId= takes precedence
    stage_id: UUID | None = None
    start_date: date
    end_date: date | None = None
    notes: str | None = Field(None, max_length=10_000)
    images: list[str] = Field(default_factory=list)
    health_score: float | None = Field(None, ge=0, le=100)

    @model_validator(mode="after")
    def validate_dates(self):
        _check_dates(self.start_date, self.end_date)
        return self


class GrowthRecordUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    stage_id: UUID | None = None
    start_date: date | None = None
    end_date: date | None = None
    notes: str | None = Field(None, max_length=10_000)
    images: list[str] | None = None
    health_score: float | None = Field(None, ge=0, le=100)

    @model_validator(mode="after")
    def validate_fields(self):
        for name in ("start_date", "images"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        _check_dates(self.start_date, self.end_date)
        return self


class GrowthRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    crop_id: UUID
    stage_id: UUID | None
    start_date: date
    end_date: date | None
    notes: str | None
    images: list[str]
    health_score: float | None
    created_by: UUID
    updated_by: UUID | None
    created_at: datetime
    updated_at: datetime
    stage: GrowthStageResponse | None = None
