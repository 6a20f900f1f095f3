"""Insight Schemas — request body and stored-row response for /api/ai/insights.

Invariants:
    - Request accepts camelCase farmId (the dashboard client's shape) or farm_id
    - Response mirrors the persisted Insight record; confidence within [0, 1]
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class InsightGenerateRequest(BaseModel):
    """Body of POST /api/ai/insights."""
    model_config = ConfigDict(populate_by_name=True)

    farm_id: UUID = Field(alias="farmId")


class InsightResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    farm_id: UUID
    organization_id: UUID
    insight_type: str
    title: str
    description: str
    severity: Literal["low", "medium", "high"]
    recommended_actions: list[str]
    confidence: float = Field(ge=0, le=1)
    metadata: dict = Field(
        default_factory=dict,
        validation_alias=AliasChoices("metadata_", "metadata"),
    )
    created_at: datetime
    updated_at: datetime


class InsightListResponse(BaseModel):
    insights: list[InsightResponse]
