"""Pydantic schemas for Demo domain."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from stepwise.domain.schemas.step import StepWithHotspots


class DemoCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    is_public: bool = False


class DemoUpdate(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    is_public: Optional[bool] = None


class DemoRead(BaseModel):
    id: str
    title: str
    slug: str
    description: Optional[str] = None
    user_id: str
    is_public: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DemoWithStepsCount(DemoRead):
    steps_count: int


class DemoWithSteps(DemoRead):
    steps: list[StepWithHotspots] = []


class DemoFilter(BaseModel):
    search: Optional[str] = None
    is_public: Optional[bool] = None
    sort_by: Literal["title", "created_at", "updated_at"] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)


class DemoList(BaseModel):
    demos: list[DemoRead]
    total: int
    page: int
    limit: int
    total_pages: int
