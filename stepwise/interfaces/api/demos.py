"""Demo API routes — CRUD, sharing, duplication and the steps of a demo."""

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from stepwise.application.services.demo_service import DemoService
from stepwise.application.services.step_service import StepService
from stepwise.core.results import ActionResult
from stepwise.domain.schemas.common import MessageResponse
from stepwise.domain.schemas.demo import (
    DemoCreate,
    DemoFilter,
    DemoList,
    DemoRead,
    DemoUpdate,
    DemoWithSteps,
    DemoWithStepsCount,
)
from stepwise.domain.schemas.step import (
    StepCreate,
    StepRead,
    StepReorder,
    StepWithHotspots,
    StepWithHotspotsCreate,
)
from stepwise.interfaces.api.deps import get_token, respond
from stepwise.interfaces.deps import get_demo_service, get_step_service

router = APIRouter(prefix="/api/demos", tags=["Demos"])

SORT_FIELDS = {"createdAt": "created_at", "updatedAt": "updated_at"}


def demo_filters(
    search: Optional[str] = Query(None),
    is_public: Optional[bool] = Query(None, alias="isPublic"),
    sort_by: Literal["title", "createdAt", "updatedAt", "created_at", "updated_at"] = Query(
        "createdAt", alias="sortBy"
    ),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> DemoFilter:
    return DemoFilter(
        search=search,
        is_public=is_public,
        sort_by=SORT_FIELDS.get(sort_by, sort_by),
        sort_order=sort_order,
        page=page,
        limit=limit,
    )


@router.post("", response_model=ActionResult[DemoRead], status_code=status.HTTP_201_CREATED)
def create_demo(
    body: DemoCreate,
    token: Optional[str] = Depends(get_token),
    service: DemoService = Depends(get_demo_service),
):
    return respond(service.create_demo(body, token))


@router.get("", response_model=ActionResult[DemoList])
def list_demos(
    filters: DemoFilter = Depends(demo_filters),
    token: Optional[str] = Depends(get_token),
    service: DemoService = Depends(get_demo_service),
):
    return respond(service.list_demos(token, filters))


@router.get("/public", response_model=ActionResult[DemoList])
def list_public_demos(
    filters: DemoFilter = Depends(demo_filters),
    service: DemoService = Depends(get_demo_service),
):
    return respond(service.list_public_demos(filters))


@router.get("/{id_or_slug}", response_model=ActionResult[DemoRead])
def get_demo(
    id_or_slug: str,
    token: Optional[str] = Depends(get_token),
    service: DemoService = Depends(get_demo_service),
):
    return respond(service.get_demo(id_or_slug, token))


@router.get("/{id_or_slug}/summary", response_model=ActionResult[DemoWithStepsCount])
def get_demo_summary(
    id_or_slug: str,
    token: Optional[str] = Depends(get_token),
    service: DemoService = Depends(get_demo_service),
):
    return respond(service.get_demo_with_steps_count(id_or_slug, token))


@router.get("/{id_or_slug}/full", response_model=ActionResult[DemoWithSteps])
def get_demo_full(
    id_or_slug: str,
    token: Optional[str] = Depends(get_token),
    service: DemoService = Depends(get_demo_service),
):
    return respond(service.get_demo_with_steps(id_or_slug, token))


@router.patch("/{demo_id}", response_model=ActionResult[DemoRead])
def update_demo(
    demo_id: str,
    body: DemoUpdate,
    token: Optional[str] = Depends(get_token),
    service: DemoService = Depends(get_demo_service),
):
    return respond(service.update_demo(demo_id, body, token))


@router.delete("/{demo_id}", response_model=ActionResult[MessageResponse])
def delete_demo(
    demo_id: str,
    token: Optional[str] = Depends(get_token),
    service: DemoService = Depends(get_demo_service),
):
    return respond(service.delete_demo(demo_id, token))


@router.post("/{demo_id}/visibility", response_model=ActionResult[DemoRead])
def toggle_visibility(
    demo_id: str,
    token: Optional[str] = Depends(get_token),
    service: DemoService = Depends(get_demo_service),
):
    return respond(service.toggle_visibility(demo_id, token))


@router.post(
    "/{demo_id}/duplicate",
    response_model=ActionResult[DemoRead],
    status_code=status.HTTP_201_CREATED,
)
def duplicate_demo(
    demo_id: str,
    token: Optional[str] = Depends(get_token),
    service: DemoService = Depends(get_demo_service),
):
    return respond(service.duplicate_demo(demo_id, token))


@router.post(
    "/{demo_id}/steps", response_model=ActionResult[StepRead], status_code=status.HTTP_201_CREATED
)
def create_step(
    demo_id: str,
    body: StepCreate,
    token: Optional[str] = Depends(get_token),
    service: StepService = Depends(get_step_service),
):
    return respond(service.create_step(body, token, demo_id))


@router.post(
    "/{demo_id}/steps/with-hotspots",
    response_model=ActionResult[StepWithHotspots],
    status_code=status.HTTP_201_CREATED,
)
def create_step_with_hotspots(
    demo_id: str,
    body: StepWithHotspotsCreate,
    token: Optional[str] = Depends(get_token),
    service: StepService = Depends(get_step_service),
):
    return respond(service.create_step_with_hotspots(demo_id, body, token))


@router.get("/{demo_id}/steps", response_model=ActionResult[List[StepRead]])
def list_steps(
    demo_id: str,
    token: Optional[str] = Depends(get_token),
    service: StepService = Depends(get_step_service),
):
    return respond(service.list_steps(demo_id, token))


@router.put("/{demo_id}/steps/order", response_model=ActionResult[List[StepRead]])
def reorder_steps(
    demo_id: str,
    body: StepReorder,
    token: Optional[str] = Depends(get_token),
    service: StepService = Depends(get_step_service),
):
    return respond(service.reorder_steps(demo_id, body.step_ids, token))
