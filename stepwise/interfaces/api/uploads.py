"""Upload API routes — step images."""

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile, status
from starlette.concurrency import run_in_threadpool

from stepwise.application.services.upload_service import UploadService
from stepwise.core.results import ActionResult
from stepwise.domain.schemas.common import MessageResponse
from stepwise.domain.schemas.upload import ImageDelete, UploadedImage
from stepwise.interfaces.api.deps import get_token, respond
from stepwise.interfaces.deps import get_upload_service

router = APIRouter(prefix="/api/uploads", tags=["Uploads"])


@router.post("", response_model=ActionResult[UploadedImage], status_code=status.HTTP_201_CREATED)
async def upload_image(
    file: UploadFile = File(...),
    token: Optional[str] = Depends(get_token),
    service: UploadService = Depends(get_upload_service),
):
    content = await file.read()
    result = await run_in_threadpool(
        service.upload_image, file.filename, content, file.content_type, token
    )
    return respond(result)


@router.delete("", response_model=ActionResult[MessageResponse])
def delete_image(
    body: ImageDelete,
    token: Optional[str] = Depends(get_token),
    service: UploadService = Depends(get_upload_service),
):
    return respond(service.delete_image(body.url, token))
