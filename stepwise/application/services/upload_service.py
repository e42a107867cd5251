"""Upload service — step images in object storage."""

import mimetypes
import uuid
from typing import Iterable, Optional

import structlog
from sqlalchemy.orm import Session

from stepwise.config import get_settings
from stepwise.core.exceptions import AppError, ConflictError, ValidationError
from stepwise.core.results import action
from stepwise.domain.repositories.step_repository import StepRepository
from stepwise.domain.schemas.common import MessageResponse
from stepwise.domain.schemas.upload import UploadedImage
from stepwise.infrastructure.repositories.step_repository import SQLAlchemyStepRepository
from stepwise.infrastructure.storage import StorageClient

settings = get_settings()
logger = structlog.get_logger(__name__)


def _extension(filename: Optional[str], content_type: str) -> str:
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[-1].lower()
        if ext.isalnum():
            return ext
    guessed = mimetypes.guess_extension(content_type or "")
    return guessed.lstrip(".") if guessed else "bin"


def release_images(
    steps: StepRepository, storage: Optional[StorageClient], image_urls: Iterable[str]
) -> None:
    """Delete stored images that no step points at any more. Never raises."""
    if storage is None:
        return
    for url in set(image_urls):
        try:
            if steps.count_by_image_url(url):
                continue
            storage.delete(storage.key_from_url(url))
        except ValidationError:
            logger.debug("Image is not ours, leaving it", url=url)
        except AppError as e:
            logger.warning("Failed to delete image", url=url, error=e.message)
        except Exception:
            logger.exception("Failed to delete image", url=url)


class UploadService:
    def __init__(
        self,
        db: Session,
        storage: StorageClient,
        verifier,
        max_bytes: int = settings.MAX_UPLOAD_BYTES,
    ):
        self.db = db
        self.storage = storage
        self.verifier = verifier
        self.max_bytes = max_bytes
        self.steps = SQLAlchemyStepRepository(db)

    @action("Failed to upload image")
    def upload_image(
        self,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str],
        token: Optional[str],
    ) -> UploadedImage:
        self.verifier.require_user_id(token)
        if not content:
            raise ValidationError("No file provided")
        if not (content_type or "").startswith("image/"):
            raise ValidationError("Only image files can be uploaded")
        if len(content) > self.max_bytes:
            raise ValidationError(
                f"Image exceeds the maximum size of {self.max_bytes / (1024 * 1024):g} MB"
            )

        key = f"{settings.STORAGE_PREFIX}/{uuid.uuid4().hex}.{_extension(filename, content_type)}"
        public_url = self.storage.put(key, content, content_type)
        return UploadedImage(path=key, public_url=public_url)

    @action("Failed to delete image")
    def delete_image(self, url: str, token: Optional[str]) -> MessageResponse:
        self.verifier.require_user_id(token)
        key = self.storage.key_from_url(url)
        if self.steps.count_by_image_url(url):
            raise ConflictError("Image is still used by a step")
        self.storage.delete(key)
        return MessageResponse(message="Image deleted successfully")
