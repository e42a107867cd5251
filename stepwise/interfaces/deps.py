"""
Service dependencies.

The token verifier and the storage client are built once per process;
services are built per request around the request's session.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from stepwise.application.services.auth_service import AuthService, TokenVerifier
from stepwise.application.services.demo_service import DemoService
from stepwise.application.services.hotspot_service import HotspotService
from stepwise.application.services.step_service import StepService
from stepwise.application.services.upload_service import UploadService
from stepwise.infrastructure.database import get_db
from stepwise.infrastructure.storage import StorageClient


@lru_cache
def get_token_verifier() -> TokenVerifier:
    return TokenVerifier()


@lru_cache
def get_storage_client() -> StorageClient:
    return StorageClient()


def get_auth_service(
    db: Session = Depends(get_db),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> AuthService:
    return AuthService(db, verifier)


def get_demo_service(
    db: Session = Depends(get_db),
    verifier: TokenVerifier = Depends(get_token_verifier),
    storage: StorageClient = Depends(get_storage_client),
) -> DemoService:
    return DemoService(db, verifier, storage)


def get_step_service(
    db: Session = Depends(get_db),
    verifier: TokenVerifier = Depends(get_token_verifier),
    storage: StorageClient = Depends(get_storage_client),
) -> StepService:
    return StepService(db, verifier, storage)


def get_hotspot_service(
    db: Session = Depends(get_db),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> HotspotService:
    return HotspotService(db, verifier)


def get_upload_service(
    db: Session = Depends(get_db),
    verifier: TokenVerifier = Depends(get_token_verifier),
    storage: StorageClient = Depends(get_storage_client),
) -> UploadService:
    return UploadService(db, storage, verifier)
