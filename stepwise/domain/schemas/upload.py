"""Pydantic schemas for image uploads."""

from pydantic import BaseModel


class UploadedImage(BaseModel):
    path: str
    public_url: str


class ImageDelete(BaseModel):
    url: str
