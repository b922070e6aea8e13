"""Upload schema definitions."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class UploadedFile(BaseModel):
    filename: str
    original_name: str
    content_type: str
    size: int
    url: str
    media_type: str

    model_config = ConfigDict(from_attributes=True)


class UploadResponse(BaseModel):
    message: str
    file: UploadedFile


class Photo(BaseModel):
    """Gallery entry"""

    id: int
    url: str
    caption: Optional[str] = None
    media_type: str
    original_name: Optional[str] = None
    file_size: Optional[int] = None
    machine_id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GalleryUploadResponse(BaseModel):
    message: str
    photos: List[Photo]
