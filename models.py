import datetime as dt
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field


class AlbumMetadata(BaseModel):
    """Model for an album record authored in the content tool"""
    model_config = ConfigDict(extra="ignore")

    slug: str
    name: Optional[str] = None
    date: Optional[dt.date] = None
    photographer: Optional[str] = None
    venue: Optional[str] = None
    description: Optional[str] = None
    featured: bool = True


class Album(BaseModel):
    """Model for one storage folder merged with its metadata"""
    model_config = ConfigDict(populate_by_name=True)

    slug: str
    name: str
    date: Optional[dt.date] = None
    photographer: Optional[str] = None
    venue: Optional[str] = None
    description: Optional[str] = None
    featured: bool = True
    path: str
    cover_image: Optional[str] = Field(default=None, alias="coverImage")
    photo_count: int = Field(default=0, alias="photoCount")


class Photo(BaseModel):
    """Model for a single image object in an album folder"""
    model_config = ConfigDict(populate_by_name=True)

    id: str  # storage pathname
    url: str
    thumbnail: str
    full_size: str = Field(alias="fullSize")
    filename: str


class PhotoPage(BaseModel):
    """Response model for one page of an album's photos"""
    model_config = ConfigDict(populate_by_name=True)

    show: str
    photos: List[Photo]
    has_more: bool = Field(default=False, alias="hasMore")
    cursor: Optional[str] = None
    count: int


class AlbumListResponse(BaseModel):
    """Response model for the album overview"""
    albums: List[Album]


class BlobObject(BaseModel):
    """One object returned by the storage listing API"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: str
    pathname: str
    size: Optional[int] = None
    uploaded_at: Optional[str] = Field(default=None, alias="uploadedAt")


class BlobListing(BaseModel):
    """One page of the storage listing API"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    blobs: List[BlobObject] = []
    folders: List[str] = []
    cursor: Optional[str] = None
    has_more: bool = Field(default=False, alias="hasMore")


class ContactSubmission(BaseModel):
    """Body of the contact form; presence is checked by forms.validate_contact"""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = None
    turnstile_token: Optional[str] = Field(default=None, alias="turnstileToken")


class SubscribeRequest(BaseModel):
    """Body of the newsletter signup form"""
    email: Optional[str] = None
