"""Gallery front end as a view model over the /api/photos endpoint

The gallery has two views: the album grid (empty URL fragment) and one
album's photo grid (fragment = album slug). Navigation only switches views;
`render` turns the current view into the page state the browser shows.
Album names always come from the API, never from a local copy of the slug
formatting rules.
"""
import calendar
import logging
from typing import Callable, Dict, List, Literal, Optional, Union
from urllib.parse import unquote

import httpx
from pydantic import BaseModel

import config
from models import Album, AlbumListResponse, Photo, PhotoPage
from slugs import format_long_date


logger = logging.getLogger(__name__)

SITE_NAME = "LLP Events"
DEFAULT_OG_IMAGE = f"{config.SITE_URL}/images/og-image.jpg"

# Filter bar tags -> slug predicates
ALBUM_FILTERS: Dict[str, Callable[[str], bool]] = {
    "all": lambda slug: True,
    "emo": lambda slug: slug.startswith("lle"),
    "nu-metal": lambda slug: slug.startswith("llnm"),
    "louder-than-life": lambda slug: slug.startswith("llltl"),
    "3cfar": lambda slug: slug.startswith("3cfar"),
}


class GalleryApi:
    """HTTP client for the photos endpoint"""

    def __init__(
        self,
        base_url: str = config.SITE_URL,
        timeout: float = config.HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client = httpx.AsyncClient(
            base_url=base_url, timeout=timeout, transport=transport
        )

    async def close(self):
        await self.client.aclose()

    async def fetch_albums(self) -> List[Album]:
        response = await self.client.get("/api/photos")
        response.raise_for_status()
        return AlbumListResponse.model_validate(response.json()).albums

    async def fetch_photos(self, slug: str, cursor: Optional[str] = None) -> PhotoPage:
        params = {"show": slug}
        if cursor:
            params["cursor"] = cursor
        response = await self.client.get("/api/photos", params=params)
        response.raise_for_status()
        return PhotoPage.model_validate(response.json())


class AlbumCache:
    """Albums and cover URLs seen during this page session

    One instance lives as long as the page; a reload starts with a new,
    empty cache. Nothing is persisted.
    """

    def __init__(self):
        self.albums: Dict[str, Album] = {}
        self.covers: Dict[str, str] = {}

    def store_albums(self, albums: List[Album]):
        for album in albums:
            self.albums[album.slug] = album
            if album.cover_image:
                self.covers[album.slug] = album.cover_image

    def get_album(self, slug: str) -> Optional[Album]:
        return self.albums.get(slug)

    def get_cover(self, slug: str) -> Optional[str]:
        return self.covers.get(slug)

    def clear(self):
        self.albums.clear()
        self.covers.clear()


class AlbumsView(BaseModel):
    kind: Literal["albums"] = "albums"
    albums: List[Album] = []
    filter: str = "all"
    error: Optional[str] = None


class PhotosView(BaseModel):
    kind: Literal["photos"] = "photos"
    slug: str
    album: Optional[Album] = None
    photos: List[Photo] = []
    has_more: bool = False
    cursor: Optional[str] = None
    error: Optional[str] = None


GalleryView = Union[AlbumsView, PhotosView]


def slug_from_fragment(fragment: str) -> str:
    return unquote(fragment.lstrip("#")).strip()


def visible_albums(albums: List[Album], filter_name: str) -> List[Album]:
    matches = ALBUM_FILTERS.get(filter_name, ALBUM_FILTERS["all"])
    return [album for album in albums if matches(album.slug)]


class PhotoGallery:
    """Drives the two gallery views from URL fragment changes"""

    def __init__(self, api: GalleryApi, cache: AlbumCache):
        self.api = api
        self.cache = cache
        self.filter = "all"
        self.view: GalleryView = AlbumsView()

    async def navigate(self, fragment: str) -> GalleryView:
        """Switch to the view named by a URL fragment ('' or '#slug')"""
        slug = slug_from_fragment(fragment)
        if slug:
            self.view = await self._load_photos(slug)
        else:
            self.view = await self._load_albums()
        return self.view

    async def load_more(self) -> GalleryView:
        """Append the next page of a truncated photo listing"""
        view = self.view
        if not isinstance(view, PhotosView) or not view.has_more or not view.cursor:
            return view

        try:
            page = await self.api.fetch_photos(view.slug, cursor=view.cursor)
        except (httpx.HTTPError, ValueError):
            logger.exception("Error loading more photos for %s", view.slug)
            return view

        self.view = view.model_copy(
            update={
                "photos": view.photos + page.photos,
                "has_more": page.has_more,
                "cursor": page.cursor,
            }
        )
        return self.view

    def set_filter(self, filter_name: str) -> GalleryView:
        if filter_name not in ALBUM_FILTERS:
            raise ValueError(f"Unknown album filter {filter_name!r}")
        self.filter = filter_name
        if isinstance(self.view, AlbumsView):
            self.view = self.view.model_copy(update={"filter": filter_name})
        return self.view

    def render(self) -> Dict:
        return render(self.view, self.cache)

    async def _load_albums(self) -> AlbumsView:
        try:
            albums = await self.api.fetch_albums()
        except (httpx.HTTPError, ValueError):
            logger.exception("Error loading albums")
            return AlbumsView(filter=self.filter, error="Failed to load albums")

        self.cache.store_albums(albums)
        return AlbumsView(albums=albums, filter=self.filter)

    async def _load_photos(self, slug: str) -> PhotosView:
        try:
            page = await self.api.fetch_photos(slug)
        except (httpx.HTTPError, ValueError):
            logger.exception("Error loading photos for %s", slug)
            return PhotosView(slug=slug, error="Failed to load photos")

        return PhotosView(
            slug=slug,
            album=await self._resolve_album(slug),
            photos=page.photos,
            has_more=page.has_more,
            cursor=page.cursor,
        )

    async def _resolve_album(self, slug: str) -> Optional[Album]:
        # Read-through: a miss refreshes the album list once
        album = self.cache.get_album(slug)
        if album is not None:
            return album
        try:
            self.cache.store_albums(await self.api.fetch_albums())
        except (httpx.HTTPError, ValueError):
            logger.exception("Error loading albums for heading")
            return None
        return self.cache.get_album(slug)


def _short_date(album: Album) -> Optional[str]:
    if not album.date:
        return None
    d = album.date
    return f"{calendar.month_abbr[d.month]} {d.day}, {d.year}"


def _album_card(album: Album, cache: AlbumCache) -> Dict:
    venue_date = " - ".join(part for part in (album.venue, _short_date(album)) if part)
    return {
        "slug": album.slug,
        "href": f"#{album.slug}",
        "name": album.name,
        "cover": cache.get_cover(album.slug) or album.cover_image,
        "photographer": album.photographer,
        "venue_date": venue_date or None,
        "featured": album.featured,
    }


def _album_description(album: Album) -> str:
    venue = f" at {album.venue}" if album.venue else ""
    date_info = f" on {format_long_date(album.date)}" if album.date else ""
    photographer = f" Photos by {album.photographer}." if album.photographer else ""
    return (
        f"{album.name} photo gallery{venue}{date_info}.{photographer}"
        f" Browse the full collection from this epic show by {SITE_NAME}."
    )


def render_albums(view: AlbumsView, cache: AlbumCache) -> Dict:
    message = None
    if view.error:
        message = (view.error, "Please try again later.")
    elif not view.albums:
        message = ("No photo albums yet", "Check back soon for photos from our shows!")

    return {
        "view": "albums",
        "title": f"Photos | {SITE_NAME} - Louisville Concert Photo Gallery",
        "filter": view.filter,
        "cards": [_album_card(a, cache) for a in visible_albums(view.albums, view.filter)],
        "message": message,
        "meta": {
            "og:title": f"Photos | {SITE_NAME}",
            "og:url": f"{config.SITE_URL}/photos",
            "og:image": DEFAULT_OG_IMAGE,
        },
    }


def render_photos(view: PhotosView, cache: AlbumCache) -> Dict:
    album = view.album
    name = album.name if album else "Photos"
    photographer = album.photographer if album and album.photographer else SITE_NAME

    details = []
    if album:
        if album.photographer:
            details.append(album.photographer)
        long_date = format_long_date(album.date) if album.date else None
        venue_date = " - ".join(part for part in (album.venue, long_date) if part)
        if venue_date:
            details.append(venue_date)

    message = None
    if view.error:
        message = (view.error, "Please try again later.")
    elif not view.photos:
        message = ("No photos in this album yet", "Photos will be added soon!")

    meta = {}
    if album:
        og_image = view.photos[0].full_size if view.photos else cache.get_cover(album.slug)
        meta = {
            "og:title": f"{name} Photos | {SITE_NAME}",
            "og:description": _album_description(album),
            "og:url": f"{config.SITE_URL}/photos#{album.slug}",
            "og:image": og_image or DEFAULT_OG_IMAGE,
        }

    return {
        "view": "photos",
        "title": f"{name} Photos | {SITE_NAME}" if album else f"Photos | {SITE_NAME}",
        "heading": name,
        "details": details,
        "photos": [
            {
                "href": photo.full_size,
                "src": photo.thumbnail,
                "alt": f"{name} photo {index} by {photographer}",
                "filename": photo.filename,
            }
            for index, photo in enumerate(view.photos, start=1)
        ],
        "has_more": view.has_more,
        "message": message,
        "meta": meta,
    }


def render(view: GalleryView, cache: AlbumCache) -> Dict:
    """Page state for the current view"""
    if isinstance(view, PhotosView):
        return render_photos(view, cache)
    return render_albums(view, cache)
