from typing import Dict, List, Optional
import asyncio
import logging
import random

import config
from blob_client import BlobClient, PAGE_SIZE
from errors import UpstreamError
from images import ImageRenditions
from metadata import MetadataStore
from models import Album, AlbumMetadata, BlobObject, Photo, PhotoPage
from slugs import format_show_name, is_image_file


logger = logging.getLogger(__name__)

LEGACY_FOLDERS = {"shows/"}
COVER_SELECTIONS = ("random", "first")


class AlbumCatalog:
    """Builds the album overview and per-album photo pages from blob storage"""

    def __init__(
        self,
        blob_client: BlobClient,
        metadata_store: MetadataStore,
        renditions: Optional[ImageRenditions] = None,
        cover_selection: str = config.COVER_SELECTION,
        cover_concurrency: int = config.COVER_CONCURRENCY,
        rng: Optional[random.Random] = None,
    ):
        if cover_selection not in COVER_SELECTIONS:
            raise ValueError(f"Unknown cover selection {cover_selection!r}")
        self.blob_client = blob_client
        self.metadata_store = metadata_store
        self.renditions = renditions or ImageRenditions()
        self.cover_selection = cover_selection
        self.cover_concurrency = max(1, cover_concurrency)
        self.rng = rng or random.Random()

    async def list_albums(self) -> List[Album]:
        """List every album folder merged with its metadata, newest first

        Fails as a whole if the folder listing or any per-folder listing
        fails; partial results are never returned.
        """
        metadata = self.metadata_store.get_index()
        folders = [
            folder
            for folder in await self.blob_client.list_folders()
            if folder not in LEGACY_FOLDERS
        ]

        semaphore = asyncio.Semaphore(self.cover_concurrency)

        async def build_album(folder: str) -> Album:
            async with semaphore:
                listing = await self.blob_client.list(prefix=folder, limit=PAGE_SIZE)
            slug = folder.rstrip("/")
            images = [blob for blob in listing.blobs if is_image_file(blob.pathname)]
            return self._merge(slug, folder, metadata.get(slug), images)

        try:
            albums = await asyncio.gather(*(build_album(f) for f in folders))
        except UpstreamError:
            logger.error("Album aggregation aborted: a folder listing failed")
            raise

        return self.sort_albums(albums)

    async def list_photos(self, slug: str, cursor: Optional[str] = None) -> PhotoPage:
        """List one page of photos in an album; unknown slugs yield no photos"""
        listing = await self.blob_client.list(
            prefix=f"{slug}/", limit=PAGE_SIZE, cursor=cursor
        )

        photos = [
            Photo(
                id=blob.pathname,
                url=blob.url,
                thumbnail=self.renditions.thumbnail(blob.url),
                full_size=self.renditions.full_size(blob.url),
                filename=blob.pathname.split("/")[-1],
            )
            for blob in listing.blobs
            if is_image_file(blob.pathname)
        ]

        return PhotoPage(
            show=slug,
            photos=photos,
            has_more=listing.has_more,
            cursor=listing.cursor,
            count=len(photos),
        )

    def pick_cover(self, images: List[BlobObject]) -> Optional[BlobObject]:
        """Choose the cover image: a random one keeps the overview from going stale"""
        if not images:
            return None
        if self.cover_selection == "first":
            return images[0]
        return self.rng.choice(images)

    def _merge(
        self,
        slug: str,
        folder: str,
        record: Optional[AlbumMetadata],
        images: List[BlobObject],
    ) -> Album:
        cover = self.pick_cover(images)
        fields: Dict = {
            "slug": slug,
            "name": format_show_name(slug),
            "path": folder,
            "cover_image": self.renditions.cover(cover.url) if cover else None,
            "photo_count": len(images),
        }
        if record:
            fields.update(
                date=record.date,
                photographer=record.photographer,
                venue=record.venue,
                description=record.description,
                featured=record.featured,
            )
            if record.name:
                fields["name"] = record.name
        return Album(**fields)

    @staticmethod
    def sort_albums(albums: List[Album]) -> List[Album]:
        """Dated albums newest first, then undated albums by name"""

        def sort_key(album: Album) -> tuple:
            name = album.name.casefold()
            if album.date:
                return (0, -album.date.toordinal(), name, album.slug)
            return (1, 0, name, album.slug)

        return sorted(albums, key=sort_key)
