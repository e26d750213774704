import os
from typing import Iterable, List, Optional

import pytest

# Keep real backends out of unit tests
os.environ.setdefault("VERCEL_ENV", "development")
os.environ.setdefault("BLOB_READ_WRITE_TOKEN", "test-token")
os.environ.setdefault("ALBUM_METADATA_PATH", "does-not-exist/albums.json")

from blob_client import BlobClient  # noqa: E402
from errors import UpstreamError  # noqa: E402
from models import BlobListing, BlobObject  # noqa: E402


BLOB_HOST = "https://store.public.blob.vercel-storage.com"


def blob_url(pathname: str) -> str:
    return f"{BLOB_HOST}/{pathname}"


class FakeBlobClient(BlobClient):
    """In-memory stand-in for the storage listing API

    Cursors are stringified offsets; folded mode lists top-level folders.
    """

    def __init__(self, pathnames: Iterable[str], fail_prefixes: Iterable[str] = ()):
        # no HTTP client: every listing is served from memory
        self.token = "test-token"
        self.pathnames = list(pathnames)
        self.fail_prefixes = set(fail_prefixes)
        self.calls: List[dict] = []

    async def list(
        self,
        prefix: Optional[str] = None,
        limit: int = 100,
        cursor: Optional[str] = None,
        mode: Optional[str] = None,
    ) -> BlobListing:
        self.calls.append({"prefix": prefix, "limit": limit, "cursor": cursor, "mode": mode})
        if prefix in self.fail_prefixes:
            raise UpstreamError(f"listing {prefix} failed", payload={"error": "boom"})

        offset = int(cursor or 0)
        if mode == "folded":
            folders = []
            for pathname in self.pathnames:
                if "/" in pathname:
                    folder = pathname.split("/")[0] + "/"
                    if folder not in folders:
                        folders.append(folder)
            page = folders[offset:offset + limit]
            has_more = offset + limit < len(folders)
            return BlobListing(
                folders=page,
                has_more=has_more,
                cursor=str(offset + limit) if has_more else None,
            )

        matching = [p for p in self.pathnames if p.startswith(prefix or "")]
        page = matching[offset:offset + limit]
        has_more = offset + limit < len(matching)
        return BlobListing(
            blobs=[BlobObject(url=blob_url(p), pathname=p) for p in page],
            has_more=has_more,
            cursor=str(offset + limit) if has_more else None,
        )


@pytest.fixture
def fake_blob_client():
    def install(pathnames, fail_prefixes=()):
        return FakeBlobClient(pathnames, fail_prefixes=fail_prefixes)

    return install


@pytest.fixture
def metadata_file(tmp_path):
    def write(content: str):
        path = tmp_path / "albums.json"
        path.write_text(content, encoding="utf-8")
        return path

    return write
