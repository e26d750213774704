import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List

from pydantic import ValidationError

import config
from errors import PartialDataError
from models import AlbumMetadata


logger = logging.getLogger(__name__)


class MetadataStore:
    """Reads album metadata records authored in the content tool

    The store is either one JSON file holding an array of records or a
    directory with one JSON file per album. Nothing is cached: every call
    reads the store again.
    """

    def __init__(self, path: str | Path = config.ALBUM_METADATA_PATH):
        self.path = Path(path)

    def load_album_metadata(self) -> List[AlbumMetadata]:
        """Load every readable record; unreadable ones are logged and skipped"""
        try:
            raw_records = list(self._iter_raw_records())
        except (OSError, ValueError):
            logger.exception("Album metadata store %s is unreadable", self.path)
            return []

        records = []
        for source, raw in raw_records:
            try:
                records.append(self._parse_record(source, raw))
            except PartialDataError as e:
                logger.warning("Skipping album metadata record %s", e)
        return records

    def get_index(self) -> Dict[str, AlbumMetadata]:
        """Metadata keyed by slug; the first record wins on duplicates"""
        index: Dict[str, AlbumMetadata] = {}
        for record in self.load_album_metadata():
            if record.slug in index:
                logger.warning("Duplicate album metadata for slug %r ignored", record.slug)
                continue
            index[record.slug] = record
        return index

    def _iter_raw_records(self) -> Iterator[tuple[str, Any]]:
        if not self.path.exists():
            logger.info("No album metadata at %s; using slug-derived names", self.path)
            return

        if self.path.is_dir():
            for file_path in sorted(self.path.glob("*.json")):
                try:
                    with open(file_path, "r", encoding="utf-8") as f:
                        data = json.load(f)
                except (OSError, ValueError) as e:
                    logger.warning("Skipping album metadata file %s: %s", file_path, e)
                    continue
                yield from self._expand(str(file_path), data)
            return

        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict) and "albums" in data:
            data = data["albums"]
        yield from self._expand(str(self.path), data)

    @staticmethod
    def _expand(source: str, data: Any) -> Iterator[tuple[str, Any]]:
        if isinstance(data, list):
            for position, raw in enumerate(data):
                yield f"{source}[{position}]", raw
        else:
            yield source, data

    @staticmethod
    def _parse_record(source: str, raw: Any) -> AlbumMetadata:
        if not isinstance(raw, dict):
            raise PartialDataError(source, "record is not a JSON object")
        try:
            return AlbumMetadata.model_validate(raw)
        except ValidationError as e:
            raise PartialDataError(source, f"{e.error_count()} invalid field(s)") from e
