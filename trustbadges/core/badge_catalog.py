"""Static catalog of badge images shipped with the package."""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "badges.json"


class BadgeImageCatalog:
    """Maps badge ids (as stored in ``selectedBadges``) to image file names."""

    def __init__(self, entries: Dict[str, str]):
        self._images = entries

    @classmethod
    def from_file(cls, path: Path = CATALOG_PATH) -> "BadgeImageCatalog":
        with open(path, encoding="utf-8") as fh:
            raw = json.load(fh)
        entries = {
            str(item["id"]): Path(item["image"]).name
            for item in raw
            if item.get("id") and item.get("image")
        }
        logger.debug(f"Loaded {len(entries)} badge images from {path}")
        return cls(entries)

    def filename(self, badge_id: str) -> Optional[str]:
        """Image file name for ``badge_id``, or None when the id is unknown."""
        return self._images.get(badge_id)

    def __contains__(self, badge_id: str) -> bool:
        return badge_id in self._images


@lru_cache(maxsize=1)
def get_badge_catalog() -> BadgeImageCatalog:
    return BadgeImageCatalog.from_file()
