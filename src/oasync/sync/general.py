"""Housekeeping for the vendor-neutral store."""

import logging
from pathlib import Path

from oasync.catalog.store import LocalCatalogStore

log = logging.getLogger(__name__)

GENERAL_PLATFORM = "general"


def clean_general(root: Path) -> bool:
    """Remove every offramped general record below ``root``."""
    store = LocalCatalogStore(root, GENERAL_PLATFORM)
    removed = store.clear()
    log.info("Removed %s" if removed else "Nothing to remove at %s", store.platform_dir)
    return removed
