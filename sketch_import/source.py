# =============================================================================
# Feature Source - Shapefile Reader
# =============================================================================
# Thin wrapper around fiona exposing a shapefile as a lazy, finite sequence
# of GeoJSON-like feature dicts.
# =============================================================================

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Union

import fiona
from fiona.model import to_dict

__all__ = ["open_shapefile"]

log = logging.getLogger(__name__)


@contextmanager
def open_shapefile(path: Union[str, Path]) -> Iterator[Iterator[dict[str, Any]]]:
    """
    Open a shapefile and yield an iterator over its features.

    Each feature is a plain dict with "geometry" and "properties" keys. The
    iterator is single-pass; the file is closed when the context exits.

    Raises:
        fiona.errors.DriverError: If the file cannot be opened
    """
    with fiona.open(str(path), "r") as collection:
        log.info(f"Opened {path} ({len(collection)} feature(s))")
        yield (to_dict(feature) for feature in collection)
