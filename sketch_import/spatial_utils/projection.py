# =============================================================================
# Projection Validator - .prj Sidecar Inspection
# =============================================================================
# Checks whether a shapefile declares the expected spatial reference by
# parsing the .prj sidecar that sits next to the .shp file.
# =============================================================================

import logging
from pathlib import Path
from typing import Optional, Union

from pyproj import CRS
from pyproj.exceptions import CRSError

__all__ = ["sidecar_path", "read_sidecar_epsg", "check_projection"]

log = logging.getLogger(__name__)


def sidecar_path(path: Union[str, Path]) -> Path:
    """Return the .prj path for a primary geometry file."""
    return Path(path).with_suffix(".prj")


def read_sidecar_epsg(path: Union[str, Path]) -> Optional[int]:
    """
    Parse the EPSG code declared by a file's .prj sidecar.

    Args:
        path: Path to the primary geometry file (e.g. data.shp)

    Returns:
        EPSG code, or None when the sidecar is missing, unreadable,
        unparseable, or does not identify a known authority code
    """
    prj = sidecar_path(path)
    try:
        text = prj.read_text(errors="replace").strip()
    except OSError as e:
        log.info(f"No readable projection file at {prj}: {e}")
        return None

    if not text:
        log.info(f"Projection file {prj} is empty")
        return None

    try:
        crs = CRS.from_wkt(text)
    except CRSError as e:
        log.warning(f"Could not parse projection file {prj}: {e}")
        return None

    return crs.to_epsg()


def check_projection(path: Union[str, Path], expected_epsg: int = 4326) -> bool:
    """
    Verify that a shapefile's sidecar declares the expected EPSG code.

    A missing or unreadable sidecar means "unknown" and returns False
    rather than raising.
    """
    epsg = read_sidecar_epsg(path)
    if epsg is None:
        return False
    log.debug(f"Projection file declares EPSG:{epsg}")
    return epsg == expected_epsg
