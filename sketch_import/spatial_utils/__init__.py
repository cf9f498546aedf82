# =============================================================================
# Spatial Utils Library
# =============================================================================
# Projection checks and geometry conversion for the sketch importer.
# =============================================================================

"""
Spatial utilities for the sketch importer.

This library provides:
- check_projection: .prj sidecar verification against an expected EPSG code
- to_esri_feature: GeoJSON (EPSG:4326) → Esri JSON envelope (EPSG:3857)
"""

from .esri_geometry import (
    SUPPORTED_GEOMETRY_TYPES,
    TARGET_SPATIAL_REFERENCE,
    esri_geometry_type,
    to_esri_feature,
)
from .projection import check_projection, read_sidecar_epsg, sidecar_path

__all__ = [
    "SUPPORTED_GEOMETRY_TYPES",
    "TARGET_SPATIAL_REFERENCE",
    "esri_geometry_type",
    "to_esri_feature",
    "check_projection",
    "read_sidecar_epsg",
    "sidecar_path",
]
