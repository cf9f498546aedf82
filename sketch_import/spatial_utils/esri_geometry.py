# =============================================================================
# Geometry Converter - GeoJSON (EPSG:4326) to Esri JSON (EPSG:3857)
# =============================================================================
# Converts exactly one GeoJSON feature into the single-feature Esri JSON
# envelope stored on a sketch. Reprojection is done with pyproj.
# =============================================================================

import math
from functools import lru_cache
from numbers import Real
from typing import Any, Callable, Mapping, Sequence

from pyproj import Transformer

from ..exceptions import ConversionError

__all__ = [
    "SOURCE_EPSG",
    "TARGET_EPSG",
    "TARGET_SPATIAL_REFERENCE",
    "FID_FIELD",
    "SUPPORTED_GEOMETRY_TYPES",
    "esri_geometry_type",
    "to_esri_feature",
]


SOURCE_EPSG = 4326
TARGET_EPSG = 3857

# Web Mercator as reported by ArcGIS (102100 is the legacy Esri wkid)
TARGET_SPATIAL_REFERENCE = {"latestWkid": 3857, "wkid": 102100}

FID_FIELD = {"alias": "FID", "type": "esriFieldTypeOID", "name": "FID"}


@lru_cache(maxsize=None)
def _get_transformer(source_epsg: int, target_epsg: int) -> Transformer:
    return Transformer.from_crs(source_epsg, target_epsg, always_xy=True)


def esri_geometry_type(geojson_type: str) -> str:
    """
    Derive the exchange geometry type tag from a GeoJSON type.

    Example:
        >>> esri_geometry_type("MultiPolygon")
        'esriGeometryPolygon'
    """
    return f"esriGeometry{geojson_type.replace('Multi', '')}"


# =============================================================================
# Coordinate helpers
# =============================================================================

def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _require_sequence(value: Any, what: str) -> Sequence:
    if not isinstance(value, (list, tuple)):
        raise ConversionError(f"Malformed {what}: expected a list, got {type(value).__name__}")
    return value


def _project_position(transformer: Transformer, position: Any) -> list[float]:
    position = _require_sequence(position, "position")
    if len(position) < 2 or not all(_is_number(v) for v in position):
        raise ConversionError(f"Malformed position: {position!r}")

    x, y = transformer.transform(position[0], position[1])
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ConversionError(f"Position {list(position)!r} cannot be projected to EPSG:{TARGET_EPSG}")

    # Extra ordinates (z, m) pass through unchanged
    return [x, y, *position[2:]]


def _project_line(transformer: Transformer, line: Any) -> list[list[float]]:
    line = _require_sequence(line, "line")
    if len(line) < 2:
        raise ConversionError("Line must have at least 2 positions")
    return [_project_position(transformer, p) for p in line]


def _is_clockwise(ring: list[list[float]]) -> bool:
    total = 0.0
    for (x1, y1, *_), (x2, y2, *_) in zip(ring, ring[1:]):
        total += (x2 - x1) * (y2 + y1)
    return total >= 0


def _project_ring(transformer: Transformer, ring: Any, outer: bool) -> list[list[float]]:
    ring = _require_sequence(ring, "ring")
    if len(ring) < 3:
        raise ConversionError("Polygon ring must have at least 3 positions")

    projected = [_project_position(transformer, p) for p in ring]
    if projected[0][:2] != projected[-1][:2]:
        projected.append(list(projected[0]))

    # Esri rings: outer rings clockwise, holes counter-clockwise
    if _is_clockwise(projected) != outer:
        projected.reverse()
    return projected


def _project_polygon(transformer: Transformer, rings: Any) -> list[list[list[float]]]:
    rings = _require_sequence(rings, "polygon")
    if not rings:
        raise ConversionError("Polygon must have at least one ring")
    return [
        _project_ring(transformer, ring, outer=(i == 0))
        for i, ring in enumerate(rings)
    ]


# =============================================================================
# Esri geometry encoders
# =============================================================================

def _point(transformer: Transformer, coordinates: Any) -> dict:
    x, y, *rest = _project_position(transformer, coordinates)
    geometry = {"x": x, "y": y}
    if rest:
        geometry["z"] = rest[0]
    return geometry


def _multi_point(transformer: Transformer, coordinates: Any) -> dict:
    coordinates = _require_sequence(coordinates, "multipoint")
    return {"points": [_project_position(transformer, p) for p in coordinates]}


def _line_string(transformer: Transformer, coordinates: Any) -> dict:
    return {"paths": [_project_line(transformer, coordinates)]}


def _multi_line_string(transformer: Transformer, coordinates: Any) -> dict:
    coordinates = _require_sequence(coordinates, "multilinestring")
    return {"paths": [_project_line(transformer, line) for line in coordinates]}


def _polygon(transformer: Transformer, coordinates: Any) -> dict:
    return {"rings": _project_polygon(transformer, coordinates)}


def _multi_polygon(transformer: Transformer, coordinates: Any) -> dict:
    coordinates = _require_sequence(coordinates, "multipolygon")
    rings = []
    for polygon in coordinates:
        rings.extend(_project_polygon(transformer, polygon))
    return {"rings": rings}


_ENCODERS: dict[str, Callable[[Transformer, Any], dict]] = {
    "Point": _point,
    "MultiPoint": _multi_point,
    "LineString": _line_string,
    "MultiLineString": _multi_line_string,
    "Polygon": _polygon,
    "MultiPolygon": _multi_polygon,
}

SUPPORTED_GEOMETRY_TYPES = frozenset(_ENCODERS)


# =============================================================================
# Public API
# =============================================================================

def to_esri_feature(feature: Mapping[str, Any]) -> dict[str, Any]:
    """
    Convert one GeoJSON feature in EPSG:4326 into an Esri JSON envelope.

    The converted feature gets synthetic OBJECTID and FID attributes of 1,
    since every envelope holds exactly one feature. The input is not modified.

    Args:
        feature: GeoJSON-like feature with "geometry" and "properties"

    Returns:
        Envelope dict with features, fields, geometryType and spatialReference

    Raises:
        ConversionError: If the geometry is missing, of an unsupported type,
            or has malformed coordinates
    """
    geometry = feature.get("geometry")
    if not isinstance(geometry, Mapping) or "type" not in geometry:
        raise ConversionError("Feature has no geometry")

    geojson_type = geometry["type"]
    encoder = _ENCODERS.get(geojson_type)
    if encoder is None:
        raise ConversionError(f"Unsupported geometry type: {geojson_type}")

    coordinates = geometry.get("coordinates")
    if coordinates is None:
        raise ConversionError(f"{geojson_type} geometry has no coordinates")

    transformer = _get_transformer(SOURCE_EPSG, TARGET_EPSG)
    esri_geometry = encoder(transformer, coordinates)
    esri_geometry["spatialReference"] = {"wkid": TARGET_EPSG}

    attributes = dict(feature.get("properties") or {})
    attributes["OBJECTID"] = 1
    attributes["FID"] = 1

    return {
        "features": [{"geometry": esri_geometry, "attributes": attributes}],
        "fields": [dict(FID_FIELD)],
        "geometryType": esri_geometry_type(geojson_type),
        "spatialReference": dict(TARGET_SPATIAL_REFERENCE),
    }
