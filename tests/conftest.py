"""
Shared pytest fixtures for importer tests.

Uses mongomock as an in-memory MongoDB and seeds a sketch class with form
attributes so the cache, builder and pipeline can be exercised end to end.
"""

from datetime import datetime

import mongomock
import pytest
from pyproj import CRS

from sketch_import.models import EPOCH
from sketch_import.record_builder import RecordBuilder
from sketch_import.reference_cache import ReferenceCache
from sketch_import.resources import MongoDBResource


# =============================================================================
# Test Doubles
# =============================================================================

class FakePrompter:
    """Prompter with canned answers that records what it was asked."""

    def __init__(self, confirm_answer=True, select_index=0):
        self.confirm_answer = confirm_answer
        self.select_index = select_index
        self.confirm_messages = []
        self.select_calls = []

    def confirm(self, message):
        self.confirm_messages.append(message)
        return self.confirm_answer

    def select(self, message, choices):
        self.select_calls.append((message, list(choices)))
        return choices[self.select_index]


# =============================================================================
# MongoDB Fixtures
# =============================================================================

@pytest.fixture
def mongomock_client():
    """In-memory MongoDB client for tests."""
    return mongomock.MongoClient()


@pytest.fixture
def mongo_resource(monkeypatch, mongomock_client):
    """MongoDBResource configured to use the mongomock client."""
    monkeypatch.setattr(
        "sketch_import.resources.mongodb_resource.MongoClient",
        lambda *args, **kwargs: mongomock_client,
    )
    return MongoDBResource(connection_string="mongodb://localhost:27017/seasketch")


@pytest.fixture
def db(mongomock_client, mongo_resource):
    """Database the resource writes to."""
    return mongomock_client[mongo_resource.database]


@pytest.fixture
def sketch_class_id(db):
    """Sketch class with two live attributes and one deleted attribute."""
    class_id = db["sketchclasses"].insert_one({"name": "Protected Area"}).inserted_id
    db["formattributes"].insert_many(
        [
            {
                "sketchclassid": class_id,
                "exportid": "DESIGNATION",
                "deletedAt": EPOCH,
                "choices": ["Marine Reserve", "Fishing Zone"],
            },
            {"sketchclassid": class_id, "exportid": "AREA_HA", "deletedAt": EPOCH},
            {
                "sketchclassid": class_id,
                "exportid": "RETIRED",
                "deletedAt": datetime(2020, 1, 1),
            },
        ]
    )
    return str(class_id)


@pytest.fixture
def folder_class_id(db):
    """Sketch class used for folders."""
    return str(db["sketchclasses"].insert_one({"name": "Folder"}).inserted_id)


@pytest.fixture
def attribute_ids(db, sketch_class_id):
    """Mapping of export id → form attribute id for the seeded class."""
    return {
        doc["exportid"]: str(doc["_id"])
        for doc in db["formattributes"].find({})
    }


@pytest.fixture
def cache(mongo_resource):
    """Fresh reference cache backed by mongomock."""
    return ReferenceCache(mongo_resource)


@pytest.fixture
def builder(cache):
    return RecordBuilder(cache)


@pytest.fixture
def prompter():
    return FakePrompter()


# =============================================================================
# Feature Fixtures
# =============================================================================

@pytest.fixture
def square_geometry():
    """4-point ring polygon in EPSG:4326."""
    return {
        "type": "Polygon",
        "coordinates": [[[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 0.0]]],
    }


@pytest.fixture
def square_feature(square_geometry):
    return {
        "type": "Feature",
        "geometry": square_geometry,
        "properties": {"NAME": "Reef 1", "DESIGNATION": "Marine Reserve"},
    }


@pytest.fixture
def wgs84_shapefile(tmp_path):
    """Path to a .shp whose .prj sidecar declares EPSG:4326."""
    shp = tmp_path / "areas.shp"
    shp.write_bytes(b"")
    (tmp_path / "areas.prj").write_text(CRS.from_epsg(4326).to_wkt("WKT1_GDAL"))
    return shp


@pytest.fixture
def unprojected_shapefile(tmp_path):
    """Path to a .shp without a .prj sidecar."""
    shp = tmp_path / "unknown.shp"
    shp.write_bytes(b"")
    return shp


@pytest.fixture
def make_prompter():
    """Factory for FakePrompter instances with custom answers."""
    return FakePrompter
