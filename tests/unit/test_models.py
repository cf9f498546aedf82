"""
Unit tests for sketch, run and settings models.
"""

from bson import ObjectId
import pytest

from sketch_import.models import (
    EPOCH,
    AttributeDef,
    Folder,
    FeatureError,
    ImportRun,
    ImportSettings,
    LargeGeometryBlob,
    PendingRecord,
    RecordClass,
    RunState,
    database_from_uri,
)


CLASS_ID = "5c1a0e5e2d9b4a0012345678"
FOLDER_ID = "5c1a0e5e2d9b4a0012345679"
BLOB_ID = ObjectId("5c1a0e5e2d9b4a001234567a")


@pytest.fixture
def pending_record():
    return PendingRecord(
        name="Reef 1",
        record_class_id=CLASS_ID,
        project="proj1",
        user="user1",
        geometry={"geometryType": "esriGeometryPoint", "features": []},
        attributes={"attr1": "value"},
    )


# =============================================================================
# Reference entities
# =============================================================================

class TestRecordClass:
    """Test building sketch classes from documents."""

    def test_from_documents(self):
        class_doc = {"_id": ObjectId(CLASS_ID), "name": "Protected Area"}
        attr_docs = [
            {"_id": ObjectId(), "sketchclassid": ObjectId(CLASS_ID), "exportid": "DEPTH"},
            {"_id": ObjectId(), "sketchclassid": ObjectId(CLASS_ID), "exportid": "ZONE", "choices": [1, 2]},
        ]

        record_class = RecordClass.from_documents(class_doc, attr_docs)

        assert record_class.id == CLASS_ID
        assert set(record_class.attributes) == {"DEPTH", "ZONE"}
        assert record_class.attributes["ZONE"].choices == [1, 2]
        assert record_class.attributes["DEPTH"].choices is None

    def test_attribute_def_is_immutable(self):
        attribute = AttributeDef(id="a", record_class_id=CLASS_ID, export_id="DEPTH")
        with pytest.raises(Exception):
            attribute.export_id = "OTHER"


# =============================================================================
# Sketch documents
# =============================================================================

class TestPendingRecord:
    """Test PendingRecord defaults and document conversion."""

    def test_defaults(self, pending_record):
        assert pending_record.parent_id is None
        assert pending_record.is_collection is False
        assert pending_record.static_geometry is True
        assert pending_record.deleted_at == EPOCH

    def test_to_document(self, pending_record):
        document = pending_record.to_document(BLOB_ID)

        assert document["sketchclass"] == ObjectId(CLASS_ID)
        assert document["preprocessedgeometryid"] == BLOB_ID
        assert document["parentid"] is None
        assert document["inMessage"] is False
        assert document["isCollection"] is False
        assert document["staticGeometry"] is True
        assert document["deletedAt"] == EPOCH
        assert document["attributes"] == {"attr1": "value"}

    def test_to_document_with_parent(self, pending_record):
        pending_record.parent_id = FOLDER_ID
        assert pending_record.to_document(BLOB_ID)["parentid"] == ObjectId(FOLDER_ID)


class TestFolder:
    """Test Folder document conversion."""

    def test_to_document(self):
        folder = Folder(name="North", record_class_id=CLASS_ID, project="p", user="u")
        document = folder.to_document()

        assert document["isCollection"] is True
        assert document["sketchclass"] == CLASS_ID
        assert document["deletedAt"] == EPOCH
        assert document["attributes"] == {}


def test_large_geometry_blob_document():
    blob = LargeGeometryBlob(geometry={"geometryType": "esriGeometryPoint"})
    assert blob.to_document() == {
        "type": "preprocessed",
        "geometry": {"geometryType": "esriGeometryPoint"},
    }


# =============================================================================
# Run model
# =============================================================================

class TestImportRun:
    """Test run state transitions."""

    def test_happy_path(self):
        run = ImportRun()
        for state in (
            RunState.VALIDATING_PROJECTION,
            RunState.READING,
            RunState.AWAITING_COMMIT_CHOICE,
            RunState.COMMITTED_ALL,
        ):
            run.advance(state)
        assert run.state.is_terminal

    def test_errors_lead_to_abort(self):
        run = ImportRun()
        run.advance(RunState.VALIDATING_PROJECTION)
        run.advance(RunState.READING)
        run.advance(RunState.ERRORS_FOUND)

        with pytest.raises(ValueError):
            run.advance(RunState.AWAITING_COMMIT_CHOICE)
        run.advance(RunState.ABORTED)
        assert run.state.is_terminal

    def test_cannot_skip_projection(self):
        with pytest.raises(ValueError, match="not_started"):
            ImportRun().advance(RunState.READING)

    def test_terminal_states_are_final(self):
        run = ImportRun()
        run.advance(RunState.VALIDATING_PROJECTION)
        run.advance(RunState.ABORTED)
        with pytest.raises(ValueError):
            run.advance(RunState.READING)


def test_feature_error_from_exception():
    error = FeatureError.from_exception(3, KeyError("SKETCH_CLASS_ID"))

    assert error.index == 3
    assert error.error_type == "KeyError"
    assert str(error) == "Feature 3: KeyError: 'SKETCH_CLASS_ID'"


# =============================================================================
# Settings
# =============================================================================

class TestImportSettings:
    """Test environment-driven settings."""

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("SKETCH_MONGO_URI", "mongodb://db.example:27017/ocean")
        monkeypatch.setenv("SKETCH_EXPECTED_EPSG", "3857")

        settings = ImportSettings()

        assert settings.connection_string == "mongodb://db.example:27017/ocean"
        assert settings.expected_epsg == 3857
        assert settings.database_name == "ocean"

    def test_explicit_database_wins(self, monkeypatch):
        monkeypatch.setenv("SKETCH_MONGO_URI", "mongodb://db.example:27017/ocean")
        monkeypatch.setenv("SKETCH_MONGO_DATABASE", "other")

        assert ImportSettings().database_name == "other"


@pytest.mark.parametrize(
    "uri,expected",
    [
        ("mongodb://localhost:27017/seasketch", "seasketch"),
        ("mongodb://user:pw@host:27017/ocean?authSource=admin", "ocean"),
        ("mongodb://localhost:27017", "seasketch"),
        ("mongodb://localhost:27017/", "seasketch"),
    ],
)
def test_database_from_uri(uri, expected):
    assert database_from_uri(uri) == expected
