# =============================================================================
# Unit Tests: Record Builder
# =============================================================================

import pytest

from sketch_import.exceptions import NotFoundError
from sketch_import.record_builder import RecordBuilder
from sketch_import.spatial_utils import to_esri_feature


@pytest.fixture
def envelope(square_feature):
    return to_esri_feature(square_feature)


@pytest.fixture
def properties(sketch_class_id):
    return {
        "SKETCH_CLASS_ID": sketch_class_id,
        "NAME": "Reef 1",
        "DESIGNATION": "Marine Reserve",
        "AREA_HA": 12.5,
        "UNKNOWN_FIELD": "dropped",
        "RETIRED": "also dropped",
    }


# =============================================================================
# Test: Record fields
# =============================================================================

def test_build_record(builder, envelope, properties, sketch_class_id):
    record = builder.build(envelope, properties, "proj1", "user1")

    assert record.name == "Reef 1"
    assert record.record_class_id == sketch_class_id
    assert record.project == "proj1"
    assert record.user == "user1"
    assert record.geometry == envelope
    assert record.is_collection is False
    assert record.static_geometry is True


def test_attributes_keep_only_known_export_ids(builder, envelope, properties, attribute_ids):
    record = builder.build(envelope, properties, "proj1", "user1")

    assert record.attributes == {
        attribute_ids["DESIGNATION"]: "Marine Reserve",
        attribute_ids["AREA_HA"]: 12.5,
    }


def test_no_folder_means_no_parent(builder, envelope, properties):
    record = builder.build(envelope, properties, "proj1", "user1")
    assert record.parent_id is None


def test_missing_name_is_allowed(builder, envelope, properties):
    del properties["NAME"]
    assert builder.build(envelope, properties, "proj1", "user1").name is None


def test_static_geometry_override(builder, envelope, properties):
    record = builder.build(envelope, properties, "proj1", "user1", static_geometry=False)
    assert record.static_geometry is False


def test_source_geometry_is_copied(builder, envelope, properties, square_geometry):
    record = builder.build(
        envelope, properties, "proj1", "user1", source_geometry=square_geometry
    )
    square_geometry["coordinates"][0][0] = [9.0, 9.0]

    assert record.geometry_original["type"] == "Polygon"
    assert record.geometry_original["coordinates"][0][0] == [0.0, 0.0]


# =============================================================================
# Test: Folders
# =============================================================================

def test_folder_descriptor_sets_parent(builder, envelope, properties, folder_class_id, db):
    properties["FOLDER"] = {"name": "North", "type": folder_class_id}
    record = builder.build(envelope, properties, "proj1", "user1")

    folder = db["sketches"].find_one({"name": "North", "isCollection": True})
    assert record.parent_id == str(folder["_id"])


def test_folder_descriptor_is_stripped_without_mutating_input(
    builder, envelope, properties, folder_class_id
):
    properties["FOLDER"] = {"name": "North", "type": folder_class_id}
    record = builder.build(envelope, properties, "proj1", "user1")

    assert "FOLDER" in properties
    assert all(not isinstance(v, dict) for v in record.attributes.values())


def test_features_share_folder(builder, envelope, properties, folder_class_id, db):
    properties["FOLDER"] = {"name": "North", "type": folder_class_id}
    first = builder.build(envelope, properties, "proj1", "user1")
    second = builder.build(envelope, dict(properties, NAME="Reef 2"), "proj1", "user1")

    assert first.parent_id == second.parent_id
    assert db["sketches"].count_documents({"isCollection": True}) == 1


# =============================================================================
# Test: Failures and extension point
# =============================================================================

def test_missing_class_id_raises(builder, envelope, properties):
    del properties["SKETCH_CLASS_ID"]
    with pytest.raises(KeyError):
        builder.build(envelope, properties, "proj1", "user1")


def test_unknown_class_raises(builder, envelope, properties):
    properties["SKETCH_CLASS_ID"] = "5c1a0e5e2d9b4a00ffffffff"
    with pytest.raises(NotFoundError):
        builder.build(envelope, properties, "proj1", "user1")


def test_compatibility_check_receives_class_and_type(cache, envelope, properties):
    calls = []
    builder = RecordBuilder(cache, compatibility_check=lambda cls, gt: calls.append((cls.name, gt)))

    builder.build(envelope, properties, "proj1", "user1")

    assert calls == [("Protected Area", "esriGeometryPolygon")]


def test_compatibility_check_can_reject(cache, envelope, properties):
    def points_only(record_class, geometry_type):
        if geometry_type != "esriGeometryPoint":
            raise ValueError(f"{record_class.name} only accepts points")

    builder = RecordBuilder(cache, compatibility_check=points_only)
    with pytest.raises(ValueError, match="only accepts points"):
        builder.build(envelope, properties, "proj1", "user1")
