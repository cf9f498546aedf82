# =============================================================================
# Sketch Models
# =============================================================================
# Defines the documents read from and written to the sketch ledger:
# - AttributeDef: one form attribute belonging to a sketch class
# - RecordClass: sketch class with its attributes indexed by export id
# - Folder: collection-type sketch used to group other sketches
# - PendingRecord: in-memory sketch built from a feature, not yet persisted
# - LargeGeometryBlob: out-of-line storage for a sketch's geometry payload
# =============================================================================

from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from pydantic import BaseModel, Field

__all__ = [
    "EPOCH",
    "AttributeDef",
    "RecordClass",
    "Folder",
    "PendingRecord",
    "LargeGeometryBlob",
    "to_object_id",
]


# deletedAt sentinel meaning "not deleted"
EPOCH = datetime(1970, 1, 1)


def to_object_id(value: Any) -> ObjectId:
    """Coerce a string or ObjectId into an ObjectId (raises bson InvalidId)."""
    if isinstance(value, ObjectId):
        return value
    return ObjectId(str(value))


# =============================================================================
# Reference entities (read-only during an import)
# =============================================================================

class AttributeDef(BaseModel):
    """
    Form attribute definition belonging to a sketch class.

    Attributes:
        id: ObjectId of the form attribute document
        record_class_id: ObjectId of the owning sketch class
        export_id: External key used in shapefile properties
        choices: Opaque choice configuration, carried through untouched
    """

    id: str = Field(..., description="Form attribute ObjectId")
    record_class_id: str = Field(..., description="Owning sketch class ObjectId")
    export_id: str = Field(..., description="External export id")
    choices: Any = Field(None, description="Opaque choices payload")

    model_config = {"frozen": True}

    @classmethod
    def from_document(cls, document: dict) -> "AttributeDef":
        return cls(
            id=str(document["_id"]),
            record_class_id=str(document["sketchclassid"]),
            export_id=document["exportid"],
            choices=document.get("choices"),
        )


class RecordClass(BaseModel):
    """
    Sketch class definition with attributes indexed by export id.

    Attributes:
        id: ObjectId of the sketch class document
        name: Human-readable class name
        attributes: Mapping of export id → AttributeDef
    """

    id: str = Field(..., description="Sketch class ObjectId")
    name: Optional[str] = Field(None, description="Sketch class name")
    attributes: dict[str, AttributeDef] = Field(
        default_factory=dict,
        description="Attribute definitions keyed by export id",
    )

    @classmethod
    def from_documents(
        cls, document: dict, attribute_documents: list[dict]
    ) -> "RecordClass":
        attributes = {}
        for attribute_document in attribute_documents:
            attribute = AttributeDef.from_document(attribute_document)
            attributes[attribute.export_id] = attribute
        return cls(
            id=str(document["_id"]),
            name=document.get("name"),
            attributes=attributes,
        )


# =============================================================================
# Sketch documents
# =============================================================================

class Folder(BaseModel):
    """
    Collection-type sketch that groups other sketches.

    Folders are created on demand during an import and never carry geometry.
    """

    id: Optional[str] = Field(None, description="ObjectId once persisted")
    name: str = Field(..., description="Folder name (cache key within a run)")
    record_class_id: str = Field(..., description="Sketch class ObjectId")
    project: str = Field(..., description="Project id")
    user: str = Field(..., description="User id")
    deleted_at: datetime = Field(default=EPOCH, description="Deletion marker")

    def to_document(self) -> dict[str, Any]:
        return {
            "name": self.name,
            # Folders store the class id as a string
            "sketchclass": self.record_class_id,
            "project": self.project,
            "user": self.user,
            "inMessage": False,
            "deletedAt": self.deleted_at,
            "isCollection": True,
            "attributes": {},
        }


class PendingRecord(BaseModel):
    """
    Sketch built from one accepted feature, held in memory until commit.

    Attributes:
        name: Sketch name (from the NAME property, may be absent)
        record_class_id: Sketch class ObjectId
        project: Project id
        user: User id
        geometry: Esri JSON envelope in Web Mercator
        geometry_original: Copy of the feature geometry before conversion
        parent_id: Folder ObjectId, or None for top-level sketches
        is_collection: Always False for imported sketches
        static_geometry: Whether the geometry is locked from editing
        deleted_at: Deletion marker (epoch means not deleted)
        attributes: Mapping of form attribute id → value
    """

    name: Optional[str] = Field(None, description="Sketch name")
    record_class_id: str = Field(..., description="Sketch class ObjectId")
    project: str = Field(..., description="Project id")
    user: str = Field(..., description="User id")
    geometry: dict[str, Any] = Field(..., description="Esri JSON envelope")
    geometry_original: Optional[dict[str, Any]] = Field(
        None, description="Pre-conversion geometry"
    )
    parent_id: Optional[str] = Field(None, description="Parent folder ObjectId")
    is_collection: bool = Field(False, description="Collection flag")
    static_geometry: bool = Field(True, description="Static geometry flag")
    deleted_at: datetime = Field(default=EPOCH, description="Deletion marker")
    attributes: dict[str, Any] = Field(
        default_factory=dict,
        description="Attribute values keyed by form attribute id",
    )

    def to_document(self, preprocessed_geometry_id: Any) -> dict[str, Any]:
        """
        Build the sketch document referencing a persisted geometry blob.

        The pending record itself is left untouched.
        """
        return {
            "name": self.name,
            "sketchclass": to_object_id(self.record_class_id),
            "project": self.project,
            "user": self.user,
            "inMessage": False,
            "geometry": self.geometry,
            "preprocessedgeometryid": preprocessed_geometry_id,
            "deletedAt": self.deleted_at,
            "geometryOriginal": self.geometry_original,
            "parentid": to_object_id(self.parent_id) if self.parent_id else None,
            "staticGeometry": self.static_geometry,
            "isCollection": self.is_collection,
            "attributes": dict(self.attributes),
        }


class LargeGeometryBlob(BaseModel):
    """Out-of-line geometry payload referenced by preprocessedgeometryid."""

    type: str = Field("preprocessed", description="Blob type tag")
    geometry: dict[str, Any] = Field(..., description="Raw geometry payload")

    def to_document(self) -> dict[str, Any]:
        return {"type": self.type, "geometry": self.geometry}
