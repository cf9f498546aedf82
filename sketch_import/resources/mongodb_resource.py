"""MongoDB Resource - Sketch ledger operations."""

from __future__ import annotations

import logging
from functools import cached_property
from typing import ClassVar, Dict

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, Field
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from ..models import EPOCH, Folder, LargeGeometryBlob, PendingRecord, to_object_id

__all__ = ["MongoDBResource"]

log = logging.getLogger(__name__)


class MongoDBResource(BaseModel):
    """
    Resource for reading sketch classes and writing sketches to MongoDB.

    Keeps all MongoDB interactions in one place so that the import pipeline
    only deals with models. Every call is synchronous and issued one at a
    time.
    """

    connection_string: str = Field(..., description="MongoDB connection URI")
    database: str = Field("seasketch", description="MongoDB database name")

    SKETCH_CLASSES: ClassVar[str] = "sketchclasses"
    FORM_ATTRIBUTES: ClassVar[str] = "formattributes"
    SKETCHES: ClassVar[str] = "sketches"
    LARGE_GEOMETRIES: ClassVar[str] = "largegeometries"

    @cached_property
    def _client(self) -> MongoClient:
        return MongoClient(self.connection_string)

    def _get_db(self) -> Database:
        return self._client[self.database]

    def _get_collection(self, name: str) -> Collection:
        return self._get_db()[name]

    def close(self) -> None:
        """Disconnect the client if one was opened."""
        client = self.__dict__.pop("_client", None)
        if client is not None:
            client.close()
            log.debug("Closed MongoDB client")

    # ------------------------------------------------------------------
    # Sketch class operations
    # ------------------------------------------------------------------

    def find_record_class(self, class_id: str | ObjectId) -> Dict | None:
        """
        Load a sketch class document by id.

        Returns None for unknown or malformed ids.
        """
        try:
            oid = to_object_id(class_id)
        except (InvalidId, TypeError):
            return None
        return self._get_collection(self.SKETCH_CLASSES).find_one({"_id": oid})

    def find_attribute_defs(self, class_id: str | ObjectId) -> list[Dict]:
        """
        Load the non-deleted form attributes scoped to a sketch class.
        """
        collection = self._get_collection(self.FORM_ATTRIBUTES)
        cursor = collection.find(
            {"sketchclassid": to_object_id(class_id), "deletedAt": EPOCH}
        )
        return list(cursor)

    # ------------------------------------------------------------------
    # Sketch operations
    # ------------------------------------------------------------------

    def insert_folder(self, folder: Folder) -> str:
        """
        Persist a folder sketch and return its generated id.
        """
        collection = self._get_collection(self.SKETCHES)
        result = collection.insert_one(folder.to_document())
        return str(result.inserted_id)

    def insert_large_geometry(self, blob: LargeGeometryBlob) -> str:
        """
        Persist a geometry blob and return its generated id.
        """
        collection = self._get_collection(self.LARGE_GEOMETRIES)
        result = collection.insert_one(blob.to_document())
        return str(result.inserted_id)

    def insert_record(self, record: PendingRecord, preprocessed_geometry_id: str) -> str:
        """
        Persist a sketch referencing an already-persisted geometry blob.
        """
        collection = self._get_collection(self.SKETCHES)
        document = record.to_document(ObjectId(preprocessed_geometry_id))
        result = collection.insert_one(document)
        return str(result.inserted_id)
