# =============================================================================
# Reference Cache - Sketch Class and Folder Resolution
# =============================================================================
# Resolves sketch classes (with their form attributes) and folders once per
# run and memoizes them. Backing stores are injectable so tests can share or
# reset them between runs.
# =============================================================================

import logging
import threading
from typing import MutableMapping, Optional

from .exceptions import NotFoundError
from .models import Folder, RecordClass
from .resources import MongoDBResource

__all__ = ["ReferenceCache"]

log = logging.getLogger(__name__)


class ReferenceCache:
    """
    Run-scoped cache of sketch classes and folders.

    Entries are never invalidated while a run is in progress. Class and
    folder resolution hold a re-entrant lock so that at most one folder is
    ever created per name, even if callers stop serializing their calls.

    Args:
        mongo: Persistence resource used on cache misses
        class_store: Backing mapping of class id → RecordClass
        folder_store: Backing mapping of folder name → Folder
    """

    def __init__(
        self,
        mongo: MongoDBResource,
        class_store: Optional[MutableMapping[str, RecordClass]] = None,
        folder_store: Optional[MutableMapping[str, Folder]] = None,
    ):
        self._mongo = mongo
        self._classes = class_store if class_store is not None else {}
        self._folders = folder_store if folder_store is not None else {}
        self._lock = threading.RLock()

    def reset(self) -> None:
        """Forget every cached class and folder."""
        with self._lock:
            self._classes.clear()
            self._folders.clear()

    def resolve_class(self, class_id) -> RecordClass:
        """
        Return the sketch class with its attributes indexed by export id.

        Args:
            class_id: Sketch class ObjectId (string or ObjectId)

        Returns:
            Cached or freshly loaded RecordClass

        Raises:
            NotFoundError: If no sketch class has this id
        """
        key = str(class_id)
        with self._lock:
            cached = self._classes.get(key)
            if cached is not None:
                return cached

            document = self._mongo.find_record_class(key)
            if document is None:
                raise NotFoundError(f"Sketch class {key!r} not found")

            attribute_documents = self._mongo.find_attribute_defs(document["_id"])
            record_class = RecordClass.from_documents(document, attribute_documents)
            log.info(
                f"Loaded sketch class {record_class.name!r} ({key}) "
                f"with {len(record_class.attributes)} attribute(s)"
            )
            self._classes[key] = record_class
            return record_class

    def resolve_or_create_folder(
        self, name: str, class_id, project: str, user: str
    ) -> Folder:
        """
        Return the folder with this name, creating it on first use.

        Args:
            name: Folder name (cache key)
            class_id: Sketch class ObjectId for a newly created folder
            project: Project id for a newly created folder
            user: User id for a newly created folder

        Returns:
            Cached or newly persisted Folder

        Raises:
            NotFoundError: If the folder's sketch class does not exist
        """
        with self._lock:
            cached = self._folders.get(name)
            if cached is not None:
                return cached

            record_class = self.resolve_class(class_id)
            folder = Folder(
                name=name,
                record_class_id=record_class.id,
                project=project,
                user=user,
            )
            folder.id = self._mongo.insert_folder(folder)
            log.info(f"Created folder {name!r} ({folder.id})")
            self._folders[name] = folder
            return folder
