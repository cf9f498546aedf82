# =============================================================================
# Record Builder - Feature to Pending Sketch
# =============================================================================
# Combines a converted Esri envelope, the feature's (mapped) properties and
# reference-cache lookups into a PendingRecord.
# =============================================================================

import copy
import logging
from typing import Any, Callable, Mapping, Optional

from .models import PendingRecord, RecordClass
from .reference_cache import ReferenceCache

__all__ = [
    "CLASS_ID_FIELD",
    "NAME_FIELD",
    "FOLDER_FIELD",
    "CompatibilityCheck",
    "RecordBuilder",
]

log = logging.getLogger(__name__)


CLASS_ID_FIELD = "SKETCH_CLASS_ID"
NAME_FIELD = "NAME"
FOLDER_FIELD = "FOLDER"

# Called with (record_class, esri geometry type); raises to reject the feature
CompatibilityCheck = Callable[[RecordClass, str], None]


def _as_name(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


class RecordBuilder:
    """
    Builds pending sketches from converted features.

    Args:
        cache: Reference cache for sketch class and folder lookups
        compatibility_check: Optional hook validating that a geometry type
            suits the sketch class. No check is made when omitted.
    """

    def __init__(
        self,
        cache: ReferenceCache,
        compatibility_check: Optional[CompatibilityCheck] = None,
    ):
        self.cache = cache
        self.compatibility_check = compatibility_check

    def build(
        self,
        envelope: Mapping[str, Any],
        properties: Mapping[str, Any],
        project: str,
        user: str,
        *,
        source_geometry: Optional[Mapping[str, Any]] = None,
        static_geometry: bool = True,
    ) -> PendingRecord:
        """
        Build a PendingRecord for one feature.

        Args:
            envelope: Esri JSON envelope from to_esri_feature()
            properties: Feature properties; must carry SKETCH_CLASS_ID, may
                carry NAME, FOLDER ({"name", "type"}) and export-id keyed values
            project: Project id
            user: User id
            source_geometry: Feature geometry before conversion
            static_geometry: Whether the sketch geometry is locked from editing

        Returns:
            PendingRecord whose attributes only contain known export ids

        Raises:
            KeyError: If properties lack SKETCH_CLASS_ID
            NotFoundError: If the sketch class (or folder class) does not exist
        """
        if CLASS_ID_FIELD not in properties:
            raise KeyError(f"Feature properties are missing {CLASS_ID_FIELD}")

        record_class = self.cache.resolve_class(properties[CLASS_ID_FIELD])
        if self.compatibility_check is not None:
            self.compatibility_check(record_class, envelope["geometryType"])

        values = dict(properties)
        folder = None
        descriptor = values.pop(FOLDER_FIELD, None)
        if descriptor:
            folder = self.cache.resolve_or_create_folder(
                descriptor["name"], descriptor["type"], project, user
            )

        attributes = {}
        for key, value in values.items():
            attribute = record_class.attributes.get(key)
            if attribute is not None:
                attributes[attribute.id] = value

        dropped = len(values) - len(attributes)
        if dropped:
            log.debug(f"Dropped {dropped} unmatched property key(s)")

        return PendingRecord(
            name=_as_name(values.get(NAME_FIELD)),
            record_class_id=record_class.id,
            project=project,
            user=user,
            geometry=copy.deepcopy(dict(envelope)),
            geometry_original=copy.deepcopy(dict(source_geometry)) if source_geometry else None,
            parent_id=folder.id if folder else None,
            is_collection=False,
            static_geometry=static_geometry,
            attributes=attributes,
        )
