# =============================================================================
# Data Models Library
# =============================================================================
# Pydantic models and settings for the sketch importer.
# =============================================================================

"""
Data models for the sketch importer.

This library provides:
- Sketch documents: RecordClass, AttributeDef, Folder, PendingRecord, LargeGeometryBlob
- Run tracking: ImportRun, RunState, CommitChoice, FeatureError
- Configuration models
"""

# Sketch documents
from .sketch import (
    EPOCH,
    AttributeDef,
    RecordClass,
    Folder,
    PendingRecord,
    LargeGeometryBlob,
    to_object_id,
)

# Run models
from .run import (
    RunState,
    CommitChoice,
    FeatureError,
    ImportRun,
)

# Configuration models
from .config import (
    ImportSettings,
    database_from_uri,
)

__all__ = [
    # Sketch documents
    "EPOCH",
    "AttributeDef",
    "RecordClass",
    "Folder",
    "PendingRecord",
    "LargeGeometryBlob",
    "to_object_id",
    # Run models
    "RunState",
    "CommitChoice",
    "FeatureError",
    "ImportRun",
    # Configuration models
    "ImportSettings",
    "database_from_uri",
]
