# =============================================================================
# Importer Exceptions
# =============================================================================

"""Exception hierarchy for the sketch importer."""

from typing import Optional

__all__ = [
    "SketchImportError",
    "ConversionError",
    "NotFoundError",
    "ImportAborted",
    "CommitError",
]


class SketchImportError(Exception):
    """Base class for importer errors."""


class ConversionError(SketchImportError):
    """A feature's geometry could not be converted to Esri JSON."""


class NotFoundError(SketchImportError):
    """A referenced sketch class does not exist."""


class ImportAborted(SketchImportError):
    """The run was aborted before anything was committed."""

    def __init__(self, message: str, reason: str, run=None):
        super().__init__(message)
        self.reason = reason
        self.run = run


class CommitError(SketchImportError):
    """
    A sketch write failed during commit.

    Sketches listed in committed_ids stay persisted. When the geometry blob
    was written but the sketch was not, orphaned_blob_id names the blob left
    behind.
    """

    def __init__(
        self,
        message: str,
        *,
        committed_ids: list[str],
        orphaned_blob_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.committed_ids = committed_ids
        self.orphaned_blob_id = orphaned_blob_id
