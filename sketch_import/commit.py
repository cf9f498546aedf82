# =============================================================================
# Commit Manager - Two-Write Sketch Persistence
# =============================================================================
# Persists accepted sketches: the geometry blob first, then the sketch that
# references it. Sketches are written one at a time in accepted order and
# nothing is rolled back.
# =============================================================================

import logging

from pymongo.errors import PyMongoError

from .exceptions import CommitError
from .models import CommitChoice, ImportRun, LargeGeometryBlob, PendingRecord, RunState
from .resources import MongoDBResource

__all__ = ["CommitManager", "commit_choices", "parse_commit_choice"]

log = logging.getLogger(__name__)


def commit_choices(accepted_count: int) -> list[str]:
    """Prompt labels for cancel, sample and all, in that order."""
    return [
        "Cancel",
        "Import 1 sample sketch",
        f"Import all {accepted_count} sketches",
    ]


def parse_commit_choice(label: str, accepted_count: int) -> CommitChoice:
    """Map a prompt label back to a CommitChoice."""
    cancel, sample, all_ = commit_choices(accepted_count)
    if label == sample:
        return CommitChoice.SAMPLE
    if label == all_:
        return CommitChoice.ALL
    return CommitChoice.CANCEL


class CommitManager:
    """Writes the accepted sketches of a run to MongoDB."""

    def __init__(self, mongo: MongoDBResource):
        self.mongo = mongo

    def save_record(self, record: PendingRecord) -> str:
        """
        Persist one sketch as a geometry blob followed by the sketch itself.

        Returns:
            ObjectId of the persisted sketch

        Raises:
            CommitError: If either write fails. When the sketch write fails
                the blob stays behind and its id is on the error.
        """
        try:
            blob_id = self.mongo.insert_large_geometry(
                LargeGeometryBlob(geometry=record.geometry)
            )
        except PyMongoError as e:
            raise CommitError(
                f"Failed to store geometry for sketch {record.name!r}: {e}",
                committed_ids=[],
            ) from e

        try:
            return self.mongo.insert_record(record, blob_id)
        except PyMongoError as e:
            log.error(f"Sketch {record.name!r} not saved; geometry {blob_id} is orphaned")
            raise CommitError(
                f"Failed to store sketch {record.name!r}: {e}",
                committed_ids=[],
                orphaned_blob_id=blob_id,
            ) from e

    def commit(self, run: ImportRun, choice: CommitChoice) -> ImportRun:
        """
        Apply the commit choice to a run awaiting it.

        Args:
            run: Run in AWAITING_COMMIT_CHOICE state
            choice: cancel, sample (first accepted sketch only) or all

        Returns:
            The same run, in CANCELLED, COMMITTED_SAMPLE or COMMITTED_ALL state

        Raises:
            ValueError: If the run is not awaiting a commit choice
            CommitError: If a write fails; earlier sketches stay committed
        """
        if run.state != RunState.AWAITING_COMMIT_CHOICE:
            raise ValueError(f"Run is {run.state.value}, not awaiting a commit choice")

        if choice == CommitChoice.CANCEL:
            log.info("Import cancelled")
            run.advance(RunState.CANCELLED)
            return run

        if choice == CommitChoice.SAMPLE:
            records = run.accepted[:1]
            final_state = RunState.COMMITTED_SAMPLE
        else:
            records = run.accepted
            final_state = RunState.COMMITTED_ALL

        total = len(records)
        for number, record in enumerate(records, start=1):
            log.info(f"Uploading sketch {number}/{total}")
            try:
                sketch_id = self.save_record(record)
            except CommitError as e:
                e.committed_ids = list(run.committed_ids)
                run.advance(RunState.ABORTED)
                raise
            run.committed_ids.append(sketch_id)

        if final_state == RunState.COMMITTED_SAMPLE and run.committed_ids:
            log.info(f"Uploaded single sketch ({run.committed_ids[0]})")
        else:
            log.info(f"Uploaded {len(run.committed_ids)} sketches")
        run.advance(final_state)
        return run
