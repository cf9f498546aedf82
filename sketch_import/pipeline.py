# =============================================================================
# Import Pipeline - Projection Gate and Per-Feature Classification
# =============================================================================
# Drives the feature source: verifies the projection once, then maps,
# converts and builds every feature, classifying it as accepted, rejected
# or errored. Any error makes the whole run fatal.
# =============================================================================

import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from .exceptions import NotFoundError
from .models import FeatureError, ImportRun, PendingRecord, RunState
from .prompts import Prompter
from .record_builder import RecordBuilder
from .spatial_utils import check_projection, to_esri_feature

__all__ = ["MapFunction", "ImportPipeline"]

log = logging.getLogger(__name__)


# (geometry, properties) -> mapped properties, or a falsy value to reject
MapFunction = Callable[[Mapping[str, Any], dict[str, Any]], Optional[Mapping[str, Any]]]


class ImportPipeline:
    """
    Reads features and turns them into pending sketches.

    Args:
        builder: RecordBuilder used for accepted features
        prompter: Asked whether to continue when the projection is unverified
        expected_epsg: EPSG code the source must declare (default: 4326)
    """

    def __init__(
        self,
        builder: RecordBuilder,
        prompter: Prompter,
        expected_epsg: int = 4326,
    ):
        self.builder = builder
        self.prompter = prompter
        self.expected_epsg = expected_epsg

    def verify_projection(self, run: ImportRun, path: Union[str, Path]) -> bool:
        """
        Run the projection gate.

        Returns:
            True to continue reading, False if the user declined
        """
        run.advance(RunState.VALIDATING_PROJECTION)
        run.projection_verified = check_projection(path, self.expected_epsg)
        if run.projection_verified:
            log.info(f"Verified projection is {self.expected_epsg}")
            return True

        proceed = self.prompter.confirm(
            f"Projection cannot be confirmed to be {self.expected_epsg}. Proceed anyways?"
        )
        if not proceed:
            log.warning("Import aborted: projection not confirmed")
        return proceed

    def process_feature(
        self,
        feature: Mapping[str, Any],
        project_id: str,
        user_id: str,
        map_function: MapFunction,
    ) -> Optional[PendingRecord]:
        """
        Map, convert and build a single feature.

        Returns:
            PendingRecord, or None when the mapping function rejected it
        """
        geometry = feature.get("geometry")
        properties = map_function(geometry, dict(feature.get("properties") or {}))
        if not properties:
            return None

        envelope = to_esri_feature(
            {"type": "Feature", "geometry": geometry, "properties": properties}
        )
        return self.builder.build(
            envelope,
            properties,
            project_id,
            user_id,
            source_geometry=geometry,
        )

    def read(
        self,
        path: Union[str, Path],
        features: Iterable[Mapping[str, Any]],
        project_id: str,
        user_id: str,
        map_function: MapFunction,
    ) -> ImportRun:
        """
        Verify the projection, then classify every feature in source order.

        The returned run is AWAITING_COMMIT_CHOICE when every feature was
        accepted or rejected, and ABORTED when the projection was declined or
        any feature errored. Nothing is committed here.

        Raises:
            NotFoundError: If a feature references a sketch class that does
                not exist (fatal, the run is marked ABORTED first)
        """
        run = ImportRun()
        if not self.verify_projection(run, path):
            run.advance(RunState.ABORTED)
            return run

        run.advance(RunState.READING)
        for index, feature in enumerate(features):
            run.processed += 1
            log.debug(f"Processing feature {index}")
            try:
                record = self.process_feature(feature, project_id, user_id, map_function)
            except NotFoundError:
                run.advance(RunState.ABORTED)
                raise
            except Exception as e:
                run.errors.append(FeatureError.from_exception(index, e))
                continue

            if record is None:
                run.rejected += 1
            else:
                run.accepted.append(record)

        log.info(
            f"Processed {run.processed} features: {len(run.accepted)} accepted, "
            f"{run.rejected} rejected, {len(run.errors)} errors"
        )

        if run.errors:
            run.advance(RunState.ERRORS_FOUND)
            log.error(f"Encountered {len(run.errors)} errors")
            for error in run.errors:
                log.error(str(error))
            run.advance(RunState.ABORTED)
            return run

        run.advance(RunState.AWAITING_COMMIT_CHOICE)
        return run
