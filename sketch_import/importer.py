# =============================================================================
# Importer - Entry Point
# =============================================================================
# Wires the feature source, pipeline, prompts and commit manager together
# for one shapefile import run.
# =============================================================================

import logging
from pathlib import Path
from typing import Callable, ContextManager, Iterator, Optional, Union

from .commit import CommitManager, commit_choices, parse_commit_choice
from .exceptions import ImportAborted
from .models import ImportRun, ImportSettings, RunState, database_from_uri
from .pipeline import ImportPipeline, MapFunction
from .prompts import ConsolePrompter, Prompter
from .record_builder import CompatibilityCheck, RecordBuilder
from .reference_cache import ReferenceCache
from .resources import MongoDBResource
from .source import open_shapefile

__all__ = ["import_sketches"]

log = logging.getLogger(__name__)

SourceOpener = Callable[[Union[str, Path]], ContextManager[Iterator[dict]]]


def import_sketches(
    path: Union[str, Path],
    connection_string: str,
    user_id: str,
    project_id: str,
    map_function: MapFunction,
    *,
    database: Optional[str] = None,
    prompter: Optional[Prompter] = None,
    settings: Optional[ImportSettings] = None,
    open_source: SourceOpener = open_shapefile,
    mongo: Optional[MongoDBResource] = None,
    cache: Optional[ReferenceCache] = None,
    compatibility_check: Optional[CompatibilityCheck] = None,
) -> ImportRun:
    """
    Import the features of a shapefile as sketches.

    Args:
        path: Path to the .shp file
        connection_string: MongoDB connection URI
        user_id: Owner of the created sketches
        project_id: Project the sketches belong to
        map_function: (geometry, properties) -> properties, or falsy to skip
        database: Database name (default: taken from the connection string)
        prompter: Confirmation collaborator (default: terminal prompts)
        settings: Importer settings (default: read from the environment)
        open_source: Opens the feature source (default: fiona shapefile reader)
        mongo: Persistence resource (default: built from connection_string)
        cache: Reference cache (default: a fresh cache for this run)
        compatibility_check: Optional geometry/sketch class validation hook

    Returns:
        The finished ImportRun (CANCELLED, COMMITTED_SAMPLE or COMMITTED_ALL)

    Raises:
        ImportAborted: If the projection was declined or any feature errored
        NotFoundError: If a referenced sketch class does not exist
        CommitError: If a write fails during commit
    """
    settings = settings or ImportSettings()
    prompter = prompter or ConsolePrompter()
    if mongo is None:
        mongo = MongoDBResource(
            connection_string=connection_string,
            database=database or database_from_uri(connection_string),
        )
    if cache is None:
        cache = ReferenceCache(mongo)

    pipeline = ImportPipeline(
        RecordBuilder(cache, compatibility_check),
        prompter,
        expected_epsg=settings.expected_epsg,
    )

    try:
        log.info(f"Opening {path}")
        with open_source(path) as features:
            run = pipeline.read(path, features, project_id, user_id, map_function)

        if run.state == RunState.ABORTED:
            if run.errors:
                raise ImportAborted(
                    f"{len(run.errors)} errors", reason="feature_errors", run=run
                )
            raise ImportAborted(
                "Projection not confirmed", reason="projection_declined", run=run
            )

        accepted_count = len(run.accepted)
        label = prompter.select(
            "How would you like to proceed?", commit_choices(accepted_count)
        )
        choice = parse_commit_choice(label, accepted_count)
        return CommitManager(mongo).commit(run, choice)
    finally:
        mongo.close()
