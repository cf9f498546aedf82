#!/usr/bin/env python
# =============================================================================
# Shapefile Sketch Import
# =============================================================================
# Imports the features of a shapefile as sketches. Feature properties are
# passed through a mapping function loaded from a Python file, which must
# define map_feature(geometry, properties).
# =============================================================================

"""
Import shapefile features as sketches.

Usage:
    python scripts/import_sketches.py data.shp --user USER --project PROJECT \
        --mapper mapper.py [--connection-string mongodb://host/db]

The mapper file returns the properties to import for each feature
(including SKETCH_CLASS_ID), or a falsy value to skip it.
"""

import argparse
import importlib.util
import logging
import sys
from pathlib import Path
from typing import Callable

from sketch_import.exceptions import ImportAborted, SketchImportError
from sketch_import.importer import import_sketches
from sketch_import.models import ImportSettings


def load_map_function(file_path: Path) -> Callable:
    """
    Load map_feature() from a Python file.

    Raises:
        ImportError: If the file cannot be loaded
        ValueError: If the file does not define a callable map_feature
    """
    spec = importlib.util.spec_from_file_location("sketch_mapper", file_path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not load mapper module from {file_path}")

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    map_feature = getattr(module, "map_feature", None)
    if not callable(map_feature):
        raise ValueError(f"Mapper '{file_path.name}' must define a callable map_feature")
    return map_feature


def build_parser(settings: ImportSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Import shapefile features as sketches")
    parser.add_argument("path", type=Path, help="Path to the .shp file")
    parser.add_argument(
        "--connection-string",
        default=settings.connection_string,
        help="MongoDB connection URI (default: $SKETCH_MONGO_URI)",
    )
    parser.add_argument("--user", required=True, help="User id owning the sketches")
    parser.add_argument("--project", required=True, help="Project id for the sketches")
    parser.add_argument(
        "--mapper",
        type=Path,
        required=True,
        help="Python file defining map_feature(geometry, properties)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Import entry point.

    Returns:
        Exit code (0 for success or cancel, 1 for abort or failure)
    """
    settings = ImportSettings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    args = build_parser(settings).parse_args(argv)

    try:
        map_function = load_map_function(args.mapper)
        run = import_sketches(
            args.path,
            args.connection_string,
            args.user,
            args.project,
            map_function,
            database=settings.database,
            settings=settings,
        )
    except ImportAborted as e:
        print(f"Import aborted: {e}", file=sys.stderr)
        return 1
    except (SketchImportError, ImportError, ValueError, OSError) as e:
        print(f"Import failed: {e}", file=sys.stderr)
        return 1

    print(f"Import finished: {run.state.value} ({len(run.committed_ids)} sketch(es) saved)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
