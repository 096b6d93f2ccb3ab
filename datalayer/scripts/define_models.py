#!/usr/bin/env python3
"""
Model definition CLI

Usage:
    python -m datalayer.scripts.define_models models/                  # Define models, print a summary
    python -m datalayer.scripts.define_models models/ --verbose        # Also print every decision
    python -m datalayer.scripts.define_models models/ --create-tables --database-url sqlite:///app.db
"""

import argparse
import sys
from typing import List, Optional

from datalayer.database import create_database_engine, init_database
from datalayer.logging_config import configure_logging, get_logger
from datalayer.registry import DataLayerError, Registry, define_models
from datalayer.settings import get_settings

logger = get_logger(name=__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Define every model in a directory and wire their associations",
    )
    parser.add_argument(
        "models_dir",
        nargs="?",
        help="Directory of model definitions (default: DATALAYER_MODELS_DIR)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Print every registration decision")
    parser.add_argument("--create-tables", action="store_true", help="Create the registered tables")
    parser.add_argument("--database-url", help="Database URL (default: DATALAYER_DATABASE_URL)")
    return parser


def print_summary(registry: Registry, report) -> None:
    print(f"\nDefined {len(registry)} model(s):\n")
    print("-" * 72)
    print(f"{'Model':<24} {'Table':<24} {'Associations'}")
    print("-" * 72)
    for schema in registry:
        associations = ", ".join(
            f"{a.type.value}({a.target.name})" for a in schema.associations
        ) or "-"
        print(f"{schema.name:<24} {schema.table.name:<24} {associations}")
    print("-" * 72)

    if report.skipped:
        print(f"\nSkipped {len(report.skipped)} association(s):")
        for outcome in report.skipped:
            print(f"  {outcome.source_name}[{outcome.index}]: {outcome.reason}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    models_dir = args.models_dir or settings.models_dir
    if models_dir is None:
        print("No models directory given and DATALAYER_MODELS_DIR is not set.", file=sys.stderr)
        return 2

    registry = Registry()
    try:
        report = define_models(registry, models_dir, verbose=args.verbose or settings.verbose)
        if args.create_tables:
            engine = create_database_engine(args.database_url)
            init_database(registry, engine)
    except DataLayerError as e:
        logger.error("Model definition failed: {}", e)
        return 1

    print_summary(registry, report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
