"""
CLI entrypoint for the food rescue content pipeline.

One sub-command per pipeline stage:
- import-taxonomy: Open Food Facts categories.txt -> categories, names, hierarchy
- import-products: Open Food Facts product CSV -> products with categories and countries
- import-product-counts: Open Food Facts categories JSON -> product count per category
- import-foodkeeper: USDA FoodKeeper database -> storage topics (and DocBook files)
- export-foodkeeper: USDA FoodKeeper database -> CSV for mapping products to categories

Every stage:
- loads .env (if present) and configs/pipeline.yaml
- configures logging with a per-run tag
- opens the content database, prepares its tables, runs, and closes it on every exit path
- exits with status 1 on fatal errors (unparsable input, broken invariants)
"""

import argparse
import logging
import os
import sqlite3
import sys
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from application import (
    export_foodkeeper_mapping,
    import_foodkeeper,
    import_product_counts,
    import_products,
    import_taxonomy,
)
from application.constants import (
    STAGE_FOODKEEPER,
    STAGE_FOODKEEPER_EXPORT,
    STAGE_PRODUCT_COUNTS,
    STAGE_PRODUCTS,
    STAGE_TAXONOMY,
)
from infrastructure.config import PipelineConfig, load_pipeline_config
from infrastructure.constants import CONFIG_ENV_VAR, LOG_LEVEL_ENV_VAR, PIPELINE_FILE
from infrastructure.io import ensure_exists
from infrastructure.observability import configure_logging, make_run_tag, set_log_context
from infrastructure.storage import (
    open_database,
    prepare_category_tables,
    prepare_product_tables,
    prepare_topic_tables,
    relaxed_durability,
)

logger = logging.getLogger(__name__)

LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Food rescue content pipeline")
    p.add_argument(
        "--config",
        type=str,
        default=None,
        help=f"Path to pipeline.yaml (default: ${CONFIG_ENV_VAR} or {PIPELINE_FILE})",
    )
    p.add_argument(
        "--env",
        type=str,
        default=".env",
        help="Path to .env file, loaded if it exists (default: .env)",
    )
    p.add_argument(
        "--console-level",
        type=str,
        default=None,
        choices=LEVELS,
        help=f"Console log level (default: ${LOG_LEVEL_ENV_VAR} or INFO)",
    )
    p.add_argument(
        "--file-level",
        type=str,
        default="DEBUG",
        choices=LEVELS,
        help="File log level",
    )
    p.add_argument("--log-file", type=str, default=None, help="Also log to this file (rotating)")
    p.add_argument(
        "--reuse-tables",
        action="store_true",
        help="Write into existing tables instead of failing when they exist.",
    )

    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser(STAGE_TAXONOMY, help="Import categories.txt")
    s.add_argument("infile", help="Open Food Facts categories.txt")
    s.add_argument("dbfile", help="Content database (SQLite)")

    s = sub.add_parser(STAGE_PRODUCTS, help="Import the product CSV export")
    s.add_argument("infile", help="Open Food Facts products CSV")
    s.add_argument("dbfile", help="Content database (SQLite)")

    s = sub.add_parser(STAGE_PRODUCT_COUNTS, help="Import product counts per category")
    s.add_argument("infile", help="Open Food Facts categories.json")
    s.add_argument("dbfile", help="Content database (SQLite)")

    s = sub.add_parser(STAGE_FOODKEEPER, help="Convert FoodKeeper products to topics")
    s.add_argument("fkdb", help="FoodKeeper app database (SQLite)")
    s.add_argument("dbfile", help="Content database (SQLite)")
    s.add_argument("--mapping", default=None, help="CSV/XLSX mapping FoodKeeper products to categories")
    s.add_argument("--docbook-prefix", default=None, help="Also write topics to <prefix>NNN.xml")

    s = sub.add_parser(STAGE_FOODKEEPER_EXPORT, help="Export FoodKeeper products for category mapping")
    s.add_argument("fkdb", help="FoodKeeper app database (SQLite)")
    s.add_argument("csvfile", help="Output CSV file")

    return p.parse_args(argv)


def _run_in_database(
    dbfile: Path,
    cfg: PipelineConfig,
    prepare: Callable[..., None],
    stage: Callable[[sqlite3.Connection], dict[str, int]],
    *,
    allow_reuse: bool,
) -> dict[str, int]:
    with open_database(dbfile) as conn:
        prepare(conn, allow_reuse=allow_reuse)
        if cfg.storage.relaxed_durability:
            with relaxed_durability(conn):
                return stage(conn)
        return stage(conn)


def run(args: argparse.Namespace, cfg: PipelineConfig) -> dict[str, int]:
    """Dispatch one sub-command. Returns the stage's counters."""
    allow_reuse = bool(args.reuse_tables or cfg.storage.allow_reuse)

    if args.command == STAGE_TAXONOMY:
        infile = Path(args.infile)
        return _run_in_database(
            Path(args.dbfile),
            cfg,
            prepare_category_tables,
            lambda conn: import_taxonomy(conn, infile, cfg.fixups, encoding=cfg.taxonomy.encoding),
            allow_reuse=allow_reuse,
        )

    if args.command == STAGE_PRODUCTS:
        infile = Path(args.infile)
        return _run_in_database(
            Path(args.dbfile),
            cfg,
            prepare_product_tables,
            lambda conn: import_products(conn, infile, cfg.products),
            allow_reuse=allow_reuse,
        )

    if args.command == STAGE_PRODUCT_COUNTS:
        infile = Path(args.infile)
        # Counts are written into the categories of an earlier taxonomy import.
        return _run_in_database(
            Path(args.dbfile),
            cfg,
            prepare_category_tables,
            lambda conn: import_product_counts(conn, infile),
            allow_reuse=True,
        )

    if args.command == STAGE_FOODKEEPER:
        fkdb = Path(args.fkdb)
        mapping = Path(args.mapping) if args.mapping else None
        return _run_in_database(
            Path(args.dbfile),
            cfg,
            prepare_topic_tables,
            lambda conn: import_foodkeeper(
                conn, fkdb, cfg.foodkeeper, mapping_path=mapping, docbook_prefix=args.docbook_prefix
            ),
            allow_reuse=allow_reuse,
        )

    if args.command == STAGE_FOODKEEPER_EXPORT:
        return {"products": export_foodkeeper_mapping(Path(args.fkdb), Path(args.csvfile))}

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    env_file = Path(args.env)
    if env_file.exists():
        load_dotenv(env_file, override=True)
    console_level = args.console_level or os.environ.get(LOG_LEVEL_ENV_VAR, "INFO").upper()
    config_path = Path(args.config or os.environ.get(CONFIG_ENV_VAR, str(PIPELINE_FILE)))

    configure_logging(
        log_file=Path(args.log_file) if args.log_file else None,
        console_level=getattr(logging, console_level, logging.INFO),
        file_level=getattr(logging, args.file_level),
    )

    run_id = f"{datetime.now().strftime('%Y%m%d_%H%M%S')}_{args.command}"
    set_log_context(run_id_full=run_id, stage=args.command)
    logger.info("Starting run: run_id=%s (run_tag=%s)", run_id, make_run_tag(run_id))

    try:
        ensure_exists(config_path, "pipeline.yaml")
        cfg = load_pipeline_config(config_path)
        stats = run(args, cfg)
    except (ValueError, LookupError, OSError, sqlite3.Error) as e:
        logger.error("%s failed: %s", args.command, e)
        logger.debug("Traceback:", exc_info=True)
        return 1

    logger.info("%s finished: %s", args.command, ", ".join(f"{k}={v}" for k, v in stats.items()))
    return 0


if __name__ == "__main__":
    sys.exit(main())
