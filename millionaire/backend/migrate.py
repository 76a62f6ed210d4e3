"""Create the results table in the configured PostgreSQL database."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from millionaire.backend.config import configure_logging, load_settings

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA = Path(__file__).with_name("db_schema.sql")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply the millionaire results schema")
    parser.add_argument("--schema", type=Path, default=DEFAULT_SCHEMA)
    parser.add_argument("--database-url", default="")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    settings = load_settings()
    configure_logging(settings.log_level)
    database_url = args.database_url or settings.database_url
    if not database_url:
        raise RuntimeError("MILLIONAIRE_DATABASE_URL is required for migration")

    import psycopg

    schema_sql = args.schema.read_text(encoding="utf-8")
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            cur.execute(schema_sql)
        conn.commit()
    logger.info("applied schema %s", args.schema.name)


if __name__ == "__main__":
    main()
