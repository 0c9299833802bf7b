import argparse
import asyncio
import logging
from pathlib import Path

from assessment_api.config import DOCUMENT_CACHE_TTL_MS, LEGACY_STORE_DIR
from assessment_api.database import SessionLocal, init_db
from assessment_api.logging_setup import setup_console_logging
from assessment_api.storage import (
    AssessmentsStateAdapter,
    CachedDocumentStore,
    JsonFileKeyValueStore,
    SessionsAdapter,
    SqlDocumentStore,
)

setup_console_logging()
logger = logging.getLogger("assessment_api.cli")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Assessment engine maintenance")
    commands = parser.add_subparsers(dest="command", required=True)

    migrate = commands.add_parser(
        "migrate-legacy",
        help="Move legacy key-value data into the document store",
    )
    migrate.add_argument(
        "--legacy-dir",
        type=Path,
        default=LEGACY_STORE_DIR,
        help="Directory holding the legacy <key>.json files",
    )
    return parser.parse_args()


async def migrate_legacy(legacy_dir: Path) -> None:
    """Run both legacy migration checks once against the configured store."""
    store = CachedDocumentStore(SqlDocumentStore(SessionLocal), DOCUMENT_CACHE_TTL_MS)
    legacy = JsonFileKeyValueStore(legacy_dir)

    state = await AssessmentsStateAdapter(store, legacy).read_state()
    sessions = await SessionsAdapter(store, legacy).read_sessions()
    logger.info(
        "Store holds %d templates, %d attempts, %d live sessions",
        len(state.templates),
        len(state.attempts),
        len(sessions),
    )


def main() -> None:
    args = parse_args()
    init_db()
    if args.command == "migrate-legacy":
        asyncio.run(migrate_legacy(args.legacy_dir))


if __name__ == "__main__":
    main()
