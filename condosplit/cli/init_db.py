"""CLI entry point creating the schema and the default settings.

Usage:
    python -m condosplit.cli.init_db

Existing settings are left untouched.
"""

import sys

from condosplit.services.config import load_config
from condosplit.services.db import create_db_engine, init_db
from condosplit.services.logging import setup_logging


def main() -> int:
    config = load_config()
    logger = setup_logging(config.log_file)

    try:
        inserted = init_db(create_db_engine(config.database_url))
        logger.info(f"Database initialized at {config.database_url} ({inserted} settings added)")
        return 0
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
