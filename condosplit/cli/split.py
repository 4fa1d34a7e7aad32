"""CLI entry point for apportioning the bills of a period.

Usage:
    python -m condosplit.cli.split --from 2025-01-01 --to 2025-01-31 --type both
    python -m condosplit.cli.split --from 2025-01-01 --to 2025-03-31 --debug

Exit Codes:
    0 - Success: result printed as JSON on stdout
    1 - Failure: error logged; nothing printed

Logging:
    INFO level logs to both stderr and logs/condosplit.log (LOG_LEVEL overrides)
"""

import argparse
import json
import sys

from condosplit.services.config import load_config
from condosplit.services.db import create_db_engine, create_session_factory
from condosplit.services.diagnostics_service import build_debug_report
from condosplit.services.errors import SplitError
from condosplit.services.logging import setup_logging
from condosplit.services.split_repository import SplitRepository
from condosplit.services.split_service import SplitService
from condosplit.services.split_settings import SplitSettings
from condosplit.services.split_types import SplitType


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Apportion gas and electricity bills across units")
    parser.add_argument("--from", dest="date_from", required=True, help="First day (YYYY-MM-DD)")
    parser.add_argument("--to", dest="date_to", required=True, help="Last day (YYYY-MM-DD)")
    parser.add_argument(
        "--type",
        dest="split_type",
        choices=[t.value for t in SplitType],
        default=SplitType.BOTH.value,
        help="Bills to apportion (default: both)",
    )
    parser.add_argument("--trace", action="store_true", help="Include the calculation trace")
    parser.add_argument("--debug", action="store_true", help="Print the administrator debug report")
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the apportionment CLI.

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    args = build_parser().parse_args(argv)

    config = load_config()
    logger = setup_logging(config.log_file, stream=sys.stderr)

    try:
        engine = create_db_engine(config.database_url)
        session_factory = create_session_factory(engine)

        with session_factory() as db:
            repository = SplitRepository(db)
            result = SplitService(repository).calculate_monthly_split(
                args.date_from, args.date_to, args.split_type
            )
            if args.debug:
                settings = SplitSettings.from_mapping(repository.load_settings())
                output = build_debug_report(result, settings)
            else:
                output = result.to_dict(include_trace=args.trace)

        print(json.dumps(output, indent=2, ensure_ascii=False))
        return 0

    except SplitError as e:
        logger.error(f"Calculation failed: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        return 1
    except Exception as e:
        logger.error(f"Unexpected failure: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
