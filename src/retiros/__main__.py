"""
CLI entry point for the retreat ledger.
"""

import asyncio
import logging
import sys
from typing import List, Optional

from retiros.cli import parse_args, run_command
from retiros.config import LOG_FORMAT, get_log_level, load_env
from retiros.server import run_server


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the CLI."""
    load_env()
    args = parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=get_log_level(args.verbose),
        format=LOG_FORMAT,
        stream=sys.stderr,  # MCP uses stdout for protocol, so log to stderr
    )

    try:
        if args.command == "servidor":
            asyncio.run(run_server(database_url=args.database_url))
            code = 0
        else:
            code = asyncio.run(run_command(args))
    except KeyboardInterrupt:
        logging.info("Stopped by user")
        code = 0
    except Exception as e:
        logging.exception(f"Unexpected error: {e}")
        code = 1

    sys.exit(code)


if __name__ == "__main__":
    main()
