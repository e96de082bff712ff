"""Command line entry point.

Usage:
    jen [options] [config_file]
    python -m jen [options] [config_file]
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from jen.config import DEFAULT_CONFIG_FILE, SiteConfig, load_config
from jen.exceptions import JenError
from jen.log import configure_logging, get_logger
from jen.site import SiteBuilder, watch

logger = get_logger("cli")


async def run_site(config: SiteConfig, watch_changes: bool = False) -> int:
    """Build the site once, then optionally keep rebuilding on changes.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    builder = SiteBuilder(config)
    try:
        builder.discover()
        if not builder.entries:
            logger.warning("No entry pages match %s under %s",
                           config.entries, config.root)
        try:
            result = await builder.build()
        except JenError as e:
            logger.error("Build failed: %s", e)
            if e.__cause__ is not None:
                logger.error("  caused by: %s", e.__cause__)
            if not watch_changes:
                return 1
        else:
            logger.info("Built %d page(s) into %s",
                        result.tasks_executed, config.output)

        if watch_changes:
            await watch(builder)
        return 0
    finally:
        await builder.fetcher.aclose()


def main(args: Optional[List[str]] = None) -> int:
    """CLI entry point.

    Args:
        args: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(
        description='Build a static site incrementally',
        prog='jen',
    )
    parser.add_argument(
        'config_file',
        nargs='?',
        default=DEFAULT_CONFIG_FILE,
        help=f'Path to the config file (default: {DEFAULT_CONFIG_FILE})',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Log debug information',
    )
    parser.add_argument(
        '--watch',
        action='store_true',
        help='Keep running and rebuild when files change',
    )
    parser.add_argument(
        '--log-file',
        type=Path,
        default=None,
        help='Also write log records to this file',
    )

    parsed = parser.parse_args(args)
    configure_logging(verbose=parsed.verbose, log_file=parsed.log_file)

    try:
        config = load_config(parsed.config_file)
    except (FileNotFoundError, JenError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        return asyncio.run(run_site(config, watch_changes=parsed.watch))
    except KeyboardInterrupt:
        return 0


if __name__ == '__main__':
    sys.exit(main())
