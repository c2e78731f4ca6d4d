#!/usr/bin/env python3
"""
Colibri - Main Entry Point

Loads the configuration and a rule file, sets up logging, runs one
extraction and prints the result as JSON.
"""

import sys
import json
import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

from colibri.core.base import ExtractResult
from colibri.core.config import ConfigManager
from colibri.core.convert import KEY_IGNORE_ROBOTS_TXT, KEY_URL
from colibri.core.logging import setup_logging, get_logger, log_error
from colibri.core.rules import new_rules, release_rules
from colibri.cli.arguments import CLIManager
from colibri.webextractor import new


def format_result(result: ExtractResult) -> Dict[str, Any]:
    """Build the JSON document printed for an extraction"""
    return {
        "url": str(result.response.url) if result.response is not None else None,
        "status": result.response.status_code if result.response is not None else None,
        "data": result.output,
        "errors": result.errors.to_dict() if result.errors else None
    }


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for colibri"""
    cli_manager = CLIManager()
    args = cli_manager.parse_arguments(argv)

    if args.examples:
        print("\nColibri - Usage Examples\n")
        print(cli_manager.get_usage_examples())
        return 0

    # Load configuration
    config_manager = ConfigManager(args.config)
    config = config_manager.load_config()

    # Set up logging
    logging_config = config_manager.logging_config
    setup_logging(
        level=args.log_level or logging_config.level,
        log_file=logging_config.file,
        max_size=logging_config.max_size,
        backup_count=logging_config.backup_count
    )
    logger = get_logger()

    # Load and apply command line overrides to the rules
    try:
        raw_rules = config_manager.load_rules(args.rules)
    except Exception as e:
        logger.error(f"Failed to load rules: {e}")
        return 1

    if args.url:
        raw_rules[KEY_URL] = args.url
    if args.ignore_robots:
        raw_rules[KEY_IGNORE_ROBOTS_TXT] = True

    rules, errs = new_rules(raw_rules)
    if errs:
        logger.error(f"Invalid rules: {errs}")
        release_rules(rules)
        return 1

    if rules.url is None:
        logger.error("No URL to fetch. Set URL in the rule file or use --url")
        release_rules(rules)
        return 1

    # Run the extraction
    try:
        async with new(config) as c:
            result = await c.extract(rules)
    except Exception as e:
        log_error(e, {"url": str(rules.url), "rules": args.rules})
        return 1
    finally:
        release_rules(rules)

    document = json.dumps(format_result(result), indent=args.indent or None, ensure_ascii=False, default=str)
    if args.output:
        Path(args.output).write_text(document + "\n", encoding="utf-8")
        logger.info(f"Result written to {args.output}")
    else:
        print(document)

    if result.errors:
        logger.warning(f"{len(result.errors)} selector(s) failed")
        return 1
    return 0


def run() -> None:
    """Console script entry point"""
    try:
        exit_code = asyncio.run(main())
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nColibri interrupted by user", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    run()
