"""
Command Line Argument Parsing for Colibri

Handles command line arguments for the rule file, request overrides,
configuration and output options.
"""

import argparse
from pathlib import Path
from typing import List, Optional

from colibri import __version__


class CLIManager:
    """
    Command line interface manager for colibri

    Handles the rule file argument, request overrides and output options.
    Provides validation and help documentation.
    """

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all options

        Returns:
            Configured argument parser
        """
        parser = argparse.ArgumentParser(
            prog="colibri",
            description="Fetch a web resource and extract structured data from it with a rule file",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter,
            epilog=self._get_epilog()
        )

        parser.add_argument(
            "rules",
            nargs="?",
            help="Path to a YAML or JSON rule file"
        )

        # Request overrides
        request_group = parser.add_argument_group("Request")
        request_group.add_argument(
            "--url",
            help="Target URL, overrides the URL of the rule file"
        )
        request_group.add_argument(
            "--ignore-robots",
            action="store_true",
            help="Do not check robots.txt before fetching"
        )

        # Configuration options
        config_group = parser.add_argument_group("Configuration")
        config_group.add_argument(
            "--config",
            default="config/colibri.yaml",
            help="Path to configuration file"
        )
        config_group.add_argument(
            "--log-level",
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            help="Logging level"
        )

        # Output options
        output_group = parser.add_argument_group("Output")
        output_group.add_argument(
            "--output",
            help="Write the JSON result to this file instead of stdout"
        )
        output_group.add_argument(
            "--indent",
            type=int,
            default=2,
            help="Indentation of the JSON result"
        )

        parser.add_argument(
            "--version",
            action="version",
            version=f"colibri v{__version__}"
        )

        parser.add_argument(
            "--examples",
            action="store_true",
            help="Show usage examples and exit"
        )

        return parser

    def _get_epilog(self) -> str:
        """
        Get epilog text for help message

        Returns:
            Formatted epilog text
        """
        return """
Rule file example (YAML):
  URL: https://example.com
  Delay: 1s
  Selectors:
    title: //head/title
    links:
      Expr: //a/@href
      All: true

Notes:
  - The result is printed as JSON with the keys url, status, data and errors
  - The exit code is 1 when the request failed or any selector failed
"""

    def parse_arguments(self, args: Optional[List[str]] = None) -> argparse.Namespace:
        """
        Parse command line arguments

        Args:
            args: Command line arguments (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        parsed_args = self.parser.parse_args(args)
        self.validate_arguments(parsed_args)
        return parsed_args

    def validate_arguments(self, args: argparse.Namespace) -> bool:
        """
        Validate parsed arguments for consistency

        Args:
            args: Parsed arguments namespace

        Returns:
            True if arguments are valid
        """
        if args.examples:
            return True

        if not args.rules:
            self.parser.error("A rule file is required")

        if not Path(args.rules).is_file():
            self.parser.error(f"Rule file not found: {args.rules}")

        if args.indent is not None and args.indent < 0:
            self.parser.error("Indent must be non-negative")

        return True

    def get_usage_examples(self) -> str:
        """
        Get usage examples

        Returns:
            Formatted usage examples
        """
        return """
  # Extract with a rule file
  python -m colibri rules.yaml

  # Same rules against another page
  python -m colibri rules.yaml --url https://example.org

  # Write the result to a file with debug logging
  python -m colibri rules.json --output result.json --log-level DEBUG

  # Skip the robots.txt check
  python -m colibri rules.yaml --ignore-robots
"""

    def print_help(self) -> None:
        """Print help message"""
        self.parser.print_help()
