"""
Command line interface for Colibri
"""

from colibri.cli.arguments import CLIManager

__all__ = ['CLIManager']
