"""
Colibri - recursive web fetch and extraction engine

Fetches network resources and extracts structured data from their content
using a declarative, recursive tree of rules and selectors.
"""

__version__ = "0.1.0"
