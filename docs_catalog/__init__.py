"""
Docs Catalog: read-only catalog of Markdown guideline documents.

Indexes architecture decision records, recommendations and design notes kept
on the local filesystem or in a GitHub repository, and serves them through
list, search and get operations, including over MCP.
"""

__version__ = "0.1.0"
