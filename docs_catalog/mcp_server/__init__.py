"""MCP Server for the document catalog.

Exposes list, search and get operations over the Model Context Protocol so
assistants can browse guidelines and ADRs directly.
"""
