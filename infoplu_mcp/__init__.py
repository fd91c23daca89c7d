"""MCP server for the French Géoportail de l'Urbanisme API."""

__version__ = "1.0.0"
