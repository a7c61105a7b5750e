"""Storefront MCP Server: event-driven catalog, basket and checkout state."""

__version__ = "0.1.0"
