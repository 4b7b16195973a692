"""Install and manage the a11y testing MCP server bundle."""

__version__ = "1.0.0"
