"""Command-line interface for mcp-google-sheets."""
