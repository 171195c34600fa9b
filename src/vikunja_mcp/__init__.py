"""Vikunja MCP - Model Context Protocol integration for the Vikunja task API."""

__version__ = "0.1.0"
