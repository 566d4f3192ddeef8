"""MCP resources exposing Linear entities as JSON documents."""
