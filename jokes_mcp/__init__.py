"""Jokes MCP server: Chuck Norris and Dad jokes exposed as MCP tools."""
