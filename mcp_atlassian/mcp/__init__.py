"""
MCP stdio protocol engine.
"""
