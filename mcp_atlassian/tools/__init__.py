"""
Jira and Confluence tool handlers and the registry that dispatches to them.
"""
