# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains ALL Google Cloud logic for the MCP server: the
# response views, service probes, the diagram assembler/renderer, and the
# compute / storage / project / deploy operations.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP or Google ADK.  Every operation
#   takes plain arguments (including an already-resolved project id) and
#   returns a ToolResult, so it can be driven from tests or any other front
#   end without an MCP session.
# =============================================================================
